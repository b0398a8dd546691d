"""
A simple configuration helper built on top of ConfigObj that allows configuration files to be
layered - neutral / os-specific / per-user, with a schema to validate the types of the config data.

Used to configure the module-level values in tvremote.settings.
"""
