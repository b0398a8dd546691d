"""
Tunable values used by the scanners and transport clients.
The values below are the built-in defaults. Calling configure() replaces them with the layered
configuration (tvremote.default.cfg, tvremote.<platform>.cfg, ~/tvremote.cfg).
"""
import sys

from tvremote.config.config import configure_module

config_name = 'tvremote'

# network transport
bridge_executable = 'adb'
bridge_port = 5555
probe_timeout = 0.5
scan_concurrency = 50
connect_timeout = 5.0
command_timeout = 2.0
disconnect_timeout = 2.0

# radio transport
bluetoothctl_executable = 'bluetoothctl'
sdptool_executable = 'sdptool'
spp_uuid = '00001101-0000-1000-8000-00805F9B34FB'
rfcomm_channel = 1
key_settle_delay = 0.05


def configure(directory=None):
    """ applies the layered configuration to the values in this module. """
    return configure_module(sys.modules[__name__], config_name, directory)
