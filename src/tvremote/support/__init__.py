"""
Small building blocks shared by the rest of the package: event sources and value object mixins.
"""
