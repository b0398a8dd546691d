"""
Discovery of candidate devices. Each scan is scoped to one transport:

- NetworkScanner probes the local /24 network for hosts listening on the debug bridge port.
- RadioDeviceEnumerator lists the devices paired with the local Bluetooth adapter.

A scan returns a fresh list each time; nothing is cached between scans of the network.
"""
