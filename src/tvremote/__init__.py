"""


Display Remote Sessions

- Device: a display reachable over the network (debug bridge on TCP 5555) or over Bluetooth
  (a paired device, reached via an RFCOMM socket).
- Discovery: finds candidate devices for one transport at a time.
    NetworkScanner probes the local /24 network, RadioDeviceEnumerator lists paired devices.
- Transport client: holds the link to one device and delivers key presses.
    NetworkTransportClient invokes the bridge client, RadioTransportClient writes HID reports.
- ConnectionSession: the state machine that owns at most one transport client and publishes
  Disconnected / Connecting / Connected / Error to its observers.
- SessionCoordinator: binds discovery and the session together for the user interface.


More rough notes:

- Transport clients never raise from their public methods. connect() and send_key() return a
  Result; disconnect() logs failures and always succeeds.
- The state stream has a single writer, the session. Observers either register a handler on
  session.events (called synchronously) or use observe_state(), which queues every change.
- Key presses over Bluetooth are a press report followed, 50ms later, by an all-zero release
  report of the same length. See tvremote.codecs.

"""
