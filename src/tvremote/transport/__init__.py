"""
Transport clients hold the link to a single device and deliver key presses to it.

- NetworkTransportClient drives the debug bridge client over TCP.
- RadioTransportClient writes key reports to an RFCOMM socket.

Both follow the TransportClient template: connect/send_key return a Result, disconnect never fails.
"""
