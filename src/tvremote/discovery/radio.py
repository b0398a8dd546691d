import logging
import subprocess
import threading
from typing import List

from tvremote.discovery.bluez import BlueZAdapter
from tvremote.model import Device, DeviceKind

logger = logging.getLogger(__name__)

UNKNOWN_DEVICE_NAME = "Unknown Device"


class RadioDeviceEnumerator:
    """
    Lists the devices already paired with the local Bluetooth adapter.
    No discovery of unpaired devices is performed.

    Only one enumeration runs at a time. A scan requested while another is running returns the
    result of the last completed scan.
    """

    def __init__(self, adapter: BlueZAdapter = None):
        self.adapter = adapter if adapter is not None else BlueZAdapter()
        self._scan_lock = threading.Lock()
        self._last_scan = []

    def scan(self) -> List[Device]:
        """
        :return: the paired devices. Empty when the adapter is missing or powered off.
        """
        if not self._scan_lock.acquire(blocking=False):
            logger.debug("scan already in progress")
            return list(self._last_scan)
        try:
            devices = self._scan()
            self._last_scan = devices
            return list(devices)
        finally:
            self._scan_lock.release()

    def _scan(self):
        if not self.adapter.supported:
            logger.warning("Bluetooth not supported")
            return []
        if not self.adapter.enabled:
            logger.warning("Bluetooth not enabled")
            return []
        try:
            paired = self.adapter.paired_devices()
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("error listing paired devices: %s" % e)
            return []
        devices = [Device(p.name or UNKNOWN_DEVICE_NAME, p.address, DeviceKind.RADIO) for p in paired]
        logger.info("found %d paired devices" % len(devices))
        return devices
