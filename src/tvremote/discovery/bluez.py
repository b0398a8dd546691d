"""
Thin wrapper over the BlueZ command line tools. Used to query the adapter state, list paired
devices and resolve the RFCOMM channel of a device's serial port service.
"""
import logging
import re
import shutil
import socket
import subprocess
from collections import namedtuple
from typing import List, Optional

from tvremote import settings

logger = logging.getLogger(__name__)

PairedDevice = namedtuple('PairedDevice', ['name', 'address'])

mac_address_pattern = re.compile(r'^[0-9A-Fa-f]{2}(:[0-9A-Fa-f]{2}){5}$')
channel_pattern = re.compile(r'Channel:\s*(\d+)')


def is_mac_address(address) -> bool:
    return bool(address) and mac_address_pattern.match(address) is not None


class BlueZAdapter:
    """ Queries the local Bluetooth adapter through bluetoothctl and sdptool. """

    def __init__(self, bluetoothctl=None, sdptool=None, timeout=None):
        self.bluetoothctl = bluetoothctl or settings.bluetoothctl_executable
        self.sdptool = sdptool or settings.sdptool_executable
        self.timeout = timeout if timeout is not None else settings.command_timeout

    @property
    def supported(self) -> bool:
        """ True when the platform has Bluetooth sockets and the BlueZ tools are installed. """
        return hasattr(socket, 'AF_BLUETOOTH') and shutil.which(self.bluetoothctl) is not None

    @property
    def enabled(self) -> bool:
        """ True when an adapter is present and powered on. """
        if not self.supported:
            return False
        output = self._run_quietly([self.bluetoothctl, 'show'])
        return output is not None and re.search(r'Powered:\s*yes', output) is not None

    def paired_devices(self) -> List[PairedDevice]:
        """
        Lists the paired devices. Releases of BlueZ before 5.65 reject `devices Paired`, either with a
        failing exit status or an "Invalid command" reply, and only understand `paired-devices`.
        """
        output = self._run_quietly([self.bluetoothctl, 'devices', 'Paired'])
        devices = self._parse_devices(output or '')
        if not devices:
            legacy = self._run_quietly([self.bluetoothctl, 'paired-devices'])
            devices = self._parse_devices(legacy or '')
        return devices

    def service_channel(self, address, uuid) -> Optional[int]:
        """
        Looks up the RFCOMM channel the device publishes for a service.
        :param uuid: the 128-bit service class UUID. Its 16-bit short form is used for the search.
        :return: the channel number, or None when the service record cannot be found.
        """
        short_uuid = '0x' + uuid[4:8]
        output = self._run_quietly([self.sdptool, 'search', '--bdaddr', address, short_uuid])
        match = channel_pattern.search(output or '')
        return int(match.group(1)) if match else None

    def _run(self, command: List[str]) -> str:
        result = subprocess.run(command, check=True, capture_output=True, text=True,
                                timeout=self.timeout, stdin=subprocess.DEVNULL)
        return result.stdout

    def _run_quietly(self, command: List[str]) -> Optional[str]:
        """ runs the command, returning None instead of raising when it fails. """
        try:
            return self._run(command)
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("%s failed: %s" % (' '.join(command), e))
            return None

    @staticmethod
    def _parse_devices(output: str) -> List[PairedDevice]:
        devices = []
        for line in output.splitlines():
            if not line.startswith("Device "):
                continue
            parts = line.split(" ", 2)
            address = parts[1].strip()
            name = parts[2].strip() if len(parts) > 2 else ''
            devices.append(PairedDevice(name=name, address=address))
        return devices
