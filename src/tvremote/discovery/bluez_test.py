import subprocess
import unittest
from unittest.mock import Mock, patch, PropertyMock

from hamcrest import assert_that, is_, contains_exactly, empty

from tvremote.discovery import bluez
from tvremote.discovery.bluez import BlueZAdapter, PairedDevice, is_mac_address


def completed(stdout):
    return Mock(stdout=stdout)


class MacAddressTest(unittest.TestCase):
    def test_valid(self):
        assert_that(is_mac_address("AA:BB:CC:dd:ee:01"), is_(True))

    def test_invalid(self):
        assert_that(is_mac_address("192.168.1.1"), is_(False))
        assert_that(is_mac_address("AA:BB:CC:DD:EE"), is_(False))
        assert_that(is_mac_address(""), is_(False))
        assert_that(is_mac_address(None), is_(False))


class BlueZAdapterTest(unittest.TestCase):
    def setUp(self):
        self.sut = BlueZAdapter('bluetoothctl', 'sdptool', timeout=3)

    def test_supported_requires_tool(self):
        with patch.object(bluez.shutil, 'which', return_value=None):
            assert_that(self.sut.supported, is_(False))

    def test_enabled(self):
        with patch.object(BlueZAdapter, 'supported', new_callable=PropertyMock, return_value=True), \
                patch.object(bluez.subprocess, 'run', return_value=completed("Controller 00:11\n\tPowered: yes\n")) as run:
            assert_that(self.sut.enabled, is_(True))
            args, kwargs = run.call_args
            assert_that(args[0], is_(['bluetoothctl', 'show']))
            assert_that(kwargs['timeout'], is_(3))

    def test_powered_off(self):
        with patch.object(BlueZAdapter, 'supported', new_callable=PropertyMock, return_value=True), \
                patch.object(bluez.subprocess, 'run', return_value=completed("\tPowered: no\n")):
            assert_that(self.sut.enabled, is_(False))

    def test_no_adapter(self):
        error = subprocess.CalledProcessError(1, ['bluetoothctl', 'show'])
        with patch.object(BlueZAdapter, 'supported', new_callable=PropertyMock, return_value=True), \
                patch.object(bluez.subprocess, 'run', side_effect=error):
            assert_that(self.sut.enabled, is_(False))

    def test_unsupported_is_not_enabled(self):
        with patch.object(BlueZAdapter, 'supported', new_callable=PropertyMock, return_value=False), \
                patch.object(bluez.subprocess, 'run') as run:
            assert_that(self.sut.enabled, is_(False))
            run.assert_not_called()

    def test_paired_devices(self):
        output = "Device AA:BB:CC:DD:EE:FF Living Room TV\nDevice 11:22:33:44:55:66\nsome noise\n"
        with patch.object(bluez.subprocess, 'run', return_value=completed(output)):
            assert_that(self.sut.paired_devices(), contains_exactly(
                PairedDevice("Living Room TV", "AA:BB:CC:DD:EE:FF"),
                PairedDevice("", "11:22:33:44:55:66")))

    def test_paired_devices_legacy_command(self):
        outputs = [completed("Invalid command\n"), completed("Device AA:BB:CC:DD:EE:FF TV\n")]
        with patch.object(bluez.subprocess, 'run', side_effect=outputs) as run:
            assert_that(self.sut.paired_devices(), contains_exactly(PairedDevice("TV", "AA:BB:CC:DD:EE:FF")))
            assert_that(run.call_args[0][0], is_(['bluetoothctl', 'paired-devices']))

    def test_paired_devices_legacy_command_after_failed_exit(self):
        outputs = [subprocess.CalledProcessError(1, ['bluetoothctl', 'devices', 'Paired']),
                   completed("Device AA:BB:CC:DD:EE:FF TV\n")]
        with patch.object(bluez.subprocess, 'run', side_effect=outputs) as run:
            assert_that(self.sut.paired_devices(), contains_exactly(PairedDevice("TV", "AA:BB:CC:DD:EE:FF")))
            assert_that(run.call_args[0][0], is_(['bluetoothctl', 'paired-devices']))

    def test_paired_devices_both_commands_fail(self):
        error = subprocess.CalledProcessError(1, ['bluetoothctl'])
        with patch.object(bluez.subprocess, 'run', side_effect=[error, error]):
            assert_that(self.sut.paired_devices(), is_(empty()))

    def test_no_paired_devices(self):
        with patch.object(bluez.subprocess, 'run', side_effect=[completed(""), completed("")]):
            assert_that(self.sut.paired_devices(), is_(empty()))

    def test_service_channel(self):
        output = "Service Name: Serial Port\n  Protocol Descriptor List:\n    \"RFCOMM\" (0x0003)\n      Channel: 4\n"
        with patch.object(bluez.subprocess, 'run', return_value=completed(output)) as run:
            channel = self.sut.service_channel("AA:BB:CC:DD:EE:FF", "00001101-0000-1000-8000-00805F9B34FB")
            assert_that(channel, is_(4))
            assert_that(run.call_args[0][0], is_(['sdptool', 'search', '--bdaddr', 'AA:BB:CC:DD:EE:FF', '0x1101']))

    def test_service_channel_missing_tool(self):
        with patch.object(bluez.subprocess, 'run', side_effect=FileNotFoundError("sdptool")):
            assert_that(self.sut.service_channel("AA:BB:CC:DD:EE:FF", "00001101-0000-1000-8000-00805F9B34FB"),
                        is_(None))
