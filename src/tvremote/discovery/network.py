"""
Finds devices on the local /24 network that accept connections on the debug bridge port.
"""
import ipaddress
import logging
import socket
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional

import psutil

from tvremote import settings
from tvremote.model import Device, DeviceKind

logger = logging.getLogger(__name__)

HOSTS_PER_SUBNET = 254
# upper bound on probes in flight, whatever the configured concurrency
MAX_CONCURRENT_PROBES = 50


def local_subnet() -> Optional[ipaddress.IPv4Network]:
    """
    Determines the /24 network of the first interface that is up and has a routable IPv4 address.
    The base is the interface address masked with its netmask, truncated to 24 bits.
    :return: the network, or None if there is no suitable interface.
    """
    stats = psutil.net_if_stats()
    for name, addresses in psutil.net_if_addrs().items():
        if name in stats and not stats[name].isup:
            continue
        for address in addresses:
            if address.family != socket.AF_INET or not address.netmask:
                continue
            ip = ipaddress.IPv4Address(address.address)
            if ip.is_loopback or ip.is_link_local:
                continue
            base = int(ip) & int(ipaddress.IPv4Address(address.netmask))
            network = ipaddress.IPv4Network((base, 24), strict=False)
            logger.debug("local network %s from interface %s" % (network, name))
            return network
    return None


def subnet_hosts(subnet) -> List[str]:
    """
    Lists the host addresses base.1 .. base.254 of the /24 network that contains the given prefix.

    >>> subnet_hosts('192.168.1.0/24')[:2]
    ['192.168.1.1', '192.168.1.2']
    >>> len(subnet_hosts(ipaddress.IPv4Network('10.0.0.0/16')))
    254
    """
    network = ipaddress.IPv4Network(str(subnet), strict=False)
    base = int(network.network_address) & 0xFFFFFF00
    return [str(ipaddress.IPv4Address(base + i)) for i in range(1, HOSTS_PER_SUBNET + 1)]


def batches(items, size):
    for i in range(0, len(items), size):
        yield items[i:i + size]


class NetworkScanner:
    """
    Probes every host of a /24 network with a TCP connect to the bridge port.
    Probes run on a thread pool, in batches no larger than the concurrency limit; each batch
    completes before the next one is submitted.
    """

    def __init__(self, port=None, timeout=None, concurrency=None, subnet_provider=local_subnet):
        self.port = port or settings.bridge_port
        self.timeout = timeout if timeout is not None else settings.probe_timeout
        self.concurrency = min(concurrency or settings.scan_concurrency, MAX_CONCURRENT_PROBES)
        self.subnet_provider = subnet_provider

    def scan(self, subnet=None) -> List[Device]:
        """
        Scans a network for reachable devices.
        :param subnet: the network prefix to scan, as an IPv4Network or a string such as
            '192.168.1.0/24'. The local network is used when not given.
        :return: the devices found, in the order their probes completed. Empty when nothing was found
            or the local network cannot be determined.
        """
        try:
            if subnet is None:
                subnet = self.subnet_provider()
            if subnet is None:
                logger.warning("no local network address, skipping scan")
                return []
            hosts = subnet_hosts(subnet)
        except (OSError, ValueError, psutil.Error) as e:
            logger.warning("unable to determine the network to scan: %s" % e)
            return []

        logger.info("scanning %s/24 on port %d" % (hosts[0], self.port))
        devices = []
        with ThreadPoolExecutor(max_workers=self.concurrency, thread_name_prefix='probe') as executor:
            for batch in batches(hosts, self.concurrency):
                futures = [executor.submit(self.probe, host) for host in batch]
                for future in as_completed(futures):
                    device = future.result()
                    if device is not None:
                        devices.append(device)
        logger.info("found %d devices" % len(devices))
        return devices

    def probe(self, address) -> Optional[Device]:
        """
        Attempts a TCP connection to the bridge port on the address.
        :return: the device, named after its resolved hostname when there is one, or None if the port
            did not accept a connection within the timeout.
        """
        try:
            sock = socket.create_connection((address, self.port), timeout=self.timeout)
            sock.close()
        except OSError:
            return None
        logger.debug("found device at %s" % address)
        return Device(self.resolve_name(address), address, DeviceKind.NETWORK)

    @staticmethod
    def resolve_name(address) -> str:
        try:
            return socket.gethostbyaddr(address)[0]
        except (OSError, UnicodeError):
            return address


def log_devices(devices):
    for device in devices:
        logger.info("device %s at %s" % (device.name, device.address))


def monitor(subnet=None):
    """ A helper function to scan the network for manual testing. """
    logger.setLevel(logging.INFO)
    logger.addHandler(logging.StreamHandler())
    settings.configure()
    log_devices(NetworkScanner().scan(subnet))


if __name__ == '__main__':
    monitor()
