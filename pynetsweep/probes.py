import abc
import logging
import socket
from datetime import datetime
from typing import Dict

from scapy.all import ARP, ICMP, IP, Ether, sr1, srp1

from pynetsweep.models import (
    NO_RESPONSE,
    MacResolved,
    PortOpen,
    ProbeResult,
    Protocol,
    ScanTarget,
)

logging.getLogger("scapy.runtime").setLevel(logging.ERROR)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 0.5
DEFAULT_ARP_TIMEOUT = 1.0
BROADCAST_MAC = "ff:ff:ff:ff:ff:ff"


def format_mac(value) -> str:
    """Render a hardware address as six uppercase byte pairs joined by colons."""
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    else:
        raw = bytes.fromhex(str(value).replace(":", "").replace("-", ""))
    if len(raw) != 6:
        raise ValueError(f"Not a MAC address: {value!r}")
    return ":".join(f"{b:02X}" for b in raw)


def icmp_ping(ip, timeout=DEFAULT_TIMEOUT) -> bool:
    """Send one ICMP echo request; True when an echo reply comes back."""
    pkt = IP(dst=str(ip))/ICMP()
    try:
        resp = sr1(pkt, timeout=timeout, verbose=0)
    except Exception as e:
        logger.debug("ICMP echo to %s failed: %s", ip, e)
        return False
    return bool(resp and resp.haslayer(ICMP) and resp.getlayer(ICMP).type == 0)


class Probe(abc.ABC):
    """One attempt against one target, reported as a ProbeResult.

    Network failures never escape a probe: they become NoResponse.
    """

    protocol: Protocol

    def __init__(self, timeout=DEFAULT_TIMEOUT):
        self.timeout = timeout

    @abc.abstractmethod
    def probe(self, target: ScanTarget) -> ProbeResult:
        ...

    def _result(self, target, outcome):
        return ProbeResult(target.address, self.protocol, outcome)


class TcpConnectProbe(Probe):
    protocol = Protocol.TCP

    def probe(self, target):
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.settimeout(self.timeout)
            result = sock.connect_ex((str(target.address), target.port))
        except OSError as e:
            logger.debug("TCP %s:%s failed: %s", target.address, target.port, e)
            result = -1
        finally:
            sock.close()
        if result == 0:
            return self._result(target, PortOpen(target.port))
        return self._result(target, NO_RESPONSE)


class UdpProbe(Probe):
    """Datagram probe with an ICMP liveness fallback.

    Most UDP services stay silent on an unexpected payload, so when the
    receive times out an answered echo request counts the port as open.
    """

    protocol = Protocol.UDP

    def __init__(self, timeout=DEFAULT_TIMEOUT, pinger=icmp_ping):
        super().__init__(timeout)
        self.pinger = pinger

    def probe(self, target):
        ip = str(target.address)
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.settimeout(self.timeout)
            # connected so that ICMP port-unreachable surfaces as an error
            sock.connect((ip, target.port))
            sock.send(datetime.now().isoformat(" ").encode())
            sock.recv(1024)
            return self._result(target, PortOpen(target.port))
        except socket.timeout:
            if self.pinger(ip, self.timeout):
                return self._result(target, PortOpen(target.port))
            return self._result(target, NO_RESPONSE)
        except OSError as e:
            logger.debug("UDP %s:%s failed: %s", ip, target.port, e)
            return self._result(target, NO_RESPONSE)
        finally:
            sock.close()


class ArpProbe(Probe):
    """Resolve a host's MAC with a single broadcast ARP who-has."""

    protocol = Protocol.ARP

    def __init__(self, timeout=DEFAULT_ARP_TIMEOUT, source="0.0.0.0", iface=None):
        super().__init__(timeout)
        self.source = source
        self.iface = iface

    def probe(self, target):
        ip = str(target.address)
        pkt = Ether(dst=BROADCAST_MAC)/ARP(pdst=ip, psrc=self.source)
        kwargs = {"timeout": self.timeout, "verbose": 0}
        if self.iface:
            kwargs["iface"] = self.iface
        try:
            resp = srp1(pkt, **kwargs)
        except Exception as e:
            logger.debug("ARP resolution of %s failed: %s", ip, e)
            return self._result(target, NO_RESPONSE)
        if resp is None or not resp.haslayer(ARP):
            return self._result(target, NO_RESPONSE)
        reply = resp.getlayer(ARP)
        # op 2 is "is-at"
        if reply.op != 2 or reply.psrc != ip:
            return self._result(target, NO_RESPONSE)
        return self._result(target, MacResolved(format_mac(reply.hwsrc)))


def default_probes(timeout=DEFAULT_TIMEOUT, arp_timeout=DEFAULT_ARP_TIMEOUT) -> Dict[Protocol, Probe]:
    return {
        Protocol.TCP: TcpConnectProbe(timeout),
        Protocol.UDP: UdpProbe(timeout),
        Protocol.ARP: ArpProbe(arp_timeout),
    }
