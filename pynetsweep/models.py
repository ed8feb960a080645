from dataclasses import dataclass, field
from enum import Enum
from ipaddress import IPv4Address
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union


class Protocol(str, Enum):
    TCP = "tcp"
    UDP = "udp"
    ARP = "arp"

    @property
    def uses_ports(self):
        return self is not Protocol.ARP


@dataclass(frozen=True)
class PortOpen:
    port: int


@dataclass(frozen=True)
class MacResolved:
    mac: str


@dataclass(frozen=True)
class NoResponse:
    pass


NO_RESPONSE = NoResponse()

Outcome = Union[PortOpen, MacResolved, NoResponse]


@dataclass(frozen=True)
class ScanTarget:
    address: IPv4Address
    protocol: Protocol
    port: Optional[int] = None


@dataclass(frozen=True)
class ProbeResult:
    address: IPv4Address
    protocol: Protocol
    outcome: Outcome

    @property
    def positive(self) -> bool:
        return not isinstance(self.outcome, NoResponse)


@dataclass(frozen=True)
class HostReport:
    """Everything one host answered during a scan.

    ``ports`` maps TCP/UDP to the ascending open ports found for that
    protocol; ``mac`` is set when the host answered an ARP probe.
    """

    address: IPv4Address
    ports: Mapping[Protocol, Tuple[int, ...]] = field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )
    mac: Optional[str] = None

    @property
    def host(self) -> str:
        return str(self.address)

    def open_ports(self, protocol: Protocol) -> Tuple[int, ...]:
        return self.ports.get(Protocol(protocol), ())

    def render(self, protocol: Protocol) -> str:
        """Text of the report field for ``protocol``: "80,443" or the MAC."""
        protocol = Protocol(protocol)
        if protocol is Protocol.ARP:
            return self.mac or ""
        return ",".join(str(port) for port in self.open_ports(protocol))

    def to_dict(self):
        data = {"host": self.host}
        for protocol, ports in self.ports.items():
            data[protocol.value] = list(ports)
        if self.mac:
            data["mac"] = self.mac
        return data
