# pynetsweep/__init__.py

"""
PyNetSweep Package
------------------

A host sweeper that probes TCP ports, UDP ports and ARP reachability under a
bounded concurrency budget and reports which hosts answered.

Provides:
- ScanScheduler: two-level bounded-concurrency scan engine.
- expand_addresses: address list / CIDR / start-end expansion.
- parse_ports, expand_ports: port specifications (e.g. "22,80,1000-1010") to port lists.
- TcpConnectProbe, UdpProbe, ArpProbe: per-protocol probe strategies.
- ResultAggregator, HostReport: per-host result aggregation.
- cli_main: CLI entry point function for command-line scanning.

Version: 1.0.0
"""

from .exceptions import InvalidAddressSpec, InvalidPortSpec, ScanError
from .models import HostReport, MacResolved, NoResponse, PortOpen, ProbeResult, Protocol, ScanTarget
from .targets import expand_addresses, expand_cidr, expand_range, load_address_file
from .ports import DEFAULT_PORTS, expand_ports, parse_ports
from .probes import ArpProbe, TcpConnectProbe, UdpProbe
from .aggregator import ResultAggregator
from .scanner import ScanScheduler
from .cli import main as cli_main

__all__ = [
    'ScanScheduler', 'ResultAggregator', 'HostReport', 'ProbeResult', 'ScanTarget', 'Protocol',
    'PortOpen', 'MacResolved', 'NoResponse', 'TcpConnectProbe', 'UdpProbe', 'ArpProbe',
    'expand_addresses', 'expand_cidr', 'expand_range', 'load_address_file',
    'DEFAULT_PORTS', 'expand_ports', 'parse_ports',
    'ScanError', 'InvalidAddressSpec', 'InvalidPortSpec', 'cli_main',
]

__version__ = "1.0.0"
