import threading
from collections import defaultdict
from types import MappingProxyType
from typing import Dict, List, Optional, Set

from pynetsweep.models import HostReport, MacResolved, PortOpen, ProbeResult


class _HostEntry:
    __slots__ = ("ports", "mac")

    def __init__(self):
        self.ports = defaultdict(set)
        self.mac = None


class ResultAggregator:
    """Merge probe results into one report per host.

    Results may arrive from many worker threads in any order. A host that
    only ever produced NoResponse gets no report.
    """

    def __init__(self):
        self.lock = threading.Lock()
        self._entries: Dict = {}
        self._sealed: Set = set()
        self._reports: Dict = {}

    def add(self, result: ProbeResult):
        with self.lock:
            if result.address in self._sealed:
                raise ValueError(f"Report for {result.address} is already sealed")
            entry = self._entries.setdefault(result.address, _HostEntry())
            outcome = result.outcome
            if isinstance(outcome, PortOpen):
                entry.ports[result.protocol].add(outcome.port)
            elif isinstance(outcome, MacResolved) and entry.mac is None:
                entry.mac = outcome.mac

    def seal(self, address) -> Optional[HostReport]:
        """Close a host to further results and return its report, if any."""
        with self.lock:
            return self._seal(address)

    def _seal(self, address):
        if address in self._sealed:
            return self._reports.get(address)
        self._sealed.add(address)
        entry = self._entries.pop(address, None)
        if entry is None or (not entry.ports and entry.mac is None):
            return None
        ports = {protocol: tuple(sorted(found)) for protocol, found in entry.ports.items()}
        report = HostReport(address, MappingProxyType(ports), entry.mac)
        self._reports[address] = report
        return report

    def finalize(self) -> List[HostReport]:
        with self.lock:
            for address in list(self._entries):
                self._seal(address)
            return sorted(self._reports.values(), key=lambda r: int(r.address))
