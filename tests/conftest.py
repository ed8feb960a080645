import threading
import time

import pytest

from pynetsweep.models import NO_RESPONSE, MacResolved, PortOpen, ProbeResult, Protocol


class RecordingProbe:
    """Stand-in probe that answers from a table and tracks concurrency."""

    def __init__(self, protocol=Protocol.TCP, open_ports=None, macs=None, delay=0.0):
        self.protocol = protocol
        self.open_ports = open_ports or {}
        self.macs = macs or {}
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.per_host = {}
        self.max_per_host = 0
        self._lock = threading.Lock()

    def probe(self, target):
        host = str(target.address)
        with self._lock:
            self.calls.append(target)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            self.per_host[host] = self.per_host.get(host, 0) + 1
            self.max_per_host = max(self.max_per_host, self.per_host[host])
        try:
            if self.delay:
                time.sleep(self.delay)
            if self.protocol is Protocol.ARP:
                mac = self.macs.get(host)
                outcome = MacResolved(mac) if mac else NO_RESPONSE
            elif target.port in self.open_ports.get(host, ()):
                outcome = PortOpen(target.port)
            else:
                outcome = NO_RESPONSE
            return ProbeResult(target.address, self.protocol, outcome)
        finally:
            with self._lock:
                self.in_flight -= 1
                self.per_host[host] -= 1


@pytest.fixture
def recording_probe():
    return RecordingProbe
