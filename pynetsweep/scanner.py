import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Iterable, Iterator, List, Optional

from pynetsweep.aggregator import ResultAggregator
from pynetsweep.exceptions import InvalidPortSpec
from pynetsweep.models import HostReport, Protocol, ScanTarget
from pynetsweep.probes import DEFAULT_TIMEOUT, Probe, default_probes
from pynetsweep.targets import parse_address

logger = logging.getLogger(__name__)

DEFAULT_HOST_CONCURRENCY = 5
DEFAULT_PER_HOST_CONCURRENCY = 5


class ScanScheduler:
    """Drive probes over hosts and ports under a two-level concurrency cap.

    At most ``max_host_concurrency`` hosts are scanned at once, and each of
    them has at most ``max_per_host_concurrency`` probes in flight, so the
    product of the two bounds the number of probes in flight. Admission
    follows the order of the host list; the submitting thread blocks on a
    semaphore until a slot frees up.

    Every call to :meth:`run` owns its worker pools, semaphores and
    aggregator. Nothing is shared between runs.
    """

    def __init__(self, probes: Optional[Dict[Protocol, Probe]] = None, timeout=DEFAULT_TIMEOUT):
        self.probes = dict(probes) if probes is not None else default_probes(timeout)

    def _targets(self, host, ports, protocol):
        if protocol.uses_ports:
            return [ScanTarget(host, protocol, port) for port in ports]
        return [ScanTarget(host, protocol)]

    def _scan_host(self, host, targets, probe, per_host, probe_pool, aggregator):
        slots = threading.BoundedSemaphore(per_host)
        futures = []
        for target in targets:
            slots.acquire()
            future = probe_pool.submit(probe.probe, target)
            future.add_done_callback(lambda _: slots.release())
            futures.append(future)
        for future in futures:
            aggregator.add(future.result())
        report = aggregator.seal(host)
        logger.debug("Host %s finished: %s", host, "responsive" if report else "no response")
        return report

    def run(self, hosts: Iterable, ports: Iterable[int], protocol,
            max_host_concurrency=DEFAULT_HOST_CONCURRENCY,
            max_per_host_concurrency=DEFAULT_PER_HOST_CONCURRENCY,
            progress_callback=None) -> Iterator[HostReport]:
        """Scan every host and yield a HostReport for each one that answered.

        Reports are yielded as hosts complete, which is not necessarily the
        order of ``hosts``. ``progress_callback(done, total)`` is called
        after each host finishes.
        """
        protocol = Protocol(protocol)
        probe = self.probes.get(protocol)
        if probe is None:
            raise ValueError(f"No probe registered for {protocol.value}")
        if max_host_concurrency < 1 or max_per_host_concurrency < 1:
            raise ValueError("Concurrency limits must be >= 1")

        if protocol.uses_ports:
            ports = list(ports)
            if not ports:
                raise InvalidPortSpec("No ports to scan")
            per_host = max_per_host_concurrency
        else:
            ports = []
            per_host = 1

        hosts = list(dict.fromkeys(parse_address(h) for h in hosts))
        total = len(hosts)
        completed = 0
        aggregator = ResultAggregator()
        host_slots = threading.BoundedSemaphore(max_host_concurrency)
        logger.info("Scanning %d hosts x %d ports over %s (%d hosts, %d probes per host)",
                    total, len(ports) or 1, protocol.value, max_host_concurrency, per_host)

        def finished(future):
            nonlocal completed
            completed += 1
            if progress_callback:
                progress_callback(completed, total)
            return future.result()

        with ThreadPoolExecutor(max_workers=max_host_concurrency,
                                thread_name_prefix="pynetsweep-host") as host_pool, \
                ThreadPoolExecutor(max_workers=max_host_concurrency * per_host,
                                   thread_name_prefix="pynetsweep-probe") as probe_pool:
            pending = set()
            for host in hosts:
                host_slots.acquire()
                future = host_pool.submit(self._scan_host, host,
                                          self._targets(host, ports, protocol),
                                          probe, per_host, probe_pool, aggregator)
                future.add_done_callback(lambda _: host_slots.release())
                pending.add(future)

                done = {f for f in pending if f.done()}
                pending -= done
                for f in done:
                    report = finished(f)
                    if report is not None:
                        yield report

            for f in as_completed(pending):
                report = finished(f)
                if report is not None:
                    yield report

        logger.info("Scan complete: %d of %d hosts responded",
                    len(aggregator.finalize()), total)

    def scan(self, hosts, ports, protocol, **kwargs) -> List[HostReport]:
        """Run a scan to completion and return the reports ordered by address."""
        return sorted(self.run(hosts, ports, protocol, **kwargs), key=lambda r: int(r.address))
