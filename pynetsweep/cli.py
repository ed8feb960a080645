import argparse
import logging
import os
import sys

from pynetsweep.exceptions import ScanError
from pynetsweep.models import Protocol
from pynetsweep.ports import DEFAULT_PORTS, parse_ports
from pynetsweep.probes import DEFAULT_TIMEOUT, default_probes
from pynetsweep.report import EXPORT_FORMATS, default_filename, export_results
from pynetsweep.scanner import DEFAULT_HOST_CONCURRENCY, DEFAULT_PER_HOST_CONCURRENCY, ScanScheduler
from pynetsweep.targets import expand_addresses, load_address_file


def build_parser():
    parser = argparse.ArgumentParser(description="PyNetSweep - TCP/UDP/ARP host sweeper")
    parser.add_argument('--targets', type=str, help='Targets file, or whitespace-separated IPs')
    parser.add_argument('--cidr', type=str, help='CIDR block, e.g. 192.168.1.0/24')
    parser.add_argument('--start', type=str, help='First address of a range')
    parser.add_argument('--end', type=str, help='Last address of a range')
    parser.add_argument('--ports', type=str, help='Ports to scan, e.g. 22,80,1000-1010 (default: well-known ports)')
    parser.add_argument('--protocol', choices=[p.value for p in Protocol], default='tcp', help='Probe protocol')
    parser.add_argument('--hosts', type=int, default=DEFAULT_HOST_CONCURRENCY, help='Hosts scanned at once')
    parser.add_argument('--per-host', type=int, default=DEFAULT_PER_HOST_CONCURRENCY, help='Concurrent probes per host')
    parser.add_argument('--timeout', type=float, default=DEFAULT_TIMEOUT, help='Timeout per probe')
    parser.add_argument('--export', type=str, help='Export file name (default: timestamped)')
    parser.add_argument('--export-format', choices=EXPORT_FORMATS, default='json', help='Export file format')
    parser.add_argument('--out-dir', type=str, default='.', help='Directory for the default export file')
    parser.add_argument('-v', '--verbose', action='count', default=0, help='-v for info, -vv for debug')
    return parser


def configure_logging(verbosity):
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def resolve_hosts(args):
    addresses = None
    if args.targets:
        if os.path.isfile(args.targets):
            return load_address_file(args.targets)
        addresses = args.targets.split()
    return expand_addresses(addresses=addresses, cidr=args.cidr, start=args.start, end=args.end)


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    protocol = Protocol(args.protocol)
    try:
        hosts = resolve_hosts(args)
        if not protocol.uses_ports:
            ports = []
        elif args.ports:
            ports = parse_ports(args.ports)
        else:
            ports = list(DEFAULT_PORTS)
    except ScanError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args.hosts < 1 or args.per_host < 1:
        print("Error: --hosts and --per-host must be >= 1")
        sys.exit(1)

    scanner = ScanScheduler(probes=default_probes(args.timeout))

    print(f"[*] Starting {protocol.value.upper()} scan of {len(hosts)} hosts...")
    reports = []
    for report in scanner.run(hosts, ports, protocol,
                              max_host_concurrency=args.hosts,
                              max_per_host_concurrency=args.per_host,
                              progress_callback=lambda done, total: print(f"Scanned {done}/{total} hosts      ", end='\r')):
        reports.append(report)
        print(f"[+] {report.host}: {report.render(protocol)}          ")

    if not reports:
        print("\n[!] No responsive hosts found.")
        sys.exit(0)

    reports.sort(key=lambda r: int(r.address))
    filename = args.export or default_filename(protocol, args.export_format, args.out_dir)
    print(f"\n[*] Scan complete. {len(reports)} hosts responded. Exporting results...")
    export_results(reports, protocol, filename, args.export_format)
    print(f"[*] Results saved to {filename}")


if __name__ == "__main__":
    main()
