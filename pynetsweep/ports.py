from typing import Iterable, List

from pynetsweep.exceptions import InvalidPortSpec

DEFAULT_PORTS = [
    20, 21, 22, 23, 25, 53, 67, 68, 69, 80, 110,
    111, 119, 123, 135, 137, 138, 139, 143, 161, 162, 389,
    443, 445, 465, 514, 587, 636, 993, 995, 1433, 3306, 3389,
]


def _to_port(token: str, spec: str) -> int:
    token = token.strip()
    if not token.isdecimal():
        raise InvalidPortSpec(f"Invalid port {token!r} in {spec!r}")
    port = int(token)
    if not 1 <= port <= 65535:
        raise InvalidPortSpec(f"Port {port} out of range 1-65535")
    return port


def expand_ports(specs: Iterable) -> List[int]:
    """Expand port tokens such as ``["22", "90-102"]`` into distinct ports.

    Ports keep the order in which they first appear; ranges are inclusive
    and ascending. One bad token rejects the whole specification.
    """
    seen = set()
    ports = []
    for spec in specs:
        spec = str(spec).strip()
        if "-" in spec:
            lo_s, hi_s = spec.split("-", 1)
            lo, hi = _to_port(lo_s, spec), _to_port(hi_s, spec)
            if hi < lo:
                raise InvalidPortSpec(f"Invalid port range: {spec}")
            candidates = range(lo, hi + 1)
        else:
            candidates = [_to_port(spec, spec)]
        for port in candidates:
            if port not in seen:
                seen.add(port)
                ports.append(port)
    if not ports:
        raise InvalidPortSpec("Empty port spec")
    return ports


def parse_ports(port_string: str) -> List[int]:
    parts = [part for part in port_string.split(",") if part.strip()]
    return expand_ports(parts)
