import ipaddress
import logging
from ipaddress import IPv4Address
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from pynetsweep.exceptions import InvalidAddressSpec

logger = logging.getLogger(__name__)

AddressLike = Union[str, IPv4Address]


def parse_address(text: AddressLike) -> IPv4Address:
    if isinstance(text, IPv4Address):
        return text
    try:
        return IPv4Address(str(text).strip())
    except ValueError as e:
        raise InvalidAddressSpec(f"Invalid IPv4 address: {text!r}") from e


def _parse_prefix(prefix) -> int:
    try:
        value = int(str(prefix).strip())
    except ValueError as e:
        raise InvalidAddressSpec(f"Invalid CIDR prefix: {prefix!r}") from e
    # /0 and /32 are not scannable blocks
    if not 1 <= value <= 31:
        raise InvalidAddressSpec(f"CIDR prefix must be between 1 and 31, got {value}")
    return value


def cidr_bounds(cidr: str, prefix=None) -> Tuple[IPv4Address, IPv4Address]:
    """Return the (network, broadcast) pair of a CIDR block.

    ``cidr`` is either "a.b.c.d/p" or the network text alone, in which case
    ``prefix`` carries the prefix length. Host bits in the network text are
    cleared.
    """
    cidr = str(cidr).strip()
    if prefix is None:
        if "/" not in cidr:
            raise InvalidAddressSpec(f"Missing CIDR prefix in {cidr!r}")
        cidr, prefix = cidr.split("/", 1)
    base = parse_address(cidr)
    length = _parse_prefix(prefix)
    network = ipaddress.IPv4Network((base, length), strict=False)
    return network.network_address, network.broadcast_address


def expand_cidr(cidr: str, prefix=None) -> List[IPv4Address]:
    start, end = cidr_bounds(cidr, prefix)
    return [IPv4Address(value) for value in range(int(start), int(end) + 1)]


def _lattice(start: bytes, end: bytes, depth: int, first: bool, last: bool,
             head: Tuple[int, ...]) -> Iterator[IPv4Address]:
    lo = start[depth] if first else 0
    hi = end[depth] if last else 255
    for octet in range(lo, hi + 1):
        octets = head + (octet,)
        if depth == 3:
            yield IPv4Address(bytes(octets))
        else:
            yield from _lattice(start, end, depth + 1,
                                first and octet == lo, last and octet == hi, octets)


def expand_range(start: AddressLike, end: AddressLike) -> List[IPv4Address]:
    """Enumerate the addresses between ``start`` and ``end`` octet by octet.

    Each octet runs from the start octet (only while all higher octets are
    on their first value) up to the end octet (only while all higher octets
    are on their last value), otherwise over 0-255. For ordered endpoints
    this is the plain numeric interval.
    """
    first = parse_address(start)
    last = parse_address(end)
    return list(_lattice(first.packed, last.packed, 0, True, True, ()))


def read_addresses(lines: Iterable[str]) -> List[IPv4Address]:
    addresses = []
    for lineno, line in enumerate(lines, 1):
        line = line.strip()
        if not line:
            continue
        try:
            addresses.append(parse_address(line))
        except InvalidAddressSpec as e:
            raise InvalidAddressSpec(f"Line {lineno}: {e}") from e
    return addresses


def load_address_file(path) -> List[IPv4Address]:
    try:
        with open(path, 'r') as f:
            return read_addresses(f)
    except OSError as e:
        raise InvalidAddressSpec(f"Cannot read targets file {path}: {e}") from e


def expand_addresses(addresses: Optional[Iterable[AddressLike]] = None,
                     cidr: Optional[str] = None,
                     start: Optional[AddressLike] = None,
                     end: Optional[AddressLike] = None) -> List[IPv4Address]:
    """Turn one address specification into the ordered list of hosts to scan.

    An explicit list wins over a CIDR block, which wins over a start/end
    pair. Any malformed input raises InvalidAddressSpec before anything is
    returned.
    """
    if addresses is not None:
        hosts = [parse_address(a) for a in addresses]
        mode = "list"
    elif cidr:
        hosts = expand_cidr(cidr)
        mode = "cidr"
    elif start is not None and end is not None:
        hosts = expand_range(start, end)
        mode = "range"
    else:
        raise InvalidAddressSpec("No targets given: need a list, a CIDR block or a start/end pair")
    logger.info("Expanded %d hosts from %s specification", len(hosts), mode)
    return hosts
