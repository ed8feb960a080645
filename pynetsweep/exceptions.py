"""Exceptions raised while validating scan input."""


class ScanError(Exception):
    """Base class for pynetsweep errors."""


class InvalidAddressSpec(ScanError, ValueError):
    """Raised when an address, CIDR block, range or target file is malformed."""


class InvalidPortSpec(ScanError, ValueError):
    """Raised when a port token or port range is malformed."""
