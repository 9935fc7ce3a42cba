"""Exceptions raised by the ETF sampling engine."""


class EtfError(Exception):
    """Base class for all errors raised by etfdist."""


class InvalidTableSize(EtfError, ValueError):
    """Raised when a table with an N-bit index is not built from 2^N+1 breakpoints."""

    def __init__(self, message: str = "Invalid ETF table size"):
        super().__init__(message)


class RngRangeError(EtfError, ValueError):
    """Raised when a random source does not span [0, 2^K-1].

    A minimum of 1 and/or a maximum of 2^K-2 are tolerated.
    """


class PartitionConvergenceError(EtfError, RuntimeError):
    """Raised when a ready-made distribution cannot compute its partition."""
