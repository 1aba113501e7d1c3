# dump_map/errors.py
"""
Fatal scan errors. None of these are retried; the caller discards the output.
"""


class DumpMapError(Exception):
    """Base class for scan failures."""


class AllocationFailure(DumpMapError, MemoryError):
    """Row or input buffers could not be allocated."""


class EncoderInitFailure(DumpMapError):
    """The image header or encoder could not be created."""


class WriteFailure(DumpMapError):
    """The sink rejected a row or could not be finalised."""


class InvalidPalette(DumpMapError, ValueError):
    """Unrecognised palette name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"invalid palette: {name!r}")
        self.name = name


__all__ = [
    "DumpMapError",
    "AllocationFailure",
    "EncoderInitFailure",
    "WriteFailure",
    "InvalidPalette",
]
