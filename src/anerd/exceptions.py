"""Exception hierarchy for anerd.

All exceptions derive from AnerdError, enabling broad catch patterns
at the process boundary while allowing fine-grained handling internally.
"""


class AnerdError(Exception):
    """Base exception for all anerd errors."""


class ConfigValidationError(AnerdError):
    """Configuration field validation failed.

    Raised when a configured value is out of range, e.g. a payload size
    larger than the biggest datagram the transport can carry.
    """


class PoolUnavailableError(AnerdError):
    """The entropy pool resource cannot be read from or written to.

    Raised on I/O errors against an open pool handle, or when a closed
    handle is used.
    """


class PoolOpenError(PoolUnavailableError):
    """The entropy pool resource could not be opened.

    Fatal at startup: the configured device path is missing or not
    accessible with the requested mode.
    """


class SocketSetupError(AnerdError):
    """A UDP socket could not be created, configured, or bound.

    Fatal at startup.
    """
