"""Error taxonomy for the detector.

Both concrete errors subclass ValueError so callers that only care about
"bad input" can keep catching that.
"""


class DetectorError(Exception):
    """Base class for everything the detector raises on purpose."""


class ConfigurationError(DetectorError, ValueError):
    """Policy (or helper) configuration is missing or invalid."""


class InputError(DetectorError, ValueError):
    """A log record or log source could not be turned into a LogRecord."""
