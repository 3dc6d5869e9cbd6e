"""
Exception types raised by unical.

Batch mode lets them propagate to the CLI (logged, exit code 1).
The interactive session turns them into status messages.
"""


class UnicalError(Exception):
    """Base class for all expected failures."""


class FetchError(UnicalError):
    """Network/transport failure or a response that is not a calendar."""


class ParseError(UnicalError):
    """Malformed iCalendar document."""


class ConfigError(UnicalError):
    """Malformed or incomplete configuration document."""


class OutputError(UnicalError):
    """Writing the config or the output calendar failed."""
