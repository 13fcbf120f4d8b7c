"""
Exceptions that are used throughout
"""

from __future__ import annotations

import difflib
from collections.abc import Collection


class CsseTimeseriesError(Exception):
    """
    Base class for errors raised by csse_timeseries
    """


class SourceFormatError(CsseTimeseriesError, ValueError):
    """
    Raised when source data does not have a layout we know how to read

    This normally means that the upstream schema has changed
    beyond the variants we support, so it needs human attention.
    """


class SourceNotFoundError(CsseTimeseriesError):
    """
    Raised when a source that must exist could not be found
    """

    def __init__(self, location: str) -> None:
        """
        Initialise the error

        Parameters
        ----------
        location
            Location (URL or path) that could not be found
        """
        self.location = location
        super().__init__(f"Could not find the source at {location!r}")


class UnrecognisedValueError(CsseTimeseriesError, ValueError):
    """
    Raised when a value is not one of the known values
    """

    def __init__(
        self,
        unrecognised_value: str,
        name: str,
        known_values: Collection[str],
        n_suggestions: int = 3,
    ) -> None:
        """
        Initialise the error

        Parameters
        ----------
        unrecognised_value
            Value that was not recognised

        name
            Name of the thing being looked up (used in the error message)

        known_values
            Values we do know about

        n_suggestions
            Maximum number of close matches to suggest
        """
        error_msg = f"{unrecognised_value!r} is not a recognised value for {name}. "

        close = difflib.get_close_matches(
            unrecognised_value, list(known_values), n=n_suggestions
        )
        if close:
            suggestions = " or ".join(repr(v) for v in close)
            error_msg += f"Did you mean {suggestions}? "

        error_msg += f"The full list of known values is: {sorted(known_values)}"

        super().__init__(error_msg)


class InvalidOutputPathError(CsseTimeseriesError, ValueError):
    """
    Raised when output can't be written to the requested path
    """

    def __init__(self, path: object, reason: str) -> None:
        """
        Initialise the error

        Parameters
        ----------
        path
            Requested output path

        reason
            Why the path can't be used
        """
        self.path = path
        super().__init__(f"Invalid filename or path: {path} ({reason})")
