"""Exception types raised while listing, fetching and normalizing sheets."""

from __future__ import annotations

from typing import Optional


class AvailabilityError(Exception):
    """Base class for every error raised by availability_builder."""


class FetchError(AvailabilityError):
    """A Drive listing or download failed (network error or non-2xx status)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(AvailabilityError):
    """A grid could not be interpreted as an availability sheet."""


class SlotParseError(ParseError):
    """A time label such as ``9:00am - 10:00am`` could not be parsed."""


class MissingHeaderError(ParseError):
    """No row in the grid matched the expected day-header layout."""


class NoFolderSelected(AvailabilityError):
    """The caller selected none of the folders an operation needs."""
