"""
src/content/errors.py — Content query error kinds

A term that resolves to nothing is not an error: it yields an empty
closure and no document.
"""


class ContentError(Exception):
    """Base class for content query failures."""


class StoreUnavailable(ContentError):
    """The content database cannot be opened; persists until reopened."""


class QueryFailure(ContentError):
    """A single query against an open content database failed."""


class ConversionFailure(ContentError):
    """The display-format conversion of a document failed."""
