"""Error types raised by the sweep engine and its collaborators."""


class VoronoiError(Exception):
    """Base class for all diagram construction errors."""


class MalformedTreeError(VoronoiError):
    """A beach-line invariant did not hold during the sweep.

    Raised when a node expected to have a parent, a sibling or a locatable
    companion breakpoint does not. A sweep that raises this has produced an
    unusable diagram.
    """


class InvalidInputError(VoronoiError, ValueError):
    """Input sites or bounding region are unusable."""
