"""
Exceptions raised by the layout engine.

Only fatal problems are exceptions. Degradations that still produce a usable
layout (unreachable routes, residual overlaps) are reported as
``LayoutWarning`` values instead.
"""


class LayoutError(Exception):
    """Base class for fatal layout failures."""

    pass


class InvalidInputError(LayoutError):
    """Raised when the node/edge graph cannot be laid out as given."""

    pass


class ConfigurationError(LayoutError):
    """Raised when a LayoutConfig holds values the engine cannot work with."""

    pass
