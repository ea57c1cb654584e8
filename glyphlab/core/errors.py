"""
GlyphLab Exceptions.
Hand absence is NOT an error and never raises; these cover the real faults.
"""


class GlyphLabError(Exception):
    """Base class for every GlyphLab failure."""


class PerceptionError(GlyphLabError):
    """Camera or hand model could not be acquired."""


class GlyphMeshError(GlyphLabError):
    """Mesh build produced degenerate or non-finite geometry."""


class ConsoleError(GlyphLabError, ValueError):
    """A console script used syntax outside the restricted grammar."""
