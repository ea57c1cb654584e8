"""GlyphLab: pinch + rotate a virtual knob to shape a procedural 3-D glyph."""

__version__ = "0.1.0"
