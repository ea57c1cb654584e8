"""Glyph geometry: noise field, mesh generator, background builder."""
