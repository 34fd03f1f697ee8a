"""Wavefront .obj/.mtl loading into flat attribute arrays and triangle buffers."""

__version__ = "0.1.0"
__all__ = ["scanning", "material", "parser", "viewer"]