"""nuChladni: deformable sphere generator and flat-shaded software renderer."""

__version__ = "0.1.0"
