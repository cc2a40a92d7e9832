"""Core geometry and rendering primitives for nuChladni.

Modules:
- modes: radial deformation modes over the sphere's angular coordinates
- deformer: mode collection, mesh generation, presets
- renderer: rotation, projection, lighting, culling, painter sort
- orbit: camera orbit source and camera-to-angle conversion
- animation: per-frame driver and GIF export
"""
