"""
RE_Libs - Raster Edit Library Modules

This package contains core functionality for the Raster Edit project,
organized into specialized sub-packages:

- EditPipelineLib: Image loading, transform state, crop control, preview
  compositing and export encoding
- EditorUILib: PyQt5 editor window driving the pipeline
"""

__version__ = "0.1.0"
