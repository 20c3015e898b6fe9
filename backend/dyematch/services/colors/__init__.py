"""
DyeMatch Colors Module

Color space conversion, nearest-dye matching with exclusion filters,
harmony generation, match quality scoring and dominant color extraction.
"""

__version__ = "1.0.0"
