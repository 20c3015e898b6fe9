"""
DyeMatch Imaging Module

Raster surfaces, pixel sampling, viewport transforms and marker placement
for colors picked from uploaded images.
"""
