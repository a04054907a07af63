"""Geometric utilities for snapping and room polygons."""
