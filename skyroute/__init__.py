"""Collision-free route planning through a 3D volume of box obstacles."""

__version__ = "0.1.0"
