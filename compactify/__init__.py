"""Batch image resizing, cropping, conversion and compression from the command line."""

__version__ = "0.1.0"