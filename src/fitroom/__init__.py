"""Fitroom - virtual try-on through a generative image model."""

__version__ = "0.1.0"
