"""Focusboard: smart task scoring and Eisenhower matrix board."""

__version__ = "0.1.0"
