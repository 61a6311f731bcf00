"""Directory-driven prompt batch runner and chat participant."""

__version__ = "0.1.0"
