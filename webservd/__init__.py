"""A small selector-driven TCP server configured by an nginx-like configuration file."""

__version__ = "0.1.0"
__all__ = ["__version__"]