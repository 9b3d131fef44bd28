"""NEO impact scenario toolkit: asteroid record normalization + Web-Mercator geometry."""

__version__ = "0.1.0"
