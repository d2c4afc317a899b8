"""v6watch - email the operator when the host's IPv6 address changes."""

__version__ = "0.1.0"
