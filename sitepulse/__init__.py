"""SitePulse - site structure discovery and page popularity estimation."""

__version__ = "0.1.0"
