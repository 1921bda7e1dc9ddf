"""Command-line control of paired Bluetooth devices."""

__version__ = "0.1.0"
