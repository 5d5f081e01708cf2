"""Rules engine and bots for Hex Strings, a hex-grid lane connection game."""

__version__ = "0.1.0"
