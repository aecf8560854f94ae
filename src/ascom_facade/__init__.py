"""Version-negotiating facades over local ASCOM drivers and Alpaca devices."""

__version__ = "0.1.0"
