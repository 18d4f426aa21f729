"""RSS to Discord announcement bridge."""

__version__ = "1.0.0"
