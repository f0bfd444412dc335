"""HopeBloom authentication API."""

__version__ = "1.0.0"
