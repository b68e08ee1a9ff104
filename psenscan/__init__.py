"""Data types, binary codecs and protocol messages for PSENscan safety laser scanners."""

__version__ = "0.1.0"