"""Byte-range core: header parsing, window resolution and response outcomes."""
