"""Encoding layer: codec negotiation and the capture/encode session."""

__all__ = [
    "codecs",
    "session",
]
