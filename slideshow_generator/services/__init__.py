"""Service layer modules (network and external I/O).

Includes image downloads and acquisition, the catalog REST client and the
download/share exporters.
"""

__all__ = [
    "assets",
    "images",
    "catalog",
    "export",
]
