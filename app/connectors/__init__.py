"""
app/connectors package marker.
"""

from app.connectors.short_io import ShortenerError, ShortIOClient

__all__ = [
    "ShortenerError",
    "ShortIOClient",
]
