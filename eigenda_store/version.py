"""
Version of the eigenda-store client. Bump this when publishing.
"""

from __future__ import annotations

__version__ = "0.1.0"


def user_agent() -> str:
    """Default User-Agent sent by the HTTP transport."""
    return f"eigenda-store-py/{__version__}"


__all__ = ["__version__", "user_agent"]
