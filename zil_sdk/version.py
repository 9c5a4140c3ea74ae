"""
Version of zil-sdk and the User-Agent sent to nodes.
"""

from __future__ import annotations

import platform

# Bump this when publishing
__version__ = "0.3.0"


def user_agent(product: str = "zil-sdk-py") -> str:
    """e.g. 'zil-sdk-py/0.3.0 (CPython 3.12.1)'."""
    return f"{product}/{__version__} ({platform.python_implementation()} {platform.python_version()})"


__all__ = ["__version__", "user_agent"]
