"""
Database connection layer.

Owns the Motor client and hands out per-operation driver sessions.
"""

from .connection import Connection, build_mongo_uri

__all__ = [
    "Connection",
    "build_mongo_uri",
]
