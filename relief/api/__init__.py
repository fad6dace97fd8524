"""
HTTP API for Insta-Relief.
"""
from .app import create_app

__all__ = ["create_app"]
