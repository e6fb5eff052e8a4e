"""
Factory module for FastAPI applications.
"""

from fasttable.factory.app import configure_app

__all__ = ["configure_app"]
