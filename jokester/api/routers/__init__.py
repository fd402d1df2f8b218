"""
API Routers package.
"""

from . import jokes

__all__ = ["jokes"]
