"""
HTTP layer: Flask application, range serving, proxy and CLI.
"""

from .api import create_app

__all__ = ['create_app']
