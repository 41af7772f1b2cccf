"""
Web interface for r2dice.

JSON API for evaluating dice expressions over HTTP.
"""

from .server import create_app

__all__ = ['create_app']
