"""
Flask blueprints for the r2dice web interface.

- api: JSON endpoints for rolling and normalizing expressions
"""

from .api import api_bp

__all__ = ['api_bp']
