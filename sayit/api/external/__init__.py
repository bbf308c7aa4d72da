"""
External Blueprint
"""

from sayit.api.external.routes import external_bp

__all__ = ['external_bp']
