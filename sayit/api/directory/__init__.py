"""
Directory Blueprint
"""

from sayit.api.directory.routes import directory_bp

__all__ = ['directory_bp']
