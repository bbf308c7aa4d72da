"""
Contact Blueprint
"""

from sayit.api.contact.routes import contact_bp

__all__ = ['contact_bp']
