"""
Notifications Blueprint
"""

from sayit.api.notifications.routes import notifications_bp

__all__ = ['notifications_bp']
