"""
Feedback Blueprint
"""

from sayit.api.feedback.routes import feedback_bp

__all__ = ['feedback_bp']
