"""
Agent Blueprint
"""

from sayit.api.agent.routes import agent_bp

__all__ = ['agent_bp']
