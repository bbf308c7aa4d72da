"""
Agent Routes
Dashboard statistics and the agent's notification inbox
"""

from flask import Blueprint, g, request

from sayit.api.notifications.routes import (
    delete_notification, list_inbox, mark_all_read, mark_read, unread_count
)
from sayit.models import Complaint, UserType
from sayit.services import query
from sayit.services.access import Scope
from sayit.utils.decorators import role_required
from sayit.utils.responses import success

agent_bp = Blueprint('agent', __name__)

AGENT = UserType.AGENT.value


@agent_bp.route('/dashboard/stats', methods=['GET'])
@role_required(AGENT)
def dashboard_stats():
    """Complaint counters for the agent's agency"""
    agent = g.actor.load()
    stats = query.complaint_stats(
        Scope(g.actor),
        start_date=request.args.get('start_date'),
        end_date=request.args.get('end_date')
    )
    stats['agency'] = agent.agency.to_summary() if agent.agency else None
    stats['assigned_to_me'] = Complaint.query.filter_by(assigned_agent_id=agent.id).count()
    return success(stats)


@agent_bp.route('/notifications', methods=['GET'])
@role_required(AGENT)
def get_notifications():
    return list_inbox(g.actor.recipient)


@agent_bp.route('/notifications/unread-count', methods=['GET'])
@role_required(AGENT)
def get_unread_count():
    return unread_count(g.actor.recipient)


@agent_bp.route('/notifications/<int:notification_id>/read', methods=['PUT'])
@role_required(AGENT)
def read_notification(notification_id):
    return mark_read(g.actor.recipient, notification_id)


@agent_bp.route('/notifications/read-all', methods=['PUT'])
@role_required(AGENT)
def read_all_notifications():
    return mark_all_read(g.actor.recipient)


@agent_bp.route('/notifications/<int:notification_id>', methods=['DELETE'])
@role_required(AGENT)
def remove_notification(notification_id):
    return delete_notification(g.actor.recipient, notification_id)
