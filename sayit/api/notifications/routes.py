"""
Notification Routes
The same inbox views serve citizens here and agents under /api/agent/notifications
"""

from flask import Blueprint, g, request

from sayit.models import UserType
from sayit.services import notifications
from sayit.utils.decorators import role_required
from sayit.utils.pagination import paginate, parse_page_args
from sayit.utils.responses import as_bool, success

notifications_bp = Blueprint('notifications', __name__)

CITIZENS = (UserType.STANDARD_USER.value, UserType.ANONYMOUS_USER.value)


def list_inbox(recipient):
    page, limit = parse_page_args(request.args, default_limit=20)
    query = notifications.find_recent(recipient, unread_only=as_bool(request.args.get('unread')))
    items, pagination = paginate(query, page, limit)
    return success(
        {
            'notifications': [notification.to_dict() for notification in items],
            'unread_count': notifications.count_unread(recipient),
        },
        pagination=pagination
    )


def unread_count(recipient):
    return success({'count': notifications.count_unread(recipient)})


def mark_read(recipient, notification_id):
    notification = notifications.mark_read(recipient, notification_id)
    return success(notification.to_dict(), message='Notification marked as read')


def mark_all_read(recipient):
    updated = notifications.mark_all_read(recipient)
    return success({'updated': updated}, message='All notifications marked as read')


def delete_notification(recipient, notification_id):
    notifications.delete(recipient, notification_id)
    return success(message='Notification deleted')


@notifications_bp.route('', methods=['GET'])
@role_required(*CITIZENS)
def get_notifications():
    """Get the caller's notifications, newest first"""
    return list_inbox(g.actor.recipient)


@notifications_bp.route('/unread-count', methods=['GET'])
@role_required(*CITIZENS)
def get_unread_count():
    return unread_count(g.actor.recipient)


@notifications_bp.route('/<int:notification_id>/read', methods=['PUT'])
@role_required(*CITIZENS)
def read_notification(notification_id):
    return mark_read(g.actor.recipient, notification_id)


@notifications_bp.route('/read-all', methods=['PUT'])
@role_required(*CITIZENS)
def read_all_notifications():
    return mark_all_read(g.actor.recipient)


@notifications_bp.route('/<int:notification_id>', methods=['DELETE'])
@role_required(*CITIZENS)
def remove_notification(notification_id):
    return delete_notification(g.actor.recipient, notification_id)
