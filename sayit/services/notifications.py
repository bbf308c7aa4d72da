"""
Notification Dispatcher
Turns complaint events into in-app notifications for the submitter
"""

import logging
from collections import namedtuple
from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from sayit.errors import NotFound
from sayit.models import ComplaintStatus, EntityRef, Notification, NotificationPriority, NotificationType
from sayit.models.notification import MAX_EXPIRY_DAYS, clamp_expiry
from sayit.models.user import UserType

logger = logging.getLogger(__name__)


# Events
SubmissionConfirmed = namedtuple('SubmissionConfirmed', 'complaint')
StatusChanged = namedtuple('StatusChanged', 'complaint old_status new_status')
ResponseReceived = namedtuple('ResponseReceived', 'complaint response responder_type')
UserResponseRecorded = namedtuple('UserResponseRecorded', 'complaint')


class SystemMessage(namedtuple('SystemMessage',
                               'recipient title message priority expiry_days actions related')):
    """Free-form message chosen by the caller"""

    __slots__ = ()

    def __new__(cls, recipient, title, message, priority=NotificationPriority.NORMAL.value,
                expiry_days=30, actions=None, related=None):
        return super().__new__(cls, recipient, title, message, priority, expiry_days,
                               actions or [], related)


# Rendered notification, before it is written
Draft = namedtuple('Draft', 'title message type priority expiry_days actions related')


def _view_complaint(complaint):
    return {'label': 'View Complaint', 'url': f'/complaints/{complaint.id}', 'type': 'primary'}


STATUS_COPY = {
    ComplaintStatus.UNDER_REVIEW.value: (
        'Complaint Under Review',
        'Your complaint "{title}" is now being reviewed by our team.',
        NotificationPriority.NORMAL,
    ),
    ComplaintStatus.ASSIGNED.value: (
        'Complaint Assigned',
        'Your complaint "{title}" has been assigned to an agent for resolution.',
        NotificationPriority.NORMAL,
    ),
    ComplaintStatus.IN_PROGRESS.value: (
        'Complaint In Progress',
        'Work has begun on your complaint "{title}".',
        NotificationPriority.NORMAL,
    ),
    ComplaintStatus.RESOLVED.value: (
        'Complaint Resolved',
        'Your complaint "{title}" has been marked as resolved. Please provide feedback if needed.',
        NotificationPriority.HIGH,
    ),
    ComplaintStatus.CLOSED.value: (
        'Complaint Closed',
        'Your complaint "{title}" has been closed. Thank you for using our service.',
        NotificationPriority.NORMAL,
    ),
    ComplaintStatus.REJECTED.value: (
        'Complaint Rejected',
        'Unfortunately, your complaint "{title}" could not be processed. '
        'Please check the responses for more information.',
        NotificationPriority.HIGH,
    ),
}

GENERIC_STATUS_COPY = (
    'Complaint Status Updated',
    'The status of your complaint "{title}" has changed from {old} to {new}.',
    NotificationPriority.NORMAL,
)

RESPONDER_PHRASES = {
    UserType.AGENT.value: 'an agency representative',
    UserType.STAFF.value: 'a staff member',
}


def _submission_confirmed(event):
    complaint = event.complaint
    return Draft(
        title='Complaint Submitted Successfully',
        message=(f'Your complaint "{complaint.title}" has been received and is being processed. '
                 f'Tracking ID: {complaint.tracking_id}'),
        type=NotificationType.SYSTEM.value,
        priority=NotificationPriority.NORMAL.value,
        expiry_days=30,
        actions=[
            _view_complaint(complaint),
            {'label': 'Track Status', 'url': f'/track/{complaint.tracking_id}', 'type': 'secondary'},
        ],
        related=EntityRef.complaint(complaint.id),
    )


def _status_changed(event):
    complaint = event.complaint
    title, message, priority = STATUS_COPY.get(event.new_status, GENERIC_STATUS_COPY)
    return Draft(
        title=title,
        message=message.format(title=complaint.title, old=event.old_status, new=event.new_status),
        type=NotificationType.STATUS_CHANGE.value,
        priority=priority.value,
        expiry_days=60,
        actions=[_view_complaint(complaint)],
        related=EntityRef.complaint(complaint.id),
    )


def _response_received(event):
    complaint = event.complaint
    responder = RESPONDER_PHRASES.get(event.responder_type, 'someone')
    return Draft(
        title='New Response to Your Complaint',
        message=f'{responder.capitalize()} has responded to your complaint "{complaint.title}".',
        type=NotificationType.RESPONSE_RECEIVED.value,
        priority=NotificationPriority.HIGH.value,
        expiry_days=45,
        actions=[{'label': 'View Response', 'url': f'/complaints/{complaint.id}', 'type': 'primary'}],
        related=EntityRef.response(event.response.id),
    )


def _user_response_recorded(event):
    complaint = event.complaint
    return Draft(
        title='Response Added to Complaint',
        message=f'Your response to complaint "{complaint.title}" has been recorded.',
        type=NotificationType.SYSTEM.value,
        priority=NotificationPriority.LOW.value,
        expiry_days=15,
        actions=[_view_complaint(complaint)],
        related=EntityRef.complaint(complaint.id),
    )


def _system_message(event):
    return Draft(
        title=event.title,
        message=event.message,
        type=NotificationType.SYSTEM.value,
        priority=event.priority,
        expiry_days=event.expiry_days,
        actions=event.actions,
        related=event.related,
    )


TEMPLATES = {
    SubmissionConfirmed: _submission_confirmed,
    StatusChanged: _status_changed,
    ResponseReceived: _response_received,
    UserResponseRecorded: _user_response_recorded,
    SystemMessage: _system_message,
}


def render(event):
    """Build the notification draft for an event"""
    return TEMPLATES[type(event)](event)


def recipient_for(event):
    if isinstance(event, SystemMessage):
        return event.recipient
    return event.complaint.submitter


def _max_expiry_days():
    return current_app.config.get('NOTIFICATION_MAX_EXPIRY_DAYS', MAX_EXPIRY_DAYS)


def dispatch(event):
    """
    Write the notification for an event

    Returns the Notification, or None when the complaint has no submitter to
    notify or the write failed. Failures are logged and rolled back so the
    complaint change that triggered the event stands.
    """
    recipient = recipient_for(event)
    if recipient is None:
        return None

    try:
        draft = render(event)
        now = datetime.utcnow()
        notification = Notification(
            title=draft.title,
            message=draft.message,
            type=draft.type,
            priority=draft.priority,
            actions=draft.actions,
            read=False,
            created_at=now,
            expires_at=clamp_expiry(now + timedelta(days=draft.expiry_days), now, _max_expiry_days()),
        )
        notification.recipient = recipient
        notification.related = draft.related
        db.session.add(notification)
        db.session.commit()
    except (SQLAlchemyError, ValueError) as e:
        db.session.rollback()
        logger.warning(f'Notification dispatch failed for {type(event).__name__} to {recipient}: {e}')
        return None

    logger.debug(f'Notification {notification.id} sent to {recipient.kind}:{recipient.id}')
    return notification


def find_unread(recipient, limit=20):
    return (Notification.for_recipient(recipient)
            .filter(Notification.read.is_(False))
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
            .all())


def find_recent(recipient, unread_only=False):
    """Newest-first query of live notifications, ready for pagination"""
    query = Notification.for_recipient(recipient)
    if unread_only:
        query = query.filter(Notification.read.is_(False))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc())


def count_unread(recipient):
    return Notification.for_recipient(recipient).filter(Notification.read.is_(False)).count()


def _get_owned(recipient, notification_id):
    notification = Notification.for_recipient(recipient).filter(Notification.id == notification_id).first()
    if not notification:
        raise NotFound('Notification not found')
    return notification


def mark_read(recipient, notification_id):
    notification = _get_owned(recipient, notification_id)
    if not notification.read:
        notification.mark_as_read()
        db.session.commit()
    return notification


def mark_all_read(recipient):
    """Mark every unread notification read and return how many changed"""
    updated = (Notification.for_recipient(recipient)
               .filter(Notification.read.is_(False))
               .update({'read': True, 'read_at': datetime.utcnow()}, synchronize_session=False))
    db.session.commit()
    return updated


def delete(recipient, notification_id):
    notification = _get_owned(recipient, notification_id)
    db.session.delete(notification)
    db.session.commit()


def purge_old_read(recipient=None, days_old=None):
    """Delete read notifications older than days_old, for one recipient or everyone"""
    if days_old is None:
        days_old = current_app.config.get('NOTIFICATION_RETENTION_DAYS', 30)
    cutoff = datetime.utcnow() - timedelta(days=days_old)

    query = Notification.query.filter(Notification.read.is_(True), Notification.created_at < cutoff)
    if recipient is not None:
        query = query.filter_by(recipient_type=recipient.kind, recipient_id=recipient.id)
    deleted = query.delete(synchronize_session=False)
    db.session.commit()
    logger.info(f'Purged {deleted} read notifications older than {days_old} days')
    return deleted


def purge_expired(now=None):
    deleted = (Notification.query
               .filter(Notification.expires_at <= (now or datetime.utcnow()))
               .delete(synchronize_session=False))
    db.session.commit()
    logger.info(f'Purged {deleted} expired notifications')
    return deleted


def broadcast(recipients, title, message, priority=NotificationPriority.NORMAL.value,
              expiry_days=30, actions=None):
    """Send the same system message to many recipients"""
    sent = 0
    for recipient in recipients:
        if dispatch(SystemMessage(recipient, title, message, priority, expiry_days, actions)):
            sent += 1
    return sent
