"""
Notification Model
In-app notifications for citizens and agents, one row per recipient per event
"""

from extensions import db
from datetime import datetime, timedelta
from collections import namedtuple
from enum import Enum


class NotificationType(str, Enum):
    SYSTEM = 'system'
    COMPLAINT_UPDATE = 'complaint_update'
    RESPONSE_RECEIVED = 'response_received'
    STATUS_CHANGE = 'status_change'


class NotificationPriority(str, Enum):
    LOW = 'low'
    NORMAL = 'normal'
    HIGH = 'high'


RECIPIENT_KINDS = ('standard_user', 'anonymous_user', 'agent')
RELATED_KINDS = ('Complaint', 'Response')

# Hard ceiling on notification lifetime, whatever a template requests
MAX_EXPIRY_DAYS = 90


class Recipient(namedtuple('Recipient', 'kind id')):
    """Owner of a notification: (user type, account id)"""

    __slots__ = ()

    def __new__(cls, kind, id):
        if kind not in RECIPIENT_KINDS:
            raise ValueError(f'Unknown recipient kind: {kind}')
        return super().__new__(cls, kind, int(id))


class EntityRef(namedtuple('EntityRef', 'kind id')):
    """Tagged reference to the entity a notification is about"""

    __slots__ = ()

    def __new__(cls, kind, id):
        if kind not in RELATED_KINDS:
            raise ValueError(f'Unknown related entity kind: {kind}')
        return super().__new__(cls, kind, int(id))

    @classmethod
    def complaint(cls, complaint_id):
        return cls('Complaint', complaint_id)

    @classmethod
    def response(cls, response_id):
        return cls('Response', response_id)

    def to_dict(self):
        return {'kind': self.kind, 'id': self.id}


def clamp_expiry(expires_at, now=None, max_days=MAX_EXPIRY_DAYS):
    """Never let a notification live longer than max_days from now"""
    now = now or datetime.utcnow()
    ceiling = now + timedelta(days=max_days)
    if expires_at is None or expires_at > ceiling:
        return ceiling
    return expires_at


class Notification(db.Model):
    """In-app notification with read tracking and an expiry"""

    __tablename__ = 'notifications'

    id = db.Column(db.Integer, primary_key=True)
    recipient_type = db.Column(db.String(20), nullable=False)
    recipient_id = db.Column(db.Integer, nullable=False)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(30), nullable=False, index=True)
    read = db.Column(db.Boolean, default=False, nullable=False)
    read_at = db.Column(db.DateTime)

    # Polymorphic link, resolved explicitly by callers through EntityRef
    related_type = db.Column(db.String(20))
    related_id = db.Column(db.Integer)

    priority = db.Column(db.String(10), default=NotificationPriority.NORMAL.value, nullable=False)
    actions = db.Column(db.JSON, default=list)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.Index('ix_notifications_recipient_read', 'recipient_type', 'recipient_id', 'read'),
        db.Index('ix_notifications_recipient_created', 'recipient_type', 'recipient_id', 'created_at'),
    )

    @property
    def recipient(self):
        return Recipient(self.recipient_type, self.recipient_id)

    @recipient.setter
    def recipient(self, value):
        self.recipient_type, self.recipient_id = value.kind, value.id

    @property
    def related(self):
        if self.related_type is None:
            return None
        return EntityRef(self.related_type, self.related_id)

    @related.setter
    def related(self, value):
        if value is None:
            self.related_type = self.related_id = None
        else:
            self.related_type, self.related_id = value.kind, value.id

    @staticmethod
    def for_recipient(recipient, include_expired=False):
        query = Notification.query.filter_by(recipient_type=recipient.kind, recipient_id=recipient.id)
        if not include_expired:
            query = query.filter(Notification.expires_at > datetime.utcnow())
        return query

    def mark_as_read(self):
        self.read = True
        self.read_at = datetime.utcnow()

    def is_expired(self, now=None):
        return self.expires_at <= (now or datetime.utcnow())

    def to_dict(self):
        related = self.related
        return {
            'id': self.id,
            'title': self.title,
            'message': self.message,
            'type': self.type,
            'read': self.read,
            'priority': self.priority,
            'related': related.to_dict() if related else None,
            'actions': self.actions or [],
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Notification {self.id} for {self.recipient_type}:{self.recipient_id}>'
