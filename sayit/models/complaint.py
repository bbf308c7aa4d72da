"""
Complaint Model
"""

from extensions import db
from datetime import datetime
from enum import Enum
from sayit.models.notification import Recipient
import secrets


class ComplaintStatus(str, Enum):
    """Canonical complaint status enum"""
    PENDING = 'pending'
    UNDER_REVIEW = 'under_review'
    ASSIGNED = 'assigned'
    IN_PROGRESS = 'in_progress'
    RESOLVED = 'resolved'
    CLOSED = 'closed'
    REJECTED = 'rejected'

    @classmethod
    def parse(cls, value):
        """Map a canonical or legacy status string to a member, or None"""
        if value is None:
            return None
        value = str(value).strip().lower()
        value = LEGACY_STATUS_ALIASES.get(value, value)
        try:
            return cls(value)
        except ValueError:
            return None


# The second status vocabulary used by older dashboards
LEGACY_STATUS_ALIASES = {
    'new': ComplaintStatus.PENDING.value,
    'pending_info': ComplaintStatus.UNDER_REVIEW.value,
    'reopened': ComplaintStatus.IN_PROGRESS.value,
}

OPEN_STATUSES = (
    ComplaintStatus.PENDING,
    ComplaintStatus.UNDER_REVIEW,
    ComplaintStatus.ASSIGNED,
    ComplaintStatus.IN_PROGRESS,
)

FINISHED_STATUSES = (ComplaintStatus.RESOLVED, ComplaintStatus.CLOSED)


class ComplaintPriority(str, Enum):
    """Complaint priority enum"""
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    URGENT = 'urgent'

    @classmethod
    def parse(cls, value):
        if value is None:
            return None
        value = str(value).strip().lower()
        if value == 'critical':
            value = cls.URGENT.value
        try:
            return cls(value)
        except ValueError:
            return None


class SubmissionType(str, Enum):
    """Channel a complaint arrived through"""
    WEB = 'web'
    MOBILE = 'mobile'
    PHONE = 'phone'
    EMAIL = 'email'
    IN_PERSON = 'in_person'
    EXTERNAL = 'external'


class ResourceType(str, Enum):
    IMAGE = 'image'
    VIDEO = 'video'
    AUDIO = 'audio'
    RAW = 'raw'

    @classmethod
    def from_mimetype(cls, mimetype):
        major = (mimetype or '').split('/', 1)[0]
        if major in ('image', 'video', 'audio'):
            return cls(major)
        return cls.RAW


class Attachment(db.Model):
    """Stored file attached to a complaint or a response"""

    __tablename__ = 'attachments'

    id = db.Column(db.Integer, primary_key=True)
    complaint_id = db.Column(db.Integer, db.ForeignKey('complaints.id'), nullable=True, index=True)
    response_id = db.Column(db.Integer, db.ForeignKey('responses.id'), nullable=True, index=True)
    url = db.Column(db.String(500), nullable=False)
    storage_key = db.Column(db.String(255))
    original_name = db.Column(db.String(255))
    file_type = db.Column(db.String(120))
    file_size = db.Column(db.Integer)
    resource_type = db.Column(db.String(10), default=ResourceType.IMAGE.value, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self, public=False):
        data = {
            'url': self.url,
            'original_name': self.original_name,
            'file_type': self.file_type,
        }
        if not public:
            data.update({
                'id': self.id,
                'file_size': self.file_size,
                'resource_type': self.resource_type,
                'created_at': self.created_at.isoformat() if self.created_at else None,
            })
        return data


class Complaint(db.Model):
    """Citizen complaint routed to an agency"""

    __tablename__ = 'complaints'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=False)

    # Routing
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id'), nullable=False, index=True)
    agency_id = db.Column(db.Integer, db.ForeignKey('agencies.id'), nullable=True, index=True)
    assigned_agent_id = db.Column(db.Integer, db.ForeignKey('agents.id'), nullable=True, index=True)

    # Status
    status = db.Column(db.String(20), default=ComplaintStatus.PENDING.value, nullable=False, index=True)
    priority = db.Column(db.String(10), default=ComplaintPriority.MEDIUM.value, nullable=False, index=True)
    submission_type = db.Column(db.String(20), default=SubmissionType.WEB.value, nullable=False, index=True)
    tracking_id = db.Column(db.String(20), unique=True, nullable=False, index=True)

    # Submitter: at most one of the two references is set
    is_anonymous = db.Column(db.Boolean, default=False, nullable=False)
    standard_user_id = db.Column(db.Integer, db.ForeignKey('standard_users.id'), nullable=True, index=True)
    anonymous_user_id = db.Column(db.Integer, db.ForeignKey('anonymous_users.id'), nullable=True, index=True)

    # Contact and location details
    contact_email = db.Column(db.String(120))
    contact_phone = db.Column(db.String(30))
    preferred_contact = db.Column(db.String(10), default='none')
    address = db.Column(db.String(255))
    district = db.Column(db.String(100))
    sector = db.Column(db.String(100))
    cell = db.Column(db.String(100))

    internal_notes = db.Column(db.Text)
    tags = db.Column(db.JSON, default=list)
    is_public = db.Column(db.Boolean, default=True, nullable=False)

    # Timestamps
    due_date = db.Column(db.DateTime)
    resolved_at = db.Column(db.DateTime)
    closed_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    category = db.relationship('Category')
    agency = db.relationship('Agency', backref=db.backref('complaints', lazy='dynamic'))
    assigned_agent = db.relationship('Agent')
    standard_user = db.relationship('StandardUser', backref=db.backref('complaints', lazy='dynamic'))
    anonymous_user = db.relationship('AnonymousUser', backref=db.backref('complaints', lazy='dynamic'))
    attachments = db.relationship('Attachment', backref='complaint', lazy='select',
                                  foreign_keys='Attachment.complaint_id')
    responses = db.relationship('Response', backref='complaint', lazy='select',
                                order_by='Response.id')

    __table_args__ = (
        db.CheckConstraint(
            'NOT (standard_user_id IS NOT NULL AND anonymous_user_id IS NOT NULL)',
            name='ck_complaint_single_submitter'
        ),
        db.Index('ix_complaints_agency_status', 'agency_id', 'status'),
    )

    @staticmethod
    def generate_tracking_id(now=None):
        """Citizen-facing identifier of the form SAY-2024-01234"""
        year = (now or datetime.utcnow()).year
        return f'SAY-{year}-{secrets.randbelow(100000):05d}'

    @staticmethod
    def find_by_tracking_id(tracking_id):
        return Complaint.query.filter_by(tracking_id=tracking_id).first()

    @property
    def submitter(self):
        """Notification recipient for the submitter, or None for external submissions"""
        if self.standard_user_id:
            return Recipient('standard_user', self.standard_user_id)
        if self.anonymous_user_id:
            return Recipient('anonymous_user', self.anonymous_user_id)
        return None

    def touch(self):
        self.updated_at = datetime.utcnow()

    def set_status(self, status):
        """Set status and stamp resolution/closure times"""
        self.status = status.value
        if status == ComplaintStatus.RESOLVED and not self.resolved_at:
            self.resolved_at = datetime.utcnow()
        if status == ComplaintStatus.CLOSED and not self.closed_at:
            self.closed_at = datetime.utcnow()

    def public_responses(self):
        return [response for response in self.responses if response.is_public]

    def to_dict(self, include_internal=False, include_responses=False):
        """Convert complaint to dictionary"""
        data = {
            'id': self.id,
            'tracking_id': self.tracking_id,
            'title': self.title,
            'description': self.description,
            'category': self.category.to_dict() if self.category else None,
            'agency': self.agency.to_summary() if self.agency else None,
            'assigned_to': {'id': self.assigned_agent.id, 'name': self.assigned_agent.name}
                if self.assigned_agent else None,
            'status': self.status,
            'priority': self.priority,
            'submission_type': self.submission_type,
            'is_anonymous': self.is_anonymous,
            'location': {
                'address': self.address,
                'district': self.district,
                'sector': self.sector,
                'cell': self.cell,
            },
            'tags': self.tags or [],
            'is_public': self.is_public,
            'attachments': [attachment.to_dict() for attachment in self.attachments],
            'due_date': self.due_date.isoformat() if self.due_date else None,
            'resolved_at': self.resolved_at.isoformat() if self.resolved_at else None,
            'closed_at': self.closed_at.isoformat() if self.closed_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

        if include_internal:
            data['internal_notes'] = self.internal_notes
            data['contact_info'] = {
                'email': self.contact_email,
                'phone': self.contact_phone,
                'preferred_method': self.preferred_contact,
            }

        if include_responses:
            responses = self.responses if include_internal else self.public_responses()
            data['responses'] = [response.to_dict() for response in responses]

        return data

    def to_tracking_dict(self):
        """Public view returned to unauthenticated trackers"""
        return {
            'tracking_id': self.tracking_id,
            'title': self.title,
            'description': self.description,
            'status': self.status,
            'priority': self.priority,
            'category': self.category.name if self.category else None,
            'agency': self.agency.to_summary() if self.agency else None,
            'submission_type': self.submission_type,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            'resolved_at': self.resolved_at.isoformat() if self.resolved_at else None,
            'closed_at': self.closed_at.isoformat() if self.closed_at else None,
            'responses': [response.to_public_dict() for response in self.public_responses()],
            'attachments': [attachment.to_dict(public=True) for attachment in self.attachments],
        }

    def __repr__(self):
        return f'<Complaint {self.tracking_id} ({self.status})>'
