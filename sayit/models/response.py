"""
Response Model
"""

from extensions import db
from datetime import datetime
from sayit.models.user import UserType


# Wording used when describing a responder to the citizen
RESPONDER_LABELS = {
    UserType.AGENT.value: 'Agency Representative',
    UserType.STAFF.value: 'SAYIT Staff',
    UserType.STANDARD_USER.value: 'Citizen',
    UserType.ANONYMOUS_USER.value: 'Citizen',
    UserType.SYSTEM.value: 'System',
}


class Response(db.Model):
    """Append-only message on a complaint thread"""

    __tablename__ = 'responses'

    id = db.Column(db.Integer, primary_key=True)
    complaint_id = db.Column(db.Integer, db.ForeignKey('complaints.id'), nullable=False, index=True)
    responder_type = db.Column(db.String(20), nullable=False, index=True)
    responder_id = db.Column(db.Integer, nullable=True)
    content = db.Column(db.Text, nullable=False)
    is_public = db.Column(db.Boolean, default=True, nullable=False, index=True)

    # Set when the response records a status change
    old_status = db.Column(db.String(20))
    new_status = db.Column(db.String(20))

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    attachments = db.relationship('Attachment', backref='response', lazy='select',
                                  foreign_keys='Attachment.response_id')

    @staticmethod
    def system(complaint, content, old_status=None, new_status=None):
        """Build a public system entry for the complaint thread"""
        return Response(
            complaint=complaint,
            responder_type=UserType.SYSTEM.value,
            content=content,
            is_public=True,
            old_status=old_status,
            new_status=new_status,
        )

    @property
    def responder_label(self):
        return RESPONDER_LABELS.get(self.responder_type, 'Agency Staff')

    def to_dict(self):
        data = {
            'id': self.id,
            'complaint_id': self.complaint_id,
            'content': self.content,
            'responder_type': self.responder_type,
            'responder_id': self.responder_id,
            'is_public': self.is_public,
            'attachments': [attachment.to_dict() for attachment in self.attachments],
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if self.new_status:
            data['status_change'] = {'old_status': self.old_status, 'new_status': self.new_status}
        return data

    def to_public_dict(self):
        return {
            'id': self.id,
            'content': self.content,
            'response_from': self.responder_label,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Response {self.id} on Complaint {self.complaint_id}>'
