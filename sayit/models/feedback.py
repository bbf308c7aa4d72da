"""
Feedback Model
"""

from extensions import db
from datetime import datetime


class Feedback(db.Model):
    """Citizen satisfaction feedback on a finished complaint"""

    __tablename__ = 'feedback'

    RATING_FIELDS = (
        'response_time_rating',
        'staff_professionalism_rating',
        'resolution_satisfaction_rating',
        'communication_rating',
    )

    id = db.Column(db.Integer, primary_key=True)
    complaint_id = db.Column(db.Integer, db.ForeignKey('complaints.id'), unique=True, nullable=False, index=True)
    standard_user_id = db.Column(db.Integer, db.ForeignKey('standard_users.id'), nullable=True)
    anonymous_user_id = db.Column(db.Integer, db.ForeignKey('anonymous_users.id'), nullable=True)

    satisfaction_level = db.Column(db.Integer, nullable=False, index=True)
    comment = db.Column(db.String(1000))
    response_time_rating = db.Column(db.Integer)
    staff_professionalism_rating = db.Column(db.Integer)
    resolution_satisfaction_rating = db.Column(db.Integer)
    communication_rating = db.Column(db.Integer)
    would_recommend = db.Column(db.Boolean)
    is_public = db.Column(db.Boolean, default=False, nullable=False)

    # Agency reply
    agency_response = db.Column(db.Text)
    agency_responded_at = db.Column(db.DateTime)
    agency_responder_type = db.Column(db.String(20))
    agency_responder_id = db.Column(db.Integer)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    complaint = db.relationship('Complaint', backref=db.backref('feedback', uselist=False))

    @property
    def average_rating(self):
        ratings = [getattr(self, field) for field in self.RATING_FIELDS if getattr(self, field) is not None]
        if not ratings:
            return float(self.satisfaction_level)
        return sum(ratings) / len(ratings)

    def add_agency_response(self, content, responder_type, responder_id):
        self.agency_response = content
        self.agency_responded_at = datetime.utcnow()
        self.agency_responder_type = responder_type
        self.agency_responder_id = responder_id

    def to_dict(self):
        data = {
            'id': self.id,
            'complaint_id': self.complaint_id,
            'satisfaction_level': self.satisfaction_level,
            'comment': self.comment,
            'would_recommend': self.would_recommend,
            'is_public': self.is_public,
            'average_rating': round(self.average_rating, 2),
            'agency_response': None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        for field in self.RATING_FIELDS:
            data[field] = getattr(self, field)

        if self.agency_response:
            data['agency_response'] = {
                'content': self.agency_response,
                'responded_at': self.agency_responded_at.isoformat() if self.agency_responded_at else None,
                'responder_type': self.agency_responder_type,
            }
        return data

    def __repr__(self):
        return f'<Feedback {self.id} on Complaint {self.complaint_id}>'
