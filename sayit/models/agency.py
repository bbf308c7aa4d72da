"""
Agency Model
"""

from extensions import db
from datetime import datetime


class Agency(db.Model):
    """Government body that owns and resolves complaints"""

    __tablename__ = 'agencies'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False, index=True)
    short_name = db.Column(db.String(10), index=True)
    description = db.Column(db.String(500))
    contact_email = db.Column(db.String(120))
    contact_phone = db.Column(db.String(30))
    address = db.Column(db.String(255))
    website = db.Column(db.String(255))
    logo = db.Column(db.String(500))
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    agents = db.relationship('Agent', backref='agency', lazy='dynamic')

    @staticmethod
    def find_active():
        return Agency.query.filter_by(is_active=True).order_by(Agency.name).all()

    def to_dict(self, include_contact=False):
        """Convert agency to dictionary"""
        data = {
            'id': self.id,
            'name': self.name,
            'short_name': self.short_name,
            'description': self.description,
            'logo': self.logo,
            'is_active': self.is_active,
        }

        if include_contact:
            data.update({
                'contact_email': self.contact_email,
                'contact_phone': self.contact_phone,
                'address': self.address,
                'website': self.website,
                'created_at': self.created_at.isoformat() if self.created_at else None,
            })

        return data

    def to_summary(self):
        return {'id': self.id, 'name': self.name, 'short_name': self.short_name}

    def __repr__(self):
        return f'<Agency {self.name}>'
