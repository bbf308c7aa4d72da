"""
Category Model
"""

from extensions import db
from datetime import datetime


class Category(db.Model):
    """Complaint category, routed to a default agency"""

    __tablename__ = 'categories'

    # Fields an administrator may change through update_details
    EDITABLE_FIELDS = ('name', 'description', 'default_agency_id', 'icon', 'color', 'is_active')

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), unique=True, nullable=False, index=True)
    description = db.Column(db.String(500))
    default_agency_id = db.Column(db.Integer, db.ForeignKey('agencies.id'), nullable=True, index=True)
    icon = db.Column(db.String(50), default='feedback', nullable=False)
    color = db.Column(db.String(20), default='#3498db', nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    default_agency = db.relationship('Agency', backref=db.backref('categories', lazy='dynamic'))

    @staticmethod
    def find_active():
        return Category.query.filter_by(is_active=True).order_by(Category.name).all()

    def update_details(self, updates):
        """Apply whitelisted updates"""
        for field in self.EDITABLE_FIELDS:
            if field in updates:
                setattr(self, field, updates[field])

    def to_dict(self):
        """Convert category to dictionary"""
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'default_agency': self.default_agency.to_summary() if self.default_agency else None,
            'icon': self.icon,
            'color': self.color,
            'is_active': self.is_active,
        }

    def __repr__(self):
        return f'<Category {self.name}>'
