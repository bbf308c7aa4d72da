"""
Account Models
Registered citizens, anonymous citizens, agency agents and platform staff
"""

from extensions import db, bcrypt
from datetime import datetime, timedelta
from enum import Enum
import secrets


class UserType(str, Enum):
    """Kinds of principal that act on complaints"""
    STANDARD_USER = 'standard_user'
    ANONYMOUS_USER = 'anonymous_user'
    AGENT = 'agent'
    STAFF = 'staff'
    SYSTEM = 'system'


class StaffRole(str, Enum):
    """Staff roles enum"""
    ADMIN = 'admin'
    SUPERVISOR = 'supervisor'
    MODERATOR = 'moderator'
    ANALYST = 'analyst'


class AgentRole(str, Enum):
    """Agent roles enum"""
    AGENT = 'agent'
    SUPERVISOR = 'supervisor'


class PasswordAccountMixin:
    """Password hashing and login bookkeeping shared by credentialed accounts"""

    def set_password(self, password):
        """Hash and set password"""
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        """Verify password against hash"""
        return bcrypt.check_password_hash(self.password_hash, password)

    def update_last_login(self):
        """Update last login timestamp"""
        self.last_login = datetime.utcnow()
        db.session.commit()


class StandardUser(PasswordAccountMixin, db.Model):
    """Registered citizen"""

    __tablename__ = 'standard_users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(30))
    profile_image = db.Column(db.String(500))
    email_notifications = db.Column(db.Boolean, default=True, nullable=False)
    app_notifications = db.Column(db.Boolean, default=True, nullable=False)
    language = db.Column(db.String(10), default='en', nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = db.Column(db.DateTime)

    def __init__(self, name, email, password, **kwargs):
        """Initialize user with hashed password"""
        self.name = name
        self.email = email.strip().lower()
        self.set_password(password)

        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def to_dict(self, include_email=False):
        data = {
            'id': self.id,
            'name': self.name,
            'profile_image': self.profile_image,
            'user_type': UserType.STANDARD_USER.value,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

        if include_email:
            data['email'] = self.email
            data['phone'] = self.phone
            data['email_notifications'] = self.email_notifications

        return data

    def settings(self):
        return {
            'email_notifications': self.email_notifications,
            'app_notifications': self.app_notifications,
            'language': self.language,
        }

    def __repr__(self):
        return f'<StandardUser {self.email}>'


class AnonymousUser(db.Model):
    """Citizen identified only by a generated access code"""

    __tablename__ = 'anonymous_users'

    # Access codes never outlive this many days
    MAX_LIFETIME_DAYS = 90

    id = db.Column(db.Integer, primary_key=True)
    access_code = db.Column(db.String(12), unique=True, nullable=False, index=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
    last_login = db.Column(db.DateTime)
    usage_count = db.Column(db.Integer, default=0, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __init__(self, expiry_days=30, access_code=None):
        self.access_code = access_code or AnonymousUser.generate_access_code()
        self.is_active = True
        self.usage_count = 0
        self.set_expiry(expiry_days)

    @staticmethod
    def generate_access_code():
        """Random code of the form SAY000000000"""
        return f'SAY{secrets.randbelow(1_000_000_000):09d}'

    @staticmethod
    def find_by_access_code(access_code):
        return AnonymousUser.query.filter(
            AnonymousUser.access_code == access_code,
            AnonymousUser.is_active.is_(True),
            AnonymousUser.expires_at > datetime.utcnow()
        ).first()

    def set_expiry(self, days):
        now = datetime.utcnow()
        self.expires_at = min(now + timedelta(days=days), now + timedelta(days=self.MAX_LIFETIME_DAYS))

    def is_expired(self):
        return self.expires_at < datetime.utcnow()

    def record_login(self):
        self.usage_count = (self.usage_count or 0) + 1
        self.last_login = datetime.utcnow()
        db.session.commit()

    def to_dict(self):
        return {
            'id': self.id,
            'access_code': self.access_code,
            'user_type': UserType.ANONYMOUS_USER.value,
            'is_active': self.is_active,
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
        }

    def __repr__(self):
        return f'<AnonymousUser {self.access_code}>'


class Agent(PasswordAccountMixin, db.Model):
    """Agency representative handling complaints of one agency"""

    __tablename__ = 'agents'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(30))
    agency_id = db.Column(db.Integer, db.ForeignKey('agencies.id'), nullable=False, index=True)
    role = db.Column(db.String(20), default=AgentRole.AGENT.value, nullable=False)
    position = db.Column(db.String(100))
    department = db.Column(db.String(100))
    profile_image = db.Column(db.String(500))
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = db.Column(db.DateTime)

    def __init__(self, name, email, password, agency_id, **kwargs):
        self.name = name
        self.email = email.strip().lower()
        self.agency_id = agency_id
        self.set_password(password)

        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def to_dict(self, include_email=False):
        data = {
            'id': self.id,
            'name': self.name,
            'user_type': UserType.AGENT.value,
            'role': self.role,
            'position': self.position,
            'department': self.department,
            'agency': self.agency.to_summary() if self.agency else None,
            'profile_image': self.profile_image,
            'is_active': self.is_active,
        }

        if include_email:
            data['email'] = self.email
            data['phone'] = self.phone
            data['last_login'] = self.last_login.isoformat() if self.last_login else None

        return data

    def __repr__(self):
        return f'<Agent {self.email}>'


class Staff(PasswordAccountMixin, db.Model):
    """Platform staff; role admin grants administrator capabilities"""

    __tablename__ = 'staff'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), default=StaffRole.MODERATOR.value, nullable=False, index=True)
    profile_image = db.Column(db.String(500))
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = db.Column(db.DateTime)

    def __init__(self, name, email, password, role=StaffRole.MODERATOR.value, **kwargs):
        self.name = name
        self.email = email.strip().lower()
        self.role = role
        self.set_password(password)

        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

    @property
    def is_admin(self):
        return self.role == StaffRole.ADMIN.value

    def to_dict(self, include_email=False):
        data = {
            'id': self.id,
            'name': self.name,
            'user_type': UserType.STAFF.value,
            'role': self.role,
            'profile_image': self.profile_image,
            'is_active': self.is_active,
        }

        if include_email:
            data['email'] = self.email
            data['last_login'] = self.last_login.isoformat() if self.last_login else None

        return data

    def __repr__(self):
        return f'<Staff {self.email} ({self.role})>'
