"""
Password Reset Token Model
Single-use reset links for citizens, agents and staff
"""

from extensions import db
from datetime import datetime, timedelta
import hashlib
import secrets


class PasswordResetToken(db.Model):
    """Reset token; only the sha256 digest of the emailed token is stored"""

    __tablename__ = 'password_reset_tokens'

    id = db.Column(db.Integer, primary_key=True)
    account_type = db.Column(db.String(20), nullable=False)
    account_id = db.Column(db.Integer, nullable=False)
    token_hash = db.Column(db.String(64), unique=True, nullable=False, index=True)
    expires_at = db.Column(db.DateTime, nullable=False)
    used = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.Index('ix_password_reset_tokens_account', 'account_type', 'account_id'),
    )

    def __init__(self, account_type, account_id, expiry_minutes=60):
        """Initialize with a generated token; the raw value is only kept on this instance"""
        self.account_type = account_type
        self.account_id = account_id
        self.token = secrets.token_urlsafe(32)
        self.token_hash = PasswordResetToken.digest(self.token)
        self.used = False
        self.expires_at = datetime.utcnow() + timedelta(minutes=expiry_minutes)

    @staticmethod
    def digest(token):
        return hashlib.sha256(token.encode('utf-8')).hexdigest()

    def is_valid(self):
        """Check if token is valid"""
        return not self.used and datetime.utcnow() < self.expires_at

    def mark_as_used(self):
        """Mark token as used"""
        self.used = True
        db.session.commit()

    @staticmethod
    def verify_token(token):
        """Verify and return token if valid"""
        if not token:
            return None

        reset_token = PasswordResetToken.query.filter_by(token_hash=PasswordResetToken.digest(token)).first()
        if not reset_token or not reset_token.is_valid():
            return None

        return reset_token

    @staticmethod
    def revoke_for(account_type, account_id):
        """Spend every outstanding token of an account"""
        PasswordResetToken.query.filter_by(
            account_type=account_type, account_id=account_id, used=False
        ).update({'used': True}, synchronize_session=False)

    def __repr__(self):
        return f'<PasswordResetToken {self.account_type}:{self.account_id}>'
