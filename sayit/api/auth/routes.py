"""
Authentication Routes
Citizens, anonymous access codes, agents and staff; password recovery and self-service profile
"""

import re

from flask import Blueprint, current_app, g
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    jwt_required
)
from extensions import db, limiter
from sayit.errors import AuthenticationError, Conflict, Forbidden, ValidationError
from sayit.models import Agent, AnonymousUser, PasswordResetToken, Staff, StandardUser, UserType
from sayit.services.access import Actor
from sayit.services.email_service import EmailService
from sayit.utils.decorators import role_required
from sayit.utils.responses import as_bool, get_payload, success

auth_bp = Blueprint('auth', __name__)

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
MIN_PASSWORD_LENGTH = 6
LANGUAGES = ('en', 'fr', 'rw')
RESET_REQUESTED = 'If an account exists with this email, a password reset link has been sent'

# Accounts that sign in with a password, by user type
PASSWORD_ACCOUNTS = {
    UserType.STANDARD_USER.value: StandardUser,
    UserType.AGENT.value: Agent,
    UserType.STAFF.value: Staff,
}

# Self-service profile fields and their length limits
PROFILE_FIELDS = {
    UserType.STANDARD_USER.value: {'name': 100, 'phone': 30, 'profile_image': 500},
    UserType.AGENT.value: {'name': 100, 'phone': 30, 'profile_image': 500},
    UserType.STAFF.value: {'name': 100, 'profile_image': 500},
}


def login_limit():
    return current_app.config['LOGIN_RATE_LIMIT']


def issue_tokens(account, user_type):
    """Access and refresh tokens carrying the account's role claims"""
    claims = Actor.claims_for(account, user_type)
    return {
        'access_token': create_access_token(identity=str(account.id), additional_claims=claims),
        'refresh_token': create_refresh_token(identity=str(account.id), additional_claims=claims),
    }


def password_login(model, user_type):
    data = get_payload()
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''
    if not email or not password:
        raise ValidationError('Email and password are required',
                              fields={'email': 'required', 'password': 'required'})

    account = model.query.filter_by(email=email).first()
    if not account or not account.check_password(password):
        raise AuthenticationError('Invalid email or password', error='invalid_credentials')
    if not account.is_active:
        raise Forbidden('Account is deactivated', error='account_inactive')

    account.update_last_login()
    current_app.logger.info(f'{user_type} {account.id} logged in')
    return success({'user': account.to_dict(include_email=True), **issue_tokens(account, user_type)},
                   message='Login successful')


@auth_bp.route('/register', methods=['POST'])
@limiter.limit("10 per hour")
def register():
    """Register a new citizen account"""
    data = get_payload()

    errors = {}
    name = (data.get('name') or '').strip()
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''
    if not name:
        errors['name'] = 'Name is required'
    if not EMAIL_PATTERN.match(email):
        errors['email'] = 'A valid email is required'
    if len(password) < MIN_PASSWORD_LENGTH:
        errors['password'] = f'Password must be at least {MIN_PASSWORD_LENGTH} characters'
    if errors:
        raise ValidationError('Invalid registration', fields=errors)

    if StandardUser.query.filter_by(email=email).first():
        raise Conflict('Email already registered')

    user = StandardUser(name=name, email=email, password=password, phone=data.get('phone'))
    db.session.add(user)
    db.session.commit()

    current_app.logger.info(f'Standard user {user.id} registered')
    return success({'user': user.to_dict(include_email=True),
                    **issue_tokens(user, UserType.STANDARD_USER.value)},
                   message='User registered successfully', status=201)


@auth_bp.route('/login', methods=['POST'])
@limiter.limit(login_limit)
def login():
    """Login a registered citizen"""
    return password_login(StandardUser, UserType.STANDARD_USER.value)


@auth_bp.route('/agent/login', methods=['POST'])
@limiter.limit(login_limit)
def agent_login():
    """Login an agency agent"""
    return password_login(Agent, UserType.AGENT.value)


@auth_bp.route('/staff/login', methods=['POST'])
@limiter.limit(login_limit)
def staff_login():
    """Login platform staff"""
    return password_login(Staff, UserType.STAFF.value)


@auth_bp.route('/anonymous/generate', methods=['POST'])
@limiter.limit("20 per hour")
def generate_anonymous():
    """Issue a new anonymous access code"""
    expiry_days = current_app.config['ANONYMOUS_CODE_EXPIRY_DAYS']

    for _ in range(10):
        code = AnonymousUser.generate_access_code()
        if not AnonymousUser.query.filter_by(access_code=code).first():
            break
    else:
        raise Conflict('Could not allocate an access code, please retry')

    anonymous = AnonymousUser(expiry_days=expiry_days, access_code=code)
    db.session.add(anonymous)
    db.session.commit()

    return success({
        'user': anonymous.to_dict(),
        'access_code': anonymous.access_code,
        **issue_tokens(anonymous, UserType.ANONYMOUS_USER.value)
    }, message='Keep this access code to return to your complaints', status=201)


@auth_bp.route('/anonymous/login', methods=['POST'])
@limiter.limit(login_limit)
def anonymous_login():
    """Login with an anonymous access code"""
    data = get_payload()
    code = (data.get('access_code') or '').strip().upper()
    if not code:
        raise ValidationError('Access code is required', fields={'access_code': 'required'})

    anonymous = AnonymousUser.find_by_access_code(code)
    if not anonymous:
        raise AuthenticationError('Invalid or expired access code', error='invalid_access_code')

    anonymous.record_login()
    return success({'user': anonymous.to_dict(), **issue_tokens(anonymous, UserType.ANONYMOUS_USER.value)},
                   message='Login successful')


def check_new_password(password, errors, field='new_password'):
    if len(password) < MIN_PASSWORD_LENGTH:
        errors[field] = f'Password must be at least {MIN_PASSWORD_LENGTH} characters'


@auth_bp.route('/forgot-password', methods=['POST'])
@limiter.limit("3 per hour")
def forgot_password():
    """Request a password reset link; the reply is the same whether or not the account exists"""
    data = get_payload()
    email = (data.get('email') or '').strip().lower()
    user_type = data.get('user_type') or UserType.STANDARD_USER.value

    errors = {}
    if not EMAIL_PATTERN.match(email):
        errors['email'] = 'A valid email is required'
    if user_type not in PASSWORD_ACCOUNTS:
        errors['user_type'] = 'Must be standard_user, agent or staff'
    if errors:
        raise ValidationError('Invalid reset request', fields=errors)

    account = PASSWORD_ACCOUNTS[user_type].query.filter_by(email=email).first()
    if account and account.is_active:
        PasswordResetToken.revoke_for(user_type, account.id)
        reset_token = PasswordResetToken(user_type, account.id,
                                         expiry_minutes=current_app.config['PASSWORD_RESET_EXPIRY_MINUTES'])
        db.session.add(reset_token)
        db.session.commit()

        if not EmailService.send_password_reset_email(account, reset_token.token, user_type):
            current_app.logger.warning(f'Password reset email to {user_type} {account.id} was not delivered')
        current_app.logger.info(f'Password reset requested for {user_type} {account.id}')

    return success(message=RESET_REQUESTED)


@auth_bp.route('/reset-password', methods=['POST'])
@limiter.limit("5 per hour")
def reset_password():
    """Set a new password with a reset token"""
    data = get_payload()
    token = (data.get('token') or '').strip()
    new_password = data.get('new_password') or ''

    errors = {}
    if not token:
        errors['token'] = 'Token is required'
    check_new_password(new_password, errors)
    if errors:
        raise ValidationError('Invalid password reset', fields=errors)

    reset_token = PasswordResetToken.verify_token(token)
    account = None
    if reset_token:
        account = PASSWORD_ACCOUNTS[reset_token.account_type].query.get(reset_token.account_id)
    if not account or not account.is_active:
        raise ValidationError('Invalid or expired reset token', error='invalid_reset_token')

    account.set_password(new_password)
    reset_token.mark_as_used()

    current_app.logger.info(f'Password reset for {reset_token.account_type} {account.id}')
    return success(message='Password reset successful')


@auth_bp.route('/change-password', methods=['POST'])
@role_required(*PASSWORD_ACCOUNTS)
def change_password():
    """Change the password of the signed-in account"""
    data = get_payload()
    current_password = data.get('current_password') or ''
    new_password = data.get('new_password') or ''

    errors = {}
    if not current_password:
        errors['current_password'] = 'Current password is required'
    check_new_password(new_password, errors)
    if current_password and current_password == new_password:
        errors['new_password'] = 'New password must differ from the current one'
    if errors:
        raise ValidationError('Invalid password change', fields=errors)

    account = g.actor.load()
    if not account.check_password(current_password):
        raise AuthenticationError('Current password is incorrect', error='invalid_credentials')

    account.set_password(new_password)
    PasswordResetToken.revoke_for(g.actor.user_type, account.id)
    db.session.commit()

    current_app.logger.info(f'{g.actor} changed their password')
    return success(message='Password changed successfully')


@auth_bp.route('/profile', methods=['GET'])
@role_required(*PASSWORD_ACCOUNTS)
def get_profile():
    """Profile of the signed-in account"""
    return success({'user': g.actor.load().to_dict(include_email=True)})


@auth_bp.route('/profile', methods=['PUT'])
@role_required(*PASSWORD_ACCOUNTS)
def update_profile():
    """Update name, phone or profile image; other fields are ignored"""
    data = get_payload()
    account = g.actor.load()

    errors = {}
    changes = {}
    for field, max_length in PROFILE_FIELDS[g.actor.user_type].items():
        if field not in data:
            continue
        value = data[field]
        if value is not None and not isinstance(value, str):
            errors[field] = 'Must be text'
            continue
        value = (value or '').strip()
        if field == 'name' and not value:
            errors[field] = 'Name is required'
        elif len(value) > max_length:
            errors[field] = f'Must be at most {max_length} characters'
        else:
            changes[field] = value or None
    if errors:
        raise ValidationError('Invalid profile', fields=errors)

    for field, value in changes.items():
        setattr(account, field, value)
    db.session.commit()

    return success({'user': account.to_dict(include_email=True)}, message='Profile updated successfully')


@auth_bp.route('/settings', methods=['GET'])
@role_required(UserType.STANDARD_USER.value)
def get_settings():
    """Notification and language preferences of a citizen"""
    return success({'settings': g.actor.load().settings()})


@auth_bp.route('/settings', methods=['PUT'])
@role_required(UserType.STANDARD_USER.value)
def update_settings():
    """Update notification and language preferences"""
    data = get_payload()
    user = g.actor.load()

    language = data.get('language')
    if language is not None and language not in LANGUAGES:
        raise ValidationError('Invalid settings', fields={'language': f"Must be one of {', '.join(LANGUAGES)}"})

    if 'email_notifications' in data:
        user.email_notifications = as_bool(data['email_notifications'])
    if 'app_notifications' in data:
        user.app_notifications = as_bool(data['app_notifications'])
    if language is not None:
        user.language = language
    db.session.commit()

    return success({'settings': user.settings()}, message='Settings updated successfully')


@auth_bp.route('/me', methods=['GET'])
@role_required()
def get_current_user():
    """Get the authenticated account"""
    account = g.actor.load()
    if isinstance(account, AnonymousUser):
        return success({'user': account.to_dict()})
    return success({'user': account.to_dict(include_email=True)})


@auth_bp.route('/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh():
    """Exchange a refresh token for a new access token"""
    actor = Actor.from_jwt()
    account = actor.load()
    claims = Actor.claims_for(account, actor.user_type)
    return success({'access_token': create_access_token(identity=str(account.id), additional_claims=claims)})
