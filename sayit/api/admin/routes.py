"""
Admin Routes
Directory and account management, platform statistics and system messages
"""

from flask import Blueprint, current_app, g, request
from sqlalchemy import or_

from extensions import db
from sayit.errors import Conflict, NotFound, ValidationError
from sayit.models import (
    Agency, Agent, AgentRole, Category, NotificationPriority, Recipient, Staff, StaffRole,
    StandardUser, UserType
)
from sayit.services import directory, notifications, query
from sayit.utils.decorators import admin_required
from sayit.utils.pagination import paginate, parse_page_args
from sayit.utils.responses import as_bool, get_payload, success

admin_bp = Blueprint('admin', __name__)

AGENT_FIELDS = ('name', 'phone', 'position', 'department', 'profile_image', 'is_active')
STAFF_FIELDS = ('name', 'profile_image', 'is_active')


def require_account_fields(data, roles, default_role):
    errors = {}
    for field in ('name', 'email', 'password'):
        if not (data.get(field) or '').strip():
            errors[field] = f'{field} is required'
    role = data.get('role') or default_role
    if role not in roles:
        errors['role'] = f"Must be one of {', '.join(roles)}"
    if errors:
        raise ValidationError('Invalid account', fields=errors)
    return role


def email_taken(model, email, exclude_id=None):
    query_ = model.query.filter_by(email=email.strip().lower())
    if exclude_id is not None:
        query_ = query_.filter(model.id != exclude_id)
    return query_.first() is not None


# Dashboard

@admin_bp.route('/dashboard/stats', methods=['GET'])
@admin_required()
def dashboard_stats():
    """Get platform-wide statistics"""
    return success(query.overall_stats())


# Categories

@admin_bp.route('/categories', methods=['GET'])
@admin_required()
def list_categories():
    categories = Category.query.order_by(Category.name).all()
    return success([category.to_dict() for category in categories])


@admin_bp.route('/categories', methods=['POST'])
@admin_required()
def create_category():
    category = directory.create_category(get_payload())
    return success(category.to_dict(), message='Category created successfully', status=201)


@admin_bp.route('/categories/<int:category_id>', methods=['PUT'])
@admin_required()
def update_category(category_id):
    category = directory.update_category(category_id, get_payload())
    return success(category.to_dict(), message='Category updated successfully')


@admin_bp.route('/categories/<int:category_id>', methods=['DELETE'])
@admin_required()
def deactivate_category(category_id):
    directory.deactivate_category(category_id)
    return success(message='Category deactivated')


# Agencies

@admin_bp.route('/agencies', methods=['GET'])
@admin_required()
def list_agencies():
    agencies = Agency.query.order_by(Agency.name).all()
    return success([agency.to_dict(include_contact=True) for agency in agencies])


@admin_bp.route('/agencies', methods=['POST'])
@admin_required()
def create_agency():
    agency = directory.create_agency(get_payload())
    return success(agency.to_dict(include_contact=True), message='Agency created successfully', status=201)


@admin_bp.route('/agencies/<int:agency_id>', methods=['PUT'])
@admin_required()
def update_agency(agency_id):
    agency = directory.update_agency(agency_id, get_payload())
    return success(agency.to_dict(include_contact=True), message='Agency updated successfully')


@admin_bp.route('/agencies/<int:agency_id>', methods=['DELETE'])
@admin_required()
def deactivate_agency(agency_id):
    directory.deactivate_agency(agency_id)
    return success(message='Agency deactivated')


# Agents

@admin_bp.route('/agents', methods=['GET'])
@admin_required()
def list_agents():
    query_ = Agent.query
    if request.args.get('agency_id'):
        query_ = query_.filter_by(agency_id=request.args.get('agency_id', type=int))
    page, limit = parse_page_args(request.args, default_limit=20)
    agents, pagination = paginate(query_.order_by(Agent.name), page, limit)
    return success([agent.to_dict(include_email=True) for agent in agents], pagination=pagination)


@admin_bp.route('/agents', methods=['POST'])
@admin_required()
def create_agent():
    data = get_payload()
    role = require_account_fields(data, [role.value for role in AgentRole], AgentRole.AGENT.value)
    try:
        agency = directory.get_agency(int(data.get('agency_id') or 0))
    except (TypeError, ValueError, NotFound):
        raise ValidationError('Invalid account', fields={'agency_id': 'Active agency required'})
    if email_taken(Agent, data['email']):
        raise Conflict('An agent with this email already exists')

    agent = Agent(
        name=data['name'].strip(),
        email=data['email'],
        password=data['password'],
        agency_id=agency.id,
        role=role,
        phone=data.get('phone'),
        position=data.get('position'),
        department=data.get('department')
    )
    db.session.add(agent)
    db.session.commit()
    current_app.logger.info(f'Agent {agent.id} created for agency {agency.id} by {g.actor}')
    return success(agent.to_dict(include_email=True), message='Agent created successfully', status=201)


@admin_bp.route('/agents/<int:agent_id>', methods=['PUT'])
@admin_required()
def update_agent(agent_id):
    agent = Agent.query.get(agent_id)
    if not agent:
        raise NotFound('Agent not found')

    data = get_payload()
    if 'email' in data:
        if email_taken(Agent, data['email'], exclude_id=agent.id):
            raise Conflict('An agent with this email already exists')
        agent.email = data['email'].strip().lower()
    if 'agency_id' in data:
        agent.agency_id = directory.get_agency(data['agency_id']).id
    if 'role' in data:
        if data['role'] not in [role.value for role in AgentRole]:
            raise ValidationError('Invalid account', fields={'role': 'Unknown agent role'})
        agent.role = data['role']
    if data.get('password'):
        agent.set_password(data['password'])
    for field in AGENT_FIELDS:
        if field in data:
            setattr(agent, field, as_bool(data[field]) if field == 'is_active' else data[field])

    db.session.commit()
    return success(agent.to_dict(include_email=True), message='Agent updated successfully')


@admin_bp.route('/agents/<int:agent_id>', methods=['DELETE'])
@admin_required()
def deactivate_agent(agent_id):
    agent = Agent.query.get(agent_id)
    if not agent:
        raise NotFound('Agent not found')
    agent.is_active = False
    db.session.commit()
    return success(message='Agent deactivated')


# Staff

@admin_bp.route('/staff', methods=['GET'])
@admin_required()
def list_staff():
    members = Staff.query.order_by(Staff.name).all()
    return success([member.to_dict(include_email=True) for member in members])


@admin_bp.route('/staff', methods=['POST'])
@admin_required()
def create_staff():
    data = get_payload()
    role = require_account_fields(data, [role.value for role in StaffRole], StaffRole.MODERATOR.value)
    if email_taken(Staff, data['email']):
        raise Conflict('A staff member with this email already exists')

    member = Staff(name=data['name'].strip(), email=data['email'], password=data['password'], role=role)
    db.session.add(member)
    db.session.commit()
    current_app.logger.info(f'Staff {member.id} ({role}) created by {g.actor}')
    return success(member.to_dict(include_email=True), message='Staff member created successfully', status=201)


@admin_bp.route('/staff/<int:staff_id>', methods=['PUT'])
@admin_required()
def update_staff(staff_id):
    member = Staff.query.get(staff_id)
    if not member:
        raise NotFound('Staff member not found')

    data = get_payload()
    if 'email' in data:
        if email_taken(Staff, data['email'], exclude_id=member.id):
            raise Conflict('A staff member with this email already exists')
        member.email = data['email'].strip().lower()
    if 'role' in data:
        if data['role'] not in [role.value for role in StaffRole]:
            raise ValidationError('Invalid account', fields={'role': 'Unknown staff role'})
        member.role = data['role']
    if data.get('password'):
        member.set_password(data['password'])
    for field in STAFF_FIELDS:
        if field in data:
            setattr(member, field, as_bool(data[field]) if field == 'is_active' else data[field])

    db.session.commit()
    return success(member.to_dict(include_email=True), message='Staff member updated successfully')


@admin_bp.route('/staff/<int:staff_id>', methods=['DELETE'])
@admin_required()
def deactivate_staff(staff_id):
    member = Staff.query.get(staff_id)
    if not member:
        raise NotFound('Staff member not found')
    if member.id == g.actor.id:
        raise ValidationError('You cannot deactivate your own account')
    member.is_active = False
    db.session.commit()
    return success(message='Staff member deactivated')


# Citizens

@admin_bp.route('/users', methods=['GET'])
@admin_required()
def list_users():
    """Get registered citizens, optionally filtered by name or email"""
    query_ = StandardUser.query
    search = (request.args.get('search') or '').strip()
    if search:
        pattern = f'%{search}%'
        query_ = query_.filter(or_(StandardUser.name.ilike(pattern), StandardUser.email.ilike(pattern)))
    page, limit = parse_page_args(request.args, default_limit=20)
    users, pagination = paginate(query_.order_by(StandardUser.created_at.desc()), page, limit)
    return success([user.to_dict(include_email=True) for user in users], pagination=pagination)


@admin_bp.route('/users/<int:user_id>/status', methods=['PUT'])
@admin_required()
def set_user_status(user_id):
    user = StandardUser.query.get(user_id)
    if not user:
        raise NotFound('User not found')
    user.is_active = as_bool(get_payload().get('is_active'))
    db.session.commit()
    state = 'activated' if user.is_active else 'deactivated'
    return success(user.to_dict(include_email=True), message=f'User {state}')


# Notifications

def system_message_recipients(data):
    """Expand an audience description into notification recipients"""
    audience = data.get('audience')
    if audience == 'all_users':
        ids = db.session.query(StandardUser.id).filter(StandardUser.is_active.is_(True))
        return [Recipient(UserType.STANDARD_USER.value, id) for id, in ids]
    if audience == 'all_agents':
        ids = db.session.query(Agent.id).filter(Agent.is_active.is_(True))
        return [Recipient(UserType.AGENT.value, id) for id, in ids]
    if audience == 'agency':
        ids = db.session.query(Agent.id).filter(
            Agent.is_active.is_(True), Agent.agency_id == data.get('agency_id'))
        return [Recipient(UserType.AGENT.value, id) for id, in ids]

    try:
        return [Recipient(entry['kind'], entry['id']) for entry in data.get('recipients') or []]
    except (KeyError, TypeError, ValueError):
        raise ValidationError('Invalid recipients',
                              fields={'recipients': 'List of {kind, id} with kind standard_user, '
                                                    'anonymous_user or agent'})


def positive_days(data, field, errors, default=None):
    """Whole number of days, at least 1; default when the field is absent"""
    raw = data.get(field)
    if raw is None or raw == '':
        return default
    try:
        days = int(raw)
    except (TypeError, ValueError):
        days = 0
    if isinstance(raw, bool) or days < 1:
        errors[field] = 'Must be a whole number of days, at least 1'
        return default
    return days


@admin_bp.route('/notifications/system', methods=['POST'])
@admin_required()
def send_system_message():
    """Send a system message to users or agents"""
    data = get_payload()
    errors = {}
    title = (data.get('title') or '').strip()
    message = (data.get('message') or '').strip()
    priority = data.get('priority') or NotificationPriority.NORMAL.value
    if not title:
        errors['title'] = 'Title is required'
    if not message:
        errors['message'] = 'Message is required'
    if priority not in [member.value for member in NotificationPriority]:
        errors['priority'] = 'Must be low, normal or high'
    expiry_days = positive_days(data, 'expiry_days', errors, default=30)
    if errors:
        raise ValidationError('Invalid system message', fields=errors)

    recipients = system_message_recipients(data)
    if not recipients:
        raise ValidationError('No recipients matched', fields={'recipients': 'No recipients'})

    sent = notifications.broadcast(recipients, title, message, priority, expiry_days, data.get('actions'))
    current_app.logger.info(f'System message "{title}" sent to {sent} recipients by {g.actor}')
    return success({'sent': sent, 'requested': len(recipients)}, message='System message sent', status=201)


@admin_bp.route('/notifications/purge', methods=['POST'])
@admin_required()
def purge_notifications():
    """Delete expired notifications and read ones older than the retention window"""
    data = get_payload() if request.data else {}
    errors = {}
    days = positive_days(data, 'days', errors)
    if errors:
        raise ValidationError('Invalid purge', fields=errors)
    expired = notifications.purge_expired()
    old_read = notifications.purge_old_read(days_old=days)
    return success({'expired_deleted': expired, 'read_deleted': old_read}, message='Notifications purged')
