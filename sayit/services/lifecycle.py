"""
Complaint Lifecycle Engine
Creation, status changes, responses and reads of complaints
"""

import logging
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from sayit.errors import Forbidden, NotFound, UpstreamFailure, ValidationError
from sayit.models import (
    Agent, Complaint, ComplaintPriority, ComplaintStatus, Response, SubmissionType, UserType
)
from sayit.services import notifications, storage
from sayit.services.access import Scope
from sayit.services.directory import get_agency, get_category, resolve_agency
from sayit.services.email_service import EmailService
from sayit.utils.responses import as_bool

logger = logging.getLogger(__name__)

TITLE_MAX = 100
CONTENT_MAX = 2000
TRACKING_ID_ATTEMPTS = 10

# Public handler responses move these straight to in_progress
AUTO_PROGRESS_STATUSES = (
    ComplaintStatus.PENDING.value,
    ComplaintStatus.UNDER_REVIEW.value,
    ComplaintStatus.ASSIGNED.value,
)

# A submitter writing on one of these reopens the complaint
REOPENABLE_STATUSES = (
    ComplaintStatus.RESOLVED.value,
    ComplaintStatus.CLOSED.value,
    ComplaintStatus.REJECTED.value,
)

CONTACT_METHODS = ('email', 'phone', 'none')


def _text(data, field, max_length, label, errors):
    value = data.get(field)
    value = value.strip() if isinstance(value, str) else ''
    if not value:
        errors[field] = f'{label} is required'
    elif len(value) > max_length:
        errors[field] = f'{label} cannot exceed {max_length} characters'
    return value


def _parse_date(value, field, errors):
    if value in (None, ''):
        return None
    try:
        return datetime.fromisoformat(str(value).replace('Z', '+00:00')).replace(tzinfo=None)
    except ValueError:
        errors[field] = 'Must be an ISO 8601 date'
        return None


def _parse_priority(value, errors, default=ComplaintPriority.MEDIUM):
    if value in (None, ''):
        return default
    priority = ComplaintPriority.parse(value)
    if priority is None:
        errors['priority'] = f'Unknown priority: {value}'
    return priority


def _parse_tags(value, errors):
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(',')
    if not isinstance(value, (list, tuple)):
        errors['tags'] = 'Tags must be a list'
        return []
    return [str(tag).strip() for tag in value if str(tag).strip()]


def _section(data, field, errors):
    """Nested object such as contact_info or location; {} when absent"""
    value = data.get(field)
    if value in (None, ''):
        return {}
    if not isinstance(value, dict):
        errors[field] = 'Must be an object'
        return {}
    return value


def new_tracking_id():
    """Generate a tracking ID that is not already taken"""
    for _ in range(TRACKING_ID_ATTEMPTS):
        tracking_id = Complaint.generate_tracking_id()
        if not Complaint.find_by_tracking_id(tracking_id):
            return tracking_id
    raise UpstreamFailure('Could not allocate a tracking ID')


def get_or_404(complaint_id):
    complaint = Complaint.query.get(complaint_id)
    if not complaint:
        raise NotFound('Complaint not found')
    return complaint


def _commit(stored_files=()):
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        for attachment in stored_files:
            storage.delete_attachment(attachment)
        logger.error(f'Complaint write failed: {e}')
        raise UpstreamFailure('Could not save complaint') from e


def create_complaint(actor, data, files=(), submission_type=None):
    """
    Validate and store a new complaint

    Args:
        actor: submitting Actor, or None for an external submission
        data: complaint fields (title, description, category_id, ...)
        files: uploaded attachments
        submission_type: channel override, defaults to web or external

    Returns:
        The stored Complaint
    """
    if actor is not None and not actor.is_citizen:
        raise Forbidden('Only citizens can submit complaints')

    errors = {}
    title = _text(data, 'title', TITLE_MAX, 'Title', errors)
    description = _text(data, 'description', CONTENT_MAX, 'Description', errors)
    priority = _parse_priority(data.get('priority'), errors)
    tags = _parse_tags(data.get('tags'), errors)

    category_id = data.get('category_id') or data.get('category')
    if not category_id:
        errors['category_id'] = 'Category is required'

    if submission_type is None:
        submission_type = data.get('submission_type') or (
            SubmissionType.EXTERNAL.value if actor is None else SubmissionType.WEB.value)
    if submission_type not in {member.value for member in SubmissionType}:
        errors['submission_type'] = f'Unknown submission type: {submission_type}'

    contact = _section(data, 'contact_info', errors)
    location = _section(data, 'location', errors)
    preferred = contact.get('preferred_method') or data.get('preferred_contact') or 'none'
    if preferred not in CONTACT_METHODS:
        errors['preferred_contact'] = 'Must be email, phone or none'

    if errors:
        raise ValidationError('Invalid complaint', fields=errors)

    try:
        category = get_category(int(category_id))
    except (TypeError, ValueError):
        raise ValidationError('Invalid complaint', fields={'category_id': 'Must be an id'})
    except NotFound:
        raise ValidationError('Invalid complaint', fields={'category_id': 'Category not found'})

    files = storage.validate_files(files, current_app.config['MAX_COMPLAINT_ATTACHMENTS'])

    agency = resolve_agency(category, data.get('agency_id'))

    complaint = Complaint(
        title=title,
        description=description,
        category=category,
        agency=agency,
        priority=priority.value,
        status=ComplaintStatus.PENDING.value,
        submission_type=submission_type,
        tracking_id=new_tracking_id(),
        contact_email=contact.get('email') or data.get('contact_email'),
        contact_phone=contact.get('phone') or data.get('contact_phone'),
        preferred_contact=preferred,
        address=location.get('address') or data.get('address'),
        district=location.get('district') or data.get('district'),
        sector=location.get('sector') or data.get('sector'),
        cell=location.get('cell') or data.get('cell'),
        tags=tags,
        is_public=as_bool(data.get('is_public'), default=True),
    )

    if actor is not None:
        if actor.user_type == UserType.STANDARD_USER.value:
            complaint.standard_user_id = actor.id
            complaint.is_anonymous = as_bool(data.get('is_anonymous'))
        elif actor.user_type == UserType.ANONYMOUS_USER.value:
            complaint.anonymous_user_id = actor.id
            complaint.is_anonymous = True

    stored = storage.store_files(files, folder='complaints')
    complaint.attachments = stored

    db.session.add(complaint)
    db.session.add(Response.system(complaint, 'Complaint received and pending review.'))
    _commit(stored)

    logger.info(f'Complaint {complaint.tracking_id} created, agency={complaint.agency_id}')

    notifications.dispatch(notifications.SubmissionConfirmed(complaint))
    if actor is None and complaint.contact_email:
        EmailService.send_tracking_confirmation(complaint, complaint.contact_email)

    return complaint


def _status_note(old_status, new_status, note=None):
    content = f'Status changed from {old_status} to {new_status}.'
    if note:
        content = f'{content} {note}'
    return content


def update_complaint(actor, complaint_id, changes):
    """
    Apply a handler's changes to a complaint

    Authorization is checked before anything is written. A status change
    records a system response and notifies the submitter; priority, notes,
    tags and due date changes are silent.
    """
    complaint = get_or_404(complaint_id)
    scope = Scope(actor)
    scope.require_manage(complaint)

    errors = {}
    new_status = None
    if changes.get('status') not in (None, ''):
        new_status = ComplaintStatus.parse(changes['status'])
        if new_status is None:
            errors['status'] = f"Unknown status: {changes['status']}"

    priority = None
    if 'priority' in changes:
        priority = _parse_priority(changes['priority'], errors, default=None)

    due_date = _parse_date(changes.get('due_date'), 'due_date', errors) if 'due_date' in changes else None
    tags = _parse_tags(changes['tags'], errors) if 'tags' in changes else None

    if errors:
        raise ValidationError('Invalid update', fields=errors)

    target_agency_id = complaint.agency_id
    requested_agency = changes.get('agency_id')
    if requested_agency not in (None, ''):
        try:
            requested_agency = int(requested_agency)
        except (TypeError, ValueError):
            raise ValidationError('Invalid update', fields={'agency_id': 'Must be an id'})

        if requested_agency != complaint.agency_id:
            if not scope.can_reassign_agency():
                raise Forbidden('Only staff can reassign a complaint to another agency')
            try:
                target_agency_id = get_agency(requested_agency).id
            except NotFound:
                raise ValidationError('Invalid update', fields={'agency_id': 'Agency not found'})

    assign_agent = None
    clear_agent = False
    if 'assigned_to' in changes:
        assigned_to = changes['assigned_to']
        if assigned_to in (None, '', 'none'):
            clear_agent = True
        else:
            assign_agent = Agent.query.get(assigned_to)
            if not assign_agent or not assign_agent.is_active or assign_agent.agency_id != target_agency_id:
                raise ValidationError('Invalid update',
                                      fields={'assigned_to': 'Agent not found in this agency'})

    old_status = complaint.status

    if target_agency_id != complaint.agency_id:
        complaint.agency_id = target_agency_id
        if complaint.assigned_agent and complaint.assigned_agent.agency_id != target_agency_id:
            complaint.assigned_agent_id = None

    if assign_agent is not None:
        complaint.assigned_agent_id = assign_agent.id
        if new_status is None:
            new_status = ComplaintStatus.ASSIGNED
    elif clear_agent:
        complaint.assigned_agent_id = None
        if new_status is None and complaint.status == ComplaintStatus.ASSIGNED.value:
            new_status = ComplaintStatus.PENDING

    if priority is not None:
        complaint.priority = priority.value
    if 'internal_notes' in changes:
        complaint.internal_notes = changes['internal_notes']
    if tags is not None:
        complaint.tags = tags
    if 'due_date' in changes:
        complaint.due_date = due_date

    status_changed = new_status is not None and new_status.value != old_status
    if status_changed:
        complaint.set_status(new_status)
        db.session.add(Response.system(
            complaint,
            _status_note(old_status, new_status.value, changes.get('status_note')),
            old_status=old_status,
            new_status=new_status.value,
        ))

    complaint.touch()
    _commit()

    if status_changed:
        logger.info(f'Complaint {complaint.tracking_id} {old_status} -> {complaint.status} by {actor}')
        notifications.dispatch(notifications.StatusChanged(complaint, old_status, complaint.status))

    return complaint


def add_response(actor, complaint_id, content, is_public=True, files=()):
    """
    Append a response to a complaint thread

    Returns:
        (response, status_change) where status_change is (old, new) or None
    """
    complaint = get_or_404(complaint_id)
    scope = Scope(actor)
    if not scope.can_respond(complaint):
        raise Forbidden('You are not authorized to respond to this complaint')

    errors = {}
    content = _text({'content': content}, 'content', CONTENT_MAX, 'Response', errors)
    if errors:
        raise ValidationError('Invalid response', fields=errors)

    is_public = bool(is_public)
    if not is_public and not scope.can_post_internal(complaint):
        raise Forbidden('Only agents and staff can post internal responses')

    files = storage.validate_files(files, current_app.config['MAX_RESPONSE_ATTACHMENTS'])
    stored = storage.store_files(files, folder='responses')

    response = Response(
        complaint=complaint,
        responder_type=actor.user_type,
        responder_id=actor.id,
        content=content,
        is_public=is_public,
        attachments=stored,
    )
    db.session.add(response)

    old_status = complaint.status
    status_change = None
    reopened = False

    if actor.is_handler and is_public and old_status in AUTO_PROGRESS_STATUSES:
        complaint.set_status(ComplaintStatus.IN_PROGRESS)
        response.old_status = old_status
        response.new_status = ComplaintStatus.IN_PROGRESS.value
        status_change = (old_status, complaint.status)
    elif actor.owns(complaint) and old_status in REOPENABLE_STATUSES:
        complaint.set_status(ComplaintStatus.IN_PROGRESS)
        db.session.add(Response.system(
            complaint,
            'Complaint reopened due to a new response from the submitter.',
            old_status=old_status,
            new_status=ComplaintStatus.IN_PROGRESS.value,
        ))
        status_change = (old_status, complaint.status)
        reopened = True

    complaint.touch()
    _commit(stored)

    if actor.is_handler:
        if is_public:
            notifications.dispatch(notifications.ResponseReceived(complaint, response, actor.user_type))
    elif actor.owns(complaint):
        if reopened:
            notifications.dispatch(notifications.StatusChanged(complaint, old_status, complaint.status))
        notifications.dispatch(notifications.UserResponseRecorded(complaint))

    return response, status_change


def get_complaint(actor, complaint_id):
    """Complaint as the actor may see it"""
    complaint = get_or_404(complaint_id)
    scope = Scope(actor)
    scope.require_view(complaint)
    return complaint.to_dict(include_internal=scope.sees_internal(complaint), include_responses=True)


def track(tracking_id):
    """Public status lookup by tracking ID"""
    complaint = Complaint.find_by_tracking_id((tracking_id or '').strip().upper())
    if not complaint:
        raise NotFound('Complaint not found')
    return complaint.to_tracking_dict()
