"""
Complaint Routes
"""

from flask import Blueprint, g, request

from sayit.models import UserType
from sayit.services import lifecycle, query
from sayit.services.access import Scope
from sayit.utils.decorators import role_required
from sayit.utils.responses import as_bool, get_files, get_payload, success

complaints_bp = Blueprint('complaints', __name__)

CITIZENS = (UserType.STANDARD_USER.value, UserType.ANONYMOUS_USER.value)
HANDLERS = (UserType.AGENT.value, UserType.STAFF.value)


def complaint_page(actor):
    complaints, pagination = query.search_complaints(Scope(actor), request.args)
    return success(
        [complaint.to_dict(include_internal=actor.is_handler) for complaint in complaints],
        pagination=pagination
    )


@complaints_bp.route('', methods=['POST'])
@role_required(*CITIZENS)
def submit_complaint():
    """Submit a new complaint"""
    complaint = lifecycle.create_complaint(g.actor, get_payload(), get_files())
    return success(complaint.to_dict(include_internal=True),
                   message=f'Complaint submitted successfully. Tracking ID: {complaint.tracking_id}',
                   status=201)


@complaints_bp.route('', methods=['GET'])
@role_required(*HANDLERS)
def list_complaints():
    """List complaints visible to the agent or staff member"""
    return complaint_page(g.actor)


@complaints_bp.route('/mine', methods=['GET'])
@role_required(*CITIZENS)
def my_complaints():
    """List the caller's own complaints"""
    return complaint_page(g.actor)


@complaints_bp.route('/<int:complaint_id>', methods=['GET'])
@role_required()
def get_complaint(complaint_id):
    """Get a complaint with its responses"""
    return success(lifecycle.get_complaint(g.actor, complaint_id))


@complaints_bp.route('/<int:complaint_id>', methods=['PUT'])
@role_required()
def update_complaint(complaint_id):
    """Update status, priority, assignment or notes"""
    complaint = lifecycle.update_complaint(g.actor, complaint_id, get_payload())
    return success(complaint.to_dict(include_internal=True, include_responses=True),
                   message='Complaint updated successfully')


@complaints_bp.route('/<int:complaint_id>/responses', methods=['POST'])
@role_required()
def add_response(complaint_id):
    """Add a response to a complaint"""
    data = get_payload()
    response, status_change = lifecycle.add_response(
        g.actor,
        complaint_id,
        data.get('content'),
        is_public=as_bool(data.get('is_public'), default=True),
        files=get_files()
    )

    result = {'response': response.to_dict(), 'status_changed': status_change is not None}
    if status_change:
        result['old_status'], result['new_status'] = status_change
    return success(result, message='Response added successfully', status=201)


@complaints_bp.route('/track/<tracking_id>', methods=['GET'])
def track_complaint(tracking_id):
    """Public status lookup by tracking ID"""
    return success(lifecycle.track(tracking_id))
