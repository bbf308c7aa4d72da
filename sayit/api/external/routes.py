"""
External Routes
Unauthenticated submission and tracking for partner channels and walk-in citizens
"""

from flask import Blueprint

from extensions import limiter
from sayit.models import Agency, Category
from sayit.services import lifecycle
from sayit.utils.responses import get_files, get_payload, success

external_bp = Blueprint('external', __name__)


@external_bp.route('/complaints', methods=['POST'])
@limiter.limit("30 per hour")
def submit_complaint():
    """Submit a complaint without an account"""
    complaint = lifecycle.create_complaint(None, get_payload(), get_files())
    return success({
        'tracking_id': complaint.tracking_id,
        'status': complaint.status,
        'agency': complaint.agency.to_summary() if complaint.agency else None,
        'created_at': complaint.created_at.isoformat(),
    }, message=f'Complaint submitted successfully. Tracking ID: {complaint.tracking_id}', status=201)


@external_bp.route('/track/<tracking_id>', methods=['GET'])
def track_complaint(tracking_id):
    return success(lifecycle.track(tracking_id))


@external_bp.route('/agencies', methods=['GET'])
def list_agencies():
    return success([agency.to_dict(include_contact=True) for agency in Agency.find_active()])


@external_bp.route('/categories', methods=['GET'])
def list_categories():
    return success([category.to_dict() for category in Category.find_active()])
