"""
Feedback Routes
Citizen satisfaction ratings on finished complaints and agency replies
"""

from flask import Blueprint, g, request
from sqlalchemy import func

from extensions import db
from sayit.errors import Conflict, Forbidden, NotFound, ValidationError
from sayit.models import Complaint, Feedback, UserType
from sayit.models.complaint import FINISHED_STATUSES
from sayit.services.access import Scope
from sayit.services.lifecycle import get_or_404
from sayit.utils.decorators import role_required
from sayit.utils.pagination import paginate, parse_page_args
from sayit.utils.responses import as_bool, get_payload, success

feedback_bp = Blueprint('feedback', __name__)

CITIZENS = (UserType.STANDARD_USER.value, UserType.ANONYMOUS_USER.value)
HANDLERS = (UserType.AGENT.value, UserType.STAFF.value)


def rating(data, field, errors, required=False):
    value = data.get(field)
    if value in (None, ''):
        if required:
            errors[field] = 'Rating is required'
        return None
    try:
        value = int(value)
    except (TypeError, ValueError):
        errors[field] = 'Rating must be a whole number'
        return None
    if not 1 <= value <= 5:
        errors[field] = 'Rating must be between 1 and 5'
    return value


@feedback_bp.route('', methods=['POST'])
@role_required(*CITIZENS)
def submit_feedback():
    """Rate how a finished complaint was handled"""
    data = get_payload()
    if not data.get('complaint_id'):
        raise ValidationError('Complaint is required', fields={'complaint_id': 'required'})
    complaint = get_or_404(data['complaint_id'])
    if not g.actor.owns(complaint):
        raise Forbidden('You can only give feedback on your own complaints')
    if complaint.status not in [status.value for status in FINISHED_STATUSES]:
        raise ValidationError('Feedback can only be given once a complaint is resolved or closed')
    if Feedback.query.filter_by(complaint_id=complaint.id).first():
        raise Conflict('Feedback already submitted for this complaint')

    errors = {}
    satisfaction = rating(data, 'satisfaction_level', errors, required=True)
    ratings = {field: rating(data, field, errors) for field in Feedback.RATING_FIELDS}
    comment = (data.get('comment') or '').strip() or None
    if comment and len(comment) > 1000:
        errors['comment'] = 'Comment cannot exceed 1000 characters'
    if errors:
        raise ValidationError('Invalid feedback', fields=errors)

    feedback = Feedback(
        complaint_id=complaint.id,
        satisfaction_level=satisfaction,
        comment=comment,
        would_recommend=as_bool(data['would_recommend']) if 'would_recommend' in data else None,
        is_public=as_bool(data.get('is_public')),
        **ratings
    )
    if g.actor.user_type == UserType.STANDARD_USER.value:
        feedback.standard_user_id = g.actor.id
    else:
        feedback.anonymous_user_id = g.actor.id

    db.session.add(feedback)
    db.session.commit()
    return success(feedback.to_dict(), message='Thank you for your feedback', status=201)


@feedback_bp.route('', methods=['GET'])
@role_required(*HANDLERS)
def list_feedback():
    """Feedback for the agent's agency, or all feedback for staff"""
    query = Feedback.query.join(Complaint, Feedback.complaint_id == Complaint.id)
    query = Scope(g.actor).filter_complaints(query)
    if request.args.get('satisfaction_level'):
        query = query.filter(Feedback.satisfaction_level == request.args.get('satisfaction_level', type=int))

    average = query.with_entities(func.avg(Feedback.satisfaction_level)).scalar()
    page, limit = parse_page_args(request.args)
    items, pagination = paginate(query.order_by(Feedback.created_at.desc()), page, limit)
    return success({
        'feedback': [feedback.to_dict() for feedback in items],
        'average_satisfaction': round(float(average), 2) if average is not None else None,
    }, pagination=pagination)


@feedback_bp.route('/complaint/<int:complaint_id>', methods=['GET'])
@role_required()
def get_complaint_feedback(complaint_id):
    complaint = get_or_404(complaint_id)
    Scope(g.actor).require_view(complaint)
    feedback = Feedback.query.filter_by(complaint_id=complaint.id).first()
    if not feedback:
        raise NotFound('No feedback for this complaint')
    return success(feedback.to_dict())


@feedback_bp.route('/<int:feedback_id>/agency-response', methods=['POST'])
@role_required(*HANDLERS)
def respond_to_feedback(feedback_id):
    """Reply to a citizen's feedback on behalf of the agency"""
    feedback = Feedback.query.get(feedback_id)
    if not feedback:
        raise NotFound('Feedback not found')
    Scope(g.actor).require_manage(feedback.complaint)

    content = (get_payload().get('content') or '').strip()
    if not content:
        raise ValidationError('Response content is required', fields={'content': 'required'})

    feedback.add_agency_response(content, g.actor.user_type, g.actor.id)
    db.session.commit()
    return success(feedback.to_dict(), message='Response added to feedback')
