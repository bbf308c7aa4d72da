"""
Complaint query and dashboard statistics
"""

from datetime import datetime, time

from sqlalchemy import case, func, or_

from extensions import db
from sayit.errors import ValidationError
from sayit.models import (
    Agency, Agent, AnonymousUser, Category, Complaint, ComplaintPriority, ComplaintStatus,
    StandardUser, SubmissionType
)
from sayit.models.complaint import OPEN_STATUSES
from sayit.utils.pagination import paginate, parse_page_args

SORT_ORDERS = {
    'newest': lambda: (Complaint.created_at.desc(), Complaint.id.desc()),
    'oldest': lambda: (Complaint.created_at.asc(), Complaint.id.asc()),
    'priority': lambda: (
        case(
            (Complaint.priority == ComplaintPriority.URGENT.value, 4),
            (Complaint.priority == ComplaintPriority.HIGH.value, 3),
            (Complaint.priority == ComplaintPriority.MEDIUM.value, 2),
            else_=1,
        ).desc(),
        Complaint.created_at.desc(),
    ),
}
SORT_ORDERS['priority-desc'] = SORT_ORDERS['priority']

UNASSIGNED = 'unassigned'


def _values(raw):
    if raw is None or raw == '':
        return []
    if isinstance(raw, (list, tuple)):
        return [str(value) for value in raw]
    return [value.strip() for value in str(raw).split(',') if value.strip()]


def _date(raw, field, end_of_day=False):
    try:
        value = datetime.fromisoformat(str(raw).replace('Z', '+00:00')).replace(tzinfo=None)
    except ValueError:
        raise ValidationError('Invalid filter', fields={field: 'Must be an ISO 8601 date'})
    if end_of_day and len(str(raw)) == 10:
        value = datetime.combine(value.date(), time.max)
    return value


def apply_filters(query, filters):
    """Narrow a complaint query by the supported filter keys"""
    statuses = []
    for raw in _values(filters.get('status')):
        status = ComplaintStatus.parse(raw)
        if status is None:
            raise ValidationError('Invalid filter', fields={'status': f'Unknown status: {raw}'})
        statuses.append(status.value)
    if statuses:
        query = query.filter(Complaint.status.in_(statuses))

    priorities = []
    for raw in _values(filters.get('priority')):
        priority = ComplaintPriority.parse(raw)
        if priority is None:
            raise ValidationError('Invalid filter', fields={'priority': f'Unknown priority: {raw}'})
        priorities.append(priority.value)
    if priorities:
        query = query.filter(Complaint.priority.in_(priorities))

    submission_types = _values(filters.get('submission_type'))
    known_types = {member.value for member in SubmissionType}
    if any(value not in known_types for value in submission_types):
        raise ValidationError('Invalid filter', fields={'submission_type': 'Unknown submission type'})
    if submission_types:
        query = query.filter(Complaint.submission_type.in_(submission_types))

    category = filters.get('category') or filters.get('category_id')
    if category:
        query = query.filter(Complaint.category_id == category)

    agency = filters.get('agency') or filters.get('agency_id')
    if agency == UNASSIGNED:
        query = query.filter(Complaint.agency_id.is_(None))
    elif agency:
        query = query.filter(Complaint.agency_id == agency)

    assigned_to = filters.get('assigned_to')
    if assigned_to == 'none':
        query = query.filter(Complaint.assigned_agent_id.is_(None))
    elif assigned_to:
        query = query.filter(Complaint.assigned_agent_id == assigned_to)

    search = (filters.get('search') or '').strip()
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(
            Complaint.title.ilike(pattern),
            Complaint.description.ilike(pattern),
            Complaint.tracking_id.ilike(pattern),
        ))

    if filters.get('start_date'):
        query = query.filter(Complaint.created_at >= _date(filters['start_date'], 'start_date'))
    if filters.get('end_date'):
        query = query.filter(Complaint.created_at <= _date(filters['end_date'], 'end_date', end_of_day=True))

    return query


def search_complaints(scope, filters):
    """
    Filtered, sorted, paginated complaints visible to the scope

    Returns:
        (complaints, pagination) where pagination is {total, page, pages, limit}
    """
    sort = filters.get('sort') or 'newest'
    if sort not in SORT_ORDERS:
        raise ValidationError('Invalid filter', fields={'sort': 'Must be newest, oldest or priority-desc'})
    page, limit = parse_page_args(filters)

    query = scope.filter_complaints(Complaint.query)
    query = apply_filters(query, filters)
    query = query.order_by(*SORT_ORDERS[sort]())
    return paginate(query, page, limit)


def _counts(query, column):
    rows = query.with_entities(column, func.count(Complaint.id)).group_by(column).all()
    return {key: count for key, count in rows}


def _resolution_times(query):
    resolved = (query.filter(Complaint.resolved_at.isnot(None))
                .with_entities(Complaint.created_at, Complaint.resolved_at).all())
    if not resolved:
        return {'average_days': None, 'min_days': None, 'max_days': None, 'count': 0}

    days = [(resolved_at - created_at).total_seconds() / 86400 for created_at, resolved_at in resolved]
    return {
        'average_days': round(sum(days) / len(days), 2),
        'min_days': round(min(days), 2),
        'max_days': round(max(days), 2),
        'count': len(days),
    }


def complaint_stats(scope, start_date=None, end_date=None):
    """Dashboard counters for the complaints visible to the scope"""
    query = scope.filter_complaints(Complaint.query)
    query = apply_filters(query, {'start_date': start_date, 'end_date': end_date})

    by_status = {status.value: 0 for status in ComplaintStatus}
    by_status.update(_counts(query, Complaint.status))
    by_priority = {priority.value: 0 for priority in ComplaintPriority}
    by_priority.update(_counts(query, Complaint.priority))

    recent = query.order_by(Complaint.updated_at.desc()).limit(5).all()
    open_count = sum(by_status[status.value] for status in OPEN_STATUSES)

    stats = {
        'total': query.count(),
        'open': open_count,
        'by_status': by_status,
        'by_priority': by_priority,
        'resolution_time': _resolution_times(query),
        'recent_activity': [
            {
                'id': complaint.id,
                'tracking_id': complaint.tracking_id,
                'title': complaint.title,
                'status': complaint.status,
                'updated_at': complaint.updated_at.isoformat() if complaint.updated_at else None,
            }
            for complaint in recent
        ],
    }
    if scope.is_admin:
        stats['unassigned'] = query.filter(Complaint.agency_id.is_(None)).count()
    return stats


def overall_stats():
    """Platform-wide figures for administrators"""
    total = Complaint.query.count()
    finished = Complaint.query.filter(Complaint.status.in_([
        ComplaintStatus.RESOLVED.value, ComplaintStatus.CLOSED.value])).count()

    per_agency = (db.session.query(Agency.id, Agency.name, func.count(Complaint.id))
                  .outerjoin(Complaint, Complaint.agency_id == Agency.id)
                  .group_by(Agency.id, Agency.name)
                  .order_by(Agency.name)
                  .all())
    per_category = (db.session.query(Category.id, Category.name, func.count(Complaint.id))
                    .outerjoin(Complaint, Complaint.category_id == Category.id)
                    .group_by(Category.id, Category.name)
                    .order_by(Category.name)
                    .all())

    return {
        'complaints': {
            'total': total,
            'by_status': _counts(Complaint.query, Complaint.status),
            'by_submission_type': _counts(Complaint.query, Complaint.submission_type),
            'unassigned': Complaint.query.filter(Complaint.agency_id.is_(None)).count(),
            'resolution_rate': round(finished / total * 100, 1) if total else 0.0,
            'resolution_time': _resolution_times(Complaint.query),
        },
        'by_agency': [{'id': id, 'name': name, 'complaints': count} for id, name, count in per_agency],
        'by_category': [{'id': id, 'name': name, 'complaints': count} for id, name, count in per_category],
        'users': {
            'standard_users': StandardUser.query.count(),
            'anonymous_users': AnonymousUser.query.filter(
                AnonymousUser.expires_at > datetime.utcnow()).count(),
            'agents': Agent.query.filter_by(is_active=True).count(),
        },
        'agencies': Agency.query.filter_by(is_active=True).count(),
        'categories': Category.query.filter_by(is_active=True).count(),
    }
