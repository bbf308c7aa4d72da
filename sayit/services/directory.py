"""
Category and agency directory
"""

import logging

from sqlalchemy import func

from extensions import db
from sayit.errors import Conflict, NotFound, ValidationError
from sayit.models import Agency, Category

logger = logging.getLogger(__name__)


DEFAULT_AGENCIES = [
    {'name': 'Rwanda Utilities Regulatory Authority', 'short_name': 'RURA',
     'description': 'Regulates water, energy and transport utilities'},
    {'name': 'Rwanda National Police', 'short_name': 'RNP',
     'description': 'Public safety and security'},
    {'name': 'City of Kigali', 'short_name': 'CoK',
     'description': 'Roads, sanitation and urban services'},
    {'name': 'Ministry of Health', 'short_name': 'MINISANTE',
     'description': 'Public health services'},
    {'name': 'Ministry of Education', 'short_name': 'MINEDUC',
     'description': 'Schools and education services'},
]

DEFAULT_CATEGORIES = [
    {'name': 'Water & Sanitation', 'icon': 'water_drop', 'color': '#2980b9', 'agency': 'RURA'},
    {'name': 'Electricity', 'icon': 'bolt', 'color': '#f1c40f', 'agency': 'RURA'},
    {'name': 'Roads & Infrastructure', 'icon': 'construction', 'color': '#e67e22', 'agency': 'CoK'},
    {'name': 'Public Safety', 'icon': 'local_police', 'color': '#c0392b', 'agency': 'RNP'},
    {'name': 'Health Services', 'icon': 'local_hospital', 'color': '#27ae60', 'agency': 'MINISANTE'},
    {'name': 'Education', 'icon': 'school', 'color': '#8e44ad', 'agency': 'MINEDUC'},
    {'name': 'Other', 'icon': 'feedback', 'color': '#3498db', 'agency': None},
]


def resolve_agency(category, requested_agency_id=None):
    """
    Pick the agency a new complaint is routed to

    An explicitly requested active agency wins; otherwise the category's
    default agency when it is active; otherwise the complaint stays unassigned.
    The submitter never influences the result.
    """
    if requested_agency_id:
        agency = Agency.query.get(requested_agency_id)
        if agency and agency.is_active:
            return agency

    agency = category.default_agency
    if agency and agency.is_active:
        return agency
    return None


def get_category(category_id, active_only=True):
    category = Category.query.get(category_id) if category_id else None
    if not category or (active_only and not category.is_active):
        raise NotFound('Category not found')
    return category


def get_agency(agency_id, active_only=True):
    agency = Agency.query.get(agency_id) if agency_id else None
    if not agency or (active_only and not agency.is_active):
        raise NotFound('Agency not found')
    return agency


def _name_taken(model, name, exclude_id=None):
    query = model.query.filter(func.lower(model.name) == name.strip().lower())
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    return db.session.query(query.exists()).scalar()


def _require_name(data):
    name = (data.get('name') or '').strip()
    if not name:
        raise ValidationError('Name is required', fields={'name': 'Name is required'})
    return name


def _check_default_agency(data):
    agency_id = data.get('default_agency_id')
    if agency_id:
        get_agency(agency_id, active_only=False)


def create_category(data):
    name = _require_name(data)
    if len(name) > 50:
        raise ValidationError('Name is too long', fields={'name': 'At most 50 characters'})
    if _name_taken(Category, name):
        raise Conflict('Category with this name already exists')
    _check_default_agency(data)

    category = Category(name=name)
    category.update_details({key: value for key, value in data.items() if key != 'name'})
    db.session.add(category)
    db.session.commit()
    logger.info(f'Category created: {category.name}')
    return category


def update_category(category_id, data):
    category = get_category(category_id, active_only=False)
    if 'name' in data:
        data = dict(data, name=_require_name(data))
        if _name_taken(Category, data['name'], exclude_id=category.id):
            raise Conflict('Category with this name already exists')
    _check_default_agency(data)

    category.update_details(data)
    db.session.commit()
    return category


def deactivate_category(category_id):
    category = get_category(category_id, active_only=False)
    category.is_active = False
    db.session.commit()
    logger.info(f'Category deactivated: {category.name}')
    return category


AGENCY_FIELDS = ('name', 'short_name', 'description', 'contact_email', 'contact_phone',
                 'address', 'website', 'logo', 'is_active')


def create_agency(data):
    name = _require_name(data)
    if _name_taken(Agency, name):
        raise Conflict('Agency with this name already exists')

    agency = Agency(name=name)
    for field in AGENCY_FIELDS:
        if field != 'name' and field in data:
            setattr(agency, field, data[field])
    db.session.add(agency)
    db.session.commit()
    logger.info(f'Agency created: {agency.name}')
    return agency


def update_agency(agency_id, data):
    agency = get_agency(agency_id, active_only=False)
    if 'name' in data:
        data = dict(data, name=_require_name(data))
        if _name_taken(Agency, data['name'], exclude_id=agency.id):
            raise Conflict('Agency with this name already exists')

    for field in AGENCY_FIELDS:
        if field in data:
            setattr(agency, field, data[field])
    db.session.commit()
    return agency


def deactivate_agency(agency_id):
    agency = get_agency(agency_id, active_only=False)
    agency.is_active = False
    db.session.commit()
    logger.info(f'Agency deactivated: {agency.name}')
    return agency


def seed_directory():
    """Insert the default agencies and categories that are missing"""
    created = 0
    by_short_name = {}
    for entry in DEFAULT_AGENCIES:
        agency = Agency.query.filter_by(name=entry['name']).first()
        if not agency:
            agency = Agency(**entry)
            db.session.add(agency)
            created += 1
        by_short_name[entry['short_name']] = agency
    db.session.flush()

    for entry in DEFAULT_CATEGORIES:
        if Category.query.filter_by(name=entry['name']).first():
            continue
        agency = by_short_name.get(entry['agency'])
        db.session.add(Category(
            name=entry['name'],
            icon=entry['icon'],
            color=entry['color'],
            default_agency_id=agency.id if agency else None,
        ))
        created += 1

    db.session.commit()
    return created
