"""
Directory Routes
Public listings of active categories and agencies
"""

from flask import Blueprint

from sayit.models import Agency, Category
from sayit.services.directory import get_agency, get_category
from sayit.utils.responses import success

directory_bp = Blueprint('directory', __name__)


@directory_bp.route('/categories', methods=['GET'])
def list_categories():
    return success([category.to_dict() for category in Category.find_active()])


@directory_bp.route('/categories/<int:category_id>', methods=['GET'])
def get_category_detail(category_id):
    return success(get_category(category_id).to_dict())


@directory_bp.route('/agencies', methods=['GET'])
def list_agencies():
    return success([agency.to_dict() for agency in Agency.find_active()])


@directory_bp.route('/agencies/<int:agency_id>', methods=['GET'])
def get_agency_detail(agency_id):
    agency = get_agency(agency_id)
    data = agency.to_dict(include_contact=True)
    data['categories'] = [category.to_dict() for category in agency.categories.filter_by(is_active=True)]
    return success(data)
