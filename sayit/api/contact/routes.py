"""
Contact Routes
"""

import re

from flask import Blueprint, current_app

from extensions import limiter
from sayit.errors import UpstreamFailure, ValidationError
from sayit.services.email_service import EmailService
from sayit.utils.responses import get_payload, success

contact_bp = Blueprint('contact', __name__)

CONTACT_CATEGORIES = [
    {'value': 'general', 'label': 'General Inquiry'},
    {'value': 'technical', 'label': 'Technical Support'},
    {'value': 'complaint', 'label': 'Complaint Follow-up'},
    {'value': 'partnership', 'label': 'Agency Partnership'},
    {'value': 'feedback', 'label': 'Platform Feedback'},
]

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def contact_limit():
    return current_app.config['CONTACT_RATE_LIMIT']


@contact_bp.route('', methods=['GET'])
def contact_info():
    """Form categories and support contact details"""
    return success({
        'categories': CONTACT_CATEGORIES,
        'email': current_app.config.get('CONTACT_INBOX'),
    })


@contact_bp.route('', methods=['POST'])
@limiter.limit(contact_limit)
def send_message():
    """Relay a contact form message to the support inbox"""
    data = get_payload()
    fields = {key: (data.get(key) or '').strip() for key in ('name', 'email', 'subject', 'message', 'category')}

    errors = {}
    for key in ('name', 'subject', 'message'):
        if not fields[key]:
            errors[key] = f'{key.capitalize()} is required'
    if not EMAIL_PATTERN.match(fields['email']):
        errors['email'] = 'A valid email is required'
    if len(fields['message']) > 2000:
        errors['message'] = 'Message cannot exceed 2000 characters'
    category = fields['category'] or 'general'
    if category not in [entry['value'] for entry in CONTACT_CATEGORIES]:
        errors['category'] = 'Unknown category'
    if errors:
        raise ValidationError('Invalid contact message', fields=errors)

    sent = EmailService.send_contact_message(
        fields['name'], fields['email'], category, fields['subject'], fields['message'])
    if not sent:
        raise UpstreamFailure('Your message could not be delivered, please try again later')

    current_app.logger.info(f'Contact message relayed ({category})')
    return success(message='Your message has been sent. We will get back to you soon.')
