"""
JSON envelope helpers: {success, data?, message?, pagination?}
"""

from flask import jsonify, request

from sayit.errors import ValidationError


def success(data=None, message=None, status=200, pagination=None):
    body = {'success': True}
    if data is not None:
        body['data'] = data
    if message:
        body['message'] = message
    if pagination is not None:
        body['pagination'] = pagination
    return jsonify(body), status


def get_payload():
    """JSON body, or form fields for multipart uploads"""
    if request.is_json:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError('Request body must be a JSON object')
        return data
    return request.form.to_dict()


def get_files(field='attachments'):
    return request.files.getlist(field)


def as_bool(value, default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')
