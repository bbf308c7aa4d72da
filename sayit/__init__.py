"""
Flask Application Factory
"""

import os

import click
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import config
from extensions import db, migrate, jwt, bcrypt, cors, limiter, mail
from sayit.database import DatabaseHandle, get_database
from sayit.errors import SayitError
from sayit.utils.logger import init_logging


def create_app(config_name=None):
    """Application factory pattern"""

    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])

    init_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    bcrypt.init_app(app)
    cors.init_app(app, resources={
        r"/api/*": {
            "origins": app.config['CORS_ORIGINS'],
            "methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"]
        }
    })
    limiter.init_app(app)
    mail.init_app(app)

    register_jwt_callbacks(app)
    register_blueprints(app)
    register_error_handlers(app)
    register_commands(app)

    # Import models so create_all sees every table
    from sayit import models  # noqa: F401

    database = DatabaseHandle(app)
    with app.app_context():
        database.connect()

    app.logger.info(f'SAYIT API started with {config_name} configuration')
    return app


def register_jwt_callbacks(app):
    """Token errors answer in the same envelope as every other error"""

    def token_error(message, error):
        return jsonify({'success': False, 'message': message, 'error': error}), 401

    @jwt.unauthorized_loader
    def missing_token(reason):
        return token_error('Authentication required', 'no_token')

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return token_error('Invalid token', 'invalid_token')

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return token_error('Token has expired', 'token_expired')

    @jwt.revoked_token_loader
    def revoked_token(jwt_header, jwt_payload):
        return token_error('Token has been revoked', 'token_revoked')


def register_blueprints(app):
    """Register Flask blueprints"""
    from sayit.api.auth import auth_bp
    from sayit.api.complaints import complaints_bp
    from sayit.api.notifications import notifications_bp
    from sayit.api.agent import agent_bp
    from sayit.api.external import external_bp
    from sayit.api.admin import admin_bp
    from sayit.api.feedback import feedback_bp
    from sayit.api.contact import contact_bp
    from sayit.api.directory import directory_bp

    # API v1
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(complaints_bp, url_prefix='/api/complaints')
    app.register_blueprint(notifications_bp, url_prefix='/api/notifications')
    app.register_blueprint(agent_bp, url_prefix='/api/agent')
    app.register_blueprint(external_bp, url_prefix='/api/external')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(feedback_bp, url_prefix='/api/feedback')
    app.register_blueprint(contact_bp, url_prefix='/api/contact')
    app.register_blueprint(directory_bp, url_prefix='/api')

    # Health check endpoints
    @app.route('/health')
    def health_check():
        return jsonify({'success': True, 'status': 'healthy', 'message': 'SAYIT API is running'}), 200

    @app.route('/health/liveness')
    def liveness():
        return jsonify({'success': True, 'status': 'alive'}), 200

    @app.route('/health/readiness')
    def readiness():
        database = get_database().health_check()
        ready = database['status'] == 'healthy'
        return jsonify({
            'success': ready,
            'status': 'ready' if ready else 'not_ready',
        }), 200 if ready else 503

    @app.route('/health/detailed')
    def detailed_health():
        database = get_database().health_check()
        healthy = database['status'] == 'healthy'
        return jsonify({
            'success': healthy,
            'status': 'healthy' if healthy else 'degraded',
            'checks': {
                'database': database,
                'storage': {'backend': 's3' if app.config.get('S3_BUCKET_NAME') else 'local'},
                'mail': {'configured': bool(app.config.get('MAIL_USERNAME'))},
            },
        }), 200 if healthy else 503

    @app.route('/')
    def index():
        return jsonify({
            'success': True,
            'message': 'Welcome to the SAYIT API',
            'version': '1.0.0',
            'endpoints': {
                'auth': '/api/auth',
                'complaints': '/api/complaints',
                'notifications': '/api/notifications',
                'agent': '/api/agent',
                'external': '/api/external',
                'admin': '/api/admin',
                'feedback': '/api/feedback',
                'contact': '/api/contact',
                'health': '/health'
            }
        }), 200


HTTP_ERROR_CODES = {
    400: 'bad_request',
    401: 'auth_failed',
    403: 'access_denied',
    404: 'not_found',
    405: 'method_not_allowed',
    413: 'payload_too_large',
    429: 'rate_limited',
}


def register_error_handlers(app):
    """Register error handlers"""

    @app.errorhandler(SayitError)
    def handle_sayit_error(error):
        db.session.rollback()
        if error.status_code >= 500:
            app.logger.error(f'{type(error).__name__}: {error.message}')
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        if error.code >= 500:
            db.session.rollback()
        return jsonify({
            'success': False,
            'message': error.description or error.name,
            'error': HTTP_ERROR_CODES.get(error.code, 'server_error'),
        }), error.code

    @app.errorhandler(Exception)
    def handle_exception(error):
        db.session.rollback()
        app.logger.exception(f'Unhandled exception: {str(error)}')
        return jsonify({
            'success': False,
            'message': 'An unexpected error occurred',
            'error': 'server_error',
        }), 500


def register_commands(app):
    """Maintenance commands run through the flask CLI"""

    @app.cli.command('purge-notifications')
    @click.option('--days', default=None, type=int, help='Age in days of read notifications to delete')
    def purge_notifications_command(days):
        """Delete expired notifications and old read ones"""
        from sayit.services import notifications

        expired = notifications.purge_expired()
        old_read = notifications.purge_old_read(days_old=days)
        click.echo(f'Deleted {expired} expired and {old_read} old read notifications')

    @app.cli.command('cleanup-anonymous')
    def cleanup_anonymous_command():
        """Deactivate anonymous access codes past their expiry"""
        from datetime import datetime
        from sayit.models import AnonymousUser

        count = (AnonymousUser.query
                 .filter(AnonymousUser.expires_at <= datetime.utcnow(), AnonymousUser.is_active.is_(True))
                 .update({'is_active': False}, synchronize_session=False))
        db.session.commit()
        click.echo(f'Deactivated {count} expired anonymous access codes')

    @app.cli.command('seed-directory')
    def seed_directory_command():
        """Create the default agencies and categories"""
        from sayit.services.directory import seed_directory

        click.echo(f'Created {seed_directory()} directory entries')

    @app.cli.command('create-admin')
    @click.argument('email')
    @click.option('--name', default='Administrator')
    @click.password_option()
    def create_admin_command(email, name, password):
        """Create a staff administrator, or promote an existing staff account"""
        from sayit.models import Staff, StaffRole

        staff = Staff.query.filter_by(email=email.strip().lower()).first()
        if staff:
            staff.role = StaffRole.ADMIN.value
            staff.is_active = True
        else:
            staff = Staff(name=name, email=email, password=password, role=StaffRole.ADMIN.value)
            db.session.add(staff)
        db.session.commit()
        click.echo(f'{staff.email} is now an administrator')
