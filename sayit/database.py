"""
Database handle
Connection lifecycle owned by the application instead of process-wide state
"""

import logging
import time

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from sayit.errors import UpstreamFailure

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'sayit_db'


class DatabaseHandle:
    """Lifecycle-scoped view of the database connection"""

    def __init__(self, app=None):
        self.connected = False
        self.connected_at = None
        self.last_error = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        app.extensions[EXTENSION_KEY] = self

    def connect(self):
        """Open a connection once and create missing tables"""
        try:
            with db.engine.connect() as connection:
                connection.execute(text('SELECT 1'))
            db.create_all()
        except SQLAlchemyError as e:
            self.connected = False
            self.last_error = str(e)
            logger.error(f'Database connection failed: {e}')
            raise UpstreamFailure('Database unavailable') from e

        self.connected = True
        self.connected_at = time.time()
        self.last_error = None
        logger.info('Database connected')
        return self

    def disconnect(self):
        db.session.remove()
        db.engine.dispose()
        self.connected = False
        logger.info('Database disconnected')

    def health_check(self):
        """Round-trip the database and report latency"""
        started = time.perf_counter()
        try:
            db.session.execute(text('SELECT 1'))
        except SQLAlchemyError as e:
            db.session.rollback()
            self.last_error = str(e)
            logger.warning(f'Database health check failed: {e}')
            return {'status': 'unhealthy', 'connected': False, 'error': 'database unreachable'}

        return {
            'status': 'healthy',
            'connected': self.connected,
            'latency_ms': round((time.perf_counter() - started) * 1000, 2),
            'dialect': db.engine.dialect.name,
        }


def get_database():
    """Handle registered on the current application"""
    return current_app.extensions[EXTENSION_KEY]
