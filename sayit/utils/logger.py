"""
Centralized logging with rotation
"""

import logging
import os
from logging.handlers import RotatingFileHandler


def init_logging(app):
    """Attach file and console handlers to the application logger"""
    level_name = (app.config.get('LOG_LEVEL') or 'INFO').upper()
    level = getattr(logging, level_name, logging.INFO)

    formatter = logging.Formatter(
        fmt='%(asctime)s | %(levelname)s | %(name)s | %(module)s:%(lineno)d | %(message)s',
        datefmt='%Y-%m-%dT%H:%M:%S%z',
    )

    handlers = []

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    handlers.append(stream_handler)

    if app.config.get('LOG_TO_FILE', True):
        log_dir = app.config.get('LOG_DIR') or os.path.join(app.instance_path, 'logs')
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, 'sayit.log')
        file_handler = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=5, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    # app.logger is the 'sayit' logger, so service module loggers inherit these handlers
    app.logger.handlers = handlers
    app.logger.setLevel(level)

    app.logger.info('Logging initialized')
    return app.logger
