"""
shopcart/utils/logging.py
─────────────────────────
Configures application logging.

Module loggers (logging.getLogger(__name__)) under the shopcart package
propagate to app.logger, so cart codecs and adapters end up in the same
handlers as the host.
"""
import os
import logging
from logging.handlers import RotatingFileHandler
from flask import has_request_context, request


class RequestFormatter(logging.Formatter):
    """
    Formatter that adds the client address and URL to each record
    when a request is active.
    """
    def format(self, record):
        if has_request_context():
            record.url = request.url
            record.remote_addr = request.remote_addr
        else:
            record.url = None
            record.remote_addr = None
        return super().format(record)


def setup_logging(app):
    """
    Attach handlers to app.logger:
      - logs/app.log, rotating at 5MB, 5 backups (skipped when LOG_DIR is None)
      - stdout
    Level comes from LOG_LEVEL.
    """
    level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO)

    # 1. File Logger
    log_dir = app.config.get('LOG_DIR')
    if log_dir:
        try:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.join(log_dir, 'app.log'),
                maxBytes=5 * 1024 * 1024,
                backupCount=5
            )
        except OSError as e:
            # Read-only filesystem: keep stdout only
            app.logger.warning('File logging disabled: %s', e)
        else:
            file_handler.setFormatter(RequestFormatter(
                '%(asctime)s | %(levelname)s | %(name)s | %(remote_addr)s | %(url)s | %(message)s'
            ))
            file_handler.setLevel(level)
            app.logger.addHandler(file_handler)

    # 2. Stdout Logger
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
    ))
    stream_handler.setLevel(level)
    app.logger.addHandler(stream_handler)

    app.logger.setLevel(level)
    app.logger.debug('Cart engine logging configured (level=%s)', logging.getLevelName(level))
