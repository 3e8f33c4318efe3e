"""
WSGI Application Entry Point

    gunicorn -c gunicorn.conf.py bloglist_api.wsgi:application
"""
import logging

from .app import create_app
from .logging_config import configure_logging

configure_logging()

logger = logging.getLogger(__name__)
logger.info("Starting bloglist-api under WSGI...")

application = create_app()
app = application
