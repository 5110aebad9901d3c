"""Application package exports."""

from .app import APP_VERSION, app, create_app
from .worker import handle_message
from . import processing

__version__ = APP_VERSION

__all__ = ["APP_VERSION", "__version__", "app", "create_app", "handle_message", "processing"]
