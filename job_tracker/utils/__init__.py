from .log_sanitizer import setup_logging, sanitize_message
from .numbers import percentage

__all__ = ['setup_logging', 'sanitize_message', 'percentage']
