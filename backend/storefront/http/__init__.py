from .cookie import Cookie
from .request import Request
from .response import Response, StatusCode
from .router import Router, register_error_handlers, to_rule
from .session import Session

__all__ = [
    'Cookie', 'Request', 'Response', 'StatusCode',
    'Router', 'register_error_handlers', 'to_rule', 'Session',
]
