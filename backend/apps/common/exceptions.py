"""
Custom API exceptions for the AIM backend
"""
from rest_framework.exceptions import APIException


class InvalidChatRequest(APIException):
    """Raised when a chat submission body is malformed"""
    status_code = 400
    default_detail = 'Invalid chat request'
    default_code = 'invalid_chat_request'


class AuthenticationRequired(APIException):
    """Raised when an assistant endpoint needs a bearer token"""
    status_code = 401
    default_detail = 'Authentication required'
    default_code = 'authentication_required'


class AssistantUnavailable(APIException):
    """Raised when the assistant cannot process a turn at all"""
    status_code = 503
    default_detail = 'The assistant is temporarily unavailable. Please try again.'
    default_code = 'assistant_unavailable'


def error_payload(exc: APIException) -> dict:
    """Render an APIException as the ``{error: {code, message}}`` body."""
    codes = exc.get_codes()
    code = codes if isinstance(codes, str) else exc.default_code
    detail = exc.detail
    message = str(detail) if isinstance(detail, str) else exc.default_detail
    payload = {'error': {'code': code, 'message': str(message)}}
    if isinstance(detail, (dict, list)):
        payload['error']['fields'] = detail
    return payload
