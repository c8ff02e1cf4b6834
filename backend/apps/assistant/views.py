"""
Assistant views

Raw async Django views (DRF viewsets are sync-only); DRF serializers
validate input and shape output, DRF exceptions carry HTTP errors.
"""
import json
import logging
import re
import uuid

from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST
from rest_framework.exceptions import APIException

from apps.common.auth import require_user
from apps.common.exceptions import AssistantUnavailable, InvalidChatRequest, error_payload
from apps.common.logging_utils import build_log_extra

from .orchestrator import get_orchestrator
from .serializers import (
    SESSION_ID_PATTERN,
    ChatRequestSerializer,
    SessionSerializer,
    ToolSerializer,
    TurnResultSerializer,
)

logger = logging.getLogger(__name__)


def _error_response(exc: APIException) -> JsonResponse:
    return JsonResponse(error_payload(exc), status=exc.status_code)


def _json_body(request) -> dict:
    try:
        payload = json.loads(request.body or b'{}')
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidChatRequest('Request body must be valid JSON.')
    if not isinstance(payload, dict):
        raise InvalidChatRequest('Request body must be a JSON object.')
    return payload


@csrf_exempt
@require_POST
async def post_message(request):
    """
    Send a chat message and get the assistant's reply.

    POST /api/assistant/messages/
    Body: {"session_id": "optional", "text": "Create a schedule for ..."}

    Returns 201 with a new ``session_id`` when none was given, else 200.
    """
    try:
        await require_user(request)
        serializer = ChatRequestSerializer(data=_json_body(request))
        if not serializer.is_valid():
            raise InvalidChatRequest(serializer.errors)
    except APIException as exc:
        return _error_response(exc)

    session_id = serializer.validated_data.get('session_id')
    created = not session_id
    if created:
        session_id = uuid.uuid4().hex

    orchestrator = get_orchestrator()
    try:
        result = await orchestrator.handle_message(session_id, serializer.validated_data['text'])
    except Exception:
        logger.exception("assistant_turn_failed", extra=build_log_extra(session_id=session_id))
        return _error_response(AssistantUnavailable())

    data = TurnResultSerializer(result, context={'translator': orchestrator.translator}).data
    return JsonResponse(data, status=201 if created else 200)


@csrf_exempt
@require_http_methods(['GET', 'DELETE'])
async def session_detail(request, session_id):
    """
    GET /api/assistant/sessions/<id>/     -> history and pending action
    DELETE /api/assistant/sessions/<id>/  -> clear the session
    """
    try:
        await require_user(request)
        if not re.match(SESSION_ID_PATTERN, session_id):
            raise InvalidChatRequest('Invalid session id.')
    except APIException as exc:
        return _error_response(exc)

    orchestrator = get_orchestrator()
    if request.method == 'DELETE':
        await orchestrator.store.clear(session_id)
        return JsonResponse({'session_id': session_id, 'status': 'cleared'})

    session = await orchestrator.store.get(session_id)
    return JsonResponse(SessionSerializer(session, context={'translator': orchestrator.translator}).data)


@require_GET
async def list_tools(request):
    """GET /api/assistant/tools/ -> the actions the assistant can take"""
    try:
        await require_user(request)
    except APIException as exc:
        return _error_response(exc)

    tools = get_orchestrator().registry.list()
    return JsonResponse({'tools': ToolSerializer(tools, many=True).data})


@require_GET
async def health(request):
    """GET /api/assistant/health/"""
    return JsonResponse({'status': 'ok', 'timestamp': timezone.now().isoformat()})
