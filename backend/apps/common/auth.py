"""
Bearer-token checks for async views that sit outside DRF.
"""
from asgiref.sync import sync_to_async
from django.conf import settings

from apps.common.exceptions import AuthenticationRequired


async def authenticate_jwt(request):
    """Return the user for the request's bearer token, or None."""
    from rest_framework_simplejwt.authentication import JWTAuthentication
    from rest_framework_simplejwt.exceptions import (
        InvalidToken,
        AuthenticationFailed as JWTAuthFailed,
    )

    auth_header = request.META.get('HTTP_AUTHORIZATION', '')
    if not auth_header.startswith('Bearer '):
        return None

    jwt_auth = JWTAuthentication()
    try:
        validated_token = await sync_to_async(jwt_auth.get_validated_token)(
            auth_header.split(' ', 1)[1]
        )
        return await sync_to_async(jwt_auth.get_user)(validated_token)
    except (InvalidToken, JWTAuthFailed):
        return None


async def require_user(request):
    """
    Enforce authentication when ``ASSISTANT['REQUIRE_AUTH']`` is on.

    Returns the authenticated user (or None when auth is not required).
    Raises AuthenticationRequired otherwise.
    """
    if not settings.ASSISTANT.get('REQUIRE_AUTH', False):
        return None
    user = await authenticate_jwt(request)
    if user is None:
        raise AuthenticationRequired()
    return user
