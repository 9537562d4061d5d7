# foodlink/authentication.py
from datetime import timedelta
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from django.utils import timezone
from rest_framework import exceptions
from rest_framework.authentication import TokenAuthentication
from rest_framework.authtoken.models import Token


class BearerTokenAuthentication(TokenAuthentication):
    """
    DRF token auth read from ``Authorization: Bearer <key>``.
    Tokens older than ``TOKEN_TTL_DAYS`` are rejected and deleted.
    """

    keyword = 'Bearer'

    def authenticate_credentials(self, key):
        try:
            token = Token.objects.select_related('user').get(key=key)
        except Token.DoesNotExist:
            raise exceptions.AuthenticationFailed('Invalid token')

        if token.created < timezone.now() - timedelta(days=settings.TOKEN_TTL_DAYS):
            token.delete()
            raise exceptions.AuthenticationFailed('Token expired')

        if not token.user.is_active:
            raise exceptions.AuthenticationFailed('User account is deactivated')

        return (token.user, token)


def issue_token(user):
    """Replace any existing token for ``user`` with a fresh one."""
    Token.objects.filter(user=user).delete()
    return Token.objects.create(user=user)


def socket_token(scope):
    """Token key from ``?token=`` or an ``Authorization: Bearer`` handshake header."""
    query = parse_qs(scope.get('query_string', b'').decode())
    if query.get('token'):
        return query['token'][0]

    header = dict(scope.get('headers', [])).get(b'authorization', b'').decode()
    keyword, _, key = header.partition(' ')
    if keyword == BearerTokenAuthentication.keyword and key:
        return key.strip()
    return None


@database_sync_to_async
def socket_user(key):
    if not key:
        return AnonymousUser()
    try:
        user, _ = BearerTokenAuthentication().authenticate_credentials(key)
    except exceptions.AuthenticationFailed:
        return AnonymousUser()
    return user


class TokenAuthMiddleware(BaseMiddleware):
    """Populate ``scope['user']`` for websocket connections from a DRF token."""

    async def __call__(self, scope, receive, send):
        scope = dict(scope)
        scope['user'] = await socket_user(socket_token(scope))
        return await super().__call__(scope, receive, send)
