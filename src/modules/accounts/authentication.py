"""Bearer token authentication against the ``sessions`` table."""

from __future__ import annotations

import structlog
from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication, get_authorization_header

logger = structlog.get_logger(__name__)


class SessionTokenAuthentication(BaseAuthentication):
    """``Authorization: Bearer <token>``.

    On success ``request.user`` is the ``accounts.User`` and
    ``request.auth`` the ``Session`` row, which logout deletes.
    """

    keyword = "Bearer"

    def authenticate(self, request):
        auth = get_authorization_header(request).split()
        if not auth or auth[0].lower() != self.keyword.lower().encode():
            return None
        if len(auth) != 2:
            raise exceptions.AuthenticationFailed("Invalid token header.")
        try:
            token = auth[1].decode()
        except UnicodeError as exc:
            raise exceptions.AuthenticationFailed("Invalid token header.") from exc

        # Imported here: DRF resolves this class while rest_framework.views is
        # still loading, before modules.core.exceptions can finish importing.
        from modules.accounts.repositories.django_repository import (
            SessionDjangoRepository,
            UserDjangoRepository,
        )
        from modules.accounts.services import AuthService

        service = AuthService(UserDjangoRepository(), SessionDjangoRepository())
        session = service.authenticate_token(token)
        if session is None:
            logger.info("auth.token_rejected")
            raise exceptions.AuthenticationFailed("Invalid or expired token.")
        return session.user, session

    def authenticate_header(self, request) -> str:
        return f'{self.keyword} realm="api"'
