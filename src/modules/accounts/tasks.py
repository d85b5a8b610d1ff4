import structlog
from celery import shared_task

from modules.accounts.repositories.django_repository import (
    SessionDjangoRepository,
    UserDjangoRepository,
)
from modules.accounts.services import AuthService

logger = structlog.get_logger(__name__)


@shared_task(name="accounts.purge_expired_sessions")
def purge_expired_sessions() -> int:
    deleted = AuthService(UserDjangoRepository(), SessionDjangoRepository()).purge_expired_sessions()
    logger.info("auth.sessions_purged", deleted=deleted)
    return deleted
