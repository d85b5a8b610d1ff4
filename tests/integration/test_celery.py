"""Integration tests for the Celery app and scheduled tasks."""

from datetime import timedelta

import pytest
from django.utils import timezone

from modules.accounts.models import Session
from modules.core.models import EventStatus, OutboxEvent

pytestmark = pytest.mark.integration


class TestCeleryConfig:
    def test_celery_app_is_importable(self):
        from config.celery import app

        assert app.main == "butchery"

    def test_celery_app_exported_from_init(self):
        from config import celery_app

        assert celery_app.main == "butchery"

    def test_celery_serializer_is_json(self, settings):
        assert settings.CELERY_TASK_SERIALIZER == "json"
        assert settings.CELERY_RESULT_SERIALIZER == "json"
        assert settings.CELERY_ACCEPT_CONTENT == ["json"]

    def test_celery_timezone_matches_django(self, settings):
        assert settings.CELERY_TIMEZONE == settings.TIME_ZONE


class TestRelayOutboxEvents:
    def test_pending_events_are_published(self, order):
        from modules.core.tasks import relay_outbox_events

        pending = OutboxEvent.objects.filter(status=EventStatus.PENDING).count()
        assert pending >= 1

        result = relay_outbox_events.delay()

        assert result.successful()
        assert result.result == {"published": pending, "failed": 0}
        assert not OutboxEvent.objects.filter(status=EventStatus.PENDING).exists()

    def test_nothing_to_relay(self):
        from modules.core.tasks import relay_outbox_events

        assert relay_outbox_events() == {"published": 0, "failed": 0}


class TestPurgeExpiredSessions:
    def test_only_expired_sessions_are_removed(self, customer):
        from modules.accounts.tasks import purge_expired_sessions

        Session.objects.create(
            user=customer,
            token_hash=Session.hash_token("old"),
            expires_at=timezone.now() - timedelta(hours=1),
        )
        live = Session.objects.create(
            user=customer,
            token_hash=Session.hash_token("live"),
            expires_at=timezone.now() + timedelta(hours=1),
        )

        assert purge_expired_sessions.delay().result == 1
        assert list(Session.objects.all()) == [live]
