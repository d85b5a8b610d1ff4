"""Unit tests for the shared models: soft delete, outbox rows and shop settings."""

from __future__ import annotations

from decimal import Decimal

import pytest
from django.core.cache import cache

from modules.accounts.models import Address
from modules.core.models import EventStatus, OutboxEvent, ShopSettings

pytestmark = pytest.mark.unit


class TestSoftDelete:
    def test_delete_stamps_deleted_at(self, address):
        address.delete()
        address.refresh_from_db()

        assert address.is_deleted
        assert not Address.objects.alive().filter(pk=address.pk).exists()
        assert Address.objects.dead().filter(pk=address.pk).exists()

    def test_deleting_twice_is_a_noop(self, address):
        address.delete()
        assert address.delete() == (0, {})

    def test_restore(self, address):
        address.delete()
        address.restore()
        address.refresh_from_db()
        assert address.deleted_at is None

    def test_queryset_delete_is_soft(self, address):
        count, _ = Address.objects.filter(pk=address.pk).delete()
        assert count == 1
        assert Address.objects.filter(pk=address.pk).exists()

    def test_primary_key_is_uuid7(self, address):
        assert address.id.version == 7


class TestOutboxEvent:
    def _event(self):
        return OutboxEvent.objects.create(
            event_type="OrderCreated", payload={}, aggregate_id="abc", topic="orders"
        )

    def test_new_event_is_pending(self):
        assert self._event().status == EventStatus.PENDING

    def test_mark_as_published(self):
        event = self._event()
        event.mark_as_published()
        event.refresh_from_db()
        assert event.status == EventStatus.PUBLISHED
        assert event.processed_at is not None

    def test_mark_as_failed_counts_retries(self):
        event = self._event()
        event.mark_as_failed("broker down")
        event.mark_as_failed("broker down")
        event.refresh_from_db()
        assert event.status == EventStatus.FAILED
        assert event.retry_count == 2
        assert event.error_message == "broker down"


class TestShopSettings:
    def test_load_creates_defaults(self):
        settings = ShopSettings.load()
        assert settings.vat_rate == Decimal("0.05")
        assert settings.free_delivery_threshold == Decimal("200.00")
        assert settings.welcome_bonus == Decimal("50.00")
        assert ShopSettings.objects.count() == 1

    def test_load_is_cached(self):
        ShopSettings.load()
        assert cache.get(ShopSettings.CACHE_KEY) is not None

    def test_save_invalidates_cache(self):
        settings = ShopSettings.load()
        settings.delivery_fee = Decimal("12.00")
        settings.save()

        assert cache.get(ShopSettings.CACHE_KEY) is None
        assert ShopSettings.load().delivery_fee == Decimal("12.00")
        assert ShopSettings.objects.count() == 1
