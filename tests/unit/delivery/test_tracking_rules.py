from datetime import timedelta

import pytest
from django.utils import timezone

from modules.delivery.constants import TrackingStatus
from modules.delivery.dtos import LocationDTO
from modules.delivery.models import DeliveryTracking, DeliveryZone
from modules.delivery.services import apply_location_fix, can_move

pytestmark = pytest.mark.unit


class TestCanMove:
    @pytest.mark.parametrize(
        ("current", "new"),
        [
            (TrackingStatus.ASSIGNED, TrackingStatus.PICKED_UP),
            (TrackingStatus.PICKED_UP, TrackingStatus.IN_TRANSIT),
            (TrackingStatus.IN_TRANSIT, TrackingStatus.NEARBY),
            (TrackingStatus.NEARBY, TrackingStatus.DELIVERED),
            (TrackingStatus.ASSIGNED, TrackingStatus.DELIVERED),
            (TrackingStatus.IN_TRANSIT, TrackingStatus.FAILED),
        ],
    )
    def test_forward_and_failed_moves(self, current, new):
        assert can_move(current, new)

    @pytest.mark.parametrize(
        ("current", "new"),
        [
            (TrackingStatus.IN_TRANSIT, TrackingStatus.PICKED_UP),
            (TrackingStatus.NEARBY, TrackingStatus.NEARBY),
            (TrackingStatus.DELIVERED, TrackingStatus.FAILED),
            (TrackingStatus.FAILED, TrackingStatus.IN_TRANSIT),
        ],
    )
    def test_backward_and_final_moves_rejected(self, current, new):
        assert not can_move(current, new)


class TestZoneCoverage:
    def test_area_match_is_case_insensitive(self):
        zone = DeliveryZone(emirate="Dubai", areas=["Dubai Marina", "JBR"])
        assert zone.covers("dubai", " jbr ")

    def test_other_area_is_not_covered(self):
        zone = DeliveryZone(emirate="Dubai", areas=["Dubai Marina"])
        assert not zone.covers("Dubai", "Deira")

    def test_empty_area_list_covers_emirate(self):
        zone = DeliveryZone(emirate="Sharjah", areas=[])
        assert zone.covers("Sharjah", "Al Nahda")
        assert not zone.covers("Dubai", "Al Nahda")


class TestApplyLocationFix:
    def test_first_fix_is_stored(self):
        tracking = DeliveryTracking(current_location=None)

        assert apply_location_fix(tracking, LocationDTO(lat=25.08, lng=55.14))
        assert tracking.current_location["lat"] == 25.08

    def test_older_fix_is_ignored(self):
        now = timezone.now()
        tracking = DeliveryTracking(
            current_location={"lat": 25.08, "lng": 55.14, "updated_at": now.isoformat()}
        )

        applied = apply_location_fix(
            tracking, LocationDTO(lat=1.0, lng=2.0, timestamp=now - timedelta(minutes=1))
        )

        assert applied is False
        assert tracking.current_location["lat"] == 25.08

    def test_newer_fix_replaces_stored_one(self):
        now = timezone.now()
        tracking = DeliveryTracking(
            current_location={"lat": 25.08, "lng": 55.14, "updated_at": now.isoformat()}
        )

        applied = apply_location_fix(
            tracking, LocationDTO(lat=25.1, lng=55.2, timestamp=now + timedelta(seconds=30))
        )

        assert applied is True
        assert tracking.current_location["lng"] == 55.2
