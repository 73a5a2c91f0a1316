from datetime import date, timedelta
from decimal import Decimal

import pytest

from conftest import OWNER_ID, booking_request, full_week, next_weekday, player
from turfbook.domain.availability.schemas import DaySchedule
from turfbook.domain.bookings.service import BookingService
from turfbook.domain.turfs.repository import TurfRepository
from turfbook.domain.turfs.schemas import AvailabilityUpdate, ClosureCreate, MaintenanceDate
from turfbook.domain.turfs.service import TurfService
from turfbook.errors import DuplicateClosureError, ForbiddenError, NotFoundError, TurfClosedError


def test_create_turf_persists_schedule_and_defaults(turf):
    assert turf.id is not None
    assert turf.name == "Green Field Arena"
    assert turf.currency == "TK"
    assert turf.peak_hour_rate == Decimal("1500")
    assert turf.booking_version == 0
    assert turf.rating_average == Decimal("0")
    assert turf.rating_count == 0
    assert len(turf.schedule_days) == 7
    monday = next(d for d in turf.schedule_days if d.day == "monday")
    assert (monday.open_time, monday.close_time, monday.peak_start, monday.peak_end) == (
        "06:00",
        "22:00",
        "18:00",
        "20:00",
    )


def test_create_turf_keeps_explicit_peak_rate(make_turf):
    turf = make_turf(peakHourRate=Decimal("1800"), currency="BDT")
    assert turf.peak_hour_rate == Decimal("1800")
    assert turf.currency == "BDT"


def test_create_turf_with_closures(make_turf):
    holiday = date.today() + timedelta(days=10)
    turf = make_turf(
        availability=AvailabilityUpdate(
            days=full_week(),
            holidays=[holiday, holiday],
            maintenanceDates=[MaintenanceDate(date=holiday + timedelta(days=1), reason="Resurfacing")],
        )
    )
    kinds = sorted((c.kind, c.date) for c in turf.closures)
    assert kinds == [("holiday", holiday), ("maintenance", holiday + timedelta(days=1))]


def test_get_turf_not_found(session):
    with pytest.raises(NotFoundError) as exc_info:
        TurfService(session).get_turf(999)
    assert exc_info.value.status_code == 404


def test_get_availability_shows_slots(session, turf, booking_day):
    BookingService(session).create_booking(booking_request(turf.id, booking_day, "18:00", "19:30"), user_id=3)

    result = TurfService(session).get_availability(turf.id, booking_day)
    by_start = {s.start_time: s for s in result.slots}

    assert result.is_open is True
    assert len(result.slots) == 16
    assert by_start["18:00"].is_available is False
    assert by_start["19:00"].is_available is False
    assert by_start["20:00"].is_available is True
    assert by_start["18:00"].price == Decimal("1500")
    assert by_start["17:00"].price == Decimal("1000")
    assert [(i.start, i.end) for i in result.booked_slots] == [("18:00", "19:30")]


def test_get_availability_custom_slot_width(session, turf, booking_day):
    result = TurfService(session).get_availability(turf.id, booking_day, slot_minutes=30)
    assert len(result.slots) == 32


def test_update_availability_replaces_schedule(session, turf, owner):
    service = TurfService(session)
    days = [d for d in full_week() if d.day != "sunday"]
    days.append(DaySchedule(day="sunday", is_open=False, open_time="06:00", close_time="22:00"))

    updated = service.update_availability(turf.id, AvailabilityUpdate(days=days), owner)

    assert len(updated.schedule_days) == 7
    sunday = next_weekday("sunday")
    result = service.get_availability(turf.id, sunday)
    assert result.is_open is False
    assert result.slots == []

    with pytest.raises(TurfClosedError):
        BookingService(session).create_booking(booking_request(turf.id, sunday, "10:00", "11:00"), user_id=1)


def test_update_availability_can_shorten_hours(session, turf, booking_day, owner):
    service = TurfService(session)
    service.update_availability(
        turf.id, AvailabilityUpdate(days=full_week(open_time="08:00", close_time="12:00", peak=None)), owner
    )

    result = service.get_availability(turf.id, booking_day)
    assert [s.start_time for s in result.slots] == ["08:00", "09:00", "10:00", "11:00"]
    assert not any(s.is_peak_hour for s in result.slots)


def test_update_availability_keeps_closures_unless_given(session, make_turf, booking_day, admin):
    turf = make_turf(availability=AvailabilityUpdate(days=full_week(), holidays=[booking_day]))
    service = TurfService(session)

    turf = service.update_availability(turf.id, AvailabilityUpdate(days=full_week()), admin)
    assert [c.date for c in turf.closures] == [booking_day]

    turf = service.update_availability(turf.id, AvailabilityUpdate(days=full_week(), holidays=[]), admin)
    assert turf.closures == []


def test_add_closure_closes_the_day(session, turf, booking_day, owner):
    service = TurfService(session)
    closure = service.add_closure(turf.id, ClosureCreate(date=booking_day, kind="maintenance", reason="Lights"), owner)

    assert closure.kind == "maintenance"
    result = service.get_availability(turf.id, booking_day)
    assert result.is_open is False
    assert result.closed_reason == "maintenance"

    with pytest.raises(TurfClosedError):
        BookingService(session).create_booking(booking_request(turf.id, booking_day, "10:00", "11:00"), user_id=1)


def test_add_closure_rejects_duplicates(session, turf, booking_day, owner):
    service = TurfService(session)
    service.add_closure(turf.id, ClosureCreate(date=booking_day), owner)

    with pytest.raises(DuplicateClosureError):
        service.add_closure(turf.id, ClosureCreate(date=booking_day), owner)


def test_claim_booking_version_detects_stale_version(session, turf):
    assert TurfRepository.claim_booking_version(session, turf.id, 0) is True
    session.commit()

    assert TurfRepository.claim_booking_version(session, turf.id, 0) is False
    session.rollback()

    session.refresh(turf)
    assert turf.booking_version == 1


def test_get_availability_rejects_zero_slot_width(session, turf, booking_day):
    with pytest.raises(ValueError, match="slot_minutes"):
        TurfService(session).get_availability(turf.id, booking_day, slot_minutes=0)


def test_only_owner_or_admin_manage_turf(session, turf, booking_day, owner, admin):
    service = TurfService(session)
    other_owner = player(OWNER_ID + 1).model_copy(update={"role": "owner"})

    for stranger in (player(1), other_owner):
        with pytest.raises(ForbiddenError) as exc_info:
            service.add_closure(turf.id, ClosureCreate(date=booking_day), stranger)
        assert exc_info.value.status_code == 403
        with pytest.raises(ForbiddenError):
            service.update_availability(turf.id, AvailabilityUpdate(days=full_week()), stranger)

    assert turf.closures == []
    assert service.add_closure(turf.id, ClosureCreate(date=booking_day), admin).kind == "holiday"
