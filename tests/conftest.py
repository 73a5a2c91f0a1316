from datetime import date, timedelta
from decimal import Decimal

import pytest

from turfbook.database import Database
from turfbook.domain.availability.schemas import DaySchedule, PeakWindow
from turfbook.domain.bookings.schemas import BookingCreate
from turfbook.domain.turfs.schemas import AvailabilityUpdate, TurfCreate
from turfbook.domain.turfs.service import TurfService
from turfbook.shared.actors import Actor
from turfbook.shared.validators import WEEKDAYS

OWNER_ID = 100


def next_weekday(name, after=None):
    """First date strictly after ``after`` (default today) falling on the weekday"""
    start = (after or date.today()) + timedelta(days=1)
    offset = (WEEKDAYS.index(name) - start.weekday()) % 7
    return start + timedelta(days=offset)


def full_week(open_time="06:00", close_time="22:00", peak=("18:00", "20:00")):
    peak_window = PeakWindow(start=peak[0], end=peak[1]) if peak else None
    return [
        DaySchedule(day=day, open_time=open_time, close_time=close_time, peak_window=peak_window)
        for day in WEEKDAYS
    ]


def booking_request(turf_id, on_date, start, end, players=4, method="card"):
    return BookingCreate(
        turfId=turf_id,
        date=on_date,
        timeSlot={"startTime": start, "endTime": end},
        players={"count": players},
        payment={"method": method},
    )


@pytest.fixture
def database():
    db = Database("sqlite://", log_slow_queries=False).connect()
    db.create_all()
    yield db
    db.disconnect()


@pytest.fixture
def session(database):
    db = database.session()
    yield db
    db.close()


@pytest.fixture
def make_turf(session):
    def _make_turf(**overrides):
        data = {
            "name": "Green Field Arena",
            "ownerId": OWNER_ID,
            "city": "Dhaka",
            "hourlyRate": Decimal("1000"),
            "maxPlayers": 10,
            "availability": AvailabilityUpdate(days=full_week()),
        }
        data.update(overrides)
        return TurfService(session).create_turf(TurfCreate(**data))

    return _make_turf


@pytest.fixture
def turf(make_turf):
    return make_turf()


@pytest.fixture
def booking_day():
    return date.today() + timedelta(days=7)


def player(user_id):
    return Actor(user_id=user_id)


@pytest.fixture
def owner():
    return Actor(user_id=OWNER_ID, role="owner")


@pytest.fixture
def admin():
    return Actor(user_id=900, role="admin")
