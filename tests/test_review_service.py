from decimal import Decimal

import pytest
from pydantic import ValidationError

from conftest import OWNER_ID, booking_request, player
from turfbook.domain.bookings.service import BookingService
from turfbook.domain.reviews.schemas import ReviewCreate, ReviewUpdate
from turfbook.domain.reviews.service import ReviewService
from turfbook.errors import (
    DuplicateReviewError,
    ForbiddenError,
    NotFoundError,
    ReviewNotAllowedError,
)
from turfbook.models import Review
from turfbook.shared.actors import Actor

OWNER = Actor(user_id=OWNER_ID, role="owner")


@pytest.fixture
def bookings(session):
    return BookingService(session)


@pytest.fixture
def reviews(session):
    return ReviewService(session)


@pytest.fixture
def played(bookings, turf, booking_day):
    """Make a completed booking for a user on the turf"""

    def _played(user_id, start="06:00", end="07:00"):
        booking = bookings.create_booking(booking_request(turf.id, booking_day, start, end), user_id=user_id)
        return bookings.complete_booking(booking.id, OWNER)

    return _played


def test_add_review_after_completed_booking(session, reviews, turf, played):
    booking = played(1)

    review = reviews.add_review(
        turf.id,
        ReviewCreate(rating=4, comment="  Great lights  ", aspects={"cleanliness": 5, "value": 3}),
        player(1),
    )

    assert review.booking_id == booking.id
    assert review.comment == "Great lights"
    assert (review.cleanliness, review.facilities, review.value) == (5, None, 3)
    session.refresh(turf)
    assert turf.rating_count == 1
    assert turf.rating_average == Decimal("4")


def test_add_review_requires_completed_booking(reviews, bookings, turf, booking_day):
    booking = bookings.create_booking(booking_request(turf.id, booking_day, "06:00", "07:00"), user_id=1)

    with pytest.raises(ReviewNotAllowedError):
        reviews.add_review(turf.id, ReviewCreate(rating=5), player(1))

    bookings.confirm_booking(booking.id, OWNER)
    with pytest.raises(ReviewNotAllowedError):
        reviews.add_review(turf.id, ReviewCreate(rating=5), player(1))


def test_add_review_rejects_other_users_booking(reviews, turf, played):
    played(1)
    with pytest.raises(ReviewNotAllowedError):
        reviews.add_review(turf.id, ReviewCreate(rating=5), player(2))


def test_add_review_rejects_second_review_of_same_booking(session, reviews, turf, played):
    booking = played(1)
    reviews.add_review(turf.id, ReviewCreate(rating=5), player(1))

    with pytest.raises(DuplicateReviewError):
        reviews.add_review(turf.id, ReviewCreate(rating=1), player(1))
    with pytest.raises(DuplicateReviewError):
        reviews.add_review(turf.id, ReviewCreate(rating=1, bookingId=booking.id), player(1))

    assert session.query(Review).count() == 1


def test_each_completed_booking_gets_one_review(reviews, turf, played):
    first = played(1, "06:00", "07:00")
    second = played(1, "08:00", "09:00")

    assert reviews.add_review(turf.id, ReviewCreate(rating=5), player(1)).booking_id == first.id
    assert reviews.add_review(turf.id, ReviewCreate(rating=3), player(1)).booking_id == second.id


def test_add_review_unknown_turf(reviews):
    with pytest.raises(NotFoundError):
        reviews.add_review(404, ReviewCreate(rating=5), player(1))


def test_rating_average_over_all_reviews(session, reviews, turf, played):
    for user_id, start, rating in [(1, "06:00", 5), (2, "08:00", 4), (3, "10:00", 4)]:
        played(user_id, start, f"{int(start[:2]) + 1:02d}:00")
        reviews.add_review(turf.id, ReviewCreate(rating=rating), player(user_id))

    session.refresh(turf)
    assert turf.rating_count == 3
    assert turf.rating_average == Decimal("4.33")


def test_update_review_recomputes_average(session, reviews, turf, played):
    played(1, "06:00", "07:00")
    played(2, "08:00", "09:00")
    review = reviews.add_review(turf.id, ReviewCreate(rating=5), player(1))
    reviews.add_review(turf.id, ReviewCreate(rating=3), player(2))

    updated = reviews.update_review(review.id, ReviewUpdate(rating=1, comment="Pitch flooded"), player(1))

    assert (updated.rating, updated.comment) == (1, "Pitch flooded")
    session.refresh(turf)
    assert turf.rating_average == Decimal("2")
    assert turf.rating_count == 2


def test_update_review_only_by_author(reviews, turf, played, admin):
    played(1)
    review = reviews.add_review(turf.id, ReviewCreate(rating=5), player(1))

    for other in (player(2), admin):
        with pytest.raises(ForbiddenError):
            reviews.update_review(review.id, ReviewUpdate(rating=1), other)


def test_delete_review_recomputes_average(session, reviews, turf, played, admin):
    played(1, "06:00", "07:00")
    played(2, "08:00", "09:00")
    first = reviews.add_review(turf.id, ReviewCreate(rating=5), player(1))
    second = reviews.add_review(turf.id, ReviewCreate(rating=2), player(2))

    reviews.delete_review(first.id, player(1))
    session.refresh(turf)
    assert (turf.rating_average, turf.rating_count) == (Decimal("2"), 1)

    reviews.delete_review(second.id, admin)
    session.refresh(turf)
    assert (turf.rating_average, turf.rating_count) == (Decimal("0"), 0)


def test_delete_review_rejects_strangers(reviews, turf, played):
    played(1)
    review = reviews.add_review(turf.id, ReviewCreate(rating=5), player(1))

    with pytest.raises(ForbiddenError):
        reviews.delete_review(review.id, player(2))
    with pytest.raises(ForbiddenError):
        reviews.delete_review(review.id, OWNER)


def test_deleted_review_frees_the_booking(reviews, turf, played):
    played(1)
    review = reviews.add_review(turf.id, ReviewCreate(rating=5), player(1))
    reviews.delete_review(review.id, player(1))

    assert reviews.add_review(turf.id, ReviewCreate(rating=4), player(1)).rating == 4


def test_get_review_not_found(reviews):
    with pytest.raises(NotFoundError, match="Review not found"):
        reviews.get_review(1)


@pytest.mark.parametrize(
    "payload",
    [
        {"rating": 0},
        {"rating": 6},
        {"rating": 3, "comment": "x" * 501},
        {"rating": 3, "aspects": {"staff": 0}},
        {"rating": 3, "aspects": {"facilities": 6}},
    ],
)
def test_review_payload_limits(payload):
    with pytest.raises(ValidationError):
        ReviewCreate(**payload)


def test_list_turf_reviews_newest_first(reviews, turf, played):
    played(1, "06:00", "07:00")
    played(2, "08:00", "09:00")
    older = reviews.add_review(turf.id, ReviewCreate(rating=5), player(1))
    newer = reviews.add_review(turf.id, ReviewCreate(rating=3), player(2))

    result = reviews.list_turf_reviews(turf.id, page=0, limit=1)

    assert [r.id for r in result["reviews"]] == [newer.id]
    assert result["pagination"] == {"current": 1, "pages": 2, "total": 2, "limit": 1}
    assert [r.id for r in reviews.list_turf_reviews(turf.id, page=2, limit=1)["reviews"]] == [older.id]


def test_list_turf_reviews_unknown_turf(reviews):
    with pytest.raises(NotFoundError):
        reviews.list_turf_reviews(404)


def test_update_review_keeps_unsent_aspects(reviews, turf, played):
    played(1)
    review = reviews.add_review(
        turf.id, ReviewCreate(rating=4, aspects={"cleanliness": 5, "staff": 2}), player(1)
    )

    updated = reviews.update_review(review.id, ReviewUpdate(aspects={"staff": 4}), player(1))

    assert (updated.rating, updated.cleanliness, updated.staff) == (4, 5, 4)
