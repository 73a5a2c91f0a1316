"""Turf repository - Database operations for turfs"""

import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Turf, TurfClosure, TurfScheduleDay


class TurfRepository:
    """Repository for turf database operations"""

    @staticmethod
    def get_turf_by_id(db: Session, turf_id: int) -> Optional[Turf]:
        """Get a specific turf by ID"""
        return db.query(Turf).filter(Turf.id == turf_id).first()

    @staticmethod
    def create_turf(
        db: Session,
        schedule_days: list[dict],
        closures: list[dict],
        **turf_data,
    ) -> Turf:
        """Create a new turf with its weekly hours and closure dates"""
        turf = Turf(**turf_data)
        turf.schedule_days = [TurfScheduleDay(**day) for day in schedule_days]
        turf.closures = [TurfClosure(**closure) for closure in closures]
        db.add(turf)
        db.commit()
        db.refresh(turf)
        return turf

    @staticmethod
    def replace_schedule(
        db: Session,
        turf: Turf,
        schedule_days: list[dict],
        closures: Optional[list[dict]] = None,
    ) -> Turf:
        """
        Replace the weekly hours, and the closure dates when given.

        Old rows are flushed out before the new ones go in so the
        (turf, day) unique constraint never sees both.
        """
        turf.schedule_days.clear()
        if closures is not None:
            turf.closures.clear()
        db.flush()

        turf.schedule_days.extend(TurfScheduleDay(**day) for day in schedule_days)
        if closures is not None:
            turf.closures.extend(TurfClosure(**closure) for closure in closures)

        db.commit()
        db.refresh(turf)
        return turf

    @staticmethod
    def get_closure(
        db: Session, turf_id: int, on_date: datetime.date, kind: str
    ) -> Optional[TurfClosure]:
        return (
            db.query(TurfClosure)
            .filter(
                TurfClosure.turf_id == turf_id,
                TurfClosure.date == on_date,
                TurfClosure.kind == kind,
            )
            .first()
        )

    @staticmethod
    def add_closure(db: Session, turf: Turf, **closure_data) -> TurfClosure:
        """Add a holiday or maintenance date"""
        closure = TurfClosure(turf_id=turf.id, **closure_data)
        db.add(closure)
        db.commit()
        db.refresh(closure)
        db.expire(turf, ["closures"])
        return closure

    @staticmethod
    def claim_booking_version(db: Session, turf_id: int, expected_version: int) -> bool:
        """
        Advance the turf's booking version if it still equals ``expected_version``.

        Runs inside the caller's transaction and does not commit. Returns
        False when another transaction bumped the version first.
        """
        updated = (
            db.query(Turf)
            .filter(Turf.id == turf_id, Turf.booking_version == expected_version)
            .update({Turf.booking_version: expected_version + 1}, synchronize_session=False)
        )
        return updated == 1
