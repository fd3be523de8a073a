import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_booking_update, get_current_identity, get_owned_booking
from ..errors import InvalidInput, NotFound
from ..models import Booking, BookingStatus
from ..responses import success_response
from ..schemas import BookingCreate, BookingUpdate, TokenData

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])

# completed and cancelled are terminal
STATUS_TRANSITIONS: Dict[BookingStatus, set] = {
    BookingStatus.BOOKED: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}


def calculate_booking_cost(days: int, rent_per_day: float) -> float:
    return days * rent_per_day


def _booking_view(booking: Booking) -> Dict[str, Any]:
    return {
        "id": booking.id,
        "car_name": booking.car_name,
        "days": booking.days,
        "rent_per_day": booking.rent_per_day,
        "status": BookingStatus(booking.status).value,
        "totalCost": calculate_booking_cost(booking.days, booking.rent_per_day),
    }


def _ensure_transition(current: BookingStatus, target: BookingStatus) -> None:
    if target != current and target not in STATUS_TRANSITIONS[current]:
        raise InvalidInput("invalid status transition")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_booking(
    booking_in: BookingCreate,
    identity: TokenData = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> dict:
    booking = Booking(
        user_id=identity.user_id,
        car_name=booking_in.car_name,
        days=booking_in.days,
        rent_per_day=booking_in.rent_per_day,
        status=BookingStatus.BOOKED,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)

    logger.info("User %s booked %s for %d days (booking %s)", identity.user_id, booking.car_name, booking.days, booking.id)
    return success_response(
        "Booking created successfully",
        bookingId=booking.id,
        totalCost=calculate_booking_cost(booking_in.days, booking_in.rent_per_day),
    )


def _bookings_summary(db: Session, identity: TokenData) -> dict:
    owned = db.query(func.count(Booking.id)).filter(Booking.user_id == identity.user_id).scalar()
    if not owned:
        raise NotFound("Bookings not found")

    total_bookings, total_amount_spent = (
        db.query(
            func.count(Booking.id),
            func.coalesce(func.sum(Booking.days * Booking.rent_per_day), 0),
        )
        .filter(Booking.user_id == identity.user_id, Booking.status != BookingStatus.CANCELLED)
        .one()
    )
    return success_response(
        "Bookings summary",
        userId=identity.user_id,
        username=identity.username,
        totalBookings=total_bookings,
        totalAmountSpent=float(total_amount_spent),
    )


@router.get("/{booking_id}")
def get_booking(
    booking_id: int,
    summary: bool = Query(False, description="Return the caller's booking summary instead of a single booking"),
    identity: TokenData = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> dict:
    """Fetch one booking by id, or the caller's aggregate when ``summary`` is set.

    The single-booking view is not restricted to the owner. The summary
    ignores ``booking_id`` and leaves cancelled bookings out of both totals.
    """
    if summary:
        return _bookings_summary(db, identity)

    booking = db.get(Booking, booking_id)
    if booking is None:
        raise NotFound("bookingId not found")
    return success_response(f"Booking {booking_id} found", **_booking_view(booking))


@router.put("/{booking_id}")
def update_booking(
    booking_update: BookingUpdate = Depends(get_booking_update),
    booking: Booking = Depends(get_owned_booking),
    db: Session = Depends(get_db),
) -> dict:
    if booking_update.is_status_change:
        _ensure_transition(BookingStatus(booking.status), booking_update.status)
        booking.status = booking_update.status
    else:
        booking.car_name = booking_update.car_name
        booking.days = booking_update.days
        booking.rent_per_day = booking_update.rent_per_day
    db.commit()
    db.refresh(booking)

    logger.info("Updated booking %s (status=%s)", booking.id, BookingStatus(booking.status).value)
    return success_response("Booking updated successfully", booking=_booking_view(booking))


@router.delete("/{booking_id}")
def delete_booking(
    booking: Booking = Depends(get_owned_booking),
    db: Session = Depends(get_db),
) -> dict:
    booking_id = booking.id
    db.delete(booking)
    db.commit()

    logger.info("Deleted booking %s", booking_id)
    return success_response("Booking deleted successfully")
