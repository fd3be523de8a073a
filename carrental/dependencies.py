"""Reusable FastAPI dependencies for settings, auth and booking ownership."""
from typing import Optional

from fastapi import Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError
from sqlalchemy.orm import Session

from .auth import decode_token
from .config import Settings
from .database import get_db
from .errors import Forbidden, InvalidInput, NotFound, Unauthorized
from .models import Booking
from .schemas import BookingUpdate, TokenData

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
) -> TokenData:
    """Verify the bearer token and expose the identity it carries.

    No datastore lookup happens here; the claims are trusted once the
    signature checks out.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized("unauthorized")

    payload = decode_token(credentials.credentials, settings)
    try:
        identity = TokenData(user_id=payload.get("userId"), username=payload.get("username"))
    except ValidationError as exc:
        raise Unauthorized("invalid token") from exc

    request.state.identity = identity
    return identity


def get_owned_booking(
    booking_id: int,
    identity: TokenData = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> Booking:
    """Load a booking the caller is allowed to mutate.

    Runs before the request body is validated, so a caller who does not own
    the booking gets 403 whatever the payload looks like.
    """
    booking = db.get(Booking, booking_id)
    if booking is None:
        raise NotFound("booking not found")
    if booking.user_id != identity.user_id:
        raise Forbidden("booking does not belong to user")
    return booking


async def get_booking_update(
    request: Request,
    booking: Booking = Depends(get_owned_booking),
) -> BookingUpdate:
    """Parse the update body only once ownership has been established."""
    try:
        payload = await request.json()
    except ValueError as exc:
        raise InvalidInput() from exc
    try:
        return BookingUpdate.model_validate(payload)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False)) from exc
