import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import auth
from ..config import Settings
from ..database import get_db
from ..dependencies import get_app_settings
from ..errors import Conflict, Unauthorized
from ..models import User
from ..rate_limit import LOGIN_RATE_LIMIT, SIGNUP_RATE_LIMIT, rate_limited
from ..responses import success_response
from ..schemas import LoginRequest, SignupRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/signup",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limited(SIGNUP_RATE_LIMIT))],
)
def signup(
    user_in: SignupRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    # fast path only; the unique index on username is what actually guards this
    if auth.get_user_by_username(db, user_in.username):
        raise Conflict("username already exists")

    user = User(
        username=user_in.username,
        hashed_password=auth.get_password_hash(user_in.password, settings),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("username already exists") from exc
    db.refresh(user)

    logger.info("Registered user %s (%s)", user.username, user.id)
    return success_response("User signup successfully", userId=user.id)


@router.post("/login", dependencies=[Depends(rate_limited(LOGIN_RATE_LIMIT))])
def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    user = auth.get_user_by_username(db, credentials.username)
    if not user:
        raise Unauthorized("user does not exist")

    if not auth.verify_password(credentials.password, user.hashed_password, settings):
        logger.info("Rejected login for %s: incorrect password", user.username)
        raise Unauthorized("incorrect password")

    token = auth.create_access_token(user_id=user.id, username=user.username, settings=settings)
    return success_response("signin successfully", token=token)
