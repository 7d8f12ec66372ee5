# clientkeeper/routers/auth_routes.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session

from clientkeeper.auth import authenticate_user, create_access_token
from clientkeeper.db import get_session
from clientkeeper.schemas import Token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=Token)
def login(
    form: OAuth2PasswordRequestForm = Depends(),
    session: Session = Depends(get_session),
):
    # the OAuth2 form calls the login field "username"; staff log in by email
    staff = authenticate_user(session, form.username, form.password)
    if staff is None:
        logger.warning(f"Failed login for {form.username}")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    logger.info(f"User {staff.id} logged in ({staff.role})")
    return Token(access_token=create_access_token({"sub": staff.email, "role": staff.role}))
