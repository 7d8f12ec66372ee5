# clientkeeper/routers/users_routes.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from clientkeeper import store
from clientkeeper.auth import get_current_user, get_user_by_email, hash_password
from clientkeeper.db import get_session
from clientkeeper.models import User
from clientkeeper.schemas import UserCreate, UserPublic

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


@router.get("/me", response_model=UserPublic)
def me(current_user: dict = Depends(get_current_user)):
    return current_user


@router.post("/users", status_code=201, response_model=UserPublic)
def register_user(
    account: UserCreate,
    session: Session = Depends(get_session),
):
    if get_user_by_email(session, account.email) is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    created = User(
        email=account.email,
        name=account.name,
        password_hash=hash_password(account.password),
        role=account.role.value,
    )
    created = store.save(session, created)
    logger.info(f"Registered user {created.id} as {created.role}")
    return created
