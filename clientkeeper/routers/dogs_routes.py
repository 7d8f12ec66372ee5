# clientkeeper/routers/dogs_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from clientkeeper import store
from clientkeeper.auth import get_current_user
from clientkeeper.db import get_session
from clientkeeper.models import Dog
from clientkeeper.schemas import DogCreate, DogPublic

router = APIRouter(
    prefix="/dogs",
    tags=["dogs"],
)


@router.get("", response_model=List[DogPublic])
def list_dogs(
    owner_id: Optional[int] = Query(default=None, alias="ownerId"),
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return store.list_dogs(session, owner_id=owner_id)


@router.post("", response_model=DogPublic, status_code=201)
def create_dog(
    dog: DogCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    if store.get_customer(session, dog.owner_id) is None:
        raise HTTPException(status_code=400, detail="Owner not found. Please select a valid customer.")
    return store.save(session, Dog(**dog.model_dump()))


@router.get("/{dog_id}", response_model=DogPublic)
def get_dog(
    dog_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    dog = store.get_dog(session, dog_id)
    if dog is None:
        raise HTTPException(status_code=404, detail="Dog not found")
    return dog
