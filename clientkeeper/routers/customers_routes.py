# clientkeeper/routers/customers_routes.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from clientkeeper import store
from clientkeeper.auth import get_current_user
from clientkeeper.db import get_session
from clientkeeper.models import Customer
from clientkeeper.schemas import CustomerCreate, CustomerPublic, DogPublic

router = APIRouter(
    prefix="/customers",
    tags=["customers"],
)


@router.get("", response_model=List[CustomerPublic])
def list_customers(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return store.list_customers(session)


@router.post("", response_model=CustomerPublic, status_code=201)
def create_customer(
    customer: CustomerCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return store.save(session, Customer(**customer.model_dump()))


@router.get("/{customer_id}", response_model=CustomerPublic)
def get_customer(
    customer_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    customer = store.get_customer(session, customer_id)
    if customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.get("/{customer_id}/dogs", response_model=List[DogPublic])
def list_customer_dogs(
    customer_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    if store.get_customer(session, customer_id) is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return store.list_dogs(session, owner_id=customer_id)
