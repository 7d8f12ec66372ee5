# clientkeeper/deps.py

from fastapi import HTTPException
from sqlmodel import Session

from clientkeeper import store
from clientkeeper.models import Customer, Dog


def require_role(user: dict, role: str):
    if user["role"] != role:
        raise HTTPException(status_code=403, detail="Forbidden")


def resolve_booking_refs(session: Session, customer_id: int, dog_id: int) -> tuple[Customer, Dog]:
    """Customer and dog must exist and the dog must belong to the customer."""
    customer = store.get_customer(session, customer_id)
    if customer is None:
        raise HTTPException(status_code=400, detail="Customer not found. Please select a valid customer.")

    dog = store.get_dog(session, dog_id)
    if dog is None:
        raise HTTPException(status_code=400, detail="Dog not found. Please select a valid dog.")

    if dog.owner_id != customer.id:
        raise HTTPException(status_code=400, detail="Dog does not belong to the specified customer.")

    return customer, dog
