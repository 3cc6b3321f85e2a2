from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from aesthco.api.deps import get_current_user
from aesthco.core.database import get_db
from aesthco.models import User, UserAddress
from aesthco.schemas import AddressCreate, AddressResponse, AddressUpdate
from aesthco.services.address_book import (
    add_address,
    delete_address,
    list_addresses,
    set_default_address,
    update_address,
)

router = APIRouter(prefix="/addresses", tags=["addresses"])


def _address_response(a: UserAddress) -> AddressResponse:
    return AddressResponse.model_validate(a)


@router.get("", response_model=list[AddressResponse])
def get_addresses(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return [_address_response(a) for a in list_addresses(db, user.id)]


@router.post("", response_model=AddressResponse, status_code=201)
def create_address(
    body: AddressCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _address_response(add_address(db, user, body))


@router.put("/{address_id}", response_model=AddressResponse)
def edit_address(
    address_id: int,
    body: AddressUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _address_response(update_address(db, user, address_id, body))


@router.post("/{address_id}/default", response_model=AddressResponse)
def make_default_address(
    address_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _address_response(set_default_address(db, user, address_id))


@router.delete("/{address_id}", status_code=204)
def remove_address(
    address_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    delete_address(db, user, address_id)
    return Response(status_code=204)
