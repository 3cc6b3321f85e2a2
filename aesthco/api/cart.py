"""Sepet: (ürün, renk, beden) başına tek satır; aynı kombinasyon tekrar eklenirse adet artar."""
from fastapi import APIRouter, Depends, Response
from sqlalchemy import delete
from sqlmodel import Session, select

from aesthco.api.deps import get_current_user
from aesthco.core.database import get_db
from aesthco.core.errors import NotFound, ProductInactive
from aesthco.models import CartItem, Product, User
from aesthco.schemas import CartItemCreate, CartItemResponse, CartItemUpdate

router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_response(item: CartItem) -> CartItemResponse:
    return CartItemResponse.model_validate(item)


def _own_item(db: Session, item_id: int, user_id: int) -> CartItem:
    item = db.exec(select(CartItem).where(CartItem.id == item_id, CartItem.user_id == user_id)).first()
    if not item:
        raise NotFound("Cart item not found", code="cart_item_not_found")
    return item


@router.get("", response_model=list[CartItemResponse])
def get_cart(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    items = db.exec(select(CartItem).where(CartItem.user_id == user.id).order_by(CartItem.id)).all()
    return [_cart_response(i) for i in items]


@router.post("", response_model=CartItemResponse, status_code=201)
def add_to_cart(
    body: CartItemCreate,
    response: Response,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    product = db.get(Product, body.product_id)
    if not product:
        raise NotFound("Product not found", code="product_not_found")
    if not product.is_active:
        raise ProductInactive(f"Product {product.name} is no longer available")
    existing = db.exec(
        select(CartItem).where(
            CartItem.user_id == user.id,
            CartItem.product_id == body.product_id,
            CartItem.color_id == body.color_id if body.color_id is not None else CartItem.color_id.is_(None),
            CartItem.size_id == body.size_id if body.size_id is not None else CartItem.size_id.is_(None),
        )
    ).first()
    if existing:
        existing.quantity += body.quantity
        db.add(existing)
        db.commit()
        db.refresh(existing)
        response.status_code = 200
        return _cart_response(existing)
    item = CartItem(
        user_id=user.id,
        product_id=body.product_id,
        color_id=body.color_id,
        size_id=body.size_id,
        quantity=body.quantity,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return _cart_response(item)


@router.put("/{item_id}", response_model=CartItemResponse)
def update_cart_item(
    item_id: int,
    body: CartItemUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    item = _own_item(db, item_id, user.id)
    item.quantity = body.quantity
    db.add(item)
    db.commit()
    db.refresh(item)
    return _cart_response(item)


@router.delete("/{item_id}", status_code=204)
def remove_cart_item(item_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    item = _own_item(db, item_id, user.id)
    db.delete(item)
    db.commit()
    return Response(status_code=204)


@router.delete("", status_code=204)
def clear_cart(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    db.execute(delete(CartItem).where(CartItem.user_id == user.id))
    db.commit()
    return Response(status_code=204)
