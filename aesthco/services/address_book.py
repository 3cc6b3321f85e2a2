"""Adres defteri: checkout'a sahibi doğrulanmış adres verir."""
from sqlmodel import Session, select

from aesthco.core.errors import AddressNotFound
from aesthco.models import User, UserAddress
from aesthco.schemas import AddressCreate, AddressUpdate


def get_address(db: Session, address_id: int, owner_id: int) -> UserAddress:
    """Başkasının adresi de yokmuş gibi davranır (404)."""
    addr = db.exec(
        select(UserAddress).where(UserAddress.id == address_id, UserAddress.user_id == owner_id)
    ).first()
    if not addr:
        raise AddressNotFound()
    return addr


def list_addresses(db: Session, owner_id: int) -> list[UserAddress]:
    stmt = (
        select(UserAddress)
        .where(UserAddress.user_id == owner_id)
        .order_by(UserAddress.is_default.desc(), UserAddress.id)
    )
    return list(db.exec(stmt).all())


def add_address(db: Session, user: User, body: AddressCreate) -> UserAddress:
    existing = list_addresses(db, user.id)
    is_default = body.is_default or not existing  # ilk adres varsayılan olur
    if is_default:
        for other in existing:
            if other.is_default:
                other.is_default = False
                db.add(other)
    addr = UserAddress(
        user_id=user.id,
        name=(body.name or "").strip() or user.full_name or user.email,
        phone_number=(body.phone_number or "").strip() or user.phone_number,
        address_line1=body.address_line1,
        address_line2=(body.address_line2 or "").strip() or None,
        city=body.city,
        state=body.state,
        postal_code=(body.postal_code or "").strip() or None,
        address_type=body.address_type,
        is_default=is_default,
    )
    db.add(addr)
    db.commit()
    db.refresh(addr)
    return addr


def _clear_default(db: Session, owner_id: int, keep_id: int | None = None) -> None:
    for other in list_addresses(db, owner_id):
        if other.is_default and other.id != keep_id:
            other.is_default = False
            db.add(other)


def update_address(db: Session, user: User, address_id: int, body: AddressUpdate) -> UserAddress:
    addr = get_address(db, address_id, user.id)
    changes = body.model_dump(exclude_unset=True)
    make_default = changes.pop("is_default", None) is True
    # Boş bırakılan isteğe bağlı alanlar profile/None'a döner, ekleme ile aynı kural
    if "name" in changes:
        changes["name"] = (changes["name"] or "").strip() or user.full_name or user.email
    if "phone_number" in changes:
        changes["phone_number"] = (changes["phone_number"] or "").strip() or user.phone_number
    for key in ("address_line2", "postal_code"):
        if key in changes:
            changes[key] = (changes[key] or "").strip() or None
    for key, value in changes.items():
        setattr(addr, key, value)
    if make_default and not addr.is_default:
        _clear_default(db, user.id, keep_id=addr.id)
        addr.is_default = True
    db.add(addr)
    db.commit()
    db.refresh(addr)
    return addr


def set_default_address(db: Session, user: User, address_id: int) -> UserAddress:
    addr = get_address(db, address_id, user.id)
    _clear_default(db, user.id, keep_id=addr.id)
    addr.is_default = True
    db.add(addr)
    db.commit()
    db.refresh(addr)
    return addr


def delete_address(db: Session, user: User, address_id: int) -> None:
    """Siparişler adresin kopyasını tuttuğu için silmek geçmişi bozmaz.
    Varsayılan silinirse kalanların en eskisi varsayılan olur."""
    addr = get_address(db, address_id, user.id)
    was_default = addr.is_default
    db.delete(addr)
    db.flush()
    if was_default:
        rest = list_addresses(db, user.id)
        if rest:
            heir = min(rest, key=lambda a: a.id)
            heir.is_default = True
            db.add(heir)
    db.commit()
