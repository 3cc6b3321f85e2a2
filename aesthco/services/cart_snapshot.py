"""Sepet satırlarından donmuş sipariş kalemleri üretir (salt okunur, yan etkisiz).

Varyant tercihi: renk+beden tam eşleşme, yoksa sadece renk, yoksa sadece beden.
Sepete eklendikten sonra budanmış varyantlar yüzünden checkout kırılmasın diye
bilinçli bir gevşeme; üçü de tutmazsa VariantNotFound.
Stok kontrolü bilgi amaçlıdır: rezervasyon ya da stok düşümü yapılmaz.
"""
from dataclasses import dataclass

from aesthco.core.errors import OutOfStock, ProductInactive, VariantNotFound

from .catalog import CartLine, ProductInfo, VariantInfo


@dataclass(frozen=True)
class OrderLine:
    product_id: int
    product_name: str
    product_slug: str | None
    variant_id: int
    color_id: int | None
    size_id: int | None
    color_name: str | None
    size_name: str | None
    sku: str
    quantity: int
    unit_price: int
    total_price: int
    image_url: str | None


def match_variant(product: ProductInfo, color_id: int | None, size_id: int | None) -> VariantInfo | None:
    variants = product.variants
    for v in variants:
        if v.color_id == color_id and v.size_id == size_id:
            return v
    for v in variants:
        if v.color_id == color_id:
            return v
    for v in variants:
        if v.size_id == size_id:
            return v
    return None


def unit_price_of(variant: VariantInfo) -> int:
    if variant.sale_price is not None and variant.sale_price > 0:
        return variant.sale_price
    return variant.base_price


def pick_image(product: ProductInfo, color_id: int | None) -> str | None:
    for img in product.images:
        if color_id is not None and img.color_id == color_id:
            return img.image_url
    return product.images[0].image_url if product.images else None


def build_order_line(line: CartLine) -> OrderLine:
    product = line.product
    if product is None or not product.is_active:
        name = product.name if product else f"#{line.product_id}"
        raise ProductInactive(f"Product {name} is no longer available")

    variant = match_variant(product, line.color_id, line.size_id)
    if variant is None:
        raise VariantNotFound(f"Variant not found for product {product.name}")
    if not variant.is_available or variant.stock_quantity <= 0:
        raise OutOfStock(f"Variant out of stock for product {product.name}")

    price = unit_price_of(variant)
    return OrderLine(
        product_id=product.id,
        product_name=product.name,
        product_slug=product.slug,
        variant_id=variant.id,
        color_id=variant.color_id,
        size_id=variant.size_id,
        color_name=variant.color_name or line.color_name,
        size_name=variant.size_code or variant.size_label or line.size_label,
        sku=variant.sku,
        quantity=line.quantity,
        unit_price=price,
        total_price=price * line.quantity,
        image_url=pick_image(product, line.color_id),
    )


def build_order_lines(lines: list[CartLine]) -> list[OrderLine]:
    """İlk hatada durur; hiçbir yazma yapılmadan checkout iptal olur."""
    return [build_order_line(line) for line in lines]


def subtotal_of(lines: list[OrderLine]) -> int:
    return sum(line.total_price for line in lines)
