# Overview: Service-layer operations for the raw-material and product catalogs; encapsulates business logic and database work.

"""
Catalog Service

Two small catalogs validated through the shared column-driven
validate_payload() policy layer:

- RawProduct: raw materials picked when recording gate-in items (unique name)
- Product: finished goods (unique sku) whose stock status follows quantity
  unless the caller sets it explicitly
"""

from ..extensions import db
from ..models import Product, RawProduct
from ..validation import (
    ConflictError,
    ModelValidationPolicy,
    NotFoundError,
    enforce_non_negative,
    require_choice,
    validate_payload,
)


RAW_PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "price", "unit", "stock", "category"},
    required_on_create={"name", "price", "unit"},
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "sku", "category", "price", "quantity", "status", "image"},
    required_on_create={"name", "sku", "price"},
)

STOCK_STATUSES = ("In Stock", "Low Stock", "Out of Stock")

LOW_STOCK_THRESHOLD = 10


def stock_status(quantity: int) -> str:
    if quantity > LOW_STOCK_THRESHOLD:
        return "In Stock"
    if quantity > 0:
        return "Low Stock"
    return "Out of Stock"


# =============================================================================
# Raw products
# =============================================================================

def _raw_name_taken(name: str, exclude_id: int | None = None) -> bool:
    q = db.session.query(RawProduct.id).filter(RawProduct.name == name)
    if exclude_id is not None:
        q = q.filter(RawProduct.id != exclude_id)
    return q.first() is not None


def list_raw_products() -> list[RawProduct]:
    return db.session.query(RawProduct).order_by(RawProduct.name.asc()).all()


def get_raw_product(raw_product_id: int) -> RawProduct:
    raw = db.session.get(RawProduct, raw_product_id)
    if not raw:
        raise NotFoundError("Raw product not found")
    return raw


def create_raw_product(payload: dict) -> RawProduct:
    patch = validate_payload(model=RawProduct, payload=payload, policy=RAW_PRODUCT_POLICY, partial=False)
    enforce_non_negative(patch, "price", "stock")
    if _raw_name_taken(patch["name"]):
        raise ConflictError("Raw product with this name already exists")

    raw = RawProduct(**patch)
    db.session.add(raw)
    db.session.commit()
    return raw


def update_raw_product(raw_product_id: int, payload: dict) -> RawProduct:
    raw = get_raw_product(raw_product_id)
    patch = validate_payload(model=RawProduct, payload=payload, policy=RAW_PRODUCT_POLICY, partial=True)
    enforce_non_negative(patch, "price", "stock")
    if "name" in patch and _raw_name_taken(patch["name"], exclude_id=raw.id):
        raise ConflictError("Raw product with this name already exists")

    for key, value in patch.items():
        setattr(raw, key, value)
    db.session.commit()
    return raw


def delete_raw_product(raw_product_id: int) -> None:
    raw = get_raw_product(raw_product_id)
    db.session.delete(raw)
    db.session.commit()


# =============================================================================
# Products
# =============================================================================

def _sku_taken(sku: str, exclude_id: int | None = None) -> bool:
    q = db.session.query(Product.id).filter(Product.sku == sku)
    if exclude_id is not None:
        q = q.filter(Product.id != exclude_id)
    return q.first() is not None


def list_products() -> list[Product]:
    return db.session.query(Product).order_by(Product.created_at.desc(), Product.id.desc()).all()


def get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    return product


def create_product(payload: dict) -> Product:
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    enforce_non_negative(patch, "price", "quantity")
    if _sku_taken(patch["sku"]):
        raise ConflictError("Product with this SKU already exists")

    patch.setdefault("quantity", 0)
    if patch.get("status"):
        require_choice(patch["status"], "status", STOCK_STATUSES)
    else:
        patch["status"] = stock_status(patch["quantity"] or 0)

    product = Product(**patch)
    db.session.add(product)
    db.session.commit()
    return product


def update_product(product_id: int, payload: dict) -> Product:
    """Merge fields; status is re-derived from quantity unless supplied."""
    product = get_product(product_id)
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
    enforce_non_negative(patch, "price", "quantity")
    if "sku" in patch and _sku_taken(patch["sku"], exclude_id=product.id):
        raise ConflictError("Product with this SKU already exists")

    for key, value in patch.items():
        if key != "status":
            setattr(product, key, value)

    if patch.get("status"):
        product.status = require_choice(patch["status"], "status", STOCK_STATUSES)
    else:
        product.status = stock_status(product.quantity or 0)

    db.session.commit()
    return product


def delete_product(product_id: int) -> None:
    product = get_product(product_id)
    db.session.delete(product)
    db.session.commit()
