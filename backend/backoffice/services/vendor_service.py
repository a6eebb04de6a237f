# Overview: Service-layer operations for vendors; encapsulates business logic and database work.

"""
Vendor Service

Vendors supply the raw material recorded by gate-in invoices.
Email and phone are unique across all vendors; uniqueness is pre-checked
here so the caller gets a field-specific message instead of a raw
constraint violation.

Deletion is a hard delete with no reference check: gate-in records keep
their vendor_id and simply stop resolving.
"""

from decimal import Decimal

from ..extensions import db
from ..models import GateInRecord, Vendor
from ..validation import (
    ConflictError,
    DIGITS_RE,
    NotFoundError,
    ValidationError,
    amount_out,
    is_valid_email,
    require_choice,
    require_text,
)
from backoffice.time_utils import to_utc_z


VENDOR_STATUSES = ("Active", "Inactive")

UPDATABLE_FIELDS = {"name", "email", "phone", "address", "company", "status"}


def _clean_name(value) -> str:
    return require_text(value, "name", min_length=2)


def _clean_email(value) -> str:
    email = require_text(value, "email").lower()
    if not is_valid_email(email):
        raise ValidationError("Please provide a valid email", errors={"email": "invalid email"})
    return email


def _clean_phone(value) -> str:
    phone = require_text(value, "phone")
    if not DIGITS_RE.match(phone):
        raise ValidationError("Phone number can only contain digits", errors={"phone": "digits only"})
    if len(phone) < 10:
        raise ValidationError("Phone number must be at least 10 digits", errors={"phone": "too short"})
    return phone


def _clean_address(value) -> str:
    return require_text(value, "address", min_length=5)


def _clean_company(value) -> str | None:
    if value is None:
        return None
    company = str(value).strip()
    return company or None


def _ensure_unique(*, email: str | None, phone: str | None, exclude_id: int | None = None) -> None:
    if email is not None:
        q = db.session.query(Vendor.id).filter(Vendor.email == email)
        if exclude_id is not None:
            q = q.filter(Vendor.id != exclude_id)
        if q.first():
            raise ConflictError("Email already registered")
    if phone is not None:
        q = db.session.query(Vendor.id).filter(Vendor.phone == phone)
        if exclude_id is not None:
            q = q.filter(Vendor.id != exclude_id)
        if q.first():
            raise ConflictError("Phone number already registered")


def get_vendor(vendor_id: int) -> Vendor:
    vendor = db.session.get(Vendor, vendor_id)
    if not vendor:
        raise NotFoundError("Vendor not found")
    return vendor


def list_vendors(*, search: str | None = None, status: str | None = None) -> list[Vendor]:
    q = db.session.query(Vendor)
    if status:
        q = q.filter(Vendor.status == status)
    if search:
        like = f"%{search.strip()}%"
        q = q.filter(
            Vendor.name.ilike(like)
            | Vendor.email.ilike(like)
            | Vendor.phone.ilike(like)
            | Vendor.company.ilike(like)
        )
    return q.order_by(Vendor.created_at.desc(), Vendor.id.desc()).all()


def create_vendor(
    *,
    name,
    email,
    phone,
    address,
    company=None,
    status="Active",
) -> Vendor:
    """
    Create a vendor.

    Raises:
        ValidationError: malformed field
        ConflictError: email or phone already used by another vendor
    """
    vendor = Vendor(
        name=_clean_name(name),
        email=_clean_email(email),
        phone=_clean_phone(phone),
        address=_clean_address(address),
        company=_clean_company(company),
        status=require_choice(status or "Active", "status", VENDOR_STATUSES),
    )
    _ensure_unique(email=vendor.email, phone=vendor.phone)

    db.session.add(vendor)
    db.session.commit()
    return vendor


def update_vendor(vendor_id: int, patch: dict) -> Vendor:
    """Partial update; email/phone uniqueness is checked against other vendors."""
    vendor = get_vendor(vendor_id)

    unknown = set(patch) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Field not allowed: {sorted(unknown)[0]}")

    email = _clean_email(patch["email"]) if "email" in patch else None
    phone = _clean_phone(patch["phone"]) if "phone" in patch else None
    _ensure_unique(email=email, phone=phone, exclude_id=vendor.id)

    if "name" in patch:
        vendor.name = _clean_name(patch["name"])
    if email is not None:
        vendor.email = email
    if phone is not None:
        vendor.phone = phone
    if "address" in patch:
        vendor.address = _clean_address(patch["address"])
    if "company" in patch:
        vendor.company = _clean_company(patch["company"])
    if "status" in patch:
        vendor.status = require_choice(patch["status"], "status", VENDOR_STATUSES)

    db.session.commit()
    return vendor


def delete_vendor(vendor_id: int) -> None:
    vendor = get_vendor(vendor_id)
    db.session.delete(vendor)
    db.session.commit()


def vendor_ledger(vendor_id: int) -> dict:
    """
    Derived statement of everything received from a vendor.

    Records are walked oldest first; each row carries its paid amount,
    outstanding balance and the running balance across the vendor.
    """
    vendor = get_vendor(vendor_id)
    records = (
        db.session.query(GateInRecord)
        .filter(GateInRecord.vendor_id == vendor.id)
        .order_by(GateInRecord.date.asc(), GateInRecord.id.asc())
        .all()
    )

    total_billed = Decimal("0")
    total_paid = Decimal("0")
    entries = []
    for record in records:
        paid = Decimal(record.amount_paid)
        billed = Decimal(record.total_amount)
        total_billed += billed
        total_paid += paid
        entries.append({
            "id": record.id,
            "invoice_number": record.invoice_number,
            "date": to_utc_z(record.date),
            "total_amount": amount_out(billed),
            "amount_paid": amount_out(paid),
            "balance": amount_out(billed - paid),
            "running_balance": amount_out(total_billed - total_paid),
            "payment_status": record.payment_status,
        })

    return {
        "vendor": vendor.to_dict(),
        "entries": entries,
        "total_billed": amount_out(total_billed),
        "total_paid": amount_out(total_paid),
        "balance": amount_out(total_billed - total_paid),
    }
