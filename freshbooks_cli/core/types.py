"""
Core types for FreshBooks API responses.

Each model declares a static FIELDS table of (wire key, attribute, cast).
from_dict applies the table to a response mapping and to_dict reverses it to
build request bodies, so the renaming rules for every entity are visible in
one place.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import IntEnum
from typing import Any, ClassVar, Generic, NamedTuple, TypeVar

from freshbooks_cli.core.errors import UnexpectedResponseShapeError

T = TypeVar("T")
M = TypeVar("M", bound="DataModel")


# =============================================================================
# Field mapping
# =============================================================================


class FieldMap(NamedTuple):
    """One row of a model's field table."""

    wire_key: str
    name: str
    cast: Callable[[Any], Any] | None = None


def parse_datetime(value: str) -> datetime:
    """Parse FreshBooks timestamps (``2021-06-09T20:01:18Z`` or ``2021-06-09 15:00:00``)."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def parse_date(value: str) -> date:
    return date.fromisoformat(value)


def _shape_error(expected: str, data: Any) -> UnexpectedResponseShapeError:
    return UnexpectedResponseShapeError(
        "Returned an unexpected response",
        details={"expected": expected, "received": type(data).__name__},
    )


def _dump(value: Any) -> Any:
    if isinstance(value, DataModel):
        return value.to_dict()
    if isinstance(value, list):
        return [_dump(v) for v in value]
    if isinstance(value, IntEnum):
        return int(value)
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


@dataclass
class DataModel:
    """Base class for models built from a FIELDS table."""

    FIELDS: ClassVar[tuple[FieldMap, ...]] = ()

    @classmethod
    def from_dict(cls: type[M], data: dict[str, Any]) -> M:
        """Create from API response dict."""
        if not isinstance(data, Mapping):
            raise _shape_error(cls.__name__, data)
        kwargs: dict[str, Any] = {}
        for mapping in cls.FIELDS:
            if mapping.wire_key not in data:
                continue
            value = data[mapping.wire_key]
            if value is not None and mapping.cast is not None:
                value = mapping.cast(value)
            kwargs[mapping.name] = value
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request, skipping unset fields."""
        result: dict[str, Any] = {}
        for mapping in self.FIELDS:
            value = getattr(self, mapping.name)
            if value is None:
                continue
            result[mapping.wire_key] = _dump(value)
        return result


def nested(model: type[M]) -> Callable[[Any], M]:
    return model.from_dict


def nested_list(model: type[M]) -> Callable[[Any], list[M]]:
    return lambda values: [model.from_dict(v) for v in values]


# =============================================================================
# Shared value types
# =============================================================================


class VisState(IntEnum):
    """Visibility state of accounting records."""

    ACTIVE = 0
    DELETED = 1
    ARCHIVED = 2


@dataclass
class Money(DataModel):
    """An amount and its ISO currency code."""

    amount: Decimal | None = None
    code: str | None = None

    FIELDS: ClassVar[tuple[FieldMap, ...]] = (
        FieldMap("amount", "amount", Decimal),
        FieldMap("code", "code"),
    )


# =============================================================================
# Pagination
# =============================================================================


def compute_pages(total: int | None, per_page: int | None) -> int:
    """
    Number of pages when the server omits it.

    This is floor(total / per_page) + 1, which over-counts by one when total
    divides evenly. Kept as-is for compatibility with existing callers.
    Missing (None) values count as zero.
    """
    if not per_page:
        return 1
    return int(total or 0) // int(per_page) + 1


@dataclass
class PaginationMeta:
    """Pagination details of a list response."""

    total: int = 0
    per_page: int = 0
    page: int = 1
    pages: int = 1

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PaginationMeta":
        """
        Create from a ``meta`` mapping or an accounting list result.

        Null numbers are treated as absent.
        """
        if not isinstance(data, Mapping):
            raise _shape_error(cls.__name__, data)

        def number(key: str, default: int | None) -> int | None:
            value = data.get(key)
            if value is None:
                return default
            try:
                return int(value)
            except (TypeError, ValueError) as e:
                raise UnexpectedResponseShapeError(
                    "Returned an unexpected response", details={"field": key, "value": value}
                ) from e

        total = number("total", 0)
        per_page = number("per_page", 0)
        pages = number("pages", None)
        return cls(
            total=total,
            per_page=per_page,
            page=number("page", 1),
            pages=pages if pages is not None else compute_pages(total, per_page),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"total": self.total, "per_page": self.per_page, "page": self.page, "pages": self.pages}


@dataclass
class ListResult(Generic[T]):
    """A page of typed results."""

    items: list[T]
    meta: PaginationMeta = field(default_factory=PaginationMeta)

    @property
    def has_more(self) -> bool:
        """Check if there are more pages after this one."""
        return self.meta.page < self.meta.pages

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


# =============================================================================
# Accounting models
# =============================================================================


@dataclass
class Client(DataModel):
    """A client (customer) of the business."""

    id: int | None = None
    user_id: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    organization: str | None = None
    email: str | None = None
    business_phone: str | None = None
    mobile_phone: str | None = None
    street: str | None = None
    city: str | None = None
    province: str | None = None
    country: str | None = None
    postal_code: str | None = None
    currency_code: str | None = None
    language: str | None = None
    vis_state: VisState | None = None
    updated: datetime | None = None

    FIELDS: ClassVar[tuple[FieldMap, ...]] = (
        FieldMap("id", "id", int),
        FieldMap("userid", "user_id", int),
        FieldMap("fname", "first_name"),
        FieldMap("lname", "last_name"),
        FieldMap("organization", "organization"),
        FieldMap("email", "email"),
        FieldMap("bus_phone", "business_phone"),
        FieldMap("mob_phone", "mobile_phone"),
        FieldMap("p_street", "street"),
        FieldMap("p_city", "city"),
        FieldMap("p_province", "province"),
        FieldMap("p_country", "country"),
        FieldMap("p_code", "postal_code"),
        FieldMap("currency_code", "currency_code"),
        FieldMap("language", "language"),
        FieldMap("vis_state", "vis_state", VisState),
        FieldMap("updated", "updated", parse_datetime),
    )


@dataclass
class Invoice(DataModel):
    """An invoice issued to a client."""

    id: int | None = None
    invoice_id: int | None = None
    invoice_number: str | None = None
    customer_id: int | None = None
    create_date: date | None = None
    due_date: date | None = None
    amount: Money | None = None
    outstanding: Money | None = None
    paid: Money | None = None
    status: int | None = None
    v3_status: str | None = None
    payment_status: str | None = None
    currency_code: str | None = None
    notes: str | None = None
    lines: list[dict[str, Any]] | None = None
    vis_state: VisState | None = None
    created_at: datetime | None = None
    updated: datetime | None = None

    FIELDS: ClassVar[tuple[FieldMap, ...]] = (
        FieldMap("id", "id", int),
        FieldMap("invoiceid", "invoice_id", int),
        FieldMap("invoice_number", "invoice_number"),
        FieldMap("customerid", "customer_id", int),
        FieldMap("create_date", "create_date", parse_date),
        FieldMap("due_date", "due_date", parse_date),
        FieldMap("amount", "amount", nested(Money)),
        FieldMap("outstanding", "outstanding", nested(Money)),
        FieldMap("paid", "paid", nested(Money)),
        FieldMap("status", "status", int),
        FieldMap("v3_status", "v3_status"),
        FieldMap("payment_status", "payment_status"),
        FieldMap("currency_code", "currency_code"),
        FieldMap("notes", "notes"),
        FieldMap("lines", "lines"),
        FieldMap("vis_state", "vis_state", VisState),
        FieldMap("created_at", "created_at", parse_datetime),
        FieldMap("updated", "updated", parse_datetime),
    )


@dataclass
class Payment(DataModel):
    """A payment applied to an invoice."""

    id: int | None = None
    log_id: int | None = None
    invoice_id: int | None = None
    client_id: int | None = None
    amount: Money | None = None
    payment_date: date | None = None
    type: str | None = None
    note: str | None = None
    vis_state: VisState | None = None
    updated: datetime | None = None

    FIELDS: ClassVar[tuple[FieldMap, ...]] = (
        FieldMap("id", "id", int),
        FieldMap("logid", "log_id", int),
        FieldMap("invoiceid", "invoice_id", int),
        FieldMap("clientid", "client_id", int),
        FieldMap("amount", "amount", nested(Money)),
        FieldMap("date", "payment_date", parse_date),
        FieldMap("type", "type"),
        FieldMap("note", "note"),
        FieldMap("vis_state", "vis_state", VisState),
        FieldMap("updated", "updated", parse_datetime),
    )


@dataclass
class Tax(DataModel):
    """A tax that can be applied to invoice lines."""

    id: int | None = None
    tax_id: int | None = None
    name: str | None = None
    amount: Decimal | None = None
    number: str | None = None
    compound: bool | None = None
    updated: datetime | None = None

    FIELDS: ClassVar[tuple[FieldMap, ...]] = (
        FieldMap("id", "id", int),
        FieldMap("taxid", "tax_id", int),
        FieldMap("name", "name"),
        FieldMap("amount", "amount", Decimal),
        FieldMap("number", "number"),
        FieldMap("compound", "compound", bool),
        FieldMap("updated", "updated", parse_datetime),
    )


# =============================================================================
# Business models
# =============================================================================


@dataclass
class TeamMember(DataModel):
    """An employee or user of a FreshBooks business."""

    uuid: str | None = None
    id: str | None = None
    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    job_title: str | None = None
    street_1: str | None = None
    street_2: str | None = None
    city: str | None = None
    province: str | None = None
    country: str | None = None
    postal_code: str | None = None
    phone_number: str | None = None
    business_id: int | None = None
    business_role_name: str | None = None
    active: bool | None = None
    identity_id: int | None = None
    invitation_date_accepted: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    FIELDS: ClassVar[tuple[FieldMap, ...]] = (
        FieldMap("uuid", "uuid"),
        FieldMap("id", "id", str),
        FieldMap("first_name", "first_name"),
        FieldMap("middle_name", "middle_name"),
        FieldMap("last_name", "last_name"),
        FieldMap("email", "email"),
        FieldMap("job_title", "job_title"),
        FieldMap("street_1", "street_1"),
        FieldMap("street_2", "street_2"),
        FieldMap("city", "city"),
        FieldMap("province", "province"),
        FieldMap("country", "country"),
        FieldMap("postal_code", "postal_code"),
        FieldMap("phone_number", "phone_number"),
        FieldMap("business_id", "business_id", int),
        FieldMap("business_role_name", "business_role_name"),
        FieldMap("active", "active", bool),
        FieldMap("identity_id", "identity_id", int),
        FieldMap("invitation_date_accepted", "invitation_date_accepted", parse_datetime),
        FieldMap("created_at", "created_at", parse_datetime),
        FieldMap("updated_at", "updated_at", parse_datetime),
    )


@dataclass
class Business(DataModel):
    id: int | None = None
    business_uuid: str | None = None
    name: str | None = None
    account_id: str | None = None

    FIELDS: ClassVar[tuple[FieldMap, ...]] = (
        FieldMap("id", "id", int),
        FieldMap("business_uuid", "business_uuid"),
        FieldMap("name", "name"),
        FieldMap("account_id", "account_id"),
    )


@dataclass
class BusinessMembership(DataModel):
    """Link between an identity and a business it can access."""

    id: int | None = None
    role: str | None = None
    business: Business | None = None

    FIELDS: ClassVar[tuple[FieldMap, ...]] = (
        FieldMap("id", "id", int),
        FieldMap("role", "role"),
        FieldMap("business", "business", nested(Business)),
    )


@dataclass
class Identity(DataModel):
    """The currently authenticated user."""

    identity_id: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    language: str | None = None
    confirmed_at: datetime | None = None
    created_at: datetime | None = None
    business_memberships: list[BusinessMembership] = field(default_factory=list)

    FIELDS: ClassVar[tuple[FieldMap, ...]] = (
        FieldMap("identity_id", "identity_id", int),
        FieldMap("first_name", "first_name"),
        FieldMap("last_name", "last_name"),
        FieldMap("email", "email"),
        FieldMap("language", "language"),
        FieldMap("confirmed_at", "confirmed_at", parse_datetime),
        FieldMap("created_at", "created_at", parse_datetime),
        FieldMap("business_memberships", "business_memberships", nested_list(BusinessMembership)),
    )

