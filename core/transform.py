"""Payload validation and identity enrichment.

Every builder here is a pure function: it takes the caller's payload plus the
resolved user and returns a new typed payload. Identity fields are applied
last so a caller can never override them.
"""

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel

from core.exceptions import MissingField
from core.payloads import (
    CustomerAction,
    CustomerBirthday,
    CustomerDetailsQuery,
    CustomerRecord,
    ReferralEmailShare,
    Redemption,
    User,
)
from core.request_types import QueryParams

IDENTITY_PARAMS = ("customer_id", "customer_email")
TOKEN_PARAM = "token"
_FALSE_FLAGS = {"", "0", "false", "no", "off"}

M = TypeVar("M", bound=BaseModel)


def is_missing(value: Any) -> bool:
    """Absent, null, empty string and zero all count as missing."""
    return value is None or value == "" or value == 0 or value == []


def require(data: Mapping[str, Any], *fields: str, message: str) -> None:
    """Raise MissingField unless every field is present."""
    if any(is_missing(data.get(name)) for name in fields):
        raise MissingField(message)


def require_any(data: Mapping[str, Any], *fields: str, message: str) -> None:
    """Raise MissingField unless at least one field is present."""
    if all(is_missing(data.get(name)) for name in fields):
        raise MissingField(message)


def is_flag_set(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() not in _FALSE_FLAGS


def build_customer_details(customer_email: str, merchant_id: str) -> CustomerDetailsQuery:
    return _build(CustomerDetailsQuery, {"customer_email": customer_email, "merchant_id": merchant_id})


def build_referral_share(body: Mapping[str, Any], merchant_id: str) -> ReferralEmailShare:
    fields = {"customer_email": body.get("customer_email"), "merchant_id": merchant_id}
    if "emails" in body:
        fields["emails"] = body["emails"]
    return _build(ReferralEmailShare, fields)


def build_action(body: Mapping[str, Any], user: User, ip_address: str | None) -> CustomerAction:
    fields = {**body, "customer_email": user.email, "customer_id": user.id}
    # The caller's address is never taken from the payload
    fields.pop("ip_address", None)
    if ip_address is not None:
        fields["ip_address"] = ip_address
    return _build(CustomerAction, fields)


def build_customer_record(body: Mapping[str, Any], user: User) -> CustomerRecord:
    return _build(CustomerRecord, {**body, "id": user.id, "email": user.email})


def build_birthday(body: Mapping[str, Any], user: User) -> CustomerBirthday:
    return _build(CustomerBirthday, {**body, "customer_email": user.email})


def build_redemption(body: Mapping[str, Any], user: User) -> Redemption:
    return _build(
        Redemption,
        {**body, "customer_external_id": user.id, "customer_email": user.email},
    )


def with_identity(params: QueryParams, user: User) -> QueryParams:
    """Return query params carrying the user's identity instead of the token."""
    dropped = {*IDENTITY_PARAMS, TOKEN_PARAM}
    kept = [(key, value) for key, value in params if key not in dropped]
    return kept + [("customer_id", str(user.id)), ("customer_email", user.email)]


def _build(model: type[M], data: Mapping[str, Any]) -> M:
    return model.model_validate(dict(data))
