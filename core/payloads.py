"""Typed payloads exchanged with the loyalty API."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class User(BaseModel):
    """Caller identity as resolved by a platform adapter."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str | int
    email: str


class _Passthrough(BaseModel):
    # Unknown caller fields are forwarded untouched
    model_config = ConfigDict(extra="allow")


class CustomerDetailsQuery(BaseModel):
    customer_email: str
    merchant_id: str


# Caller-supplied values are typed Any: the loyalty API validates them, the
# proxy only checks presence and relays them as sent.

class ReferralEmailShare(BaseModel):
    emails: Any = None
    customer_email: Any
    merchant_id: str


class CustomerAction(_Passthrough):
    customer_email: str
    customer_id: str | int
    ip_address: str | None = None


class CustomerRecord(_Passthrough):
    first_name: Any
    last_name: Any
    id: str | int
    email: str


class CustomerBirthday(_Passthrough):
    day: Any
    month: Any
    year: Any
    customer_email: str


class Redemption(_Passthrough):
    redemption_option_id: Any
    customer_external_id: str | int
    customer_email: str
