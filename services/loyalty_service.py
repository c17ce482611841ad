"""Route table: validation, enrichment and upstream request preparation."""

from typing import Any

from pydantic import BaseModel

from core.config import Config
from core.headers import HeaderBuilder
from core.payloads import User
from core.request_types import QueryParams, UpstreamRequest
from core.transform import (
    build_action,
    build_birthday,
    build_customer_details,
    build_customer_record,
    build_redemption,
    build_referral_share,
    require,
    require_any,
    with_identity,
)


class LoyaltyService:
    """Prepare upstream requests for every proxied loyalty route.

    ``validate_*`` methods run before user resolution so that a request with a
    missing field never reaches the platform adapter or the upstream API.
    """

    def __init__(self, config: Config, header_builder: HeaderBuilder) -> None:
        self._config = config
        self._headers = header_builder

    # v1

    def customer_details(self, params: QueryParams) -> UpstreamRequest:
        query = dict(params)
        require(query, "customer_email", message="Customer Email required.")
        payload = build_customer_details(query["customer_email"], self._config.loyalty.merchant_id)
        return self._prepare(
            "customer_details", "v1", "GET", "/customer_details",
            params=list(payload.model_dump().items()),
        )

    def referral_email_shares(self, body: dict[str, Any]) -> UpstreamRequest:
        require(body, "customer_email", message="Customer Email is required.")
        payload = build_referral_share(body, self._config.loyalty.merchant_id)
        return self._prepare(
            "referral_email_shares", "v1", "POST", "/referral_email_shares", body=payload,
        )

    # v2

    def actions(self, body: dict[str, Any], user: User, ip_address: str | None) -> UpstreamRequest:
        payload = build_action(body, user, ip_address)
        return self._prepare("actions", "v2", "POST", "/actions", body=payload)

    def validate_customer_record(self, body: dict[str, Any]) -> None:
        require(body, "first_name", message="First name is required.")
        require(body, "last_name", message="Last name is required.")

    def customer_record(self, body: dict[str, Any], user: User) -> UpstreamRequest:
        self.validate_customer_record(body)
        payload = build_customer_record(body, user)
        return self._prepare("customers", "v2", "POST", "/customers", body=payload)

    def validate_birthday(self, body: dict[str, Any]) -> None:
        require(body, "day", "month", "year", message="Date is required.")

    def customer_birthday(self, body: dict[str, Any], user: User) -> UpstreamRequest:
        self.validate_birthday(body)
        payload = build_birthday(body, user)
        return self._prepare("customer_birthdays", "v2", "POST", "/customer_birthdays", body=payload)

    def all_customers(self, params: QueryParams) -> UpstreamRequest:
        return self._prepare("customers_all", "v2", "GET", "/customers/all", params=params)

    def customer(self, params: QueryParams, user: User) -> UpstreamRequest:
        return self._prepare(
            "customer", "v2", "GET", "/customers", params=with_identity(params, user),
        )

    def validate_redemption(self, body: dict[str, Any]) -> None:
        require(body, "redemption_option_id", message="Redemption option ID is required.")

    def redemption(self, body: dict[str, Any], user: User) -> UpstreamRequest:
        self.validate_redemption(body)
        payload = build_redemption(body, user)
        return self._prepare("redemptions", "v2", "POST", "/redemptions", body=payload)

    def redemption_options(self) -> UpstreamRequest:
        return self._prepare("redemption_options", "v2", "GET", "/redemption_options")

    def redemption_codes(self, params: QueryParams) -> UpstreamRequest:
        require_any(dict(params), "third_party_id", "code", message="Third-party Id or Code required.")
        return self._prepare("redemption_codes", "v2", "GET", "/redemption_codes", params=params)

    def campaigns(self, params: QueryParams, user: User | None = None) -> UpstreamRequest:
        if user is not None:
            params = with_identity(params, user)
        return self._prepare("campaigns", "v2", "GET", "/campaigns", params=params)

    def vip_tiers(self) -> UpstreamRequest:
        return self._prepare("vip_tiers", "v2", "GET", "/vip_tiers")

    def _prepare(
        self,
        route: str,
        version: str,
        method: str,
        path: str,
        *,
        params: QueryParams | None = None,
        body: BaseModel | None = None,
    ) -> UpstreamRequest:
        return UpstreamRequest(
            route=route,
            version=version,
            method=method,
            path=path,
            headers=self._headers.build(version),
            params=params or [],
            body=body.model_dump(mode="json", exclude_unset=True) if body is not None else None,
        )
