"""Header construction for upstream requests."""

from core.config import LoyaltySettings


class HeaderBuilder:
    """Build upstream headers for each API generation."""

    def __init__(self, settings: LoyaltySettings) -> None:
        self._settings = settings

    def build(self, version: str) -> dict[str, str]:
        if version == "v2":
            return self.build_v2_headers()
        return self.build_v1_headers()

    def build_v1_headers(self) -> dict[str, str]:
        """v1 authenticates by merchant id in the payload, never by header."""
        return {"Accept": "application/json"}

    def build_v2_headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "x-guid": self._settings.guid,
            "x-api-key": self._settings.api_key,
        }
