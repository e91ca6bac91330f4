"""Async HTTP client for the forwarding backend."""

from __future__ import annotations

import logging

import httpx

from .constants import API_TIMEOUT, AUTH_PATH, SEND_SMS_PATH
from .errors import ApiError, AuthError, EmptyAuthResponse, NetworkError
from .models import AuthResponse

logger = logging.getLogger(__name__)


def _reason(response: httpx.Response) -> str:
    return response.reason_phrase or f"HTTP {response.status_code}"


class ApiClient:
    """Thin wrapper around httpx.AsyncClient bound to one server URL.

    Pass *transport* to route requests somewhere other than the network
    (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: str,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = API_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            transport=transport,
            timeout=timeout,
        )

    async def authenticate(self, email: str, password: str) -> AuthResponse:
        """POST credentials and return the parsed token response."""
        try:
            response = await self._client.post(
                AUTH_PATH, json={"email": email, "password": password}
            )
        except httpx.RequestError as exc:
            logger.error("Request error authenticating %s: %s", email, exc)
            raise NetworkError(str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            logger.error("HTTP %s authenticating %s", response.status_code, email)
            raise AuthError(_reason(response), status_code=response.status_code)

        try:
            data = response.json()
        except ValueError:
            data = None
        if not isinstance(data, dict) or not data.get("access_token"):
            raise EmptyAuthResponse(
                "Authentication response is empty", status_code=response.status_code
            )

        logger.info("Obtained access token for %s", email)
        return AuthResponse.from_dict(data)

    async def send_sms_content(self, access_token: str, content: str) -> None:
        """POST the raw SMS text with a bearer token."""
        try:
            response = await self._client.post(
                SEND_SMS_PATH,
                content=content.encode("utf-8"),
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Content-Type": "text/plain; charset=utf-8",
                },
            )
        except httpx.RequestError as exc:
            logger.error("Request error sending SMS content: %s", exc)
            raise NetworkError(str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            logger.error("HTTP %s sending SMS content", response.status_code)
            raise ApiError(_reason(response), status_code=response.status_code)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.aclose()
