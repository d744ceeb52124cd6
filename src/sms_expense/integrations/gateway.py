"""HTTP client for reading messages from an SMS gateway running on the phone."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

import httpx
from pydantic import SecretStr

from sms_expense import get_logger
from sms_expense.integrations.inbox import (
    InboxPermissionError,
    InboxReadError,
    parse_inbox_records,
)
from sms_expense.models import InboxFilter, RawMessage

if TYPE_CHECKING:
    from sms_expense.config import Settings


LOGGER = get_logger("integrations.gateway")

MESSAGES_PATH = "/messages"
_DENIED_STATUS_CODES = frozenset({401, 403})


class SmsGatewayReader:
    """Lightweight synchronous client for an SMS gateway's message listing."""

    def __init__(
        self,
        *,
        base_url: str,
        token: str | SecretStr | None = None,
        timeout: float = 10.0,
        http_client: httpx.Client | None = None,
        user_agent: str = "sms-expense/0.1",
    ) -> None:
        self._base_url = base_url.rstrip("/")
        secret = self._secret_value(token)
        self._auth_header = f"Bearer {secret}" if secret else None

        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            base_url=self._base_url,
            timeout=timeout,
            headers={"User-Agent": user_agent},
        )

    @classmethod
    def from_settings(
        cls, settings: "Settings", **client_kwargs: Any
    ) -> "SmsGatewayReader":
        """Instantiate a reader from shared Settings."""

        if not settings.gateway_url:
            raise ValueError("SMS_GATEWAY_URL is required to build a gateway reader.")
        client_kwargs.setdefault("timeout", settings.gateway_timeout)
        return cls(
            base_url=settings.gateway_url,
            token=settings.gateway_token,
            **client_kwargs,
        )

    def __enter__(self) -> "SmsGatewayReader":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client if we created it."""
        if self._owns_client:
            self._client.close()

    def fetch_messages(self, inbox_filter: InboxFilter) -> list[RawMessage]:
        """Request one page of messages matching the filter."""

        response = self._request("GET", MESSAGES_PATH, params=inbox_filter.as_query())
        records = self._extract_records(response)
        messages = parse_inbox_records(records)
        if len(messages) > inbox_filter.max_count:
            messages = messages[: inbox_filter.max_count]
        LOGGER.debug(
            "Fetched %d messages from gateway box=%s index_from=%d",
            len(messages),
            inbox_filter.box,
            inbox_filter.index_from,
        )
        return messages

    def _request(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        merged_headers = {"Accept": "application/json"}
        if self._auth_header:
            merged_headers["Authorization"] = self._auth_header
        if headers:
            merged_headers.update(headers)

        try:
            response = self._client.request(
                method.upper(), path, headers=merged_headers, **kwargs
            )
            response.raise_for_status()
            return response
        except httpx.TimeoutException as exc:
            raise InboxReadError("SMS gateway request timed out.") from exc
        except httpx.HTTPStatusError as exc:
            detail = self._extract_error(exc.response)
            if exc.response.status_code in _DENIED_STATUS_CODES:
                raise InboxPermissionError(f"SMS permission denied: {detail}") from exc
            raise InboxReadError(detail) from exc
        except httpx.HTTPError as exc:
            raise InboxReadError(f"SMS gateway request failed: {exc}") from exc

    @staticmethod
    def _extract_records(response: httpx.Response) -> list[Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise InboxReadError("Failed to parse SMS messages: response was not JSON.") from exc
        if isinstance(data, list):
            return data
        if isinstance(data, dict) and isinstance(data.get("messages"), list):
            return data["messages"]
        raise InboxReadError("Unexpected SMS gateway response format.")

    @staticmethod
    def _extract_error(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            return str(payload.get("error") or payload.get("message") or response)
        return response.text or f"SMS gateway error {response.status_code}"

    @staticmethod
    def _secret_value(value: str | SecretStr | None) -> str | None:
        if value is None or isinstance(value, str):
            return value or None
        return value.get_secret_value() or None


__all__ = ["MESSAGES_PATH", "SmsGatewayReader"]
