"""Chat assistant backed by a hosted generative-text API with canned fallbacks."""

import logging
import os
from typing import Any

import httpx

from .errors import NetworkError, ValidationError
from .models import DashboardSummary

logger = logging.getLogger(__name__)

GENERATE_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/gemini-pro:generateContent"
)
API_TIMEOUT = float(os.environ.get("KIRANA_API_TIMEOUT", "30"))

NO_RESPONSE = "No response generated"

# Checked in order; the first keyword found in the message wins
CANNED_RESPONSES: tuple[tuple[str, str], ...] = (
    (
        "sales",
        "Based on your dashboard, you have $8,250 in total sales with 1,230 orders. "
        "Your sales trend shows good growth!",
    ),
    (
        "inventory",
        "You currently have products in stock. Some items like Turmeric Powder are "
        "running low and need restocking.",
    ),
    (
        "customers",
        "You have 1,015 registered customers. Consider loyalty programs to increase retention.",
    ),
    (
        "help",
        "I can help you with sales analysis, inventory management, customer insights, "
        "and business recommendations.",
    ),
)
DEFAULT_RESPONSE = (
    "I can help you manage your store! Ask me about sales, inventory, customers, "
    "or general business advice."
)


def canned_response(message: str) -> str:
    """Pick a fixed response by keyword."""
    lowered = message.lower()
    for keyword, response in CANNED_RESPONSES:
        if keyword in lowered:
            return response
    return DEFAULT_RESPONSE


def build_prompt(message: str, summary: DashboardSummary | None = None) -> str:
    """Prefix the user's question with a description of the store."""
    if summary is not None:
        context = (
            f"The store currently has ${summary.total_sales:,.0f} in sales, "
            f"{summary.total_orders:,} orders, and {summary.total_customers:,} customers."
        )
    else:
        context = "The store currently has $8,250 in sales, 1,230 orders, and 1,015 customers."
    return (
        f"You are an AI assistant for a Kirana Store. {context} "
        f"Help with business insights and management advice. User question: {message}"
    )


def extract_text(data: Any) -> str:
    """Pull candidates[0].content.parts[0].text out of a response body."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return NO_RESPONSE
    return text or NO_RESPONSE


class Assistant:
    """Stateless request/response chat. Never leaves a question unanswered."""

    def __init__(
        self,
        api_key: str = "",
        enabled: bool = False,
        http_client: httpx.Client | None = None,
        url: str = GENERATE_URL,
    ):
        """
        Initialize Assistant.

        Args:
            api_key: Key passed as the ``key`` query parameter.
            enabled: Whether to call the hosted model at all.
            http_client: HTTP client to use (injected in tests).
            url: Generation endpoint.
        """
        self.api_key = api_key
        self.enabled = enabled
        self.url = url
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def uses_api(self) -> bool:
        return self.enabled and bool(self.api_key)

    @property
    def http_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = httpx.Client(timeout=API_TIMEOUT)
        return self._http_client

    def close(self) -> None:
        if self._owns_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def call_api(self, message: str, summary: DashboardSummary | None = None) -> str:
        """
        Send one prompt to the hosted model.

        Raises:
            NetworkError: On transport failure, non-success status, or a
                body that is not JSON.
        """
        if not self.api_key:
            raise NetworkError("API key not configured")

        try:
            response = self.http_client.post(
                self.url,
                params={"key": self.api_key},
                json={"contents": [{"parts": [{"text": build_prompt(message, summary)}]}]},
            )
        except httpx.HTTPError as e:
            raise NetworkError(str(e)) from e

        if not response.is_success:
            raise NetworkError(response.reason_phrase, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise NetworkError("response body is not JSON") from e
        return extract_text(data)

    def reply(self, message: str, summary: DashboardSummary | None = None) -> str:
        """
        Answer a chat message.

        Uses the hosted model when enabled and configured; otherwise, or if
        the call fails, falls back to the canned keyword responses.

        Raises:
            ValidationError: If the message is empty.
        """
        message = message.strip() if message else ""
        if not message:
            raise ValidationError("message", "must not be empty")

        if not self.uses_api:
            return canned_response(message)

        try:
            return self.call_api(message, summary)
        except NetworkError as e:
            logger.warning(
                "Assistant API call failed, using canned response",
                extra={"error": str(e), "status_code": e.status_code},
            )
            return canned_response(message)
