# booking_provisioning/external_services/base_service.py
import httpx
import json
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class PlatformApiError(Exception):
    """
    A failed call to an external platform.

    Timeouts and connection failures carry `status_code=None`; HTTP errors
    carry the status and the raw response body for diagnostics.
    """

    def __init__(self, platform: str, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.platform = platform
        self.message = message
        self.status_code = status_code
        self.body = body

    def describe(self) -> str:
        if self.status_code is None:
            return f"{self.platform}: {self.message}"
        return f"{self.platform} ({self.status_code}): {self.message} | body: {self.body}"


class JsonApiService:
    """Common request handling for the platform REST clients."""

    platform_name = "external"

    def __init__(self, client: httpx.AsyncClient):
        self.client = client
        logger.info(f"{type(self).__name__} initialized with httpx.AsyncClient (base_url={client.base_url}).")

    def _error_message(self, parsed: Any, fallback: str) -> str:
        if isinstance(parsed, dict):
            error = parsed.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if parsed.get("message"):
                message = parsed["message"]
                return "; ".join(message) if isinstance(message, list) else str(message)
            if isinstance(error, str):
                return error
        return fallback

    async def _request(
        self,
        method: str,
        url: str,
        json_payload: Optional[Dict[str, Any]] = None,
        form_payload: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Make a request and return the decoded JSON body.

        Raises:
            PlatformApiError: On any non-2xx status, undecodable body, timeout
                or transport failure
        """
        logger.debug(f"{self.platform_name} API Request: {method} {url} | JSON: {json_payload is not None}")
        try:
            response = await self.client.request(
                method, url, json=json_payload, data=form_payload, headers=headers
            )
        except httpx.TimeoutException as e:
            logger.error(f"{self.platform_name} API timeout: {method} {url} - {e!r}")
            raise PlatformApiError(self.platform_name, f"Request timed out: {method} {url}") from e
        except httpx.RequestError as e:
            logger.error(f"{self.platform_name} API RequestError: {method} {url} - Error: {e!r}")
            raise PlatformApiError(self.platform_name, f"Connection/Request Error: {e}") from e

        if 200 <= response.status_code < 300:
            if response.status_code == 204 or not response.content:
                logger.debug(f"{self.platform_name} API Response: {method} {url} -> {response.status_code} No Content")
                return {}
            try:
                json_response = response.json()
            except json.JSONDecodeError as e:
                logger.error(
                    f"{self.platform_name} API Response: {method} {url} -> {response.status_code} | "
                    f"Failed to decode JSON. Body: {response.text}"
                )
                raise PlatformApiError(
                    self.platform_name, "Failed to decode JSON response.", response.status_code, response.text
                ) from e
            log_body_preview = str(json_response)
            if len(log_body_preview) > 300:
                log_body_preview = log_body_preview[:300] + "..."
            logger.debug(
                f"{self.platform_name} API Response: {method} {url} -> {response.status_code} | "
                f"Body Preview: {log_body_preview}"
            )
            return json_response

        error_text = response.text or "Unknown error"
        if response.content:
            try:
                error_text = self._error_message(response.json(), response.text)
            except json.JSONDecodeError:
                error_text = response.text
        logger.error(
            f"{self.platform_name} API HTTP Error: {method} {url} - "
            f"Status {response.status_code} - Response Body: {response.text}"
        )
        raise PlatformApiError(self.platform_name, error_text, response.status_code, response.text)
