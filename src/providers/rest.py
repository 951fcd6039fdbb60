"""
Generic REST fetch-and-decode routine shared by all providers.

Vendors report errors inside the JSON body using their own schema, so a
single GET is decoded either as the success shape (2xx) or as the
vendor's failure shape (anything else).
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

# Request timeout in seconds; remote services are untrusted
TIMEOUT = 30.0

T = TypeVar("T")


class RestError(Exception):
    """Base exception for REST request failures."""
    pass


class TransportError(RestError):
    """Raised when the request could not be performed at all."""

    def __init__(self, cause: Exception) -> None:
        self.cause = cause
        super().__init__(f"HTTP GET request failed: {cause}")


class UnexpectedSuccessShapeError(RestError):
    """Raised when a 2xx body does not match the success shape."""

    def __init__(self, cause: Exception, raw_body: str) -> None:
        self.cause = cause
        self.raw_body = raw_body
        super().__init__("Could not parse response as successful result")


class UnexpectedFailureShapeError(RestError):
    """Raised when a non-2xx body does not match the failure shape."""

    def __init__(self, status_code: int, cause: Exception, raw_body: str) -> None:
        self.status_code = status_code
        self.cause = cause
        self.raw_body = raw_body
        super().__init__(f"Could not parse response as failure (HTTP {status_code})")


class ApiError(RestError):
    """Raised when the vendor returned its own error payload."""

    def __init__(self, failure: Any, status_code: Optional[int] = None) -> None:
        self.failure = failure
        self.status_code = status_code
        super().__init__(str(failure))


class RestClient:
    """
    Thin wrapper around httpx performing "GET, branch on status, decode".

    Example:
        >>> rest = RestClient()
        >>> coords = rest.fetch(url, List[Coords], OpenWeatherError, params={...})
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        timeout: float = TIMEOUT,
    ) -> None:
        self._client = client or httpx.Client(timeout=timeout)

    def fetch(
        self,
        url: str,
        success: Type[T],
        failure: Type[Any],
        params: Optional[Dict[str, Any]] = None,
    ) -> T:
        """
        Perform a GET request and decode the response body.

        Args:
            url: Request URL
            success: Type the body is validated as on 2xx
            failure: Type the body is validated as otherwise
            params: Optional query parameters

        Returns:
            Decoded success value

        Raises:
            TransportError: If the request itself failed
            UnexpectedSuccessShapeError: If a 2xx body has the wrong shape
            UnexpectedFailureShapeError: If an error body has the wrong shape
            ApiError: If the vendor returned a well-formed error payload
        """
        logger.debug("GET %s", url)
        try:
            response = self._client.get(url, params=params)
            # Body is needed for both branches
            text = response.text
        except httpx.HTTPError as e:
            raise TransportError(e) from e

        status = response.status_code
        logger.debug("HTTP %s from %s", status, url)

        if response.is_success:
            try:
                return TypeAdapter(success).validate_json(text)
            except ValidationError as e:
                raise UnexpectedSuccessShapeError(e, text) from e

        try:
            value = TypeAdapter(failure).validate_json(text)
        except ValidationError as e:
            raise UnexpectedFailureShapeError(status, e, text) from e
        raise ApiError(value, status)

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "RestClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
