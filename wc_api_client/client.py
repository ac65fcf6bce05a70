"""Client - Signs requests to the store API and captures responses.

WCAPIClient decides between Basic Auth and one-legged OAuth, sends one
request per call, and returns the body formatted per the output mode.
Transport failures are not raised: they come back as an error payload of
the form {"errors": [{"code": ..., "message": ...}]}, the same shape the
store uses for its own errors.

Not thread-safe: get_headers()/get_links() reflect the most recent call on
the instance. Use execute() for the envelope of a specific call.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

import httpx

from wc_api_client.endpoints import EndpointsMixin
from wc_api_client.formatter import format_output
from wc_api_client.headers import build_raw_header_block, extract_links, parse_headers
from wc_api_client.models import (
    API_ENDPOINT,
    DEFAULT_TIMEOUT,
    ApiResult,
    ClientConfig,
    HashAlgorithm,
    HttpMethod,
    OutputMode,
    RequestSpec,
    ResponseEnvelope,
    StoreConfig,
    TransportFailure,
)
from wc_api_client.oauth import build_oauth_params, flatten_params, generate_oauth_signature

logger = logging.getLogger(__name__)


class ClientError(Exception):
    """Base class for client errors."""


class ConstructionError(ClientError):
    """Raised when credentials or the store URL are missing."""


class ConfigurationError(ClientError):
    """Raised when a setting is given an invalid value."""


def build_api_url(store_url: str, api_path: str = API_ENDPOINT) -> str:
    """Join the store URL and the API path with exactly one slash."""
    return store_url.rstrip("/") + "/" + api_path


def _parse_output_mode(mode: OutputMode | str) -> OutputMode:
    try:
        return OutputMode(mode)
    except ValueError:
        valid = ", ".join(m.value for m in OutputMode)
        raise ConfigurationError(
            f"Invalid output mode '{mode}': must be one of {valid}"
        ) from None


def _error_body(code: int | str, message: str) -> str:
    return json.dumps({"errors": [{"code": code, "message": message}]})


class WCAPIClient(EndpointsMixin):
    """Client for one store.

    Usage:
        client = WCAPIClient("ck_...", "cs_...", "https://shop.example.com")
        try:
            orders = client.get_orders({"status": "processing"})
            next_page = client.get_links().get("next")
        finally:
            client.close()

    Or with context manager:
        with WCAPIClient("ck_...", "cs_...", "http://shop.example.com") as client:
            result = client.execute("products", {"filter[limit]": 5})
    """

    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        store_url: str,
        is_ssl: bool | None = None,
        *,
        output_mode: OutputMode | str = OutputMode.MAP,
        signature_algorithm: HashAlgorithm | str = HashAlgorithm.SHA256,
        verify_ssl: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
        api_path: str = API_ENDPOINT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            consumer_key: Store consumer key.
            consumer_secret: Store consumer secret.
            store_url: Base URL of the store. Trailing slashes are stripped.
            is_ssl: True forces Basic Auth, False forces OAuth. None derives
                    it from the URL scheme (https -> Basic Auth).
            output_mode: map, object or string.
            signature_algorithm: SHA256 or SHA1 for OAuth signatures.
            verify_ssl: Verify the server certificate. Turn off only for
                        stores with self-signed certificates.
            timeout: Connect and total timeout in seconds.
            api_path: API path appended to the store URL.
            transport: Optional httpx transport (e.g. httpx.MockTransport).

        Raises:
            ConstructionError: If key, secret or store URL is empty.
            ConfigurationError: If output_mode is not a known mode.
        """
        if not consumer_key or not consumer_secret:
            raise ConstructionError("Consumer key / consumer secret missing")
        if not store_url:
            raise ConstructionError("Store URL missing")

        api_url = build_api_url(store_url, api_path)
        self._config = ClientConfig(
            api_url=api_url,
            consumer_key=consumer_key,
            consumer_secret=consumer_secret,
            is_ssl=self._resolve_is_ssl(is_ssl, api_url),
            output_mode=_parse_output_mode(output_mode),
            signature_algorithm=HashAlgorithm(signature_algorithm),
            verify_ssl=verify_ssl,
            timeout=timeout,
        )

        self._headers: dict[str, str | list[str]] = {}
        self._links: dict[str, str] = {}

        if not verify_ssl:
            logger.warning("TLS certificate verification disabled for %s", api_url)

        self._client = httpx.Client(**self._build_client_kwargs(transport))

    @classmethod
    def from_store_config(
        cls,
        store: StoreConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> "WCAPIClient":
        """Build a client from a StoreConfig loaded from the config file."""
        return cls(
            store.consumer_key,
            store.consumer_secret,
            store.store_url,
            store.is_ssl,
            output_mode=store.output_mode,
            signature_algorithm=store.signature_algorithm,
            verify_ssl=store.verify_ssl,
            timeout=store.timeout,
            api_path=store.api_path,
            transport=transport,
        )

    def __enter__(self) -> "WCAPIClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def _build_client_kwargs(self, transport: httpx.BaseTransport | None) -> dict[str, Any]:
        """Build kwargs for httpx.Client from the current config."""
        timeout = self._config.timeout
        kwargs: dict[str, Any] = {
            "timeout": httpx.Timeout(timeout, connect=timeout),
            "verify": self._config.verify_ssl,
        }
        if transport is not None:
            kwargs["transport"] = transport
        return kwargs

    @staticmethod
    def _resolve_is_ssl(is_ssl: bool | None, api_url: str) -> bool:
        if is_ssl is None:
            return api_url.lower().startswith("https")
        return bool(is_ssl)

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    @property
    def config(self) -> ClientConfig:
        return self._config

    def set_consumer_key(self, consumer_key: str) -> None:
        self._config = self._config.model_copy(update={"consumer_key": consumer_key})

    def set_consumer_secret(self, consumer_secret: str) -> None:
        self._config = self._config.model_copy(update={"consumer_secret": consumer_secret})

    def set_is_ssl(self, is_ssl: bool | None) -> None:
        """Choose the auth mode. None derives it from the store URL scheme."""
        resolved = self._resolve_is_ssl(is_ssl, self._config.api_url)
        self._config = self._config.model_copy(update={"is_ssl": resolved})

    def set_output_mode(self, mode: OutputMode | str) -> None:
        """Set the result shape.

        Raises:
            ConfigurationError: If mode is not map, object or string. The
                                previous mode stays in effect.
        """
        output_mode = _parse_output_mode(mode)
        self._config = self._config.model_copy(update={"output_mode": output_mode})

    def get_headers(self) -> dict[str, str | list[str]]:
        """Headers from the most recent call ({} if it got no response)."""
        return self._headers

    def get_links(self) -> dict[str, str]:
        """Pagination links from the most recent call."""
        return self._links

    # -------------------------------------------------------------------------
    # Signing
    # -------------------------------------------------------------------------

    def generate_oauth_signature(
        self,
        params: dict[str, Any],
        http_method: str,
        endpoint: str,
    ) -> str:
        """Sign params for a call to endpoint (relative to the API URL)."""
        return generate_oauth_signature(
            params,
            http_method,
            self._config.api_url + endpoint,
            self._config.consumer_secret,
            self._config.signature_algorithm,
        )

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def _make_api_call(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        method: str = "GET",
    ) -> Any:
        return self.execute(endpoint, params, method).data

    def execute(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        method: HttpMethod | str = HttpMethod.GET,
    ) -> ApiResult:
        """Perform one call and return its envelope with the formatted body.

        GET parameters go in the query string. For POST and PUT they are sent
        as a JSON body; DELETE sends no body. OAuth parameters, when used,
        always go in the query string.

        Args:
            endpoint: Path relative to the API URL, e.g. "orders/12".
            params: Query parameters (GET) or body data (POST/PUT).
            method: GET, POST, PUT or DELETE.

        Returns:
            ApiResult. Never raises for transport or HTTP errors; check
            result.is_error or the "errors" key in the data instead.
        """
        spec = RequestSpec(endpoint=endpoint, method=method, params=params or {})
        config = self._config
        http_method = spec.method.value

        # Stale state from the previous call must never be visible
        self._headers = {}
        self._links = {}

        url_params: list[tuple[str, str]] = []
        if spec.method is HttpMethod.GET:
            url_params.extend(flatten_params(spec.params))

        auth: tuple[str, str] | None = None
        if config.is_ssl:
            auth = (config.consumer_key, config.consumer_secret)
        else:
            url_params.extend(
                build_oauth_params(config.consumer_key, config.signature_algorithm).items()
            )
            signature = self.generate_oauth_signature(
                dict(url_params), http_method, spec.endpoint
            )
            url_params.append(("oauth_signature", signature))

        json_body: Any = None
        if spec.method in (HttpMethod.POST, HttpMethod.PUT):
            json_body = spec.params

        url = config.api_url + spec.endpoint
        logger.debug(
            "%s %s (%s)", http_method, url, "basic auth" if config.is_ssl else "oauth"
        )

        envelope = self._send(http_method, url, url_params, json_body, auth)
        data = format_output(config.output_mode, envelope.body)
        return ApiResult(envelope=envelope, data=data)

    def _send(
        self,
        method: str,
        url: str,
        params: list[tuple[str, str]],
        json_body: Any,
        auth: tuple[str, str] | None,
    ) -> ResponseEnvelope:
        """Issue the request and capture the response, or the failure.

        httpx timeouts bound each connect/read/write separately, so the body
        is streamed and the whole call is held to config.timeout as well.
        """
        timeout = self._config.timeout
        deadline = time.monotonic() + timeout
        try:
            with self._client.stream(
                method=method,
                url=url,
                params=params if params else None,
                json=json_body,
                auth=auth,
            ) as response:
                chunks: list[bytes] = []
                for chunk in response.iter_bytes():
                    if time.monotonic() > deadline:
                        raise httpx.ReadTimeout(
                            f"Response not complete within {timeout:g}s",
                            request=response.request,
                        )
                    chunks.append(chunk)
        except httpx.TimeoutException as e:
            return self._failure_envelope("timeout", e)
        except httpx.ConnectError as e:
            return self._failure_envelope("connect_error", e)
        except httpx.RequestError as e:
            return self._failure_envelope("request_error", e)

        return self._convert_response(response, b"".join(chunks))

    def _failure_envelope(self, code: str, exc: Exception) -> ResponseEnvelope:
        message = str(exc) or type(exc).__name__
        logger.warning("Request failed (%s): %s", code, message)
        return ResponseEnvelope(
            body=_error_body(code, message),
            transport_error=TransportFailure(code=code, message=message),
        )

    def _convert_response(self, response: httpx.Response, content: bytes) -> ResponseEnvelope:
        """Parse headers and links off a response and record them on the client.

        content is the body collected while streaming, content-encoding removed.
        """
        headers = parse_headers(build_raw_header_block(response))
        links = extract_links(headers)
        self._headers = headers
        self._links = links

        body = content.decode(response.encoding or "utf-8", errors="replace")
        status = response.status_code
        logger.debug("Response %d (%d bytes)", status, len(content))

        # An error status with nothing to decode gets the synthesized error
        # body so callers always find an "errors" entry.
        if not body and not 200 <= status < 300:
            body = _error_body(status, response.reason_phrase or str(status))

        return ResponseEnvelope(
            status_code=status,
            headers=headers,
            links=links,
            body=body,
        )
