"""Internal data models for wc-api-client.

All models use Pydantic v2. Configuration is frozen; per-call models are
created and discarded within a single request.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Fixed API path appended to the store URL
API_ENDPOINT = "wc-api/v2/"

DEFAULT_TIMEOUT = 30.0


# =============================================================================
# Enumerations
# =============================================================================


class OutputMode(str, Enum):
    """Shape of the value returned to the caller for each call."""

    MAP = "map"  # JSON decoded into dicts and lists
    OBJECT = "object"  # JSON objects decoded into attribute-access records
    STRING = "string"  # Raw body text, untouched


class HashAlgorithm(str, Enum):
    """HMAC digest used for the OAuth signature."""

    SHA256 = "SHA256"
    SHA1 = "SHA1"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


# =============================================================================
# Configuration
# =============================================================================


class ClientConfig(BaseModel):
    """Per-client configuration.

    Frozen: setters on the client replace the whole config with an updated
    copy rather than mutating it in place.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    api_url: str = Field(description="Store URL plus the fixed API path, ending in '/'")
    consumer_key: str = Field(description="WooCommerce consumer key")
    consumer_secret: str = Field(description="WooCommerce consumer secret")
    is_ssl: bool = Field(description="True selects Basic Auth, False selects one-legged OAuth")
    output_mode: OutputMode = Field(default=OutputMode.MAP, description="Result shape")
    signature_algorithm: HashAlgorithm = Field(
        default=HashAlgorithm.SHA256, description="HMAC digest for OAuth signatures"
    )
    verify_ssl: bool = Field(default=True, description="Verify the server's TLS certificate")
    timeout: float = Field(
        default=DEFAULT_TIMEOUT, gt=0, description="Connect and total timeout in seconds"
    )


# =============================================================================
# Per-call Models
# =============================================================================


class RequestSpec(BaseModel):
    """One call to perform: a relative endpoint, a method and its parameters."""

    model_config = ConfigDict(extra="forbid")

    endpoint: str = Field(default="", description="Endpoint relative to the API URL")
    method: HttpMethod = Field(default=HttpMethod.GET, description="HTTP method")
    params: dict[str, Any] = Field(
        default_factory=dict, description="Query parameters (GET) or JSON body data"
    )

    @field_validator("method", mode="before")
    @classmethod
    def upper_method(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v


class TransportFailure(BaseModel):
    """Why no usable response was received."""

    model_config = ConfigDict(extra="forbid")

    code: int | str = Field(description="Transport error code or HTTP status")
    message: str = Field(description="Human-readable error text")


class ResponseEnvelope(BaseModel):
    """Everything captured from one network call.

    Header values are a single string, or a list of strings when the header
    was repeated. Header names keep the case they had on the wire.
    """

    model_config = ConfigDict(extra="forbid")

    status_code: int | None = Field(default=None, description="HTTP status (None if no response)")
    headers: dict[str, str | list[str]] = Field(
        default_factory=dict, description="Parsed response headers"
    )
    links: dict[str, str] = Field(
        default_factory=dict, description="Pagination relations: next, prev, first, last"
    )
    body: str = Field(default="", description="Raw body, or the synthesized error body")
    transport_error: TransportFailure | None = Field(
        default=None, description="Set when no response was received"
    )


class ApiResult(BaseModel):
    """Envelope plus the caller-facing value for one call."""

    model_config = ConfigDict(extra="forbid")

    envelope: ResponseEnvelope = Field(description="Captured response")
    data: Any = Field(default=None, description="Body formatted per the output mode")

    @property
    def is_error(self) -> bool:
        """True for transport failures, non-2xx statuses, or an errors payload."""
        if self.envelope.transport_error is not None:
            return True
        status = self.envelope.status_code
        if status is not None and not 200 <= status < 300:
            return True
        if isinstance(self.data, dict):
            return "errors" in self.data
        return hasattr(self.data, "errors")


# =============================================================================
# Store Configuration File Models
# =============================================================================


class StoreConfig(BaseModel):
    """Connection settings for one store, as written in the config file."""

    model_config = ConfigDict(extra="forbid")

    store_url: str = Field(description="Base URL of the store, e.g. https://shop.example.com")
    consumer_key: str = Field(description="Consumer key (supports ${ENV_VAR} substitution)")
    consumer_secret: str = Field(description="Consumer secret (supports ${ENV_VAR} substitution)")
    is_ssl: bool | None = Field(
        default=None, description="Force Basic Auth (true) or OAuth (false); derived from URL if omitted"
    )
    api_path: str = Field(default=API_ENDPOINT, description="API path appended to the store URL")
    output_mode: OutputMode = Field(default=OutputMode.MAP, description="Result shape")
    signature_algorithm: HashAlgorithm = Field(
        default=HashAlgorithm.SHA256, description="HMAC digest for OAuth signatures"
    )
    verify_ssl: bool = Field(default=True, description="Verify the server's TLS certificate")
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Timeout in seconds")


class StoresFile(BaseModel):
    """Top-level store configuration file structure."""

    model_config = ConfigDict(extra="forbid")

    stores: dict[str, StoreConfig] = Field(description="Store name -> settings mapping")
