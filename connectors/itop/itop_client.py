"""iTop HTTP Client.

Low-level HTTP client for the iTop REST/JSON API (webservices/rest.php).
Handles authentication fields, the multipart request envelope, response
parsing and error classification.

Every call is a single POST; there is no retry. A timeout is a terminal
failure for the invocation.
"""

import asyncio
import json
import ssl
from typing import Any, Dict, List, Union

import aiohttp
from pydantic import ValidationError as PydanticValidationError

from core.config import ConnectorConfig
from core.errors import ApiError, ApiTransportError, ConfigurationError
from core.observability.logging import get_logger
from connectors.itop.itop_models import ITopOperation, ITopRequest, ITopResponse

logger = get_logger(__name__)


class ITopApiClient:
    """HTTP client for the iTop REST API.

    Provides:
    - Token or username/password authentication
    - Multipart envelope construction (``json_data`` + auth fields)
    - Response parsing and error classification

    Usage:
        client = ITopApiClient(config, debug=True)
        response = await client.make_request(ITopRequest(operation="list_operations"))
    """

    def __init__(self, config: ConnectorConfig, debug: bool = False):
        """Initialize API client.

        Args:
            config: Connector configuration (endpoint, version, credentials)
            debug: Log request and response envelopes

        Raises:
            ConfigurationError: Neither a token nor a username+password pair is set
        """
        if not config.base_url:
            raise ConfigurationError("baseUrl must be provided in config")
        config.validate_auth()

        self.base_url = config.base_url
        self.api_version = config.api_version
        self.timeout_seconds = config.timeout_seconds
        self.verify_tls = config.verify_tls
        self.debug = debug

        self._auth_token = config.auth_token if config.uses_token_auth else None
        self._username = config.username
        self._password = config.password

        if not self.verify_tls:
            logger.warning(
                "TLS certificate verification is disabled for %s", self.base_url
            )

    @property
    def auth_method(self) -> str:
        return "token" if self._auth_token else "username/password"

    def _auth_fields(self) -> Dict[str, str]:
        """Authentication form fields for the configured mode."""
        if self._auth_token:
            return {"auth_token": self._auth_token}
        return {"auth_user": self._username, "auth_pwd": self._password}

    def _build_body(self, request: ITopRequest) -> aiohttp.MultipartWriter:
        """Build the multipart/form-data body."""
        fields = dict(self._auth_fields())
        fields["json_data"] = json.dumps(request.to_json_data())

        writer = aiohttp.MultipartWriter("form-data")
        for name, value in fields.items():
            part = writer.append(value)
            part.set_content_disposition("form-data", name=name)
        return writer

    def _ssl_option(self) -> Union[ssl.SSLContext, bool]:
        if self.verify_tls:
            return ssl.create_default_context()
        return False

    def _debug_request(self, request: ITopRequest) -> None:
        if self.debug:
            logger.debug(
                "iTop API request",
                extra_fields={
                    "url": self.base_url,
                    "version": self.api_version,
                    "auth_method": self.auth_method,
                    "json_data": json.dumps(request.to_json_data()),
                },
            )

    def _debug_response(self, response: ITopResponse) -> None:
        if self.debug:
            logger.debug(
                "iTop API response",
                extra_fields={
                    "code": response.code,
                    "message": response.message,
                    "objects": len(response.objects) if response.objects else 0,
                },
            )

    async def _post(self, body: aiohttp.MultipartWriter) -> bytes:
        """POST the body and return the raw response body.

        Raises:
            ApiTransportError: Connection failure, timeout, or HTTP error status
        """
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(
                    self.base_url,
                    params={"version": self.api_version},
                    data=body,
                    ssl=self._ssl_option(),
                ) as response:
                    content = await response.read()
                    if response.status >= 400:
                        raise ApiTransportError(
                            f"HTTP Error: {response.status} {response.reason}",
                            response.status,
                        )
                    return content
        except asyncio.TimeoutError as e:
            raise ApiTransportError(
                f"HTTP Error: request timed out after {self.timeout_seconds}s"
            ) from e
        except aiohttp.ClientError as e:
            raise ApiTransportError(f"HTTP Error: {e}") from e

    async def make_request(self, request: ITopRequest) -> ITopResponse:
        """Send one operation and return the parsed response.

        Args:
            request: Request envelope

        Returns:
            Parsed response with code 0

        Raises:
            ApiTransportError: Network-layer failure or unreadable body
            ApiError: Backend reported a non-zero code, or malformed envelope
        """
        self._debug_request(request)

        content = await self._post(self._build_body(request))

        # UnicodeDecodeError is a ValueError too
        try:
            payload: Any = json.loads(content.decode("utf-8"))
        except ValueError as e:
            raise ApiTransportError(f"Invalid JSON in response: {content[:200]!r}") from e

        try:
            result = ITopResponse.model_validate(payload)
        except PydanticValidationError as e:
            raise ApiError(f"Malformed response envelope: {e}") from e

        self._debug_response(result)

        if not result.is_success:
            raise ApiError(
                f"iTop API Error ({result.code}): {result.message}",
                result.code,
            )

        return result

    async def list_operations(self) -> List[ITopOperation]:
        """Capability discovery: the verbs the endpoint supports."""
        response = await self.make_request(ITopRequest(operation="list_operations"))
        return response.operations or []
