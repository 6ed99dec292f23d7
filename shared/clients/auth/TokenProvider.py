"""Service-account token provider for the Google Cloud ML APIs.

Mints an RS256-signed JWT assertion from the service-account key and exchanges
it for a short-lived bearer token (urn:ietf:params:oauth:grant-type:jwt-bearer).
The token is cached per instance; a cold cache is refreshed by exactly one
coroutine while concurrent callers wait on the same lock.
"""

import asyncio
import json
import time
from typing import Callable

import jwt
from pydantic import ValidationError as PydanticValidationError

from shared.clients.ClientInterface import ClientInterface
from shared.clients.auth.models.AuthToken import AuthToken
from shared.clients.auth.models.ServiceAccount import ServiceAccountCredentials
from shared.errors import AuthError, SuggestionPipelineError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig

_DEFAULT_TOKEN_URL = "https://oauth2.googleapis.com/token"
_DEFAULT_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
_JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
_ASSERTION_LIFETIME = 3600
_MIN_EXPIRY_SKEW = 30.0


class TokenProvider(ClientInterface):
    def __init__(self, helper_config: HelperConfig, clock: Callable[[], float] = time.time):
        super().__init__(helper_config=helper_config)
        self._clock = clock
        self._raw_credentials = self.get_config_val("CREDENTIALS_JSON", default=None, val_type="string")
        self._token_url = self.get_config_val("TOKEN_URL", default=_DEFAULT_TOKEN_URL, val_type="string")
        self._scope = self.get_config_val("SCOPE", default=_DEFAULT_SCOPE, val_type="string")
        skew = self.get_config_val("EXPIRY_SKEW_SECONDS", default=60, val_type="number")
        self._expiry_skew = max(float(skew), _MIN_EXPIRY_SKEW)

        self._credentials: ServiceAccountCredentials | None = None
        self._token: AuthToken | None = None
        self._lock = asyncio.Lock()

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "auth"

    def _get_engine_name(self) -> str:
        return "Google"

    def _get_error_class(self) -> type[SuggestionPipelineError]:
        return AuthError

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="CREDENTIALS_JSON", val_type="string", default=None),
            EnvConfig(env_key="TOKEN_URL", val_type="string", default=_DEFAULT_TOKEN_URL),
            EnvConfig(env_key="SCOPE", val_type="string", default=_DEFAULT_SCOPE),
            EnvConfig(env_key="EXPIRY_SKEW_SECONDS", val_type="number", default=60),
        ]

    def get_credentials(self) -> ServiceAccountCredentials:
        """Parse the service-account JSON once and return it.

        Raises:
            AuthError: If the JSON is unparsable or lacks client_email / private_key.
        """
        if self._credentials is None:
            try:
                self._credentials = ServiceAccountCredentials.model_validate(json.loads(self._raw_credentials))
            except (json.JSONDecodeError, PydanticValidationError) as e:
                raise AuthError(f"Malformed service-account credentials: {e}") from e
        return self._credentials

    def get_project_id(self) -> str | None:
        """Return the GCP project id from the service-account credentials, if present."""
        return self.get_credentials().project_id

    ################ AUTH ##################
    async def _get_auth_header(self) -> dict:
        # the token endpoint authenticates the signed assertion itself
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._token_url

    def _get_endpoint_healthcheck(self) -> str:
        return ""

    ##########################################
    ################ TOKENS ##################
    ##########################################

    async def get_token(self) -> str:
        """Return a valid bearer token, minting a new one only when the cache is cold or stale.

        Returns:
            str: The access token value.

        Raises:
            AuthError: If the credentials are malformed or the exchange is rejected.
        """
        cached = self._get_cached_token()
        if cached is not None:
            return cached

        async with self._lock:
            # another coroutine may have refreshed while we waited
            cached = self._get_cached_token()
            if cached is not None:
                return cached
            self._token = await self._do_exchange()
            self.logging.debug("Minted new access token, valid until %s", self._token.expires_at)
            return self._token.value

    def invalidate(self) -> None:
        """Drop the cached token so the next call mints a fresh one."""
        self._token = None

    def _get_cached_token(self) -> str | None:
        if self._token is not None and self._token.is_valid(now=self._clock(), skew=self._expiry_skew):
            return self._token.value
        return None

    def build_assertion(self, issued_at: int) -> str:
        """Build the signed JWT assertion for the token exchange.

        Args:
            issued_at (int): Issuance time in unix seconds.

        Returns:
            str: The compact, RS256-signed JWT.

        Raises:
            AuthError: If the private key cannot be used for RS256 signing.
        """
        credentials = self.get_credentials()
        claims = {
            "iss": credentials.client_email,
            "scope": self._scope,
            "aud": self._token_url,
            "exp": issued_at + _ASSERTION_LIFETIME,
            "iat": issued_at,
        }
        headers = {"kid": credentials.private_key_id} if credentials.private_key_id else None
        try:
            return jwt.encode(claims, credentials.private_key, algorithm="RS256", headers=headers)
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            raise AuthError(f"Could not sign service-account assertion: {e}") from e

    async def _do_exchange(self) -> AuthToken:
        issued_at = self._clock()
        assertion = self.build_assertion(issued_at=int(issued_at))
        response = await self.do_request(
            method="POST",
            data={"grant_type": _JWT_BEARER_GRANT, "assertion": assertion},
            raise_on_error=True,
        )
        try:
            body = response.json()
        except ValueError as e:
            raise AuthError("Token endpoint returned a non-JSON body.") from e

        access_token = body.get("access_token") if isinstance(body, dict) else None
        if not access_token:
            raise AuthError("Token endpoint response does not contain an access_token.")
        try:
            raw_expires_in = body.get("expires_in")
            expires_in = float(_ASSERTION_LIFETIME if raw_expires_in is None else raw_expires_in)
        except (TypeError, ValueError):
            expires_in = float(_ASSERTION_LIFETIME)
        return AuthToken(value=access_token, expires_at=issued_at + expires_in)
