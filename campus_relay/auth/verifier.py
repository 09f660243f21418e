"""
Identity verification for chat callers.

The web client signs users in with Supabase Auth and forwards the user's
access token as `Authorization: Bearer <token>`. The relay asks Supabase
who the token belongs to before doing any provider work.
"""
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from campus_relay.core.logging_config import get_logger

logger = get_logger(__name__)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Identity:
    """The authenticated caller."""
    user_id: str
    email: Optional[str] = None
    role: Optional[str] = None


class IdentityVerificationError(Exception):
    """Raised when a token is rejected or cannot be checked."""
    pass


class IdentityVerifier(Protocol):
    async def verify(self, token: str) -> Identity:
        ...


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Return the token from an Authorization header value.

    None when the header is missing, not a Bearer credential, or empty.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


class SupabaseIdentityVerifier:
    """
    Verify access tokens against the Supabase Auth `/auth/v1/user` endpoint.

    Supabase answers 200 with the user object for a live session and 401/403
    for expired, revoked, or forged tokens.
    """

    def __init__(
        self,
        supabase_url: Optional[str],
        anon_key: Optional[str],
        http_client: httpx.AsyncClient,
        timeout: Optional[float] = None,
    ):
        self._user_endpoint = f"{supabase_url.rstrip('/')}/auth/v1/user" if supabase_url else None
        self._anon_key = anon_key
        self._http = http_client
        self._timeout = timeout

        if not self.is_configured:
            logger.error("SUPABASE_URL / SUPABASE_ANON_KEY not set: every chat request will be rejected")

    @property
    def is_configured(self) -> bool:
        return bool(self._user_endpoint and self._anon_key)

    async def verify(self, token: str) -> Identity:
        if not self.is_configured:
            raise IdentityVerificationError("identity verification is not configured")

        kwargs = {
            "headers": {
                "apikey": self._anon_key,
                "Authorization": f"{BEARER_PREFIX}{token}",
            }
        }
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout

        try:
            response = await self._http.get(self._user_endpoint, **kwargs)
        except httpx.RequestError as e:
            logger.warning(f"Identity service unreachable: {type(e).__name__}")
            raise IdentityVerificationError("identity service unreachable") from e

        if response.status_code != 200:
            logger.info(f"Token rejected by identity service: status={response.status_code}")
            raise IdentityVerificationError(f"token rejected ({response.status_code})")

        try:
            data = response.json()
        except ValueError as e:
            raise IdentityVerificationError("identity service returned invalid JSON") from e

        user_id = data.get("id") if isinstance(data, dict) else None
        if not user_id:
            raise IdentityVerificationError("identity service returned no user id")

        return Identity(user_id=str(user_id), email=data.get("email"), role=data.get("role"))
