"""
Auth identity management through the Supabase Auth admin API.

Creating a planner account is two writes: the auth identity here, then the
profile row. With the local backend identities are simulated with fresh
UUIDs so account management works offline.
"""

import asyncio
from uuid import uuid4

import httpx

from wsp.config import settings
from wsp.infrastructure.observability.logging import get_logger
from wsp.services.errors import IdentityProviderError

logger = get_logger(__name__)

REQUEST_TIMEOUT = 10  # seconds
MAX_RETRIES = 3
BACKOFF_FACTOR = 2
RETRY_STATUS_CODES = {429, 500, 502, 503, 504}


class SupabaseIdentityClient:
    """Thin client over /auth/v1/admin/users."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        key = settings.SUPABASE_SERVICE_ROLE_KEY
        if not key:
            raise IdentityProviderError("SUPABASE_SERVICE_ROLE_KEY is not configured", recoverable=False)
        return {"apikey": key, "Authorization": f"Bearer {key}"}

    async def _request(self, method: str, url: str, operation: str, **kwargs) -> httpx.Response:
        headers = self._headers()
        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT, transport=self._transport) as client:
            for attempt in range(1, MAX_RETRIES + 1):
                try:
                    response = await client.request(method, url, headers=headers, **kwargs)
                except httpx.RequestError as exc:
                    if attempt == MAX_RETRIES:
                        logger.error("Auth admin request failed", operation=operation, error=str(exc))
                        raise IdentityProviderError(f"{operation} failed: {exc}") from exc
                    wait_time = BACKOFF_FACTOR**attempt
                    logger.warning(
                        "Auth admin request error, retrying",
                        operation=operation,
                        attempt=attempt,
                        wait_time=wait_time,
                        error=str(exc),
                    )
                    await asyncio.sleep(wait_time)
                    continue

                if response.status_code in RETRY_STATUS_CODES and attempt < MAX_RETRIES:
                    wait_time = BACKOFF_FACTOR**attempt
                    logger.warning(
                        "Auth admin transient status",
                        operation=operation,
                        status_code=response.status_code,
                        attempt=attempt,
                    )
                    await asyncio.sleep(wait_time)
                    continue
                return response

        raise IdentityProviderError(f"{operation} failed after {MAX_RETRIES} attempts")

    async def create_identity(self, email: str, password: str) -> str:
        response = await self._request(
            "POST",
            settings.auth_admin_url(),
            "create_identity",
            json={"email": email, "password": password, "email_confirm": True},
        )
        if response.status_code >= 400:
            detail = _error_message(response)
            logger.warning("Identity creation rejected", email=email, status_code=response.status_code, detail=detail)
            raise IdentityProviderError(f"Failed to create user: {detail}")

        user_id = response.json().get("id")
        if not user_id:
            raise IdentityProviderError("An unknown error occurred during user creation.")
        return str(user_id)

    async def delete_identity(self, user_id: str) -> None:
        response = await self._request(
            "DELETE", f"{settings.auth_admin_url()}/{user_id}", "delete_identity"
        )
        # Already gone is fine
        if response.status_code >= 400 and response.status_code != 404:
            raise IdentityProviderError(f"Failed to delete auth user: {_error_message(response)}")


class LocalIdentityClient:
    """Offline stand-in: identities are just generated ids."""

    async def create_identity(self, email: str, password: str) -> str:
        user_id = str(uuid4())
        logger.info("Local identity created", email=email, user_id=user_id)
        return user_id

    async def delete_identity(self, user_id: str) -> None:
        logger.info("Local identity deleted", user_id=user_id)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    return str(body.get("msg") or body.get("message") or body.get("error_description") or body)


def get_identity_client() -> SupabaseIdentityClient | LocalIdentityClient:
    if settings.DATA_BACKEND == "postgres":
        return SupabaseIdentityClient()
    return LocalIdentityClient()
