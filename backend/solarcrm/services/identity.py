"""Client for the external identity provider.

Speaks the GoTrue admin/auth API plus the PostgREST ``profiles`` table.
Workers never get a password; we rotate a throwaway one right before each
password sign-in to mint a session.
"""
from typing import Any

import httpx

from solarcrm.core.config import settings
from solarcrm.core.logging import logger

USERS_PAGE_SIZE = 200
MAX_USER_PAGES = 50


class IdentityProviderError(Exception):
    def __init__(self, step: str, message: str, status_code: int | None = None):
        super().__init__(f"{step}: {message}")
        self.step = step
        self.status_code = status_code


class IdentityProviderClient:
    def __init__(
        self,
        base_url: str,
        service_key: str,
        anon_key: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.service_key = service_key
        self.anon_key = anon_key or service_key
        self._http = httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _admin_headers(self) -> dict[str, str]:
        return {"apikey": self.service_key, "Authorization": f"Bearer {self.service_key}"}

    def _request(self, step: str, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("idp_request_failed", step=step, error=str(e))
            raise IdentityProviderError(step, str(e)) from e
        if response.status_code >= 400:
            logger.error("idp_request_failed", step=step, status_code=response.status_code, body=response.text[:500])
            raise IdentityProviderError(step, response.text[:200], status_code=response.status_code)
        return response

    def find_user_by_email(self, email: str) -> dict[str, Any] | None:
        wanted = email.lower()
        for page in range(1, MAX_USER_PAGES + 1):
            response = self._request(
                "list_users", "GET", "/auth/v1/admin/users",
                params={"page": page, "per_page": USERS_PAGE_SIZE},
                headers=self._admin_headers(),
            )
            users = response.json().get("users") or []
            for user in users:
                if (user.get("email") or "").lower() == wanted:
                    return user
            if len(users) < USERS_PAGE_SIZE:
                return None
        return None

    def create_user(self, email: str, password: str, metadata: dict[str, Any]) -> dict[str, Any]:
        response = self._request(
            "create_user", "POST", "/auth/v1/admin/users",
            json={"email": email, "password": password, "email_confirm": True, "user_metadata": metadata},
            headers=self._admin_headers(),
        )
        return response.json()

    def set_password(self, user_id: str, password: str) -> None:
        self._request(
            "set_password", "PUT", f"/auth/v1/admin/users/{user_id}",
            json={"password": password},
            headers=self._admin_headers(),
        )

    def upsert_profile(self, profile: dict[str, Any]) -> None:
        headers = self._admin_headers()
        headers["Prefer"] = "resolution=merge-duplicates,return=minimal"
        self._request(
            "upsert_profile", "POST", "/rest/v1/profiles",
            params={"on_conflict": "id"},
            json=profile,
            headers=headers,
        )

    def sign_in_with_password(self, email: str, password: str) -> dict[str, Any]:
        response = self._request(
            "sign_in", "POST", "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            headers={"apikey": self.anon_key},
        )
        session = response.json()
        if not session.get("access_token"):
            raise IdentityProviderError("sign_in", "no session returned")
        return session


def get_identity_client():
    client = IdentityProviderClient(
        settings.IDP_URL,
        settings.IDP_SERVICE_KEY,
        settings.IDP_ANON_KEY,
        timeout=settings.IDP_TIMEOUT_SEC,
    )
    try:
        yield client
    finally:
        client.close()
