# ==============================================
# MedusaAdminClient
# ==============================================
#
# PURPOSE:
#   Talks to the e-commerce admin REST API over HTTP. Implements the
#   EntityAPI protocol for customers, products and collections.
#
# ENDPOINTS:
# ----------
#   GET  /admin/{resource}/{id}          → {"customer": {...}}
#   POST /admin/{resource}/{id}          → {"customer": {...}}
#        body: {"metadata": {...}}
#   GET  /admin/{resource}?limit=&q=     → {"customers": [...]}
#
# CLASS: MedusaAdminClient
# ------------------------
#   Stateful: holds a requests.Session with auth headers.
#
#   Constructor:
#   ------------
#   - __init__(base_url, api_key=None, token=None, timeout=10.0)
#
#   Methods:
#   --------
#   - retrieve(resource, entity_id) -> Entity
#   - update(resource, entity_id, metadata, expected_version=None) -> Entity | None
#       With expected_version, the current updated_at is read first and
#       StaleEntityError is raised if it differs. The API has no
#       conditional update, so a writer landing between that read and
#       the POST is not detected here.
#   - list(resource, q=None, limit=50) -> list[Entity]
#   - close() -> None
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with MedusaAdminClient(...) as api:` usage.
#
# ==============================================

import logging
from typing import Any, Dict, List, Optional

import requests

from admin_widgets.config import ApiConfig
from admin_widgets.errors import EntityFetchError, StaleEntityError, WriteBackError
from admin_widgets.remote.entity import SINGULAR, Entity

logger = logging.getLogger(__name__)


class MedusaAdminClient:
    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
        })
        if api_key:
            # Secret API keys are sent as the basic-auth username
            self._session.auth = (api_key, "")
        elif token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    @classmethod
    def from_config(cls, config: ApiConfig) -> "MedusaAdminClient":
        return cls(
            base_url=config.base_url,
            api_key=config.api_key,
            token=config.token,
            timeout=config.timeout_seconds,
        )

    def _url(self, resource: str, entity_id: Optional[str] = None) -> str:
        if entity_id is None:
            return f"{self.base_url}/admin/{resource}"
        return f"{self.base_url}/admin/{resource}/{entity_id}"

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        response = self._session.request(method, url, timeout=self.timeout, **kwargs)
        response.raise_for_status()
        return response.json()

    def retrieve(self, resource: str, entity_id: str) -> Entity:
        try:
            body = self._request("GET", self._url(resource, entity_id))
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            reason = "not found" if status == 404 else str(e)
            raise EntityFetchError(resource, entity_id, reason) from e
        except (requests.RequestException, ValueError) as e:
            raise EntityFetchError(resource, entity_id, str(e)) from e

        payload = body.get(SINGULAR[resource]) if isinstance(body, dict) else None
        if not payload:
            raise EntityFetchError(resource, entity_id, "empty response")
        try:
            return Entity.from_payload(payload)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise EntityFetchError(resource, entity_id, f"malformed response: {e!r}") from e

    def update(
        self,
        resource: str,
        entity_id: str,
        metadata: Dict[str, Any],
        expected_version: Any = None,
    ) -> Optional[Entity]:
        if expected_version is not None:
            try:
                current = self.retrieve(resource, entity_id)
            except EntityFetchError as e:
                raise WriteBackError(str(e)) from e
            if current.version != expected_version:
                raise StaleEntityError(resource, entity_id, expected_version, current.version)

        try:
            body = self._request(
                "POST",
                self._url(resource, entity_id),
                json={"metadata": metadata},
            )
        except (requests.RequestException, ValueError) as e:
            raise WriteBackError(f"Update of {resource}/{entity_id} failed: {e}") from e

        payload = body.get(SINGULAR[resource]) if isinstance(body, dict) else None
        if not payload:
            logger.warning("Update of %s/%s returned no entity", resource, entity_id)
            return None
        try:
            return Entity.from_payload(payload)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise WriteBackError(f"Update of {resource}/{entity_id} returned a malformed entity: {e!r}") from e

    def list(self, resource: str, q: Optional[str] = None, limit: int = 50) -> List[Entity]:
        params: Dict[str, Any] = {"limit": limit}
        if q:
            params["q"] = q
        try:
            body = self._request("GET", self._url(resource), params=params)
        except (requests.RequestException, ValueError) as e:
            raise EntityFetchError(resource, None, str(e)) from e
        try:
            return [Entity.from_payload(item) for item in body.get(resource) or []]
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise EntityFetchError(resource, None, f"malformed response: {e!r}") from e

    def close(self) -> None:
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
