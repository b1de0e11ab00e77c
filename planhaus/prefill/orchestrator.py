"""
Client-side prefill flow: fetch a project's intake over HTTP, map it locally,
then hand the whole bundle to the server's transactional prefill endpoint.
"""
import logging
from enum import Enum
from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urlparse

import httpx

from config import PLANHAUS_API_BASE
from planhaus.prefill.completion import get_intake_completion, is_intake_complete
from planhaus.prefill.mappings import PrefillBundle, build_prefill_bundle

NO_INTAKE_MESSAGE = "No intake data found for this project"


class PrefillState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class ProjectPrefillOrchestrator:
    def __init__(self, project_id: str, user_id: str, base_url: str = PLANHAUS_API_BASE,
                 transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = 10.0):
        self.project_id = project_id
        self.user_id = user_id
        self.base_url = base_url
        self._transport = transport
        self._timeout = timeout

        self.state = PrefillState.IDLE
        self.error: Optional[str] = None
        self.intake: Optional[Dict[str, Any]] = None
        self.bundle: Optional[PrefillBundle] = None
        self.completion_percentage = 0
        self.is_intake_complete = False
        self.last_summary: Optional[Dict[str, Any]] = None

    @classmethod
    def from_url(cls, url: str, user_id: str, **kwargs) -> "ProjectPrefillOrchestrator":
        """Builds an orchestrator for the ``projectId`` query parameter of a page URL."""
        project_ids = parse_qs(urlparse(url).query).get("projectId")
        if not project_ids or not project_ids[0]:
            raise ValueError(f"URL has no projectId query parameter: {url}")
        return cls(project_ids[0], user_id, **kwargs)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"X-User-Id": self.user_id},
            transport=self._transport,
            timeout=self._timeout,
        )

    def _fail(self, message: str) -> bool:
        logging.warning(f"Prefill for project {self.project_id} failed: {message}")
        self.error = message
        return False

    async def load_intake_data(self) -> bool:
        """Fetches and maps the intake. Ends in READY on success, ERROR otherwise."""
        self.state = PrefillState.LOADING
        self.error = None
        try:
            async with self._client() as client:
                response = await client.get("/intake", params={"projectId": self.project_id})
        except httpx.HTTPError as e:
            self.state = PrefillState.ERROR
            return self._fail(f"Failed to load intake data: {e}")

        if response.status_code == 404:
            self.state = PrefillState.ERROR
            return self._fail(NO_INTAKE_MESSAGE)
        if response.status_code >= 400:
            self.state = PrefillState.ERROR
            return self._fail(f"Failed to load intake data (HTTP {response.status_code})")

        self.intake = response.json().get("data") or {}
        self.bundle = build_prefill_bundle(self.intake)
        self.completion_percentage = get_intake_completion(self.intake)
        self.is_intake_complete = is_intake_complete(self.intake)
        self.state = PrefillState.READY
        logging.info(f"Loaded intake for project {self.project_id}: {self.completion_percentage}% complete")
        return True

    async def apply_prefill(self) -> bool:
        """Posts the loaded bundle in one request. The server applies all of it or none of it."""
        if self.bundle is None:
            return self._fail("Nothing to apply; load intake data first")

        self.error = None
        payload = self.bundle.model_dump(mode="json", by_alias=True)
        try:
            async with self._client() as client:
                response = await client.post(f"/projects/{self.project_id}/prefill", json=payload)
        except httpx.HTTPError as e:
            return self._fail(f"Failed to apply prefill: {e}")

        if response.status_code >= 400:
            return self._fail(f"Failed to apply prefill (HTTP {response.status_code})")

        self.last_summary = response.json()
        return True
