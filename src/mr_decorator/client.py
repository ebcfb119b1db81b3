"""GitLab API client using httpx."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from types import MappingProxyType
from typing import Any
from urllib.parse import quote

import httpx

from .config import DecoratorConfig
from .exceptions import (
    GitLabApiError,
    GitLabAuthError,
    GitLabNotFoundError,
    GitLabTransportError,
    PaginationError,
)
from .models.base import ModelT
from .models.merge_requests import MergeRequest
from .models.repositories import Commit

logger = logging.getLogger(__name__)

# GitLab answers this when the same status is posted twice for a commit.
# https://gitlab.com/gitlab-org/gitlab-ce/issues/25807
TRANSITION_CONFLICT_MARKER = "Cannot transition status"

# Matches:  <url>; rel="name"
_LINK_RE = re.compile(r'<([^>]+)>\s*;\s*rel="([^"]+)"')


def next_link(response: httpx.Response) -> str | None:
    """Return the URL of the first ``rel="next"`` entry of the Link header, if any."""
    for url, rel in _LINK_RE.findall(response.headers.get("link", "")):
        if rel == "next":
            return url
    return None


class GitLabClient:
    """Blocking HTTP client for the parts of the GitLab REST API v4 used to decorate MRs.

    Every request opens its own connection and closes it before returning,
    whatever the outcome.
    """

    def __init__(self, config: DecoratorConfig) -> None:
        config.validate()
        self.config = config
        self.headers: Mapping[str, str] = MappingProxyType(
            {
                "PRIVATE-TOKEN": config.token,
                "Accept": "application/json",
            }
        )

    # ── HTTP helpers ──────────────────────────────────────────────

    @staticmethod
    def _encode_id(project_id: str | int) -> str:
        """Encode a project ID. Numeric IDs pass through; paths are URL-encoded."""
        if isinstance(project_id, int):
            return str(project_id)
        try:
            return str(int(project_id))
        except ValueError:
            return quote(project_id, safe="")

    @contextmanager
    def _session(self) -> Iterator[httpx.Client]:
        with httpx.Client(
            base_url=self.config.api_url,
            headers=dict(self.headers),
            timeout=self.config.timeout,
            verify=self.config.ssl_verify,
        ) as session:
            yield session

    def _send(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        data: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        with self._session() as session:
            try:
                resp = session.request(method, url, params=params, data=data)
            except httpx.TransportError as e:
                logger.error("%s %s failed: %s", method, url, e)
                raise GitLabTransportError(method, url, str(e)) from e
        logger.debug("%s %s -> %s", method, resp.request.url, resp.status_code)
        return resp

    @staticmethod
    def _check_status(resp: httpx.Response, expected: int) -> None:
        if resp.status_code == expected:
            return
        logger.error(
            "Unexpected response from %s %s: %s %s",
            resp.request.method,
            resp.request.url,
            resp.status_code,
            resp.text,
        )
        if resp.status_code in (401, 403):
            raise GitLabAuthError(resp.status_code, resp.text)
        if resp.status_code == 404:
            raise GitLabNotFoundError(resp.text)
        raise GitLabApiError(resp.status_code, resp.reason_phrase or "", resp.text)

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        content_type = resp.headers.get("content-type", "")
        if "text/html" in content_type:
            msg = "Unexpected HTML response, check URL and authentication"
            raise GitLabApiError(resp.status_code, msg, resp.text[:500])
        if not resp.content:
            return None
        try:
            return resp.json()
        except json.JSONDecodeError as e:
            raise GitLabApiError(
                resp.status_code,
                f"JSON parse error: {e}",
                resp.text[:500],
            ) from e

    def fetch_one(self, url: str, model: type[ModelT]) -> ModelT | None:
        """GET a single resource and decode it into ``model``."""
        resp = self._send("GET", url)
        self._check_status(resp, 200)
        result = model.from_payload(self._json(resp))
        logger.info("%s received", model.__name__)
        return result

    def fetch_paged(self, url: str, model: type[ModelT]) -> list[ModelT]:
        """GET every page of a listing, following ``next`` links until none remain."""
        items: list[ModelT] = []
        # Both the URL as requested and as resolved against the API root, so a
        # relative first URL still matches an absolute ``next`` link back to it.
        visited: set[str] = set()
        pages = 0
        next_url: str | None = url
        while next_url is not None:
            if next_url in visited:
                msg = f"Pagination loop: {next_url} was already fetched"
                raise PaginationError(msg)
            if pages >= self.config.max_pages:
                msg = f"Gave up after {self.config.max_pages} pages of {url}"
                raise PaginationError(msg)

            resp = self._send("GET", next_url)
            visited.update((next_url, str(resp.request.url)))
            pages += 1
            self._check_status(resp, 200)
            page = model.list_from_payload(self._json(resp))
            items.extend(page)
            logger.info("Received page %d of %s (%d items)", pages, url, len(page))
            next_url = next_link(resp)
        return items

    def post_form(
        self,
        url: str,
        fields: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        """POST a form-encoded body (or none) and hand back the raw response."""
        return self._send("POST", url, params=params, data=fields)

    # ── Merge requests ────────────────────────────────────────────

    def list_merge_request_commits(self, project_id: str | int, mr_iid: int | str) -> list[str]:
        enc = self._encode_id(project_id)
        commits = self.fetch_paged(f"/projects/{enc}/merge_requests/{mr_iid}/commits", Commit)
        return [commit.id for commit in commits]

    def get_merge_request(self, project_id: str | int, mr_iid: int | str) -> MergeRequest:
        enc = self._encode_id(project_id)
        url = f"/projects/{enc}/merge_requests/{mr_iid}"
        merge_request = self.fetch_one(url, MergeRequest)
        if merge_request is None:
            raise GitLabApiError(200, "Empty merge request response", url)
        return merge_request

    def create_mr_discussion(
        self, project_id: str | int, mr_iid: int | str, fields: Mapping[str, str]
    ) -> None:
        enc = self._encode_id(project_id)
        resp = self.post_form(f"/projects/{enc}/merge_requests/{mr_iid}/discussions", fields)
        self._check_status(resp, 201)
        logger.info("Comment posted")

    # ── Commit statuses ───────────────────────────────────────────

    def post_commit_status(
        self, project_id: str | int, sha: str, params: Mapping[str, str]
    ) -> None:
        enc = self._encode_id(project_id)
        resp = self.post_form(f"/projects/{enc}/statuses/{sha}", params=params)
        if TRANSITION_CONFLICT_MARKER in resp.text:
            logger.debug("Transition status is already %s", params.get("state"))
            return
        self._check_status(resp, 201)
        logger.info("Status posted")

