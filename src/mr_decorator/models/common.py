"""Common GitLab models shared across domains."""

from __future__ import annotations

from .base import GitLabModel


class DiffRefs(GitLabModel):
    base_sha: str | None = None
    head_sha: str | None = None
    start_sha: str | None = None
