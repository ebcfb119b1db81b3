"""Merge request models."""

from __future__ import annotations

from .base import GitLabModel
from .common import DiffRefs


class MergeRequest(GitLabModel):
    id: int
    iid: int
    title: str = ""
    state: str = ""
    source_branch: str = ""
    target_branch: str = ""
    sha: str | None = None
    web_url: str = ""
    diff_refs: DiffRefs | None = None
