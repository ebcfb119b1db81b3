"""Repository models."""

from __future__ import annotations

from .base import GitLabModel


class Commit(GitLabModel):
    id: str
    short_id: str = ""
    title: str = ""
    author_name: str = ""
    authored_date: str = ""
    parent_ids: list[str] = []
    web_url: str = ""
