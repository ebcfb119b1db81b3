"""Decorator configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .exceptions import ConfigurationError

API_URL_PROPERTY = "com.github.mc1arke.sonarqube.plugin.branch.pullrequest.gitlab.api.url"
REPOSITORY_SLUG_PROPERTY = (
    "com.github.mc1arke.sonarqube.plugin.branch.pullrequest.gitlab.repositorySlug"
)


@dataclass
class DecoratorConfig:
    """Settings for one decoration pass.

    ``api_url`` and ``repository_slug`` come from the scanner properties of the
    analysis; everything else is read from the environment.
    """

    api_url: str = ""
    repository_slug: str = ""
    token: str = ""
    public_root_url: str = ""
    timeout: int = 30
    ssl_verify: bool = True
    max_pages: int = 1000

    @classmethod
    def from_scanner_properties(cls, properties: Mapping[str, str]) -> DecoratorConfig:
        api_url = (properties.get(API_URL_PROPERTY) or "").rstrip("/")
        repository_slug = properties.get(REPOSITORY_SLUG_PROPERTY) or ""
        token = (
            os.getenv("GITLAB_TOKEN")
            or os.getenv("GITLAB_PAT")
            or os.getenv("GITLAB_PERSONAL_ACCESS_TOKEN")
            or os.getenv("GITLAB_API_TOKEN", "")
        )
        public_root_url = (
            os.getenv("SONAR_PUBLIC_URL") or os.getenv("SONAR_HOST_URL", "")
        ).rstrip("/")
        timeout = int(os.getenv("GITLAB_TIMEOUT", "30"))
        ssl_verify = os.getenv("GITLAB_SSL_VERIFY", "true").lower() not in (
            "false",
            "0",
            "no",
        )
        max_pages = int(os.getenv("GITLAB_MAX_PAGES", "1000"))

        return cls(
            api_url=api_url,
            repository_slug=repository_slug,
            token=token,
            public_root_url=public_root_url,
            timeout=timeout,
            ssl_verify=ssl_verify,
            max_pages=max_pages,
        )

    def validate(self) -> None:
        for key, value in (
            (API_URL_PROPERTY, self.api_url),
            (REPOSITORY_SLUG_PROPERTY, self.repository_slug),
        ):
            if not value:
                msg = (
                    "Could not decorate Gitlab merge request. "
                    f"'{key}' has not been set in scanner properties"
                )
                raise ConfigurationError(msg)
        if not self.token:
            msg = (
                "GitLab token is required. Set one of: GITLAB_TOKEN, GITLAB_PAT, "
                "GITLAB_PERSONAL_ACCESS_TOKEN, or GITLAB_API_TOKEN"
            )
            raise ConfigurationError(msg)
        if not self.public_root_url:
            msg = (
                "Public dashboard URL is required for the status link. "
                "Set SONAR_PUBLIC_URL or SONAR_HOST_URL"
            )
            raise ConfigurationError(msg)
        if self.max_pages < 1:
            msg = "GITLAB_MAX_PAGES must be at least 1"
            raise ConfigurationError(msg)
