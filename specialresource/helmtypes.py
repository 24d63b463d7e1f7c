"""Helm chart and repository specifications."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass


@dataclass
class HelmRepo:
    """Location and credentials of a Helm chart repository."""

    name: str
    url: str
    username: str = ""
    password: str = ""
    cert_file: str = ""
    key_file: str = ""
    ca_file: str = ""
    insecure_skip_tls_verify: bool = False

    def deep_copy(self) -> HelmRepo:
        """Return an independent copy."""
        return dataclasses.replace(self)


@dataclass
class HelmChart:
    """A chart by name and version in a repository."""

    name: str
    version: str
    repository: HelmRepo
    tags: list[str] | None = None

    def deep_copy(self) -> HelmChart:
        """Return an independent copy, including the repository and tags."""
        return HelmChart(
            name=self.name,
            version=self.version,
            repository=self.repository.deep_copy(),
            tags=list(self.tags) if self.tags is not None else None,
        )