"""npm registry client: resolve a package's latest tarball and download it."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Final
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from discord_toolbox.domain.shared.exceptions import (
    ExternalCallFailedError,
    NotFoundError,
    ValidationError,
)
from discord_toolbox.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY: Final[str] = "https://registry.npmjs.org"
PACKAGE_NAME_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?:@[a-z0-9][a-z0-9._~-]*/)?[a-z0-9][a-z0-9._~-]*$"
)


# ── Pydantic models for registry documents ─────────────────────────────


class _Dist(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    tarball: str


class _Version(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    dist: _Dist


class Packument(BaseModel):
    """The subset of an npm package document needed to find the latest tarball."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    name: str
    dist_tags: dict[str, str] = Field(alias="dist-tags")
    versions: dict[str, _Version]


class NpmTarball(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    tarball_url: str

    @property
    def filename(self) -> str:
        return f"{self.name.replace('/', '-')}-{self.version}.tgz"


class NpmRegistryClient:
    def __init__(
        self,
        registry_url: str = DEFAULT_REGISTRY,
        *,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._registry = registry_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._owns_client = client is None

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def resolve(self, name: str) -> NpmTarball:
        """Find the tarball URL of the latest published version of *name*.

        Raises:
            ValidationError: If *name* is not a valid npm package name.
            NotFoundError: If the registry does not know the package.
            ExternalCallFailedError: If the registry could not be queried.
        """
        if not PACKAGE_NAME_PATTERN.match(name):
            raise ValidationError(ErrorMessages.NPM_INVALID_NAME.format(name=name), field="package")

        url = f"{self._registry}/{quote(name, safe='@')}"
        try:
            resp = await self._client.get(url)
        except httpx.HTTPError as e:
            logger.error(LogTemplates.NPM_REQUEST_FAILED, name, e)
            raise ExternalCallFailedError("npm registry", str(e) or type(e).__name__) from e

        if resp.status_code == 404:
            raise NotFoundError("npm package", name)
        try:
            resp.raise_for_status()
            packument = Packument.model_validate(resp.json())
            latest = packument.dist_tags["latest"]
            tarball_url = packument.versions[latest].dist.tarball
        except httpx.HTTPStatusError as e:
            logger.error(LogTemplates.NPM_REQUEST_FAILED, name, e)
            raise ExternalCallFailedError("npm registry", f"HTTP {resp.status_code}") from e
        except (ValueError, KeyError, PydanticValidationError) as e:
            logger.error(LogTemplates.NPM_BAD_DOCUMENT, name, e)
            raise ExternalCallFailedError("npm registry", ErrorMessages.NPM_NO_TARBALL) from e

        logger.info(LogTemplates.NPM_RESOLVED, name, latest)
        return NpmTarball(name=packument.name, version=latest, tarball_url=tarball_url)

    async def download(self, tarball: NpmTarball, directory: Path) -> Path:
        """Stream *tarball* into *directory* and return the written path."""
        target = directory / tarball.filename
        try:
            async with self._client.stream("GET", tarball.tarball_url) as resp:
                resp.raise_for_status()
                with target.open("wb") as fh:
                    async for chunk in resp.aiter_bytes():
                        fh.write(chunk)
        except httpx.HTTPError as e:
            target.unlink(missing_ok=True)
            logger.error(LogTemplates.NPM_REQUEST_FAILED, tarball.name, e)
            raise ExternalCallFailedError("npm download", str(e) or type(e).__name__) from e

        logger.info(LogTemplates.NPM_DOWNLOADED, tarball.filename, target)
        return target
