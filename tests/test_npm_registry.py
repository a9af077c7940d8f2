"""Tests for the npm registry client, served by httpx.MockTransport."""

import httpx
import pytest

from discord_toolbox.domain.shared.exceptions import (
    ExternalCallFailedError,
    NotFoundError,
    ValidationError,
)
from discord_toolbox.infrastructure.http.npm_registry import NpmRegistryClient, NpmTarball

REGISTRY = "https://registry.test"

LEFT_PAD = {
    "name": "left-pad",
    "dist-tags": {"latest": "1.3.0"},
    "versions": {
        "1.2.0": {"dist": {"tarball": f"{REGISTRY}/left-pad/-/left-pad-1.2.0.tgz"}},
        "1.3.0": {"dist": {"tarball": f"{REGISTRY}/left-pad/-/left-pad-1.3.0.tgz"}},
    },
}


def _client(handler) -> NpmRegistryClient:
    return NpmRegistryClient(REGISTRY, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestResolve:
    async def test_latest_version(self):
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(200, json=LEFT_PAD)

        tarball = await _client(handler).resolve("left-pad")

        assert requested == [f"{REGISTRY}/left-pad"]
        assert tarball == NpmTarball(
            name="left-pad", version="1.3.0", tarball_url=f"{REGISTRY}/left-pad/-/left-pad-1.3.0.tgz"
        )

    async def test_scoped_package_url_encoded(self):
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(request.url.raw_path.decode())
            return httpx.Response(
                200,
                json={
                    "name": "@types/node",
                    "dist-tags": {"latest": "20.0.0"},
                    "versions": {"20.0.0": {"dist": {"tarball": f"{REGISTRY}/node.tgz"}}},
                },
            )

        tarball = await _client(handler).resolve("@types/node")

        assert requested == ["/@types%2Fnode"]
        assert tarball.filename == "@types-node-20.0.0.tgz"

    @pytest.mark.parametrize("name", ["", "Left-Pad", "../etc", "a b", "@scope"])
    async def test_invalid_names_rejected_without_request(self, name):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        with pytest.raises(ValidationError):
            await _client(handler).resolve(name)

    async def test_unknown_package(self):
        client = _client(lambda request: httpx.Response(404, json={"error": "Not found"}))

        with pytest.raises(NotFoundError):
            await client.resolve("does-not-exist")

    async def test_server_error(self):
        client = _client(lambda request: httpx.Response(503))

        with pytest.raises(ExternalCallFailedError) as exc_info:
            await client.resolve("left-pad")
        assert "503" in exc_info.value.reason

    async def test_document_without_latest(self):
        document = {"name": "left-pad", "dist-tags": {}, "versions": {}}
        client = _client(lambda request: httpx.Response(200, json=document))

        with pytest.raises(ExternalCallFailedError):
            await client.resolve("left-pad")

    async def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ExternalCallFailedError):
            await _client(handler).resolve("left-pad")


class TestDownload:
    async def test_writes_tarball(self, tmp_path):
        client = _client(lambda request: httpx.Response(200, content=b"\x1f\x8b tarball bytes"))
        tarball = NpmTarball(name="left-pad", version="1.3.0", tarball_url=f"{REGISTRY}/lp.tgz")

        path = await client.download(tarball, tmp_path)

        assert path == tmp_path / "left-pad-1.3.0.tgz"
        assert path.read_bytes() == b"\x1f\x8b tarball bytes"

    async def test_failed_download_leaves_no_file(self, tmp_path):
        client = _client(lambda request: httpx.Response(500))
        tarball = NpmTarball(name="left-pad", version="1.3.0", tarball_url=f"{REGISTRY}/lp.tgz")

        with pytest.raises(ExternalCallFailedError):
            await client.download(tarball, tmp_path)

        assert not (tmp_path / "left-pad-1.3.0.tgz").exists()


class TestClose:
    async def test_does_not_close_injected_client(self):
        http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        client = NpmRegistryClient(REGISTRY, client=http)

        await client.close()

        assert not http.is_closed
        await http.aclose()

    async def test_closes_owned_client(self):
        client = NpmRegistryClient(REGISTRY)
        await client.close()
        assert client._client.is_closed
