"""Tests for zkdeploy.ingestion.artifacts: artifact parsing and sources."""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from zkdeploy.core.errors import ArtifactError
from zkdeploy.ingestion.artifacts import (
    ContractArtifact,
    DirectoryArtifactSource,
    HttpArtifactSource,
    artifact_source_from_settings,
    parse_artifact,
)

ABI = [
    {"type": "constructor", "inputs": [{"name": "_ace", "type": "address"}]},
    {"type": "function", "name": "setFactory", "inputs": []},
    {
        "type": "event",
        "name": "CreateNote",
        "anonymous": False,
        "inputs": [
            {"name": "owner", "type": "address", "indexed": True},
            {"name": "noteHash", "type": "bytes32", "indexed": True},
            {"name": "metadata", "type": "bytes", "indexed": False},
        ],
    },
]

TRUFFLE = {"contractName": "ACE", "abi": ABI, "bytecode": "0x6080604052"}


class TestParseArtifact:
    def test_truffle_shape(self):
        artifact = parse_artifact("ACE.json", TRUFFLE)
        assert artifact.contract_name == "ACE"
        assert artifact.bytecode == "0x6080604052"
        assert artifact.deployable
        assert artifact.has_function("setFactory")
        assert not artifact.has_function("CreateNote")
        assert [e["name"] for e in artifact.events()] == ["CreateNote"]

    def test_solc_shape(self):
        data = {"abi": ABI, "evm": {"bytecode": {"object": "6080"}}}
        artifact = parse_artifact("JoinSplit.json", data)
        assert artifact.bytecode == "0x6080"
        assert artifact.contract_name == "JoinSplit"

    def test_abi_as_string(self):
        artifact = parse_artifact("X.json", {"abi": json.dumps(ABI), "bytecode": "0x00"})
        assert len(artifact.abi) == 3

    def test_interface_only_is_not_deployable(self):
        artifact = parse_artifact("IZkAsset.json", {"abi": ABI, "bytecode": "0x"})
        assert not artifact.deployable

    def test_missing_abi(self):
        with pytest.raises(ArtifactError, match="no ABI"):
            parse_artifact("Broken.json", {"bytecode": "0x00"})

    def test_malformed_abi_string(self):
        with pytest.raises(ArtifactError, match="malformed"):
            parse_artifact("Broken.json", {"abi": "[{", "bytecode": "0x00"})


class TestDirectoryArtifactSource:
    @pytest.mark.asyncio
    async def test_reads_named_artifact(self, tmp_path: Path):
        (tmp_path / "ACE.json").write_text(json.dumps(TRUFFLE))
        artifact = await DirectoryArtifactSource(tmp_path).read("ACE.json")
        assert isinstance(artifact, ContractArtifact)
        assert artifact.name == "ACE.json"

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ArtifactError, match="not found"):
            await DirectoryArtifactSource(tmp_path).read("ZkAsset.json")

    @pytest.mark.asyncio
    async def test_invalid_json(self, tmp_path: Path):
        (tmp_path / "ACE.json").write_text("{not json")
        with pytest.raises(ArtifactError, match="Cannot read"):
            await DirectoryArtifactSource(tmp_path).read("ACE.json")


class TestHttpArtifactSource:
    @pytest.mark.asyncio
    async def test_fetches_from_base_url(self):
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json=TRUFFLE)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        source = HttpArtifactSource("https://artifacts.example/build/", client=client)
        artifact = await source.read("ACE.json")
        await source.close()

        assert seen == ["https://artifacts.example/build/ACE.json"]
        assert artifact.contract_name == "ACE"

    @pytest.mark.asyncio
    async def test_http_error(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(404)))
        source = HttpArtifactSource("https://artifacts.example", client=client)
        with pytest.raises(ArtifactError, match="Cannot fetch"):
            await source.read("Missing.json")
        await source.close()


def test_source_selection(tmp_path: Path):
    assert isinstance(artifact_source_from_settings(str(tmp_path)), DirectoryArtifactSource)
    assert isinstance(
        artifact_source_from_settings(str(tmp_path), "https://artifacts.example"),
        HttpArtifactSource,
    )
