"""Read pre-compiled contract artifacts (ABI + bytecode) by name."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import httpx

from zkdeploy.core.errors import ArtifactError


@dataclass(frozen=True)
class ContractArtifact:
    """Compiled interface and deployment bytecode for one contract."""

    name: str
    abi: list[dict[str, Any]] = field(default_factory=list)
    bytecode: str = ""
    contract_name: str = ""

    @property
    def deployable(self) -> bool:
        return bool(self.bytecode) and self.bytecode not in ("0x", "0x0")

    def events(self) -> list[dict[str, Any]]:
        return [item for item in self.abi if item.get("type") == "event"]

    def has_function(self, name: str) -> bool:
        return any(
            item.get("type") == "function" and item.get("name") == name
            for item in self.abi
        )


@runtime_checkable
class ArtifactSource(Protocol):
    """Named lookup of contract artifacts."""

    async def read(self, name: str) -> ContractArtifact:
        ...

    async def close(self) -> None:
        ...


def parse_artifact(name: str, data: dict[str, Any]) -> ContractArtifact:
    """Build a ContractArtifact from a Truffle or solc-style JSON document.

    Truffle / Hardhat artifacts carry ``abi`` and ``bytecode`` at the top
    level; solc standard-JSON contract output nests the bytecode under
    ``evm.bytecode.object``.
    """
    abi = data.get("abi")
    if isinstance(abi, str):
        try:
            abi = json.loads(abi)
        except json.JSONDecodeError as exc:
            raise ArtifactError(f"Artifact {name} has a malformed ABI", cause=exc) from exc
    if not isinstance(abi, list):
        raise ArtifactError(f"Artifact {name} has no ABI")

    bytecode = data.get("bytecode", "")
    if isinstance(bytecode, dict):
        bytecode = bytecode.get("object", "")
    if not bytecode:
        bytecode = data.get("evm", {}).get("bytecode", {}).get("object", "")
    if bytecode and not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode

    return ContractArtifact(
        name=name,
        abi=abi,
        bytecode=bytecode,
        contract_name=data.get("contractName") or Path(name).stem,
    )


class DirectoryArtifactSource:
    """Read artifacts from a build directory (e.g. ``build/contracts``)."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    async def read(self, name: str) -> ContractArtifact:
        path = self.root / name
        if not path.is_file():
            raise ArtifactError(f"Artifact not found: {path}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ArtifactError(f"Cannot read artifact {path}", cause=exc) from exc
        return parse_artifact(name, data)

    async def close(self) -> None:
        pass


class HttpArtifactSource:
    """Fetch artifacts from ``<base_url>/<name>`` over HTTP."""

    def __init__(self, base_url: str, client: httpx.AsyncClient | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=30.0)

    async def read(self, name: str) -> ContractArtifact:
        url = f"{self.base_url}/{name}"
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, json.JSONDecodeError) as exc:
            raise ArtifactError(f"Cannot fetch artifact {url}", cause=exc) from exc
        return parse_artifact(name, data)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()


def artifact_source_from_settings(artifacts_dir: str, artifacts_url: str = "") -> ArtifactSource:
    """Pick the HTTP source when a URL is configured, the directory otherwise."""
    if artifacts_url:
        return HttpArtifactSource(artifacts_url)
    return DirectoryArtifactSource(artifacts_dir)
