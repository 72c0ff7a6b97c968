"""Tests for zkdeploy.pipeline.registry."""

from __future__ import annotations

import json

import pytest

from zkdeploy.core.errors import DeploymentError
from zkdeploy.core.types import ContractRole
from zkdeploy.pipeline.orchestrator import instantiate
from zkdeploy.pipeline.registry import InstanceRegistry


class _Instance:
    def __init__(self, address: str) -> None:
        self.address = address


class TestInstanceRegistry:
    def test_insertion_order(self):
        registry = InstanceRegistry()
        registry.add(ContractRole.ERC20, _Instance("0x2"))
        registry.add(ContractRole.ACE, _Instance("0x1"))
        assert list(registry) == [ContractRole.ERC20, ContractRole.ACE]
        assert registry.addresses() == {"erc20": "0x2", "ace": "0x1"}

    def test_roles_are_unique(self):
        registry = InstanceRegistry()
        registry.add(ContractRole.ACE, _Instance("0x1"))
        with pytest.raises(ValueError, match="already deployed"):
            registry.add(ContractRole.ACE, _Instance("0x9"))

    def test_frozen_registry_rejects_writes(self):
        registry = InstanceRegistry()
        registry.freeze()
        with pytest.raises(RuntimeError, match="frozen"):
            registry.add(ContractRole.ACE, _Instance("0x1"))
        with pytest.raises(RuntimeError, match="frozen"):
            registry.record_failure(DeploymentError("boom"))

    def test_require_missing_role(self):
        with pytest.raises(DeploymentError) as exc_info:
            InstanceRegistry().require(ContractRole.ZK_ASSET)
        assert exc_info.value.step == "zk_asset"

    def test_get_and_contains(self):
        registry = InstanceRegistry()
        registry.add(ContractRole.ACE, _Instance("0x1"))
        assert ContractRole.ACE in registry
        assert registry.get(ContractRole.ERC20) is None
        assert not registry.complete


class TestDeploymentRecord:
    @pytest.mark.asyncio
    async def test_save_and_attach(self, tmp_path, fake_client, tx_options, proof_library):
        registry = await instantiate(fake_client, tx_options, proof_library)
        path = registry.save(tmp_path / "deployment.json")

        saved = json.loads(path.read_text())
        assert list(saved) == [role.value for role in ContractRole]

        attached = await InstanceRegistry.attach(fake_client, path)
        assert attached.frozen
        assert attached.addresses() == registry.addresses()
        assert attached[ContractRole.ZK_ASSET].artifact.name == "ZkAsset.json"

    @pytest.mark.asyncio
    async def test_attach_rejects_unknown_role(self, tmp_path, fake_client):
        path = tmp_path / "deployment.json"
        path.write_text(json.dumps({"mystery": "0x1"}))
        with pytest.raises(ValueError):
            await InstanceRegistry.attach(fake_client, path)
