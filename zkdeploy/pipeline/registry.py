"""Instance registry: deployed contracts keyed by role, in deployment order."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterator

from zkdeploy.core.errors import DeploymentError
from zkdeploy.core.types import ContractRole
from zkdeploy.integrations.web3_client import ContractInstance, ExecutionClient


class InstanceRegistry:
    """Role -> deployed instance mapping built during orchestration.

    Roles are unique. Iteration follows insertion (= deployment) order.
    Once :meth:`freeze` is called the registry is read-only.
    """

    def __init__(self) -> None:
        self._instances: dict[ContractRole, ContractInstance] = {}
        self.failures: list[DeploymentError] = []
        self._frozen = False

    def add(self, role: ContractRole, instance: ContractInstance) -> None:
        if self._frozen:
            raise RuntimeError("Instance registry is frozen")
        if role in self._instances:
            raise ValueError(f"Role {role.value} is already deployed")
        self._instances[role] = instance

    def record_failure(self, error: DeploymentError) -> None:
        if self._frozen:
            raise RuntimeError("Instance registry is frozen")
        self.failures.append(error)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, role: ContractRole) -> ContractInstance | None:
        return self._instances.get(role)

    def require(self, role: ContractRole) -> ContractInstance:
        """Return the instance for ``role`` or raise a DeploymentError."""
        instance = self._instances.get(role)
        if instance is None:
            raise DeploymentError(f"{role.value} is not deployed", step=role.value)
        return instance

    def __getitem__(self, role: ContractRole) -> ContractInstance:
        return self._instances[role]

    def __contains__(self, role: object) -> bool:
        return role in self._instances

    def __iter__(self) -> Iterator[ContractRole]:
        return iter(self._instances)

    def __len__(self) -> int:
        return len(self._instances)

    @property
    def complete(self) -> bool:
        return all(role in self._instances for role in ContractRole) and not self.failures

    def addresses(self) -> dict[str, str]:
        return {role.value: instance.address for role, instance in self._instances.items()}

    def save(self, path: str | Path) -> Path:
        """Write the role -> address map as JSON."""
        target = Path(path)
        target.write_text(json.dumps(self.addresses(), indent=2) + "\n", encoding="utf-8")
        return target

    @classmethod
    async def attach(cls, client: ExecutionClient, path: str | Path) -> InstanceRegistry:
        """Rebuild a frozen registry from a saved deployment record."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        registry = cls()
        for role_name, address in data.items():
            role = ContractRole(role_name)
            handle = await client.read_contract(role.artifact)
            registry.add(role, handle.at(address))
        registry.freeze()
        return registry
