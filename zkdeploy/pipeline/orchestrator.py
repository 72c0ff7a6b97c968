"""Deployment orchestrator: deploys and wires the confidential asset contracts."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from zkdeploy.core.config import get_settings
from zkdeploy.core.errors import DeploymentError
from zkdeploy.core.types import FACTORY_REGISTRATIONS, ContractRole, TxOptions
from zkdeploy.integrations.web3_client import ContractHandle, ContractInstance, ExecutionClient
from zkdeploy.pipeline.registry import InstanceRegistry
from zkdeploy.proofs.library import ProofLibrary
from zkdeploy.reports.events import LINE_BREAK

logger = logging.getLogger(__name__)


_CORE_ROLES = (
    ContractRole.ACE,
    ContractRole.JOIN_SPLIT,
    ContractRole.JOIN_SPLIT_FLUID,
    ContractRole.ERC20,
)
_FACTORY_ROLES = (ContractRole.BASE_FACTORY, ContractRole.ADJUSTABLE_FACTORY)


class DeploymentOrchestrator:
    """Deploys the contract graph in dependency order.

    Flow:
    1. Read artifacts for every role
    2. Deploy ACE, JoinSplit, JoinSplitFluid, ERC20Mintable, then the two
       factories (constructed with the ACE address)
    3. Register the factories on ACE
    4. Deploy ZkAssetMintable and ZkAsset
    5. Set the common reference string and proof verifiers on ACE

    Steps 1-4 are best-effort unless ``fail_fast`` is set: a failing step is
    logged, recorded on the registry and the next step runs. Step 5 is never
    guarded and any error propagates.
    """

    def __init__(
        self,
        client: ExecutionClient,
        tx_options: TxOptions,
        library: ProofLibrary,
        fail_fast: bool | None = None,
    ) -> None:
        self.client = client
        self.tx_options = tx_options
        self.library = library
        self.fail_fast = get_settings().deploy_fail_fast if fail_fast is None else fail_fast
        self._handles: dict[ContractRole, ContractHandle] = {}

    async def run(self) -> InstanceRegistry:
        """Deploy, register, configure and return the frozen registry."""
        registry = InstanceRegistry()
        logger.info(LINE_BREAK)
        logger.info("deploying confidential asset contracts...")

        await self.read_artifacts(registry)
        await self.deploy_core(registry)
        await self.register_factories(registry)
        await self.deploy_assets(registry)
        await self.configure_engine(registry)

        self._log_addresses(registry)
        registry.freeze()
        if registry.failures:
            logger.warning("Deployment finished with %d failed step(s)", len(registry.failures))
        return registry

    # ── Steps ────────────────────────────────────────────────────────────

    async def read_artifacts(self, registry: InstanceRegistry) -> None:
        for role in ContractRole:
            handle = await self._guard(
                registry,
                f"read:{role.value}",
                lambda r=role: self.client.read_contract(r.artifact),
            )
            if handle is not None:
                self._handles[role] = handle

    async def deploy_core(self, registry: InstanceRegistry) -> None:
        """Deploy the engine, the verifiers, the ERC20 and the factories."""
        for role in _CORE_ROLES:
            await self._deploy(registry, role, lambda: ())
        for role in _FACTORY_ROLES:
            await self._deploy(registry, role, lambda: (registry.require(ContractRole.ACE).address,))

    async def register_factories(self, registry: InstanceRegistry) -> None:
        """Register each note registry factory on the engine under its id."""
        for fid, role in FACTORY_REGISTRATIONS:

            async def register(fid: int = fid, role: ContractRole = role) -> Any:
                ace = registry.require(ContractRole.ACE)
                factory = registry.require(role)
                receipt = await ace.transact("setFactory", fid, factory.address, tx_options=self.tx_options)
                logger.debug("Registered %s as factory %d", role.value, fid, extra={"role": role.value})
                return receipt

            await self._guard(registry, f"setFactory:{fid}", register)

    async def deploy_assets(
        self, registry: InstanceRegistry
    ) -> tuple[ContractInstance | None, ContractInstance | None]:
        """Deploy the mintable and the fixed-supply zk assets."""

        def mintable_args() -> tuple:
            ace = registry.require(ContractRole.ACE)
            erc20 = registry.require(ContractRole.ERC20)
            # (ace, linkedToken, scalingFactor, canAdjustSupply, canConvert)
            return (ace.address, erc20.address, self.library.ERC20_SCALING_FACTOR, 0, [])

        def asset_args() -> tuple:
            ace = registry.require(ContractRole.ACE)
            erc20 = registry.require(ContractRole.ERC20)
            return (ace.address, erc20.address, 1)

        mintable = await self._deploy(registry, ContractRole.ZK_ASSET_MINTABLE, mintable_args)
        asset = await self._deploy(registry, ContractRole.ZK_ASSET, asset_args)
        return mintable, asset

    async def configure_engine(self, registry: InstanceRegistry) -> None:
        """Set the CRS and both proof verifiers on the engine. Not guarded."""
        ace = registry.require(ContractRole.ACE)
        join_split = registry.require(ContractRole.JOIN_SPLIT)
        join_split_fluid = registry.require(ContractRole.JOIN_SPLIT_FLUID)

        await ace.transact("setCommonReferenceString", list(self.library.CRS), tx_options=self.tx_options)
        await ace.transact("setProof", self.library.JOIN_SPLIT_PROOF, join_split.address, tx_options=self.tx_options)
        await ace.transact("setProof", self.library.MINT_PROOF, join_split_fluid.address, tx_options=self.tx_options)

    # ── Internals ────────────────────────────────────────────────────────

    async def _deploy(
        self,
        registry: InstanceRegistry,
        role: ContractRole,
        constructor_args: Callable[[], tuple],
    ) -> ContractInstance | None:
        async def deploy() -> ContractInstance:
            handle = self._handles.get(role)
            if handle is None:
                raise DeploymentError(f"artifact {role.artifact} was not loaded", step=role.value)
            instance = await handle.deploy(*constructor_args(), tx_options=self.tx_options)
            registry.add(role, instance)
            logger.debug("Deployed %s", role.value, extra={"role": role.value, "address": instance.address})
            return instance

        return await self._guard(registry, f"deploy:{role.value}", deploy)

    async def _guard(
        self,
        registry: InstanceRegistry,
        step: str,
        action: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Run a best-effort step; log and record failures instead of raising."""
        try:
            return await action()
        except Exception as exc:
            if isinstance(exc, DeploymentError):
                error = exc
                error.step = step
            else:
                error = DeploymentError(f"{step} failed: {exc}", step=step, cause=exc)
            logger.error("Deployment step %s failed: %s", step, exc)
            registry.record_failure(error)
            if self.fail_fast:
                if error is exc:
                    raise
                raise error from exc
            return None

    def _log_addresses(self, registry: InstanceRegistry) -> None:
        for role in ContractRole:
            instance = registry.get(role)
            label = f"deployed {role.value} at:"
            logger.info(
                "%s %s",
                label.ljust(32),
                instance.address if instance else "(not deployed)",
                extra={"role": role.value},
            )
        logger.info(LINE_BREAK)


async def instantiate(
    client: ExecutionClient,
    tx_options: TxOptions,
    library: ProofLibrary,
    fail_fast: bool | None = None,
) -> InstanceRegistry:
    """Deploy and wire the full contract set, returning the instance registry."""
    return await DeploymentOrchestrator(client, tx_options, library, fail_fast=fail_fast).run()
