"""Shared enums and types used across zkdeploy."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field


# ── Enums ────────────────────────────────────────────────────────────────────


class ContractRole(str, enum.Enum):
    """Logical role of a deployed contract, in deployment order."""

    ACE = "ace"
    JOIN_SPLIT = "join_split"
    JOIN_SPLIT_FLUID = "join_split_fluid"
    ERC20 = "erc20"
    BASE_FACTORY = "base_factory"
    ADJUSTABLE_FACTORY = "adjustable_factory"
    ZK_ASSET_MINTABLE = "zk_asset_mintable"
    ZK_ASSET = "zk_asset"

    @property
    def artifact(self) -> str:
        """Artifact file the role is deployed from."""
        return ARTIFACT_NAMES[self]


ARTIFACT_NAMES: dict[ContractRole, str] = {
    ContractRole.ACE: "ACE.json",
    ContractRole.JOIN_SPLIT: "JoinSplit.json",
    ContractRole.JOIN_SPLIT_FLUID: "JoinSplitFluid.json",
    ContractRole.ERC20: "ERC20Mintable.json",
    ContractRole.BASE_FACTORY: "FactoryBase201907.json",
    ContractRole.ADJUSTABLE_FACTORY: "FactoryAdjustable201907.json",
    ContractRole.ZK_ASSET_MINTABLE: "ZkAssetMintable.json",
    ContractRole.ZK_ASSET: "ZkAsset.json",
}


class NoteEventKind(str, enum.Enum):
    """Receipt events that describe note creation and destruction."""

    CREATE_NOTE = "CreateNote"
    DESTROY_NOTE = "DestroyNote"


def factory_id(n: int, epoch: int = 1, category: int = 1) -> int:
    """Note registry factory identifier: epoch * 256**2 + category * 256 + n."""
    return epoch * 256 ** 2 + category * 256 ** 1 + n * 256 ** 0


# Factory id -> role registered under it on the engine.
FACTORY_REGISTRATIONS: tuple[tuple[int, ContractRole], ...] = (
    (factory_id(1), ContractRole.BASE_FACTORY),
    (factory_id(2), ContractRole.ADJUSTABLE_FACTORY),
    (factory_id(3), ContractRole.ADJUSTABLE_FACTORY),
)


# ── Shared Schemas ───────────────────────────────────────────────────────────


class TxOptions(BaseModel):
    """Transaction options shared by every deploy and method call."""

    sender: str
    gas: int | None = Field(default=None, ge=21_000)
    gas_price: int | None = Field(default=None, ge=0)

    def to_transaction(self) -> dict[str, Any]:
        """Render as a web3 transaction dict."""
        tx: dict[str, Any] = {"from": self.sender}
        if self.gas is not None:
            tx["gas"] = self.gas
        if self.gas_price is not None:
            tx["gasPrice"] = self.gas_price
        return tx


class NoteEvent(BaseModel):
    """Normalized projection of a CreateNote / DestroyNote log."""

    event: NoteEventKind
    owner: str
    hash: str

    def to_display(self) -> dict[str, str]:
        return {"event": self.event.value, "owner": self.owner, "hash": self.hash}


@dataclass
class LogEntry:
    """A decoded receipt log. ``event`` is None when the ABI did not match."""

    event: str | None
    args: dict[str, Any] = field(default_factory=dict)
    address: str = ""


@dataclass
class Receipt:
    """Mined transaction receipt."""

    tx_hash: str
    status: int = 1
    logs: list[LogEntry] = field(default_factory=list)
    contract_address: str | None = None
    gas_used: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status == 1
