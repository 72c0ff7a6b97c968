"""Shared fixtures for the zkdeploy test suite.

The fakes below stand in for the node and the proof library. They record
every deploy and method call so tests can assert on ordering and arguments.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Sequence

import pytest

from zkdeploy.core.config import get_settings
from zkdeploy.core.types import ARTIFACT_NAMES, LogEntry, Receipt, TxOptions
from zkdeploy.ingestion.artifacts import ContractArtifact
from zkdeploy.proofs.keys import KeyPair


# ── Proof library fakes ──────────────────────────────────────────────────────


_note_ids = itertools.count(1)


@dataclass
class FakeNote:
    value: int
    owner: str = ""
    note_hash: str = field(default_factory=lambda: f"0x{next(_note_ids):064x}")


@dataclass
class FakeMintProof:
    previous_counter: FakeNote
    new_counter: FakeNote
    minted_notes: list[FakeNote]
    sender: str

    def encode_abi(self) -> str:
        return "0x" + "ab" * 32


@dataclass
class FakeJoinSplitProof:
    input_notes: list[FakeNote]
    output_notes: list[FakeNote]
    sender: str
    public_value: int
    public_owner: str
    hash: str = "0x" + "cd" * 32
    encoded_for: list[str] = field(default_factory=list)
    signed_for: list[tuple[str, list[Any]]] = field(default_factory=list)

    def encode_abi(self, contract_address: str) -> str:
        self.encoded_for.append(contract_address)
        return "0x" + "ef" * 32

    def construct_signatures(self, contract_address: str, input_note_owners: Sequence[Any]) -> str:
        self.signed_for.append((contract_address, list(input_note_owners)))
        return "0x" + "11" * 65 * len(input_note_owners)


class FakeProofLibrary:
    JOIN_SPLIT_PROOF = 65793
    MINT_PROOF = 66049
    ERC20_SCALING_FACTOR = 1
    CRS = ("0x01", "0x02", "0x03", "0x04")

    def __init__(self) -> None:
        self.mint_proofs: list[FakeMintProof] = []
        self.join_split_proofs: list[FakeJoinSplitProof] = []

    async def create_note(self, public_key: str, value: int) -> FakeNote:
        return FakeNote(value=value, owner=public_key)

    async def create_zero_value_note(self) -> FakeNote:
        return FakeNote(value=0, owner="zero")

    def mint_proof(self, previous_counter, new_counter, minted_notes, sender) -> FakeMintProof:
        proof = FakeMintProof(previous_counter, new_counter, list(minted_notes), sender)
        self.mint_proofs.append(proof)
        return proof

    def join_split_proof(self, input_notes, output_notes, sender, public_value, public_owner) -> FakeJoinSplitProof:
        proof = FakeJoinSplitProof(list(input_notes), list(output_notes), sender, public_value, public_owner)
        self.join_split_proofs.append(proof)
        return proof


# ── Execution client fakes ───────────────────────────────────────────────────


@dataclass
class Call:
    contract: str
    address: str
    method: str
    args: tuple


class FakeInstance:
    def __init__(self, client: FakeClient, artifact: ContractArtifact, address: str, constructor_args: tuple = ()) -> None:
        self.client = client
        self.artifact = artifact
        self.address = address
        self.constructor_args = constructor_args

    async def transact(self, method: str, *args: Any, tx_options: TxOptions) -> Receipt:
        self.client.calls.append(Call(self.artifact.contract_name, self.address, method, args))
        if (self.artifact.contract_name, method) in self.client.failing_methods:
            raise RuntimeError(f"{method} reverted")
        return Receipt(
            tx_hash=f"0x{len(self.client.calls):064x}",
            logs=list(self.client.logs.get(method, [])),
        )


class FakeHandle:
    def __init__(self, client: FakeClient, artifact: ContractArtifact) -> None:
        self.client = client
        self.artifact = artifact

    async def deploy(self, *args: Any, tx_options: TxOptions) -> FakeInstance:
        self.client.calls.append(Call(self.artifact.contract_name, "", "constructor", args))
        if self.artifact.name in self.client.failing_deploys:
            raise RuntimeError(f"out of gas deploying {self.artifact.name}")
        return self.at(f"0x{next(self.client._addresses):040x}", constructor_args=args)

    def at(self, address: str, constructor_args: tuple = ()) -> FakeInstance:
        return FakeInstance(self.client, self.artifact, address, constructor_args)


class FakeClient:
    def __init__(self) -> None:
        self.calls: list[Call] = []
        self.failing_deploys: set[str] = set()
        self.failing_artifacts: set[str] = set()
        self.failing_methods: set[tuple[str, str]] = set()
        self.logs: dict[str, list[LogEntry]] = {}
        self._addresses = itertools.count(0x1000)
        self.closed = False

    async def read_contract(self, name: str) -> FakeHandle:
        if name in self.failing_artifacts:
            raise FileNotFoundError(name)
        return FakeHandle(self, ContractArtifact(name=name, contract_name=name.removesuffix(".json")))

    def calls_to(self, method: str) -> list[Call]:
        return [c for c in self.calls if c.method == method]

    async def close(self) -> None:
        self.closed = True


# ── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def proof_library() -> FakeProofLibrary:
    return FakeProofLibrary()


@pytest.fixture
def tx_options() -> TxOptions:
    return TxOptions(sender="0x" + "aa" * 20, gas=6_000_000, gas_price=0)


@pytest.fixture
def key_pair() -> KeyPair:
    return KeyPair.from_private_key("0x" + "01".rjust(64, "0"))


@pytest.fixture
def artifact_names() -> list[str]:
    return list(ARTIFACT_NAMES.values())
