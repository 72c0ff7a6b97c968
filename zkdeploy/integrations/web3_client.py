"""Execution client: deploy artifacts and call contract methods over web3.

The orchestration code only sees the three protocols below, so it can be
driven by :class:`Web3ExecutionClient` against a live node or by an
in-memory fake in tests.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

from eth_account import Account
from eth_utils import event_abi_to_log_topic, to_checksum_address
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import LogTopicError, MismatchedABI
from web3.middleware import SignAndSendRawMiddlewareBuilder

from zkdeploy.core.errors import ArtifactError, TransactionError
from zkdeploy.core.types import LogEntry, Receipt, TxOptions
from zkdeploy.ingestion.artifacts import ArtifactSource, ContractArtifact

logger = logging.getLogger(__name__)


# ── Protocols ────────────────────────────────────────────────────────────────


@runtime_checkable
class ContractInstance(Protocol):
    """A deployed contract bound to an address."""

    address: str
    artifact: ContractArtifact

    async def transact(self, method: str, *args: Any, tx_options: TxOptions) -> Receipt:
        ...


@runtime_checkable
class ContractHandle(Protocol):
    """An artifact that can be deployed or attached to an address."""

    artifact: ContractArtifact

    async def deploy(self, *args: Any, tx_options: TxOptions) -> ContractInstance:
        ...

    def at(self, address: str) -> ContractInstance:
        ...


@runtime_checkable
class ExecutionClient(Protocol):
    """Connected node client that hands out contract handles by artifact name."""

    async def read_contract(self, name: str) -> ContractHandle:
        ...


# ── web3 implementation ──────────────────────────────────────────────────────


def _event_topics(artifact: ContractArtifact) -> dict[bytes, str]:
    """Map topic0 -> event name for the non-anonymous events in an ABI."""
    return {
        bytes(event_abi_to_log_topic(event)): event["name"]
        for event in artifact.events()
        if not event.get("anonymous", False)
    }


class Web3ContractInstance:
    """A deployed contract driven through ``AsyncWeb3``."""

    def __init__(self, w3: AsyncWeb3, artifact: ContractArtifact, address: str) -> None:
        self.w3 = w3
        self.artifact = artifact
        self.address = to_checksum_address(address)
        self._contract = w3.eth.contract(address=self.address, abi=artifact.abi)
        self._topics = _event_topics(artifact)

    async def transact(self, method: str, *args: Any, tx_options: TxOptions) -> Receipt:
        """Send a state-changing call and wait for it to be mined."""
        function = getattr(self._contract.functions, method)(*args)
        tx_hash = await function.transact(tx_options.to_transaction())
        logger.debug(
            "Sent %s.%s",
            self.artifact.contract_name,
            method,
            extra={"tx_hash": AsyncWeb3.to_hex(tx_hash), "method": method},
        )
        raw = await self.w3.eth.wait_for_transaction_receipt(tx_hash)
        receipt = self.decode_receipt(raw)
        if not receipt.succeeded:
            raise TransactionError(
                f"{self.artifact.contract_name}.{method} reverted in {receipt.tx_hash}",
                method=method,
            )
        return receipt

    def decode_receipt(self, raw: Any) -> Receipt:
        """Decode a raw web3 receipt against this contract's ABI."""
        logs = [self._decode_log(log) for log in raw.get("logs", [])]
        return Receipt(
            tx_hash=AsyncWeb3.to_hex(raw["transactionHash"]),
            status=raw.get("status", 1),
            logs=logs,
            contract_address=raw.get("contractAddress"),
            gas_used=raw.get("gasUsed", 0),
        )

    def _decode_log(self, log: Any) -> LogEntry:
        topics = log.get("topics") or []
        name = self._topics.get(bytes(topics[0])) if topics else None
        if name is None:
            return LogEntry(event=None, address=log.get("address", ""))
        try:
            data = getattr(self._contract.events, name)().process_log(log)
        except (MismatchedABI, LogTopicError):
            logger.debug("Could not decode %s log at %s", name, log.get("address", ""))
            return LogEntry(event=None, address=log.get("address", ""))
        return LogEntry(event=data["event"], args=dict(data["args"]), address=data["address"])


class Web3ContractHandle:
    """An artifact bound to an ``AsyncWeb3`` connection."""

    def __init__(self, w3: AsyncWeb3, artifact: ContractArtifact) -> None:
        self.w3 = w3
        self.artifact = artifact

    async def deploy(self, *args: Any, tx_options: TxOptions) -> Web3ContractInstance:
        """Deploy a new instance with the given constructor arguments."""
        if not self.artifact.deployable:
            raise ArtifactError(f"Artifact {self.artifact.name} has no deployment bytecode")
        factory = self.w3.eth.contract(abi=self.artifact.abi, bytecode=self.artifact.bytecode)
        tx_hash = await factory.constructor(*args).transact(tx_options.to_transaction())
        raw = await self.w3.eth.wait_for_transaction_receipt(tx_hash)
        if raw.get("status", 1) != 1 or not raw.get("contractAddress"):
            raise TransactionError(
                f"Deployment of {self.artifact.contract_name} failed in {AsyncWeb3.to_hex(tx_hash)}",
                method="constructor",
            )
        return Web3ContractInstance(self.w3, self.artifact, raw["contractAddress"])

    def at(self, address: str) -> Web3ContractInstance:
        """Attach to an already deployed instance."""
        return Web3ContractInstance(self.w3, self.artifact, address)


class Web3ExecutionClient:
    """Execution client backed by ``web3.AsyncWeb3``."""

    def __init__(self, w3: AsyncWeb3, source: ArtifactSource) -> None:
        self.w3 = w3
        self.source = source

    @classmethod
    def from_rpc(
        cls,
        rpc_url: str,
        source: ArtifactSource,
        private_key: str = "",
    ) -> Web3ExecutionClient:
        """Connect over HTTP. With a private key, transactions are signed locally."""
        w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
        if private_key:
            account = Account.from_key(private_key)
            w3.middleware_onion.inject(SignAndSendRawMiddlewareBuilder.build(account), layer=0)
            w3.eth.default_account = account.address
        return cls(w3, source)

    async def read_contract(self, name: str) -> Web3ContractHandle:
        artifact = await self.source.read(name)
        return Web3ContractHandle(self.w3, artifact)

    async def default_sender(self) -> str:
        """The locally signing account, or the node's first account."""
        if self.w3.eth.default_account:
            return str(self.w3.eth.default_account)
        accounts = await self.w3.eth.accounts
        if not accounts:
            raise ValueError("Node exposes no accounts; configure a sender or private key")
        return accounts[0]

    async def fetch_receipt(self, tx_hash: str, artifact: ContractArtifact) -> Receipt:
        """Fetch a mined receipt and decode it against ``artifact``."""
        raw = await self.w3.eth.get_transaction_receipt(tx_hash)
        instance = Web3ContractInstance(self.w3, artifact, raw["to"])
        return instance.decode_receipt(raw)

    async def close(self) -> None:
        """Release the artifact source's connections."""
        await self.source.close()
