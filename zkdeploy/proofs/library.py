"""Proof library capability: notes, proofs and on-chain proof identifiers.

zkdeploy never builds proofs itself. Everything cryptographic comes from an
injected object satisfying :class:`ProofLibrary`, loaded from a
``"package.module:attribute"`` path. The attribute may be the library object
itself or a zero-argument factory returning it.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Protocol, Sequence, runtime_checkable

from zkdeploy.core.errors import ProofLibraryError

logger = logging.getLogger(__name__)


@runtime_checkable
class Note(Protocol):
    """An opaque value commitment. Only the holder sees ``value``."""

    value: int


@runtime_checkable
class MintProof(Protocol):
    def encode_abi(self) -> str | bytes:
        ...


@runtime_checkable
class JoinSplitProof(Protocol):
    hash: str

    def encode_abi(self, contract_address: str) -> str | bytes:
        ...

    def construct_signatures(self, contract_address: str, input_note_owners: Sequence[Any]) -> str | bytes:
        ...


@runtime_checkable
class ProofLibrary(Protocol):
    """Note construction, proof construction and the constants contracts expect."""

    JOIN_SPLIT_PROOF: int
    MINT_PROOF: int
    ERC20_SCALING_FACTOR: int
    CRS: Sequence[str]

    async def create_note(self, public_key: str, value: int) -> Note:
        ...

    async def create_zero_value_note(self) -> Note:
        ...

    def mint_proof(
        self,
        previous_counter: Note,
        new_counter: Note,
        minted_notes: Sequence[Note],
        sender: str,
    ) -> MintProof:
        ...

    def join_split_proof(
        self,
        input_notes: Sequence[Note],
        output_notes: Sequence[Note],
        sender: str,
        public_value: int,
        public_owner: str,
    ) -> JoinSplitProof:
        ...


def load_proof_library(path: str) -> ProofLibrary:
    """Import a proof library from ``"package.module:attribute"``.

    Raises:
        ProofLibraryError: if the path is malformed, the import fails or the
            resulting object does not satisfy :class:`ProofLibrary`.
    """
    module_name, sep, attribute = path.partition(":")
    if not sep or not module_name or not attribute:
        raise ProofLibraryError(f"Proof library path must look like 'module:attribute', got {path!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ProofLibraryError(f"Cannot import proof library module {module_name!r}", cause=exc) from exc

    try:
        target = getattr(module, attribute)
    except AttributeError as exc:
        raise ProofLibraryError(f"{module_name!r} has no attribute {attribute!r}", cause=exc) from exc

    library = target
    if isinstance(target, type) or (callable(target) and not isinstance(target, ProofLibrary)):
        library = target()
    if not isinstance(library, ProofLibrary):
        raise ProofLibraryError(f"{path!r} does not provide a proof library")

    logger.info("Loaded proof library %s", path)
    return library
