"""zkdeploy: deploy and drive confidential asset contracts."""

from zkdeploy.pipeline.orchestrator import instantiate
from zkdeploy.proofs.keys import KeyPair
from zkdeploy.proofs.library import Note, ProofLibrary, load_proof_library
from zkdeploy.transactions.helpers import (
    TransactionOutcome,
    confidential_transfer,
    mint_confidential_asset,
    shield_erc20_to_zk_asset,
)

__version__ = "0.1.0"

__all__ = [
    "instantiate",
    "mint_confidential_asset",
    "confidential_transfer",
    "shield_erc20_to_zk_asset",
    "TransactionOutcome",
    "KeyPair",
    "Note",
    "ProofLibrary",
    "load_proof_library",
]
