"""Confidential transaction helpers: mint, transfer and shield.

Each helper balances note values, builds a proof through the injected proof
library, submits it and reports the note events of the receipt. A failed
submission never exits the process: it comes back as a failed
:class:`TransactionOutcome` carrying a fatal :class:`TransactionError`, and
the caller decides whether to abort.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from zkdeploy.core.errors import TransactionError
from zkdeploy.core.types import NoteEvent, Receipt, TxOptions
from zkdeploy.integrations.web3_client import ContractInstance
from zkdeploy.proofs.keys import KeyPair
from zkdeploy.proofs.library import JoinSplitProof, Note, ProofLibrary
from zkdeploy.reports.events import LINE_BREAK, extract_note_events, report_note_events
from zkdeploy.transactions.balance import compute_public_delta, next_mint_counter

logger = logging.getLogger(__name__)


@dataclass
class TransactionOutcome:
    """Result of a confidential transaction helper."""

    method: str
    receipt: Receipt | None = None
    events: list[NoteEvent] = field(default_factory=list)
    error: TransactionError | None = None
    public_value: int = 0
    proof_hash: str | None = None
    new_counter: Note | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def raise_for_failure(self) -> TransactionOutcome:
        """Raise the carried TransactionError, if any."""
        if self.error is not None:
            raise self.error
        return self


async def _submit(
    instance: ContractInstance,
    method: str,
    args: Sequence[Any],
    tx_options: TxOptions,
    display: bool,
    title: str,
    proof_type: int,
    banner: bool = True,
    **details: Any,
) -> TransactionOutcome:
    extra = {"method": method, "proof_type": proof_type, "address": instance.address}
    logger.debug("Submitting %s", title, extra=extra)
    try:
        receipt = await instance.transact(method, *args, tx_options=tx_options)
    except Exception as exc:
        logger.error("%s failed: %s", title, exc, extra=extra)
        error = TransactionError(f"{title} failed: {exc}", method=method, cause=exc)
        return TransactionOutcome(method=method, error=error, **details)

    if display and banner:
        events = report_note_events(receipt.logs, title=title)
        logger.info(LINE_BREAK)
    elif display:
        # bare note events, no header or separator
        events = report_note_events(receipt.logs)
    else:
        events = extract_note_events(receipt.logs)
    return TransactionOutcome(method=method, receipt=receipt, events=events, **details)


def _join_split(
    library: ProofLibrary,
    input_notes: Sequence[Note],
    output_notes: Sequence[Note],
    asset: ContractInstance,
    input_note_owners: Sequence[KeyPair],
    public_owner: str,
    tx_options: TxOptions,
) -> tuple[JoinSplitProof, int, Any, Any]:
    public_value = compute_public_delta(input_notes, output_notes)
    proof = library.join_split_proof(
        list(input_notes), list(output_notes), tx_options.sender, public_value, public_owner
    )
    proof_data = proof.encode_abi(asset.address)
    signatures = proof.construct_signatures(asset.address, list(input_note_owners))
    return proof, public_value, proof_data, signatures


async def mint_confidential_asset(
    notes: Sequence[Note],
    zk_asset_mintable: ContractInstance,
    account: KeyPair,
    tx_options: TxOptions,
    library: ProofLibrary,
    previous_counter: Note | None = None,
) -> TransactionOutcome:
    """Mint ``notes`` on a mintable zk asset.

    The mint proof moves the total-minted counter from ``previous_counter``
    (the zero-value note on the first mint) to a new counter note owned by
    ``account`` whose value adds the minted notes' total.
    """
    if previous_counter is None:
        previous_counter = await library.create_zero_value_note()
    new_counter = await library.create_note(account.public_key, next_mint_counter(previous_counter, notes))

    proof = library.mint_proof(previous_counter, new_counter, list(notes), tx_options.sender)
    proof_data = proof.encode_abi()

    return await _submit(
        zk_asset_mintable,
        "confidentialMint",
        (library.MINT_PROOF, proof_data),
        tx_options,
        display=True,
        title="confidentialMint",
        proof_type=library.MINT_PROOF,
        new_counter=new_counter,
    )


async def confidential_transfer(
    input_notes: Sequence[Note],
    input_note_owners: Sequence[KeyPair],
    output_notes: Sequence[Note],
    zk_asset: ContractInstance,
    public_owner: str,
    tx_options: TxOptions,
    library: ProofLibrary,
    display: bool = True,
) -> TransactionOutcome:
    """Destroy ``input_notes`` and create ``output_notes`` in one join-split.

    Any imbalance between inputs and outputs is settled with ``public_owner``
    on the linked ERC20 token.
    """
    proof, public_value, proof_data, signatures = _join_split(
        library, input_notes, output_notes, zk_asset, input_note_owners, public_owner, tx_options
    )
    return await _submit(
        zk_asset,
        "confidentialTransfer",
        (library.JOIN_SPLIT_PROOF, proof_data, signatures),
        tx_options,
        display=display,
        title="confidentialTransfer",
        proof_type=library.JOIN_SPLIT_PROOF,
        public_value=public_value,
        proof_hash=proof.hash,
    )


async def shield_erc20_to_zk_asset(
    input_notes: Sequence[Note],
    input_note_owners: Sequence[KeyPair],
    output_notes: Sequence[Note],
    zk_asset: ContractInstance,
    ace: ContractInstance,
    public_owner: str,
    tx_options: TxOptions,
    library: ProofLibrary,
    display: bool = True,
) -> TransactionOutcome:
    """Convert public ERC20 tokens into notes.

    ACE is first approved to pull ``-public_value`` tokens for this proof's
    hash; the transfer is only submitted once that approval is mined.
    With ``display`` the deposit's note events are logged without a header.
    """
    proof, public_value, proof_data, signatures = _join_split(
        library, input_notes, output_notes, zk_asset, input_note_owners, public_owner, tx_options
    )

    try:
        await ace.transact(
            "publicApprove", zk_asset.address, proof.hash, -public_value, tx_options=tx_options
        )
    except Exception as exc:
        logger.error("publicApprove failed: %s", exc, extra={"method": "publicApprove"})
        return TransactionOutcome(
            method="publicApprove",
            error=TransactionError(f"publicApprove failed: {exc}", method="publicApprove", cause=exc),
            public_value=public_value,
            proof_hash=proof.hash,
        )

    return await _submit(
        zk_asset,
        "confidentialTransfer",
        (library.JOIN_SPLIT_PROOF, proof_data, signatures),
        tx_options,
        display=display,
        title="deposit",
        proof_type=library.JOIN_SPLIT_PROOF,
        banner=False,
        public_value=public_value,
        proof_hash=proof.hash,
    )
