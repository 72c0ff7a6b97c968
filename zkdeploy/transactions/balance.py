"""Value balance between confidential notes and the public token side."""

from __future__ import annotations

from typing import Iterable

from zkdeploy.proofs.library import Note


def total_value(notes: Iterable[Note]) -> int:
    return sum(int(note.value) for note in notes)


def compute_public_delta(input_notes: Iterable[Note], output_notes: Iterable[Note]) -> int:
    """Σ inputs − Σ outputs.

    Positive: value leaves the note system towards the public token.
    Negative: public tokens are converted into notes.
    """
    return total_value(input_notes) - total_value(output_notes)


def next_mint_counter(previous_counter: Note, minted_notes: Iterable[Note]) -> int:
    """New total-minted counter value after minting ``minted_notes``."""
    return int(previous_counter.value) + total_value(minted_notes)
