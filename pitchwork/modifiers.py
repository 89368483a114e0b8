"""ModifierStack: reversible per-voice effects undone when their block's scope exits."""

from __future__ import annotations

import logging
from collections.abc import Hashable
from typing import TYPE_CHECKING

from pitchwork.config import ACCIDENTAL_TOKENS, INVERSION_MODES
from pitchwork.errors import InvalidArgumentError, UnresolvedAccidentalError
from pitchwork.models import InversionRecord, ModifierKind, ModifierRecord
from pitchwork.pitch_codec import as_integer, split_note_name

if TYPE_CHECKING:
    from pitchwork.voice import Voice

logger = logging.getLogger(__name__)

ScopeKey = tuple[Hashable, Hashable]


class ModifierStack:
    """
    Pending undo closures of one voice, keyed by ``(voice_id, block_id)``.

    Each key holds at most one record. Registering again for a key whose
    scope has not exited replaces the pending record; the replaced record's
    undo never runs.
    """

    def __init__(self) -> None:
        self._pending: dict[ScopeKey, ModifierRecord] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, key: object) -> bool:
        return key in self._pending

    def get(self, key: ScopeKey) -> ModifierRecord | None:
        return self._pending.get(key)

    def push(self, record: ModifierRecord) -> None:
        if record.key in self._pending:
            logger.debug("Replacing pending %s modifier for %r", self._pending[record.key].kind.value, record.key)
        self._pending[record.key] = record

    def on_scope_exit(self, key: ScopeKey) -> bool:
        """
        Run the pending undo for *key* exactly once.

        Returns:
            False if nothing was pending for *key* (a no-op), True otherwise.
        """
        record = self._pending.pop(key, None)
        if record is None:
            logger.debug("No pending modifier for %r", key)
            return False
        record.undo()
        return True


# ── Accidentals ─────────────────────────────────────────────────────────────

def resolve_accidental(accidental: int | str) -> int:
    """
    Semitone value of an accidental token.

    Accepts the names ("sharp", "double flat"), the labelled names
    ("flat ♭"), symbols ("#", "♭", "𝄪") and integers from -2 to 2.

    Raises:
        UnresolvedAccidentalError: If the token is not recognised.
    """
    if isinstance(accidental, bool):
        raise UnresolvedAccidentalError(accidental)
    if isinstance(accidental, int):
        if -2 <= accidental <= 2:
            return accidental
        raise UnresolvedAccidentalError(accidental)
    if isinstance(accidental, str):
        token = " ".join(accidental.split())
        for candidate in (token, token.lower()):
            if candidate in ACCIDENTAL_TOKENS:
                return ACCIDENTAL_TOKENS[candidate]
    raise UnresolvedAccidentalError(accidental)


def register_accidental(voice: Voice, block_id: Hashable, accidental: int | str) -> ModifierRecord:
    """
    Raise or lower the voice's transposition until *block_id*'s scope exits.

    The value is negated while an inversion is active. An unrecognised
    token still registers a scoped effect, with magnitude 0.
    """
    try:
        value = resolve_accidental(accidental)
    except UnresolvedAccidentalError as exc:
        logger.warning("%s Registering a natural for block %r.", exc, block_id)
        value = 0

    voice.transposition += -value if voice.invert_list else value

    def undo() -> None:
        voice.transposition += value if voice.invert_list else -value

    record = ModifierRecord(ModifierKind.ACCIDENTAL, value, (voice.voice_id, block_id), undo)
    voice.modifiers.push(record)
    return record


# ── Transpositions ──────────────────────────────────────────────────────────

def register_semitone_transpose(voice: Voice, block_id: Hashable, amount: int) -> ModifierRecord:
    """
    Shift the voice by *amount* semitones until *block_id*'s scope exits.

    The amount is pushed onto ``voice.transposition_values`` and the undo
    pops its own value back off, so nested transpositions of different
    sizes unwind in order.
    """
    amount = as_integer(amount, "transposition")
    voice.transposition += -amount if voice.invert_list else amount
    voice.transposition_values.append(amount)

    def undo() -> None:
        value = voice.transposition_values.pop()
        voice.transposition += value if voice.invert_list else -value

    record = ModifierRecord(ModifierKind.SEMITONE_TRANSPOSE, amount, (voice.voice_id, block_id), undo)
    voice.modifiers.push(record)
    return record


def register_scalar_transpose(voice: Voice, block_id: Hashable, amount: int) -> ModifierRecord:
    """Shift the voice by *amount* scale degrees until *block_id*'s scope exits."""
    amount = as_integer(amount, "scalar transposition")
    voice.scalar_transposition += -amount if voice.invert_list else amount
    voice.scalar_transposition_values.append(amount)

    def undo() -> None:
        value = voice.scalar_transposition_values.pop()
        voice.scalar_transposition += value if voice.invert_list else -value

    record = ModifierRecord(ModifierKind.SCALAR_TRANSPOSE, amount, (voice.voice_id, block_id), undo)
    voice.modifiers.push(record)
    return record


# ── Inversion ───────────────────────────────────────────────────────────────

def register_inversion(
    voice: Voice,
    block_id: Hashable,
    pivot_name: str,
    pivot_octave: int,
    mode: str = "even",
) -> ModifierRecord:
    """Mirror the voice's pitches around a pivot until *block_id*'s scope exits."""
    if mode not in INVERSION_MODES:
        raise InvalidArgumentError(f"Unknown inversion mode {mode!r}.")
    split_note_name(pivot_name, voice.key_signature)
    inversion = InversionRecord(pivot_name, as_integer(pivot_octave, "octave"), mode)
    voice.invert_list.append(inversion)

    def undo() -> None:
        voice.invert_list.pop()

    record = ModifierRecord(ModifierKind.INVERSION, 0, (voice.voice_id, block_id), undo)
    voice.modifiers.push(record)
    return record


def on_scope_exit(voice: Voice, block_id: Hashable) -> bool:
    """Undo whatever *block_id* registered on *voice*; a no-op if nothing is pending."""
    return voice.modifiers.on_scope_exit((voice.voice_id, block_id))
