"""NoteTransposer: the transposition primitive plus octave and inversion helpers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pitchwork.config import ACCIDENTAL_TEXT, DEFAULT_KEY_SIGNATURE
from pitchwork.errors import InvalidArgumentError
from pitchwork.models import EQUAL_TEMPERAMENT, SymbolicPitch, Temperament
from pitchwork.pitch_codec import as_integer, pitch_to_number, spell_number, split_note_name
from pitchwork.step_size import scalar_steps, walk_scale

if TYPE_CHECKING:
    from pitchwork.voice import Voice

logger = logging.getLogger(__name__)


def resolve(
    letter_name: str,
    octave: int,
    offset: int,
    key_signature: str = DEFAULT_KEY_SIGNATURE,
    moveable: bool = False,
    direction: int | None = None,
    temperament: Temperament = EQUAL_TEMPERAMENT,
) -> SymbolicPitch:
    """
    Transpose a pitch and spell the result in *key_signature*.

    Args:
        letter_name:   Spelled note name ("F#", "Bb", "C").
        octave:        Octave of the letter.
        offset:        Semitones, or scale degrees when *moveable* is set.
        key_signature: Key used for scale steps and spelling.
        moveable:      Interpret *offset* as scale-degree steps.
        direction:     Spelling hint for notes outside the key: positive
                       prefers sharps, negative prefers flats.
        temperament:   Custom temperaments have no scale degrees; a moveable
                       offset is applied as semitones.

    Returns:
        The transposed pitch. A zero offset without a spelling hint returns
        the input spelling unchanged.
    """
    number = pitch_to_number(letter_name, octave, key_signature)
    offset = as_integer(offset, "offset")

    if offset == 0 and direction is None:
        letter, accidental = split_note_name(letter_name, key_signature)
        if accidental in ACCIDENTAL_TEXT:
            return SymbolicPitch(letter + ACCIDENTAL_TEXT[accidental], int(octave), accidental)

    if moveable and temperament.is_custom:
        logger.debug("Scalar offset %d applied as semitones under %r", offset, temperament.name)
        moveable = False

    if moveable:
        number = walk_scale(number, offset, key_signature)
    else:
        number += offset
    return spell_number(number, key_signature, direction)


def _as_pitch(pitch: SymbolicPitch | str) -> SymbolicPitch:
    return pitch if isinstance(pitch, SymbolicPitch) else SymbolicPitch.parse(pitch)


def calc_octave(
    current_octave: int,
    requested_octave: int | str | None,
    last_note_played: SymbolicPitch | str | None,
    new_letter_name: str,
    key_signature: str = DEFAULT_KEY_SIGNATURE,
) -> int:
    """
    Pick the octave for a new note.

    An explicit number is returned as is; "current", "next" and "previous"
    are relative to *current_octave*. ``None`` or "relative" choose the
    octave that puts *new_letter_name* nearest the last note played (at
    most a tritone away, ties going up), so melodies written without
    octaves move by the smallest jump.
    """
    if isinstance(requested_octave, str):
        text = requested_octave.strip().lower()
        if text.lstrip("-").isdigit():
            return int(text)
        if text == "current":
            return current_octave
        if text == "next":
            return current_octave + 1
        if text == "previous":
            return current_octave - 1
        if text != "relative":
            raise InvalidArgumentError(f"Invalid octave {requested_octave!r}.")
    elif requested_octave is not None:
        return as_integer(requested_octave, "octave")

    if last_note_played is None:
        return current_octave

    last = _as_pitch(last_note_played)
    target = pitch_to_number(last.letter_name, last.octave)
    candidates = [last.octave - 1, last.octave, last.octave + 1]
    return min(
        candidates,
        key=lambda octave: (
            abs(pitch_to_number(new_letter_name, octave, key_signature) - target),
            -octave,
        ),
    )


def calculate_invert(voice: Voice, letter_name: str, octave: int) -> float:
    """
    Total inversion delta for a pitch under every active inversion scope.

    Records are applied innermost (last) first, each mirroring the result of
    the one inside it. The mirrored pitch is ``original + 2 * delta``:

    - "even" mirrors around the pivot,
    - "odd" mirrors around a point half a semitone above the pivot,
    - "scalar" mirrors by scale degrees around the pivot.

    Returns:
        The summed delta (a half-integer only for "odd" inversions).
    """
    key_signature = voice.key_signature
    current = pitch_to_number(letter_name, octave, key_signature)
    delta: float = 0

    for record in reversed(voice.invert_list):
        pivot = pitch_to_number(record.pivot_name, record.pivot_octave, key_signature)
        if record.mode == "even":
            step = pivot - current
        elif record.mode == "odd":
            step = pivot - current + 0.5
        elif record.mode == "scalar":
            degrees = scalar_steps(pivot, current, key_signature)
            step = (walk_scale(pivot, -degrees, key_signature) - current) / 2
        else:
            raise InvalidArgumentError(f"Unknown inversion mode {record.mode!r}.")
        delta += step
        current += 2 * step

    return delta
