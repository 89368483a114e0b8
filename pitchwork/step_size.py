"""StepSizeResolver: semitone distance to the neighbouring scale degree in a key."""

import logging

from pitchwork.config import DEFAULT_KEY_SIGNATURE, LETTER_SEMITONES, MAX_SCALAR_STEPS
from pitchwork.models import accidental_value
from pitchwork.pitch_codec import build_scale, pitch_class, split_note_name

logger = logging.getLogger(__name__)


def _scale_pitch_classes(key_signature: str) -> list[int]:
    return [
        (LETTER_SEMITONES[name[0]] + accidental_value(name[1:])) % 12
        for name in build_scale(key_signature)
    ]


def _pc_of(letter_name: str, key_signature: str) -> int:
    letter, offset = split_note_name(letter_name, key_signature)
    return (LETTER_SEMITONES[letter] + offset) % 12


def step_up_from(pc: int, key_signature: str = DEFAULT_KEY_SIGNATURE) -> int:
    """Semitones from pitch class *pc* up to the next scale degree (always > 0)."""
    return min(
        (degree - pc) % 12 or 12
        for degree in _scale_pitch_classes(key_signature)
    )


def step_down_from(pc: int, key_signature: str = DEFAULT_KEY_SIGNATURE) -> int:
    """Signed semitones from pitch class *pc* down to the previous scale degree (always < 0)."""
    return -min(
        (pc - degree) % 12 or 12
        for degree in _scale_pitch_classes(key_signature)
    )


def step_size_up(key_signature: str, letter_name: str) -> int:
    """
    Semitones up to the next degree of *key_signature*'s scale.

    A pitch outside the scale measures to the nearest scale degree above it.
    """
    return step_up_from(_pc_of(letter_name, key_signature), key_signature)


def step_size_down(key_signature: str, letter_name: str) -> int:
    """
    Signed semitones down to the previous degree of *key_signature*'s scale.

    A pitch outside the scale measures to the nearest scale degree below it.
    """
    return step_down_from(_pc_of(letter_name, key_signature), key_signature)


def walk_scale(number: int, steps: int, key_signature: str = DEFAULT_KEY_SIGNATURE) -> int:
    """Move a pitch number *steps* scale degrees up (positive) or down (negative)."""
    for _ in range(abs(steps)):
        pc = pitch_class(number)
        number += step_up_from(pc, key_signature) if steps > 0 else step_down_from(pc, key_signature)
    return number


def scalar_steps(
    from_number: int,
    to_number: int,
    key_signature: str = DEFAULT_KEY_SIGNATURE,
) -> int:
    """
    Count scale degrees walked from one pitch number to another.

    The walk stops on the first degree at or beyond the target, so a target
    outside the scale counts the degree just past it.
    """
    delta = to_number - from_number
    number = from_number
    count = 0

    while delta > 0 and count < MAX_SCALAR_STEPS:
        step = step_up_from(pitch_class(number), key_signature)
        delta -= step
        number += step
        count += 1

    while delta < 0 and -count < MAX_SCALAR_STEPS:
        step = step_down_from(pitch_class(number), key_signature)
        delta -= step
        number += step
        count -= 1

    if abs(count) >= MAX_SCALAR_STEPS:
        logger.warning("Scalar walk from %d to %d stopped after %d steps", from_number, to_number, count)
    return count
