"""IntervalResolver: named or scalar intervals to semitone offsets."""

import numbers
import re

from pitchwork.config import CHROMATIC_INTERVALS, DIATONIC_INTERVALS, LETTER_SEMITONES
from pitchwork.errors import InvalidArgumentError
from pitchwork.models import SymbolicPitch
from pitchwork.pitch_codec import split_note_name
from pitchwork.step_size import step_down_from, step_up_from

_SEPARATORS_RE = re.compile(r"[\s_\-]+")


def _normalise(name: str) -> str:
    return _SEPARATORS_RE.sub("", name).lower()


def scalar_interval(degrees: int, key_signature: str, reference_pitch: str | SymbolicPitch) -> int:
    """
    Semitones spanned by a diatonic interval of *degrees* scale degrees.

    ``5`` is a fifth above the reference, ``-3`` a third below; ``1``, ``-1``
    and ``0`` are all the unison. The size depends on where the reference
    sits in the key ("third" above C in C major is 4, above D it is 3).
    """
    name = reference_pitch.letter_name if isinstance(reference_pitch, SymbolicPitch) else reference_pitch
    letter, offset = split_note_name(name, key_signature)
    pc = (LETTER_SEMITONES[letter] + offset) % 12

    steps = degrees - 1 if degrees > 0 else degrees + 1 if degrees < 0 else 0
    total = 0
    for _ in range(abs(steps)):
        step = step_up_from(pc, key_signature) if steps > 0 else step_down_from(pc, key_signature)
        total += step
        pc = (pc + step) % 12
    return total


def interval(name: int | str, key_signature: str, reference_pitch: str | SymbolicPitch) -> int:
    """
    Resolve an interval to a semitone offset from *reference_pitch*.

    Args:
        name:            A scale-degree count (int), a diatonic name such as
                         "third", or a chromatic name such as "majorThird" /
                         "minor sixth" (case and separators are ignored).
        key_signature:   Key whose scale measures diatonic intervals.
        reference_pitch: Pitch the interval is measured from.

    Returns:
        Signed semitone offset. Chromatic intervals ignore the key.

    Raises:
        InvalidArgumentError: If the interval name is unknown.
    """
    if isinstance(name, bool):
        raise InvalidArgumentError(f"Invalid interval {name!r}.")
    if isinstance(name, numbers.Integral):
        return scalar_interval(int(name), key_signature, reference_pitch)
    if not isinstance(name, str):
        raise InvalidArgumentError(f"Invalid interval {name!r}.")

    key = _normalise(name)
    if key in CHROMATIC_INTERVALS:
        return CHROMATIC_INTERVALS[key]
    if key in DIATONIC_INTERVALS:
        return scalar_interval(DIATONIC_INTERVALS[key], key_signature, reference_pitch)
    raise InvalidArgumentError(f"Unknown interval {name!r}.")
