"""PitchCodec: converts between spelled pitches, pitch numbers and frequencies."""

from __future__ import annotations

import logging
import math
import numbers
import re
from functools import lru_cache

import numpy as np

from pitchwork.config import (
    A4_HZ,
    A4_PITCH_NUMBER,
    A_OFFSET_FROM_C,
    CENTS_PER_OCTAVE,
    DEFAULT_KEY_SIGNATURE,
    DEFAULT_STARTING_PITCH,
    FLAT_NAMES,
    LETTER_SEMITONES,
    LETTERS,
    MODES,
    SEMITONES_PER_OCTAVE,
    SHARP_NAMES,
    SOLFEGE_DEGREES,
)
from pitchwork.errors import InvalidArgumentError, InvalidFrequencyError
from pitchwork.models import (
    EQUAL_TEMPERAMENT,
    FrequencyPitch,
    SymbolicPitch,
    Temperament,
    accidental_text,
    accidental_value,
    split_key_signature,
)

logger = logging.getLogger(__name__)

_SOLFEGE_RE = re.compile(r"^(do|re|mi|fa|sol|so|la|ti|si)(.*)$")


# ── Argument checks ─────────────────────────────────────────────────────────

def as_integer(value: object, what: str) -> int:
    """Coerce an integral number (int or whole float) to int."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidArgumentError(f"{what} must be a number, got {value!r}.")
    if isinstance(value, numbers.Integral):
        return int(value)
    if not math.isfinite(value) or not float(value).is_integer():
        raise InvalidArgumentError(f"{what} must be a whole number, got {value!r}.")
    return int(value)


def _as_frequency(hertz: object) -> float:
    if isinstance(hertz, bool) or not isinstance(hertz, numbers.Real):
        raise InvalidFrequencyError(f"Frequency must be a number of hertz, got {hertz!r}.")
    value = float(hertz)
    if not math.isfinite(value) or value <= 0:
        raise InvalidFrequencyError(f"Frequency must be finite and positive, got {hertz!r}.")
    return value


def pitch_class(number: int) -> int:
    """Pitch class (0=C ... 11=B) of an A0-anchored pitch number."""
    return (number + A_OFFSET_FROM_C) % SEMITONES_PER_OCTAVE


# ── Key signatures and spelling ─────────────────────────────────────────────

@lru_cache(maxsize=256)
def _scale(key_signature: str) -> tuple[str, ...]:
    tonic, mode = split_key_signature(key_signature)
    steps = MODES[mode]
    tonic_letter = tonic[0]
    tonic_pc = (LETTER_SEMITONES[tonic_letter] + accidental_value(tonic[1:])) % 12

    pcs = [tonic_pc]
    for step in steps[:-1]:
        pcs.append((pcs[-1] + step) % 12)

    if len(steps) == len(LETTERS):
        names = []
        start = LETTERS.index(tonic_letter)
        for degree, pc in enumerate(pcs):
            letter = LETTERS[(start + degree) % 7]
            offset = (pc - LETTER_SEMITONES[letter] + 6) % 12 - 6
            if abs(offset) > 2:
                break
            names.append(letter + accidental_text(offset))
        else:
            return tuple(names)

    table = FLAT_NAMES if tonic[1:].startswith("b") or tonic == "F" else SHARP_NAMES
    return tuple(table[pc] for pc in pcs)


def build_scale(key_signature: str = DEFAULT_KEY_SIGNATURE) -> list[str]:
    """
    Spelled scale of a key signature, tonic first.

    Seven-note modes use one letter per degree ("F major" -> F G A Bb C D E);
    other modes spell each pitch class with the key's sharp/flat preference.
    """
    return list(_scale(key_signature))


def prefers_flats(key_signature: str) -> bool:
    """True when chromatic notes in this key are spelled with flats."""
    offsets = [accidental_value(name[1:]) for name in _scale(key_signature)]
    if any(offset < 0 for offset in offsets):
        return True
    if any(offset > 0 for offset in offsets):
        return False
    tonic, _mode = split_key_signature(key_signature)
    return tonic == "F"


def spell_pitch_class(
    pc: int,
    key_signature: str = DEFAULT_KEY_SIGNATURE,
    direction: int | None = None,
) -> str:
    """
    Spell a pitch class in a key.

    Scale members keep the scale's spelling. Other pitch classes use sharps
    when *direction* is positive, flats when negative, and the key's
    preference otherwise.
    """
    pc %= SEMITONES_PER_OCTAVE
    for name in _scale(key_signature):
        if (LETTER_SEMITONES[name[0]] + accidental_value(name[1:])) % 12 == pc:
            return name
    if direction:
        return SHARP_NAMES[pc] if direction > 0 else FLAT_NAMES[pc]
    return FLAT_NAMES[pc] if prefers_flats(key_signature) else SHARP_NAMES[pc]


def spell_number(
    number: int,
    key_signature: str = DEFAULT_KEY_SIGNATURE,
    direction: int | None = None,
) -> SymbolicPitch:
    """Spell an A0-anchored pitch number; the octave follows the spelled letter."""
    name = spell_pitch_class(pitch_class(number), key_signature, direction)
    offset = accidental_value(name[1:])
    octave = (number + A_OFFSET_FROM_C - offset - LETTER_SEMITONES[name[0]]) // 12
    return SymbolicPitch(name, octave, offset)


def split_note_name(
    name: str,
    key_signature: str = DEFAULT_KEY_SIGNATURE,
    moveable: bool = False,
) -> tuple[str, int]:
    """
    Resolve a note name to ``(letter, accidental_offset)``.

    Accepts letter names with ASCII or Unicode accidentals ("F#", "Bb",
    "Cx", "E♭") and solfege syllables. Fixed-do solfege maps do..ti onto
    C..B; moveable-do maps them onto the degrees of *key_signature*.

    Raises:
        InvalidArgumentError: If the name cannot be read.
    """
    if not isinstance(name, str) or not name.strip():
        raise InvalidArgumentError(f"Invalid note name {name!r}.")
    text = name.strip()

    solfege = _SOLFEGE_RE.match(text.lower())
    if solfege is not None:
        degree = SOLFEGE_DEGREES[solfege.group(1)]
        extra = accidental_value(text[len(solfege.group(1)):])
        if not moveable:
            return LETTERS[degree], extra
        scale = _scale(key_signature)
        if len(scale) != len(LETTERS):
            tonic, _mode = split_key_signature(key_signature)
            scale = _scale(f"{tonic} major")
        base = scale[degree]
        return base[0], accidental_value(base[1:]) + extra

    letter = text[0].upper()
    if letter not in LETTERS:
        raise InvalidArgumentError(f"Invalid note name {name!r}.")
    return letter, accidental_value(text[1:])


# ── Pitch numbers ───────────────────────────────────────────────────────────

def pitch_to_number(
    letter_name: str,
    octave: int,
    key_signature: str = DEFAULT_KEY_SIGNATURE,
    moveable: bool = False,
) -> int:
    """
    Absolute semitone count from A0 for a spelled pitch.

    Enharmonic spellings land on the same number: "B#3", "C4" and "Dbb4"
    are all 39.
    """
    letter, offset = split_note_name(letter_name, key_signature, moveable)
    octave = as_integer(octave, "octave")
    return octave * SEMITONES_PER_OCTAVE + LETTER_SEMITONES[letter] + offset - A_OFFSET_FROM_C


def number_to_pitch(
    number: float,
    temperament: Temperament = EQUAL_TEMPERAMENT,
    starting_pitch: str = DEFAULT_STARTING_PITCH,
    offset: int = 0,
    key_signature: str | None = None,
) -> SymbolicPitch:
    """
    Map a pitch number to a spelled pitch.

    Equal temperament walks twelve semitones per octave from A0 = 0.
    A custom temperament counts ``number - offset`` table steps up from
    *starting_pitch* and spells the nearest pitch to the resulting frequency.

    Args:
        number:         Pitch number; fractional values are floored.
        temperament:    Tuning used for the lookup.
        starting_pitch: Pitch at step 0 of a custom temperament table.
        offset:         The voice's pitch-number offset.
        key_signature:  Key used for spelling; sharps when omitted.

    Raises:
        InvalidArgumentError: If *number* is not a finite number.
    """
    if isinstance(number, bool) or not isinstance(number, numbers.Real):
        raise InvalidArgumentError(f"Pitch number must be a number, got {number!r}.")
    if not math.isfinite(number):
        raise InvalidArgumentError(f"Pitch number must be finite, got {number!r}.")
    n = math.floor(number)
    spelling_key = key_signature or "C major"

    if temperament.ratios is None:
        return spell_number(n, spelling_key, None if key_signature else 1)

    steps = n - as_integer(offset, "offset")
    octaves, index = divmod(steps, len(temperament.ratios))
    start = SymbolicPitch.parse(starting_pitch)
    start_hz = pitch_to_frequency(start.letter_name, start.octave)
    hertz = start_hz * temperament.ratios[index] * 2.0 ** octaves
    return frequency_to_pitch(hertz, key_signature).pitch


# ── Frequencies ─────────────────────────────────────────────────────────────

def _equal_frequency(number: int) -> float:
    return A4_HZ * 2.0 ** ((number - A4_PITCH_NUMBER) / SEMITONES_PER_OCTAVE)


def frequency_to_pitch(hertz: float, key_signature: str | None = None) -> FrequencyPitch:
    """
    Nearest equal-tempered pitch (A4 = 440 Hz) and the residual cents.

    Cents fall in (-50, 50]: a frequency exactly between two pitches is
    reported as the lower pitch plus 50 cents.

    Raises:
        InvalidFrequencyError: If *hertz* is not finite and positive.
    """
    value = _as_frequency(hertz)
    semitones = SEMITONES_PER_OCTAVE * math.log2(value / A4_HZ)
    nearest = math.ceil(semitones - 0.5)
    number = nearest + A4_PITCH_NUMBER
    cents = CENTS_PER_OCTAVE * math.log2(value / _equal_frequency(number))
    pitch = spell_number(number, key_signature or "C major", None if key_signature else 1)
    return FrequencyPitch(pitch=pitch, cents=cents)


def frequencies_to_pitch_numbers(hertz: object) -> tuple[np.ndarray, np.ndarray]:
    """
    Vectorised :func:`frequency_to_pitch` for batches of frequencies.

    Returns:
        A 2-tuple of arrays with the input's shape:
          - pitch numbers (int), A0 = 0.
          - residual cents (float) in (-50, 50].
    """
    values = np.asarray(hertz, dtype=float)
    if not np.all(np.isfinite(values)) or np.any(values <= 0):
        raise InvalidFrequencyError("Frequencies must be finite and positive.")

    semitones = SEMITONES_PER_OCTAVE * np.log2(values / A4_HZ)
    nearest = np.ceil(semitones - 0.5).astype(int)
    exact = A4_HZ * np.power(2.0, nearest / SEMITONES_PER_OCTAVE)
    cents = CENTS_PER_OCTAVE * np.log2(values / exact)
    return nearest + A4_PITCH_NUMBER, cents


def pitch_to_frequency(
    letter_name: str,
    octave: int,
    cents: float = 0.0,
    key_signature: str = DEFAULT_KEY_SIGNATURE,
    temperament: Temperament = EQUAL_TEMPERAMENT,
) -> float:
    """
    Frequency in hertz of a spelled pitch plus a cents offset.

    A twelve-step custom temperament is laid out from the key's tonic, which
    keeps its equal-tempered frequency. Tables of any other size only define
    pitch-number lookups and fall back to equal temperament here.
    """
    if isinstance(cents, bool) or not isinstance(cents, numbers.Real) or not math.isfinite(cents):
        raise InvalidArgumentError(f"Cents must be a finite number, got {cents!r}.")
    number = pitch_to_number(letter_name, octave, key_signature)
    hertz = _equal_frequency(number)

    if temperament.ratios is not None:
        if len(temperament.ratios) == SEMITONES_PER_OCTAVE:
            tonic, _mode = split_key_signature(key_signature)
            tonic_pc = (LETTER_SEMITONES[tonic[0]] + accidental_value(tonic[1:])) % 12
            degree = (pitch_class(number) - tonic_pc) % SEMITONES_PER_OCTAVE
            hertz = _equal_frequency(number - degree) * temperament.ratios[degree]
        else:
            logger.debug(
                "Temperament %r has %d steps; using equal temperament for %s%s",
                temperament.name, len(temperament.ratios), letter_name, octave,
            )

    return hertz * 2.0 ** (cents / CENTS_PER_OCTAVE)
