"""Data models exchanged between the pitch resolvers, modifier stack and note accumulator."""

from __future__ import annotations

import functools
import re
from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from enum import Enum

from pitchwork.config import (
    A_OFFSET_FROM_C,
    ACCIDENTAL_CHARS,
    ACCIDENTAL_TEXT,
    DEFAULT_KEY_SIGNATURE,
    EQUAL_TEMPERAMENT_NAME,
    LETTER_SEMITONES,
    LETTERS,
    MODES,
    SEMITONES_PER_OCTAVE,
    TEMPERAMENT_RATIOS,
)
from pitchwork.errors import InvalidArgumentError

_PITCH_RE = re.compile(r"^\s*([A-Ga-g])([#b♯♭x𝄪𝄫♮]*)\s*(-?\d+)\s*$")


def accidental_value(text: str) -> int:
    """Sum the semitone values of an accidental suffix such as ``"#"`` or ``"bb"``."""
    total = 0
    for char in text:
        if char not in ACCIDENTAL_CHARS:
            raise InvalidArgumentError(f"Unknown accidental {text!r}.")
        total += ACCIDENTAL_CHARS[char]
    return total


def accidental_text(offset: int) -> str:
    """ASCII accidental suffix for a semitone offset between -2 and +2."""
    if offset not in ACCIDENTAL_TEXT:
        raise InvalidArgumentError(f"Accidental offset {offset} cannot be spelled.")
    return ACCIDENTAL_TEXT[offset]


def split_key_signature(key_signature: str) -> tuple[str, str]:
    """
    Split ``"<tonic> <mode>"`` into its normalised parts.

    A bare tonic (``"G"``) is read as a major key.

    Raises:
        InvalidArgumentError: If the tonic or mode is not recognised.
    """
    if not isinstance(key_signature, str) or not key_signature.strip():
        raise InvalidArgumentError(f"Invalid key signature {key_signature!r}.")

    tonic_text, _, mode_text = key_signature.strip().partition(" ")
    mode = " ".join(mode_text.lower().split()) or "major"
    if mode not in MODES:
        raise InvalidArgumentError(f"Unknown mode {mode!r} in key signature {key_signature!r}.")

    letter = tonic_text[:1].upper()
    if letter not in LETTERS:
        raise InvalidArgumentError(f"Unknown tonic {tonic_text!r} in key signature {key_signature!r}.")
    tonic = letter + accidental_text(accidental_value(tonic_text[1:]))
    return tonic, mode


# ── Temperament ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Temperament:
    """
    A tuning system.

    Attributes:
        name:   Display name, e.g. "equal" or "just intonation".
        ratios: Frequency ratios for each step of one octave above the
                starting pitch, or None for twelve-tone equal temperament.
    """

    name: str = EQUAL_TEMPERAMENT_NAME
    ratios: tuple[float, ...] | None = None

    @property
    def is_custom(self) -> bool:
        return self.ratios is not None


EQUAL_TEMPERAMENT = Temperament()


def get_temperament(name: str) -> Temperament:
    """Return the built-in temperament called *name*."""
    normalized = name.strip().lower()
    if normalized == EQUAL_TEMPERAMENT_NAME:
        return EQUAL_TEMPERAMENT
    if normalized not in TEMPERAMENT_RATIOS:
        supported = ", ".join([EQUAL_TEMPERAMENT_NAME, *sorted(TEMPERAMENT_RATIOS)])
        raise InvalidArgumentError(f"Unknown temperament {name!r}. Use one of: {supported}.")
    return Temperament(name=normalized, ratios=TEMPERAMENT_RATIOS[normalized])


@dataclass(frozen=True)
class KeyContext:
    """Key signature, moveable-do flag and temperament a voice resolves pitches in."""

    key_signature: str = DEFAULT_KEY_SIGNATURE
    moveable: bool = False
    temperament: Temperament = EQUAL_TEMPERAMENT

    def __post_init__(self) -> None:
        tonic, mode = split_key_signature(self.key_signature)
        object.__setattr__(self, "key_signature", f"{tonic} {mode}")


# ── Pitches ─────────────────────────────────────────────────────────────────

@functools.total_ordering
@dataclass(frozen=True, eq=False)
class SymbolicPitch:
    """
    A spelled pitch.

    Comparison and hashing go by pitch number, so enharmonic spellings
    ("A#4", "Bb4") are equal. Compare ``str()`` to check a spelling.

    Attributes:
        letter_name:       Letter plus ASCII accidental, e.g. "C", "F#", "Bb".
        octave:            Scientific octave of the letter (C4 = middle C).
        accidental_offset: Semitones the accidental adds to the natural letter.
    """

    letter_name: str
    octave: int
    accidental_offset: int = 0

    @classmethod
    def parse(cls, text: str) -> SymbolicPitch:
        """Parse the canonical ``letter_name + octave`` form, e.g. ``"F#4"``."""
        match = _PITCH_RE.match(text) if isinstance(text, str) else None
        if match is None:
            raise InvalidArgumentError(f"Cannot parse pitch {text!r}.")
        letter, accidental, octave = match.groups()
        offset = accidental_value(accidental)
        return cls(letter.upper() + accidental_text(offset), int(octave), offset)

    @property
    def number(self) -> int:
        """Pitch number, A0 = 0."""
        return (
            self.octave * SEMITONES_PER_OCTAVE
            + LETTER_SEMITONES[self.letter_name[0]]
            + self.accidental_offset
            - A_OFFSET_FROM_C
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SymbolicPitch):
            return NotImplemented
        return self.number == other.number

    def __lt__(self, other: SymbolicPitch) -> bool:
        if not isinstance(other, SymbolicPitch):
            return NotImplemented
        return self.number < other.number

    def __hash__(self) -> int:
        return hash(self.number)

    def __str__(self) -> str:
        return f"{self.letter_name}{self.octave}"


@dataclass(frozen=True)
class FrequencyPitch:
    """Nearest spelled pitch to a frequency plus the residual in cents (-50, 50]."""

    pitch: SymbolicPitch
    cents: float


@dataclass(frozen=True)
class InversionRecord:
    """An active inversion scope: mirror pitches around the pivot."""

    pivot_name: str
    pivot_octave: int
    mode: str = "even"


# ── Scoped modifiers ────────────────────────────────────────────────────────

class ModifierKind(str, Enum):
    ACCIDENTAL = "accidental"
    SEMITONE_TRANSPOSE = "semitone_transpose"
    SCALAR_TRANSPOSE = "scalar_transpose"
    INVERSION = "inversion"


@dataclass
class ModifierRecord:
    """A reversible per-voice effect waiting for its scope to exit."""

    kind: ModifierKind
    magnitude: int
    key: tuple[Hashable, Hashable]
    undo: Callable[[], None] = field(repr=False)


# ── Note events ─────────────────────────────────────────────────────────────

@dataclass
class NoteEvent:
    """
    All pitches collected while one note scope is open.

    The per-pitch lists (pitches, octaves, cents, hertz) always have equal
    length; beat_values gets one entry per play call.
    """

    scope_id: int
    duration: float = 1.0
    pitches: list[str] = field(default_factory=list)
    octaves: list[int] = field(default_factory=list)
    cents: list[float] = field(default_factory=list)
    hertz: list[float] = field(default_factory=list)
    beat_values: list[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.pitches)

    def symbolic_pitches(self) -> list[SymbolicPitch]:
        return [
            SymbolicPitch.parse(f"{name}{octave}")
            for name, octave in zip(self.pitches, self.octaves)
        ]

    def truncate(self, size: int, beats: int) -> None:
        """Drop entries appended after the event held *size* pitches and *beats* beat values."""
        del self.pitches[size:]
        del self.octaves[size:]
        del self.cents[size:]
        del self.hertz[size:]
        del self.beat_values[beats:]
