"""Pitch tables, key/mode definitions and tuning constants shared by every resolver."""

from typing import Final

# ── Reference pitch ─────────────────────────────────────────────────────────
SEMITONES_PER_OCTAVE: Final[int] = 12
CENTS_PER_OCTAVE: Final[int] = 1200
A4_HZ: Final[float] = 440.0

# Pitch numbers are anchored at A0 = 0, so A4 sits four octaves higher.
A4_PITCH_NUMBER: Final[int] = 48
C4_PITCH_NUMBER: Final[int] = 39
# Distance from C to A inside one octave; shifts the A0 anchor onto C-based octaves.
A_OFFSET_FROM_C: Final[int] = 9
# MIDI note number of A0 (pitch number 0).
MIDI_A0: Final[int] = 21

DEFAULT_KEY_SIGNATURE: Final[str] = "C major"
DEFAULT_STARTING_PITCH: Final[str] = "C4"
DEFAULT_OCTAVE: Final[int] = 4

# ── Letter names and accidentals ────────────────────────────────────────────
LETTERS: Final[str] = "CDEFGAB"

LETTER_SEMITONES: Final[dict[str, int]] = {
    "C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11,
}

SHARP_NAMES: Final[list[str]] = [
    "C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B",
]
FLAT_NAMES: Final[list[str]] = [
    "C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B",
]

#: Semitone value of every character allowed after a letter name.
ACCIDENTAL_CHARS: Final[dict[str, int]] = {
    "#": 1, "♯": 1,
    "b": -1, "♭": -1,
    "x": 2, "𝄪": 2,
    "𝄫": -2,
    "♮": 0,
}

#: Canonical ASCII spelling for an accidental offset.
ACCIDENTAL_TEXT: Final[dict[int, str]] = {
    -2: "bb", -1: "b", 0: "", 1: "#", 2: "x",
}

#: Accidental tokens accepted by accidental modifier blocks.
ACCIDENTAL_TOKENS: Final[dict[str, int]] = {
    "double sharp 𝄪": 2,
    "sharp ♯": 1,
    "natural ♮": 0,
    "flat ♭": -1,
    "double flat 𝄫": -2,
    "double sharp": 2,
    "sharp": 1,
    "natural": 0,
    "flat": -1,
    "double flat": -2,
    "𝄪": 2, "x": 2, "##": 2,
    "♯": 1, "#": 1,
    "♮": 0,
    "♭": -1, "b": -1,
    "𝄫": -2, "bb": -2,
}

# ── Solfege ─────────────────────────────────────────────────────────────────
SOLFEGE_DEGREES: Final[dict[str, int]] = {
    "do": 0, "re": 1, "mi": 2, "fa": 3, "sol": 4, "so": 4, "la": 5, "ti": 6, "si": 6,
}

# ── Modes ───────────────────────────────────────────────────────────────────
#: Semitone steps between consecutive scale degrees, tonic first.
MODES: Final[dict[str, list[int]]] = {
    "major": [2, 2, 1, 2, 2, 2, 1],
    "ionian": [2, 2, 1, 2, 2, 2, 1],
    "minor": [2, 1, 2, 2, 1, 2, 2],
    "aeolian": [2, 1, 2, 2, 1, 2, 2],
    "dorian": [2, 1, 2, 2, 2, 1, 2],
    "phrygian": [1, 2, 2, 2, 1, 2, 2],
    "lydian": [2, 2, 2, 1, 2, 2, 1],
    "mixolydian": [2, 2, 1, 2, 2, 1, 2],
    "locrian": [1, 2, 2, 1, 2, 2, 2],
    "harmonic minor": [2, 1, 2, 2, 1, 3, 1],
    "melodic minor": [2, 1, 2, 2, 2, 2, 1],
    "major pentatonic": [2, 2, 3, 2, 3],
    "minor pentatonic": [3, 2, 2, 3, 2],
    "whole tone": [2, 2, 2, 2, 2, 2],
    "chromatic": [1] * 12,
}

# ── Intervals ───────────────────────────────────────────────────────────────
#: Diatonic interval names mapped to scale-degree numbers (5 = a fifth).
DIATONIC_INTERVALS: Final[dict[str, int]] = {
    "unison": 1,
    "second": 2,
    "third": 3,
    "fourth": 4,
    "fifth": 5,
    "sixth": 6,
    "seventh": 7,
    "octave": 8,
}

#: Chromatic interval names (lower-case, no separators) mapped to semitones.
CHROMATIC_INTERVALS: Final[dict[str, int]] = {
    "perfectunison": 0,
    "augmentedunison": 1,
    "minorsecond": 1,
    "majorsecond": 2,
    "augmentedsecond": 3,
    "minorthird": 3,
    "majorthird": 4,
    "diminishedfourth": 4,
    "perfectfourth": 5,
    "augmentedfourth": 6,
    "tritone": 6,
    "diminishedfifth": 6,
    "perfectfifth": 7,
    "augmentedfifth": 8,
    "minorsixth": 8,
    "majorsixth": 9,
    "diminishedseventh": 9,
    "minorseventh": 10,
    "majorseventh": 11,
    "perfectoctave": 12,
}

# ── Inversion ───────────────────────────────────────────────────────────────
INVERSION_MODES: Final[set[str]] = {"even", "odd", "scalar"}

# Scalar walks stop after this many steps (guards against degenerate scales).
MAX_SCALAR_STEPS: Final[int] = 100

# ── Temperaments ────────────────────────────────────────────────────────────
EQUAL_TEMPERAMENT_NAME: Final[str] = "equal"

_MEANTONE_CENTS: Final[list[float]] = [
    0.0, 76.0, 193.2, 310.3, 386.3, 503.4, 579.5, 696.6, 772.6, 889.7, 1006.8, 1082.9,
]

#: Frequency ratios of each step above the starting pitch, one octave's worth.
TEMPERAMENT_RATIOS: Final[dict[str, tuple[float, ...]]] = {
    "just intonation": (
        1.0, 16 / 15, 9 / 8, 6 / 5, 5 / 4, 4 / 3, 45 / 32, 3 / 2, 8 / 5, 5 / 3, 9 / 5, 15 / 8,
    ),
    "pythagorean": (
        1.0, 256 / 243, 9 / 8, 32 / 27, 81 / 64, 4 / 3, 729 / 512, 3 / 2, 128 / 81, 27 / 16,
        16 / 9, 243 / 128,
    ),
    "meantone": tuple(2 ** (cents / 1200) for cents in _MEANTONE_CENTS),
}
