"""Unit tests for pitch-number, spelling and frequency conversions."""

import math

import numpy as np
import pytest

from pitchwork.errors import InvalidArgumentError, InvalidFrequencyError
from pitchwork.models import SymbolicPitch, get_temperament
from pitchwork.pitch_codec import (
    build_scale,
    frequencies_to_pitch_numbers,
    frequency_to_pitch,
    number_to_pitch,
    pitch_to_frequency,
    pitch_to_number,
    spell_pitch_class,
    split_note_name,
)


# ---------------------------------------------------------------------------
# Pitch numbers
# ---------------------------------------------------------------------------

def test_pitch_to_number_anchors_a0_at_zero() -> None:
    assert pitch_to_number("A", 0) == 0
    assert pitch_to_number("C", 4) == 39
    assert pitch_to_number("A", 4) == 48


def test_pitch_to_number_enharmonic_spellings_match() -> None:
    assert pitch_to_number("B#", 3) == 39
    assert pitch_to_number("Dbb", 4) == 39
    assert pitch_to_number("Cx", 4) == 41
    assert pitch_to_number("E♭", 4) == 42
    assert pitch_to_number("F𝄪", 4) == pitch_to_number("G", 4)


def test_pitch_to_number_rejects_unknown_names() -> None:
    with pytest.raises(InvalidArgumentError):
        pitch_to_number("H", 4)
    with pytest.raises(InvalidArgumentError):
        pitch_to_number("C?", 4)
    with pytest.raises(InvalidArgumentError):
        pitch_to_number("C", "four")  # type: ignore[arg-type]


def test_number_to_pitch_walks_from_a0() -> None:
    assert number_to_pitch(0) == SymbolicPitch("A", 0, 0)
    assert number_to_pitch(39) == SymbolicPitch("C", 4, 0)
    assert str(number_to_pitch(-1)) == "G#0"
    assert number_to_pitch(-10) == SymbolicPitch("B", -1, 0)


def test_number_to_pitch_floors_fractions() -> None:
    assert number_to_pitch(39.7) == SymbolicPitch("C", 4, 0)


def test_number_to_pitch_spells_in_key() -> None:
    assert str(number_to_pitch(49, key_signature="F major")) == "Bb4"
    assert str(number_to_pitch(49)) == "A#4"


def test_number_to_pitch_rejects_non_numbers() -> None:
    with pytest.raises(InvalidArgumentError):
        number_to_pitch("C")  # type: ignore[arg-type]
    with pytest.raises(InvalidArgumentError):
        number_to_pitch(float("nan"))
    with pytest.raises(InvalidArgumentError):
        number_to_pitch(True)


@pytest.mark.parametrize("key_signature", [None, "C major", "Eb major", "F# minor"])
def test_number_round_trip(key_signature: str | None) -> None:
    for n in range(-24, 100):
        pitch = number_to_pitch(n, key_signature=key_signature)
        assert pitch_to_number(pitch.letter_name, pitch.octave) == n


def test_number_to_pitch_custom_temperament_counts_table_steps() -> None:
    just = get_temperament("just intonation")
    assert number_to_pitch(0, just, "C4") == SymbolicPitch("C", 4, 0)
    assert number_to_pitch(7, just, "C4") == SymbolicPitch("G", 4, 0)
    assert number_to_pitch(12, just, "C4") == SymbolicPitch("C", 5, 0)
    assert number_to_pitch(-1, just, "C4") == SymbolicPitch("B", 3, 0)


def test_number_to_pitch_custom_temperament_subtracts_offset() -> None:
    just = get_temperament("just intonation")
    assert number_to_pitch(7 + 39, just, "C4", offset=39) == SymbolicPitch("G", 4, 0)


# ---------------------------------------------------------------------------
# Frequencies
# ---------------------------------------------------------------------------

def test_frequency_to_pitch_a440() -> None:
    found = frequency_to_pitch(440.0)
    assert found.pitch == SymbolicPitch("A", 4, 0)
    assert found.cents == pytest.approx(0.0, abs=1e-9)


def test_frequency_to_pitch_middle_c() -> None:
    found = frequency_to_pitch(261.6256)
    assert str(found.pitch) == "C4"
    assert abs(found.cents) < 0.01


def test_frequency_to_pitch_reports_residual_cents() -> None:
    above = frequency_to_pitch(440.0 * 2 ** (0.3 / 12))
    assert str(above.pitch) == "A4"
    assert above.cents == pytest.approx(30.0)

    below = frequency_to_pitch(440.0 * 2 ** (0.7 / 12))
    assert str(below.pitch) == "A#4"
    assert below.cents == pytest.approx(-30.0)


@pytest.mark.parametrize("hertz", [0, -5.0, float("inf"), float("nan"), "440", None])
def test_frequency_to_pitch_rejects_invalid_frequencies(hertz: object) -> None:
    with pytest.raises(InvalidFrequencyError):
        frequency_to_pitch(hertz)  # type: ignore[arg-type]


def test_pitch_to_frequency_equal_temperament() -> None:
    assert pitch_to_frequency("A", 4) == pytest.approx(440.0)
    assert pitch_to_frequency("A", 3) == pytest.approx(220.0)
    assert pitch_to_frequency("C", 4, 100.0) == pytest.approx(pitch_to_frequency("C#", 4))


def test_pitch_to_frequency_custom_temperament_from_tonic() -> None:
    just = get_temperament("just intonation")
    c4 = pitch_to_frequency("C", 4)
    assert pitch_to_frequency("C", 4, temperament=just) == pytest.approx(c4)
    assert pitch_to_frequency("E", 4, temperament=just) == pytest.approx(c4 * 5 / 4)
    assert pitch_to_frequency("G", 3, temperament=just) == pytest.approx(c4 * 3 / 4)


def test_frequency_round_trip_within_one_cent() -> None:
    for n in range(0, 88):
        pitch = number_to_pitch(n)
        hertz = pitch_to_frequency(pitch.letter_name, pitch.octave, 0.0, "C major")
        found = frequency_to_pitch(hertz)
        assert pitch_to_number(found.pitch.letter_name, found.pitch.octave) == n
        assert abs(found.cents) < 1.0


def test_frequencies_to_pitch_numbers_batch() -> None:
    numbers, cents = frequencies_to_pitch_numbers([440.0, 880.0, 220.0, 261.6256])
    assert numbers.tolist() == [48, 60, 36, 39]
    assert np.allclose(cents, 0.0, atol=0.01)


def test_frequencies_to_pitch_numbers_rejects_invalid_values() -> None:
    with pytest.raises(InvalidFrequencyError):
        frequencies_to_pitch_numbers([440.0, 0.0])
    with pytest.raises(InvalidFrequencyError):
        frequencies_to_pitch_numbers([math.inf])


# ---------------------------------------------------------------------------
# Scales and spelling
# ---------------------------------------------------------------------------

def test_build_scale_diatonic_spelling() -> None:
    assert build_scale("C major") == ["C", "D", "E", "F", "G", "A", "B"]
    assert build_scale("F major") == ["F", "G", "A", "Bb", "C", "D", "E"]
    assert build_scale("D minor") == ["D", "E", "F", "G", "A", "Bb", "C"]
    assert build_scale("F# major") == ["F#", "G#", "A#", "B", "C#", "D#", "E#"]


def test_build_scale_non_diatonic_modes() -> None:
    assert build_scale("A minor pentatonic") == ["A", "C", "D", "E", "G"]
    assert len(build_scale("C chromatic")) == 12


def test_build_scale_rejects_unknown_mode() -> None:
    with pytest.raises(InvalidArgumentError):
        build_scale("C blues")


def test_spell_pitch_class_follows_key_and_direction() -> None:
    assert spell_pitch_class(10, "C major") == "A#"
    assert spell_pitch_class(10, "C major", direction=-1) == "Bb"
    assert spell_pitch_class(10, "F major") == "Bb"
    assert spell_pitch_class(6, "F major") == "Gb"
    assert spell_pitch_class(6, "F major", direction=1) == "F#"


def test_split_note_name_solfege() -> None:
    assert split_note_name("sol") == ("G", 0)
    assert split_note_name("ti") == ("B", 0)
    assert split_note_name("mi", "D major", moveable=True) == ("F", 1)
    assert split_note_name("do", "Eb major", moveable=True) == ("E", -1)
    assert pitch_to_number("la", 4) == 48


def test_symbolic_pitch_parse() -> None:
    assert SymbolicPitch.parse("Bb3").accidental_offset == -1
    assert str(SymbolicPitch.parse("f♯5")) == "F#5"
    assert str(SymbolicPitch.parse("C-1")) == "C-1"
    with pytest.raises(InvalidArgumentError):
        SymbolicPitch.parse("C")


def test_symbolic_pitch_compares_by_pitch_number() -> None:
    sharp, flat = SymbolicPitch("A#", 4, 1), SymbolicPitch("Bb", 4, -1)
    assert sharp == flat
    assert hash(sharp) == hash(flat)
    assert str(sharp) != str(flat)
    assert sharp.number == flat.number == 49
    assert SymbolicPitch("B#", 3, 1) == SymbolicPitch("C", 4, 0)
    assert SymbolicPitch("C", 4, 0) < SymbolicPitch("C#", 4, 1) <= SymbolicPitch("Db", 4, -1)
    assert len({sharp, flat, SymbolicPitch("B", 4, 0)}) == 2
