"""Unit tests for scale step sizes and scale walks."""

import pytest

from pitchwork.pitch_codec import build_scale
from pitchwork.step_size import scalar_steps, step_size_down, step_size_up, walk_scale


def test_step_sizes_in_c_major() -> None:
    assert step_size_up("C major", "E") == 1
    assert step_size_down("C major", "E") == -2
    assert step_size_up("C major", "B") == 1
    assert step_size_down("C major", "C") == -1
    assert step_size_up("C major", "G") == 2
    assert step_size_down("C major", "G") == -2


def test_step_sizes_for_pitch_outside_scale() -> None:
    # F# sits between F and G in C major.
    assert step_size_up("C major", "F#") == 1
    assert step_size_down("C major", "F#") == -1


def test_step_sizes_in_harmonic_minor() -> None:
    assert step_size_up("A harmonic minor", "F") == 3
    assert step_size_up("A harmonic minor", "G#") == 1
    assert step_size_up("A minor", "G") == 2


@pytest.mark.parametrize(
    "key_signature",
    ["C major", "G major", "F major", "Bb major", "E minor", "D dorian", "B locrian", "C# harmonic minor"],
)
def test_step_sizes_point_away_from_every_scale_degree(key_signature: str) -> None:
    for letter_name in build_scale(key_signature):
        assert step_size_up(key_signature, letter_name) > 0
        assert step_size_down(key_signature, letter_name) < 0


def test_walk_scale_moves_by_degrees() -> None:
    assert walk_scale(39, 2, "C major") == 43   # C4 -> E4
    assert walk_scale(39, -1, "C major") == 38  # C4 -> B3
    assert walk_scale(39, 7, "C major") == 51   # C4 -> C5
    assert walk_scale(39, 0, "C major") == 39


def test_scalar_steps_counts_degrees() -> None:
    assert scalar_steps(39, 43, "C major") == 2
    assert scalar_steps(43, 39, "C major") == -2
    assert scalar_steps(39, 39, "C major") == 0
    assert scalar_steps(39, 51, "C major") == 7
