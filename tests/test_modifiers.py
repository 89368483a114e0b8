"""Unit tests for scoped modifiers and their undo on scope exit."""

import logging

import pytest

from pitchwork.errors import InvalidArgumentError, UnresolvedAccidentalError
from pitchwork.models import ModifierKind
from pitchwork.modifiers import (
    ModifierStack,
    on_scope_exit,
    register_accidental,
    register_inversion,
    register_scalar_transpose,
    register_semitone_transpose,
    resolve_accidental,
)
from pitchwork.voice import Voice, VoiceRegistry


# ---------------------------------------------------------------------------
# Accidental tokens
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "token, value",
    [
        ("sharp", 1),
        ("Sharp", 1),
        ("sharp ♯", 1),
        ("double  sharp", 2),
        ("flat ♭", -1),
        ("𝄫", -2),
        ("#", 1),
        ("natural", 0),
        (-2, -2),
        (0, 0),
    ],
)
def test_resolve_accidental_tokens(token: object, value: int) -> None:
    assert resolve_accidental(token) == value  # type: ignore[arg-type]


@pytest.mark.parametrize("token", ["triple sharp", 3, True, None])
def test_resolve_accidental_rejects_unknown_tokens(token: object) -> None:
    with pytest.raises(UnresolvedAccidentalError):
        resolve_accidental(token)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Accidentals
# ---------------------------------------------------------------------------

def test_accidental_applies_until_scope_exit() -> None:
    voice = Voice()
    record = register_accidental(voice, "block", "sharp")
    assert record.kind is ModifierKind.ACCIDENTAL
    assert record.key == (0, "block")
    assert voice.transposition == 1

    assert on_scope_exit(voice, "block") is True
    assert voice.transposition == 0


def test_unresolved_accidental_registers_natural(caplog: pytest.LogCaptureFixture) -> None:
    voice = Voice()
    with caplog.at_level(logging.WARNING, logger="pitchwork.modifiers"):
        record = register_accidental(voice, "block", "quarter sharp")
    assert record.magnitude == 0
    assert voice.transposition == 0
    assert "quarter sharp" in caplog.text
    assert on_scope_exit(voice, "block") is True


def test_accidental_is_negated_under_inversion() -> None:
    voice = Voice()
    register_inversion(voice, "outer", "C", 4)
    register_accidental(voice, "inner", "flat")
    assert voice.transposition == 1

    on_scope_exit(voice, "inner")
    assert voice.transposition == 0


# ---------------------------------------------------------------------------
# Transpositions
# ---------------------------------------------------------------------------

def test_nested_semitone_transpositions_unwind_in_order() -> None:
    voice = Voice()
    register_semitone_transpose(voice, "outer", 3)
    register_semitone_transpose(voice, "inner", -5)
    assert voice.transposition == -2
    assert voice.transposition_values == [3, -5]

    on_scope_exit(voice, "inner")
    assert voice.transposition == 3
    on_scope_exit(voice, "outer")
    assert voice.transposition == 0
    assert voice.transposition_values == []


def test_scalar_transpose_scope() -> None:
    voice = Voice()
    register_scalar_transpose(voice, "block", 2)
    assert voice.scalar_transposition == 2
    assert voice.scalar_transposition_values == [2]

    on_scope_exit(voice, "block")
    assert voice.scalar_transposition == 0
    assert voice.scalar_transposition_values == []


def test_transpose_rejects_fractional_amount() -> None:
    with pytest.raises(InvalidArgumentError):
        register_semitone_transpose(Voice(), "block", 1.5)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Scope exit
# ---------------------------------------------------------------------------

def test_undo_runs_exactly_once() -> None:
    voice = Voice()
    register_semitone_transpose(voice, "block", 4)
    assert on_scope_exit(voice, "block") is True
    assert on_scope_exit(voice, "block") is False
    assert voice.transposition == 0


def test_scope_exit_without_registration_is_noop() -> None:
    voice = Voice()
    assert on_scope_exit(voice, "never-registered") is False
    assert voice.transposition == 0


def test_reregistering_replaces_pending_record() -> None:
    voice = Voice()
    register_accidental(voice, "block", "sharp")
    register_accidental(voice, "block", "sharp")
    assert voice.transposition == 2
    assert len(voice.modifiers) == 1

    on_scope_exit(voice, "block")
    assert voice.transposition == 1


def test_reregistering_semitone_transpose_stacks_values() -> None:
    voice = Voice()
    register_semitone_transpose(voice, "block", 2)
    register_semitone_transpose(voice, "block", 5)
    assert voice.transposition == 7

    on_scope_exit(voice, "block")
    assert voice.transposition == 2
    assert voice.transposition_values == [2]


def test_modifier_stack_membership() -> None:
    voice = Voice(voice_id="alto")
    register_accidental(voice, 7, "flat")
    stack: ModifierStack = voice.modifiers
    assert ("alto", 7) in stack
    assert stack.get(("alto", 7)) is not None
    assert stack.get(("alto", 8)) is None


# ---------------------------------------------------------------------------
# Inversion
# ---------------------------------------------------------------------------

def test_inversion_scope() -> None:
    voice = Voice()
    register_inversion(voice, "block", "E", 4, "odd")
    assert len(voice.invert_list) == 1
    assert voice.invert_list[0].mode == "odd"

    on_scope_exit(voice, "block")
    assert voice.invert_list == []


def test_inversion_rejects_bad_arguments() -> None:
    voice = Voice()
    with pytest.raises(InvalidArgumentError):
        register_inversion(voice, "block", "C", 4, "sideways")
    with pytest.raises(InvalidArgumentError):
        register_inversion(voice, "block", "H", 4)
    assert voice.invert_list == []
    assert len(voice.modifiers) == 0


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

def test_registry_routes_scope_exit_to_voice() -> None:
    registry = VoiceRegistry()
    soprano = registry.add(Voice(voice_id="soprano"))
    registry.add(Voice(voice_id="bass"))
    register_semitone_transpose(soprano, "block", 12)

    assert registry.on_scope_exit("bass", "block") is False
    assert soprano.transposition == 12
    assert registry.on_scope_exit("soprano", "block") is True
    assert soprano.transposition == 0
    assert registry.on_scope_exit("tenor", "block") is False


def test_registry_lookup() -> None:
    registry = VoiceRegistry()
    voice = registry.add(Voice(voice_id=1))
    assert registry.lookup(1) is voice
    assert 1 in registry
    assert len(registry) == 1

    registry.remove(1)
    with pytest.raises(InvalidArgumentError):
        registry.lookup(1)
