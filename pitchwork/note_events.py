"""NoteEventAccumulator: collects resolved pitches into note events, plus pitch palette queries."""

from __future__ import annotations

import logging
import math
import numbers
from typing import TYPE_CHECKING

from pitchwork.errors import InvalidArgumentError, NoNoteError
from pitchwork.intervals import interval
from pitchwork.models import NoteEvent, SymbolicPitch, accidental_text
from pitchwork.pitch_codec import (
    as_integer,
    frequency_to_pitch,
    number_to_pitch,
    pitch_to_frequency,
    pitch_to_number,
    split_note_name,
)
from pitchwork.step_size import scalar_steps, step_size_down, step_size_up
from pitchwork.transposer import calc_octave, calculate_invert, resolve

if TYPE_CHECKING:
    from pitchwork.midi_sink import NotationSink, NoteSink
    from pitchwork.voice import Voice

logger = logging.getLogger(__name__)


# ── Note scopes ─────────────────────────────────────────────────────────────

def begin_note(voice: Voice, duration: float = 1.0) -> int:
    """Open a note scope on *voice* and return its scope id."""
    scope_id = voice.next_scope_id()
    voice.note_scopes.append(NoteEvent(scope_id=scope_id, duration=duration))
    return scope_id


def end_note(voice: Voice, sink: NoteSink | None = None) -> NoteEvent:
    """
    Close the innermost note scope and hand its event to *sink*.

    The first pitch of a non-empty event becomes the voice's last note played.

    Raises:
        NoNoteError: If no note scope is open.
    """
    if not voice.note_scopes:
        raise NoNoteError("No note scope is open.")
    event = voice.note_scopes.pop()

    if event.pitches:
        voice.previous_note_played = voice.last_note_played
        voice.last_note_played = event.symbolic_pitches()[0]
    if sink is not None:
        sink.accept(voice.voice_id, event)
    return event


# ── Adding pitches ──────────────────────────────────────────────────────────

def _moved_hertz(voice: Voice, hertz: float, letter_name: str, octave: int, pitch: SymbolicPitch) -> float:
    """Scale *hertz*, sounded at *letter_name*/*octave*, by the interval up to *pitch*."""
    if (pitch.letter_name, pitch.octave) == (letter_name, octave):
        return hertz
    key_signature, temperament = voice.key_signature, voice.temperament
    return hertz * (
        pitch_to_frequency(pitch.letter_name, pitch.octave, 0.0, key_signature, temperament)
        / pitch_to_frequency(letter_name, octave, 0.0, key_signature, temperament)
    )


def add_pitch(
    voice: Voice,
    letter_name: str,
    octave: int,
    cents: float = 0.0,
    hertz: float | None = None,
    direction: int | None = None,
    walk_scalar: bool = True,
) -> SymbolicPitch:
    """
    Resolve a pitch through the voice's modifiers and append it to the open note.

    Scalar transposition is walked first, then active inversions are
    applied, then ``transposition + register * 12``.

    Args:
        hertz:       Frequency of the pitch as given. It moves with the pitch
                     when modifiers shift it; computed from the resolved
                     pitch when None.
        walk_scalar: False when the caller has already applied the voice's
                     scalar transposition.

    Returns:
        The resolved pitch appended to the innermost note scope.

    Raises:
        NoNoteError: If no note scope is open.
    """
    event = voice.current_note
    if event is None:
        raise NoNoteError("No note scope is open.")
    key_signature = voice.key_signature
    given_name, given_octave = letter_name, octave

    if walk_scalar and voice.scalar_transposition:
        shifted = resolve(
            letter_name, octave, voice.scalar_transposition, key_signature,
            moveable=True, temperament=voice.temperament,
        )
        letter_name, octave = shifted.letter_name, shifted.octave

    delta = calculate_invert(voice, letter_name, octave) if voice.invert_list else 0
    offset = round(voice.transposition + voice.register * 12 + 2 * delta)
    pitch = resolve(
        letter_name, octave, offset, key_signature,
        direction=direction, temperament=voice.temperament,
    )

    if hertz is None:
        hertz = pitch_to_frequency(
            pitch.letter_name, pitch.octave, cents, key_signature, voice.temperament
        )
    else:
        hertz = _moved_hertz(voice, hertz, given_name, given_octave, pitch)
    event.pitches.append(pitch.letter_name)
    event.octaves.append(pitch.octave)
    event.cents.append(cents)
    event.hertz.append(hertz)
    return pitch


def _normalise_name(voice: Voice, letter_name: str) -> str:
    letter, offset = split_note_name(letter_name, voice.key_signature, voice.moveable)
    return letter + accidental_text(offset)


def _record_measurement(voice: Voice, letter_name: str, octave: int) -> None:
    number = pitch_to_number(letter_name, octave, voice.key_signature) - voice.pitch_number_offset
    depth = len(voice.just_measuring)
    if len(voice.first_pitch) < depth:
        voice.first_pitch.append(number)
    elif len(voice.last_pitch) < depth:
        voice.last_pitch.append(number)


def play_pitch(
    voice: Voice,
    letter_name: str,
    octave: int,
    cents: float = 0.0,
    hertz: float | None = None,
    notation: NotationSink | None = None,
) -> list[SymbolicPitch]:
    """
    Sound a pitch, together with the voice's intervals, inside the open note.

    The base pitch is added first, then one pitch per configured interval
    and semitone interval, then one beat value. Scalar transposition moves
    the base before the intervals are measured from it, so the whole chord
    shifts by scale degrees; inversion and semitone transposition then
    apply to each chord member. While the voice is measuring, the pitch
    number is recorded instead and nothing is added.
    Nothing is left in the note if any pitch fails to resolve.

    Returns:
        The resolved pitches added, base pitch first.

    Raises:
        NoNoteError: If no note scope is open and the voice is not measuring.
    """
    name = _normalise_name(voice, letter_name)
    octave = as_integer(octave, "octave")

    if voice.just_measuring:
        _record_measurement(voice, name, octave)
        return []

    event = voice.current_note
    if event is None:
        raise NoNoteError(f"{name}{octave} was played outside a note.")

    key_signature = voice.key_signature
    size, beats = len(event), len(event.beat_values)
    try:
        root = SymbolicPitch.parse(f"{name}{octave}")
        if voice.scalar_transposition:
            root = resolve(
                name, octave, voice.scalar_transposition, key_signature,
                moveable=True, temperament=voice.temperament,
            )
            if hertz is not None:
                hertz = _moved_hertz(voice, hertz, name, octave, root)

        base = add_pitch(voice, root.letter_name, root.octave, cents, hertz, walk_scalar=False)
        added = [base]

        for name_or_degrees in voice.intervals:
            semitones = interval(name_or_degrees, key_signature, root)
            other = resolve(
                root.letter_name, root.octave, semitones, key_signature, temperament=voice.temperament
            )
            added.append(add_pitch(voice, other.letter_name, other.octave, cents, walk_scalar=False))

        for semitones, direction in voice.semitone_intervals:
            other = resolve(
                root.letter_name, root.octave, semitones, key_signature,
                direction=direction, temperament=voice.temperament,
            )
            added.append(
                add_pitch(voice, other.letter_name, other.octave, cents, direction=direction, walk_scalar=False)
            )
    except Exception:
        event.truncate(size, beats)
        raise

    event.beat_values.append(voice.beat_factor)
    if notation is not None:
        notation.notate(
            voice.voice_id,
            base,
            pitch_to_frequency(base.letter_name, base.octave, cents, key_signature, voice.temperament),
        )
    return added


def play_hertz(
    voice: Voice,
    hertz: float,
    notation: NotationSink | None = None,
) -> list[SymbolicPitch]:
    """
    Sound the pitch nearest to *hertz*; the residual cents are kept.

    Raises:
        InvalidFrequencyError: If *hertz* is not finite and positive.
        NoNoteError: If no note scope is open and the voice is not measuring.
    """
    found = frequency_to_pitch(hertz, voice.key_signature)
    return play_pitch(
        voice, found.pitch.letter_name, found.pitch.octave, found.cents, float(hertz), notation
    )


def play_pitch_number(
    voice: Voice,
    number: float,
    notation: NotationSink | None = None,
) -> list[SymbolicPitch]:
    """
    Sound pitch number *number* shifted by the voice's pitch-number offset.

    In define mode the raw number is appended to ``voice.define_buffer``
    and nothing is played.

    Raises:
        InvalidArgumentError: If *number* is not a number.
        NoNoteError: If no note scope is open and the voice is not measuring.
    """
    if voice.in_define_mode:
        voice.define_buffer.append(number)
        return []

    if isinstance(number, bool) or not isinstance(number, numbers.Real):
        raise InvalidArgumentError(f"Pitch number must be a number, got {number!r}.")
    if voice.temperament.is_custom and voice.scalar_transposition + voice.transposition != 0:
        logger.warning("Scalar transpositions are equal to semitone transpositions for custom temperament.")

    pitch = number_to_pitch(
        number + voice.pitch_number_offset,
        voice.temperament,
        voice.starting_pitch,
        voice.pitch_number_offset,
        voice.key_signature,
    )
    return play_pitch(voice, pitch.letter_name, pitch.octave, 0.0, notation=notation)


# ── Pitch queries ───────────────────────────────────────────────────────────

def num_to_pitch(voice: Voice, number: float, out_type: str = "pitch") -> str | int:
    """
    Letter name (``out_type="pitch"``) or octave (``"octave"``) of a pitch number.

    Raises:
        InvalidArgumentError: If *number* is not a number or *out_type* is unknown.
    """
    if isinstance(number, bool) or not isinstance(number, numbers.Real) or not math.isfinite(number):
        raise InvalidArgumentError(f"Pitch number must be a number, got {number!r}.")
    if out_type not in ("pitch", "octave"):
        raise InvalidArgumentError(f"Unknown output type {out_type!r}.")
    pitch = number_to_pitch(math.floor(number) + voice.pitch_number_offset)
    return pitch.letter_name if out_type == "pitch" else pitch.octave


def set_pitch_number_offset(voice: Voice, letter_name: str, octave: int | str | None) -> int:
    """Make *letter_name* in *octave* pitch number 0 for this voice."""
    resolved_octave = calc_octave(
        voice.current_octave, octave, voice.last_note_played, letter_name, voice.key_signature
    )
    voice.pitch_number_offset = pitch_to_number(letter_name, resolved_octave, voice.key_signature)
    return voice.pitch_number_offset


def delta_pitch(voice: Voice, out_type: str = "deltapitch") -> int:
    """
    Change between the previous and the last note played.

    ``"deltapitch"`` counts semitones, ``"deltascalarpitch"`` scale degrees.
    Zero until two notes have been played.
    """
    if out_type not in ("deltapitch", "deltascalarpitch"):
        raise InvalidArgumentError(f"Unknown output type {out_type!r}.")
    if voice.previous_note_played is None or voice.last_note_played is None:
        return 0

    previous, last = voice.previous_note_played, voice.last_note_played
    before = pitch_to_number(previous.letter_name, previous.octave, voice.key_signature)
    after = pitch_to_number(last.letter_name, last.octave, voice.key_signature)
    if out_type == "deltapitch":
        return after - before
    return scalar_steps(before, after, voice.key_signature)


def consonant_step_size(voice: Voice, step_type: str = "up") -> int:
    """Semitones to the next scale degree above/below the last note played (G before any note)."""
    if step_type not in ("up", "down"):
        raise InvalidArgumentError(f"Unknown step type {step_type!r}.")
    letter_name = voice.last_note_played.letter_name if voice.last_note_played else "G"
    if step_type == "up":
        return step_size_up(voice.key_signature, letter_name)
    return step_size_down(voice.key_signature, letter_name)
