"""pitchwork CLI entry point."""

import logging
import sys

import click

from pitchwork import __version__
from pitchwork.config import C4_PITCH_NUMBER, DEFAULT_KEY_SIGNATURE, DEFAULT_STARTING_PITCH, TEMPERAMENT_RATIOS
from pitchwork.errors import PitchError
from pitchwork.intervals import interval
from pitchwork.midi_sink import MidiNoteSink
from pitchwork.models import SymbolicPitch, get_temperament
from pitchwork.modifiers import on_scope_exit, register_semitone_transpose
from pitchwork.note_events import begin_note, end_note, play_pitch_number
from pitchwork.pitch_codec import (
    frequencies_to_pitch_numbers,
    number_to_pitch,
    pitch_to_frequency,
    pitch_to_number,
)
from pitchwork.step_size import step_size_down, step_size_up
from pitchwork.transposer import resolve
from pitchwork.voice import Voice

TEMPERAMENT_CHOICES = ["equal", *sorted(TEMPERAMENT_RATIOS)]

# Lets negative numbers through as arguments ("transpose C4 -3").
NEGATIVE_ARGS = {"ignore_unknown_options": True}


def _fail(exc: Exception) -> None:
    click.echo(f"  ERROR: {exc}", err=True)
    sys.exit(1)


def _parse_interval(text: str) -> int | str:
    """Interval arguments are scale-degree counts when numeric, names otherwise."""
    try:
        return int(text)
    except ValueError:
        return text


key_option = click.option(
    "--key",
    "key_signature",
    default=DEFAULT_KEY_SIGNATURE,
    show_default=True,
    metavar="KEY",
    help='Key signature, e.g. "D minor" or "Eb dorian".',
)


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="pitchwork")
@click.option("--verbose", "-v", is_flag=True, help="Log engine decisions to stderr.")
def main(verbose: bool) -> None:
    """pitchwork: pitch resolution and transformation engine."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ── Conversions ────────────────────────────────────────────────────────────────

@main.command()
@click.argument("hertz", nargs=-1, required=True, type=float)
@key_option
def hz(hertz: tuple[float, ...], key_signature: str) -> None:
    """
    Name the nearest pitch to each frequency (A4 = 440 Hz).

    \b
    Examples:
      pitchwork hz 440
      pitchwork hz 261.63 329.63 392 --key "C major"
    """
    try:
        numbers, cents = frequencies_to_pitch_numbers(list(hertz))
        for value, number, residual in zip(hertz, numbers.tolist(), cents.tolist()):
            pitch = number_to_pitch(number, key_signature=key_signature)
            click.echo(f"{value:10.2f} Hz  {str(pitch):<5}  {residual:+6.2f} cents  (pitch number {number})")
    except PitchError as exc:
        _fail(exc)


@main.command(context_settings=NEGATIVE_ARGS)
@click.argument("number", type=int)
@click.option(
    "--offset",
    type=int,
    default=0,
    show_default=True,
    help=f"Pitch-number offset added before lookup ({C4_PITCH_NUMBER} makes 0 middle C).",
)
@click.option(
    "--temperament",
    type=click.Choice(TEMPERAMENT_CHOICES, case_sensitive=False),
    default="equal",
    show_default=True,
)
@click.option("--starting-pitch", default=DEFAULT_STARTING_PITCH, show_default=True, metavar="PITCH")
@key_option
def number(number: int, offset: int, temperament: str, starting_pitch: str, key_signature: str) -> None:
    """Spell pitch number NUMBER (A0 = 0) and give its frequency."""
    try:
        tuning = get_temperament(temperament)
        pitch = number_to_pitch(number + offset, tuning, starting_pitch, offset, key_signature)
        frequency = pitch_to_frequency(pitch.letter_name, pitch.octave, 0.0, key_signature, tuning)
        click.echo(f"{number}  {pitch}  {frequency:.2f} Hz")
    except PitchError as exc:
        _fail(exc)


@main.command()
@click.argument("name")
@click.option("--cents", type=float, default=0.0, show_default=True)
@click.option(
    "--temperament",
    type=click.Choice(TEMPERAMENT_CHOICES, case_sensitive=False),
    default="equal",
    show_default=True,
)
@key_option
def pitch(name: str, cents: float, temperament: str, key_signature: str) -> None:
    """
    Pitch number and frequency of NAME, e.g. "F#4" or "Bb2".

    \b
    Examples:
      pitchwork pitch A4
      pitchwork pitch E4 --temperament "just intonation"
    """
    try:
        parsed = SymbolicPitch.parse(name)
        tuning = get_temperament(temperament)
        value = pitch_to_number(parsed.letter_name, parsed.octave, key_signature)
        frequency = pitch_to_frequency(parsed.letter_name, parsed.octave, cents, key_signature, tuning)
        click.echo(f"{parsed}  pitch number {value}  {frequency:.2f} Hz")
    except PitchError as exc:
        _fail(exc)


# ── Transformations ────────────────────────────────────────────────────────────

@main.command(context_settings=NEGATIVE_ARGS)
@click.argument("name")
@click.argument("offset", type=int)
@click.option("--moveable", is_flag=True, help="Count OFFSET in scale degrees instead of semitones.")
@click.option(
    "--direction",
    type=click.Choice(["up", "down"]),
    default=None,
    help="Spell notes outside the key with sharps (up) or flats (down).",
)
@key_option
def transpose(name: str, offset: int, moveable: bool, direction: str | None, key_signature: str) -> None:
    """
    Transpose pitch NAME by OFFSET.

    \b
    Examples:
      pitchwork transpose C4 7
      pitchwork transpose E4 2 --moveable --key "C major"
      pitchwork transpose G4 -3 --direction down
    """
    try:
        parsed = SymbolicPitch.parse(name)
        sign = None if direction is None else (1 if direction == "up" else -1)
        result = resolve(parsed.letter_name, parsed.octave, offset, key_signature, moveable, sign)
        click.echo(str(result))
    except PitchError as exc:
        _fail(exc)


@main.command()
@click.argument("name")
@key_option
def step(name: str, key_signature: str) -> None:
    """Semitones from NAME to the neighbouring scale degrees."""
    try:
        up = step_size_up(key_signature, name)
        down = step_size_down(key_signature, name)
        click.echo(f"up {up:+d}  down {down:+d}")
    except PitchError as exc:
        _fail(exc)


@main.command("interval", context_settings=NEGATIVE_ARGS)
@click.argument("name")
@click.argument("interval_name", metavar="INTERVAL")
@key_option
def interval_command(name: str, interval_name: str, key_signature: str) -> None:
    """
    Apply INTERVAL to pitch NAME.

    INTERVAL is a scale-degree count (5, -3), a diatonic name ("third") or
    a chromatic name ("majorThird", "perfect fifth").
    """
    try:
        parsed = SymbolicPitch.parse(name)
        semitones = interval(_parse_interval(interval_name), key_signature, parsed)
        result = resolve(parsed.letter_name, parsed.octave, semitones, key_signature)
        click.echo(f"{semitones:+d} semitones  {result}")
    except PitchError as exc:
        _fail(exc)


# ── MIDI ───────────────────────────────────────────────────────────────────────

@main.command(context_settings=NEGATIVE_ARGS)
@click.argument("numbers", nargs=-1, required=True, type=int)
@click.option("--output", "-o", default="pitchwork.mid", show_default=True, metavar="PATH")
@click.option("--transpose", "semitones", type=int, default=0, show_default=True, help="Semitone transposition.")
@click.option("--tempo", type=click.IntRange(20, 300), default=MidiNoteSink.DEFAULT_TEMPO, show_default=True)
@key_option
def midi(numbers: tuple[int, ...], output: str, semitones: int, tempo: int, key_signature: str) -> None:
    """
    Play pitch NUMBERS (0 = C4) one per beat and write them to a MIDI file.

    \b
    Examples:
      pitchwork midi 0 2 4 5 7 -o scale.mid
      pitchwork midi 0 4 7 --transpose 2 --key "D major"
    """
    voice = Voice(voice_id=1)
    sink = MidiNoteSink(tempo=tempo)
    try:
        voice.configure(key_signature=key_signature)
        if semitones:
            register_semitone_transpose(voice, "cli", semitones)
        for value in numbers:
            begin_note(voice)
            played = play_pitch_number(voice, value)
            end_note(voice, sink)
            click.echo(f"{value:4d}  {' '.join(str(p) for p in played)}")
        on_scope_exit(voice, "cli")
    except PitchError as exc:
        _fail(exc)

    try:
        sink.export(output)
    except OSError as exc:
        click.echo(f"  ERROR: Could not write MIDI file: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Done!  Wrote {len(numbers)} note(s) to '{output}'.")
