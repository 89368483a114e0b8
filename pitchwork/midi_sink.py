"""Output sinks: where completed note events and notated pitches are handed off."""

from collections.abc import Hashable
from typing import Protocol

from midiutil import MIDIFile

from pitchwork.config import MIDI_A0
from pitchwork.models import NoteEvent, SymbolicPitch
from pitchwork.pitch_codec import pitch_to_number

# In midiutil Format 1 MIDI, track 0 is the conductor/tempo track.
# Each voice gets its own data track after it.
TRACK_CONDUCTOR = 0


class NoteSink(Protocol):
    """Receives each note event when its scope closes."""

    def accept(self, voice_id: Hashable, event: NoteEvent) -> None: ...


class NotationSink(Protocol):
    """Receives the base pitch of every played note together with its frequency."""

    def notate(self, voice_id: Hashable, pitch: SymbolicPitch, hertz: float) -> None: ...


def midi_note(letter_name: str, octave: int) -> int:
    """MIDI note number of a spelled pitch (A0 = 21, C4 = 60)."""
    return pitch_to_number(letter_name, octave) + MIDI_A0


class MidiNoteSink:
    """
    Collects note events per voice and writes them as a Standard MIDI File.

    Track layout (Format 1)
    -----------------------
    Track 0: conductor track (tempo and time signature, no notes)

    Track 1..n: one track per voice, in the order voices first sent an
    event. Events follow each other on their voice's track: a note lasts
    ``event.duration`` beats scaled by its first beat value, and an event
    with no pitches is a rest of that length.
    """

    DEFAULT_TEMPO = 90     # BPM
    DEFAULT_VELOCITY = 80  # MIDI velocity (0-127)

    def __init__(
        self,
        tempo: int = DEFAULT_TEMPO,
        velocity: int = DEFAULT_VELOCITY,
    ) -> None:
        """
        Args:
            tempo:    Playback tempo in beats per minute.
            velocity: MIDI note-on velocity for every note.
        """
        self.tempo = tempo
        self.velocity = velocity
        self._events: dict[Hashable, list[NoteEvent]] = {}

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _event_beats(self, event: NoteEvent) -> float:
        """Length of an event in beats."""
        factor = event.beat_values[0] if event.beat_values else 1.0
        return event.duration * factor

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def voice_ids(self) -> list[Hashable]:
        return list(self._events)

    def events_for(self, voice_id: Hashable) -> list[NoteEvent]:
        return list(self._events.get(voice_id, []))

    def accept(self, voice_id: Hashable, event: NoteEvent) -> None:
        self._events.setdefault(voice_id, []).append(event)

    def export(self, output_path: str) -> None:
        """
        Render the collected events to a Standard MIDI File (SMF format 1).

        Args:
            output_path: Destination file path (e.g. "output.mid").

        Raises:
            OSError: If the output file cannot be opened for writing.
        """
        midi = MIDIFile(numTracks=len(self._events) + 1, removeDuplicates=False, deinterleave=False)

        # --- Track 0: conductor (tempo and time signature only) ---
        midi.addTempo(TRACK_CONDUCTOR, 0, self.tempo)
        midi.addTimeSignature(TRACK_CONDUCTOR, 0, 4, 2, 24)

        for track, (voice_id, events) in enumerate(self._events.items(), start=1):
            channel = (track - 1) % 16
            midi.addTrackName(track, 0, f"Voice {voice_id}")

            time = 0.0
            for event in events:
                beats = self._event_beats(event)
                for letter_name, octave in zip(event.pitches, event.octaves):
                    midi.addNote(
                        track=track,
                        channel=channel,
                        pitch=midi_note(letter_name, octave),
                        time=time,
                        duration=beats,
                        volume=self.velocity,
                    )
                time += beats

        with open(output_path, "wb") as f:
            midi.writeFile(f)
