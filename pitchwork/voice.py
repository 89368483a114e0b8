"""Voice: the per-voice state the engine reads and mutates, plus a registry to find voices."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Hashable, Iterator
from dataclasses import dataclass, field

from pitchwork.config import C4_PITCH_NUMBER, DEFAULT_OCTAVE, DEFAULT_STARTING_PITCH
from pitchwork.errors import InvalidArgumentError
from pitchwork.models import (
    InversionRecord,
    KeyContext,
    NoteEvent,
    SymbolicPitch,
    Temperament,
    get_temperament,
)
from pitchwork.modifiers import ModifierStack

logger = logging.getLogger(__name__)


@dataclass
class Voice:
    """
    State of one singing voice.

    The engine keeps nothing between calls except what it writes here. A
    voice is single-writer: callers serialise mutations to one voice, while
    different voices may be driven in parallel.

    Attributes:
        voice_id:             Identity used in modifier scope keys.
        key:                  Key signature, moveable-do flag and temperament.
        starting_pitch:       Step 0 of a custom temperament table.
        transposition:        Semitone transposition from active modifiers.
        register:             Octave register shift.
        scalar_transposition: Scale-degree transposition from active modifiers.
        pitch_number_offset:  Added to pitch numbers before lookup; the
                              default plays pitch number 0 as C4.
        intervals:            Scalar/named intervals added to every note.
        semitone_intervals:   ``(semitones, direction)`` pairs added to every note.
        just_measuring:       Open measuring scopes; while non-empty, played
                              pitches are recorded in first_pitch/last_pitch.
        in_define_mode:       Record raw pitch numbers into define_buffer
                              instead of playing them.
    """

    voice_id: Hashable = 0
    key: KeyContext = field(default_factory=KeyContext)
    starting_pitch: str = DEFAULT_STARTING_PITCH
    transposition: int = 0
    register: int = 0
    scalar_transposition: int = 0
    pitch_number_offset: int = C4_PITCH_NUMBER
    current_octave: int = DEFAULT_OCTAVE
    beat_factor: float = 1.0
    invert_list: list[InversionRecord] = field(default_factory=list)
    transposition_values: list[int] = field(default_factory=list)
    scalar_transposition_values: list[int] = field(default_factory=list)
    intervals: list[int | str] = field(default_factory=list)
    semitone_intervals: list[tuple[int, int]] = field(default_factory=list)
    just_measuring: list[Hashable] = field(default_factory=list)
    first_pitch: list[int] = field(default_factory=list)
    last_pitch: list[int] = field(default_factory=list)
    in_define_mode: bool = False
    define_buffer: list[float] = field(default_factory=list)
    last_note_played: SymbolicPitch | None = None
    previous_note_played: SymbolicPitch | None = None
    modifiers: ModifierStack = field(default_factory=ModifierStack, repr=False)
    note_scopes: list[NoteEvent] = field(default_factory=list, repr=False)
    _scope_ids: Iterator[int] = field(default_factory=itertools.count, init=False, repr=False)

    @property
    def key_signature(self) -> str:
        return self.key.key_signature

    @property
    def moveable(self) -> bool:
        return self.key.moveable

    @property
    def temperament(self) -> Temperament:
        return self.key.temperament

    def configure(
        self,
        key_signature: str | None = None,
        temperament: Temperament | str | None = None,
        starting_pitch: str | None = None,
        moveable: bool | None = None,
    ) -> None:
        """Replace the voice's key settings; omitted settings keep their value."""
        if isinstance(temperament, str):
            temperament = get_temperament(temperament)
        if starting_pitch is not None:
            SymbolicPitch.parse(starting_pitch)
            self.starting_pitch = starting_pitch
        self.key = KeyContext(
            key_signature=self.key.key_signature if key_signature is None else key_signature,
            moveable=self.key.moveable if moveable is None else moveable,
            temperament=self.key.temperament if temperament is None else temperament,
        )
        logger.debug("Voice %r configured: %s", self.voice_id, self.key)

    def next_scope_id(self) -> int:
        return next(self._scope_ids)

    @property
    def current_note(self) -> NoteEvent | None:
        """The innermost open note scope, if any."""
        return self.note_scopes[-1] if self.note_scopes else None


class VoiceRegistry:
    """Identity lookup of voices; creating and destroying voices is up to the caller."""

    def __init__(self) -> None:
        self._voices: dict[Hashable, Voice] = {}

    def __contains__(self, voice_id: object) -> bool:
        return voice_id in self._voices

    def __len__(self) -> int:
        return len(self._voices)

    def add(self, voice: Voice) -> Voice:
        self._voices[voice.voice_id] = voice
        return voice

    def remove(self, voice_id: Hashable) -> None:
        self._voices.pop(voice_id, None)

    def lookup(self, voice_id: Hashable) -> Voice:
        try:
            return self._voices[voice_id]
        except KeyError:
            raise InvalidArgumentError(f"Unknown voice {voice_id!r}.") from None

    def on_scope_exit(self, voice_id: Hashable, block_id: Hashable) -> bool:
        """Run the undo registered by *block_id* on *voice_id*; a no-op if none is pending."""
        voice = self._voices.get(voice_id)
        if voice is None:
            logger.debug("Scope exit for unknown voice %r ignored", voice_id)
            return False
        return voice.modifiers.on_scope_exit((voice_id, block_id))
