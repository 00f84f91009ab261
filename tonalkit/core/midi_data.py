"""
Score Data Model
Tick-based note events grouped into parts, with a pretty_midi import adapter
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

import pretty_midi

from tonalkit.core.errors import TonalDomainError
from tonalkit.core.pitch import Pitch

logger = logging.getLogger(__name__)

DEFAULT_TICKS_PER_QUARTER = 480
DEFAULT_TEMPO = 120.0


@dataclass
class NoteEvent:
    """
    A single note in a score.
    Onset and duration are in ticks relative to the score's ticks-per-quarter.
    Only the rhythm transformers rewrite onsets after construction.
    """
    pitch: Pitch
    onset: int
    duration: int
    velocity: int = 64
    voice: int = 0

    def __post_init__(self):
        """Reject values outside the defined ranges"""
        if self.onset < 0:
            raise TonalDomainError(f"onset must be >= 0 (got {self.onset})")
        if self.duration <= 0:
            raise TonalDomainError(f"duration must be > 0 (got {self.duration})")
        if not 0 <= self.velocity <= 127:
            raise TonalDomainError(f"velocity must be 0-127 (got {self.velocity})")

    @property
    def end(self) -> int:
        return self.onset + self.duration

    @property
    def pitch_class(self) -> int:
        """Get pitch class (0-11) for harmonic analysis"""
        return self.pitch.pitch_class

    def overlaps(self, start: int, end: int) -> bool:
        """Check if this note sounds anywhere inside [start, end)"""
        return self.onset < end and self.end > start

    def contains_tick(self, tick: int) -> bool:
        """Check if the given tick falls within this note"""
        return self.onset <= tick < self.end

    @classmethod
    def from_midi(cls, midi: int, onset: int, duration: int, velocity: int = 64,
                  voice: int = 0) -> 'NoteEvent':
        return cls(Pitch(midi), onset, duration, velocity, voice)


@dataclass(frozen=True)
class TimeSignature:
    numerator: int = 4
    denominator: int = 4
    at_tick: int = 0


@dataclass(frozen=True)
class TempoMark:
    bpm: float = DEFAULT_TEMPO
    at_tick: int = 0


@dataclass
class Part:
    """An instrument part holding note events sorted by onset"""
    name: str = "Untitled Part"
    events: List[NoteEvent] = field(default_factory=list)
    program: int = 0

    def add_note(self, note: NoteEvent):
        """Add a note, keeping events ordered by onset"""
        self.events.append(note)
        self.events.sort(key=lambda e: (e.onset, e.pitch.midi))


@dataclass
class Score:
    """
    Complete score: parts plus the tick resolution and tempo/meter maps.
    The tick resolution is always supplied by the caller.
    """
    ticks_per_quarter: int = DEFAULT_TICKS_PER_QUARTER
    tuning_hz: float = 440.0
    parts: List[Part] = field(default_factory=list)
    time_signatures: List[TimeSignature] = field(default_factory=list)
    tempo_changes: List[TempoMark] = field(default_factory=list)
    title: str = ""

    def __post_init__(self):
        if self.ticks_per_quarter <= 0:
            raise TonalDomainError(f"ticks_per_quarter must be > 0 (got {self.ticks_per_quarter})")
        if self.tuning_hz <= 0:
            raise TonalDomainError(f"tuning_hz must be > 0 (got {self.tuning_hz})")

    def add_part(self, part: Optional[Part] = None) -> Part:
        """Add a new part to the score"""
        if part is None:
            part = Part(name=f"Part {len(self.parts) + 1}")
        self.parts.append(part)
        return part

    def all_events(self) -> List[NoteEvent]:
        """All note events across parts"""
        return [event for part in self.parts for event in part.events]

    def max_tick(self) -> int:
        """Tick at which the last note ends (0 for an empty score)"""
        return max((event.end for event in self.all_events()), default=0)

    def events_at_tick(self, tick: int) -> List[NoteEvent]:
        """Get all notes sounding at the specified tick"""
        return [event for event in self.all_events() if event.contains_tick(tick)]

    def events_in_range(self, start: int, end: int) -> List[NoteEvent]:
        """Get all notes that overlap with [start, end)"""
        return [event for event in self.all_events() if event.overlaps(start, end)]

    @property
    def time_signature(self) -> TimeSignature:
        """First time signature, 4/4 when none is set"""
        return self.time_signatures[0] if self.time_signatures else TimeSignature()

    def tick_to_seconds(self, tick: int) -> float:
        """Convert ticks to seconds through the tempo map"""
        seconds = 0.0
        prev_tick = 0
        bpm = self.tempo_changes[0].bpm if self.tempo_changes else DEFAULT_TEMPO

        for mark in self.tempo_changes:
            if mark.at_tick >= tick:
                break
            seconds += (mark.at_tick - prev_tick) / self.ticks_per_quarter * (60.0 / bpm)
            prev_tick = mark.at_tick
            bpm = mark.bpm

        return seconds + (tick - prev_tick) / self.ticks_per_quarter * (60.0 / bpm)

    def ticks_to_beats(self, ticks: int) -> float:
        return ticks / self.ticks_per_quarter

    def beats_to_ticks(self, beats: float) -> int:
        return int(round(beats * self.ticks_per_quarter))

    @classmethod
    def from_events(cls, events: Iterable[NoteEvent], ticks_per_quarter: int = DEFAULT_TICKS_PER_QUARTER,
                    **kwargs) -> 'Score':
        """Wrap a flat event list in a single-part score"""
        score = cls(ticks_per_quarter=ticks_per_quarter, **kwargs)
        score.add_part(Part(name="Part 1", events=sorted(events, key=lambda e: (e.onset, e.pitch.midi))))
        return score

    @classmethod
    def from_pretty_midi(cls, pm: pretty_midi.PrettyMIDI, include_drums: bool = False) -> 'Score':
        """Build a tick-based score from a pretty_midi.PrettyMIDI object"""
        score = cls(ticks_per_quarter=pm.resolution)

        for ts in pm.time_signature_changes:
            score.time_signatures.append(
                TimeSignature(int(ts.numerator), int(ts.denominator), int(pm.time_to_tick(ts.time)))
            )

        tempo_times, tempi = pm.get_tempo_changes()
        for time, bpm in zip(tempo_times, tempi):
            score.tempo_changes.append(TempoMark(float(bpm), int(pm.time_to_tick(time))))

        for instrument in pm.instruments:
            if instrument.is_drum and not include_drums:
                continue

            part = Part(name=instrument.name or f"Part {len(score.parts) + 1}",
                        program=instrument.program)
            for pm_note in instrument.notes:
                # pretty_midi hands back numpy integers; keep plain ints for JSON output
                onset = int(pm.time_to_tick(pm_note.start))
                # Grace notes can collapse to zero ticks at low resolutions
                duration = max(1, int(pm.time_to_tick(pm_note.end)) - onset)
                part.events.append(NoteEvent.from_midi(int(pm_note.pitch), onset, duration, int(pm_note.velocity)))
            part.events.sort(key=lambda e: (e.onset, e.pitch.midi))
            score.parts.append(part)

        logger.debug("Imported %d parts, %d events at %d ticks/quarter",
                     len(score.parts), len(score.all_events()), score.ticks_per_quarter)
        return score

    @classmethod
    def from_midi_file(cls, filename: str, include_drums: bool = False) -> 'Score':
        """Load a MIDI file with pretty_midi"""
        score = cls.from_pretty_midi(pretty_midi.PrettyMIDI(filename), include_drums=include_drums)
        score.title = filename
        return score


def collect_events(source) -> List[NoteEvent]:
    """Accept either a Score or an iterable of NoteEvents"""
    if isinstance(source, Score):
        return source.all_events()
    return list(source)


def sounding_pitch_classes(events: Iterable[NoteEvent]) -> Tuple[int, ...]:
    """Distinct pitch classes in order of first appearance"""
    seen = []
    for event in events:
        if event.pitch_class not in seen:
            seen.append(event.pitch_class)
    return tuple(seen)
