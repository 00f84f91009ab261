"""
Harmonic Analysis
Chord and scale identification, harmonic rhythm and Roman-numeral labelling
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from tonalkit.analysis.key_analysis import KeyAnalyzer, KeyCandidate
from tonalkit.analysis.tonal_pitch_space import TPSChord
from tonalkit.core.errors import TonalDomainError
from tonalkit.core.midi_data import NoteEvent, Score
from tonalkit.utils.music_theory import MODES, pitch_class_name

logger = logging.getLogger(__name__)

SCALE_MATCH_THRESHOLD = 0.7


@dataclass(frozen=True)
class ChordType:
    name: str
    symbol: str
    intervals: Tuple[int, ...]

    @property
    def pcs(self) -> Tuple[int, ...]:
        """Members above a root of 0, compound intervals folded into the octave"""
        return tuple(sorted({interval % 12 for interval in self.intervals}))


@dataclass(frozen=True)
class ScaleType:
    name: str
    steps: Tuple[int, ...]

    @property
    def pcs(self) -> Tuple[int, ...]:
        degrees = [0]
        for step in self.steps[:-1]:
            degrees.append(degrees[-1] + step)
        return tuple(degrees)


def _rotate(steps: Sequence[int], n: int) -> Tuple[int, ...]:
    return tuple(steps[(i + n) % len(steps)] for i in range(len(steps)))


def _modes(names: Sequence[str], steps: Sequence[int]) -> List[ScaleType]:
    return [ScaleType(name, _rotate(steps, i)) for i, name in enumerate(names)]


CHORD_CATALOG = (
    # Triads
    ChordType('major', 'maj', (0, 4, 7)),
    ChordType('minor', 'min', (0, 3, 7)),
    ChordType('diminished', 'dim', (0, 3, 6)),
    ChordType('augmented', 'aug', (0, 4, 8)),
    # Sevenths
    ChordType('dominant 7th', '7', (0, 4, 7, 10)),
    ChordType('major 7th', 'maj7', (0, 4, 7, 11)),
    ChordType('minor 7th', 'min7', (0, 3, 7, 10)),
    ChordType('half-diminished 7th', 'm7b5', (0, 3, 6, 10)),
    ChordType('diminished 7th', 'dim7', (0, 3, 6, 9)),
    ChordType('minor-major 7th', 'mMaj7', (0, 3, 7, 11)),
    ChordType('augmented-major 7th', 'augMaj7', (0, 4, 8, 11)),
    # Extended
    ChordType('dominant 9th', '9', (0, 4, 7, 10, 14)),
    ChordType('major 9th', 'maj9', (0, 4, 7, 11, 14)),
    ChordType('minor 9th', 'min9', (0, 3, 7, 10, 14)),
    ChordType('dominant 11th', '11', (0, 4, 7, 10, 14, 17)),
    ChordType('major 11th', 'maj11', (0, 4, 7, 11, 14, 17)),
    ChordType('minor 11th', 'min11', (0, 3, 7, 10, 14, 17)),
    ChordType('dominant 13th', '13', (0, 4, 7, 10, 14, 17, 21)),
    ChordType('major 13th', 'maj13', (0, 4, 7, 11, 14, 17, 21)),
    ChordType('minor 13th', 'min13', (0, 3, 7, 10, 14, 17, 21)),
    # Suspended
    ChordType('suspended 2nd', 'sus2', (0, 2, 7)),
    ChordType('suspended 4th', 'sus4', (0, 5, 7)),
    # Added tone
    ChordType('add 9', 'add9', (0, 4, 7, 14)),
    ChordType('add 11', 'add11', (0, 4, 7, 17)),
    ChordType('6th', '6', (0, 4, 7, 9)),
    ChordType('6/9', '6/9', (0, 4, 7, 9, 14)),
    # Power chord
    ChordType('power chord', '5', (0, 7)),
)

# Only true ninth chords carry a 9 suffix in Roman numerals; add9 and 6/9 do not
NINTH_SYMBOLS = frozenset({'9', 'maj9', 'min9'})

SCALE_CATALOG = tuple(
    _modes(('Ionian', 'Dorian', 'Phrygian', 'Lydian', 'Mixolydian', 'Aeolian', 'Locrian'),
           (2, 2, 1, 2, 2, 2, 1))
    + _modes(('Harmonic Minor', 'Locrian #6', 'Ionian Augmented', 'Dorian #4',
              'Phrygian Dominant', 'Lydian #2', 'Super Locrian Diminished'),
             (2, 1, 2, 2, 1, 3, 1))
    + _modes(('Melodic Minor', 'Dorian b2', 'Lydian Augmented', 'Lydian Dominant',
              'Mixolydian b6', 'Aeolian b5', 'Altered'),
             (2, 1, 2, 2, 2, 2, 1))
    + [
        ScaleType('Pentatonic Major', (2, 2, 3, 2, 3)),
        ScaleType('Pentatonic Minor', (3, 2, 2, 3, 2)),
        ScaleType('Blues', (3, 2, 1, 1, 3, 2)),
        ScaleType('Whole Tone', (2, 2, 2, 2, 2, 2)),
        ScaleType('Octatonic Half-Whole', (1, 2, 1, 2, 1, 2, 1, 2)),
        ScaleType('Octatonic Whole-Half', (2, 1, 2, 1, 2, 1, 2, 1)),
        ScaleType('Chromatic', (1,) * 12),
    ]
)

# Numerals by semitones above the tonic, with the diatonic degree each maps to
_DEGREES_MAJOR = (
    ('I', 1), ('bII', 2), ('II', 2), ('bIII', 3), ('III', 3), ('IV', 4),
    ('#IV', 4), ('V', 5), ('bVI', 6), ('VI', 6), ('bVII', 7), ('VII', 7),
)
_DEGREES_MINOR = (
    ('I', 1), ('bII', 2), ('II', 2), ('III', 3), ('#III', 3), ('IV', 4),
    ('#IV', 4), ('V', 5), ('VI', 6), ('#VI', 6), ('VII', 7), ('#VII', 7),
)


@dataclass(frozen=True)
class ChordLabel:
    name: str
    symbol: str
    root: int
    pcs: Tuple[int, ...]

    @property
    def display(self) -> str:
        return f"{pitch_class_name(self.root)}{self.symbol}"

    def to_tps_chord(self) -> TPSChord:
        return TPSChord(self.root, self.pcs)

    def to_dict(self) -> Dict:
        return {'name': self.name, 'symbol': self.symbol, 'root': self.root,
                'pcs': list(self.pcs), 'display': self.display}


@dataclass(frozen=True)
class ScaleMatch:
    name: str
    root: int
    pcs: Tuple[int, ...]
    score: float


@dataclass(frozen=True)
class RomanNumeral:
    numeral: str
    degree: int
    quality: str


@dataclass
class HarmonicEvent:
    """Chord sounding at a sampled tick (label is None when nothing matched)"""
    tick: int
    label: Optional[ChordLabel]
    events: List[NoteEvent] = field(default_factory=list)


def chord_from_pcs(pcs: Sequence[int], root: Optional[int] = None) -> Optional[ChordLabel]:
    """
    Match pitch classes against the chord catalog

    Candidate roots are tried in the given order (or only the given root);
    the first catalog entry whose shape matches wins.
    """
    members = list(dict.fromkeys(pc % 12 for pc in pcs))
    if not members:
        return None

    unique = tuple(sorted(members))
    roots = [root % 12] if root is not None else members
    for candidate in roots:
        shape = tuple(sorted((pc - candidate) % 12 for pc in unique))
        for chord in CHORD_CATALOG:
            if chord.pcs == shape:
                return ChordLabel(chord.name, chord.symbol, candidate, unique)
    return None


def identify_chord(events: Sequence[NoteEvent]) -> Optional[ChordLabel]:
    """Chord formed by simultaneous events, trying the bass note as root first"""
    if len(events) < 2:
        return None

    by_pitch = sorted(events, key=lambda event: event.pitch.midi)
    ordered = [by_pitch[0].pitch_class] + sorted({e.pitch_class for e in by_pitch[1:]} - {by_pitch[0].pitch_class})
    return chord_from_pcs(ordered)


def identify_scale(events: Sequence[NoteEvent]) -> Optional[ScaleMatch]:
    """Best-overlapping catalog scale across all transpositions, if it overlaps at least 70%"""
    if len(events) < 3:
        return None

    unique = {event.pitch_class for event in events}
    best = None
    for root in range(12):
        for scale in SCALE_CATALOG:
            transposed = {(pc + root) % 12 for pc in scale.pcs}
            score = len(unique & transposed) / max(len(unique), len(transposed))
            if best is None or score > best.score:
                best = ScaleMatch(scale.name, root, tuple(sorted(transposed)), score)

    if best is not None and best.score >= SCALE_MATCH_THRESHOLD:
        return best
    return None


def harmonic_rhythm(score: Score, window_ticks: Optional[int] = None) -> List[HarmonicEvent]:
    """Chord sounding at every window_ticks step (default one quarter note)"""
    window = score.ticks_per_quarter if window_ticks is None else window_ticks
    if window <= 0:
        raise TonalDomainError(f"window size must be > 0 (got {window})")

    events = score.all_events()
    if not events:
        return []

    result = []
    for tick in range(0, score.max_tick() + 1, window):
        sounding = [event for event in events if event.contains_tick(tick)]
        result.append(HarmonicEvent(tick, identify_chord(sounding), sounding))
    return result


def harmonic_change_rate(harmonic_events: Sequence[HarmonicEvent]) -> float:
    """Share of consecutive labelled samples whose chord differs"""
    labels = [(e.label.root, e.label.symbol) for e in harmonic_events if e.label is not None]
    if len(labels) < 2:
        return 0.0
    changes = sum(1 for a, b in zip(labels, labels[1:]) if a != b)
    return changes / (len(labels) - 1)


def _quality(symbol: str) -> str:
    sym = symbol.lower()
    if 'dim' in sym or sym == 'm7b5':
        return 'dim'
    if 'aug' in sym:
        return 'aug'
    if sym.startswith('min') or sym.startswith('mmaj'):
        return 'min'
    return 'maj'


def roman_numeral(chord: ChordLabel, tonic: int, mode: str) -> RomanNumeral:
    """Label one chord relative to a key: case from quality, o/+ and 7/9 suffixes"""
    if mode not in MODES:
        raise TonalDomainError(f"mode must be 'major' or 'minor' (got {mode!r})")

    interval = (chord.root - tonic) % 12
    base, degree = (_DEGREES_MINOR if mode == 'minor' else _DEGREES_MAJOR)[interval]
    quality = _quality(chord.symbol)

    numeral = base.lower() if quality in ('min', 'dim') else base
    if quality == 'dim':
        numeral += 'o'
    elif quality == 'aug':
        numeral += '+'
    if '7' in chord.symbol:
        numeral += '7'
    if chord.symbol in NINTH_SYMBOLS:
        numeral += '9'

    return RomanNumeral(numeral, degree, quality)


def roman_numeral_analysis(chords: Sequence[ChordLabel], key: Tuple[int, str]) -> List[RomanNumeral]:
    tonic, mode = key
    return [roman_numeral(chord, tonic, mode) for chord in chords]


class HarmonicAnalyzer:
    """Chord-by-chord analysis of a score against a detected or supplied key"""

    def __init__(self, key_analyzer: Optional[KeyAnalyzer] = None):
        self.key_analyzer = key_analyzer or KeyAnalyzer()

    def analyze(self, score: Score, window_ticks: Optional[int] = None,
                key: Optional[Tuple[int, str]] = None) -> List[Dict]:
        """
        Sample chords and label each with a Roman numeral

        Consecutive samples with the same chord are merged into one entry.
        """
        if key is None:
            best: KeyCandidate = self.key_analyzer.analyze(score).best
            key = best.key

        progression = []
        for event in harmonic_rhythm(score, window_ticks):
            if event.label is None:
                continue
            if progression and progression[-1]['chord'] == event.label:
                continue
            progression.append({'tick': event.tick, 'chord': event.label})

        numerals = roman_numeral_analysis([entry['chord'] for entry in progression], key)
        logger.debug("Labelled %d chords in %s", len(progression), key)
        return [
            {
                'tick': entry['tick'],
                'chord': entry['chord'].display,
                'numeral': numeral.numeral,
                'degree': numeral.degree,
                'quality': numeral.quality,
            }
            for entry, numeral in zip(progression, numerals)
        ]
