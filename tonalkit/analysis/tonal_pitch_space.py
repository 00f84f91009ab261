"""
Tonal Pitch Space
Lerdahl's basic space for a chord in a key, chord-to-chord distance,
surface dissonance and melodic attraction
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

from tonalkit.core.errors import TonalDomainError
from tonalkit.core.pitch import validate_pitch_class
from tonalkit.utils.music_theory import MODES, fifths_distance, get_key_name, scale_pitch_classes

logger = logging.getLogger(__name__)

ROOT_LEVEL = 5
FIFTH_LEVEL = 4
CHORD_LEVEL = 3
DIATONIC_LEVEL = 2
CHROMATIC_LEVEL = 1


@dataclass(frozen=True)
class TPSKey:
    tonic: int
    mode: str = 'major'

    def __post_init__(self):
        validate_pitch_class(self.tonic, 'key tonic')
        if self.mode not in MODES:
            raise TonalDomainError(f"mode must be 'major' or 'minor' (got {self.mode!r})")

    @property
    def name(self) -> str:
        return get_key_name(self.tonic, self.mode)

    def scale(self) -> Tuple[int, ...]:
        return scale_pitch_classes(self.tonic, self.mode)

    def tonic_triad(self) -> 'TPSChord':
        third = 4 if self.mode == 'major' else 3
        return TPSChord(self.tonic, (self.tonic, (self.tonic + third) % 12, (self.tonic + 7) % 12))


@dataclass(frozen=True)
class TPSChord:
    """A chord as its root plus all member pitch classes"""
    root: int
    pcs: Tuple[int, ...]

    def __post_init__(self):
        validate_pitch_class(self.root, 'chord root')
        members = tuple(sorted({validate_pitch_class(pc, 'chord tone') for pc in self.pcs}))
        object.__setattr__(self, 'pcs', members)

    @classmethod
    def from_pcs(cls, pcs: Sequence[int]) -> 'TPSChord':
        """Chord whose first listed pitch class is the root"""
        if not pcs:
            raise TonalDomainError("a chord needs at least one pitch class")
        return cls(pcs[0], tuple(pcs))


def basic_space(chord: TPSChord, key: TPSKey) -> Tuple[int, ...]:
    """
    Level of every pitch class in the chord-in-key hierarchy

    5 root, 4 fifth above the root, 3 other chord tone, 2 diatonic, 1 chromatic.
    """
    scale = set(key.scale())
    chord_pcs = set(chord.pcs)
    fifth = (chord.root + 7) % 12

    space = []
    for pc in range(12):
        if pc == chord.root:
            level = ROOT_LEVEL
        elif pc == fifth:
            level = FIFTH_LEVEL
        elif pc in chord_pcs:
            level = CHORD_LEVEL
        elif pc in scale:
            level = DIATONIC_LEVEL
        else:
            level = CHROMATIC_LEVEL
        space.append(level)
    return tuple(space)


def tps_distance(chord_a: TPSChord, key_a: TPSKey, chord_b: TPSChord, key_b: TPSKey) -> int:
    """
    Distance from chord A in key A to chord B in key B

    Sum of the circle-of-fifths distance between the keys (when they differ),
    the circle-of-fifths distance between the roots, and the number of
    basic-space slots B fills that A does not. The last term counts levels
    gained only, so the measure is not symmetric in general.
    """
    space_a = basic_space(chord_a, key_a)
    space_b = basic_space(chord_b, key_b)

    region = 0
    if (key_a.tonic, key_a.mode) != (key_b.tonic, key_b.mode):
        region = fifths_distance(key_a.tonic, key_b.tonic)
    chord_steps = fifths_distance(chord_a.root, chord_b.root)
    new_slots = sum(max(0, level_b - level_a) for level_a, level_b in zip(space_a, space_b))

    return region + chord_steps + new_slots


def _circular_distance(a: int, b: int) -> int:
    steps = abs(a - b) % 12
    return min(steps, 12 - steps)


def surface_dissonance(pcs: Iterable[int], chord: TPSChord) -> int:
    """Sum over non-chord tones of the semitone distance to the nearest chord tone"""
    chord_pcs = set(chord.pcs)
    total = 0
    for pc in pcs:
        pc = validate_pitch_class(pc)
        if pc not in chord_pcs:
            # Against an empty chord every tone counts as a tritone away
            total += min((_circular_distance(pc, tone) for tone in chord_pcs), default=6)
    return total


def pitch_stability(pc: int, key: TPSKey) -> int:
    """Level of a pitch class in the key's tonic-triad basic space"""
    return basic_space(key.tonic_triad(), key)[validate_pitch_class(pc)]


def melodic_attraction(from_pc: int, to_pc: int, key: TPSKey) -> float:
    """Pull toward to_pc: its stability in the key over the squared semitone distance"""
    distance = _circular_distance(validate_pitch_class(from_pc), validate_pitch_class(to_pc))
    if distance == 0:
        return 0.0
    return pitch_stability(to_pc, key) / (distance * distance)
