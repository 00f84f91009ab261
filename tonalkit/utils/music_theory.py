"""Music theory constants and basic functions"""
from types import MappingProxyType
from typing import Tuple

# Key names for display
KEY_NAMES = ('C', 'C#', 'D', 'D#', 'E', 'F', 'F#', 'G', 'G#', 'A', 'A#', 'B')
FLAT_NAMES = ('C', 'Db', 'D', 'Eb', 'E', 'F', 'Gb', 'G', 'Ab', 'A', 'Bb', 'B')

# Keys that are conventionally spelled with flats
FLAT_MAJOR_TONICS = frozenset({1, 3, 5, 8, 10})        # Db, Eb, F, Ab, Bb
FLAT_MINOR_TONICS = frozenset({0, 1, 3, 5, 7, 8, 10})  # C, Db, Eb, F, G, Ab, Bb

MODES = ('major', 'minor')

# Scale templates relative to a tonic of 0
MAJOR_SCALE = (0, 2, 4, 5, 7, 9, 11)
MINOR_SCALE = (0, 2, 3, 5, 7, 8, 10)  # natural minor

# Key profiles for major and minor keys (Krumhansl-Kessler probe tone ratings)
MAJOR_KEY_PROFILE = (6.35, 2.23, 3.48, 2.33, 4.38, 4.09, 2.52, 5.19, 2.39, 3.66, 2.29, 2.88)
MINOR_KEY_PROFILE = (6.33, 2.68, 3.52, 5.38, 2.60, 3.53, 2.54, 4.75, 3.98, 2.69, 3.34, 3.17)

# Temperley (2001) corpus-derived profiles
TEMPERLEY_MAJOR_PROFILE = (5.0, 2.0, 3.5, 2.0, 4.5, 4.0, 2.0, 4.5, 2.0, 3.5, 1.5, 4.0)
TEMPERLEY_MINOR_PROFILE = (5.0, 2.0, 3.5, 4.5, 2.0, 3.5, 2.0, 4.5, 3.5, 2.0, 1.5, 4.0)

# Position of each pitch class on the line of fifths (C=0, G=1, D=2, ...)
PC_TO_FIFTHS = (0, 7, 2, 9, 4, 11, 6, 1, 8, 3, 10, 5)

# Interval names by semitone count from the root
INTERVAL_NAMES = MappingProxyType({
    0: 'Unison',
    1: 'Minor Second',
    2: 'Major Second',
    3: 'Minor Third',
    4: 'Major Third',
    5: 'Perfect Fourth',
    6: 'Tritone',
    7: 'Perfect Fifth',
    8: 'Minor Sixth',
    9: 'Major Sixth',
    10: 'Minor Seventh',
    11: 'Major Seventh',
})


def normalize_pc(pc: int) -> int:
    """Normalize any integer to a pitch class in 0-11"""
    return ((pc % 12) + 12) % 12


def get_interval_from_root(root_note: int, note: int) -> int:
    """Calculate semitone interval from root note"""
    return (note - root_note) % 12


def fifths_distance(pc_a: int, pc_b: int) -> int:
    """Number of steps between two pitch classes around the circle of fifths"""
    steps = abs(PC_TO_FIFTHS[normalize_pc(pc_a)] - PC_TO_FIFTHS[normalize_pc(pc_b)])
    return min(steps, 12 - steps)


def scale_pitch_classes(tonic: int, mode: str) -> Tuple[int, ...]:
    """Diatonic pitch classes of a major or natural minor key"""
    template = MAJOR_SCALE if mode == 'major' else MINOR_SCALE
    return tuple((degree + tonic) % 12 for degree in template)


def pitch_class_name(pc: int, flats: bool = False) -> str:
    """Sharp (or flat) name for a pitch class"""
    names = FLAT_NAMES if flats else KEY_NAMES
    return names[normalize_pc(pc)]


def get_key_name(root: int, mode: str) -> str:
    """Convert key root and mode to readable name"""
    root = normalize_pc(root)
    use_flats = root in (FLAT_MAJOR_TONICS if mode == 'major' else FLAT_MINOR_TONICS)
    return f"{pitch_class_name(root, flats=use_flats)} {mode}"
