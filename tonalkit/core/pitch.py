"""Pitch representation and frequency conversion"""
import math
import re
from dataclasses import dataclass
from numbers import Integral

from tonalkit.core.errors import TonalDomainError
from tonalkit.utils.music_theory import normalize_pc, pitch_class_name

MIN_MIDI_NOTE = 0
MAX_MIDI_NOTE = 127
MIDDLE_C = 60
A4_MIDI = 69

_PITCH_NAME_RE = re.compile(r'^([A-Ga-g])(#|b)?(-?\d+)$')
_LETTER_PCS = {'C': 0, 'D': 2, 'E': 4, 'F': 5, 'G': 7, 'A': 9, 'B': 11}


@dataclass(frozen=True)
class Pitch:
    """A MIDI pitch with its pitch class, octave and optional cents offset"""
    midi: int
    cents_deviation: int = 0

    def __post_init__(self):
        if not isinstance(self.midi, Integral) or not MIN_MIDI_NOTE <= self.midi <= MAX_MIDI_NOTE:
            raise TonalDomainError(f"MIDI value must be an integer 0-127 (got {self.midi!r})")
        object.__setattr__(self, 'midi', int(self.midi))

    @property
    def pitch_class(self) -> int:
        """Pitch class (0-11) for harmonic analysis"""
        return self.midi % 12

    @property
    def octave(self) -> int:
        """Octave number, middle C is octave 4"""
        return self.midi // 12 - 1

    @property
    def name(self) -> str:
        return f"{pitch_class_name(self.pitch_class)}{self.octave}"

    def frequency(self, tuning_hz: float = 440.0) -> float:
        """Frequency in Hz under 12-TET, including the cents deviation"""
        return tuning_hz * 2.0 ** ((self.midi - A4_MIDI + self.cents_deviation / 100.0) / 12.0)

    @classmethod
    def from_pc_octave(cls, pc: int, octave: int) -> 'Pitch':
        midi = (octave + 1) * 12 + normalize_pc(pc)
        if not MIN_MIDI_NOTE <= midi <= MAX_MIDI_NOTE:
            raise TonalDomainError(
                f"Pitch class {normalize_pc(pc)} in octave {octave} yields MIDI {midi}, outside 0-127"
            )
        return cls(midi)

    @classmethod
    def from_name(cls, name: str) -> 'Pitch':
        """Parse names like 'C4', 'F#5' or 'Bb3'"""
        match = _PITCH_NAME_RE.match(name.strip())
        if not match:
            raise TonalDomainError(f"Invalid pitch name: {name!r}")

        letter, accidental, octave = match.groups()
        pc = _LETTER_PCS[letter.upper()]
        if accidental == '#':
            pc += 1
        elif accidental == 'b':
            pc -= 1
        # B#4 is C5 and Cb4 is B3, so the accidental may cross the octave
        return cls((int(octave) + 1) * 12 + pc)

    @classmethod
    def from_frequency(cls, freq: float, tuning_hz: float = 440.0) -> 'Pitch':
        """Nearest MIDI pitch for a frequency, keeping the residue as cents"""
        if not math.isfinite(freq) or freq <= 0:
            raise TonalDomainError(f"frequency must be finite and > 0 (got {freq})")

        midi_exact = A4_MIDI + 12 * math.log2(freq / tuning_hz)
        midi = int(round(midi_exact))
        if not MIN_MIDI_NOTE <= midi <= MAX_MIDI_NOTE:
            raise TonalDomainError(f"frequency {freq} Hz is outside the MIDI range")
        return cls(midi, cents_deviation=int(round((midi_exact - midi) * 100)))


def midi_to_frequency(midi: float, tuning_hz: float = 440.0) -> float:
    """12-TET frequency of a (possibly fractional) MIDI note number"""
    return tuning_hz * 2.0 ** ((midi - A4_MIDI) / 12.0)


def validate_pitch_class(pc: int, label: str = 'pitch class') -> int:
    """Return pc unchanged if it is an integer 0-11, otherwise raise"""
    if isinstance(pc, bool) or not isinstance(pc, Integral) or not 0 <= pc <= 11:
        raise TonalDomainError(f"{label} must be an integer 0-11 (got {pc!r})")
    return int(pc)
