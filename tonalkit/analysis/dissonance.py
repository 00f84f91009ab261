"""
Dissonance calculation and ranking
Plomp-Levelt sensory roughness over harmonic partials
"""
import logging
import math
from itertools import combinations
from numbers import Integral
from typing import List, Optional, Sequence, Tuple

import numpy as np

from tonalkit.core.errors import TonalDomainError
from tonalkit.core.pitch import midi_to_frequency
from tonalkit.utils.music_theory import get_interval_from_root

logger = logging.getLogger(__name__)

DEFAULT_NUM_HARMONICS = 6


def _critical_bandwidth(f_min: float) -> float:
    # Glasberg & Moore (1990) ERB approximation
    return 24.7 * (4.37 * f_min / 1000.0 + 1.0)


def _partial_roughness(f1: float, a1: float, f2: float, a2: float) -> float:
    """Plomp-Levelt roughness of two pure tones, peaking near a quarter of the critical band"""
    x = abs(f2 - f1) / _critical_bandwidth(min(f1, f2))
    curve = math.exp(-3.5 * x) - math.exp(-5.75 * x)
    return max(0.0, curve) * a1 * a2


def roughness(frequencies: Sequence[float], num_harmonics: int = DEFAULT_NUM_HARMONICS) -> float:
    """
    Aggregate sensory roughness of simultaneous tones

    Each fundamental contributes num_harmonics partials with amplitude 1/h and
    every pair of partials is scored on the Plomp-Levelt curve.

    Args:
        frequencies: Fundamentals in Hz, each finite and > 0
        num_harmonics: Partials per tone, >= 1

    Returns: Roughness >= 0, and 0 for fewer than two tones
    """
    for freq in frequencies:
        if not math.isfinite(freq) or freq <= 0:
            raise TonalDomainError(f"Frequency must be a finite number > 0, got {freq}")
    if isinstance(num_harmonics, bool) or not isinstance(num_harmonics, Integral) or num_harmonics < 1:
        raise TonalDomainError(f"num_harmonics must be an integer >= 1, got {num_harmonics}")

    if len(frequencies) < 2:
        return 0.0

    partials = [(freq * h, 1.0 / h) for freq in frequencies for h in range(1, num_harmonics + 1)]
    return sum(_partial_roughness(f1, a1, f2, a2) for (f1, a1), (f2, a2) in combinations(partials, 2))


def roughness_from_midi(midi_notes: Sequence[float], tuning_hz: float = 440.0,
                        num_harmonics: int = DEFAULT_NUM_HARMONICS) -> float:
    """Roughness of MIDI note numbers under 12-TET"""
    if not math.isfinite(tuning_hz) or tuning_hz <= 0:
        raise TonalDomainError(f"tuning_hz must be a finite number > 0, got {tuning_hz}")
    return roughness([midi_to_frequency(note, tuning_hz) for note in midi_notes], num_harmonics)


class DissonanceCalculator:
    """Ranks and thins chord tones by how much roughness they add to a sonority"""

    def __init__(self, max_voices: int = 4, num_harmonics: int = DEFAULT_NUM_HARMONICS,
                 tuning_hz: float = 440.0, consonance_preference: int = 0):
        """
        Args:
            max_voices: Upper bound on notes kept by select_notes_by_dissonance
            num_harmonics: Partials per tone in the roughness model
            tuning_hz: A4 reference frequency
            consonance_preference: Negative keeps the roughest notes, positive the smoothest
        """
        if max_voices < 1:
            raise TonalDomainError(f"max_voices must be >= 1 (got {max_voices})")
        self.max_voices = max_voices
        self.num_harmonics = num_harmonics
        self.tuning_hz = tuning_hz
        self.consonance_preference = consonance_preference

    def get_interval_from_root(self, root_note: int, note: int) -> int:
        """Calculate semitone interval from root note"""
        return get_interval_from_root(root_note, note)

    def chord_roughness(self, midi_notes: Sequence[int]) -> float:
        return roughness_from_midi(midi_notes, self.tuning_hz, self.num_harmonics)

    def interval_roughness(self, lower: int, upper: int) -> float:
        """Roughness of a dyad"""
        return self.chord_roughness([lower, upper])

    def added_roughness(self, note: int, context_notes: Sequence[int]) -> float:
        """Roughness the note adds on top of the context sonority"""
        base = self.chord_roughness(context_notes)
        return self.chord_roughness(list(context_notes) + [note]) - base

    def rank_notes(self, candidates: Sequence[int], context_notes: Sequence[int]) -> List[Tuple[int, float]]:
        """Candidates with their added roughness, roughest first (ties by pitch)"""
        scored = [(note, self.added_roughness(note, context_notes)) for note in candidates]
        scored.sort(key=lambda item: (-item[1], item[0]))
        return scored

    def select_notes_by_dissonance(self, notes: Sequence[int]) -> List[int]:
        """
        Reduce a sonority to max_voices notes:
        1. Always keep the lowest note
        2. Keep the highest note unless it doubles the bass pitch class
        3. Fill remaining voices by added roughness, ordered by consonance preference
        """
        unique = sorted(set(notes))
        if len(unique) <= self.max_voices:
            return unique

        bass_note = unique[0]
        selected = [bass_note]

        treble_note = unique[-1]
        if self.get_interval_from_root(bass_note, treble_note) != 0 and len(selected) < self.max_voices:
            selected.append(treble_note)

        remaining = [note for note in unique if note not in selected]
        ranked = self.rank_notes(remaining, selected)
        if self.consonance_preference > 0:
            ranked.reverse()

        for note, _score in ranked:
            if len(selected) >= self.max_voices:
                break
            selected.append(note)

        logger.debug("Reduced %d notes to %s", len(unique), sorted(selected))
        return sorted(selected)

    def sonority_profile(self, midi_notes: Sequence[int]) -> Optional[dict]:
        """Pairwise dyad roughness for a sonority, None for fewer than two notes"""
        unique = sorted(set(midi_notes))
        if len(unique) < 2:
            return None

        pairs = {
            f"{low}-{high}": self.interval_roughness(low, high)
            for low, high in combinations(unique, 2)
        }
        values = np.array(list(pairs.values()))
        return {
            'total': self.chord_roughness(unique),
            'pairs': pairs,
            'max_pair': max(pairs, key=pairs.get),
            'mean_pair': float(values.mean()),
        }
