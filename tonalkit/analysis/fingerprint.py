"""
Musical fingerprint
One JSON-ready summary of a score's pitch content, key, tonal geometry,
harmonic rhythm, tension and pitch-set form
"""
import json
import logging
from typing import Dict, List, Optional, Sequence, Set

import numpy as np

from tonalkit.analysis.harmony import harmonic_change_rate, harmonic_rhythm
from tonalkit.analysis.key_analysis import detect_key, pc_distribution
from tonalkit.analysis.pitch_class_set import PitchClassSet
from tonalkit.analysis.score_tension import score_tension, spiral_tension_curve
from tonalkit.analysis.tiv import dft_components
from tonalkit.analysis.tonal_pitch_space import TPSKey
from tonalkit.core.midi_data import NoteEvent, Score

logger = logging.getLogger(__name__)

FORM_SIMILARITY_THRESHOLD = 0.7


def jaccard_similarity(set1: Set[int], set2: Set[int]) -> float:
    union = len(set1 | set2)
    return len(set1 & set2) / union if union > 0 else 0.0


def segment_by_pitch_content(events: Sequence[NoteEvent],
                             similarity_threshold: float = FORM_SIMILARITY_THRESHOLD) -> List[List[NoteEvent]]:
    """
    Split onset-ordered events wherever the accumulated pitch-class set
    drifts too far from the previous one
    """
    segments = []
    current: List[NoteEvent] = []
    last_pitch_set: Set[int] = set()

    for event in sorted(events, key=lambda e: (e.onset, e.pitch.midi)):
        current.append(event)
        segment_pitch_set = {e.pitch_class for e in current}
        if last_pitch_set and jaccard_similarity(segment_pitch_set, last_pitch_set) < similarity_threshold:
            segments.append(current[:-1])
            current = [event]
            segment_pitch_set = {event.pitch_class}
        last_pitch_set = segment_pitch_set

    if current:
        segments.append(current)
    return segments


def section_label(index: int) -> str:
    """A to Z, then A1 to Z1, A2 and so on"""
    cycle, letter = divmod(index, 26)
    return chr(65 + letter) + (str(cycle) if cycle else '')


def form_string(segments: Sequence[Sequence[NoteEvent]],
                similarity_threshold: float = FORM_SIMILARITY_THRESHOLD) -> str:
    """Label per segment; segments with similar pitch content share a label"""
    letter_sets: List[Set[int]] = []
    letters = ""
    for segment in segments:
        pitch_set = {event.pitch_class for event in segment}
        for i, existing in enumerate(letter_sets):
            if jaccard_similarity(pitch_set, existing) >= similarity_threshold:
                letters += section_label(i)
                break
        else:
            letter_sets.append(pitch_set)
            letters += section_label(len(letter_sets) - 1)
    return letters


def musical_fingerprint(score: Score, window_ticks: Optional[int] = None) -> Dict:
    """
    Summarize a score

    Raises TonalDomainError for a score without events (no key to report).

    Args:
        score: Score to summarize
        window_ticks: Window for the harmonic-rhythm, strain and tension
            measures (default one quarter note)
    """
    events = score.all_events()
    best = detect_key(score).best
    key = TPSKey(best.tonic, best.mode)

    distribution = pc_distribution(events)
    distribution = distribution / distribution.sum()

    pitch_content = PitchClassSet(event.pitch_class for event in events)
    strain = [point.value for point in spiral_tension_curve(score, key, window_ticks)]
    tension = [point.composite for point in score_tension(score, window_ticks, key=key)]

    segments = segment_by_pitch_content(events)
    time_sig = score.time_signature

    fingerprint = {
        'title': score.title,
        'ticks_per_quarter': score.ticks_per_quarter,
        'meter': f"{time_sig.numerator}/{time_sig.denominator}",
        'note_count': len(events),
        'pitch_class_distribution': [round(float(v), 6) for v in distribution],
        'key': best.to_dict(),
        'pitch_content': {
            'pcs': list(pitch_content.pcs),
            'prime_form': list(pitch_content.prime_form()),
            'forte_name': pitch_content.forte_name(),
            'interval_class_vector': list(pitch_content.interval_class_vector()),
        },
        'dft_components': {name: round(value, 6) for name, value in dft_components(distribution).items()},
        'mean_tensile_strain': round(float(np.mean(strain)), 6) if strain else 0.0,
        'harmonic_change_rate': round(harmonic_change_rate(harmonic_rhythm(score, window_ticks)), 6),
        'mean_tension': round(float(np.mean(tension)), 6) if tension else 0.0,
        'form_string': form_string(segments),
        'segments': [
            {
                'start_tick': int(segment[0].onset),
                'pitch_set': sorted({event.pitch_class for event in segment}),
                'density': len(segment) / time_sig.numerator,
            }
            for segment in segments
        ],
    }
    logger.debug("Fingerprinted %d events: key %s, form %s",
                 len(events), best.name, fingerprint['form_string'])
    return fingerprint


def save_fingerprint(fingerprint: Dict, path: str):
    with open(path, 'w') as f:
        json.dump(fingerprint, f, indent=2)
    logger.info("Saved musical fingerprint to %s", path)
