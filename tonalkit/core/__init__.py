"""Core data structures: pitches, note events, scores and timing"""
from .errors import TonalDomainError
from .pitch import Pitch, midi_to_frequency, validate_pitch_class
from .midi_data import NoteEvent, Part, Score, TimeSignature, TempoMark
from .timing import (
    DURATION_MAP, MetricLevel, build_metric_levels, beat_strength,
    max_beat_strength, metric_position, duration_name, duration_ticks
)

__all__ = [
    'TonalDomainError', 'Pitch', 'midi_to_frequency', 'validate_pitch_class',
    'NoteEvent', 'Part', 'Score', 'TimeSignature', 'TempoMark',
    'DURATION_MAP', 'MetricLevel', 'build_metric_levels', 'beat_strength',
    'max_beat_strength', 'metric_position', 'duration_name', 'duration_ticks'
]
