"""Music utility functions and constants"""
from .music_theory import (
    KEY_NAMES, FLAT_NAMES, MODES,
    MAJOR_KEY_PROFILE, MINOR_KEY_PROFILE,
    MAJOR_SCALE, MINOR_SCALE, PC_TO_FIFTHS,
    normalize_pc, fifths_distance, scale_pitch_classes,
    pitch_class_name, get_key_name
)
from .logging import setup_logging

__all__ = [
    'KEY_NAMES', 'FLAT_NAMES', 'MODES',
    'MAJOR_KEY_PROFILE', 'MINOR_KEY_PROFILE',
    'MAJOR_SCALE', 'MINOR_SCALE', 'PC_TO_FIFTHS',
    'normalize_pc', 'fifths_distance', 'scale_pitch_classes',
    'pitch_class_name', 'get_key_name', 'setup_logging'
]
