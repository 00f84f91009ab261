"""Music analysis tools"""
from .key_analysis import KeyAnalyzer, detect_key, detect_key_windowed, detect_key_tiv, detect_modulations
from .harmony import HarmonicAnalyzer, identify_chord, identify_scale, harmonic_rhythm, roman_numeral_analysis
from .dissonance import DissonanceCalculator, roughness, roughness_from_midi
from .pitch_class_set import PitchClassSet, normal_form, prime_form, interval_class_vector, forte_lookup
from .tiv import tiv, tiv_distance, tiv_consonance, chroma_vector, dft_components
from .tension import compute_tension, TensionOptions, TensionWeights
from .score_tension import score_tension
from .fingerprint import musical_fingerprint

__all__ = [
    'KeyAnalyzer', 'detect_key', 'detect_key_windowed', 'detect_key_tiv', 'detect_modulations',
    'HarmonicAnalyzer', 'identify_chord', 'identify_scale', 'harmonic_rhythm', 'roman_numeral_analysis',
    'DissonanceCalculator', 'roughness', 'roughness_from_midi',
    'PitchClassSet', 'normal_form', 'prime_form', 'interval_class_vector', 'forte_lookup',
    'tiv', 'tiv_distance', 'tiv_consonance', 'chroma_vector', 'dft_components',
    'compute_tension', 'TensionOptions', 'TensionWeights',
    'score_tension', 'musical_fingerprint',
]
