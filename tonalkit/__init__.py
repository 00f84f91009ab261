"""
tonalkit - tonal analysis of symbolic scores
Pitch-class sets, key detection, roughness and tension models,
Spiral Array and Tonal Pitch Space
"""
__version__ = "0.1.0"
