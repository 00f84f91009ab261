"""Unit tests for Lerdahl's tonal pitch space"""
import unittest

from tonalkit.analysis.tonal_pitch_space import (
    TPSChord, TPSKey, basic_space, melodic_attraction, pitch_stability,
    surface_dissonance, tps_distance
)
from tonalkit.core.errors import TonalDomainError

C_KEY = TPSKey(0)
G_KEY = TPSKey(7)
I = TPSChord(0, (0, 4, 7))
V = TPSChord(7, (7, 11, 2))
FLAT_VI = TPSChord(8, (8, 0, 3))
FLAT_II = TPSChord(1, (1, 5, 8))


class TestKeysAndChords(unittest.TestCase):
    def test_key_properties(self):
        self.assertEqual(C_KEY.mode, 'major')
        self.assertEqual(C_KEY.scale(), (0, 2, 4, 5, 7, 9, 11))
        a_minor = TPSKey(9, 'minor')
        self.assertEqual(a_minor.name, 'A minor')
        triad = a_minor.tonic_triad()
        self.assertEqual(triad.root, 9)
        self.assertEqual(triad.pcs, (0, 4, 9))

    def test_chord_from_pcs(self):
        chord = TPSChord.from_pcs([7, 11, 2, 7])
        self.assertEqual(chord.root, 7)
        self.assertEqual(chord.pcs, (2, 7, 11))

    def test_validation(self):
        with self.assertRaises(TonalDomainError):
            TPSKey(12)
        with self.assertRaises(TonalDomainError):
            TPSKey(0, 'dorian')
        with self.assertRaises(TonalDomainError):
            TPSChord(0, (0, 4, 13))
        with self.assertRaises(TonalDomainError):
            TPSChord.from_pcs([])


class TestBasicSpace(unittest.TestCase):
    def test_tonic_triad_in_c(self):
        self.assertEqual(basic_space(I, C_KEY), (5, 1, 2, 1, 3, 2, 1, 4, 1, 2, 1, 2))

    def test_dominant_in_c(self):
        space = basic_space(V, C_KEY)
        self.assertEqual(space[7], 5)
        self.assertEqual(space[2], 4)
        self.assertEqual(space[11], 3)
        self.assertEqual(space[0], 2)
        self.assertEqual(space[6], 1)


class TestDistance(unittest.TestCase):
    def test_identical(self):
        self.assertEqual(tps_distance(I, C_KEY, I, C_KEY), 0)
        self.assertEqual(tps_distance(V, G_KEY, V, G_KEY), 0)

    def test_closely_related_chords_are_near(self):
        to_dominant = tps_distance(I, C_KEY, V, C_KEY)
        self.assertEqual(to_dominant, 5)
        self.assertEqual(tps_distance(I, C_KEY, FLAT_VI, C_KEY), 11)
        self.assertGreater(tps_distance(I, C_KEY, FLAT_II, C_KEY), to_dominant)

    def test_key_change_adds_distance(self):
        same_key = tps_distance(I, C_KEY, I, C_KEY)
        new_key = tps_distance(I, C_KEY, I, G_KEY)
        self.assertGreaterEqual(new_key, same_key)
        self.assertEqual(new_key, 2)


class TestSurfaceAndAttraction(unittest.TestCase):
    def test_surface_dissonance(self):
        self.assertEqual(surface_dissonance([0, 4, 7], I), 0)
        self.assertEqual(surface_dissonance([], I), 0)
        self.assertEqual(surface_dissonance([1], I), 1)
        self.assertEqual(surface_dissonance([0, 2, 5], I), 3)
        with self.assertRaises(TonalDomainError):
            surface_dissonance([12], I)

    def test_surface_dissonance_against_empty_chord(self):
        silent = TPSChord(0, ())
        self.assertEqual(surface_dissonance([1], silent), 6)
        self.assertEqual(surface_dissonance([0, 7], silent), 12)
        self.assertEqual(surface_dissonance([], silent), 0)

    def test_pitch_stability(self):
        self.assertEqual(pitch_stability(0, C_KEY), 5)
        self.assertEqual(pitch_stability(7, C_KEY), 4)
        self.assertEqual(pitch_stability(4, C_KEY), 3)
        self.assertEqual(pitch_stability(2, C_KEY), 2)
        self.assertEqual(pitch_stability(1, C_KEY), 1)

    def test_melodic_attraction(self):
        self.assertEqual(melodic_attraction(0, 0, C_KEY), 0.0)
        leading_tone = melodic_attraction(11, 0, C_KEY)
        whole_step = melodic_attraction(2, 0, C_KEY)
        self.assertAlmostEqual(leading_tone, 5.0)
        self.assertAlmostEqual(whole_step, 1.25)
        self.assertGreater(leading_tone, whole_step)
        self.assertGreater(melodic_attraction(1, 0, C_KEY), melodic_attraction(3, 0, C_KEY))
