"""Unit tests for Plomp-Levelt roughness and the DissonanceCalculator."""
import unittest

from tonalkit.analysis.dissonance import DissonanceCalculator, roughness, roughness_from_midi
from tonalkit.core.errors import TonalDomainError


class TestRoughness(unittest.TestCase):
    def test_fewer_than_two_tones(self):
        self.assertEqual(roughness([]), 0.0)
        self.assertEqual(roughness([440.0]), 0.0)

    def test_order_independent(self):
        tones = [261.63, 277.18, 392.0, 466.16]
        self.assertAlmostEqual(roughness(tones), roughness(list(reversed(tones))))
        self.assertAlmostEqual(roughness(tones), roughness([392.0, 261.63, 466.16, 277.18]))

    def test_semitone_rougher_than_octave(self):
        semitone = roughness_from_midi([60, 61])
        octave = roughness_from_midi([60, 72])
        fifth = roughness_from_midi([60, 67])
        self.assertGreater(semitone, fifth)
        self.assertGreater(semitone, octave)
        self.assertGreaterEqual(octave, 0.0)

    def test_unison_pure_tones(self):
        self.assertEqual(roughness([440.0, 440.0], num_harmonics=1), 0.0)

    def test_more_harmonics_add_roughness(self):
        self.assertGreater(roughness_from_midi([60, 61], num_harmonics=6),
                           roughness_from_midi([60, 61], num_harmonics=1))

    def test_tuning_reference(self):
        self.assertAlmostEqual(roughness_from_midi([69, 70], tuning_hz=440.0),
                               roughness([440.0, 466.1637615180899]))

    def test_invalid_input(self):
        for bad in ([440.0, 0.0], [440.0, -1.0], [440.0, float('inf')], [float('nan'), 220.0]):
            with self.assertRaises(TonalDomainError):
                roughness(bad)
        # Validation happens even when there is nothing to compare
        with self.assertRaises(TonalDomainError):
            roughness([0.0])
        with self.assertRaises(TonalDomainError):
            roughness([440.0, 550.0], num_harmonics=0)
        with self.assertRaises(TonalDomainError):
            roughness_from_midi([60, 64], tuning_hz=0.0)


class TestDissonanceCalculator(unittest.TestCase):
    def setUp(self):
        self.calc = DissonanceCalculator(max_voices=3)

    def test_interval_from_root(self):
        self.assertEqual(self.calc.get_interval_from_root(60, 79), 7)
        self.assertEqual(self.calc.get_interval_from_root(64, 60), 8)

    def test_added_roughness(self):
        context = [60, 67]
        self.assertGreater(self.calc.added_roughness(61, context), self.calc.added_roughness(72, context))

    def test_rank_notes(self):
        ranked = self.calc.rank_notes([64, 61, 67], [60])
        self.assertEqual(ranked[0][0], 61)
        self.assertEqual(len(ranked), 3)

    def test_small_sonority_unchanged(self):
        self.assertEqual(self.calc.select_notes_by_dissonance([67, 60, 64, 60]), [60, 64, 67])

    def test_keeps_bass_and_treble(self):
        selected = self.calc.select_notes_by_dissonance([60, 61, 64, 67, 79])
        self.assertEqual(selected, [60, 61, 79])

    def test_consonance_preference(self):
        calc = DissonanceCalculator(max_voices=3, consonance_preference=1)
        selected = calc.select_notes_by_dissonance([60, 61, 64, 67, 79])
        self.assertEqual(len(selected), 3)
        self.assertIn(60, selected)
        self.assertIn(79, selected)
        self.assertNotIn(61, selected)

    def test_treble_doubling_bass_dropped(self):
        calc = DissonanceCalculator(max_voices=2)
        selected = calc.select_notes_by_dissonance([48, 60, 61, 72])
        self.assertEqual(selected[0], 48)
        self.assertNotIn(72, selected)
        self.assertEqual(len(selected), 2)

    def test_sonority_profile(self):
        profile = self.calc.sonority_profile([60, 61, 67])
        self.assertEqual(set(profile['pairs']), {'60-61', '60-67', '61-67'})
        self.assertEqual(profile['max_pair'], '60-61')
        self.assertIsNone(self.calc.sonority_profile([60, 60]))

    def test_invalid_voices(self):
        with self.assertRaises(TonalDomainError):
            DissonanceCalculator(max_voices=0)
