"""Unit tests for loading and saving analysis settings"""
import json
import os
import tempfile
import unittest

from tonalkit.config import AnalysisSettings


class TestAnalysisSettings(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, 'tonalkit.json')

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, text):
        with open(self.path, 'w') as f:
            f.write(text)

    def test_defaults(self):
        settings = AnalysisSettings()
        self.assertEqual(settings.ticks_per_quarter, 480)
        self.assertEqual(settings.key_profile, 'krumhansl')
        self.assertEqual(settings.tension_weights['roughness'], 0.3)

    def test_missing_file_gives_defaults(self):
        self.assertEqual(AnalysisSettings.load(self.path), AnalysisSettings())

    def test_round_trip(self):
        settings = AnalysisSettings(key_profile='temperley', num_harmonics=4, log_level='DEBUG')
        settings.save(self.path)
        self.assertEqual(AnalysisSettings.load(self.path), settings)

    def test_unknown_keys_ignored(self):
        self.write(json.dumps({'key_profile': 'temperley', 'theme': 'dark'}))
        with self.assertLogs('tonalkit.config.settings', level='WARNING'):
            settings = AnalysisSettings.load(self.path)
        self.assertEqual(settings.key_profile, 'temperley')

    def test_malformed_file_gives_defaults(self):
        self.write('{not json')
        with self.assertLogs('tonalkit.config.settings', level='ERROR'):
            settings = AnalysisSettings.load(self.path)
        self.assertEqual(settings, AnalysisSettings())

    def test_non_object_gives_defaults(self):
        self.write('[1, 2, 3]')
        with self.assertLogs('tonalkit.config.settings', level='ERROR'):
            self.assertEqual(AnalysisSettings.load(self.path), AnalysisSettings())

    def test_option_builders(self):
        settings = AnalysisSettings(
            tension_weights={'roughness': 1.0, 'metric': 0.0},
            score_tension_weights={'tps': 0.5, 'unknown': 2.0},
            num_harmonics=3,
        )
        options = settings.tension_options()
        self.assertEqual(options.weights.roughness, 1.0)
        self.assertEqual(options.weights.metric, 0.0)
        self.assertEqual(options.num_harmonics, 3)
        weights = settings.score_weights()
        self.assertEqual((weights.tps, weights.spiral, weights.tiv), (0.5, 0.3, 0.3))
