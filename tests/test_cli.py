"""Command-line tests against MIDI files written with pretty_midi"""
import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout

import pretty_midi

from tonalkit.cli import main

PROGRESSION = ((60, 64, 67), (65, 69, 72), (67, 71, 74), (60, 64, 67))


def write_midi(path, chords=PROGRESSION, seconds_per_chord=0.5):
    pm = pretty_midi.PrettyMIDI()
    piano = pretty_midi.Instrument(program=0)
    for i, chord in enumerate(chords):
        start = i * seconds_per_chord
        for pitch in chord:
            piano.notes.append(pretty_midi.Note(velocity=80, pitch=pitch, start=start,
                                                end=start + seconds_per_chord))
    pm.instruments.append(piano)
    pm.write(path)


class TestCommandLine(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.midi_path = os.path.join(self.tmp.name, 'progression.mid')
        self.config_path = os.path.join(self.tmp.name, 'tonalkit.json')
        write_midi(self.midi_path)

    def tearDown(self):
        self.tmp.cleanup()

    def run_cli(self, *args):
        out = io.StringIO()
        with redirect_stdout(out):
            code = main(['--config', self.config_path, '--log-level', 'ERROR', *args])
        return code, out.getvalue()

    def test_key(self):
        code, output = self.run_cli('key', self.midi_path)
        self.assertEqual(code, 0)
        result = json.loads(output)
        self.assertEqual(result['best']['name'], 'C major')
        self.assertEqual(len(result['candidates']), 24)

    def test_key_tiv(self):
        code, output = self.run_cli('key', '--tiv', self.midi_path)
        self.assertEqual(code, 0)
        self.assertIn('best', json.loads(output))

    def test_tension(self):
        code, output = self.run_cli('tension', self.midi_path)
        self.assertEqual(code, 0)
        result = json.loads(output)
        self.assertIn(result['profile'], ('ramp', 'release', 'plateau', 'flat', 'oscillation'))
        self.assertTrue(result['points'])

    def test_score_level_tension(self):
        code, output = self.run_cli('tension', '--score-level', self.midi_path)
        self.assertEqual(code, 0)
        points = json.loads(output)['points']
        self.assertEqual(points[0]['tps'], 0.0)

    def test_harmony(self):
        code, output = self.run_cli('harmony', self.midi_path)
        self.assertEqual(code, 0)
        chords = [entry['chord'] for entry in json.loads(output)['progression']]
        self.assertEqual(chords, ['Cmaj', 'Fmaj', 'Gmaj', 'Cmaj'])

    def test_fingerprint(self):
        code, output = self.run_cli('fingerprint', self.midi_path)
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(output)['note_count'], 12)

    def test_missing_file(self):
        code, output = self.run_cli('key', os.path.join(self.tmp.name, 'missing.mid'))
        self.assertEqual(code, 2)
        self.assertEqual(output, '')

    def test_score_without_notes(self):
        empty_path = os.path.join(self.tmp.name, 'empty.mid')
        write_midi(empty_path, chords=())
        code, _ = self.run_cli('key', empty_path)
        self.assertEqual(code, 1)
