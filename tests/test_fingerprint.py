"""Unit tests for the musical fingerprint"""
import json
import os
import tempfile
import unittest
from itertools import combinations

import pretty_midi

from tonalkit.analysis.fingerprint import (
    form_string, jaccard_similarity, musical_fingerprint, save_fingerprint, section_label,
    segment_by_pitch_content
)
from tonalkit.core.errors import TonalDomainError
from tonalkit.core.midi_data import NoteEvent, Score


def melody(midi_notes, step=480):
    return [NoteEvent.from_midi(m, i * step, step) for i, m in enumerate(midi_notes)]


C_MAJOR_TUNE = Score.from_events(melody([60, 62, 64, 65, 67, 65, 64, 62, 60, 67, 64, 60]), title="Tune")


class TestFormHelpers(unittest.TestCase):
    def test_jaccard(self):
        self.assertEqual(jaccard_similarity({0, 4}, {0}), 0.5)
        self.assertEqual(jaccard_similarity({0, 4, 7}, {7, 4, 0}), 1.0)
        self.assertEqual(jaccard_similarity(set(), set()), 0.0)

    def test_form_string(self):
        a = melody([60, 64, 67])
        b = melody([61, 63, 66])
        a_again = melody([72, 76, 79])
        self.assertEqual(form_string([a, b, a_again]), 'ABA')
        self.assertEqual(form_string([a, a, a]), 'AAA')
        self.assertEqual(form_string([]), '')

    def test_labels_continue_past_z(self):
        self.assertEqual([section_label(i) for i in (0, 25, 26, 27, 52)], ['A', 'Z', 'A1', 'B1', 'A2'])
        # Two-note segments over distinct pitch-class pairs never share a label
        segments = [[NoteEvent.from_midi(60 + a, 0, 480), NoteEvent.from_midi(60 + b, 0, 480)]
                    for a, b in list(combinations(range(12), 2))[:27]]
        form = form_string(segments + [segments[0], segments[26]])
        self.assertEqual(form, 'ABCDEFGHIJKLMNOPQRSTUVWXYZA1AA1')

    def test_repeated_pitch_class_stays_in_one_segment(self):
        segments = segment_by_pitch_content(melody([48, 60, 72, 84]))
        self.assertEqual(len(segments), 1)
        self.assertEqual(len(segments[0]), 4)

    def test_segments_cover_all_events(self):
        events = melody([60, 62, 64, 65, 67, 61, 63, 66])
        segments = segment_by_pitch_content(events)
        self.assertEqual(sum(len(s) for s in segments), len(events))
        self.assertTrue(all(segments))


class TestMusicalFingerprint(unittest.TestCase):
    def setUp(self):
        self.fingerprint = musical_fingerprint(C_MAJOR_TUNE)

    def test_keys(self):
        self.assertEqual(set(self.fingerprint), {
            'title', 'ticks_per_quarter', 'meter', 'note_count', 'pitch_class_distribution', 'key',
            'pitch_content', 'dft_components', 'mean_tensile_strain', 'harmonic_change_rate',
            'mean_tension', 'form_string', 'segments',
        })

    def test_values(self):
        fp = self.fingerprint
        self.assertEqual(fp['title'], 'Tune')
        self.assertEqual(fp['meter'], '4/4')
        self.assertEqual(fp['note_count'], 12)
        self.assertAlmostEqual(sum(fp['pitch_class_distribution']), 1.0, places=5)
        self.assertEqual(fp['pitch_content']['pcs'], [0, 2, 4, 5, 7])
        self.assertEqual(fp['pitch_content']['forte_name'], '5-23')
        self.assertEqual(len(fp['form_string']), len(fp['segments']))
        self.assertTrue(0.0 <= fp['mean_tension'] <= 1.0)
        # A single line never forms a chord
        self.assertEqual(fp['harmonic_change_rate'], 0.0)

    def test_json_ready(self):
        text = json.dumps(self.fingerprint)
        self.assertEqual(json.loads(text)['note_count'], 12)

    def test_save(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'fingerprint.json')
            save_fingerprint(self.fingerprint, path)
            with open(path) as f:
                self.assertEqual(json.load(f)['form_string'], self.fingerprint['form_string'])

    def test_empty_score(self):
        with self.assertRaises(TonalDomainError):
            musical_fingerprint(Score())

    def test_score_read_through_pretty_midi_is_json_ready(self):
        pm = pretty_midi.PrettyMIDI()
        piano = pretty_midi.Instrument(program=0)
        for i, pitch in enumerate((60, 64, 67, 72)):
            piano.notes.append(pretty_midi.Note(velocity=80, pitch=pitch, start=i * 0.5, end=(i + 1) * 0.5))
        pm.instruments.append(piano)

        score = Score.from_pretty_midi(pm)
        for event in score.all_events():
            self.assertIs(type(event.onset), int)
            self.assertIs(type(event.duration), int)
        fingerprint = json.loads(json.dumps(musical_fingerprint(score)))
        self.assertEqual(fingerprint['note_count'], 4)
        self.assertEqual(fingerprint['segments'][0]['start_tick'], 0)
