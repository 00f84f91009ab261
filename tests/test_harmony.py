"""Unit tests for chord and scale identification and Roman-numeral labelling"""
import unittest

from tonalkit.analysis.harmony import (
    CHORD_CATALOG, SCALE_CATALOG, HarmonicAnalyzer, chord_from_pcs, harmonic_change_rate,
    harmonic_rhythm, identify_chord, identify_scale, roman_numeral, roman_numeral_analysis
)
from tonalkit.core.errors import TonalDomainError
from tonalkit.core.midi_data import NoteEvent, Score


def notes(*midi, onset=0, duration=480):
    return [NoteEvent.from_midi(m, onset, duration) for m in midi]


def progression(*chords, length=480):
    events = []
    for i, chord in enumerate(chords):
        events.extend(notes(*chord, onset=i * length, duration=length))
    return Score.from_events(events)


class TestCatalogs(unittest.TestCase):
    def test_chord_shapes_are_unique(self):
        shapes = [chord.pcs for chord in CHORD_CATALOG]
        self.assertEqual(len(shapes), len(set(shapes)))

    def test_scale_steps_fill_octave(self):
        for scale in SCALE_CATALOG:
            self.assertEqual(sum(scale.steps), 12, scale.name)
            self.assertEqual(len(scale.pcs), len(scale.steps))

    def test_modes(self):
        by_name = {scale.name: scale for scale in SCALE_CATALOG}
        self.assertEqual(by_name['Ionian'].pcs, (0, 2, 4, 5, 7, 9, 11))
        self.assertEqual(by_name['Dorian'].pcs, (0, 2, 3, 5, 7, 9, 10))
        self.assertEqual(by_name['Harmonic Minor'].pcs, (0, 2, 3, 5, 7, 8, 11))


class TestChordIdentification(unittest.TestCase):
    def test_major_triad(self):
        label = identify_chord(notes(60, 64, 67))
        self.assertEqual(label.display, 'Cmaj')
        self.assertEqual(label.root, 0)
        self.assertEqual(label.pcs, (0, 4, 7))

    def test_bass_note_chooses_root(self):
        a_minor_seventh = identify_chord(notes(57, 60, 64, 67))
        self.assertEqual((a_minor_seventh.symbol, a_minor_seventh.root), ('min7', 9))
        c_sixth = identify_chord(notes(48, 57, 64, 67))
        self.assertEqual((c_sixth.symbol, c_sixth.root), ('6', 0))

    def test_inversion(self):
        label = identify_chord(notes(52, 55, 60))
        self.assertEqual(label.display, 'Cmaj')

    def test_too_few_notes(self):
        self.assertIsNone(identify_chord([]))
        self.assertIsNone(identify_chord(notes(60)))

    def test_unknown_shape(self):
        self.assertIsNone(identify_chord(notes(60, 61, 62)))

    def test_chord_from_pcs(self):
        self.assertEqual(chord_from_pcs([7, 11, 2, 5]).symbol, '7')
        self.assertEqual(chord_from_pcs([0, 4, 7, 9], root=9).symbol, 'min7')
        self.assertIsNone(chord_from_pcs([0, 4, 7], root=2))
        self.assertIsNone(chord_from_pcs([]))

    def test_to_dict(self):
        data = chord_from_pcs([2, 5, 9]).to_dict()
        self.assertEqual(data['display'], 'Dmin')
        self.assertEqual(data['pcs'], [2, 5, 9])


class TestScaleIdentification(unittest.TestCase):
    def test_major_scale(self):
        match = identify_scale(notes(60, 62, 64, 65, 67, 69, 71))
        self.assertEqual((match.name, match.root, match.score), ('Ionian', 0, 1.0))

    def test_pentatonic(self):
        match = identify_scale(notes(60, 62, 64, 67, 69))
        self.assertEqual((match.name, match.root), ('Pentatonic Major', 0))

    def test_no_match(self):
        self.assertIsNone(identify_scale(notes(60, 61, 62)))
        self.assertIsNone(identify_scale(notes(60, 62)))


class TestHarmonicRhythm(unittest.TestCase):
    def test_samples(self):
        score = progression((60, 64, 67), (55, 59, 62), (60, 64, 67))
        samples = harmonic_rhythm(score)
        self.assertEqual([s.tick for s in samples], [0, 480, 960, 1440])
        self.assertEqual([s.label.display for s in samples[:3]], ['Cmaj', 'Gmaj', 'Cmaj'])
        self.assertIsNone(samples[3].label)
        self.assertEqual(harmonic_change_rate(samples), 1.0)

    def test_static_harmony(self):
        score = Score.from_events(notes(60, 64, 67, duration=1920))
        self.assertEqual(harmonic_change_rate(harmonic_rhythm(score)), 0.0)

    def test_empty_and_invalid(self):
        self.assertEqual(harmonic_rhythm(Score()), [])
        with self.assertRaises(TonalDomainError):
            harmonic_rhythm(progression((60, 64, 67)), -480)
        with self.assertRaises(TonalDomainError):
            harmonic_rhythm(progression((60, 64, 67)), 0)


class TestRomanNumerals(unittest.TestCase):
    def test_major_key(self):
        dominant_seventh = roman_numeral(chord_from_pcs([7, 11, 2, 5]), 0, 'major')
        self.assertEqual((dominant_seventh.numeral, dominant_seventh.degree), ('V7', 5))
        self.assertEqual(roman_numeral(chord_from_pcs([11, 2, 5]), 0, 'major').numeral, 'viio')
        self.assertEqual(roman_numeral(chord_from_pcs([2, 5, 9]), 0, 'major').numeral, 'ii')
        self.assertEqual(roman_numeral(chord_from_pcs([2, 5, 9, 0]), 0, 'major').numeral, 'ii7')
        self.assertEqual(roman_numeral(chord_from_pcs([0, 4, 8]), 0, 'major').numeral, 'I+')
        self.assertEqual(roman_numeral(chord_from_pcs([8, 0, 3]), 0, 'major').numeral, 'bVI')

    def test_minor_key(self):
        numerals = roman_numeral_analysis(
            [chord_from_pcs(pcs) for pcs in ([9, 0, 4], [2, 5, 9], [4, 8, 11], [0, 4, 7], [11, 2, 5])],
            (9, 'minor'),
        )
        self.assertEqual([n.numeral for n in numerals], ['i', 'iv', 'V', 'III', 'iio'])
        self.assertEqual([n.degree for n in numerals], [1, 4, 5, 3, 2])

    def test_ninth_suffix(self):
        dominant_ninth = chord_from_pcs([7, 11, 2, 5, 9])
        self.assertEqual(dominant_ninth.symbol, '9')
        self.assertEqual(roman_numeral(dominant_ninth, 0, 'major').numeral, 'V9')
        self.assertEqual(roman_numeral(chord_from_pcs([2, 5, 9, 0, 4]), 0, 'major').numeral, 'ii9')

    def test_added_tones_are_not_ninth_chords(self):
        add_nine = chord_from_pcs([0, 4, 7, 2])
        six_nine = chord_from_pcs([0, 4, 7, 9, 2])
        self.assertEqual((add_nine.symbol, six_nine.symbol), ('add9', '6/9'))
        self.assertEqual(roman_numeral(add_nine, 0, 'major').numeral, 'I')
        self.assertEqual(roman_numeral(six_nine, 0, 'major').numeral, 'I')

    def test_quality(self):
        self.assertEqual(roman_numeral(chord_from_pcs([11, 2, 5, 9]), 0, 'major').quality, 'dim')
        self.assertEqual(roman_numeral(chord_from_pcs([9, 0, 4]), 0, 'major').quality, 'min')

    def test_invalid_mode(self):
        with self.assertRaises(TonalDomainError):
            roman_numeral(chord_from_pcs([0, 4, 7]), 0, 'lydian')


class TestHarmonicAnalyzer(unittest.TestCase):
    def test_progression(self):
        score = progression((60, 64, 67), (60, 65, 69), (55, 59, 62, 65), (60, 64, 67))
        result = HarmonicAnalyzer().analyze(score, key=(0, 'major'))
        self.assertEqual([entry['numeral'] for entry in result], ['I', 'IV', 'V7', 'I'])
        self.assertEqual([entry['degree'] for entry in result], [1, 4, 5, 1])
        self.assertEqual([entry['chord'] for entry in result], ['Cmaj', 'Fmaj', 'G7', 'Cmaj'])
        self.assertEqual([entry['tick'] for entry in result], [0, 480, 960, 1440])

    def test_merges_repeated_chords(self):
        score = Score.from_events(notes(60, 64, 67, duration=960) + notes(55, 59, 62, onset=960))
        result = HarmonicAnalyzer().analyze(score, key=(0, 'major'))
        self.assertEqual([(entry['tick'], entry['numeral']) for entry in result], [(0, 'I'), (960, 'V')])

    def test_detects_key(self):
        score = progression((60, 64, 67), (53, 60, 65, 69), (55, 59, 62, 67), (48, 60, 64, 67))
        result = HarmonicAnalyzer().analyze(score)
        self.assertEqual(result[0]['numeral'], 'I')
        self.assertEqual(result[-1]['degree'], 1)
