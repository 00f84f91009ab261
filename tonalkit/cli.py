#!/usr/bin/env python3
"""
tonalkit command-line entry point
Reads a MIDI file through pretty_midi and prints analysis results as JSON
"""
import argparse
import json
import logging
import sys

from tonalkit.analysis.fingerprint import musical_fingerprint
from tonalkit.analysis.harmony import HarmonicAnalyzer
from tonalkit.analysis.key_analysis import KeyAnalyzer, detect_key_tiv
from tonalkit.analysis.score_tension import score_tension
from tonalkit.analysis.tension import classify_tension_profile, compute_tension, find_tension_peaks
from tonalkit.config.settings import AnalysisSettings
from tonalkit.core.errors import TonalDomainError
from tonalkit.core.midi_data import Score
from tonalkit.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='tonalkit', description='Tonal analysis of MIDI files')
    parser.add_argument('--config', default='tonalkit.json', help='Settings file (JSON)')
    parser.add_argument('--log-level', help='Override the configured log level')
    parser.add_argument('--log-file', help='Also write log messages to this file')

    subparsers = parser.add_subparsers(dest='command', required=True)

    key = subparsers.add_parser('key', help='Detect the key')
    key.add_argument('midi_file')
    key.add_argument('--profile', help='Key profile (krumhansl or temperley)')
    key.add_argument('--window', type=int, help='Window size in ticks for windowed detection')
    key.add_argument('--tiv', action='store_true', help='Use TIV distance instead of correlation')

    tension = subparsers.add_parser('tension', help='Compute a tension curve')
    tension.add_argument('midi_file')
    tension.add_argument('--interval', type=int, help='Sample interval in ticks')
    tension.add_argument('--score-level', action='store_true',
                         help='TPS / Spiral Array / TIV composite instead of the roughness model')

    harmony = subparsers.add_parser('harmony', help='Chord and Roman-numeral analysis')
    harmony.add_argument('midi_file')
    harmony.add_argument('--window', type=int, help='Sampling window in ticks')

    fingerprint = subparsers.add_parser('fingerprint', help='Summarize a score')
    fingerprint.add_argument('midi_file')
    fingerprint.add_argument('--window', type=int, help='Window size in ticks')

    return parser


def run_key(args, settings: AnalysisSettings, score: Score) -> dict:
    analyzer = KeyAnalyzer.from_settings(settings)
    if args.profile:
        analyzer = KeyAnalyzer(args.profile, settings.weight_by_duration, settings.key_confidence_threshold)

    if args.window:
        analyzer.analyze_windows(score, args.window)
        return {
            'timeline': analyzer.export_analysis_timeline(),
            'transitions': [t.to_dict() for t in analyzer.get_key_transitions()],
            'stability': analyzer.get_stability_report(),
        }
    if args.tiv:
        return detect_key_tiv(score, analyzer.profile, analyzer.weight_by_duration).to_dict()
    return analyzer.analyze(score).to_dict()


def run_tension(args, settings: AnalysisSettings, score: Score) -> dict:
    if args.score_level:
        points = score_tension(score, args.interval, weights=settings.score_weights())
        return {'points': [p.to_dict() for p in points]}

    options = settings.tension_options()
    options.sample_interval = args.interval
    curve = compute_tension(score, options)
    return {
        'profile': classify_tension_profile(curve),
        'peaks': [p.tick for p in find_tension_peaks(curve, settings.peak_flatness_tolerance)],
        'points': [p.to_dict() for p in curve],
    }


def run_harmony(args, settings: AnalysisSettings, score: Score) -> dict:
    analyzer = HarmonicAnalyzer(KeyAnalyzer.from_settings(settings))
    return {'progression': analyzer.analyze(score, args.window)}


COMMANDS = {
    'key': run_key,
    'tension': run_tension,
    'harmony': run_harmony,
    'fingerprint': lambda args, settings, score: musical_fingerprint(score, args.window),
}


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings = AnalysisSettings.load(args.config)
    setup_logging(args.log_level or settings.log_level, args.log_file)

    try:
        score = Score.from_midi_file(args.midi_file)
        score.tuning_hz = settings.tuning_hz
        result = COMMANDS[args.command](args, settings, score)
    except TonalDomainError as e:
        logger.error("%s: %s", args.midi_file, e)
        return 1
    except (OSError, ValueError) as e:
        # pretty_midi reports unreadable files as OSError or ValueError
        logger.error("Could not read %s: %s", args.midi_file, e)
        return 2

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
