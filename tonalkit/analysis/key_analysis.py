"""
Key Analysis
Profile-correlation key detection over whole scores and fixed tick windows,
a TIV-distance variant, and modulation tracking between windows
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from tonalkit.analysis.tiv import tiv, tiv_distance
from tonalkit.core.errors import TonalDomainError
from tonalkit.core.midi_data import NoteEvent, Score, collect_events
from tonalkit.utils.music_theory import (
    MAJOR_KEY_PROFILE, MINOR_KEY_PROFILE, MODES,
    TEMPERLEY_MAJOR_PROFILE, TEMPERLEY_MINOR_PROFILE, get_key_name
)

logger = logging.getLogger(__name__)

# Correlations closer than this are treated as equal when ranking
TIE_TOLERANCE = 1e-9

EventSource = Union[Score, Iterable[NoteEvent]]


@dataclass(frozen=True)
class KeyProfile:
    """Expected pitch-class weights for major and minor keys on a C tonic"""
    major: Tuple[float, ...]
    minor: Tuple[float, ...]
    name: str = 'custom'

    def __post_init__(self):
        for mode, values in (('major', self.major), ('minor', self.minor)):
            if len(values) != 12:
                raise TonalDomainError(f"{mode} profile must have 12 values (got {len(values)})")
            if not all(np.isfinite(values)):
                raise TonalDomainError(f"{mode} profile values must be finite")
        object.__setattr__(self, 'major', tuple(float(v) for v in self.major))
        object.__setattr__(self, 'minor', tuple(float(v) for v in self.minor))

    def template(self, mode: str) -> np.ndarray:
        return np.array(self.major if mode == 'major' else self.minor)


KRUMHANSL_KESSLER = KeyProfile(MAJOR_KEY_PROFILE, MINOR_KEY_PROFILE, 'krumhansl')
TEMPERLEY = KeyProfile(TEMPERLEY_MAJOR_PROFILE, TEMPERLEY_MINOR_PROFILE, 'temperley')

KEY_PROFILES = MappingProxyType({
    'krumhansl': KRUMHANSL_KESSLER,
    'temperley': TEMPERLEY,
})


@dataclass(frozen=True)
class KeyCandidate:
    """A (tonic, mode) hypothesis with its score"""
    tonic: int
    mode: str
    correlation: float
    name: str

    @property
    def key(self) -> Tuple[int, str]:
        return (self.tonic, self.mode)

    def to_dict(self) -> Dict:
        return {
            'tonic': self.tonic,
            'mode': self.mode,
            'correlation': round(self.correlation, 6),
            'name': self.name,
        }


@dataclass(frozen=True)
class KeyDetectionResult:
    """Best candidate plus all 24 candidates ranked best first"""
    best: KeyCandidate
    candidates: Tuple[KeyCandidate, ...]

    def to_dict(self) -> Dict:
        return {
            'best': self.best.to_dict(),
            'candidates': [c.to_dict() for c in self.candidates],
        }


@dataclass(frozen=True)
class WindowedKeyResult:
    start_tick: int
    end_tick: int
    result: KeyDetectionResult


@dataclass(frozen=True)
class KeyTransition:
    """Change of best key between two consecutive analysed windows"""
    from_tick: int
    to_tick: int
    from_key: Tuple[int, str]
    to_key: Tuple[int, str]
    transition_strength: float
    modulation_type: str

    def to_dict(self) -> Dict:
        return {
            'from_tick': self.from_tick,
            'to_tick': self.to_tick,
            'from_key': get_key_name(*self.from_key),
            'to_key': get_key_name(*self.to_key),
            'strength': round(self.transition_strength, 3),
            'type': self.modulation_type,
        }


def resolve_profile(profile: Union[str, KeyProfile, None]) -> KeyProfile:
    """Map a profile name (or None for the default) to a KeyProfile"""
    if profile is None:
        return KRUMHANSL_KESSLER
    if isinstance(profile, KeyProfile):
        return profile
    try:
        return KEY_PROFILES[profile.lower()]
    except KeyError:
        raise TonalDomainError(
            f"Unknown key profile {profile!r}; expected one of {sorted(KEY_PROFILES)}"
        ) from None


def pc_distribution(events: Iterable[NoteEvent], weight_by_duration: bool = True) -> np.ndarray:
    """Duration- or count-weighted pitch-class histogram"""
    dist = np.zeros(12)
    for event in events:
        dist[event.pitch_class] += event.duration if weight_by_duration else 1.0
    return dist


def _pearson(x: np.ndarray, y: np.ndarray) -> float:
    dx = x - x.mean()
    dy = y - y.mean()
    denominator = np.sqrt(np.sum(dx ** 2) * np.sum(dy ** 2))
    return float(np.sum(dx * dy) / denominator) if denominator > 0 else 0.0


def _calculate_key_correlation(distribution: np.ndarray, profile: KeyProfile, root: int, mode: str) -> float:
    """Pearson correlation with the profile rotated onto root"""
    return _pearson(distribution, np.roll(profile.template(mode), root))


def _rank_key(candidate: KeyCandidate) -> Tuple[int, int, int]:
    # Scores are bucketed to TIE_TOLERANCE; within a bucket the lowest tonic
    # comes first, then major before minor
    bucket = int(round(candidate.correlation / TIE_TOLERANCE))
    return (-bucket, candidate.tonic, MODES.index(candidate.mode))


def rank_candidates(candidates: Iterable[KeyCandidate]) -> KeyDetectionResult:
    ranked = tuple(sorted(candidates, key=_rank_key))
    return KeyDetectionResult(best=ranked[0], candidates=ranked)


def detect_key_from_distribution(distribution: Sequence[float],
                                 profile: Union[str, KeyProfile, None] = None) -> KeyDetectionResult:
    """
    Correlate a 12-bin distribution against all 24 rotated key profiles

    Args:
        distribution: Observed pitch-class weights
        profile: 'krumhansl' (default), 'temperley' or a KeyProfile

    Returns: KeyDetectionResult with every candidate ranked best first
    """
    dist = np.asarray(distribution, dtype=float)
    if dist.shape != (12,):
        raise TonalDomainError(f"distribution must have 12 elements (got shape {dist.shape})")
    if not np.all(np.isfinite(dist)) or np.any(dist < 0):
        raise TonalDomainError("distribution values must be finite and non-negative")

    key_profile = resolve_profile(profile)
    candidates = [
        KeyCandidate(root, mode, _calculate_key_correlation(dist, key_profile, root, mode),
                     get_key_name(root, mode))
        for root in range(12)
        for mode in MODES
    ]
    return rank_candidates(candidates)


def _require_events(source: EventSource) -> List[NoteEvent]:
    events = collect_events(source)
    if not events:
        raise TonalDomainError("Cannot detect key: score contains no note events")
    return events


def detect_key(source: EventSource, profile: Union[str, KeyProfile, None] = None,
               weight_by_duration: bool = True) -> KeyDetectionResult:
    """Krumhansl-Schmuckler key estimate over all events"""
    events = _require_events(source)
    result = detect_key_from_distribution(pc_distribution(events, weight_by_duration), profile)
    logger.debug("Detected %s (r=%.3f) from %d events",
                 result.best.name, result.best.correlation, len(events))
    return result


def detect_key_windowed(source: EventSource, window_ticks: int,
                        profile: Union[str, KeyProfile, None] = None,
                        weight_by_duration: bool = True) -> List[WindowedKeyResult]:
    """
    Key estimate per fixed window starting at tick 0

    Events overlapping a window contribute their full weight. Windows with no
    events are skipped and no smoothing is applied between windows.
    """
    if window_ticks <= 0:
        raise TonalDomainError(f"window size must be positive (got {window_ticks})")

    events = _require_events(source)
    max_tick = max(event.end for event in events)
    results = []

    for start in range(0, max_tick, window_ticks):
        end = start + window_ticks
        window_events = [event for event in events if event.overlaps(start, end)]
        if not window_events:
            continue
        result = detect_key_from_distribution(pc_distribution(window_events, weight_by_duration), profile)
        results.append(WindowedKeyResult(start, end, result))

    logger.debug("Windowed key analysis: %d windows of %d ticks", len(results), window_ticks)
    return results


def detect_key_tiv(source: EventSource, profile: Union[str, KeyProfile, None] = None,
                   weight_by_duration: bool = True) -> KeyDetectionResult:
    """
    Key estimate by Tonal Interval Vector distance

    Each candidate scores 1 / (1 + d) where d is the distance between the
    observed TIV and the TIV of the profile placed on that tonic.
    """
    events = _require_events(source)
    key_profile = resolve_profile(profile)
    observed = tiv(pc_distribution(events, weight_by_duration))

    candidates = []
    for root in range(12):
        for mode in MODES:
            placed = tiv(np.roll(key_profile.template(mode), root))
            similarity = 1.0 / (1.0 + tiv_distance(observed, placed))
            candidates.append(KeyCandidate(root, mode, similarity, get_key_name(root, mode)))
    return rank_candidates(candidates)


def classify_modulation_type(from_key: Tuple[int, str], to_key: Tuple[int, str]) -> str:
    """Classify the type of modulation between keys"""
    from_root, from_mode = from_key
    to_root, to_mode = to_key

    interval = (to_root - from_root) % 12

    if from_mode == to_mode:
        if interval == 7:
            return "Dominant"
        elif interval == 5:
            return "Subdominant"
        elif interval == 2:
            return "Whole Step Up"
        elif interval == 10:
            return "Whole Step Down"
        elif interval in (1, 11):
            return "Half Step"
        elif interval in (3, 4, 8, 9):
            return "Chromatic Mediant"
        else:
            return "Tritone"
    else:
        if from_root == to_root:
            return "Parallel"
        elif interval == 9 and from_mode == 'major':
            return "Relative Minor"
        elif interval == 3 and from_mode == 'minor':
            return "Relative Major"
        else:
            return "Mode Change"


def detect_modulations(windowed: Sequence[WindowedKeyResult]) -> List[KeyTransition]:
    """One transition for every pair of consecutive windows whose best keys differ"""
    transitions = []
    for previous, current in zip(windowed, windowed[1:]):
        from_key = previous.result.best.key
        to_key = current.result.best.key
        if from_key == to_key:
            continue
        transitions.append(KeyTransition(
            from_tick=previous.start_tick,
            to_tick=current.start_tick,
            from_key=from_key,
            to_key=to_key,
            transition_strength=max(0.0, current.result.best.correlation),
            modulation_type=classify_modulation_type(from_key, to_key),
        ))
    return transitions


@dataclass
class KeyAnalysisPoint:
    """Key estimate for one analysis window"""
    start_tick: int
    end_tick: int
    root: int
    mode: str
    confidence: float
    supporting_evidence: Dict = field(default_factory=dict)

    @property
    def name(self) -> str:
        return get_key_name(self.root, self.mode)


class KeyAnalyzer:
    """Key detection bound to one profile, weighting scheme and confidence threshold"""

    def __init__(self,
                 profile: Union[str, KeyProfile, None] = None,
                 weight_by_duration: bool = True,
                 confidence_threshold: float = 0.65):
        """
        Initialize the analyzer

        Args:
            profile: Key profile name or custom KeyProfile
            weight_by_duration: Weight pitch classes by duration instead of count
            confidence_threshold: Minimum correlation for a key to be reported
        """
        self.profile = resolve_profile(profile)
        self.weight_by_duration = weight_by_duration
        self.confidence_threshold = confidence_threshold

        self.analysis_points: List[KeyAnalysisPoint] = []
        self.key_transitions: List[KeyTransition] = []

    @classmethod
    def from_settings(cls, settings) -> 'KeyAnalyzer':
        return cls(profile=settings.key_profile,
                   weight_by_duration=settings.weight_by_duration,
                   confidence_threshold=settings.key_confidence_threshold)

    def analyze(self, source: EventSource) -> KeyDetectionResult:
        return detect_key(source, self.profile, self.weight_by_duration)

    def analyze_key_context(self, notes: Sequence[int]) -> Optional[KeyCandidate]:
        """
        Key estimate from bare MIDI note numbers, each counted once

        Returns None when there are no notes or the best correlation falls
        below the confidence threshold.
        """
        if not notes:
            return None

        counts = np.zeros(12)
        for note in notes:
            counts[note % 12] += 1

        best = detect_key_from_distribution(counts, self.profile).best
        if best.correlation < self.confidence_threshold:
            logger.debug("Key context below threshold: %s (r=%.3f)", best.name, best.correlation)
            return None
        return best

    def analyze_windows(self, source: EventSource, window_ticks: int) -> List[KeyAnalysisPoint]:
        """Windowed analysis that also records analysis points and key transitions"""
        windowed = detect_key_windowed(source, window_ticks, self.profile, self.weight_by_duration)

        self.analysis_points = []
        for window in windowed:
            best = window.result.best
            runner_up = window.result.candidates[1]
            self.analysis_points.append(KeyAnalysisPoint(
                start_tick=window.start_tick,
                end_tick=window.end_tick,
                root=best.tonic,
                mode=best.mode,
                confidence=best.correlation,
                supporting_evidence={
                    'runner_up': runner_up.name,
                    'margin': best.correlation - runner_up.correlation,
                },
            ))
        self.key_transitions = detect_modulations(windowed)
        return self.analysis_points

    def get_key_at_tick(self, tick: int) -> Optional[KeyAnalysisPoint]:
        """Get the analysis point whose window contains the tick"""
        for point in self.analysis_points:
            if point.start_tick <= tick < point.end_tick:
                return point
        return None

    def get_key_transitions(self) -> List[KeyTransition]:
        """Get detected key transitions"""
        return self.key_transitions

    def get_stability_report(self) -> Dict:
        """Generate a report on key stability throughout the piece"""
        if not self.analysis_points:
            return {'error': 'No analysis points available'}

        key_counts = defaultdict(int)
        total_points = len(self.analysis_points)

        for point in self.analysis_points:
            key_counts[point.name] += 1

        most_common_key = max(key_counts.items(), key=lambda x: x[1])
        stability_score = most_common_key[1] / total_points

        return {
            'primary_key': most_common_key[0],
            'stability_score': stability_score,
            'key_distribution': dict(key_counts),
            'total_analysis_points': total_points,
            'number_of_transitions': len(self.key_transitions),
            'average_confidence': float(np.mean([p.confidence for p in self.analysis_points])),
            'stability_classification': self._classify_stability(stability_score)
        }

    def _classify_stability(self, stability_score: float) -> str:
        """Classify overall stability based on score"""
        if stability_score >= 0.9:
            return "Very Stable"
        elif stability_score >= 0.7:
            return "Stable"
        elif stability_score >= 0.5:
            return "Moderately Stable"
        elif stability_score >= 0.3:
            return "Unstable"
        else:
            return "Highly Unstable"

    def export_analysis_timeline(self) -> List[Dict]:
        """Export analysis as a JSON-friendly timeline"""
        return [
            {
                'start_tick': point.start_tick,
                'end_tick': point.end_tick,
                'key': point.name,
                'root': point.root,
                'mode': point.mode,
                'confidence': round(point.confidence, 3),
            }
            for point in self.analysis_points
        ]
