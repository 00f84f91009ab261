"""
Score-level tension
Windowed TPS, Spiral Array and TIV tension curves and their weighted composite
"""
import logging
import math
from dataclasses import dataclass, field, fields
from typing import Dict, List, Optional, Sequence

from tonalkit.analysis.key_analysis import detect_key
from tonalkit.analysis.spiral_array import tensile_strain
from tonalkit.analysis.tiv import chroma_vector, tiv_consonance
from tonalkit.analysis.tonal_pitch_space import TPSChord, TPSKey, tps_distance
from tonalkit.core.errors import TonalDomainError
from tonalkit.core.midi_data import NoteEvent, Score

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurvePoint:
    tick: int
    value: float


@dataclass(frozen=True)
class ScoreTensionWeights:
    tps: float = 0.4
    spiral: float = 0.3
    tiv: float = 0.3

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not math.isfinite(value) or value < 0:
                raise TonalDomainError(f"score tension weight {f.name} must be finite and >= 0 (got {value})")


@dataclass(frozen=True)
class ScoreTensionPoint:
    """Normalized per-model tension for one window plus the weighted composite"""
    tick: int
    tps: float
    spiral: float
    tiv: float
    composite: float

    def to_dict(self) -> Dict:
        return {
            'tick': self.tick,
            'tps': self.tps,
            'spiral': self.spiral,
            'tiv': self.tiv,
            'composite': self.composite,
        }


@dataclass(frozen=True)
class _Window:
    start: int
    events: List[NoteEvent] = field(default_factory=list)

    @property
    def pcs(self) -> List[int]:
        return sorted({event.pitch_class for event in self.events})

    def chord(self) -> Optional[TPSChord]:
        """The window's pitch content, rooted on its lowest sounding note"""
        if not self.events:
            return None
        bass = min(self.events, key=lambda event: event.pitch.midi)
        return TPSChord(bass.pitch_class, tuple(self.pcs))


def _windows(score: Score, window_ticks: int, hop_ticks: int) -> List[_Window]:
    if window_ticks <= 0:
        raise TonalDomainError(f"window size must be > 0 (got {window_ticks})")
    if hop_ticks <= 0:
        raise TonalDomainError(f"hop size must be > 0 (got {hop_ticks})")

    events = score.all_events()
    max_tick = score.max_tick()
    return [
        _Window(start, [event for event in events if event.overlaps(start, start + window_ticks)])
        for start in range(0, max_tick, hop_ticks)
    ]


def _normalize(values: Sequence[float]) -> List[float]:
    peak = max(values, default=0.0)
    if peak <= 0:
        return [0.0 for _ in values]
    return [value / peak for value in values]


def _tps_values(windows: Sequence[_Window], key: TPSKey) -> List[float]:
    # Distance to the previous non-empty window; 0 at the start and after silence
    values = []
    previous = None
    for window in windows:
        chord = window.chord()
        if chord is None or previous is None:
            values.append(0.0)
        else:
            values.append(float(tps_distance(previous, key, chord, key)))
        previous = chord
    return values


def _spiral_values(windows: Sequence[_Window], key: TPSKey) -> List[float]:
    scale = key.scale()
    return [tensile_strain(window.pcs, scale) if window.events else 0.0 for window in windows]


def _tiv_values(windows: Sequence[_Window]) -> List[float]:
    """1 - consonance relative to the most consonant window; silent windows score 0"""
    consonances = [tiv_consonance(chroma_vector(window.events)) for window in windows]
    peak = max(consonances, default=0.0)
    if peak <= 0:
        return [0.0 for _ in windows]
    return [
        1.0 - consonance / peak if window.events else 0.0
        for window, consonance in zip(windows, consonances)
    ]


def tps_tension_curve(score: Score, key: TPSKey, window_ticks: Optional[int] = None) -> List[CurvePoint]:
    """Raw TPS distance between consecutive windows"""
    ws = score.ticks_per_quarter if window_ticks is None else window_ticks
    windows = _windows(score, ws, ws)
    return [CurvePoint(w.start, v) for w, v in zip(windows, _tps_values(windows, key))]


def spiral_tension_curve(score: Score, key: TPSKey, window_ticks: Optional[int] = None) -> List[CurvePoint]:
    """Raw tensile strain of each window against the key's scale"""
    ws = score.ticks_per_quarter if window_ticks is None else window_ticks
    windows = _windows(score, ws, ws)
    return [CurvePoint(w.start, v) for w, v in zip(windows, _spiral_values(windows, key))]


def tiv_tension_curve(score: Score, window_ticks: Optional[int] = None) -> List[CurvePoint]:
    ws = score.ticks_per_quarter if window_ticks is None else window_ticks
    windows = _windows(score, ws, ws)
    return [CurvePoint(w.start, v) for w, v in zip(windows, _tiv_values(windows))]


def score_tension(score: Score, window_ticks: Optional[int] = None, hop_ticks: Optional[int] = None,
                  weights: Optional[ScoreTensionWeights] = None,
                  key: Optional[TPSKey] = None) -> List[ScoreTensionPoint]:
    """
    Composite tension per window from all three models

    Each model is scaled to [0, 1] across the score before weighting, and the
    composite is clipped to [0, 1]. The key is detected when not given.

    Args:
        score: Score to analyse
        window_ticks: Window length (default one quarter note)
        hop_ticks: Distance between window starts (default window_ticks)
        weights: Model weights (default TPS 0.4, Spiral 0.3, TIV 0.3)
        key: Key context for the TPS and Spiral models
    """
    if not score.all_events():
        return []

    ws = score.ticks_per_quarter if window_ticks is None else window_ticks
    hop = ws if hop_ticks is None else hop_ticks
    w = weights or ScoreTensionWeights()

    if key is None:
        best = detect_key(score).best
        key = TPSKey(best.tonic, best.mode)
        logger.debug("Score tension using detected key %s", best.name)

    windows = _windows(score, ws, hop)
    tps_norm = _normalize(_tps_values(windows, key))
    spiral_norm = _normalize(_spiral_values(windows, key))
    tiv_norm = _tiv_values(windows)

    return [
        ScoreTensionPoint(
            tick=window.start,
            tps=t,
            spiral=s,
            tiv=v,
            composite=min(1.0, w.tps * t + w.spiral * s + w.tiv * v),
        )
        for window, t, s, v in zip(windows, tps_norm, spiral_norm, tiv_norm)
    ]
