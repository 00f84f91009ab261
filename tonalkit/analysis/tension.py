"""
Tension Curves
Multi-component tension sampled over a score, with derivatives,
integrals, extrema and overall shape classification
"""
import logging
import math
from dataclasses import dataclass, field, fields
from typing import Dict, List, Optional, Sequence

import numpy as np

from tonalkit.analysis.dissonance import DEFAULT_NUM_HARMONICS, roughness
from tonalkit.analysis.tiv import chroma_vector, tiv_consonance
from tonalkit.core.errors import TonalDomainError
from tonalkit.core.midi_data import Score, TimeSignature
from tonalkit.core.timing import beat_strength, build_metric_levels, max_beat_strength

logger = logging.getLogger(__name__)

# A semitone dyad with six partials lands roughly between 0.3 and 0.5
ROUGHNESS_SCALE = 2.0
DENSITY_SCALE = 12.0

# Shape classification thresholds
VARIANCE_THRESHOLD = 0.01
CHANGE_RATE_THRESHOLD = 0.4
SLOPE_THRESHOLD = 0.05
OSCILLATION_MIN_STD = 0.05


@dataclass(frozen=True)
class TensionWeights:
    """Weight of each component in the total; tonal blends in TIV dissonance"""
    roughness: float = 0.3
    metric: float = 0.3
    registral: float = 0.2
    density: float = 0.2
    tonal: float = 0.0

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not math.isfinite(value) or value < 0:
                raise TonalDomainError(f"tension weight {f.name} must be finite and >= 0 (got {value})")

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> 'TensionWeights':
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass(frozen=True)
class TensionComponents:
    roughness: float = 0.0
    metric: float = 0.0
    registral: float = 0.0
    density: float = 0.0
    tonal: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class TensionPoint:
    """One sample of a tension curve (or of its derivative)"""
    tick: int
    seconds: float
    total: float
    components: TensionComponents = field(default_factory=TensionComponents)

    def to_dict(self) -> Dict:
        return {
            'tick': self.tick,
            'seconds': round(self.seconds, 6),
            'total': self.total,
            'components': self.components.as_dict(),
        }


@dataclass
class TensionOptions:
    weights: TensionWeights = field(default_factory=TensionWeights)
    sample_interval: Optional[int] = None   # defaults to ticks per quarter
    density_window: Optional[int] = None    # defaults to ticks per quarter
    registral_range: float = 48.0           # semitones, four octaves
    num_harmonics: int = DEFAULT_NUM_HARMONICS


def compute_tension(score: Score, options: Optional[TensionOptions] = None) -> List[TensionPoint]:
    """
    Sample multi-component tension every sample_interval ticks

    Components (each in [0, 1]):
    - roughness: Plomp-Levelt roughness of the sounding notes
    - metric: weakness of the metric position when a note starts there
    - registral: distance of the sounding register from the piece's mean pitch
    - density: onsets within the density window
    - tonal: 1 - TIV consonance of the sounding pitch classes

    Returns an empty list for a score without events.
    """
    opts = options or TensionOptions()
    tpq = score.ticks_per_quarter
    interval = opts.sample_interval if opts.sample_interval is not None else tpq
    density_window = opts.density_window if opts.density_window is not None else tpq
    if interval <= 0:
        raise TonalDomainError(f"sample_interval must be > 0 (got {interval})")
    if density_window <= 0:
        raise TonalDomainError(f"density_window must be > 0 (got {density_window})")
    if opts.registral_range <= 0:
        raise TonalDomainError(f"registral_range must be > 0 (got {opts.registral_range})")

    events = score.all_events()
    if not events:
        return []

    w = opts.weights
    max_tick = score.max_tick()
    time_sig = score.time_signatures[0] if score.time_signatures else TimeSignature()
    levels = build_metric_levels(time_sig, tpq)
    max_strength = max_beat_strength(levels)
    mean_midi = float(np.mean([event.pitch.midi for event in events]))

    curve = []
    for tick in range(0, max_tick + 1, interval):
        sounding = [event for event in events if event.contains_tick(tick)]

        roughness_val = 0.0
        if len(sounding) >= 2:
            freqs = [event.pitch.frequency(score.tuning_hz) for event in sounding]
            roughness_val = min(1.0, roughness(freqs, opts.num_harmonics) / ROUGHNESS_SCALE)

        # Notes starting on weak positions add tension
        metric_val = 0.0
        if any(abs(event.onset - tick) < interval / 2 for event in sounding):
            metric_val = 1.0 - beat_strength(tick, levels) / max_strength

        registral_val = 0.0
        tonal_val = 0.0
        if sounding:
            avg_midi = sum(event.pitch.midi for event in sounding) / len(sounding)
            registral_val = min(1.0, abs(avg_midi - mean_midi) / opts.registral_range)
            tonal_val = 1.0 - tiv_consonance(chroma_vector(sounding))

        half = density_window / 2
        nearby = sum(1 for event in events if tick - half <= event.onset < tick + half)
        density_val = min(1.0, nearby / DENSITY_SCALE)

        total = (w.roughness * roughness_val + w.metric * metric_val + w.registral * registral_val
                 + w.density * density_val + w.tonal * tonal_val)

        curve.append(TensionPoint(
            tick=tick,
            seconds=score.tick_to_seconds(tick),
            total=min(1.0, max(0.0, total)),
            components=TensionComponents(roughness_val, metric_val, registral_val, density_val, tonal_val),
        ))

    logger.debug("Computed %d tension samples every %d ticks", len(curve), interval)
    return curve


def _component_delta(a: TensionComponents, b: TensionComponents, dt: int) -> TensionComponents:
    return TensionComponents(**{
        name: (value - getattr(a, name)) / dt for name, value in b.as_dict().items()
    })


def tension_velocity(curve: Sequence[TensionPoint]) -> List[TensionPoint]:
    """First difference per tick; n - 1 points for n samples"""
    result = []
    for previous, current in zip(curve, curve[1:]):
        dt = current.tick - previous.tick
        if dt == 0:
            continue
        result.append(TensionPoint(
            tick=current.tick,
            seconds=current.seconds,
            total=(current.total - previous.total) / dt,
            components=_component_delta(previous.components, current.components, dt),
        ))
    return result


def tension_acceleration(curve: Sequence[TensionPoint]) -> List[TensionPoint]:
    """Second difference; n - 2 points for n samples"""
    return tension_velocity(tension_velocity(curve))


def tension_integral(curve: Sequence[TensionPoint], start_tick: int, end_tick: int) -> float:
    """Area under the curve between two ticks (inclusive) by the trapezoid rule"""
    if start_tick >= end_tick:
        return 0.0
    in_range = [point for point in curve if start_tick <= point.tick <= end_tick]
    if len(in_range) < 2:
        return 0.0

    return sum((a.total + b.total) / 2 * (b.tick - a.tick) for a, b in zip(in_range, in_range[1:]))


def find_tension_peaks(curve: Sequence[TensionPoint], flatness_tolerance: float = 0.0) -> List[TensionPoint]:
    """Interior points exceeding both neighbours by more than the tolerance"""
    if flatness_tolerance < 0:
        raise TonalDomainError(f"flatness_tolerance must be >= 0 (got {flatness_tolerance})")
    return [
        curve[i] for i in range(1, len(curve) - 1)
        if curve[i].total - curve[i - 1].total > flatness_tolerance
        and curve[i].total - curve[i + 1].total > flatness_tolerance
    ]


def find_tension_valleys(curve: Sequence[TensionPoint], flatness_tolerance: float = 0.0) -> List[TensionPoint]:
    """Interior points below both neighbours by more than the tolerance"""
    if flatness_tolerance < 0:
        raise TonalDomainError(f"flatness_tolerance must be >= 0 (got {flatness_tolerance})")
    return [
        curve[i] for i in range(1, len(curve) - 1)
        if curve[i - 1].total - curve[i].total > flatness_tolerance
        and curve[i + 1].total - curve[i].total > flatness_tolerance
    ]


def classify_tension_profile(curve: Sequence[TensionPoint]) -> str:
    """
    Overall shape of a curve: 'ramp', 'release', 'plateau', 'flat' or 'oscillation'

    Frequent direction changes win first, then low variance (plateau above
    0.5 mean, flat below), then the net slope.
    """
    if len(curve) < 2:
        return 'flat'

    totals = np.array([point.total for point in curve])
    net_change = totals[-1] - totals[0]
    mean = float(totals.mean())
    variance = float(totals.var())

    sign_changes = 0
    previous_slope = 0.0
    for slope in np.diff(totals):
        if slope != 0 and previous_slope != 0 and np.sign(slope) != np.sign(previous_slope):
            sign_changes += 1
        if slope != 0:
            previous_slope = slope
    change_rate = sign_changes / max(1, len(curve) - 2)

    if change_rate > CHANGE_RATE_THRESHOLD and math.sqrt(variance) > OSCILLATION_MIN_STD:
        return 'oscillation'
    if variance < VARIANCE_THRESHOLD:
        return 'plateau' if mean > 0.5 else 'flat'
    if net_change > SLOPE_THRESHOLD:
        return 'ramp'
    if net_change < -SLOPE_THRESHOLD:
        return 'release'
    return 'plateau' if mean > 0.5 else 'flat'
