"""
Metric hierarchy and symbolic durations
Tick positions are always interpreted against a caller-supplied ticks-per-quarter
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Optional, Sequence

from tonalkit.core.errors import TonalDomainError
from tonalkit.core.midi_data import DEFAULT_TICKS_PER_QUARTER, TimeSignature

# Duration name -> length in quarter notes, longest first
DURATION_MAP = MappingProxyType({
    'double whole': 8.0,
    'dotted whole': 6.0,
    'whole': 4.0,
    'dotted half': 3.0,
    'half': 2.0,
    'dotted quarter': 1.5,
    'quarter': 1.0,
    'dotted eighth': 0.75,
    'eighth': 0.5,
    'dotted sixteenth': 0.375,
    'sixteenth': 0.25,
    'thirty-second': 0.125,
    'sixty-fourth': 0.0625,
    'triplet quarter': 2.0 / 3.0,
    'triplet eighth': 1.0 / 3.0,
    'triplet sixteenth': 1.0 / 6.0,
})

DURATION_TOLERANCE = 0.01


@dataclass(frozen=True)
class MetricLevel:
    """One level of the metric hierarchy"""
    name: str
    period_ticks: float
    weight: int


def _is_compound(time_sig: TimeSignature) -> bool:
    # 3/4 and 3/8 are simple triple, 6/8, 9/8 and 12/8 are compound
    return time_sig.numerator > 3 and time_sig.numerator % 3 == 0


def build_metric_levels(time_sig: TimeSignature, ticks_per_quarter: int,
                        beat_grouping: Optional[Sequence[int]] = None) -> List[MetricLevel]:
    """
    Build the metric hierarchy for a time signature

    Args:
        time_sig: Meter to derive the levels from
        ticks_per_quarter: Score resolution
        beat_grouping: Note-value groups per beat for irregular meters, e.g. (2, 2, 3) for 7/8

    Returns: Levels from finest (subdivision) to coarsest (hypermeter)
    """
    if ticks_per_quarter <= 0:
        raise TonalDomainError(f"ticks_per_quarter must be > 0 (got {ticks_per_quarter})")
    if time_sig.numerator <= 0 or time_sig.denominator <= 0:
        raise TonalDomainError(f"Invalid time signature {time_sig.numerator}/{time_sig.denominator}")

    note_value_ticks = (4 / time_sig.denominator) * ticks_per_quarter
    bar_ticks = note_value_ticks * time_sig.numerator

    if beat_grouping:
        if any(group <= 0 for group in beat_grouping):
            raise TonalDomainError(f"beat grouping values must be > 0 (got {list(beat_grouping)})")
        subdivision_ticks = note_value_ticks
        beat_ticks = note_value_ticks * min(beat_grouping)
        hyper_ticks = bar_ticks * 4
    elif _is_compound(time_sig):
        beats_per_bar = time_sig.numerator // 3
        subdivision_ticks = note_value_ticks
        beat_ticks = note_value_ticks * 3  # dotted beat
        hyper_ticks = bar_ticks * (4 if beats_per_bar <= 2 else 2)
    else:
        beat_ticks = note_value_ticks
        subdivision_ticks = beat_ticks / 2
        hyper_ticks = bar_ticks * 4

    return [
        MetricLevel('subdivision', subdivision_ticks, 1),
        MetricLevel('beat', beat_ticks, 2),
        MetricLevel('bar', bar_ticks, 3),
        MetricLevel('hypermeter', hyper_ticks, 4),
    ]


def _on_level(tick: float, level: MetricLevel) -> bool:
    remainder = tick % level.period_ticks
    return remainder < 0.5 or level.period_ticks - remainder < 0.5


def beat_strength(tick: float, levels: Sequence[MetricLevel]) -> int:
    """Sum of the weights of every level whose grid the tick falls on"""
    return sum(level.weight for level in levels if _on_level(tick, level))


def max_beat_strength(levels: Sequence[MetricLevel]) -> int:
    return sum(level.weight for level in levels)


def metric_position(tick: float, levels: Sequence[MetricLevel]) -> List[str]:
    """Names of the levels the tick aligns with, e.g. a downbeat gives subdivision, beat, bar"""
    return [level.name for level in levels if _on_level(tick, level)]


def duration_name(ticks: int, ticks_per_quarter: int = DEFAULT_TICKS_PER_QUARTER) -> Optional[str]:
    """Closest standard duration name, or None for non-standard lengths"""
    if ticks_per_quarter <= 0:
        raise TonalDomainError(f"ticks_per_quarter must be > 0 (got {ticks_per_quarter})")
    if ticks <= 0:
        return None

    ratio = ticks / ticks_per_quarter
    for name, quarters in DURATION_MAP.items():
        if abs(ratio - quarters) < DURATION_TOLERANCE:
            return name
    return None


def duration_ticks(name: str, ticks_per_quarter: int = DEFAULT_TICKS_PER_QUARTER) -> int:
    """Tick length of a named duration such as 'dotted eighth' or 'triplet quarter'"""
    if ticks_per_quarter <= 0:
        raise TonalDomainError(f"ticks_per_quarter must be > 0 (got {ticks_per_quarter})")

    quarters = DURATION_MAP.get(name.lower().strip())
    if quarters is None:
        raise TonalDomainError(f"Unknown duration name: {name!r}")
    return int(round(ticks_per_quarter * quarters))
