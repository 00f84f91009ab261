# Onset quantization and swing.
# Both transforms rewrite event onsets in place and hand back the same list,
# so only one caller may be transforming a given event collection at a time.
# Strength scales how far each note moves toward its grid point:
# 0.0 leaves the timing untouched, 1.0 snaps fully to the grid.
import logging
import math
from typing import List

from tonalkit.core.errors import TonalDomainError
from tonalkit.core.midi_data import NoteEvent

logger = logging.getLogger(__name__)


def _nearest_grid_point(tick: int, grid_ticks: int) -> int:
    # Halfway points round up
    return int(math.floor(tick / grid_ticks + 0.5)) * grid_ticks


def quantize(events: List[NoteEvent], grid_ticks: int, strength: float = 1.0) -> List[NoteEvent]:
    """
    Move note onsets toward the nearest grid point (in place)

    Args:
        events: Events to rewrite
        grid_ticks: Grid resolution, e.g. 120 for sixteenths at 480 ticks per quarter
        strength: Fraction of the distance to the grid point to move, 0.0 to 1.0

    Returns: The same list
    """
    if grid_ticks <= 0:
        raise TonalDomainError(f"grid_ticks must be > 0 (got {grid_ticks})")
    if not 0.0 <= strength <= 1.0:
        raise TonalDomainError(f"strength must be 0-1 (got {strength})")

    moved = 0
    for event in events:
        target = _nearest_grid_point(event.onset, grid_ticks)
        new_onset = event.onset + int(round((target - event.onset) * strength))
        if new_onset != event.onset:
            event.onset = new_onset
            moved += 1

    logger.debug("Quantized %d of %d onsets to a %d-tick grid", moved, len(events), grid_ticks)
    return events


def swing(events: List[NoteEvent], ratio: float, grid_ticks: int) -> List[NoteEvent]:
    """
    Delay every second subdivision of each grid pair (in place)

    ratio places the off-beat within the pair: 0.5 is straight,
    about 0.67 a triplet swing, 0.75 a heavy shuffle. Only onsets
    sitting on the off-beat move.
    """
    if not 0.0 <= ratio <= 1.0:
        raise TonalDomainError(f"ratio must be 0-1 (got {ratio})")
    if grid_ticks <= 0:
        raise TonalDomainError(f"grid_ticks must be > 0 (got {grid_ticks})")

    pair_ticks = grid_ticks * 2
    offset = int(math.floor(pair_ticks * ratio + 0.5))
    for event in events:
        pair_start = (event.onset // pair_ticks) * pair_ticks
        if event.onset - pair_start == grid_ticks:
            event.onset = pair_start + offset
    return events
