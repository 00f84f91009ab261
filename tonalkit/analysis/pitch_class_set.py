"""
Pitch-Class Set Algebra
Normal form, prime form, interval-class vectors and Forte set-class lookup
"""
import logging
from numbers import Integral
from types import MappingProxyType
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from tonalkit.analysis.forte_catalog import ForteEntry, build_catalog, index_by_name
from tonalkit.core.errors import TonalDomainError
from tonalkit.utils.music_theory import KEY_NAMES, normalize_pc

logger = logging.getLogger(__name__)


def _rotations(pcs: Sequence[int]) -> List[Tuple[int, ...]]:
    n = len(pcs)
    return [tuple(pcs[(i + j) % n] for j in range(n)) for i in range(n)]


def normal_form(pcs: Iterable[int]) -> Tuple[int, ...]:
    """
    Most compact cyclic ordering of a set

    The rotation with the smallest span wins; ties are broken by comparing
    the intervals above the first element from left to right.
    """
    ordered = sorted({normalize_pc(pc) for pc in pcs})
    if len(ordered) <= 1:
        return tuple(ordered)

    def span(rotation):
        return (rotation[-1] - rotation[0]) % 12

    def inner_intervals(rotation):
        return tuple((pc - rotation[0]) % 12 for pc in rotation[1:])

    rotations = _rotations(ordered)
    min_span = min(span(rotation) for rotation in rotations)
    candidates = [rotation for rotation in rotations if span(rotation) == min_span]
    return min(candidates, key=inner_intervals)


def _transpose_to_zero(pcs: Sequence[int]) -> Tuple[int, ...]:
    if not pcs:
        return ()
    return tuple((pc - pcs[0]) % 12 for pc in pcs)


def prime_form(pcs: Iterable[int]) -> Tuple[int, ...]:
    """Lexicographically smaller of the zero-based normal forms of a set and its inversion"""
    members = [normalize_pc(pc) for pc in pcs]
    if not members:
        return ()

    original = _transpose_to_zero(normal_form(members))
    inverted = _transpose_to_zero(normal_form(12 - pc for pc in members))
    return min(original, inverted)


def interval_class_vector(pcs: Iterable[int]) -> Tuple[int, ...]:
    """Counts of interval classes 1-6 over all unordered pairs"""
    ordered = sorted({normalize_pc(pc) for pc in pcs})
    vector = [0] * 6
    for i, low in enumerate(ordered):
        for high in ordered[i + 1:]:
            diff = (high - low) % 12
            vector[min(diff, 12 - diff) - 1] += 1
    return tuple(vector)


FORTE_CATALOG = MappingProxyType(build_catalog(prime_form, interval_class_vector))
FORTE_BY_NAME = MappingProxyType(index_by_name(FORTE_CATALOG))


def forte_lookup(name: str) -> Optional[ForteEntry]:
    """Catalog entry for a Forte name such as '4-Z15', or None"""
    return FORTE_BY_NAME.get(name.strip())


class PitchClassSet:
    """
    An immutable, order-independent set of pitch classes

    Any integers are accepted and reduced mod 12; duplicates collapse.
    """
    __slots__ = ('_pcs',)

    def __init__(self, pcs: Iterable[int] = ()):
        members = set()
        for pc in pcs:
            if isinstance(pc, bool) or not isinstance(pc, Integral):
                raise TonalDomainError(f"pitch classes must be integers (got {pc!r})")
            members.add(normalize_pc(int(pc)))
        self._pcs = tuple(sorted(members))

    @property
    def pcs(self) -> Tuple[int, ...]:
        """Sorted members"""
        return self._pcs

    @property
    def size(self) -> int:
        return len(self._pcs)

    def __len__(self) -> int:
        return len(self._pcs)

    def __iter__(self) -> Iterator[int]:
        return iter(self._pcs)

    def __contains__(self, pc) -> bool:
        return isinstance(pc, Integral) and normalize_pc(int(pc)) in self._pcs

    def __eq__(self, other) -> bool:
        if not isinstance(other, PitchClassSet):
            return NotImplemented
        return self._pcs == other._pcs

    def __hash__(self) -> int:
        return hash(self._pcs)

    def __repr__(self) -> str:
        return f"PitchClassSet({list(self._pcs)})"

    def __str__(self) -> str:
        return '{' + ','.join(str(pc) for pc in self._pcs) + '}'

    def note_names(self) -> str:
        return '{' + ', '.join(KEY_NAMES[pc] for pc in self._pcs) + '}'

    # Transformations

    def transpose(self, n: int) -> 'PitchClassSet':
        return PitchClassSet(pc + n for pc in self._pcs)

    def invert(self) -> 'PitchClassSet':
        """Inversion around 0"""
        return PitchClassSet(12 - pc for pc in self._pcs)

    def complement(self) -> 'PitchClassSet':
        return PitchClassSet(pc for pc in range(12) if pc not in self._pcs)

    # Canonical forms

    def normal_form(self) -> Tuple[int, ...]:
        return normal_form(self._pcs)

    def prime_form(self) -> Tuple[int, ...]:
        return prime_form(self._pcs)

    def interval_class_vector(self) -> Tuple[int, ...]:
        return interval_class_vector(self._pcs)

    def interval_structure(self) -> Tuple[int, ...]:
        """Semitone gaps between adjacent members, including the wrap back to the first"""
        n = len(self._pcs)
        if n < 2:
            return ()
        return tuple((self._pcs[(i + 1) % n] - self._pcs[i]) % 12 for i in range(n))

    def forte_entry(self) -> Optional[ForteEntry]:
        """Catalog entry for this set's class, None for sets outside cardinalities 3-9"""
        return FORTE_CATALOG.get(self.prime_form())

    def forte_name(self) -> Optional[str]:
        entry = self.forte_entry()
        return entry.name if entry else None

    # Set algebra

    def union(self, other: 'PitchClassSet') -> 'PitchClassSet':
        return PitchClassSet(self._pcs + other.pcs)

    def intersection(self, other: 'PitchClassSet') -> 'PitchClassSet':
        return PitchClassSet(pc for pc in self._pcs if pc in other)

    def difference(self, other: 'PitchClassSet') -> 'PitchClassSet':
        return PitchClassSet(pc for pc in self._pcs if pc not in other)

    def symmetric_difference(self, other: 'PitchClassSet') -> 'PitchClassSet':
        return self.difference(other).union(other.difference(self))

    def is_subset_of(self, other: 'PitchClassSet') -> bool:
        return all(pc in other for pc in self._pcs)

    def is_superset_of(self, other: 'PitchClassSet') -> bool:
        return other.is_subset_of(self)

    def is_transpositionally_equivalent(self, other: 'PitchClassSet') -> bool:
        """True when some Tn maps this set onto the other"""
        return any(self.transpose(n) == other for n in range(12))

    def is_set_class_equivalent(self, other: 'PitchClassSet') -> bool:
        """True when the sets share a prime form (Tn/TnI equivalence)"""
        return self.prime_form() == other.prime_form()
