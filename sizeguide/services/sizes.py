"""Size label universes and their ordering.

Three independent universes are comparable only within themselves:

* letter sizes   XXS < XS < S < M < L < XL < XXL < 3XL < 4XL < 5XL
* small integers 1 < 2 < ... < 9
* EU sizes       44 < 46 < ... < 58 (step 2)

Labels from different universes have no relation (``compare_sizes`` returns
``None``).
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence


LETTER_SIZE_ORDER: List[str] = ["XXS", "XS", "S", "M", "L", "XL", "XXL", "3XL", "4XL", "5XL"]
LETTER_SIZE_ALIASES: Dict[str, str] = {"2XL": "XXL", "XXXL": "3XL", "XXXXL": "4XL"}

SMALL_SIZE_RANGE = (1, 9)
EU_SIZE_ORDER: List[str] = [str(n) for n in range(44, 60, 2)]

LETTER = "letter"
SMALL = "small"
EU = "eu"


def canonical_size(label: str) -> str:
    norm = (label or "").strip().upper()
    return LETTER_SIZE_ALIASES.get(norm, norm)


def size_universe(label: str) -> Optional[str]:
    norm = canonical_size(label)
    if norm in LETTER_SIZE_ORDER:
        return LETTER
    if norm.isdigit():
        value = int(norm)
        if SMALL_SIZE_RANGE[0] <= value <= SMALL_SIZE_RANGE[1]:
            return SMALL
        if norm in EU_SIZE_ORDER:
            return EU
    return None


def is_letter_size(label: str) -> bool:
    return size_universe(label) == LETTER


def get_next_size_up(current: str) -> Optional[str]:
    """Return the successor of ``current`` in its universe, or None at the top / when unknown."""
    norm = canonical_size(current)
    universe = size_universe(norm)
    if universe == LETTER:
        idx = LETTER_SIZE_ORDER.index(norm)
        return LETTER_SIZE_ORDER[idx + 1] if idx + 1 < len(LETTER_SIZE_ORDER) else None
    if universe == SMALL:
        value = int(norm)
        return str(value + 1) if value < SMALL_SIZE_RANGE[1] else None
    if universe == EU:
        idx = EU_SIZE_ORDER.index(norm)
        return EU_SIZE_ORDER[idx + 1] if idx + 1 < len(EU_SIZE_ORDER) else None
    return None


def get_previous_size(current: str) -> Optional[str]:
    norm = canonical_size(current)
    universe = size_universe(norm)
    if universe == LETTER:
        idx = LETTER_SIZE_ORDER.index(norm)
        return LETTER_SIZE_ORDER[idx - 1] if idx > 0 else None
    if universe == SMALL:
        value = int(norm)
        return str(value - 1) if value > SMALL_SIZE_RANGE[0] else None
    if universe == EU:
        idx = EU_SIZE_ORDER.index(norm)
        return EU_SIZE_ORDER[idx - 1] if idx > 0 else None
    return None


def compare_sizes(size_a: str, size_b: str) -> Optional[int]:
    """Negative / zero / positive like a cmp function; None when the sizes are not comparable."""
    a, b = canonical_size(size_a), canonical_size(size_b)
    ua, ub = size_universe(a), size_universe(b)
    if ua is None or ua != ub:
        return None
    if ua == LETTER:
        return LETTER_SIZE_ORDER.index(a) - LETTER_SIZE_ORDER.index(b)
    return int(a) - int(b)


def sort_rows_by_size(rows: Sequence[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    """Letter order when every label is a letter size, integer order when every label is numeric.

    Mixed or unrecognised labels keep their original order.
    """
    labels = [str(r.get("size", "")) for r in rows]
    if labels and all(is_letter_size(s) for s in labels):
        return sorted(rows, key=lambda r: LETTER_SIZE_ORDER.index(canonical_size(str(r["size"]))))
    if labels and all(s.strip().isdigit() for s in labels):
        return sorted(rows, key=lambda r: int(str(r["size"]).strip()))
    return list(rows)
