import re
import statistics
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Sequence, Set, Tuple

from .vocabulary import (
    EU_SIZE_TOKEN_RE,
    IGNORED_LINE_RE,
    KEYWORD_RE,
    MAGNITUDE_GUESSES,
    MEASUREMENT_ALIASES,
    MIN_ROWS,
    NUMBER_RE,
    PARENTHETICAL_RE,
    SIZE_TOKEN_RE,
    SIZE_WORD_RE,
    SMALL_SIZE_TOKEN_RE,
    STANDALONE_SIZE_RE,
    BOTTOM_KEYS,
    TOP_KEYS,
)


class KeywordHit(NamedTuple):
    start: int
    end: int
    key: str
    label: str


# Digit/letter confusions seen in OCR of size charts
_OCR_FIXES: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"(?<=\d)\$"), "5"),                          # 6$ -> 65
    (re.compile(r"\$(?=\d)"), "5"),                           # $3 -> 53
    (re.compile(r"(?<![A-Za-z0-9.])S(?=\d(?![\d.]))"), "5"),  # S5 -> 55 (S100 is an inline pair, left alone)
    (re.compile(r"(?<![\d.]\d)(?<=\d)S(?![A-Za-z0-9])"), "5"),  # 5S -> 55
    (re.compile(r"(?<=\d)[Oo](?=\d)"), "0"),                  # 1O5 -> 105
    (re.compile(r"(?<=\d\d)[Oo](?![A-Za-z0-9])"), "0"),       # 10O -> 100
)


def normalize_ocr_text(text: str) -> str:
    result = text.replace("\r\n", "\n").replace("\r", "\n")
    for pattern, replacement in _OCR_FIXES:
        result = pattern.sub(replacement, result)
    return result


def split_lines(text: str) -> List[str]:
    return [line.strip() for line in text.split("\n") if line.strip()]


def reflow(line: str) -> str:
    """Break run-together OCR output so "Size" and every measurement keyword start a line."""
    cuts = sorted({m.start() for m in KEYWORD_RE.finditer(line)} | {m.start() for m in SIZE_WORD_RE.finditer(line)})
    pieces = []
    last = 0
    for cut in cuts:
        pieces.append(line[last:cut])
        last = cut
    pieces.append(line[last:])
    return "\n".join(piece.strip() for piece in pieces if piece.strip())


def strip_parentheticals(line: str) -> str:
    return PARENTHETICAL_RE.sub(" ", line)


def extract_numbers(line: str) -> List[float]:
    return [float(m) for m in NUMBER_RE.findall(strip_parentheticals(line))]


def find_keywords(line: str) -> List[KeywordHit]:
    hits = []
    for match in KEYWORD_RE.finditer(line):
        label = " ".join(match.group(1).split())
        key = MEASUREMENT_ALIASES.get(label.lower())
        if key is None:
            # "PantsLength" style labels with the space dropped
            key = next(
                (v for k, v in MEASUREMENT_ALIASES.items() if k.replace(" ", "") == label.lower().replace(" ", "")),
                None,
            )
        if key:
            hits.append(KeywordHit(match.start(), match.end(), key, label))
    return hits


def keyword_chunks(line: str) -> List[Tuple[KeywordHit, List[float]]]:
    """Pair each keyword on the line with the numbers up to the next keyword."""
    hits = find_keywords(line)
    chunks = []
    for i, hit in enumerate(hits):
        end = hits[i + 1].start if i + 1 < len(hits) else len(line)
        chunks.append((hit, extract_numbers(line[hit.end:end])))
    return chunks


def find_size_tokens(line: str) -> List[str]:
    return [m.upper() for m in SIZE_TOKEN_RE.findall(strip_parentheticals(line))]


def has_size_word(line: str) -> bool:
    return SIZE_WORD_RE.search(line) is not None


def is_ignored_line(line: str) -> bool:
    return IGNORED_LINE_RE.search(line) is not None and not find_keywords(line)


def unique(items: Iterable[str]) -> List[str]:
    seen: Set[str] = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def numeric_size_sequence(line: str) -> Optional[List[str]]:
    """Return the sizes of a line that lists ≥2 EU or small-integer sizes and nothing else numeric."""
    body = SIZE_WORD_RE.sub(" ", strip_parentheticals(line))
    if find_keywords(body) or re.search(r"[A-Za-z]{2,}", body):
        return None
    tokens = re.findall(r"\d+(?:\.\d+)?", body)
    if len(tokens) < 2:
        return None
    eu = [t for t in tokens if EU_SIZE_TOKEN_RE.fullmatch(t) and int(t) % 2 == 0]
    if len(eu) == len(tokens) and len(set(eu)) == len(eu):
        return eu
    small = [t for t in tokens if SMALL_SIZE_TOKEN_RE.fullmatch(t)]
    if len(small) == len(tokens) and len(set(small)) == len(small):
        return small
    return None


def header_sizes(line: str) -> Optional[List[str]]:
    """Sizes introduced by a "Size ..." header line, or None when the line is not one.

    Requires the word Size and at least two distinct size tokens of a single universe.
    """
    if not has_size_word(line):
        return None
    letters = unique(find_size_tokens(line))
    if len(letters) >= 2:
        return letters
    return numeric_size_sequence(line)


def standalone_size_label(line: str, one_means_m: bool = False) -> Optional[str]:
    """The size label of a line holding only a label (and maybe an alternate code)."""
    match = STANDALONE_SIZE_RE.match(line)
    if not match:
        return None
    label = match.group(1).upper()
    if label == "1":
        # OCR reads the "M" of "M(170/88A)" as "1"
        if one_means_m and PARENTHETICAL_RE.search(line):
            return "M"
        return None
    return label


def region_of(keys: Iterable[str]) -> str:
    """'bottom' when bottom keys are present and no top keys, else 'top'."""
    base = {k.rstrip("0123456789") for k in keys}
    if base & BOTTOM_KEYS and not base & TOP_KEYS:
        return "bottom"
    return "top"


def guess_measurement_key(values: Sequence[float], taken: Iterable[str], region: str = "top") -> str:
    """Name an unlabeled value row from its median, suffixing 2, 3, ... on collision."""
    median = statistics.median(values)
    guesses = MAGNITUDE_GUESSES.get(region, MAGNITUDE_GUESSES["top"])
    key = next((name for floor, name in guesses if median > floor), guesses[-1][1])
    return dedupe_key(key, taken)


def dedupe_key(key: str, taken: Iterable[str]) -> str:
    taken = set(taken)
    if key not in taken:
        return key
    n = 2
    while f"{key}{n}" in taken:
        n += 1
    return f"{key}{n}"


def build_rows(sizes: Sequence[str], measurements: Dict[str, Sequence[float]]) -> List[Dict[str, Any]]:
    """Align the i-th value of every measurement with the i-th size label.

    Rows that end up with no measurement are dropped.
    """
    rows = []
    for i, size in enumerate(sizes):
        row: Dict[str, Any] = {"size": size}
        for key, values in measurements.items():
            if i < len(values):
                row[key] = values[i]
        if len(row) > 1:
            rows.append(row)
    return rows


def result(headers: Sequence[str], rows: Sequence[Dict[str, Any]], min_rows: int = MIN_ROWS) -> Dict[str, Any]:
    if len(rows) < min_rows:
        return empty_result()
    return {"headers": list(headers), "rows": list(rows)}


def empty_result() -> Dict[str, Any]:
    return {"headers": [], "rows": []}


def result_score(parsed: Dict[str, Any]) -> int:
    """rows x measurement keys of the first row."""
    rows = parsed.get("rows") or []
    if not rows:
        return 0
    return len(rows) * (len(rows[0]) - 1)
