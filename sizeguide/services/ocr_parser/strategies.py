"""Single-table parsing strategies.

Each strategy takes the translated OCR text and returns ``{"headers", "rows"}``
or the empty result when it does not recognise the layout. They are
independent of each other; ``parser.reconstruct`` runs them all and keeps the
best scoring one.
"""

import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..sizes import get_next_size_up, get_previous_size, sort_rows_by_size
from .multi_table import parse_segment
from .text import (
    build_rows,
    dedupe_key,
    empty_result,
    extract_numbers,
    find_keywords,
    find_size_tokens,
    guess_measurement_key,
    has_size_word,
    is_ignored_line,
    keyword_chunks,
    numeric_size_sequence,
    reflow,
    region_of,
    result,
    result_score,
    split_lines,
    standalone_size_label,
    unique,
)
from .vocabulary import (
    DEFAULT_ROW_KEYS,
    EU_SIZE_TOKEN_RE,
    IMPLICIT_FIRST_SIZE,
    LETTER_SIZE_PATTERN,
    MIN_ROWS_OCR_RECOVERY,
    SMALL_SIZE_TOKEN_RE,
)


ParseResult = Dict[str, Any]

# lower-case s/m/l only count when values follow on the same line
ROW_START_RE = re.compile(
    r"^\s*(" + LETTER_SIZE_PATTERN + r"|(?i:s|m|l)(?=\s*[:：=]?\s*\d))(?![A-Za-z0-9])"
)
NUMERIC_ROW_START_RE = re.compile(r"^\s*(\d{1,2})(?![\d.])")
INLINE_PAIR_RE = re.compile(
    r"(?<![A-Za-z0-9])(" + LETTER_SIZE_PATTERN + r")\s*[:：=]?\s*(\d{2,3}(?:\.\d+)?)(?!\d)"
)


def _header_keys(line: str) -> Optional[List[str]]:
    """Measurement keys of a column-header line ("Size Chest Shoulder Length"), in order."""
    hits = find_keywords(line)
    if extract_numbers(line):
        return None
    if len(hits) >= 2 or (hits and has_size_word(line)):
        keys: List[str] = []
        for hit in hits:
            keys.append(dedupe_key(hit.key, keys))
        return keys
    return None


def _block_size(first_label: Optional[str]) -> str:
    if first_label:
        return get_previous_size(first_label) or IMPLICIT_FIRST_SIZE
    return IMPLICIT_FIRST_SIZE


# ---------------------------------------------------------------------------
# 1. Column-grouped
# ---------------------------------------------------------------------------

def parse_column_grouped(text: str) -> ParseResult:
    """Size labels first, one per line, then each measurement keyword followed by its values.

        S(165/84A)
        M(170/88A)
        L(175/92A)
        Chest
        100 104 108
        Length 68 70 72
    """
    lines = split_lines(text)
    first_keyword = next((i for i, line in enumerate(lines) if find_keywords(line)), None)
    if first_keyword is None:
        return empty_result()

    sizes: List[str] = []
    for line in lines[:first_keyword]:
        label = standalone_size_label(line, one_means_m=True)
        if label and label not in sizes:
            sizes.append(label)
    if len(sizes) < 2:
        return empty_result()

    n = len(sizes)
    measurements: Dict[str, List[float]] = {}
    current = None
    for line in lines[first_keyword:]:
        if is_ignored_line(line):
            current = None
            continue
        chunks = keyword_chunks(line)
        if chunks:
            for hit, values in chunks:
                current = dedupe_key(hit.key, measurements)
                measurements[current] = values[:n]
            continue
        if current is None or standalone_size_label(line):
            continue
        room = n - len(measurements[current])
        if room > 0:
            measurements[current].extend(extract_numbers(line)[:room])

    measurements = {k: v for k, v in measurements.items() if v}
    return result(list(measurements), build_rows(sizes, measurements))


# ---------------------------------------------------------------------------
# 2. OCR small-chart recovery
# ---------------------------------------------------------------------------

def _block_values(lines: Sequence[str]) -> Dict[str, List[float]]:
    values: Dict[str, List[float]] = {}
    pending = None
    for line in lines:
        if is_ignored_line(line):
            continue
        chunks = keyword_chunks(line)
        if chunks:
            for hit, numbers in chunks:
                if numbers:
                    values.setdefault(hit.key, numbers)
                else:
                    pending = hit.key
            continue
        numbers = extract_numbers(line)
        if numbers and pending:
            values.setdefault(pending, numbers)
            pending = None
    return values


def parse_ocr_small_chart(text: str) -> ParseResult:
    """Per-size blocks where the OCR lost a label.

    Layout is a size label line followed by that size's keyword/value lines.
    Two failure modes are repaired: values before the first label belong to
    the (dropped) preceding size, and a block whose neighbouring label is
    missing may carry two values per keyword, one for each size, alternating.
    """
    blocks: List[Tuple[Optional[str], List[str]]] = [(None, [])]
    for line in split_lines(text):
        label = standalone_size_label(line)
        if label:
            blocks.append((label, []))
        else:
            blocks[-1][1].append(line)

    labels = [label for label, _ in blocks if label]
    if not labels:
        return empty_result()

    rows: Dict[str, Dict[str, Any]] = {}
    headers: List[str] = []

    def _put(size: str, key: str, value: float) -> None:
        rows.setdefault(size, {"size": size}).setdefault(key, value)
        if key not in headers:
            headers.append(key)

    for label, block_lines in blocks:
        values = _block_values(block_lines)
        if not values:
            continue
        size = label or _block_size(labels[0])
        if label is None and size in labels:
            continue
        lower = get_previous_size(size)
        upper = get_next_size_up(size)
        pair = None
        if all(len(v) == 2 for v in values.values()):
            # the second size is whichever neighbour leaves a gap in the visible labels
            upper_gap = upper and upper not in labels and get_next_size_up(upper) in labels
            if upper_gap:
                pair = (size, upper)
            elif lower and lower not in labels and lower not in rows:
                pair = (lower, size)
            elif upper and upper not in labels:
                pair = (size, upper)
        for key, numbers in values.items():
            if pair:
                evens, odds = numbers[0::2], numbers[1::2]
                _put(pair[0], key, evens[0])
                _put(pair[1], key, odds[0])
            elif len(numbers) == 1:
                _put(size, key, numbers[0])

    ordered = sort_rows_by_size([row for row in rows.values() if len(row) > 1])
    return result(headers, ordered, min_rows=MIN_ROWS_OCR_RECOVERY)


# ---------------------------------------------------------------------------
# 3. Numeric sizes (1..9 or EU 44..58)
# ---------------------------------------------------------------------------

def _reflow_lines(text: str) -> List[str]:
    lines = []
    for line in split_lines(text):
        keyword_count = len(find_keywords(line)) + (1 if has_size_word(line) else 0)
        if keyword_count >= 2 and extract_numbers(line):
            lines.extend(split_lines(reflow(line)))
        else:
            lines.append(line)
    return lines


def _is_numeric_size(token: str) -> bool:
    if SMALL_SIZE_TOKEN_RE.fullmatch(token):
        return True
    return bool(EU_SIZE_TOKEN_RE.fullmatch(token)) and int(token) % 2 == 0


def parse_numeric_sizes(text: str) -> ParseResult:
    """Sizes written as small integers or EU sizes, column- or row-major."""
    lines = _reflow_lines(text)

    size_idx = None
    sizes: List[str] = []
    for idx, line in enumerate(lines):
        found = numeric_size_sequence(line)
        if found:
            size_idx, sizes = idx, found
            break

    if size_idx is not None:
        table = parse_segment(sizes, lines[max(0, size_idx - 2):size_idx], lines[size_idx + 1:])
        if table:
            return result(table["headers"], table["rows"])

    header_keys = None
    rows: Dict[str, Dict[str, Any]] = {}
    for line in lines:
        if header_keys is None:
            header_keys = _header_keys(line)
            if header_keys is not None:
                continue
        match = NUMERIC_ROW_START_RE.match(line)
        if not match or not _is_numeric_size(match.group(1)):
            continue
        values = extract_numbers(line[match.end():])
        if len(values) < 2:
            continue
        row: Dict[str, Any] = {"size": match.group(1)}
        row.update(zip(header_keys or DEFAULT_ROW_KEYS, values))
        rows.setdefault(row["size"], row)

    ordered = sort_rows_by_size(list(rows.values()))
    return result(header_keys or list(DEFAULT_ROW_KEYS), ordered)


# ---------------------------------------------------------------------------
# 4. Row-based
# ---------------------------------------------------------------------------

def parse_row_based(text: str) -> ParseResult:
    """Each row is a size followed by its values ("M 104 45 70" or "M: Chest104 Length70")."""
    header_keys = None
    rows: Dict[str, Dict[str, Any]] = {}
    headers: List[str] = []

    for line in split_lines(text):
        match = ROW_START_RE.match(line)
        if not match:
            if header_keys is None:
                header_keys = _header_keys(line)
            continue
        size = match.group(1).upper()
        rest = line[match.end():]
        row: Dict[str, Any] = {"size": size}
        chunks = [(hit, values) for hit, values in keyword_chunks(rest) if values]
        if chunks:
            for hit, values in chunks:
                row.setdefault(hit.key, values[0])
        else:
            row.update(zip(header_keys or DEFAULT_ROW_KEYS, extract_numbers(rest)))
        if len(row) > 1 and size not in rows:
            rows[size] = row
            headers.extend(k for k in row if k != "size" and k not in headers)

    return result(headers, list(rows.values()))


# ---------------------------------------------------------------------------
# 5. Column-based / inline / vertical
# ---------------------------------------------------------------------------

def _parse_column_major(lines: Sequence[str]) -> ParseResult:
    for idx, line in enumerate(lines):
        sizes = unique(find_size_tokens(line))
        if len(sizes) >= 2 and not extract_numbers(line):
            table = parse_segment(sizes, lines[max(0, idx - 2):idx], lines[idx + 1:])
            if table:
                return result(table["headers"], table["rows"])
            return empty_result()
    return empty_result()


def _parse_inline_pairs(lines: Sequence[str]) -> ParseResult:
    by_size: Dict[str, Dict[str, Any]] = {}
    headers: List[str] = []
    for line in lines:
        hits = find_keywords(line)
        if not hits:
            continue
        pairs = INLINE_PAIR_RE.findall(line[hits[0].end:])
        if len(pairs) < 2:
            continue
        key = dedupe_key(hits[0].key, headers)
        headers.append(key)
        for size, value in pairs:
            by_size.setdefault(size.upper(), {"size": size.upper()})[key] = float(value)
    return result(headers, sort_rows_by_size(list(by_size.values())))


def _parse_vertical(lines: Sequence[str]) -> ParseResult:
    sizes: List[str] = []
    measurements: Dict[str, List[float]] = {}
    current = None
    for line in lines:
        label = standalone_size_label(line)
        if label:
            if label not in sizes:
                sizes.append(label)
            continue
        hits = find_keywords(line)
        if hits:
            current = dedupe_key(hits[-1].key, measurements)
            measurements[current] = []
            continue
        values = extract_numbers(line)
        if current and len(values) == 1 and re.fullmatch(r"[\d.\s]+(?:cm)?", line, re.IGNORECASE):
            measurements[current].append(values[0])
    measurements = {k: v for k, v in measurements.items() if v}
    return result(list(measurements), build_rows(sizes, measurements))


def _parse_line_oriented(lines: Sequence[str]) -> ParseResult:
    keys = None
    backfill: Dict[str, float] = {}
    rows: Dict[str, Dict[str, Any]] = {}
    for line in lines:
        if keys is None:
            keys = _header_keys(line)
            if keys is not None:
                continue
        match = ROW_START_RE.match(line)
        if match and keys:
            values = extract_numbers(line[match.end():])
            if len(values) == len(keys):
                size = match.group(1).upper()
                rows.setdefault(size, {"size": size, **dict(zip(keys, values))})
            continue
        if not rows:
            chunks = keyword_chunks(line)
            if len(chunks) == 1 and len(chunks[0][1]) == 1:
                backfill.setdefault(chunks[0][0].key, chunks[0][1][0])

    ordered = list(rows.values())
    if ordered and backfill:
        size = _block_size(ordered[0]["size"])
        if size not in rows:
            ordered.insert(0, {"size": size, **backfill})
    return result(keys or [], ordered)


def parse_column_formats(text: str) -> ParseResult:
    """Best of the column-major, inline-pair, vertical-list and line-oriented layouts."""
    lines = split_lines(text)
    best = empty_result()
    for parser in (_parse_column_major, _parse_inline_pairs, _parse_vertical, _parse_line_oriented):
        candidate = parser(lines)
        if result_score(candidate) > result_score(best):
            best = candidate
    return best


# ---------------------------------------------------------------------------
# 6. Positional fallback
# ---------------------------------------------------------------------------

def parse_positional(text: str) -> ParseResult:
    """Align size tokens with number-bearing lines purely by order.

    A value line that starts with its own measurement keyword ("Chest: 108 112
    116") is a column, one value per size, wherever the size labels appear.
    Without such lines every value line is a row, keyed by the header line or
    the default keys.
    """
    sizes: List[str] = []
    numeric_lines: List[List[float]] = []
    columns: Dict[str, List[float]] = {}
    header_keys = None
    for line in split_lines(text):
        if is_ignored_line(line):
            continue
        values = extract_numbers(line)
        if not values:
            tokens = find_size_tokens(line)
            if tokens:
                sizes = unique(sizes + tokens)
            elif header_keys is None:
                header_keys = _header_keys(line)
            continue
        chunks = keyword_chunks(line)
        if len(chunks) == 1 and chunks[0][0].start == 0 and chunks[0][1]:
            columns[dedupe_key(chunks[0][0].key, columns)] = chunks[0][1]
        else:
            numeric_lines.append(values)

    if columns:
        for values in numeric_lines:
            if len(values) >= len(sizes):
                columns[guess_measurement_key(values, columns, region_of(columns))] = values
        return result(list(columns), build_rows(sizes, columns))

    keys = header_keys or list(DEFAULT_ROW_KEYS)
    rows = []
    for size, values in zip(sizes, numeric_lines):
        row: Dict[str, Any] = {"size": size}
        row.update(zip(keys, values))
        rows.append(row)
    return result(keys, rows)


STRATEGIES = (
    ("column_grouped", parse_column_grouped),
    ("ocr_small_chart", parse_ocr_small_chart),
    ("numeric_sizes", parse_numeric_sizes),
    ("row_based", parse_row_based),
    ("column_formats", parse_column_formats),
    ("positional", parse_positional),
)
