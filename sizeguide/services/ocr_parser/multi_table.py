from typing import Any, Dict, List, Optional, Sequence

from .text import (
    build_rows,
    dedupe_key,
    extract_numbers,
    find_keywords,
    guess_measurement_key,
    header_sizes,
    is_ignored_line,
    keyword_chunks,
    region_of,
    split_lines,
)
from .vocabulary import MIN_ROWS, PRE_HEADER_WINDOW


def _keyword_only(line: str) -> bool:
    return bool(find_keywords(line)) and not extract_numbers(line)


def parse_segment(sizes: Sequence[str], pre_lines: Sequence[str], body_lines: Sequence[str]) -> Optional[Dict[str, Any]]:
    """Build one table from the lines around a size header.

    Keyword-only lines (here or in ``pre_lines``) queue measurement names for
    the unlabeled value lines that follow them; value lines with no name left
    in the queue are named by magnitude.
    """
    n = len(sizes)
    measurements: Dict[str, List[float]] = {}
    pending: List[str] = []

    for line in pre_lines:
        if _keyword_only(line):
            pending.extend(hit.key for hit in find_keywords(line))

    for line in body_lines:
        if is_ignored_line(line):
            continue
        chunks = keyword_chunks(line)
        if chunks:
            for hit, values in chunks:
                if values:
                    measurements[dedupe_key(hit.key, measurements)] = values[:n]
                else:
                    pending.append(hit.key)
            continue
        values = extract_numbers(line)
        if len(values) < n:
            continue
        if pending:
            key = dedupe_key(pending.pop(0), measurements)
        else:
            key = guess_measurement_key(values, measurements, region_of(measurements))
        measurements[key] = values[:n]

    rows = build_rows(sizes, measurements)
    if len(rows) < MIN_ROWS:
        return None
    return {
        "headers": list(measurements),
        "rows": rows,
        "garment_type": region_of(measurements),
    }


def parse_multi_table(text: str) -> List[Dict[str, Any]]:
    """Split the text at every "Size ..." header line and parse each segment as its own table."""
    lines = split_lines(text)
    headers = []
    for idx, line in enumerate(lines):
        sizes = header_sizes(line)
        if sizes:
            headers.append((idx, sizes))

    tables = []
    prev_header = -1
    for n, (idx, sizes) in enumerate(headers):
        end = headers[n + 1][0] if n + 1 < len(headers) else len(lines)
        window = lines[max(prev_header + 1, idx - PRE_HEADER_WINDOW):idx]
        table = parse_segment(sizes, window, lines[idx + 1:end])
        if table:
            tables.append(table)
        prev_header = idx
    return tables
