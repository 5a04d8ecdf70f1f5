from typing import Any, Dict, Iterable, List, Optional, Union

import structlog

from ...schemas.size_chart import SizeChart, SizeTable
from ..sizes import sort_rows_by_size
from ..translations import translate_chinese
from .multi_table import parse_multi_table
from .strategies import STRATEGIES
from .text import (
    empty_result,
    find_size_tokens,
    has_size_word,
    normalize_ocr_text,
    numeric_size_sequence,
    result_score,
    split_lines,
    unique,
)
from .vocabulary import (
    BOTTOM_INDICATORS,
    EU_SIZE_TOKEN_RE,
    GUIDE_KEYWORD_RE,
    SIZE_TOKEN_RE,
    TOP_INDICATORS,
    UNIT_NUMBER_RE,
)


logger = structlog.get_logger("sizeguide.ocr_parser")


def is_size_guide(text: Optional[str]) -> bool:
    """Cheap pre-filter: a measurement keyword plus a unit-qualified number or a size token."""
    if not text:
        return False
    if not GUIDE_KEYWORD_RE.search(text):
        return False
    return bool(UNIT_NUMBER_RE.search(text) or SIZE_TOKEN_RE.search(text))


def extract_size_labels(text: Optional[str]) -> List[str]:
    if not text:
        return []
    labels: List[str] = []
    for line in split_lines(text):
        labels.extend(find_size_tokens(line))
        labels.extend(m.group(1) for m in EU_SIZE_TOKEN_RE.finditer(line) if int(m.group(1)) % 2 == 0)
        if has_size_word(line):
            labels.extend(numeric_size_sequence(line) or [])
    return unique(labels)


def detect_garment_type(chart: Union[SizeChart, SizeTable, Dict[str, Any]]) -> str:
    """'bottom' when bottom indicators strictly outnumber top indicators, else 'top'."""
    if isinstance(chart, dict):
        headers = chart.get("headers") or []
        rows = chart.get("rows") or []
    else:
        headers, rows = chart.headers, chart.rows

    keys = {h.lower() for h in headers}
    for row in rows:
        keys.update(k.lower() for k in row)

    bottom = sum(1 for ind in BOTTOM_INDICATORS if any(ind in k for k in keys))
    top = sum(1 for ind in TOP_INDICATORS if any(ind in k for k in keys))
    return "bottom" if bottom > top else "top"


def _run_strategies(text: str) -> Dict[str, Any]:
    best = empty_result()
    best_name = None
    best_score = 0
    scores = {}
    for name, strategy in STRATEGIES:
        try:
            candidate = strategy(text)
        except Exception as e:
            logger.warning("strategy_failed", strategy=name, error=str(e), exc_info=True)
            continue
        score = result_score(candidate)
        scores[name] = score
        # ties keep the earlier strategy
        if score > best_score:
            best, best_name, best_score = candidate, name, score
    logger.debug("strategy_scores", scores=scores, selected=best_name)
    return best


def _row_keys(rows: Iterable[Dict[str, Any]]) -> List[str]:
    keys: List[str] = []
    for row in rows:
        keys.extend(k for k in row if k != "size")
    return unique(keys)


def reconstruct(raw_text: Optional[str]) -> SizeChart:
    """Recover the size chart(s) in raw OCR text.

    OCR confusions are fixed first, then Chinese terms are translated; every
    strategy only sees the translated text. A "Size ..." header repeated for
    several garments yields one table per garment and the single-table
    strategies are skipped. Never raises: unreadable text gives an empty chart.
    """
    if not raw_text:
        return SizeChart(raw_text=raw_text or "")

    try:
        translated = translate_chinese(normalize_ocr_text(raw_text))
    except Exception as e:
        logger.error("ocr_text_normalization_failed", error=str(e), exc_info=True)
        return SizeChart(raw_text=raw_text)

    try:
        tables = parse_multi_table(translated)
    except Exception as e:
        logger.warning("multi_table_failed", error=str(e), exc_info=True)
        tables = []

    if tables:
        logger.debug("multi_table_detected", tables=len(tables), garment_types=[t["garment_type"] for t in tables])
        size_tables = [SizeTable(headers=t["headers"], rows=t["rows"], garment_type=t["garment_type"]) for t in tables]
        return SizeChart(
            headers=size_tables[0].headers,
            rows=size_tables[0].rows,
            tables=size_tables,
            raw_text=raw_text,
            translated_text=translated,
        )

    best = _run_strategies(translated)
    rows = sort_rows_by_size(best["rows"])
    headers = best["headers"] or _row_keys(rows)
    return SizeChart(
        headers=headers if rows else [],
        rows=rows,
        raw_text=raw_text,
        translated_text=translated,
    )
