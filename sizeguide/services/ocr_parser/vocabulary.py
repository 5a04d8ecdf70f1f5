"""Lookup tables shared by the size-chart parsing strategies.

Everything heuristic lives here so the magic numbers can be audited and tuned
in one place: size token patterns, measurement keyword aliases, the garment
region indicators and the magnitude ranges used to name unlabeled value rows.
"""

import re
from typing import Dict, FrozenSet, Tuple


# ---------------------------------------------------------------------------
# Size tokens
# ---------------------------------------------------------------------------

# Multi-letter sizes match case-insensitively; bare S/M/L only in upper case so
# that "m" / "cm" / "s" inside prose are not picked up.
LETTER_SIZE_PATTERN = r"(?:(?i:XXXXL|XXXL|XXL|XXS|XS|XL|[2-5]XL)|S|M|L)"

SIZE_TOKEN_RE = re.compile(r"(?<![A-Za-z0-9])(" + LETTER_SIZE_PATTERN + r")(?![A-Za-z0-9])")
EU_SIZE_TOKEN_RE = re.compile(r"(?<![\d.])(4[4-9]|5[0-8])(?![\d.])")
SMALL_SIZE_TOKEN_RE = re.compile(r"(?<![\d.])([1-9])(?![\d.])")

SIZE_WORD_RE = re.compile(r"(?<![A-Za-z])size(?![A-Za-z])", re.IGNORECASE)

# A line that is nothing but a size label, optionally with an alternate code:
#   "M", "XL:", "M(170/88A)", "L （175/92A）"
STANDALONE_SIZE_RE = re.compile(
    r"^\s*(" + LETTER_SIZE_PATTERN + r"|1)\s*(?:[(（][^)）]*[)）])?\s*[:：]?\s*$"
)

PARENTHETICAL_RE = re.compile(r"[(（][^)）]*[)）]")

# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

# 2-3 digit centimetre values, optionally with decimals
NUMBER_RE = re.compile(r"(?<![\d.])(\d{2,3}(?:\.\d+)?)(?![\d])")

UNIT_NUMBER_RE = re.compile(
    r"\d+(?:\.\d+)?\s*(?:cm|inch(?:es)?|in(?![A-Za-z])|\"|'|厘米|公分|英寸)",
    re.IGNORECASE,
)

# ---------------------------------------------------------------------------
# Measurement keywords
# ---------------------------------------------------------------------------

# label -> canonical measurement key; longer labels win when the regex is built
MEASUREMENT_ALIASES: Dict[str, str] = {
    "pants length": "pantsLength",
    "trouser length": "pantsLength",
    "trousers length": "pantsLength",
    "outseam": "pantsLength",
    "skirt length": "length",
    "sleeve length": "sleeve",
    "total length": "length",
    "body length": "length",
    "front length": "length",
    "back length": "length",
    "clothes length": "length",
    "length": "length",
    "front rise": "rise",
    "back rise": "rise",
    "rise": "rise",
    "front": "length",
    "chest width": "chest",
    "chest": "chest",
    "bust": "chest",
    "shoulder width": "shoulder",
    "shoulders": "shoulder",
    "shoulder": "shoulder",
    "sleeves": "sleeve",
    "sleeve": "sleeve",
    "cuff": "cuff",
    "collar width": "collar",
    "collar height": "collar",
    "collar": "collar",
    "hood height": "hood",
    "hood width": "hood",
    "waistline": "waist",
    "waist": "waist",
    "hip width": "hip",
    "hips": "hip",
    "hip": "hip",
    "thigh": "thigh",
    "inseam": "inseam",
    "leg opening": "legOpening",
    "leg open": "legOpening",
    "foot opening": "legOpening",
    "bottom opening": "legOpening",
    "hem": "hem",
}

KEYWORD_RE = re.compile(
    r"(?<![A-Za-z])("
    + "|".join(
        r"\s*".join(re.escape(part) for part in label.split())
        for label in sorted(MEASUREMENT_ALIASES, key=len, reverse=True)
    )
    + r")(?![A-Za-z])",
    re.IGNORECASE,
)

# Cheap pre-filter vocabulary, English and untranslated Chinese
GUIDE_KEYWORD_RE = re.compile(
    r"(尺码|尺寸|衣长|胸围|肩宽|袖长|腰围|臀围|裤长|size|chest|bust|length|shoulder|sleeve|waist|hip|thigh|inseam)",
    re.IGNORECASE,
)

# Lines about the wearer rather than the garment
IGNORED_LINE_RE = re.compile(r"(height|weight|(?<![A-Za-z])(?:kg|jin|lbs?)(?![A-Za-z]))", re.IGNORECASE)

# ---------------------------------------------------------------------------
# Garment regions
# ---------------------------------------------------------------------------

TOP_KEYS: FrozenSet[str] = frozenset({"chest", "shoulder", "sleeve", "cuff", "collar", "hood"})
BOTTOM_KEYS: FrozenSet[str] = frozenset({"waist", "hip", "thigh", "inseam", "rise", "legOpening", "pantsLength"})

# Substring indicators used by the chart-level garment classifier
TOP_INDICATORS: Tuple[str, ...] = ("chest", "shoulder", "sleeve", "collar")
BOTTOM_INDICATORS: Tuple[str, ...] = ("waist", "hip", "inseam", "thigh", "pants", "leg")

# ---------------------------------------------------------------------------
# Heuristic constants
# ---------------------------------------------------------------------------

# Measurement name guessed from the median of an unlabeled value row: the first
# entry whose floor the median exceeds wins. Calibrated on adult charts in cm;
# plus-size and children's charts will be misnamed.
MAGNITUDE_GUESSES: Dict[str, Tuple[Tuple[float, str], ...]] = {
    "top": (
        (78.0, "chest"),
        (54.0, "length"),
        (36.0, "shoulder"),
        (0.0, "sleeve"),
    ),
    "bottom": (
        (90.0, "pantsLength"),
        (60.0, "waist"),
        (40.0, "thigh"),
        (25.0, "rise"),
        (0.0, "legOpening"),
    ),
}

DEFAULT_ROW_KEYS: Tuple[str, ...] = ("shoulder", "chest", "length", "sleeve")

# Lines before a "Size ..." header that may still carry its column names
PRE_HEADER_WINDOW = 2

MIN_ROWS = 2
MIN_ROWS_OCR_RECOVERY = 3

# OCR commonly drops the smallest label; its rows are assumed to be this size
# when no predecessor of the first visible label exists.
IMPLICIT_FIRST_SIZE = "S"
