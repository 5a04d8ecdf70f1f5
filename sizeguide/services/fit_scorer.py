from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import structlog

from ..schemas.size_chart import SizeChart
from .sizes import canonical_size, get_next_size_up, sort_rows_by_size


logger = structlog.get_logger("sizeguide.fit_scorer")


# Ease allowances in cm: how much bigger the garment should be than the body
EASE_ALLOWANCES: Dict[str, Dict[str, Dict[str, float]]] = {
    # Upper body (tops, jackets)
    "top": {
        "chest": {"min": 4, "ideal": 8, "max": 16},
        "shoulder": {"min": 0, "ideal": 2, "max": 6},
        "sleeve": {"min": -2, "ideal": 0, "max": 4},
        "length": {"min": -2, "ideal": 2, "max": 8},
    },
    # Lower body (pants, shorts)
    "bottom": {
        "waist": {"min": 2, "ideal": 4, "max": 10},
        "hip": {"min": 2, "ideal": 6, "max": 14},
        "length": {"min": -4, "ideal": 0, "max": 4},
        "thigh": {"min": 2, "ideal": 6, "max": 12},
    },
}

# Flat-lay charts list half circumferences. A garment value below RATIO x body,
# or below the absolute threshold, is doubled. Calibrated on adult charts.
HALF_MEASUREMENT_RATIO = 0.7
HALF_MEASUREMENT_THRESHOLDS: Dict[str, float] = {
    "chest": 70,
    "waist": 50,
    "hip": 50,
}

# Primary measurement used by cm / percent baggy margins
PRIMARY_KEYS = {"top": "chest", "bottom": "waist"}

GARMENT_KEY_ALIASES: Dict[str, Sequence[str]] = {
    "chest": ("bust",),
    "hip": ("hips",),
    "length": ("pantsLength",),
}
USER_KEY_ALIASES: Dict[str, Sequence[str]] = {
    "chest": ("bust",),
    "hip": ("hips",),
    "length": ("topLength", "pantsLength"),
}

# Averages are rounded to this many places so equal scores compare equal
SCORE_PRECISION = 9

BAGGY_MARGIN_TYPES = ("size", "cm", "percent")
DEFAULT_BAGGY_MARGIN: Dict[str, Any] = {"type": "size", "value": 1}


def _lookup(data: Mapping[str, Any], key: str, aliases: Mapping[str, Sequence[str]]) -> Optional[float]:
    for candidate in (key, *aliases.get(key, ())):
        value = data.get(candidate)
        if value is None or value == "":
            continue
        try:
            return float(value)
        except (TypeError, ValueError):
            continue
    return None


def adjust_half_measurement(key: str, garment_value: float, body_value: Optional[float] = None) -> float:
    """Double flat-lay (half circumference) chest/waist/hip values."""
    threshold = HALF_MEASUREMENT_THRESHOLDS.get(key)
    if threshold is None:
        return garment_value
    if body_value and garment_value / body_value < HALF_MEASUREMENT_RATIO:
        return garment_value * 2
    if garment_value < threshold:
        return garment_value * 2
    return garment_value


def calculate_measurement_fit(garment_value: float, body_value: float, ease: Mapping[str, float]) -> Dict[str, Any]:
    """Score one measurement.

    Returns ``{"score": 0..1, "fit": tight|right|loose|oversized, "diff": garment - body}``.
    The score peaks at 1.0 when ``diff == ease["ideal"]``.
    """
    diff = garment_value - body_value
    lo, ideal, hi = ease["min"], ease["ideal"], ease["max"]

    if diff < lo:
        fit = "tight"
        score = max(0.0, 0.5 - (lo - diff) * 0.1)
    elif diff <= ideal:
        fit = "right"
        span = ideal - lo
        score = 0.7 + ((diff - lo) / span) * 0.3 if span else 1.0
    elif diff <= hi:
        fit = "loose"
        span = hi - ideal
        score = 1.0 - ((diff - ideal) / span) * 0.2 if span else 0.8
    else:
        fit = "oversized"
        score = max(0.3, 0.8 - (diff - hi) * 0.05)

    return {"score": score, "fit": fit, "diff": diff}


def _overall_fit(avg_score: float, garment_bigger: bool) -> str:
    if avg_score >= 0.85:
        return "right"
    if avg_score >= 0.7:
        return "loose" if garment_bigger else "tight"
    if avg_score >= 0.5:
        return "oversized" if garment_bigger else "tight"
    return "too_big" if garment_bigger else "too_small"


def calculate_size_fit(size_row: Mapping[str, Any], user_measurements: Mapping[str, Any], garment_type: str) -> Dict[str, Any]:
    """Aggregate the per-measurement fits of one chart row.

    Measurements missing on either side are skipped, not scored as zero.
    """
    ease_table = EASE_ALLOWANCES.get(garment_type) or EASE_ALLOWANCES["top"]
    details: Dict[str, Dict[str, Any]] = {}
    notes: List[str] = []
    scores: List[float] = []
    bigger = smaller = 0

    for key, ease in ease_table.items():
        garment_value = _lookup(size_row, key, GARMENT_KEY_ALIASES)
        body_value = _lookup(user_measurements, key, USER_KEY_ALIASES)
        if garment_value is None or body_value is None:
            continue

        adjusted = adjust_half_measurement(key, garment_value, body_value)
        fit = calculate_measurement_fit(adjusted, body_value, ease)
        details[key] = {"garment": adjusted, "body": body_value, **fit}
        scores.append(fit["score"])

        if fit["diff"] > 0:
            bigger += 1
        elif fit["diff"] < 0:
            smaller += 1

        label = key[:1].upper() + key[1:]
        if fit["fit"] == "tight":
            notes.append(f"{label} may be tight")
        elif fit["fit"] == "oversized":
            notes.append(f"{label} may be very loose")

    avg_score = round(sum(scores) / len(scores), SCORE_PRECISION) if scores else 0.0
    return {
        "avg_score": avg_score,
        "score": round(avg_score, 2),
        "fit": _overall_fit(avg_score, bigger >= smaller),
        "details": details,
        "notes": notes,
    }


class FitScorer:
    def __init__(self, prefer_larger_on_tie: bool = True) -> None:
        self.prefer_larger_on_tie = prefer_larger_on_tie

    def _rank(self, results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        # ranked on the rounded score; equal scores resolve by native chart index
        direction = -1 if self.prefer_larger_on_tie else 1
        return sorted(results, key=lambda r: (-r["score"], direction * r["index"]))

    def _baggy_by_size(self, rows: Sequence[Mapping[str, Any]], ranked: List[Dict[str, Any]], right: Dict[str, Any], steps: int) -> Optional[Dict[str, Any]]:
        by_label = {canonical_size(r["size"]): r for r in ranked}

        target: Optional[str] = right["size"]
        for _ in range(max(0, steps)):
            target = get_next_size_up(target) if target else None
        if target and canonical_size(target) in by_label and steps > 0:
            return by_label[canonical_size(target)]

        ordered = [str(r["size"]) for r in sort_rows_by_size(rows)]
        if right["size"] in ordered:
            idx = ordered.index(right["size"]) + steps
            if 0 <= idx < len(ordered):
                return by_label.get(canonical_size(ordered[idx]))
        return None

    def _baggy_by_measurement(
        self,
        rows: Sequence[Mapping[str, Any]],
        ranked: List[Dict[str, Any]],
        user_measurements: Mapping[str, Any],
        garment_type: str,
        margin_type: str,
        value: float,
    ) -> Optional[Dict[str, Any]]:
        key = PRIMARY_KEYS.get(garment_type, "chest")
        user_value = _lookup(user_measurements, key, USER_KEY_ALIASES)
        if user_value is None:
            return None
        target = user_value + value if margin_type == "cm" else user_value * (1 + value / 100)

        best_size = None
        best_diff = float("inf")
        for row in rows:
            garment_value = _lookup(row, key, GARMENT_KEY_ALIASES)
            if garment_value is None:
                continue
            diff = abs(adjust_half_measurement(key, garment_value, user_value) - target)
            if diff < best_diff:
                best_diff, best_size = diff, row["size"]
        return next((r for r in ranked if r["size"] == best_size), None)

    def recommend(
        self,
        size_chart: Union[SizeChart, Mapping[str, Any]],
        user_measurements: Mapping[str, Any],
        garment_type: str = "top",
        baggy_margin: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        rows = size_chart.get("rows", []) if isinstance(size_chart, Mapping) else size_chart.rows
        rows = [r for r in rows or [] if r.get("size") not in (None, "")]
        margin = dict(baggy_margin or DEFAULT_BAGGY_MARGIN)

        results = []
        for index, row in enumerate(rows):
            fit = calculate_size_fit(row, user_measurements, garment_type)
            results.append({"size": str(row["size"]), "index": index, **fit})

        ranked = self._rank(results)
        right = ranked[0] if ranked else None

        baggy = None
        if right:
            margin_type = margin.get("type", "size")
            value = float(margin.get("value", 1) or 0)
            if margin_type == "size":
                baggy = self._baggy_by_size(rows, ranked, right, int(value))
            elif margin_type in ("cm", "percent"):
                baggy = self._baggy_by_measurement(rows, ranked, user_measurements, garment_type, margin_type, value)
        if baggy is None and len(ranked) > 1:
            baggy = ranked[1]

        logger.debug(
            "fit_scored",
            garment_type=garment_type,
            right_fit=right["size"] if right else None,
            baggy_fit=baggy["size"] if baggy else None,
            sizes=len(ranked),
        )

        return {
            "right_fit": self._summary(right),
            "baggy_fit": self._summary(baggy),
            "all_sizes": [{"size": r["size"], "fit": r["fit"], "score": r["score"]} for r in ranked],
        }

    @staticmethod
    def _summary(result: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if not result:
            return None
        return {
            "size": result["size"],
            "confidence": result["score"],
            "fit": result["fit"],
            "notes": result["notes"],
            "details": result["details"],
        }


def calculate_recommendations(
    size_chart: Union[SizeChart, Mapping[str, Any]],
    user_measurements: Mapping[str, Any],
    garment_type: str = "top",
    baggy_margin: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    return FitScorer().recommend(size_chart, user_measurements, garment_type, baggy_margin)
