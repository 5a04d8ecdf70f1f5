import pytest

from sizeguide.schemas.size_chart import SizeChart
from sizeguide.services.fit_scorer import (
    EASE_ALLOWANCES,
    FitScorer,
    adjust_half_measurement,
    calculate_measurement_fit,
    calculate_recommendations,
    calculate_size_fit,
)


TOP_CHART = {
    "headers": ["chest"],
    "rows": [
        {"size": "S", "chest": 100},
        {"size": "M", "chest": 104},
        {"size": "L", "chest": 108},
        {"size": "XL", "chest": 112},
    ],
}

BOTTOM_CHART = {
    "headers": ["waist", "hip"],
    "rows": [
        {"size": "S", "waist": 78, "hip": 100},
        {"size": "M", "waist": 82, "hip": 104},
        {"size": "L", "waist": 86, "hip": 108},
    ],
}

CHEST_EASE = EASE_ALLOWANCES["top"]["chest"]


def test_measurement_fit_peaks_at_ideal():
    best = calculate_measurement_fit(98 + CHEST_EASE["ideal"], 98, CHEST_EASE)
    assert best["score"] == pytest.approx(1.0)
    assert (best["fit"], best["diff"]) == ("right", 8)
    for diff in range(-10, 30):
        assert calculate_measurement_fit(98 + diff, 98, CHEST_EASE)["score"] <= best["score"]


def test_measurement_fit_bands():
    assert calculate_measurement_fit(102, 98, CHEST_EASE)["score"] == pytest.approx(0.7)
    assert calculate_measurement_fit(114, 98, CHEST_EASE) == {"score": pytest.approx(0.8), "fit": "loose", "diff": 16}
    assert calculate_measurement_fit(101, 98, CHEST_EASE)["fit"] == "tight"
    assert calculate_measurement_fit(118, 98, CHEST_EASE)["fit"] == "oversized"


def test_measurement_fit_non_increasing_outside_band():
    tight = [calculate_measurement_fit(98 + d, 98, CHEST_EASE)["score"] for d in range(3, -20, -1)]
    loose = [calculate_measurement_fit(98 + d, 98, CHEST_EASE)["score"] for d in range(17, 40)]
    assert tight == sorted(tight, reverse=True)
    assert loose == sorted(loose, reverse=True)
    assert min(tight) == 0.0
    assert min(loose) == 0.3


def test_half_measurement_is_doubled():
    assert adjust_half_measurement("chest", 52, 98) == 104
    assert adjust_half_measurement("chest", 60) == 120
    assert adjust_half_measurement("waist", 40, 76) == 80
    assert adjust_half_measurement("chest", 104, 98) == 104
    assert adjust_half_measurement("length", 30, 70) == 30


def test_size_fit_uses_half_measurement():
    fit = calculate_size_fit({"size": "M", "chest": 52}, {"chest": 98}, "top")
    assert fit["details"]["chest"]["garment"] == 104
    assert fit["details"]["chest"]["diff"] == 6
    assert fit["fit"] == "right"


def test_size_fit_skips_missing_measurements():
    fit = calculate_size_fit({"size": "M", "chest": 106, "sleeve": 60}, {"chest": 98}, "top")
    assert list(fit["details"]) == ["chest"]
    assert fit["score"] == 1.0


def test_size_fit_notes():
    fit = calculate_size_fit({"size": "S", "chest": 100, "length": 80}, {"chest": 120, "topLength": 60}, "top")
    assert "Chest may be tight" in fit["notes"]
    assert "Length may be very loose" in fit["notes"]


def test_size_fit_key_aliases():
    fit = calculate_size_fit({"size": "M", "bust": 106}, {"bust": 98}, "top")
    assert fit["details"]["chest"]["score"] == pytest.approx(1.0)

    fit = calculate_size_fit({"size": "M", "hips": 102, "pantsLength": 100}, {"hips": 96, "pantsLength": 100}, "bottom")
    assert set(fit["details"]) == {"hip", "length"}


def test_smallest_user_gets_smallest_size():
    result = calculate_recommendations(TOP_CHART, {"chest": 80}, "top")
    assert result["right_fit"]["size"] == "S"
    assert result["right_fit"]["fit"] == "oversized"
    assert result["right_fit"]["confidence"] == 0.6


def test_user_larger_than_chart_prefers_largest_on_tie():
    result = calculate_recommendations(TOP_CHART, {"chest": 120}, "top")
    assert [s["score"] for s in result["all_sizes"]] == [0.0, 0.0, 0.0, 0.0]
    assert result["right_fit"]["size"] == "XL"
    assert result["right_fit"]["fit"] == "too_small"
    assert result["baggy_fit"]["size"] == "L"


def test_tie_policy_can_prefer_smaller():
    result = FitScorer(prefer_larger_on_tie=False).recommend(TOP_CHART, {"chest": 120}, "top")
    assert result["right_fit"]["size"] == "S"


def test_ranking_and_scores():
    result = calculate_recommendations(TOP_CHART, {"chest": 98}, "top")
    assert [s["score"] for s in result["all_sizes"]] == [0.95, 0.85, 0.85, 0.3]
    assert result["all_sizes"][0]["size"] == "L"
    assert result["all_sizes"][-1] == {"size": "S", "fit": "too_big", "score": 0.3}
    assert result["right_fit"]["size"] == "L"


def test_baggy_one_size_up():
    result = calculate_recommendations(TOP_CHART, {"chest": 96}, "top", {"type": "size", "value": 1})
    assert result["right_fit"]["size"] == "M"
    assert result["baggy_fit"]["size"] == "L"


def test_baggy_two_sizes_up():
    result = calculate_recommendations(TOP_CHART, {"chest": 96}, "top", {"type": "size", "value": 2})
    assert result["baggy_fit"]["size"] == "XL"


def test_baggy_past_largest_falls_back_to_second_ranked():
    result = calculate_recommendations(TOP_CHART, {"chest": 104}, "top", {"type": "size", "value": 1})
    assert result["right_fit"]["size"] == "XL"
    assert result["baggy_fit"]["size"] == result["all_sizes"][1]["size"]


def test_baggy_cm_and_percent():
    cm = calculate_recommendations(TOP_CHART, {"chest": 96}, "top", {"type": "cm", "value": 12})
    assert cm["baggy_fit"]["size"] == "L"

    percent = calculate_recommendations(TOP_CHART, {"chest": 96}, "top", {"type": "percent", "value": 12.5})
    assert percent["baggy_fit"]["size"] == "L"


def test_baggy_numeric_sizes():
    chart = {"rows": [{"size": "1", "chest": 96}, {"size": "2", "chest": 100}, {"size": "3", "chest": 104}]}
    result = calculate_recommendations(chart, {"chest": 92}, "top")
    assert result["right_fit"]["size"] == "2"
    assert result["baggy_fit"]["size"] == "3"


def test_bottom_chart():
    result = calculate_recommendations(BOTTOM_CHART, {"waist": 76, "hip": 96}, "bottom")
    assert result["right_fit"]["size"] == "M"
    assert result["right_fit"]["fit"] == "right"
    assert result["right_fit"]["confidence"] == 0.94
    assert result["baggy_fit"]["size"] == "L"


def test_empty_chart():
    result = calculate_recommendations({"rows": []}, {"chest": 98}, "top")
    assert result == {"right_fit": None, "baggy_fit": None, "all_sizes": []}


def test_accepts_reconstructed_chart():
    chart = SizeChart(rows=[{"size": "M", "chest": 104.0}, {"size": "L", "chest": 108.0}])
    result = calculate_recommendations(chart, {"chest": 96}, "top")
    assert result["right_fit"]["size"] == "M"


def test_deterministic():
    a = calculate_recommendations(TOP_CHART, {"chest": 98}, "top")
    b = calculate_recommendations(TOP_CHART, {"chest": 98}, "top")
    assert a == b


def test_equal_rounded_scores_tie_to_larger_size():
    chart = {"rows": [{"size": "S", "chest": 108, "shoulder": 43}, {"size": "M", "chest": 114, "shoulder": 44}]}
    result = calculate_recommendations(chart, {"chest": 92, "shoulder": 44}, "top")
    assert [s["score"] for s in result["all_sizes"]] == [0.6, 0.6]
    assert result["right_fit"]["size"] == "M"


def test_equal_rounded_scores_tie_to_smaller_size_when_configured():
    chart = {"rows": [{"size": "S", "chest": 100}, {"size": "M", "chest": 104}]}
    result = FitScorer(prefer_larger_on_tie=False).recommend(chart, {"chest": 93}, "top")
    assert result["all_sizes"][0]["score"] == result["all_sizes"][1]["score"]
    assert result["right_fit"]["size"] == "S"
