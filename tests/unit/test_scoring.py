import pytest

from scorecard.normalize.outlets import build_registry
from scorecard.scoring.engine import (
    apply_designation,
    build_review_entry,
    compute_critic_score,
    get_best_score,
    get_confidence,
    get_critic_label,
    score_to_bucket,
    score_to_thumb,
)
from scorecard.scoring.rules import (
    bucket_to_score,
    get_expected_score,
    letter_to_score,
    parse_rating,
    stars_to_score,
    thumb_to_score,
    validate_score,
)


@pytest.mark.parametrize("rating,kind,expected", [
    ("B+", "letter", 85),
    ("a-", "letter", 90),
    ("F", "letter", 30),
    ("B+/A-", "letter_range", 87.5),
    ("4/5", "star_5", 80),
    ("3.5 out of 4", "star_4", 88),
    ("2.5/5 stars", "star_5", 50),
    ("4 stars", "star_5", 80),
    ("★★★½☆", "star_5", 70),
    ("7/10", "star_custom", 70),
    ("Rave", "sentiment", 90),
    ("Mixed-Positive", "sentiment", 72),
    ("Thumbs Up", "thumb", 80),
    ("meh", "thumb", 60),
    ("85", "numeric", 85),
    (72, "numeric", 72),
])
def test_parse_rating(rating, kind, expected):
    parsed = parse_rating(rating)
    assert parsed["type"] == kind
    assert parsed["expected"] == expected
    assert parsed["unparseable"] is False


def test_parse_rating_special_cases():
    assert parse_rating(None)["type"] == "null"
    assert parse_rating("  ")["type"] == "null"
    assert parse_rating("Critic's Pick")["is_designation"] is True
    assert parse_rating("Recommended")["expected"] is None
    assert parse_rating(150)["unparseable"] is True
    assert parse_rating("Great show")["unparseable"] is True
    assert parse_rating("6/5")["unparseable"] is True
    assert get_expected_score("B") == 80


def test_conversion_helpers():
    assert letter_to_score(" b- ") == 75
    assert letter_to_score("E") is None
    assert bucket_to_score("Mixed Positive") == 72
    assert bucket_to_score("mixed_negative") == 58
    assert bucket_to_score(None) is None
    assert thumb_to_score("Down") == 35
    assert stars_to_score(3.5, 4) == 88
    assert stars_to_score(3, 0) is None


def test_validate_score():
    assert validate_score("4/5", 80)["reason"] == "correct"
    assert validate_score("4/5", 88)["reason"] == "correct"

    result = validate_score("4/5", 60)
    assert result["valid"] is False
    assert result["reason"] == "miscalculated"
    assert result["difference"] == 20

    assert validate_score("4/5", 75, tolerance=3)["reason"] == "miscalculated"
    assert validate_score("B", None)["reason"] == "missing_score"
    assert validate_score(None, 70)["reason"] == "null_rating"

    result = validate_score("Recommended", 90)
    assert result["reason"] == "designation_only"
    assert result["valid"] is True
    assert result["skipped"] is True

    result = validate_score("wow", 70)
    assert result["reason"] == "unparseable"
    assert result["valid"] is False


def test_get_best_score_priority():
    assert get_best_score({"llmScore": {"score": 78.4, "confidence": "high"}, "assignedScore": 60}) == (78, "llmScore")
    assert get_best_score({"llmScore": {"score": 90, "confidence": "low"}, "assignedScore": 70}) == (70, "assignedScore")
    assert get_best_score({
        "llmScore": {"score": 90, "confidence": "high"},
        "ensembleData": {"needsReview": True},
        "originalScore": "B",
    }) == (80, "originalScore")
    assert get_best_score({"assignedScore": 0, "originalScore": "3.5/4"}) == (88, "originalScore")
    assert get_best_score({"originalScore": "Critics Pick", "bucket": "Rave"}) == (90, "bucket")
    assert get_best_score({"dtliThumb": "Down", "bwwThumb": "Up"}) == (35, "thumb")
    assert get_best_score({"thumb": "Flat"}) == (60, "thumb")
    assert get_best_score({}) == (50, "default")


def test_get_best_score_skips_out_of_range_llm_score():
    assert get_best_score({"llmScore": {"score": 150, "confidence": "high"}}) == (50, "default")
    assert get_best_score({"llmScore": {"score": 150, "confidence": "high"}, "bucket": "Pan"}) == (30, "bucket")
    assert get_best_score({"llmScore": {"score": -5, "confidence": "high"}, "assignedScore": 64}) == (64, "assignedScore")
    assert get_best_score({"llmScore": {"score": 100, "confidence": "medium"}}) == (100, "llmScore")


def test_build_review_entry_keeps_score_in_range():
    entry, source = build_review_entry({"outlet": "Vulture", "llmScore": {"score": 150, "confidence": "high"}},
                                       "hamilton-2015")
    assert 0 <= entry["assignedScore"] <= 100
    assert source == "default"


@pytest.mark.parametrize("score,bucket,thumb", [
    (100, "Rave", "Up"),
    (85, "Rave", "Up"),
    (84, "Positive", "Up"),
    (70, "Positive", "Up"),
    (69, "Mixed", "Flat"),
    (55, "Mixed", "Flat"),
    (54, "Negative", "Down"),
    (40, "Negative", "Down"),
    (39, "Pan", "Down"),
])
def test_score_to_bucket_and_thumb(score, bucket, thumb):
    assert score_to_bucket(score) == bucket
    assert score_to_thumb(score) == thumb


def test_labels_confidence_and_designation():
    assert get_critic_label(85) == "Rave"
    assert get_critic_label(50) == "Mixed"
    assert get_critic_label(49) == "Negative"
    assert get_critic_label(None) is None

    assert get_confidence(15, 3) == "high"
    assert get_confidence(6, 1) == "medium"
    assert get_confidence(20, 0) == "low"

    assert apply_designation(99, "Critics_Pick") == 100
    assert apply_designation(80, "Critics_Choice") == 82
    assert apply_designation(80, None) == 80


def test_compute_critic_score_weights_by_tier():
    reviews = [
        {"outletId": "nytimes", "assignedScore": 90, "designation": "Critics_Pick"},
        {"outletId": "nypost", "assignedScore": 60},
        {"outletId": "some-blog", "assignedScore": 50},
        {"outletId": "variety", "assignedScore": None},
    ]

    result = compute_critic_score(reviews, registry=build_registry())

    assert result["score"] == 67.67
    assert result["weightedScore"] == 73.81
    assert result["reviewCount"] == 3
    assert result["tier1Count"] == 1
    assert result["label"] == "Positive"
    assert result["confidence"] == "low"
    assert compute_critic_score([], registry=build_registry()) is None


def test_build_review_entry():
    data = {
        "outlet": "New York Times",
        "criticName": "Jesse Green",
        "url": "https://www.nytimes.com/2015/08/07/theater/review-hamilton.html",
        "publishDate": "2015-08-06",
        "originalScore": "B+",
        "dtliExcerpt": "Yes, it really is that good.",
        "dtliThumb": "Up",
        "designation": "Critics_Pick",
        "contentTier": "complete",
    }

    entry, source = build_review_entry(data, "hamilton-2015")

    assert source == "originalScore"
    assert entry["showId"] == "hamilton-2015"
    assert entry["outletId"] == "nytimes"
    assert entry["outlet"] == "New York Times"
    assert entry["assignedScore"] == 85
    assert entry["bucket"] == "Rave"
    assert entry["thumb"] == "Up"
    assert entry["originalRating"] == "B+"
    assert entry["pullQuote"] == "Yes, it really is that good."
    assert entry["designation"] == "Critics_Pick"
    assert entry["bwwThumb"] is None


def test_build_review_entry_fills_display_name():
    entry, source = build_review_entry({"outletId": "nypost", "criticName": "Johnny Oleksinski"}, "wicked-2003")
    assert entry["outlet"] == "New York Post"
    assert entry["assignedScore"] == 50
    assert source == "default"
    assert "designation" not in entry
