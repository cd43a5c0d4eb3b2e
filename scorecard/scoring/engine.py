"""
Final per-review score selection and the show-level critic average.
"""

from scorecard import config
from scorecard.normalize.outlets import get_outlet_display_name, get_outlet_tier, normalize_outlet
from scorecard.scoring.rules import DESIGNATION_BUMPS, bucket_to_score, parse_rating, thumb_to_score
from scorecard.utils.text import round_half_up

TIER_WEIGHTS = {1: 1.0, 2: 0.70, 3: 0.40}

SCORE_SOURCES = ["llmScore", "assignedScore", "originalScore", "bucket", "thumb", "default"]


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def get_best_score(review):
    """
    Pick the most trustworthy score for a raw review record.
    Returns (score, source) where source is one of SCORE_SOURCES.
    """
    llm = review.get("llmScore") or {}
    if _is_number(llm.get("score")) and 1 <= llm["score"] <= 100:
        needs_review = (review.get("ensembleData") or {}).get("needsReview")
        if llm.get("confidence") != "low" and not needs_review:
            return round_half_up(llm["score"]), "llmScore"

    assigned = review.get("assignedScore")
    if _is_number(assigned) and 1 <= assigned <= 100:
        return round_half_up(assigned), "assignedScore"

    if review.get("originalScore"):
        expected = parse_rating(review["originalScore"])["expected"]
        if expected is not None:
            return round_half_up(expected), "originalScore"

    bucket = bucket_to_score(review.get("bucket"))
    if bucket is not None:
        return bucket, "bucket"

    for field in ("dtliThumb", "bwwThumb", "thumb"):
        thumb = thumb_to_score(review.get(field))
        if thumb is not None:
            return thumb, "thumb"

    return config.DEFAULT_SCORE, "default"


def score_to_bucket(score):
    if score >= 85:
        return "Rave"
    if score >= 70:
        return "Positive"
    if score >= 55:
        return "Mixed"
    if score >= 40:
        return "Negative"
    return "Pan"


def score_to_thumb(score):
    if score >= 70:
        return "Up"
    if score >= 55:
        return "Flat"
    return "Down"


def get_critic_label(score):
    if score is None:
        return None
    if score >= 85:
        return "Rave"
    if score >= 70:
        return "Positive"
    if score >= 50:
        return "Mixed"
    return "Negative"


def get_confidence(review_count, tier1_count):
    if review_count >= 15 and tier1_count >= 3:
        return "high"
    if review_count >= 6 and tier1_count >= 1:
        return "medium"
    return "low"


def apply_designation(score, designation):
    bump = DESIGNATION_BUMPS.get(designation, 0)
    return min(100, score + bump)


def compute_critic_score(reviews, registry=None):
    """
    Average review scores for one show, simple and weighted by outlet tier.
    Designation bumps are applied per review before averaging.
    Returns None when there are no scored reviews.
    """
    scored = []
    for review in reviews:
        score = review.get("assignedScore")
        if not _is_number(score):
            continue
        tier = get_outlet_tier(review.get("outletId") or review.get("outlet"), registry=registry)
        scored.append((apply_designation(score, review.get("designation")), tier))

    if not scored:
        return None

    simple = sum(score for score, _ in scored) / len(scored)
    weighted_sum = sum(score * TIER_WEIGHTS[tier] for score, tier in scored)
    total_weight = sum(TIER_WEIGHTS[tier] for _, tier in scored)
    weighted = weighted_sum / total_weight
    tier1_count = sum(1 for _, tier in scored if tier == 1)

    return {
        "score": round(simple, 2),
        "weightedScore": round(weighted, 2),
        "reviewCount": len(scored),
        "tier1Count": tier1_count,
        "label": get_critic_label(round_half_up(weighted)),
        "confidence": get_confidence(len(scored), tier1_count),
    }


def build_review_entry(data, show_id):
    """Turn a raw review-texts record into a reviews.json entry. Returns (entry, score_source)."""
    score, source = get_best_score(data)
    outlet_id = normalize_outlet(data.get("outletId") or data.get("outlet"))

    entry = {
        "showId": data.get("showId") or show_id,
        "outletId": outlet_id,
        "outlet": data.get("outlet") or get_outlet_display_name(outlet_id),
        "assignedScore": score,
        "bucket": score_to_bucket(score),
        "thumb": score_to_thumb(score),
        "criticName": data.get("criticName") or None,
        "url": data.get("url") or None,
        "publishDate": data.get("publishDate") or None,
        "originalRating": data.get("originalScore") or None,
        "pullQuote": (
            data.get("dtliExcerpt")
            or data.get("bwwExcerpt")
            or data.get("showScoreExcerpt")
            or data.get("pullQuote")
            or None
        ),
        "dtliThumb": data.get("dtliThumb") or None,
        "bwwThumb": data.get("bwwThumb") or None,
        "contentTier": data.get("contentTier") or None,
    }
    if data.get("designation"):
        entry["designation"] = data["designation"]
    return entry, source
