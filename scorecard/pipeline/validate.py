from scorecard import config
from scorecard.utils.dates import normalize_publish_date


def validate_review(review):
    """Check a review record's fields. Returns a list of problems (empty when valid)."""
    problems = []
    for field in config.REQUIRED_REVIEW_FIELDS:
        if not review.get(field):
            problems.append(f"missing {field}")

    url = review.get("url")
    if url and not url.startswith(("http://", "https://")):
        problems.append(f"bad url: {url}")

    publish_date = review.get("publishDate")
    if publish_date and not normalize_publish_date(publish_date):
        problems.append(f"unparseable publishDate: {publish_date}")

    score = review.get("assignedScore")
    if score is not None:
        if isinstance(score, bool) or not isinstance(score, (int, float)) or not 0 <= score <= 100:
            problems.append(f"assignedScore out of range: {score}")

    tier = review.get("contentTier")
    if tier and tier not in config.CONTENT_TIERS:
        problems.append(f"unknown contentTier: {tier}")

    for field in ("dtliThumb", "bwwThumb"):
        thumb = review.get(field)
        if thumb and thumb not in config.THUMBS:
            problems.append(f"unknown {field}: {thumb}")

    return problems


def is_valid_review(review):
    return not validate_review(review)


def validate_show(show):
    """Check that a show has all required fields."""
    for field in config.REQUIRED_SHOW_FIELDS:
        if not show.get(field):
            return False
    return True
