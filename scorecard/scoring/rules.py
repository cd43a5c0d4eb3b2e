"""
Conversion of original ratings (stars, letter grades, buckets, thumbs) to
the 0-100 scale, and auditing of assigned scores against them.
"""

import re

from scorecard import config
from scorecard.utils.text import round_half_up

LETTER_GRADES = {
    "A+": 100,
    "A": 95,
    "A-": 90,
    "B+": 85,
    "B": 80,
    "B-": 75,
    "C+": 70,
    "C": 65,
    "C-": 60,
    "D+": 55,
    "D": 50,
    "D-": 45,
    "F": 30,
}

BUCKET_SCORES = {
    "rave": 90,
    "positive": 82,
    "mixed-positive": 72,
    "mixed": 65,
    "mixed-neutral": 65,
    "mixed-negative": 58,
    "negative": 48,
    "pan": 30,
}

THUMB_SCORES = {
    "up": 80,
    "flat": 60,
    "meh": 60,
    "down": 35,
}

DESIGNATION_BUMPS = {
    "Critics_Pick": 3,
    "Critics_Choice": 2,
    "Recommended": 2,
}

DESIGNATION_ONLY_PATTERNS = [
    re.compile(r"^recommended$", re.I),
    re.compile(r"^critics?[\s_-]?pick$", re.I),
    re.compile(r"^must[\s_-]?see$", re.I),
    re.compile(r"^editors?[\s_-]?choice$", re.I),
    re.compile(r"^highly[\s_-]?recommended$", re.I),
    re.compile(r"^essential$", re.I),
    re.compile(r"^critics?[\s_-]?choice$", re.I),
]

LETTER_RANGE = re.compile(r"^([A-DF][+-]?)\s*(?:/|to)\s*([A-DF][+-]?)$", re.I)
LETTER = re.compile(r"^([A-DF][+-]?)$", re.I)
STAR_FRACTION = re.compile(r"^(\d+(?:\.\d+)?)\s*(?:out\s*of|/)\s*(\d+)\s*(?:stars?)?$", re.I)
STARS_ONLY = re.compile(r"^(\d+(?:\.\d+)?)\s*stars?$", re.I)
UNICODE_STARS = re.compile(r"^(★+)(½)?(☆*)$")
SENTIMENT = re.compile(r"^(?:sentiment:\s*)?(rave|positive|mixed[- ]positive|mixed[- ]neutral|mixed[- ]negative|mixed|negative|pan)$", re.I)
THUMB = re.compile(r"^(?:thumbs?[\s_-]?)?(up|down|meh|flat)$", re.I)


def _result(kind, expected, parsed, unparseable=False, designation=False):
    return {
        "type": kind,
        "expected": expected,
        "parsed_value": parsed,
        "unparseable": unparseable,
        "is_designation": designation,
    }


def letter_to_score(grade):
    if not grade:
        return None
    return LETTER_GRADES.get(grade.strip().upper())


def bucket_to_score(bucket):
    if not bucket:
        return None
    return BUCKET_SCORES.get(bucket.strip().lower().replace(" ", "-").replace("_", "-"))


def thumb_to_score(thumb):
    if not thumb:
        return None
    return THUMB_SCORES.get(thumb.strip().lower())


def stars_to_score(stars, out_of):
    if not out_of:
        return None
    return round_half_up(stars / out_of * 100)


def convert_star_rating(stars, out_of):
    kind = f"star_{out_of}" if out_of in (4, 5) else "star_custom"
    return _result(kind, stars_to_score(stars, out_of), f"{stars:g}/{out_of}")


def parse_rating(rating):
    """
    Parse an original rating and work out the score it should map to.
    Returns {"type", "expected", "parsed_value", "unparseable", "is_designation"}.
    """
    if rating is None or (isinstance(rating, str) and not rating.strip()):
        return _result("null", None, None)

    if isinstance(rating, (int, float)) and not isinstance(rating, bool):
        if 0 <= rating <= 100:
            return _result("numeric", rating, rating)
        return _result("unknown", None, rating, unparseable=True)

    text = str(rating).strip()
    bare = re.sub(r"['‘’]", "", text)

    for pattern in DESIGNATION_ONLY_PATTERNS:
        if pattern.match(bare):
            return _result("designation", None, text, designation=True)

    if re.match(r"^\d+(?:\.\d+)?$", text):
        value = float(text)
        if value.is_integer():
            value = int(value)
        if 0 <= value <= 100:
            return _result("numeric", value, value)

    match = LETTER_RANGE.match(text)
    if match:
        grade1, grade2 = match.group(1).upper(), match.group(2).upper()
        if grade1 in LETTER_GRADES and grade2 in LETTER_GRADES:
            average = (LETTER_GRADES[grade1] + LETTER_GRADES[grade2]) / 2
            return _result("letter_range", average, f"{grade1}/{grade2}")

    match = LETTER.match(text)
    if match:
        grade = match.group(1).upper()
        if grade in LETTER_GRADES:
            return _result("letter", LETTER_GRADES[grade], grade)

    match = STAR_FRACTION.match(text)
    if match:
        stars, out_of = float(match.group(1)), int(match.group(2))
        if out_of > 0 and stars <= out_of:
            return convert_star_rating(stars, out_of)

    match = STARS_ONLY.match(text)
    if match:
        stars = float(match.group(1))
        if stars <= 5:
            return convert_star_rating(stars, 5)

    match = UNICODE_STARS.match(text)
    if match:
        filled = len(match.group(1)) + (0.5 if match.group(2) else 0)
        total = len(match.group(1)) + (1 if match.group(2) else 0) + len(match.group(3))
        return convert_star_rating(filled, total if total in (4, 5) else 5)

    match = SENTIMENT.match(text)
    if match:
        bucket = match.group(1).lower().replace(" ", "-")
        return _result("sentiment", BUCKET_SCORES[bucket], bucket)

    match = THUMB.match(text)
    if match:
        thumb = match.group(1).lower()
        return _result("thumb", THUMB_SCORES[thumb], thumb)

    return _result("unknown", None, text, unparseable=True)


def get_expected_score(rating):
    return parse_rating(rating)["expected"]


def validate_score(rating, assigned_score, tolerance=None):
    """
    Check an assigned score against the original rating.
    reason: correct | miscalculated | unparseable | null_rating | designation_only
    """
    tolerance = config.SCORE_TOLERANCE if tolerance is None else tolerance
    parsed = parse_rating(rating)

    if parsed["type"] == "null":
        return {"valid": True, "expected": None, "difference": None, "parsed": parsed,
                "skipped": True, "reason": "null_rating"}
    if parsed["is_designation"]:
        return {"valid": True, "expected": None, "difference": None, "parsed": parsed,
                "skipped": True, "reason": "designation_only"}
    if parsed["unparseable"]:
        return {"valid": False, "expected": None, "difference": None, "parsed": parsed,
                "skipped": False, "reason": "unparseable"}
    if assigned_score is None:
        return {"valid": False, "expected": parsed["expected"], "difference": None, "parsed": parsed,
                "skipped": False, "reason": "missing_score"}

    expected = parsed["expected"]
    difference = abs(expected - assigned_score)
    valid = difference <= tolerance
    return {
        "valid": valid,
        "expected": expected,
        "difference": difference,
        "parsed": parsed,
        "skipped": False,
        "reason": "correct" if valid else "miscalculated",
    }
