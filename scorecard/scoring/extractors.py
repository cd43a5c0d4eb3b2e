"""
Pull explicit ratings out of fetched review pages.

Each outlet that publishes a rating gets its own extractor; outlets known to
publish none are skipped outright so stray "4/5" text in their pages is never
read as a score. Everything else falls back to generic star and letter-grade
patterns over the article text only.
"""

import re

from bs4 import BeautifulSoup

from scorecard.scoring.rules import LETTER_GRADES, stars_to_score
from scorecard.utils.cleaning import strip_cross_references

CSS_NOISE = [
    re.compile(r"calc\s*\([^)]*\)", re.I),
    re.compile(r"padding[^;:]*[;:][^;]*", re.I),
    re.compile(r"margin[^;:]*[;:][^;]*", re.I),
]

# Grade words are case-insensitive, the grade itself must be a capital letter
GRADE_PATTERNS = [
    re.compile(r"(?i:grade|rating)\s*:?\s*([A-F][+-]?)(?![A-Za-z])"),
    re.compile(r"\b(?i:grade)\s+([A-F][+-]?)(?![A-Za-z])"),
    re.compile(r"\b([A-F][+-]?)\s+(?i:grade|rating)\b"),
]

JSON_LD_RATING = re.compile(r'"ratingValue"\s*:\s*"?(\d+(?:\.\d+)?)"?', re.I)
OUT_OF_FIVE = re.compile(r"(\d+(?:\.\d+)?)\s*out of\s*5\s*stars?", re.I)
SLASH_FIVE = re.compile(r"(\d(?:\.\d)?)\s*/\s*5(?!\d)")
UNICODE_STARS = re.compile(r"([★☆]{1,5})")

DESIGNATION_OUTLETS = {
    "Critics_Pick": ["nytimes", "nyt", "new-york-times"],
    "Must_See": ["theatermania", "theater-mania"],
}


def clean_html_for_scoring(html):
    """Drop scripts, stylesheets and inline CSS so numbers inside them can't look like ratings."""
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(["script", "style"]):
        # JSON-LD carries the structured rating some outlets publish
        if tag.name == "script" and tag.get("type") == "application/ld+json":
            continue
        tag.decompose()
    for tag in soup.find_all(style=True):
        del tag["style"]

    cleaned = str(soup)
    for pattern in CSS_NOISE:
        cleaned = pattern.sub("", cleaned)
    return cleaned


def _stars(rating, out_of=5, source="numeric-stars", label=None):
    return {
        "originalScore": label or f"{rating:g}/{out_of}",
        "normalizedScore": stars_to_score(rating, out_of),
        "source": source,
    }


def _grade(grade):
    return {
        "originalScore": grade,
        "normalizedScore": LETTER_GRADES[grade],
        "source": "letter-grade",
    }


def _unicode_stars(stars):
    filled = stars.count("★")
    total = len(stars)
    return _stars(filled, total, source="unicode-stars", label=f"{filled}/{total} stars")


def _search(pattern, *sources):
    for source in sources:
        if source:
            match = pattern.search(source)
            if match:
                return match
    return None


def extract_timeout_score(html, text):
    """Time Out: JSON-LD ratingValue, then "X out of 5 stars", then star-icon markup."""
    match = JSON_LD_RATING.search(html)
    if match:
        rating = float(match.group(1))
        if rating <= 5:
            return _stars(rating, source="json-ld")

    match = _search(OUT_OF_FIVE, html, text)
    if match:
        rating = float(match.group(1))
        if rating <= 5:
            return _stars(rating, source="text-pattern")

    match = re.search(r'class="[^"]*star[^"]*"[^>]*>[^<]*?(\d+)', html, re.I)
    if match:
        rating = int(match.group(1))
        if 1 <= rating <= 5:
            return _stars(rating, source="star-icon")

    return None


def extract_ew_score(html, text):
    """Entertainment Weekly letter grades, including the "EW Grade: B+" label."""
    patterns = GRADE_PATTERNS + [
        re.compile(r'class="[^"]*grade[^"]*"[^>]*>\s*([A-F][+-]?)\s*<', re.I),
        re.compile(r"EW\s+Grade:?\s*([A-F][+-]?)", re.I),
    ]
    for pattern in patterns:
        match = _search(pattern, html, text)
        if match:
            grade = match.group(1).upper()
            if grade in LETTER_GRADES:
                return _grade(grade)
    return None


def extract_nysr_score(html, text):
    """New York Stage Review prints ★★★☆☆; cross-links to other critics' stars are removed first."""
    match = _search(UNICODE_STARS, strip_cross_references(text), html)
    if match:
        return _unicode_stars(match.group(1))

    match = re.search(r"(?<![\d.])(\d)\s*(?:/\s*5|out\s*of\s*5|stars?\b)", text, re.I)
    if match:
        rating = int(match.group(1))
        if 1 <= rating <= 5:
            return _stars(rating, label=f"{rating}/5 stars")
    return None


def extract_guardian_score(html, text):
    match = re.search(r'"ratingValue"\s*:\s*"?(\d+)"?', html)
    if match:
        rating = int(match.group(1))
        if 1 <= rating <= 5:
            return _stars(rating, source="json-ld", label=f"{rating}/5 stars")

    match = re.search(r"rating-(\d)", html, re.I) or re.search(r"stars-(\d)", html, re.I)
    if match:
        rating = int(match.group(1))
        if 1 <= rating <= 5:
            return _stars(rating, source="star-class", label=f"{rating}/5 stars")
    return None


def extract_nypost_score(html, text):
    """NY Post grades only count with explicit context, or alone on a line."""
    for pattern in GRADE_PATTERNS + [re.compile(r"^([A-F][+-]?)\s*$", re.M)]:
        match = pattern.search(text)
        if match and match.group(1) in LETTER_GRADES:
            return _grade(match.group(1))

    match = re.search(r"(?<![\d.])(\d)\s*(?:out\s*of\s*5|stars?\b)", text, re.I)
    if match:
        rating = int(match.group(1))
        if 1 <= rating <= 5:
            return _stars(rating, label=f"{rating} stars")
    return None


def extract_culturesauce_score(html, text):
    match = SLASH_FIVE.search(text)
    if match:
        return _stars(float(match.group(1)))
    return None


def extract_generic_star_rating(html, text):
    # "out of 5" before bare "N stars", or "4 out of 5 stars" reads as 5
    patterns = [
        SLASH_FIVE,
        re.compile(r"(?<![\d.])(\d(?:\.\d)?)\s*out\s*of\s*5", re.I),
        re.compile(r"(?<![\d.])(\d(?:\.\d)?)\s*stars?\b(?:\s*(?:out\s+of|/)\s*5)?", re.I),
        re.compile(r"([★☆]{3,5})"),
    ]
    for pattern in patterns:
        match = _search(pattern, text, html)
        if not match:
            continue
        value = match.group(1)
        if "★" in value or "☆" in value:
            return _unicode_stars(value)
        rating = float(value)
        if 0 <= rating <= 5:
            return _stars(rating)
    return None


def extract_generic_letter_grade(html, text):
    for pattern in GRADE_PATTERNS:
        match = _search(pattern, text, html)
        if match:
            grade = match.group(1).upper()
            if grade in LETTER_GRADES:
                return _grade(grade)
    return None


OUTLET_EXTRACTORS = {
    "timeout": extract_timeout_score,
    "time-out": extract_timeout_score,
    "time-out-new-york": extract_timeout_score,
    "timeoutny": extract_timeout_score,
    "ew": extract_ew_score,
    "entertainment-weekly": extract_ew_score,
    "nysr": extract_nysr_score,
    "ny-stage-review": extract_nysr_score,
    "new-york-stage-review": extract_nysr_score,
    "nystagereview": extract_nysr_score,
    "guardian": extract_guardian_score,
    "the-guardian": extract_guardian_score,
    "nypost": extract_nypost_score,
    "ny-post": extract_nypost_score,
    "new-york-post": extract_nypost_score,
    "culturesauce": extract_culturesauce_score,
    "culture-sauce": extract_culturesauce_score,
    "nydailynews": extract_generic_letter_grade,
    "ny-daily-news": extract_generic_letter_grade,
    "nydn": extract_generic_letter_grade,
}

# Outlets that never print a rating (NYT and TheaterMania use designations instead)
NO_SCORE_OUTLETS = {
    "variety", "deadline", "hollywood-reporter", "thr", "nytimes", "nyt",
    "vulture", "wsj", "wapo", "washpost", "washington-post", "theatermania",
    "dailybeast", "daily-beast", "broadwaynews", "broadway-news", "observer",
    "thewrap", "the-wrap",
}


def extract_score(html, text, outlet_id):
    """
    Find an explicit rating for a review page.
    Returns {"originalScore", "normalizedScore", "source", "outlet"} or None.
    """
    html = html or ""
    text = text or ""
    outlet_id = (outlet_id or "").lower()

    if outlet_id in NO_SCORE_OUTLETS:
        return None

    extractor = OUTLET_EXTRACTORS.get(outlet_id)
    if extractor:
        result = extractor(clean_html_for_scoring(html), text)
    else:
        # Generic patterns look at text only; page chrome is full of numbers
        result = extract_generic_star_rating("", text) or extract_generic_letter_grade("", text)

    if result:
        result["outlet"] = outlet_id
    return result


def extract_critics_pick(html):
    if not html:
        return None
    if re.search(r'"criticsPick"\s*:\s*true', html, re.I):
        return "Critics_Pick"
    if re.search(r'class="[^"]*critics?-?pick[^"]*"', html, re.I):
        return "Critics_Pick"
    if re.search(r'data-testid="[^"]*critics?-?pick[^"]*"', html, re.I):
        return "Critics_Pick"
    # Badge label only; the apostrophe keeps "critics pick up on" out
    if re.search(r">\s*Critic['’]s\s+Pick\s*<", html, re.I):
        return "Critics_Pick"
    return None


def extract_must_see(html):
    if not html:
        return None
    if re.search(r'class="[^"]*must-see[^"]*"', html, re.I):
        return "Must_See"
    if re.search(r">\s*Must\s+See\s*<", html, re.I):
        return "Must_See"
    return None


def extract_designation(html, outlet_id):
    """Designations come from page markup only, never from review prose."""
    outlet_id = (outlet_id or "").lower()
    if outlet_id in DESIGNATION_OUTLETS["Critics_Pick"]:
        return extract_critics_pick(html)
    if outlet_id in DESIGNATION_OUTLETS["Must_See"]:
        return extract_must_see(html)
    return None
