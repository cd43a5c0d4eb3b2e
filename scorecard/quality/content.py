"""
Content quality detection for scraped review text.

Heuristic checks that catch scraping failures (ad blocker walls, paywalls,
404 pages, navigation menus, the wrong article) before text is stored or
scored, plus the content tier classification, byline cross-check and
content fingerprint used to flag misattributed and duplicated text.
"""

import hashlib
import re

from scorecard import config
from scorecard.normalize.critics import are_critics_similar
from scorecard.quality.text import assess_full_text, check_corruption, check_truncation, prepare_for_assessment
from scorecard.utils.cleaning import clean_text
from scorecard.utils.text import count_words

AD_BLOCKER_PATTERNS = [
    re.compile(r"\bad\s*block(er)?", re.I),
    re.compile(r"we\s+(noticed|detected|see)\s+(you('re|r)?|that\s+you('re|r)?)\s+(using|have)", re.I),
    re.compile(r"turn\s+off\s+(your\s+)?ad\s*block", re.I),
    re.compile(r"whitelist\s+(this\s+)?(site|domain|our)", re.I),
    re.compile(r"disable\s+(your\s+)?ad\s*block", re.I),
    re.compile(r"advertising\s+revenue\s+helps", re.I),
    re.compile(r"please\s+(consider\s+)?disabling\s+(your\s+)?ad", re.I),
]

PAYWALL_PATTERNS = [
    re.compile(r"subscribe\s+to\s+(continue|read|access)", re.I),
    re.compile(r"(sign|log)\s+in\s+to\s+(continue|read|access|view)", re.I),
    re.compile(r"members?\s+only", re.I),
    re.compile(r"subscribers?\s+only", re.I),
    re.compile(r"premium\s+(content|article|access)", re.I),
    re.compile(r"create\s+(a\s+)?(free\s+)?account\s+to", re.I),
    re.compile(r"already\s+a\s+(member|subscriber)", re.I),
    re.compile(r"become\s+a\s+(member|subscriber)", re.I),
    re.compile(r"free\s+trial", re.I),
    re.compile(r"unlock\s+(this\s+)?(story|article|content)", re.I),
    re.compile(r"paywall", re.I),
]

LEGAL_PAGE_PATTERNS = [
    re.compile(r"^privacy\s+policy", re.I | re.M),
    re.compile(r"^terms\s+(of\s+)?(use|service)", re.I | re.M),
    re.compile(r"^cookie\s+(policy|notice|consent)", re.I | re.M),
    re.compile(r"^legal\s+(notice|disclaimer)", re.I | re.M),
    re.compile(r"^copyright\s+(notice|policy)", re.I | re.M),
    re.compile(r"©\s*\d{4}.*all\s+rights\s+reserved", re.I),
]

ERROR_PAGE_PATTERNS = [
    re.compile(r"page\s+not\s+found", re.I),
    re.compile(r"\b404\s+(error|not\s+found)", re.I),
    re.compile(r"error\s+404", re.I),
    re.compile(r"(this\s+)?(page|article|content)\s+(is\s+)?(no\s+longer|not)\s+(available|exists?)", re.I),
    re.compile(r"sorry[,.]?\s+(we\s+)?couldn'?t\s+find", re.I),
    re.compile(r"the\s+page\s+you('re|\s+are)\s+looking\s+for", re.I),
    re.compile(r"has\s+been\s+(removed|deleted|taken\s+down)", re.I),
    re.compile(r"content\s+(is\s+)?unavailable", re.I),
    re.compile(r"we\s+can'?t\s+find\s+(that|the)\s+(page|article)", re.I),
]

NEWSLETTER_PATTERNS = [
    re.compile(r"thanks?\s+for\s+subscribing", re.I),
    re.compile(r"enter\s+your\s+email", re.I),
    re.compile(r"sign\s+up\s+for\s+(our\s+)?newsletter", re.I),
    re.compile(r"subscribe\s+to\s+(our\s+)?newsletter", re.I),
    re.compile(r"newsletter\s+sign[-\s]?up", re.I),
    re.compile(r"join\s+(our\s+)?(mailing\s+)?list", re.I),
    re.compile(r"email\s+address\s+required", re.I),
]

NAVIGATION_PATTERNS = [
    re.compile(r"^(home|about|contact|faq|help|support|careers|advertise)\s*$", re.I | re.M),
    re.compile(r"skip\s+to\s+(main\s+)?content", re.I),
    re.compile(r"\b(footer|header|sidebar|menu|navigation)\b", re.I),
    re.compile(r"search\s+(this\s+)?(site|website)", re.I),
    re.compile(r"related\s+(articles?|stories|posts)", re.I),
    re.compile(r"popular\s+(articles?|stories|posts)", re.I),
    re.compile(r"latest\s+(articles?|stories|news)", re.I),
    re.compile(r"trending\s+(now|stories|articles)", re.I),
    re.compile(r"read\s+more\s*[>→]", re.I),
    re.compile(r"see\s+all\s+(articles?|stories|reviews)", re.I),
    re.compile(r"^\s*(prev(ious)?|next)\s*(article|story|post)?\s*$", re.I | re.M),
]

WRONG_ARTICLE_PATTERNS = [
    re.compile(r"^insidious", re.I | re.M),
    re.compile(r"horror\s+(film|movie)", re.I),
    re.compile(r"box\s+office\s+(report|numbers|results)", re.I),
    re.compile(r"\b(recipe|ingredients)\b", re.I),
    re.compile(r"sports?\s+(news|scores|results)", re.I),
    re.compile(r"weather\s+(forecast|report)", re.I),
    re.compile(r"stock\s+(market|prices|trading)", re.I),
    re.compile(r"election\s+(results|coverage)", re.I),
]

HORROR_FILM_PATTERNS = [
    re.compile(r"insidious", re.I),
    re.compile(r"horror\s*(film|movie|sequel)", re.I),
    re.compile(r"terrifying\s+sequel", re.I),
    re.compile(r"haunted\s+(family|house|lambert)", re.I),
    re.compile(r"spirit\s+world", re.I),
    re.compile(r"scary\s+movies?", re.I),
]

THEATER_KEYWORDS = [
    "broadway", "theater", "theatre", "musical", "stage", "performance",
    "actor", "actress", "cast", "director", "choreographer", "playwright",
    "curtain", "audience", "applause", "intermission", "act", "scene",
    "costume", "lighting", "set design", "orchestra", "score", "libretto",
    "tony", "revival", "premiere", "opening night", "standing ovation",
    "encore", "production", "staging", "direction", "book", "lyrics",
    "ensemble", "understudy", "matinee", "evening show", "off-broadway",
    "west end", "playbill", "shubert", "nederlander", "lyceum", "booth",
]

# Used to spot index/404 pages that list many shows
CURRENT_BROADWAY_SHOWS = [
    "purlie", "ghosts", "maybe happy ending", "death becomes her",
    "stereophonic", "cabaret", "sunset boulevard", "the outsiders",
    "hamilton", "wicked", "the lion king", "chicago", "phantom",
    "hadestown", "moulin rouge", "back to the future", "merrily we roll along",
    "sweeney todd", "the notebook", "the great gatsby", "water for elephants",
    "hell's kitchen", "the who's tommy", "suffs", "the wiz", "gypsy",
    "oh mary", "appropriate", "prayer for the french republic", "mother play",
    "enemy of the people", "mary jane", "our town", "mcneal", "romeo juliet",
    "yellowjackets", "queen versailles", "once upon a mattress", "left on tenth",
]

# Prompt detectors scan all of a short page, but only the edges of a long one,
# where walls and footers sit.
PROMPT_SCAN_FULL_LIMIT = 1500
PROMPT_SCAN_HEAD = 400
PROMPT_SCAN_TAIL = 600

# "By Jesse Green" / "Review by Jesse Green" at the start of a line.
# Credits ("Directed by ...") never start a line with "by".
BYLINE_PATTERN = re.compile(
    r"^[ \t]*(?:Review(?:ed)?[ \t]+)?[Bb][Yy][ \t]+"
    r"([A-Z][a-zA-Z'\-]+(?:[ \t]+[A-Z]\.)?(?:[ \t]+[A-Z][a-zA-Z'\-]+){1,2})",
    re.M,
)
NON_NAME_WORDS = {"act", "the", "intermission", "curtain", "broadway", "then", "now", "opening"}
DATE_WORDS = {
    "jan", "january", "feb", "february", "mar", "march", "apr", "april", "may", "jun", "june",
    "jul", "july", "aug", "august", "sep", "sept", "september", "oct", "october", "nov",
    "november", "dec", "december", "published", "updated", "monday", "tuesday", "wednesday",
    "thursday", "friday", "saturday", "sunday",
}

FINGERPRINT_WORDS = 150
MIN_FINGERPRINT_WORDS = 50


def _first_match(patterns, text):
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(0)
    return None


def _prompt_window(text):
    if len(text) <= PROMPT_SCAN_FULL_LIMIT:
        return text
    return text[:PROMPT_SCAN_HEAD] + "\n" + text[-PROMPT_SCAN_TAIL:]


def _theater_keywords(lower):
    return [kw for kw in THEATER_KEYWORDS if kw in lower]


def detect_ad_blocker(text):
    match = _first_match(AD_BLOCKER_PATTERNS, _prompt_window(text))
    return bool(match), match


def detect_paywall(text):
    match = _first_match(PAYWALL_PATTERNS, _prompt_window(text))
    return bool(match), match


def detect_legal_page(text):
    match = _first_match(LEGAL_PAGE_PATTERNS, _prompt_window(text))
    return bool(match), match


def detect_error_page(text):
    match = _first_match(ERROR_PAGE_PATTERNS, _prompt_window(text))
    return bool(match), match


def detect_newsletter(text):
    match = _first_match(NEWSLETTER_PATTERNS, _prompt_window(text))
    return bool(match), match


def detect_url_only(text):
    """Failed scrapes that stored the URL instead of the article."""
    trimmed = text.strip()

    if re.match(r"^https?://", trimmed, re.I) and len(trimmed) < 1000:
        url = re.match(r"^https?://\S+", trimmed, re.I)
        if url and len(url.group(0)) > len(trimmed) * 0.5:
            return True, "Content is mostly URL"

    if re.match(r"^https?://\S+\s*$", trimmed, re.I):
        return True, "Content is only a URL"

    return False, None


def detect_navigation_junk(text):
    """Menus and footers: many short lines plus navigation words, or lots of navigation words."""
    matches = [m for m in (p.search(text) for p in NAVIGATION_PATTERNS) if m]
    matches = [m.group(0) for m in matches]

    lines = [line for line in text.split("\n") if line.strip()]
    short_lines = [line for line in lines if len(line.strip()) < 30]
    short_ratio = len(short_lines) / len(lines) if lines else 0

    if short_ratio > 0.7 and len(matches) >= 2:
        return True, matches
    if len(matches) >= 5:
        return True, matches
    return False, matches


def detect_wrong_article(text, show_title=None):
    match = _first_match(WRONG_ARTICLE_PATTERNS, text)
    if match:
        return True, f'Contains non-theater content: "{match}"'

    if len(text) < 2000:
        lower = text.lower()
        if not _theater_keywords(lower):
            if not (show_title and show_title.lower() in lower):
                return True, "No theater-related keywords in short text"

    return False, None


def detect_horror_film_content(text):
    """Horror film reviews are a recurring mis-scrape; theatre vocabulary overrides."""
    match = _first_match(HORROR_FILM_PATTERNS, text)
    if match and len(_theater_keywords(text.lower())) < 3:
        return True, f'Horror/film content detected: "{match}"'
    return False, None


def is_garbage_content(text):
    """
    Check whether fullText is a scraping failure rather than a review.
    Returns (is_garbage, reason).
    """
    if text is None:
        return True, "No content (null)"

    trimmed = text.strip() if isinstance(text, str) else ""
    if not trimmed:
        return True, "Empty content (no text)"
    if len(trimmed) < 100:
        return True, f"Content too short ({len(trimmed)} chars)"

    detected, match = detect_ad_blocker(text)
    if detected:
        return True, f'Ad blocker message: "{match}"'

    detected, match = detect_paywall(text)
    if detected:
        return True, f'Paywall/subscription prompt: "{match}"'

    detected, match = detect_error_page(text)
    if detected:
        return True, f'Error/404 page: "{match}"'

    detected, match = detect_legal_page(text)
    if detected:
        return True, f'Legal/privacy page: "{match}"'

    detected, match = detect_newsletter(text)
    if detected:
        return True, f'Newsletter form: "{match}"'

    detected, reason = detect_url_only(text)
    if detected:
        return True, reason

    detected, matches = detect_navigation_junk(text)
    if detected:
        return True, f"Navigation junk ({len(matches)} patterns matched)"

    detected, reason = detect_horror_film_content(text)
    if detected:
        return True, reason

    return False, "Content appears valid"


def has_review_content(text):
    """Returns (has_content, keywords_found, confidence)."""
    if not text or not text.strip():
        return False, [], "high"

    found = _theater_keywords(text.lower())
    if len(found) >= 5:
        confidence = "high"
    elif len(found) >= 2:
        confidence = "medium"
    else:
        confidence = "low"
    return len(found) > 0, found, confidence


def _show_id_words(show_id):
    base = re.sub(r"-\d{4}$", "", show_id)
    return [w for w in base.split("-") if len(w) > 3 and w not in ("the", "and", "for")]


def validate_show_mentioned(text, show_title, show_id):
    """
    Check that review text is about the expected show.
    Returns (valid, confidence, reason).
    """
    if not text or len(text) < 100:
        return False, "high", "Text too short to validate"

    lower = text.lower()

    if show_title and len(show_title) > 3:
        title_lower = show_title.lower()
        if title_lower in lower:
            return True, "high", "Exact show title found"
        without_the = re.sub(r"^the\s+", "", title_lower)
        if len(without_the) > 3 and without_the in lower:
            return True, "high", 'Show title (without "The") found'

    if show_id:
        id_words = _show_id_words(show_id)
        if len(id_words) >= 2:
            match_count = len([w for w in id_words if w in lower])
            if match_count >= 2:
                return True, "medium", f"{match_count}/{len(id_words)} show ID words found"
        elif len(id_words) == 1 and len(id_words[0]) > 4:
            if id_words[0] in lower:
                return True, "medium", "Show name word found"

    # Long reviews often say "the show" instead of the title
    if len(text) > 3000 and len(_theater_keywords(lower)) >= 5:
        return True, "low", "Long review with theater context (title not found)"

    return False, "high", f'Show "{show_title or show_id}" not mentioned in text'


def detect_multi_show_content(text, expected_show_id=None):
    """
    Three or more other current shows in one text means an index or 404 page.
    Returns (detected, shows_found, reason).
    """
    if not text or len(text) < 200:
        return False, [], None

    lower = text.lower()
    expected_words = []
    if expected_show_id:
        expected_words = [w for w in re.sub(r"-\d{4}$", "", expected_show_id).split("-") if len(w) > 3]

    found = []
    for show in CURRENT_BROADWAY_SHOWS:
        show_words = show.split()
        if any(ew in sw or sw in ew for ew in expected_words for sw in show_words):
            continue
        if show in lower:
            found.append(show)

    if len(found) >= 3:
        listed = ", ".join(found[:5]) + ("..." if len(found) > 5 else "")
        return True, found, f"Multiple shows mentioned ({len(found)}): {listed}"
    return False, found, None


def assess_text_quality(text, show_id=None, show_title=None):
    """
    Overall verdict on scraped text: {"quality": valid|suspicious|garbage, "confidence", "issues"}.
    Issues prefixed "Warning:" don't count against the text.
    """
    is_garbage, reason = is_garbage_content(text)
    if is_garbage:
        return {"quality": "garbage", "confidence": "high", "issues": [reason]}

    multi, _, reason = detect_multi_show_content(text, show_id)
    if multi:
        return {"quality": "garbage", "confidence": "high", "issues": [reason]}

    issues = []
    has_content, _, _ = has_review_content(text)
    if not has_content:
        issues.append("No theater-related keywords found")

    if (show_title or show_id) and len(text) >= 200:
        valid, confidence, reason = validate_show_mentioned(text, show_title, show_id)
        if not valid:
            if confidence == "high":
                issues.append(f"Show not mentioned: {reason}")
            else:
                issues.append(f"Warning: {reason}")

    wrong, reason = detect_wrong_article(text, show_title or show_id)
    if wrong:
        issues.append(reason)

    if len(text) < 300:
        issues.append(f"Very short content ({len(text)} chars)")
    elif len(text) < 500:
        issues.append(f"Short content ({len(text)} chars)")

    serious = [i for i in issues if not i.startswith("Warning:")]
    warnings = [i for i in issues if i.startswith("Warning:")]

    if not serious and not warnings:
        quality, confidence = "valid", "high"
    elif not serious:
        quality, confidence = "valid", "medium"
    elif len(serious) == 1 and "No theater" not in serious[0]:
        quality, confidence = "valid", "medium"
    elif len(serious) <= 2:
        quality, confidence = "suspicious", "medium"
    else:
        quality, confidence = "garbage", "high"

    return {"quality": quality, "confidence": confidence, "issues": issues}


def _best_excerpt(review):
    for field in ("showScoreExcerpt", "dtliExcerpt", "bwwExcerpt", "nycTheatreExcerpt"):
        excerpt = review.get(field)
        if excerpt and len(excerpt.strip()) >= config.MIN_EXCERPT_CHARS:
            return field
    return None


def classify_content_tier(review):
    """
    Classify how much usable review text a record has.
    Returns {"contentTier", "tierReason", "wordCount", "truncationSignals"}.
    """
    full_text = review.get("fullText") or ""
    cleaned = clean_text(full_text) if full_text else ""
    word_count = count_words(cleaned)
    excerpt_field = _best_excerpt(review)

    def result(tier, reason, signals=None):
        return {
            "contentTier": tier,
            "tierReason": reason,
            "wordCount": word_count,
            "truncationSignals": signals or [],
        }

    for flag in ("wrongShow", "wrongProduction", "misattributedFullText"):
        if review.get(flag):
            return result("invalid", f"Flagged {flag}")

    if len(cleaned) >= 100:
        is_garbage, reason = is_garbage_content(cleaned)
        assessed = prepare_for_assessment(cleaned)
        if not is_garbage and assess_full_text(cleaned) == "corrupted":
            reason = "fullText corrupted: " + ", ".join(check_corruption(assessed)[1])
            is_garbage = True
        if is_garbage:
            if excerpt_field:
                return result("excerpt", f"fullText unusable ({reason}); using {excerpt_field}")
            return result("invalid", reason)

        if word_count >= config.MIN_FULLTEXT_WORDS:
            truncated, signals = check_truncation(assessed)
            if not truncated and word_count >= config.MIN_COMPLETE_WORDS:
                return result("complete", f"Full review ({word_count} words)")
            if truncated:
                return result("truncated", f"Truncation signals: {', '.join(signals)}", signals)
            return result("truncated", f"Short fullText ({word_count} words)")

    if excerpt_field:
        return result("excerpt", f"Excerpt only ({excerpt_field})")

    if cleaned:
        return result("stub", f"fullText too short ({word_count} words)")
    return result("stub", "No review text")


def compute_content_fingerprint(text):
    """
    sha1 of the first 150 normalized words of the cleaned text.
    None when there are fewer than 50 words to compare.
    """
    if not text:
        return None
    words = re.sub(r"[^a-z0-9\s]", " ", clean_text(text).lower()).split()
    if len(words) < MIN_FINGERPRINT_WORDS:
        return None
    return hashlib.sha1(" ".join(words[:FINGERPRINT_WORDS]).encode("utf-8")).hexdigest()


def extract_byline(text, exclude_names=None):
    """
    Look for a "By First Last" byline near the top of the text.
    Credits ("Directed by", "Book by") and cast/creative names are ignored.
    Returns (found, name).
    """
    if not text:
        return False, None

    excluded = {name.lower().strip() for name in (exclude_names or []) if name}
    head = text[:600]

    for match in BYLINE_PATTERN.finditer(head):
        parts = match.group(1).split()
        while len(parts) > 2 and parts[-1].lower().rstrip(".") in DATE_WORDS:
            parts.pop()
        name = " ".join(parts)
        if parts[0].lower() in NON_NAME_WORDS:
            continue
        if name.lower() in excluded:
            continue
        return True, name

    return False, None


def matches_critic(byline, critic):
    """
    True when a byline names the expected critic: similar names, or same
    last name with a matching first initial ("J. Green" / "Jesse Green").
    """
    if not byline or not critic:
        return False
    if are_critics_similar(byline, critic):
        return True

    byline_parts = byline.lower().replace(".", " ").split()
    critic_parts = critic.lower().replace(".", " ").replace("-", " ").split()
    if not byline_parts or not critic_parts:
        return False

    if byline_parts[-1] == critic_parts[-1] and byline_parts[0][0] == critic_parts[0][0]:
        return True
    return False
