"""
Review text completeness: verdict language, truncation and corruption
signals, and the choice of which text (full review or aggregator excerpt)
a score should be based on.
"""

import re

from scorecard.utils.cleaning import clean_text

VERDICT_PATTERNS = [
    # Positive
    re.compile(r"\b(must[- ]see|essential|brilliant|masterpiece|triumph|unmissable)\b", re.I),
    re.compile(r"\b(highly recommend|worth (seeing|the trip|every penny))\b", re.I),
    re.compile(r"\b(don'?t miss|not to be missed|shouldn'?t miss)\b", re.I),
    re.compile(r"\b(hits (its|the) (target|mark)|delivers|succeeds|soars)\b", re.I),
    re.compile(r"\b(exhilarating|thrilling|riveting|captivating|mesmerizing)\b", re.I),
    re.compile(r"\b(remarkable|extraordinary|exceptional|stunning|dazzling)\b", re.I),
    re.compile(r"\b(best .{0,20} (season|year|broadway))\b", re.I),
    # Negative
    re.compile(r"\b(skip|avoid|miss this one|don'?t bother)\b", re.I),
    re.compile(r"\b(disappointing|disappoints|waste of time)\b", re.I),
    re.compile(r"\b(fails to|never comes together|doesn'?t work)\b", re.I),
    re.compile(r"\b(falls (flat|short)|misses the mark|underwhelms)\b", re.I),
    re.compile(r"\b(tedious|tiresome|dreary|dull|lifeless)\b", re.I),
    # Mixed
    re.compile(r"\b(worth seeing (despite|if)|recommended (with|for))\b", re.I),
    re.compile(r"\b(flawed but|imperfect but|despite .{0,30} worth)\b", re.I),
    re.compile(r"\b(mixed (results|feelings|bag))\b", re.I),
    re.compile(r"\b(has (its|some) (moments|charms))\b", re.I),
    # Ratings
    re.compile(r"\b\d\s*(out of|/)\s*\d\s*(stars?|points?)?\b", re.I),
    re.compile(r"\bgrade:?\s*[A-F][+-]?(?![A-Za-z])", re.I),
    # Closers
    re.compile(r"\b(in (short|sum|summary|conclusion))\b", re.I),
    re.compile(r"\b(the (bottom line|verdict|takeaway))\b", re.I),
]

TRUNCATION_PATTERNS = [
    ("subscribe-prompt", re.compile(r"subscribe to (continue|read|keep)", re.I)),
    ("sign-in-prompt", re.compile(r"sign in to (continue|read|keep)", re.I)),
    ("continue-reading", re.compile(r"(to )?continue reading", re.I)),
    ("read-more", re.compile(r"read more\.{0,3}$", re.I)),
    ("subscribers-only", re.compile(r"for subscribers only", re.I)),
    ("members-only", re.compile(r"members only", re.I)),
    ("unlock-article", re.compile(r"unlock this article", re.I)),
    ("ellipsis-ending", re.compile(r"\.{3}\s*$")),
    ("mid-sentence-ending", re.compile(r"[a-z,]\s*$")),
    ("advertisement-ending", re.compile(r"advertisement\s*$", re.I)),
    ("sponsored-content", re.compile(r"sponsored content", re.I)),
]

CORRUPTION_PATTERNS = [
    ("masthead", re.compile(r"^(democracy dies in darkness|all the news that'?s fit to print)", re.I)),
    ("share-prompt", re.compile(r"\bshare\s+(this\s+)?(article|story|on)\b", re.I)),
    ("listen-time", re.compile(r"\blisten\s+\d+\s*min\b", re.I)),
    ("comment-count", re.compile(r"\bcomment\s*\(\d+\)", re.I)),
    ("save-article", re.compile(r"\bsave\s+(article|story)\b", re.I)),
    ("photo-credit", re.compile(r"\((photo|image|credit|getty|ap photo|reuters)\s*:", re.I)),
    ("credit-ellipsis", re.compile(r"\bcredit\s*\.\.\.", re.I)),
    ("cookie-notice", re.compile(r"\bcookies?\s+(policy|settings|preferences)\b", re.I)),
    ("privacy-notice", re.compile(r"\bprivacy\s+(policy|notice)\b", re.I)),
    ("follow-us", re.compile(r"\bfollow us on\b", re.I)),
    ("tweet-this", re.compile(r"\btweet\s+this\b", re.I)),
]

# Artifacts stripped before judging completeness
LEADING_ARTIFACTS = [
    re.compile(r"^(Democracy Dies in Darkness|All the News That's Fit to Print)\s*", re.I),
    re.compile(r"^Things you buy through our links[^.]*\.\s*", re.I),
    re.compile(r"^We may earn a commission[^.]*\.\s*", re.I),
    re.compile(r"^Photo\s*:\s*[^\n]+\s*", re.I),
]
INLINE_ARTIFACTS = [
    re.compile(r"\([^)]*(?:Photo|Credit|Getty|AP Photo|Reuters)[^)]*\)", re.I),
    re.compile(r"Credit\s*\.{3}[^.]+\.", re.I),
    re.compile(r"Listen\s*\d+\s*min\s*(Share\s*)?(Comment\s*)?", re.I),
    re.compile(r"Share\s+(this\s+)?(article|story|on\s+\w+)", re.I),
    re.compile(r"We use cookies[^.]+\.", re.I),
]
TRAILING_ARTIFACTS = [
    re.compile(r"\n\s*(When we learn of a mistake|If you spot an error|A version of this).*$", re.I | re.S),
    re.compile(r"\n\s*(Share full article|Related Content|Advertisement|Share this).*$", re.I | re.S),
    re.compile(r"\n\s*(Running time|Tickets|At the .{0,50}Theat(er|re)|Through \w+ \d+).*$", re.I | re.S),
    re.compile(r"\n\s*Learn more\s*$", re.I),
    re.compile(r"\n\s*(More from|Read more).*$", re.I | re.S),
    re.compile(r"\s+(Also Read|You May Also Like|More Stories)[:\s].*$", re.I | re.S),
    re.compile(r"\s+See All\s*$", re.I),
]

EXCERPT_FIELDS = [
    ("showScoreExcerpt", "Show Score"),
    ("dtliExcerpt", "DTLI"),
    ("bwwExcerpt", "BWW"),
    ("nycTheatreExcerpt", "NYC Theatre"),
]
FLAG_FIELDS = ["misattributedFullText", "wrongShow", "wrongProduction", "showNotMentioned"]
AUGMENT_SEPARATOR = "\n\n--- Additional context from this review ---\n"
AUGMENT_CAP = 3000


def prepare_for_assessment(text):
    """Clean text and drop mastheads, photo credits and trailing page furniture."""
    if not text:
        return text
    cleaned = clean_text(text)
    for pattern in LEADING_ARTIFACTS:
        cleaned = pattern.sub("", cleaned, count=1)
    for pattern in INLINE_ARTIFACTS:
        cleaned = pattern.sub("", cleaned)
    for pattern in TRAILING_ARTIFACTS:
        cleaned = pattern.sub("", cleaned)
    return re.sub(r"[ \t]+", " ", cleaned).strip()


def has_verdict(text, end_only=False):
    """Verdict language anywhere, or only in the closing 600 characters."""
    if not text:
        return False
    target = text[-600:] if end_only else text
    return any(pattern.search(target) for pattern in VERDICT_PATTERNS)


def ends_with_punctuation(text):
    if not text:
        return False
    return bool(re.search(r"[.!?][\"'”’]?\s*$", text.strip()))


def check_truncation(text):
    """Returns (is_truncated, signals)."""
    if not text:
        return False, []

    signals = [name for name, pattern in TRUNCATION_PATTERNS if pattern.search(text)]

    ending = text[-20:].strip()
    if ending and not re.search(r"[.!?][\"'”’]?\s*$", ending):
        if not re.search(r"[\"'”’]\s*$", ending) and not re.search(r"—\s*\w+\s*$", ending):
            signals.append("no-final-punctuation")

    return bool(signals), signals


def check_corruption(text):
    """Returns (is_corrupted, signals)."""
    if not text:
        return False, []

    signals = [name for name, pattern in CORRUPTION_PATTERNS if pattern.search(text)]

    if re.search(r"[\x00-\x08\x0B\x0C\x0E-\x1F]", text):
        signals.append("control-characters")
    if re.search(r"\b(share|save|print)\b[^.]{0,20}\b(share|save|print)\b", text, re.I):
        signals.append("repeated-nav-elements")
    if re.search(r"Share\s+(on\s+)?(Facebook|Twitter|Email|Print)", text, re.I):
        signals.append("social-sharing-bar")

    return bool(signals), signals


def assess_full_text(full_text, clean=True):
    """
    Judge a fullText: "complete", "truncated", "corrupted", or None when there
    isn't enough text (under 50 characters).
    """
    if not full_text or len(full_text) < 50:
        return None

    text = prepare_for_assessment(full_text) if clean else full_text
    if not text or len(text) < 50:
        return None

    # One stray photo credit is tolerable
    corrupted, signals = check_corruption(text)
    if corrupted and len(signals) > 1:
        return "corrupted"

    truncated, _ = check_truncation(text)
    if truncated:
        return "truncated"

    if ends_with_punctuation(text):
        return "complete"
    return "truncated"


def score_source(source):
    """Rank a candidate text: complete review > excerpt > truncated > corrupted, with verdict and length bonuses."""
    score = 0
    if source["type"] == "fullText":
        score = {"complete": 100, "truncated": 40, "corrupted": 20}.get(source["status"], 0)
    elif source["type"] == "excerpt":
        score = 60

    if source.get("hasVerdict"):
        score += 25

    length = len(source.get("text") or "")
    if length > 1000:
        score += 5
    if length > 2000:
        score += 5
    return score


def get_best_text_for_scoring(review):
    """
    Pick the text a score should be based on.
    Returns dict with text, type, status, confidence, reasoning, field, sources.
    """
    flag = next((f for f in FLAG_FIELDS if review.get(f)), None)
    if flag and review.get("fullText"):
        result = get_best_text_for_scoring(dict(review, fullText=None))
        result["reasoning"] = f"Skipped fullText ({flag} flag). {result['reasoning']}"
        return result

    sources = []
    full_text = review.get("fullText")
    if full_text and len(full_text) >= 50:
        cleaned = prepare_for_assessment(full_text)
        sources.append({
            "text": cleaned,
            "type": "fullText",
            "status": assess_full_text(full_text),
            "hasVerdict": has_verdict(cleaned),
            "field": "fullText",
            "sourceName": "full review",
        })

    for field, name in EXCERPT_FIELDS:
        excerpt = review.get(field)
        if excerpt and len(excerpt) >= 30:
            sources.append({
                "text": excerpt,
                "type": "excerpt",
                "status": "curated",
                "hasVerdict": has_verdict(excerpt),
                "field": field,
                "sourceName": name,
            })

    if not sources:
        return {
            "text": None,
            "type": None,
            "status": "insufficient",
            "confidence": "none",
            "reasoning": "No usable text found",
            "field": None,
            "sources": [],
        }

    for source in sources:
        source["score"] = score_source(source)
    # Stable sort keeps fullText ahead of excerpts on ties
    sources.sort(key=lambda s: s["score"], reverse=True)
    best = dict(sources[0])

    if best["type"] == "fullText" and 300 <= len(best["text"]) <= 1500:
        extra = [s["text"] for s in sources if s["type"] == "excerpt" and s["text"] not in best["text"]]
        if extra:
            combined = best["text"] + AUGMENT_SEPARATOR + "\n\n".join(extra)
            best["text"] = combined[:AUGMENT_CAP]
            best["augmented"] = True

    if best["type"] == "fullText" and best["status"] == "complete":
        if best["hasVerdict"]:
            confidence, reasoning = "high", "Complete review text with verdict"
        else:
            confidence, reasoning = "high", "Complete review text"
    elif best["type"] == "excerpt":
        confidence = "medium"
        reasoning = f"Curated {best['sourceName']} excerpt" + (" with verdict" if best["hasVerdict"] else "")
    elif best["type"] == "fullText" and best["status"] == "truncated":
        with_verdict = next((s for s in sources if s["type"] == "excerpt" and s["hasVerdict"]), None)
        if with_verdict and not best["hasVerdict"]:
            best = dict(with_verdict)
            confidence = "medium"
            reasoning = (
                f"Truncated fullText lacks verdict; using curated {best['sourceName']} excerpt with verdict instead"
            )
        else:
            confidence, reasoning = "low", "Truncated text - may be missing final verdict"
    elif best["type"] == "fullText" and best["status"] == "corrupted":
        confidence, reasoning = "low", "Text contains artifacts/corruption"
    else:
        confidence, reasoning = "low", "Limited text available"

    return {
        "text": best["text"],
        "type": best["type"],
        "status": best["status"],
        "confidence": confidence,
        "reasoning": reasoning,
        "field": best["field"],
        "augmented": best.get("augmented", False),
        "sources": [
            {k: s[k] for k in ("field", "type", "status", "score", "hasVerdict")} for s in sources
        ],
    }
