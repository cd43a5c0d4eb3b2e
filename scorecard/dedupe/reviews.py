"""
Duplicate and misattribution checks over review-texts records.

Every function takes a list of (path, record) pairs as returned by
io.load_show_reviews; paths are only used for naming files in reports.
"""

import re
from collections import OrderedDict

from scorecard.normalize.critics import are_critics_similar, normalize_critic, parse_review_filename
from scorecard.normalize.outlets import normalize_outlet
from scorecard.pipeline.merge import merge_reviews
from scorecard.quality.content import compute_content_fingerprint
from scorecard.quality.sentiment import infer_sentiment, sentiments_conflict

SENTIMENT_SOURCES = [
    ("dtli", "dtliExcerpt"),
    ("bww", "bwwExcerpt"),
    ("showScore", "showScoreExcerpt"),
]

MIN_FINGERPRINT_CHARS = 100


def _show_id(path, record):
    return record.get("showId") or path.parent.name


def _file_label(path):
    return f"{path.parent.name}/{path.name}"


def _review_key(record):
    outlet = normalize_outlet(record.get("outlet") or record.get("outletId"))
    critic = normalize_critic(record.get("criticName"))
    return outlet, critic


def group_by_review_key(records):
    """
    Group records that share show, normalized outlet and normalized critic.
    Only groups with two or more files are returned.
    """
    groups = OrderedDict()
    for path, record in records:
        outlet, critic = _review_key(record)
        key = (_show_id(path, record), outlet, critic)
        groups.setdefault(key, []).append((path, record))

    duplicates = []
    for (show_id, outlet, critic), members in groups.items():
        if len(members) < 2:
            continue
        duplicates.append({
            "showId": show_id,
            "outlet": outlet,
            "critic": critic,
            "files": [_file_label(path) for path, _ in members],
            "reason": "Same show + outlet + critic (normalized)",
            "details": [
                {
                    "file": _file_label(path),
                    "originalOutlet": record.get("outlet") or record.get("outletId"),
                    "originalCritic": record.get("criticName"),
                }
                for path, record in members
            ],
        })
    return duplicates


def _critic_slug(path, record):
    parsed = parse_review_filename(path.name)
    if parsed:
        return parsed
    outlet, critic = _review_key(record)
    return outlet, critic


def find_similar_critics(records):
    """
    Pairs at the same outlet whose critics normalize differently but look
    like the same person ("jesse" / "jesse-green", typos).
    """
    by_outlet = OrderedDict()
    for path, record in records:
        outlet, critic = _critic_slug(path, record)
        key = (_show_id(path, record), normalize_outlet(outlet))
        by_outlet.setdefault(key, []).append((path, critic))

    matches = []
    for (show_id, outlet), members in by_outlet.items():
        for i in range(len(members)):
            for j in range(i + 1, len(members)):
                path1, c1 = members[i]
                path2, c2 = members[j]
                norm1, norm2 = normalize_critic(c1), normalize_critic(c2)
                if norm1 == norm2 or c1 == c2:
                    continue

                if c2.startswith(c1 + "-") or c1.startswith(c2 + "-"):
                    reason = "partial-name"
                elif (c2.startswith(c1) and len(c1) >= 4) or (c1.startswith(c2) and len(c2) >= 4):
                    reason = "prefix-match"
                elif are_critics_similar(c1.replace("-", " "), c2.replace("-", " ")):
                    reason = "fuzzy-match"
                else:
                    continue

                matches.append({
                    "showId": show_id,
                    "outlet": outlet,
                    "reason": reason,
                    "critics": [c1, c2],
                    "normalizedCritics": [norm1, norm2],
                    "files": [_file_label(path1), _file_label(path2)],
                })
    return matches


def normalize_url(url):
    """Comparable form of a review URL: no protocol, www., query, fragment or trailing slash."""
    if not url or not url.strip():
        return None
    normalized = url.strip()
    normalized = re.sub(r"^https?://", "", normalized, flags=re.I)
    normalized = re.sub(r"^www\.", "", normalized, flags=re.I)
    normalized = re.split(r"[?#]", normalized, maxsplit=1)[0]
    return normalized.rstrip("/").lower()


def _url_index(records):
    index = OrderedDict()
    for path, record in records:
        normalized = normalize_url(record.get("url"))
        if not normalized:
            continue
        index.setdefault(normalized, []).append({
            "showId": _show_id(path, record),
            "file": _file_label(path),
            "originalUrl": record["url"],
        })
    return index


def find_url_duplicates(records):
    """Same URL stored in more than one file of the same show."""
    duplicates = []
    for entries in _url_index(records).values():
        show_ids = sorted({e["showId"] for e in entries})
        if len(entries) > 1 and len(show_ids) == 1:
            duplicates.append({
                "url": entries[0]["originalUrl"],
                "showId": show_ids[0],
                "files": [e["file"] for e in entries],
                "reason": "Same URL in multiple files for same show",
            })
    return duplicates


def find_cross_show_urls(records):
    """Same URL filed under different shows: one of them is the wrong production."""
    collisions = []
    for entries in _url_index(records).values():
        show_ids = list(OrderedDict.fromkeys(e["showId"] for e in entries))
        if len(show_ids) > 1:
            collisions.append({
                "url": entries[0]["originalUrl"],
                "shows": show_ids,
                "files": [e["file"] for e in entries],
                "severity": "CRITICAL",
                "reason": "Same URL appears in different show directories",
            })
    return collisions


def build_fingerprint_map(records):
    """
    Map each file name to the file that owns its text fingerprint.
    Files are visited in sorted order so the first file owns a fingerprint.
    Returns {file_name: owner_file_name} for duplicates only.
    """
    owners = {}
    duplicate_of = {}
    for path, record in sorted(records, key=lambda item: item[0].name):
        full_text = record.get("fullText") or ""
        if len(full_text) < MIN_FINGERPRINT_CHARS:
            continue
        fingerprint = compute_content_fingerprint(full_text)
        if not fingerprint:
            continue
        owner = owners.setdefault(fingerprint, path.name)
        if owner != path.name:
            duplicate_of[path.name] = owner
    return duplicate_of


def find_duplicate_text(records):
    """Files in one show whose full text is the same review as another file's."""
    by_show = OrderedDict()
    for path, record in records:
        by_show.setdefault(_show_id(path, record), []).append((path, record))

    duplicates = []
    for show_id, members in by_show.items():
        for name, owner in sorted(build_fingerprint_map(members).items()):
            duplicates.append({
                "showId": show_id,
                "file": f"{show_id}/{name}",
                "duplicateTextOf": owner,
                "reason": "Full text matches another review file",
            })
    return duplicates


def find_sentiment_conflicts(records):
    """Excerpts of one review that disagree (one clearly positive, one clearly negative)."""
    issues = []
    for path, record in records:
        sentiments = [
            (source, record[field], infer_sentiment(record[field]))
            for source, field in SENTIMENT_SOURCES
            if record.get(field)
        ]
        conflict = _first_conflict(sentiments)
        if not conflict:
            continue
        issues.append({
            "file": _file_label(path),
            "showId": _show_id(path, record),
            "outlet": record.get("outlet") or record.get("outletId"),
            "critic": record.get("criticName"),
            "conflicting_excerpts": [
                {"source": source, "sentiment": sentiment, "excerpt": text[:100] + "..."}
                for source, text, sentiment in conflict
            ],
            "reason": "Excerpts from different sources have conflicting sentiment",
        })
    return issues


def _first_conflict(sentiments):
    for i in range(len(sentiments)):
        for j in range(i + 1, len(sentiments)):
            if sentiments_conflict(sentiments[i][2], sentiments[j][2]):
                return sentiments[i], sentiments[j]
    return None


def collapse_duplicates(records):
    """
    Merge records sharing show + outlet + critic into one record each.
    Order follows the first file of each group. Returns (merged_records, merged_count).
    """
    merged = OrderedDict()
    merged_count = 0
    for path, record in records:
        outlet, critic = _review_key(record)
        key = (_show_id(path, record), outlet, critic)
        if key in merged:
            merged[key] = merge_reviews(merged[key], record)
            merged_count += 1
        else:
            merged[key] = dict(record)
    return list(merged.values()), merged_count
