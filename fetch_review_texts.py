#!/usr/bin/env python3
"""
Fetch full review text for review-texts records that only have excerpts.

Pages are cleaned and checked before anything is stored: paywalls, error
pages and articles about some other show are recorded in the show's
failed-fetches.json instead. Stored text also gets an explicit score and
designation when the page carries one, and its content tier is recomputed.
"""

import sys
import time
import traceback
from datetime import datetime

from tqdm import tqdm

from scorecard import config
from scorecard.normalize.outlets import normalize_outlet
from scorecard.pipeline.fetch import fetch_review_text
from scorecard.pipeline.io import iter_show_dirs, load_json, load_show_reviews, load_shows, save_json, write_review_file
from scorecard.pipeline.runlog import RunLog
from scorecard.quality.content import assess_text_quality, classify_content_tier
from scorecard.scoring.extractors import extract_designation, extract_score
from scorecard.utils.cleaning import clean_text
from scorecard.utils.text import count_words

SKIP_FLAGS = ["wrongProduction", "wrongShow", "misattributedFullText"]


def needs_text(record):
    """A record is worth fetching when it has a usable URL but no usable full text."""
    url = record.get("url")
    if not url or "undefined" in url:
        return False
    if any(record.get(flag) for flag in SKIP_FLAGS):
        return False
    return count_words(clean_text(record.get("fullText") or "")) < config.MIN_FULLTEXT_WORDS


def load_failed_fetches(show_dir):
    data = load_json(show_dir / config.FAILED_FETCHES_NAME, default=[]) or []
    return data if isinstance(data, list) else data.get("failures", [])


def find_candidates(show_filter=None, retry_failed=False, log_func=None):
    """Return [(show_dir, path, record)] for every record that needs text."""
    log = log_func or RunLog("fetch-review-texts").log
    candidates = []
    for show_dir in iter_show_dirs(show_filter):
        failed = set() if retry_failed else {f.get("file") for f in load_failed_fetches(show_dir)}
        for path, record in load_show_reviews(
            show_dir,
            on_error=lambda p, e: log(f"  Could not read {p.parent.name}/{p.name}: {e}", "WARNING"),
        ):
            if path.name in failed:
                continue
            if needs_text(record):
                candidates.append((show_dir, path, record))
    return candidates


def process_fetched(record, text, html, show_title=None):
    """
    Clean and check fetched text, then update the record in place.
    Returns None on success or the reason the text was rejected.
    """
    cleaned = clean_text(text)
    quality = assess_text_quality(cleaned, record.get("showId"), show_title)
    if quality["quality"] == "garbage":
        return f"garbage: {'; '.join(quality['issues'])}"

    record["fullText"] = cleaned
    record["fetchedAt"] = datetime.utcnow().isoformat() + "Z"
    if quality["quality"] == "suspicious":
        record["textIssues"] = quality["issues"]
    else:
        record.pop("textIssues", None)

    outlet_id = normalize_outlet(record.get("outletId") or record.get("outlet"))
    if not record.get("originalScore"):
        extracted = extract_score(html, cleaned, outlet_id)
        if extracted:
            record["originalScore"] = extracted["originalScore"]
            record["originalScoreSource"] = "extracted"
    if not record.get("designation"):
        designation = extract_designation(html, outlet_id)
        if designation:
            record["designation"] = designation

    tier = classify_content_tier(record)
    record["contentTier"] = tier["contentTier"]
    record["contentTierReason"] = tier["tierReason"]
    record["wordCount"] = tier["wordCount"]
    if tier["truncationSignals"]:
        record["truncationSignals"] = tier["truncationSignals"]
    else:
        record.pop("truncationSignals", None)
    return None


def run_fetch(show_filter=None, limit=None, dry_run=False, retry_failed=False, log_func=None):
    """Fetch missing review texts. Returns counts of fetched, failed and rejected pages."""
    log = log_func or RunLog("fetch-review-texts").log
    titles = {show.get("id"): show.get("title") for show in load_shows(pull=not dry_run)}

    candidates = find_candidates(show_filter, retry_failed=retry_failed, log_func=log)
    if limit is not None:
        candidates = candidates[:limit]
    log(f"{len(candidates)} reviews need full text")

    counts = {"fetched": 0, "failed": 0, "rejected": 0}
    failures_by_show = {}
    run_timestamp = datetime.utcnow().isoformat() + "Z"

    progress = tqdm(total=len(candidates), desc="Fetching", unit="review", file=sys.stdout,
                    disable=not sys.stdout.isatty())
    for i, (show_dir, path, record) in enumerate(candidates):
        label = f"{show_dir.name}/{path.name}"
        reason = None
        try:
            text, html = fetch_review_text(record)
            if not text:
                reason = "no article text" if html else "fetch failed"
            else:
                reason = process_fetched(record, text, html, titles.get(show_dir.name))
                if reason:
                    counts["rejected"] += 1
        except Exception as e:
            reason = f"error: {e}"
            log(f"  ERROR: {label}: {e}", "ERROR")
            log(f"  Traceback:\n{traceback.format_exc()}", "ERROR")

        if reason:
            counts["failed"] += 1
            log(f"  {label}: {reason}", "WARNING")
            failures_by_show.setdefault(show_dir, []).append({
                "file": path.name,
                "url": record.get("url"),
                "reason": reason,
                "attemptedAt": run_timestamp,
            })
        else:
            counts["fetched"] += 1
            log(f"  {label}: {record['wordCount']} words ({record['contentTier']})")
            if not dry_run:
                write_review_file(path, record)

        progress.update(1)
        if i < len(candidates) - 1:
            time.sleep(config.FETCH_DELAY)
    progress.close()

    if not dry_run:
        for show_dir, failures in failures_by_show.items():
            existing = [f for f in load_failed_fetches(show_dir)
                        if f.get("file") not in {n["file"] for n in failures}]
            save_json(show_dir / config.FAILED_FETCHES_NAME, existing + failures)

    log(f"\nFetched: {counts['fetched']}  Failed: {counts['failed']}  (rejected as unusable: {counts['rejected']})")
    if dry_run:
        log("[DRY RUN] No files were written")
    return counts


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Fetch full review text for reviews that only have excerpts")
    parser.add_argument("--show", default=None, help="Only fetch for this show id")
    parser.add_argument("--limit", type=int, default=None, help="Max pages to fetch")
    parser.add_argument("--dry-run", action="store_true", help="Fetch and report; write nothing but the log")
    parser.add_argument("--retry-failed", action="store_true", help="Also retry files listed in failed-fetches.json")
    parser.add_argument("--data-dir", default=None, help="Data directory (default: ./data)")

    args = parser.parse_args()
    if args.data_dir:
        config.use_data_dir(args.data_dir)

    run_log = RunLog("fetch-review-texts")
    try:
        run_fetch(show_filter=args.show, limit=args.limit, dry_run=args.dry_run,
                  retry_failed=args.retry_failed, log_func=run_log.log)
    finally:
        run_log.save()


if __name__ == "__main__":
    main()
