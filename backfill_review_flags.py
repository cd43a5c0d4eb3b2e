#!/usr/bin/env python3
"""
Re-derive quality flags and content tiers on every review-texts file.

- showNotMentioned: long full text that never names the show
- misattributedFullText: the byline names a different critic
- duplicateTextOf: same text as an earlier file for the same show
- contentTier / contentTierReason / wordCount / truncationSignals
- originalScore filled from an explicit rating printed in the text

Stale flags are cleared, so running this again after fixing data is safe.
"""

import sys
import time
import traceback

from scorecard import config
from scorecard.dedupe.reviews import build_fingerprint_map
from scorecard.normalize.outlets import normalize_outlet
from scorecard.pipeline.io import iter_show_dirs, load_show_reviews, load_shows, write_review_file
from scorecard.pipeline.metrics import ShowMetrics, summary_table
from scorecard.pipeline.runlog import RunLog
from scorecard.quality.content import (
    classify_content_tier,
    extract_byline,
    matches_critic,
    validate_show_mentioned,
)
from scorecard.scoring.extractors import extract_score

MIN_TEXT_CHARS = 100
SHOW_MENTION_MIN_CHARS = 500
DEPRECATED_FIELDS = ["textQuality", "textStatus", "isFullReview", "textWordCount"]
BYLINE_FIELDS = ["misattributedFullText", "extractedByline", "expectedCritic"]


def show_title_for(show_id, show):
    """Title from shows.json, else the show id without its year ("hamilton-2015" -> "hamilton")."""
    if show and show.get("title"):
        return show["title"]
    base = show_id.rsplit("-", 1)[0] if show_id[-4:].isdigit() else show_id
    return base.replace("-", " ")


def excluded_names(show):
    """Cast and creative team names, which also appear after "by" near the top of a review."""
    if not show:
        return []
    people = (show.get("cast") or []) + (show.get("creativeTeam") or [])
    return [p["name"] if isinstance(p, dict) else p for p in people if p]


def _set(data, field, value):
    if data.get(field) != value:
        data[field] = value
        return True
    return False


def _clear(data, *fields):
    changed = False
    for field in fields:
        if field in data:
            del data[field]
            changed = True
    return changed


def apply_flags(data, file_name, show_id, show, duplicate_of):
    """
    Update one record in place. Returns (modified, flags) where flags
    describe what was found for the run log.
    """
    modified = False
    flags = []
    full_text = data.get("fullText") or ""

    if len(full_text) >= MIN_TEXT_CHARS:
        if len(full_text) > SHOW_MENTION_MIN_CHARS:
            title = show_title_for(show_id, show)
            valid, confidence, reason = validate_show_mentioned(full_text, title, show_id)
            if not valid and confidence == "high":
                modified |= _set(data, "showNotMentioned", True)
                flags.append(f"showNotMentioned: {reason}")
            else:
                modified |= _clear(data, "showNotMentioned")
        else:
            modified |= _clear(data, "showNotMentioned")

        found, byline = extract_byline(full_text, exclude_names=excluded_names(show))
        expected = data.get("criticName") or ""
        if found and expected and not matches_critic(byline, expected):
            modified |= _set(data, "misattributedFullText", True)
            modified |= _set(data, "extractedByline", byline)
            modified |= _set(data, "expectedCritic", expected)
            flags.append(f'misattributed: found "{byline}", expected "{expected}"')
        else:
            modified |= _clear(data, *BYLINE_FIELDS)

        owner = duplicate_of.get(file_name)
        if owner:
            modified |= _set(data, "duplicateTextOf", owner)
            flags.append(f"duplicateTextOf: {owner}")
        else:
            modified |= _clear(data, "duplicateTextOf")

        if not data.get("originalScore") and not data.get("misattributedFullText"):
            extracted = extract_score(None, full_text, normalize_outlet(data.get("outletId") or data.get("outlet")))
            if extracted:
                data["originalScore"] = extracted["originalScore"]
                data["originalScoreSource"] = "extracted"
                modified = True
                flags.append(f"originalScore: {extracted['originalScore']} ({extracted['source']})")
    else:
        # Too little text to support any text-derived flag
        modified |= _clear(data, "showNotMentioned", "duplicateTextOf", *BYLINE_FIELDS)

    tier = classify_content_tier(data)
    modified |= _set(data, "contentTier", tier["contentTier"])
    modified |= _set(data, "contentTierReason", tier["tierReason"])
    modified |= _set(data, "wordCount", tier["wordCount"])
    if tier["truncationSignals"]:
        modified |= _set(data, "truncationSignals", tier["truncationSignals"])
    else:
        modified |= _clear(data, "truncationSignals")
    modified |= _clear(data, *DEPRECATED_FIELDS)

    return modified, flags


def run_backfill(show_filter=None, dry_run=False, log_func=None):
    """Backfill flags for every show (or one). Returns the stats dict."""
    log = log_func or RunLog("backfill-review-flags").log
    shows_by_id = {show.get("id"): show for show in load_shows(pull=not dry_run)}

    stats = {
        "totalFiles": 0,
        "filesModified": 0,
        "showNotMentioned": 0,
        "misattributed": 0,
        "duplicateText": 0,
        "scoresExtracted": 0,
        "errors": 0,
    }
    show_metrics = {}

    log(f"Mode: {'DRY RUN (no changes)' if dry_run else 'LIVE (writing flags)'}")

    for show_dir in iter_show_dirs(show_filter):
        show_id = show_dir.name
        metrics = ShowMetrics(name=show_id)
        start_time = time.time()

        def on_error(path, exc):
            metrics.errors += 1
            metrics.error_messages.append(f"{path.name}: {exc}")
            log(f"  Could not read {show_id}/{path.name}: {exc}", "WARNING")

        records = load_show_reviews(show_dir, on_error=on_error)
        metrics.files = len(records) + metrics.errors
        duplicate_of = build_fingerprint_map(records)
        show = shows_by_id.get(show_id)

        for path, data in records:
            try:
                modified, flags = apply_flags(data, path.name, show_id, show, duplicate_of)
            except Exception as e:
                metrics.errors += 1
                metrics.error_messages.append(str(e))
                log(f"  ERROR: {show_id}/{path.name}: {e}", "ERROR")
                log(f"  Traceback:\n{traceback.format_exc()}", "ERROR")
                continue

            for flag in flags:
                if flag.startswith("showNotMentioned"):
                    stats["showNotMentioned"] += 1
                elif flag.startswith("misattributed"):
                    stats["misattributed"] += 1
                elif flag.startswith("duplicateTextOf"):
                    stats["duplicateText"] += 1
                elif flag.startswith("originalScore"):
                    stats["scoresExtracted"] += 1
            if flags:
                log(f"  {show_id}/{path.name}")
                for flag in flags:
                    log(f"    - {flag}")

            if modified:
                stats["filesModified"] += 1
                if not dry_run:
                    write_review_file(path, data)

        metrics.reviews = len(records)
        metrics.duration_ms = (time.time() - start_time) * 1000
        show_metrics[show_id] = metrics

    stats["totalFiles"] = sum(m.files for m in show_metrics.values())
    stats["errors"] = sum(m.errors for m in show_metrics.values())

    summary_table(show_metrics, log)
    log(f"\nFiles {'that would be ' if dry_run else ''}modified: {stats['filesModified']}")
    log(f"  showNotMentioned: {stats['showNotMentioned']}")
    log(f"  misattributedFullText: {stats['misattributed']}")
    log(f"  duplicateTextOf: {stats['duplicateText']}")
    log(f"  originalScore extracted: {stats['scoresExtracted']}")
    log(f"  errors: {stats['errors']}")
    if dry_run:
        log("\n[DRY RUN] No files were modified. Re-run without --dry-run to apply changes.")
    return stats


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Backfill quality flags and content tiers on review files")
    parser.add_argument("--show", default=None, help="Only process this show id")
    parser.add_argument("--dry-run", action="store_true", help="Report only; no file changes")
    parser.add_argument("--data-dir", default=None, help="Data directory (default: ./data)")

    args = parser.parse_args()
    if args.data_dir:
        config.use_data_dir(args.data_dir)

    if args.show and not (config.REVIEW_TEXTS_DIR / args.show).is_dir():
        print(f"No show directory found matching {args.show}")
        sys.exit(1)

    run_log = RunLog("backfill-review-flags")
    try:
        run_backfill(show_filter=args.show, dry_run=args.dry_run, log_func=run_log.log)
    finally:
        run_log.save()


if __name__ == "__main__":
    main()
