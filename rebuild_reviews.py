#!/usr/bin/env python3
"""
Rebuild reviews.json from data/review-texts.

Each show directory is loaded, records flagged as the wrong production or
wrong show are dropped, files that describe the same outlet + critic are
merged, and every remaining review gets its best available score.
"""

import time
import traceback
from datetime import datetime

from scorecard import config
from scorecard.dedupe.reviews import collapse_duplicates
from scorecard.pipeline.io import (
    backup_file,
    iter_show_dirs,
    load_json,
    load_show_reviews,
    load_status,
    save_json,
)
from scorecard.pipeline.metrics import ShowMetrics, summary_table
from scorecard.pipeline.r2 import upload_to_r2
from scorecard.pipeline.runlog import RunLog
from scorecard.scoring.engine import SCORE_SOURCES, build_review_entry

SKIP_FLAGS = ["wrongProduction", "wrongShow"]


def rebuild_show(show_dir, metrics, log):
    """Build reviews.json entries for one show directory. Returns (entries, score_sources)."""
    def on_error(path, exc):
        metrics.errors += 1
        metrics.error_messages.append(f"{path.name}: {exc}")
        log(f"  Could not read {path.name}: {exc}", "WARNING")

    records = load_show_reviews(show_dir, on_error=on_error)
    metrics.files = len(records) + metrics.errors

    kept = []
    for path, record in records:
        flag = next((f for f in SKIP_FLAGS if record.get(f)), None)
        if flag:
            metrics.skipped += 1
            log(f"  Skipping {path.name} ({flag})")
            continue
        kept.append((path, record))

    collapsed, merged_count = collapse_duplicates(kept)
    metrics.merged = merged_count

    entries = []
    sources = {}
    for record in collapsed:
        entry, source = build_review_entry(record, show_dir.name)
        entries.append(entry)
        sources[source] = sources.get(source, 0) + 1

    metrics.reviews = len(entries)
    return entries, sources


def run_rebuild(show_filter=None, dry_run=False, backup=False, log_func=None):
    """
    Rebuild reviews.json. With show_filter only that show's entries are
    replaced; everything else in the existing file is kept.
    Returns the output document.
    """
    log = log_func or RunLog("rebuild-reviews").log
    run_timestamp = datetime.utcnow().isoformat() + "Z"

    existing_status = load_status()
    show_statuses = {}
    show_metrics = {}
    all_reviews = []
    score_sources = {source: 0 for source in SCORE_SOURCES}

    show_dirs = list(iter_show_dirs(show_filter))
    if show_filter and not show_dirs:
        log(f"No show directory found matching {show_filter}", "WARNING")
    log(f"Found {len(show_dirs)} show directories")

    for show_dir in show_dirs:
        show_id = show_dir.name
        metrics = ShowMetrics(name=show_id)
        start_time = time.time()

        show_status = {
            "last_run": run_timestamp,
            "success": False,
            "review_count": 0,
            "error": None,
        }
        existing_show = existing_status.get("shows", {}).get(show_id, {})
        if existing_show.get("last_success"):
            show_status["last_success"] = existing_show["last_success"]

        try:
            entries, sources = rebuild_show(show_dir, metrics, log)
            all_reviews.extend(entries)
            for source, count in sources.items():
                score_sources[source] = score_sources.get(source, 0) + count

            show_status["success"] = True
            show_status["review_count"] = len(entries)
            show_status["last_success"] = run_timestamp
        except Exception as e:
            error_msg = str(e)
            error_trace = traceback.format_exc()
            metrics.errors += 1
            metrics.error_messages.append(error_msg)
            log(f"  ERROR: Failed to rebuild {show_id}: {error_msg}", "ERROR")
            log(f"  Traceback:\n{error_trace}", "ERROR")

            show_status["error"] = error_msg
            show_status["error_trace"] = error_trace

        metrics.duration_ms = (time.time() - start_time) * 1000
        show_statuses[show_id] = show_status
        show_metrics[show_id] = metrics

    if show_filter:
        previous = load_json(config.REVIEWS_PATH, default={}) or {}
        rebuilt_ids = {d.name for d in show_dirs}
        kept = [r for r in previous.get("reviews", []) if r.get("showId") not in rebuilt_ids]
        all_reviews = kept + all_reviews

    all_reviews.sort(key=lambda r: (r.get("showId") or "", r.get("outlet") or ""))

    total_files = sum(m.files for m in show_metrics.values())
    total_merged = sum(m.merged for m in show_metrics.values())
    total_skipped = sum(m.skipped for m in show_metrics.values())

    output = {
        "_meta": {
            "description": "Critic reviews - raw input data",
            "lastUpdated": run_timestamp[:10],
            "notes": "Rebuilt from review-texts",
            "stats": {
                "totalReviews": len(all_reviews),
                "totalFiles": total_files,
                "duplicatesMerged": total_merged,
                "skippedFlagged": total_skipped,
                "scoreSources": score_sources,
            },
        },
        "reviews": all_reviews,
    }

    summary_table(show_metrics, log)
    log(f"\nTotal reviews: {len(all_reviews)}")
    for source in SCORE_SOURCES:
        count = score_sources.get(source, 0)
        if count:
            share = count / len(all_reviews) * 100 if all_reviews else 0
            log(f"  {source}: {count} ({share:.1f}%)")

    failed = [name for name, status in show_statuses.items() if not status["success"]]
    if failed:
        log(f"WARNING: Failed to rebuild: {', '.join(failed)}", "ERROR")

    if dry_run:
        log("\n[DRY RUN] reviews.json not written")
        return output

    if backup:
        backup_path = backup_file(config.REVIEWS_PATH)
        if backup_path:
            log(f"Backup saved to {backup_path}")

    save_json(config.REVIEWS_PATH, output)
    log(f"Reviews saved to {config.REVIEWS_PATH}")

    status_data = {
        "last_run": run_timestamp,
        "all_success": not failed,
        "any_success": len(failed) < len(show_statuses),
        "total_reviews": len(all_reviews),
        "shows": {**existing_status.get("shows", {}), **show_statuses},
    }
    save_json(config.STATUS_PATH, status_data)
    log(f"Status saved to {config.STATUS_PATH}")

    if backup:
        upload_to_r2([(config.REVIEWS_PATH, "reviews.json")], log_func=log)

    return output


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Rebuild reviews.json from review-texts")
    parser.add_argument("--show", default=None, help="Only rebuild this show id")
    parser.add_argument("--dry-run", action="store_true", help="Report only; write nothing but the log")
    parser.add_argument("--backup", action="store_true", help="Back up reviews.json first (and upload to R2)")
    parser.add_argument("--data-dir", default=None, help="Data directory (default: ./data)")

    args = parser.parse_args()
    if args.data_dir:
        config.use_data_dir(args.data_dir)

    run_log = RunLog("rebuild-reviews")
    run_log.log(f"Starting rebuild at {datetime.utcnow().isoformat()}Z")
    try:
        run_rebuild(show_filter=args.show, dry_run=args.dry_run, backup=args.backup, log_func=run_log.log)
    finally:
        run_log.save()


if __name__ == "__main__":
    main()
