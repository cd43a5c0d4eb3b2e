#!/usr/bin/env python3
"""
Add discovered shows to shows.json without creating duplicates.

Candidates come from a JSON file (a list, or {"shows": [...]}). Each one is
checked against shows.json, and against candidates accepted earlier in the
same batch; duplicates are reported with the reason they matched.
"""

import sys
from pathlib import Path

from scorecard import config
from scorecard.dedupe.shows import filter_duplicates
from scorecard.pipeline.io import backup_file, load_json, pull_if_missing, save_json
from scorecard.pipeline.r2 import upload_to_r2
from scorecard.pipeline.runlog import RunLog
from scorecard.pipeline.validate import validate_show
from scorecard.utils.dates import normalize_publish_date
from scorecard.utils.text import slugify


def prepare_candidate(show):
    """Fill slug and id (<slug>-<year>) when a candidate only has a title."""
    show = dict(show)
    if show.get("title") and not show.get("slug"):
        show["slug"] = slugify(show["title"])
    if show.get("slug") and not show.get("id"):
        opening = normalize_publish_date(show.get("openingDate")) if show.get("openingDate") else None
        show["id"] = f"{show['slug']}-{opening[:4]}" if opening else show["slug"]
    return show


def _shows_list(data):
    if isinstance(data, dict):
        return data.get("shows", [])
    return data or []


def run_add_shows(candidates_path, dry_run=False, log_func=None):
    """
    Merge candidates into shows.json. Returns (added, duplicates, invalid).
    Raises FileNotFoundError when shows.json or the candidates file is missing.
    """
    log = log_func or RunLog("add-shows").log

    pull_if_missing("shows.json", config.SHOWS_PATH, pull=not dry_run)
    if not config.SHOWS_PATH.exists():
        raise FileNotFoundError(f"Shows file not found: {config.SHOWS_PATH}")
    if not candidates_path.exists():
        raise FileNotFoundError(f"Candidates file not found: {candidates_path}")

    shows_data = load_json(config.SHOWS_PATH, default=[])
    existing = _shows_list(shows_data)
    candidates = [prepare_candidate(s) for s in _shows_list(load_json(candidates_path, default=[]))]

    invalid = [s for s in candidates if not validate_show(s)]
    for show in invalid:
        log(f"  Invalid candidate (missing id/title/slug): {show}", "WARNING")
    candidates = [s for s in candidates if validate_show(s)]

    duplicates, new_shows = filter_duplicates(candidates, existing)

    log(f"{len(candidates)} candidates: {len(new_shows)} new, {len(duplicates)} duplicates, {len(invalid)} invalid")
    for dup in duplicates:
        log(f"  SKIP {dup['show']['title']}: {dup['reason']}")
    for show in new_shows:
        log(f"  ADD  {show['title']} ({show['id']})")

    if dry_run:
        log("[DRY RUN] shows.json not written")
        return new_shows, duplicates, invalid

    if new_shows:
        backup_path = backup_file(config.SHOWS_PATH)
        if backup_path:
            log(f"Backup saved to {backup_path}")
        merged = existing + new_shows
        if isinstance(shows_data, dict):
            shows_data["shows"] = merged
        else:
            shows_data = merged
        save_json(config.SHOWS_PATH, shows_data)
        log(f"Shows saved to {config.SHOWS_PATH}")
        upload_to_r2([(config.SHOWS_PATH, "shows.json")], log_func=log)

    return new_shows, duplicates, invalid


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Add candidate shows to shows.json, skipping duplicates")
    parser.add_argument("candidates", help="JSON file of candidate shows")
    parser.add_argument("--dry-run", action="store_true", help="Report only; don't write shows.json")
    parser.add_argument("--data-dir", default=None, help="Data directory (default: ./data)")

    args = parser.parse_args()
    if args.data_dir:
        config.use_data_dir(args.data_dir)

    run_log = RunLog("add-shows")
    try:
        run_add_shows(Path(args.candidates), dry_run=args.dry_run, log_func=run_log.log)
    except FileNotFoundError as e:
        run_log.log(f"ERROR: {e}", "ERROR")
        run_log.save()
        sys.exit(1)
    run_log.save()


if __name__ == "__main__":
    main()
