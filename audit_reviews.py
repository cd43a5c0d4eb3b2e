#!/usr/bin/env python3
"""
Audit the review data and write reports to data/audit/:
- duplicate-review-files.json: same outlet + critic, similar critics, shared URLs,
  duplicated text and conflicting excerpts
- score-conversions.json: assigned scores checked against original ratings
- content-quality.json: content tier distribution and unusable full text
- outlet-registry-audit.json: outlet ids missing from or disagreeing with the registry
"""

import sys
from datetime import datetime

from scorecard import config
from scorecard.dedupe.reviews import (
    find_cross_show_urls,
    find_duplicate_text,
    find_sentiment_conflicts,
    find_similar_critics,
    find_url_duplicates,
    group_by_review_key,
)
from scorecard.normalize.critics import parse_review_filename
from scorecard.normalize.outlets import load_outlet_registry, normalize_outlet
from scorecard.pipeline.io import iter_show_dirs, load_reviews, load_show_reviews, load_shows, save_json
from scorecard.pipeline.runlog import RunLog
from scorecard.quality.content import assess_text_quality, classify_content_tier
from scorecard.scoring.rules import validate_score

MAX_DUPLICATE_GROUPS = 50
MAX_MISCALCULATION_RATE = 5
MAX_UNPARSEABLE_RATE = 10


def _rate(part, whole):
    return round(part / whole * 100, 2) if whole else 0


def audit_duplicates(records):
    """Duplicate report over (path, record) pairs from every show."""
    duplicates = group_by_review_key(records)
    similar = find_similar_critics(records)
    url_duplicates = find_url_duplicates(records)
    cross_show = find_cross_show_urls(records)
    duplicate_text = find_duplicate_text(records)
    sentiment_issues = find_sentiment_conflicts(records)

    return {
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "summary": {
            "total_files": len(records),
            "total_shows": len({path.parent.name for path, _ in records}),
            "duplicate_groups": len(duplicates),
            "similar_critic_pairs": len(similar),
            "url_duplicates_same_show": len(url_duplicates),
            "cross_show_duplicates": len(cross_show),
            "duplicate_text": len(duplicate_text),
            "sentiment_inconsistencies": len(sentiment_issues),
        },
        "passed": not cross_show and len(duplicates) < MAX_DUPLICATE_GROUPS,
        "duplicates": duplicates,
        "similar_critics": similar,
        "url_duplicates": url_duplicates,
        "cross_show": cross_show,
        "duplicate_text": duplicate_text,
        "sentiment_issues": sentiment_issues,
    }


def audit_score_conversions(reviews, tolerance=None):
    """Check reviews.json assigned scores against their original ratings."""
    tolerance = config.SCORE_TOLERANCE if tolerance is None else tolerance
    results = {"correct": [], "miscalculated": [], "unparseable": [], "designation_only": [], "null_rating": [],
               "missing_score": []}

    for review in reviews:
        check = validate_score(review.get("originalRating"), review.get("assignedScore"), tolerance)
        item = {
            "showId": review.get("showId"),
            "outlet": review.get("outlet"),
            "criticName": review.get("criticName"),
            "originalRating": review.get("originalRating"),
            "assignedScore": review.get("assignedScore"),
            "expectedScore": check["expected"],
            "difference": check["difference"],
        }
        results[check["reason"]].append(item)

    with_rating = sum(len(results[k]) for k in ("correct", "miscalculated", "unparseable", "designation_only",
                                                "missing_score"))
    scorable = len(results["correct"]) + len(results["miscalculated"])
    miscalculation_rate = _rate(len(results["miscalculated"]), scorable)
    unparseable_rate = _rate(len(results["unparseable"]), with_rating)

    return {
        "_meta": {
            "generatedAt": datetime.utcnow().isoformat() + "Z",
            "tolerance": tolerance,
        },
        "summary": {
            "total_reviews": len(reviews),
            "with_original_rating": with_rating,
            "without_original_rating": len(results["null_rating"]),
            "total_scorable": scorable,
            "correct": len(results["correct"]),
            "miscalculated": len(results["miscalculated"]),
            "unparseable": len(results["unparseable"]),
            "designation_only": len(results["designation_only"]),
            "missing_score": len(results["missing_score"]),
            "miscalculation_rate": f"{miscalculation_rate}%",
            "unparseable_rate": f"{unparseable_rate}%",
        },
        "validation": {
            "miscalculation_rate_pass": miscalculation_rate < MAX_MISCALCULATION_RATE,
            "unparseable_rate_pass": unparseable_rate < MAX_UNPARSEABLE_RATE,
            "overall_pass": miscalculation_rate < MAX_MISCALCULATION_RATE and unparseable_rate < MAX_UNPARSEABLE_RATE,
        },
        "miscalculated": sorted(results["miscalculated"], key=lambda r: -r["difference"]),
        "unparseable": results["unparseable"],
        "designation_only": results["designation_only"],
        "missing_score": results["missing_score"],
        "correct_sample": results["correct"][:10],
    }


def audit_content_quality(records, shows_by_id=None):
    """Content tier distribution, stale stored tiers and garbage full text."""
    shows_by_id = shows_by_id or {}
    by_tier = {tier: 0 for tier in config.CONTENT_TIERS}
    stale = []
    unusable = []

    for path, record in records:
        label = f"{path.parent.name}/{path.name}"
        tier = classify_content_tier(record)
        by_tier[tier["contentTier"]] += 1

        if record.get("contentTier") and record["contentTier"] != tier["contentTier"]:
            stale.append({"file": label, "stored": record["contentTier"], "computed": tier["contentTier"],
                          "reason": tier["tierReason"]})

        if record.get("fullText"):
            show_id = record.get("showId") or path.parent.name
            show = shows_by_id.get(show_id) or {}
            quality = assess_text_quality(record["fullText"], show_id, show.get("title"))
            if quality["quality"] != "valid":
                unusable.append({"file": label, "quality": quality["quality"],
                                 "confidence": quality["confidence"], "issues": quality["issues"]})

    return {
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "summary": {
            "total_files": len(records),
            "by_tier": by_tier,
            "stale_tiers": len(stale),
            "unusable_full_text": len(unusable),
        },
        "stale_tiers": stale,
        "unusable_full_text": unusable,
    }


def audit_outlet_registry(records, registry):
    """Compare outlet ids used in review files with the outlet registry."""
    outlets = registry["outlets"]
    used = {}
    display_mismatches = {}
    needs_normalization = {}

    for path, record in records:
        parsed = parse_review_filename(path.name)
        outlet_id = record.get("outletId") or (parsed[0] if parsed else None)
        if not outlet_id:
            continue
        label = f"{path.parent.name}/{path.name}"
        entry = used.setdefault(outlet_id, {"count": 0, "displayNames": set(), "files": []})
        entry["count"] += 1
        entry["files"].append(label)
        if record.get("outlet"):
            entry["displayNames"].add(record["outlet"])

        canonical = normalize_outlet(outlet_id, registry)
        if canonical not in outlets:
            continue

        if canonical != outlet_id:
            item = needs_normalization.setdefault((outlet_id, canonical), {
                "currentOutletId": outlet_id, "canonicalId": canonical, "count": 0, "files": []})
            item["count"] += 1
            item["files"].append(label)

        expected_name = outlets[canonical].get("displayName")
        current_name = record.get("outlet")
        if expected_name and current_name and current_name != expected_name:
            item = display_mismatches.setdefault((outlet_id, current_name), {
                "outletId": outlet_id, "currentDisplayName": current_name,
                "expectedDisplayName": expected_name, "canonicalId": canonical, "files": []})
            item["files"].append(label)

    missing = []
    used_canonical = set()
    for outlet_id, data in used.items():
        canonical = normalize_outlet(outlet_id, registry)
        if canonical in outlets:
            used_canonical.add(canonical)
            continue
        missing.append({
            "outletId": outlet_id,
            "count": data["count"],
            "displayNames": sorted(data["displayNames"]),
            "sampleFiles": data["files"][:3],
        })
    missing.sort(key=lambda m: -m["count"])

    orphaned = [
        {"outletId": outlet_id, "displayName": entry.get("displayName"), "tier": entry.get("tier")}
        for outlet_id, entry in sorted(outlets.items())
        if outlet_id not in used_canonical
    ]

    needs = sorted(needs_normalization.values(), key=lambda n: -n["count"])
    mismatches = list(display_mismatches.values())
    has_issues = bool(missing or needs)

    return {
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "status": "fail" if has_issues else "pass",
        "summary": {
            "missingFromRegistry": len(missing),
            "orphanedInRegistry": len(orphaned),
            "displayNameMismatches": len(mismatches),
            "needsNormalization": len(needs),
        },
        "missingFromRegistry": missing,
        "displayNameMismatches": mismatches,
        "needsNormalization": needs,
        "orphanedInRegistry": orphaned,
    }


def run_audit(show_filter=None, log_func=None):
    """Run every audit and write the reports. Returns True when all checks pass."""
    log = log_func or RunLog("audit-reviews").log

    records = []
    for show_dir in iter_show_dirs(show_filter):
        records.extend(load_show_reviews(
            show_dir,
            on_error=lambda path, e: log(f"  Could not read {path.parent.name}/{path.name}: {e}", "WARNING"),
        ))
    log(f"Loaded {len(records)} review files")

    shows_by_id = {show.get("id"): show for show in load_shows()}

    reviews = load_reviews()
    if show_filter:
        reviews = [r for r in reviews if r.get("showId") == show_filter]

    config.AUDIT_DIR.mkdir(parents=True, exist_ok=True)

    duplicates = audit_duplicates(records)
    save_json(config.AUDIT_DIR / "duplicate-review-files.json", duplicates)
    s = duplicates["summary"]
    log("\n=== Duplicates ===")
    log(f"  Outlet/critic duplicate groups: {s['duplicate_groups']}")
    log(f"  Similar critic pairs: {s['similar_critic_pairs']}")
    log(f"  URL duplicates (same show): {s['url_duplicates_same_show']}")
    log(f"  Cross-show URL duplicates: {s['cross_show_duplicates']}")
    log(f"  Duplicate full text: {s['duplicate_text']}")
    log(f"  Sentiment inconsistencies: {s['sentiment_inconsistencies']}")
    for collision in duplicates["cross_show"]:
        log(f"  CRITICAL: {collision['url']} in {', '.join(collision['shows'])}", "ERROR")

    scores = audit_score_conversions(reviews)
    save_json(config.AUDIT_DIR / "score-conversions.json", scores)
    s = scores["summary"]
    log("\n=== Score conversions ===")
    log(f"  With original rating: {s['with_original_rating']}")
    log(f"  Correct: {s['correct']}  Miscalculated: {s['miscalculated']}  Unparseable: {s['unparseable']}")
    log(f"  Miscalculation rate: {s['miscalculation_rate']}  Unparseable rate: {s['unparseable_rate']}")
    for item in scores["miscalculated"][:20]:
        log(f"  {item['showId']} | {item['outlet']} | {item['criticName']}: "
            f"{item['originalRating']!r} -> {item['assignedScore']} (expected {item['expectedScore']})", "WARNING")

    content = audit_content_quality(records, shows_by_id)
    save_json(config.AUDIT_DIR / "content-quality.json", content)
    log("\n=== Content tiers ===")
    for tier, count in content["summary"]["by_tier"].items():
        log(f"  {tier:<10} {count:>6}")
    log(f"  Stale stored tiers: {content['summary']['stale_tiers']}")
    log(f"  Unusable full text: {content['summary']['unusable_full_text']}")

    registry_report = audit_outlet_registry(records, load_outlet_registry())
    save_json(config.AUDIT_DIR / "outlet-registry-audit.json", registry_report)
    s = registry_report["summary"]
    log("\n=== Outlet registry ===")
    log(f"  Missing from registry: {s['missingFromRegistry']}")
    log(f"  Needs normalization: {s['needsNormalization']}")
    log(f"  Display name mismatches: {s['displayNameMismatches']}")
    log(f"  Orphaned in registry: {s['orphanedInRegistry']}")

    log(f"\nReports saved to {config.AUDIT_DIR}")

    passed = duplicates["passed"] and scores["validation"]["overall_pass"] and registry_report["status"] == "pass"
    log("PASSED" if passed else "FAILED: see audit reports", "INFO" if passed else "WARNING")
    return passed


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Audit review data for duplicates, scores, tiers and outlets")
    parser.add_argument("--show", default=None, help="Only audit this show id")
    parser.add_argument("--data-dir", default=None, help="Data directory (default: ./data)")

    args = parser.parse_args()
    if args.data_dir:
        config.use_data_dir(args.data_dir)

    run_log = RunLog("audit-reviews")
    try:
        passed = run_audit(show_filter=args.show, log_func=run_log.log)
    finally:
        run_log.save()
    sys.exit(0 if passed else 1)


if __name__ == "__main__":
    main()
