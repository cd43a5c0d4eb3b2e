from dataclasses import dataclass, field


@dataclass
class ShowMetrics:
    """Track per-show counts for the end-of-run summary table."""
    name: str
    files: int = 0
    reviews: int = 0
    merged: int = 0
    skipped: int = 0
    errors: int = 0
    error_messages: list = field(default_factory=list)
    duration_ms: float = 0.0


def summary_table(metrics, log):
    """Log a fixed-width summary of ShowMetrics keyed by show id."""
    log("")
    log("=" * 72)
    log("SHOW SUMMARY")
    log("=" * 72)
    log(f"{'Show':<32} {'Files':>6} {'Reviews':>8} {'Merged':>7} {'Errors':>7} {'Time':>8}")
    log("-" * 72)
    for name in sorted(metrics.keys()):
        m = metrics[name]
        time_str = f"{m.duration_ms:.0f}ms"
        log(f"{name[:32]:<32} {m.files:>6} {m.reviews:>8} {m.merged:>7} {m.errors:>7} {time_str:>8}")
    log("-" * 72)
    total_files = sum(m.files for m in metrics.values())
    total_reviews = sum(m.reviews for m in metrics.values())
    total_merged = sum(m.merged for m in metrics.values())
    total_errors = sum(m.errors for m in metrics.values())
    total_time = sum(m.duration_ms for m in metrics.values())
    log(f"{'TOTAL':<32} {total_files:>6} {total_reviews:>8} {total_merged:>7} {total_errors:>7} {total_time:.0f}ms")
    log("=" * 72)
