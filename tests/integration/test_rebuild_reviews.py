import json

import pytest
from freezegun import freeze_time

from rebuild_reviews import run_rebuild
from scorecard import config
from scorecard.pipeline.io import save_json


def quiet(*_):
    pass


@pytest.fixture
def review_texts(write_review):
    write_review("hamilton-2015", "nyt--j-green.json", {
        "outlet": "NYT",
        "criticName": "J. Green",
        "dtliExcerpt": "Yes, it really is that good.",
        "source": "dtli",
    })
    write_review("hamilton-2015", "nytimes--jesse-green.json", {
        "outlet": "The New York Times",
        "criticName": "Jesse Green",
        "url": "https://www.nytimes.com/2015/08/07/theater/review-hamilton.html",
        "originalScore": "B+",
        "source": "bww",
    })
    write_review("hamilton-2015", "variety--frank-scheck.json", {
        "outlet": "Variety",
        "criticName": "Frank Scheck",
        "wrongProduction": True,
    })
    write_review("hamilton-2015", "vulture--sara-holdren.json", {
        "outlet": "Vulture",
        "criticName": "Sara Holdren",
        "llmScore": {"score": 72, "confidence": "high"},
    })
    write_review("hamilton-2015", "failed-fetches.json", [{"file": "vulture--sara-holdren.json"}])
    write_review("wicked-2003", "nypost--johnny-oleksinski.json", {
        "outlet": "New York Post",
        "criticName": "Johnny Oleksinski",
        "bucket": "Pan",
    })
    broken = write_review("wicked-2003", "broken.json", {})
    broken.write_text("{not json")


@freeze_time("2026-03-01T12:00:00Z")
def test_rebuild_writes_reviews_and_status(data_dir, review_texts):
    output = run_rebuild(log_func=quiet)

    reviews = output["reviews"]
    assert [(r["showId"], r["outletId"], r["assignedScore"]) for r in reviews] == [
        ("hamilton-2015", "nytimes", 85),
        ("hamilton-2015", "vulture", 72),
        ("wicked-2003", "nypost", 30),
    ]
    nyt = reviews[0]
    assert nyt["pullQuote"] == "Yes, it really is that good."
    assert nyt["originalRating"] == "B+"
    assert nyt["url"].startswith("https://www.nytimes.com/")

    meta = output["_meta"]
    assert meta["lastUpdated"] == "2026-03-01"
    assert meta["stats"]["totalReviews"] == 3
    assert meta["stats"]["totalFiles"] == 6
    assert meta["stats"]["duplicatesMerged"] == 1
    assert meta["stats"]["skippedFlagged"] == 1
    assert meta["stats"]["scoreSources"]["originalScore"] == 1
    assert meta["stats"]["scoreSources"]["llmScore"] == 1
    assert meta["stats"]["scoreSources"]["bucket"] == 1
    assert meta["stats"]["scoreSources"]["default"] == 0

    assert json.loads(config.REVIEWS_PATH.read_text()) == output

    status = json.loads(config.STATUS_PATH.read_text())
    assert status["all_success"] is True
    assert status["total_reviews"] == 3
    assert status["shows"]["hamilton-2015"]["review_count"] == 2
    assert status["shows"]["hamilton-2015"]["last_success"] == "2026-03-01T12:00:00Z"


def test_rebuild_dry_run_writes_nothing(data_dir, review_texts):
    output = run_rebuild(dry_run=True, log_func=quiet)
    assert output["_meta"]["stats"]["totalReviews"] == 3
    assert not config.REVIEWS_PATH.exists()
    assert not config.STATUS_PATH.exists()


def test_rebuild_single_show_keeps_other_shows(data_dir, review_texts):
    save_json(config.REVIEWS_PATH, {"reviews": [
        {"showId": "hamilton-2015", "outlet": "Old Outlet", "assignedScore": 10},
        {"showId": "cats-1982", "outlet": "Variety", "assignedScore": 60},
    ]})

    output = run_rebuild(show_filter="hamilton-2015", log_func=quiet)

    assert [(r["showId"], r["outlet"]) for r in output["reviews"]] == [
        ("cats-1982", "Variety"),
        ("hamilton-2015", "NYT"),
        ("hamilton-2015", "Vulture"),
    ]


@freeze_time("2026-03-01T12:00:00Z")
def test_rebuild_backup(data_dir, review_texts):
    save_json(config.REVIEWS_PATH, {"reviews": []})
    messages = []

    run_rebuild(backup=True, log_func=lambda msg, *_: messages.append(msg))

    backup = config.BACKUPS_DIR / "reviews-2026-03-01-120000.json"
    assert json.loads(backup.read_text()) == {"reviews": []}
    assert "R2 upload skipped: missing R2 credentials" in messages


def test_rebuild_preserves_earlier_success(data_dir, review_texts):
    save_json(config.STATUS_PATH, {"shows": {
        "hamilton-2015": {"last_success": "2026-01-01T00:00:00Z"},
        "cats-1982": {"last_success": "2025-12-01T00:00:00Z", "success": True},
    }})

    run_rebuild(show_filter="wicked-2003", log_func=quiet)

    status = json.loads(config.STATUS_PATH.read_text())
    assert status["shows"]["cats-1982"]["last_success"] == "2025-12-01T00:00:00Z"
    assert status["shows"]["hamilton-2015"]["last_success"] == "2026-01-01T00:00:00Z"
    assert status["shows"]["wicked-2003"]["success"] is True
