import json

import pytest

from backfill_review_flags import apply_flags, excluded_names, run_backfill, show_title_for
from scorecard.pipeline.io import save_json
from scorecard import config

HAMILTON_PARAGRAPH = (
    "Hamilton at the Richard Rodgers Theatre remains a thrilling piece of musical theater, "
    "and the cast delivers every number with confidence and wit."
)
REVIVAL_PARAGRAPH = (
    "The revival of Hamilton finds new shadows in the second act, where the staging turns "
    "quiet and the ensemble moves with real purpose."
)
WICKED_PARAGRAPH = (
    "Wicked at the Gershwin Theatre still flies on the strength of its score, and the new "
    "leads bring warmth to the famous duet in the first act."
)
COMPLETE_TEXT = "\n\n".join([HAMILTON_PARAGRAPH] * 15)
RATED_TEXT = "\n\n".join([REVIVAL_PARAGRAPH] * 4) + "\n\nRating: 4/5."
WICKED_TEXT = "\n\n".join([WICKED_PARAGRAPH] * 5)


def quiet(*_):
    pass


def read(data_dir, name):
    return json.loads((data_dir / "review-texts" / "hamilton-2015" / name).read_text())


@pytest.fixture
def show_data(data_dir, write_review):
    save_json(config.SHOWS_PATH, {"shows": [{
        "id": "hamilton-2015",
        "title": "Hamilton",
        "slug": "hamilton",
        "cast": [{"name": "Leslie Odom Jr."}],
        "creativeTeam": ["Thomas Kail"],
    }]})
    write_review("hamilton-2015", "a.json", {
        "outlet": "The New York Times",
        "criticName": "Jesse Green",
        "fullText": "By Jesse Green\n\n" + COMPLETE_TEXT,
    })
    write_review("hamilton-2015", "b.json", {
        "outlet": "Vulture",
        "criticName": "Sara Holdren",
        "fullText": "By Jesse Green\n\n" + COMPLETE_TEXT,
    })
    write_review("hamilton-2015", "c.json", {
        "outlet": "Culture Sauce",
        "criticName": "Some Critic",
        "fullText": RATED_TEXT,
    })
    write_review("hamilton-2015", "d.json", {
        "outlet": "Variety",
        "criticName": "Frank Scheck",
        "fullText": WICKED_TEXT,
        "textQuality": "good",
    })


def test_show_title_and_excluded_names():
    assert show_title_for("hamilton-2015", None) == "hamilton"
    assert show_title_for("the-outsiders-2024", {}) == "the outsiders"
    assert show_title_for("hamilton-2015", {"title": "Hamilton"}) == "Hamilton"
    assert excluded_names({"cast": [{"name": "Leslie Odom Jr."}], "creativeTeam": ["Thomas Kail"]}) == [
        "Leslie Odom Jr.", "Thomas Kail"]
    assert excluded_names(None) == []


def test_apply_flags_clears_stale_flags():
    data = {
        "criticName": "Jesse Green",
        "outlet": "The New York Times",
        "fullText": COMPLETE_TEXT,
        "showNotMentioned": True,
        "misattributedFullText": True,
        "extractedByline": "Someone Else",
        "duplicateTextOf": "x.json",
    }

    modified, flags = apply_flags(data, "a.json", "hamilton-2015", {"title": "Hamilton"}, {})

    assert modified is True
    assert flags == []
    for field in ("showNotMentioned", "misattributedFullText", "extractedByline", "duplicateTextOf"):
        assert field not in data
    assert data["contentTier"] == "complete"


def test_apply_flags_clears_flags_when_text_is_gone():
    data = {
        "criticName": "Sara Holdren",
        "outlet": "Vulture",
        "fullText": "",
        "dtliExcerpt": "A thrilling, joyous night out at the theater.",
        "showNotMentioned": True,
        "misattributedFullText": True,
        "extractedByline": "Jesse Green",
        "expectedCritic": "Sara Holdren",
        "duplicateTextOf": "a.json",
    }

    modified, flags = apply_flags(data, "b.json", "hamilton-2015", {"title": "Hamilton"}, {"b.json": "a.json"})

    assert modified is True
    assert flags == []
    for field in ("showNotMentioned", "misattributedFullText", "extractedByline", "expectedCritic",
                  "duplicateTextOf"):
        assert field not in data
    assert data["contentTier"] == "excerpt"


def test_apply_flags_clears_show_flag_on_short_text():
    data = {"criticName": "Sara Holdren", "fullText": REVIVAL_PARAGRAPH * 2, "showNotMentioned": True}

    apply_flags(data, "b.json", "hamilton-2015", {"title": "Hamilton"}, {})

    assert "showNotMentioned" not in data


def test_backfill_flags_and_tiers(data_dir, show_data):
    stats = run_backfill(log_func=quiet)

    assert stats["totalFiles"] == 4
    assert stats["filesModified"] == 4
    assert stats["misattributed"] == 1
    assert stats["duplicateText"] == 1
    assert stats["showNotMentioned"] == 1
    assert stats["scoresExtracted"] == 1
    assert stats["errors"] == 0

    a = read(data_dir, "a.json")
    assert a["contentTier"] == "complete"
    assert "misattributedFullText" not in a

    b = read(data_dir, "b.json")
    assert b["misattributedFullText"] is True
    assert b["extractedByline"] == "Jesse Green"
    assert b["expectedCritic"] == "Sara Holdren"
    assert b["duplicateTextOf"] == "a.json"
    assert b["contentTier"] == "invalid"

    c = read(data_dir, "c.json")
    assert c["originalScore"] == "4/5"
    assert c["originalScoreSource"] == "extracted"
    assert "showNotMentioned" not in c

    d = read(data_dir, "d.json")
    assert d["showNotMentioned"] is True
    assert "textQuality" not in d


def test_backfill_is_idempotent(data_dir, show_data):
    run_backfill(log_func=quiet)
    stats = run_backfill(log_func=quiet)
    assert stats["filesModified"] == 0


def test_backfill_dry_run_leaves_files(data_dir, show_data):
    before = read(data_dir, "b.json")
    stats = run_backfill(dry_run=True, log_func=quiet)
    assert stats["filesModified"] == 4
    assert read(data_dir, "b.json") == before
