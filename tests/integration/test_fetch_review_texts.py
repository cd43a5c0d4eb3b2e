import json
from pathlib import Path

import pytest

responses = pytest.importorskip("responses")

from fetch_review_texts import find_candidates, needs_text, run_fetch
from scorecard import config
from scorecard.pipeline.io import save_json

FIXTURES = Path(__file__).parent.parent / "fixtures"
TIMEOUT_URL = "https://www.timeout.com/newyork/theater/hamilton-review"
VARIETY_URL = "https://variety.com/2015/legit/reviews/hamilton-review-broadway-1201559080/"
GONE_URL = "https://www.theatermania.com/broadway/reviews/hamilton_73900.html"
PAYWALL_PAGE = (
    "<html><body><article>"
    "<p>Subscribe to continue reading this review of the new Broadway musical at the theater.</p>"
    "<p>Already a subscriber? Sign in to your account to access the full review today.</p>"
    "</article></body></html>"
)
LONG_TEXT = "\n\n".join([
    "Hamilton at the Richard Rodgers Theatre remains a thrilling piece of musical theater, "
    "and the cast delivers every number with confidence and wit."
] * 4)


def quiet(*_):
    pass


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr("fetch_review_texts.time.sleep", lambda *_: None)
    monkeypatch.setattr("scorecard.pipeline.fetch.time.sleep", lambda *_: None)


@pytest.fixture
def review_files(data_dir, write_review):
    save_json(config.SHOWS_PATH, {"shows": [{"id": "hamilton-2015", "title": "Hamilton", "slug": "hamilton"}]})
    write_review("hamilton-2015", "a.json", {
        "outlet": "Time Out New York", "criticName": "Adam Feldman", "url": TIMEOUT_URL,
        "dtliExcerpt": "Still the room where it happens."})
    write_review("hamilton-2015", "b.json", {
        "outlet": "Variety", "criticName": "Marilyn Stasio", "url": VARIETY_URL})
    write_review("hamilton-2015", "c.json", {
        "outlet": "TheaterMania", "criticName": "Zachary Stewart", "url": GONE_URL})
    write_review("hamilton-2015", "d.json", {
        "outlet": "The New York Times", "criticName": "Jesse Green",
        "url": "https://www.nytimes.com/2015/08/07/theater/review-hamilton.html", "fullText": LONG_TEXT})


def read(data_dir, name):
    return json.loads((data_dir / "review-texts" / "hamilton-2015" / name).read_text())


def test_needs_text():
    assert needs_text({"url": TIMEOUT_URL}) is True
    assert needs_text({"url": TIMEOUT_URL, "fullText": LONG_TEXT}) is False
    assert needs_text({"url": "https://www.nytimes.com/undefined"}) is False
    assert needs_text({"url": TIMEOUT_URL, "wrongShow": True}) is False
    assert needs_text({}) is False


def test_fetch_stores_text_and_records_failures(data_dir, review_files):
    html = (FIXTURES / "review_page.html").read_text()
    with responses.RequestsMock() as rsps:
        rsps.add(rsps.GET, TIMEOUT_URL, body=html, status=200)
        rsps.add(rsps.GET, VARIETY_URL, body=PAYWALL_PAGE, status=200)
        rsps.add(rsps.GET, GONE_URL, status=404)

        counts = run_fetch(log_func=quiet)

    assert counts == {"fetched": 1, "failed": 2, "rejected": 1}

    a = read(data_dir, "a.json")
    assert a["fullText"].startswith("Nearly a decade into its run, Hamilton")
    assert a["originalScore"] == "4/5"
    assert a["originalScoreSource"] == "extracted"
    assert a["contentTier"] == "truncated"
    assert "fetchedAt" in a

    assert "fullText" not in read(data_dir, "b.json")

    failures = json.loads((data_dir / "review-texts" / "hamilton-2015" / "failed-fetches.json").read_text())
    assert [f["file"] for f in failures] == ["b.json", "c.json"]
    assert failures[0]["reason"].startswith("garbage: Paywall")
    assert failures[1]["reason"] == "fetch failed"


def test_fetch_skips_fetched_and_failed_on_rerun(data_dir, review_files):
    html = (FIXTURES / "review_page.html").read_text()
    with responses.RequestsMock() as rsps:
        rsps.add(rsps.GET, TIMEOUT_URL, body=html, status=200)
        rsps.add(rsps.GET, VARIETY_URL, body=PAYWALL_PAGE, status=200)
        rsps.add(rsps.GET, GONE_URL, status=404)
        run_fetch(log_func=quiet)

    assert find_candidates() == []
    assert [path.name for _, path, _ in find_candidates(retry_failed=True)] == ["b.json", "c.json"]


def test_fetch_dry_run_writes_nothing(data_dir, review_files):
    html = (FIXTURES / "review_page.html").read_text()
    with responses.RequestsMock() as rsps:
        rsps.add(rsps.GET, TIMEOUT_URL, body=html, status=200)
        counts = run_fetch(show_filter="hamilton-2015", limit=1, dry_run=True, log_func=quiet)

    assert counts == {"fetched": 1, "failed": 0, "rejected": 0}
    assert "fullText" not in read(data_dir, "a.json")
    assert not (data_dir / "review-texts" / "hamilton-2015" / "failed-fetches.json").exists()


def test_find_candidates_warns_about_unreadable_files(data_dir, review_files):
    (data_dir / "review-texts" / "hamilton-2015" / "broken.json").write_text("{not json")
    messages = []

    candidates = find_candidates(log_func=lambda msg, *_: messages.append(msg))

    assert [path.name for _, path, _ in candidates] == ["a.json", "b.json", "c.json"]
    assert any("Could not read hamilton-2015/broken.json" in msg for msg in messages)
