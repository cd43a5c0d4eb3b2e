from pathlib import Path

from scorecard.dedupe.reviews import (
    build_fingerprint_map,
    collapse_duplicates,
    find_cross_show_urls,
    find_duplicate_text,
    find_sentiment_conflicts,
    find_similar_critics,
    find_url_duplicates,
    group_by_review_key,
    normalize_url,
)

ROOT = Path("data/review-texts")
PARAGRAPH = (
    "Hamilton at the Richard Rodgers Theatre remains a thrilling piece of musical theater, "
    "and the cast delivers every number with confidence and wit."
)
LONG_TEXT = "\n\n".join([PARAGRAPH] * 4)


def rec(show_id, file_name, **fields):
    return ROOT / show_id / file_name, fields


def test_group_by_review_key():
    records = [
        rec("hamilton-2015", "nytimes--jesse-green.json", outlet="The New York Times", criticName="Jesse Green"),
        rec("hamilton-2015", "nyt--j-green.json", outlet="NYT", criticName="J. Green"),
        rec("hamilton-2015", "vulture--sara-holdren.json", outlet="Vulture", criticName="Sara Holdren"),
        rec("wicked-2003", "nytimes--jesse-green.json", outlet="NYT", criticName="Jesse Green"),
    ]

    groups = group_by_review_key(records)

    assert len(groups) == 1
    group = groups[0]
    assert group["showId"] == "hamilton-2015"
    assert group["outlet"] == "nytimes"
    assert group["critic"] == "jesse-green"
    assert group["files"] == ["hamilton-2015/nytimes--jesse-green.json", "hamilton-2015/nyt--j-green.json"]
    assert group["details"][1]["originalCritic"] == "J. Green"


def test_find_similar_critics():
    records = [
        rec("hamilton-2015", "vulture--sara.json"),
        rec("hamilton-2015", "vulture--sara-holdren.json"),
        rec("hamilton-2015", "variety--frank-sheck.json"),
        rec("hamilton-2015", "variety--frank-scheck.json"),
        rec("hamilton-2015", "nypost--johnny-oleksinski.json"),
    ]

    matches = find_similar_critics(records)

    reasons = {tuple(m["critics"]): m["reason"] for m in matches}
    assert reasons == {
        ("sara", "sara-holdren"): "partial-name",
        ("frank-sheck", "frank-scheck"): "fuzzy-match",
    }


def test_normalize_url():
    assert normalize_url("https://www.NYTimes.com/2015/review/?utm_source=x#top") == "nytimes.com/2015/review"
    assert normalize_url("  ") is None
    assert normalize_url(None) is None


def test_url_duplicates_and_cross_show_collisions():
    records = [
        rec("hamilton-2015", "nytimes--jesse-green.json", url="https://www.nytimes.com/review-hamilton"),
        rec("hamilton-2015", "nyt--j-green.json", url="http://nytimes.com/review-hamilton/?src=rss"),
        rec("hamilton-2015", "variety--frank-scheck.json", url="https://variety.com/wicked-review"),
        rec("wicked-2003", "variety--frank-scheck.json", url="https://variety.com/wicked-review"),
    ]

    same_show = find_url_duplicates(records)
    assert len(same_show) == 1
    assert same_show[0]["showId"] == "hamilton-2015"
    assert same_show[0]["files"] == ["hamilton-2015/nytimes--jesse-green.json", "hamilton-2015/nyt--j-green.json"]

    cross = find_cross_show_urls(records)
    assert len(cross) == 1
    assert cross[0]["shows"] == ["hamilton-2015", "wicked-2003"]
    assert cross[0]["severity"] == "CRITICAL"


def test_fingerprint_map_first_file_owns_text():
    records = [
        rec("hamilton-2015", "vulture--sara-holdren.json", fullText=LONG_TEXT),
        rec("hamilton-2015", "nytimes--jesse-green.json", fullText=LONG_TEXT),
        rec("hamilton-2015", "variety--frank-scheck.json", fullText="Too short to fingerprint."),
    ]

    assert build_fingerprint_map(records) == {"vulture--sara-holdren.json": "nytimes--jesse-green.json"}

    duplicates = find_duplicate_text(records)
    assert duplicates == [{
        "showId": "hamilton-2015",
        "file": "hamilton-2015/vulture--sara-holdren.json",
        "duplicateTextOf": "nytimes--jesse-green.json",
        "reason": "Full text matches another review file",
    }]


def test_find_sentiment_conflicts():
    records = [
        rec("hamilton-2015", "nytimes--jesse-green.json",
            outlet="The New York Times", criticName="Jesse Green",
            dtliExcerpt="A brilliant, thrilling triumph.", bwwExcerpt="A dull and lifeless evening."),
        rec("hamilton-2015", "vulture--sara-holdren.json",
            dtliExcerpt="A brilliant night.", bwwExcerpt="A superb cast."),
    ]

    issues = find_sentiment_conflicts(records)

    assert len(issues) == 1
    issue = issues[0]
    assert issue["file"] == "hamilton-2015/nytimes--jesse-green.json"
    assert [e["source"] for e in issue["conflicting_excerpts"]] == ["dtli", "bww"]
    assert issue["conflicting_excerpts"][0]["excerpt"] == "A brilliant, thrilling triumph...."


def test_collapse_duplicates():
    records = [
        rec("hamilton-2015", "nyt--j-green.json", outlet="NYT", criticName="J. Green", fullText="short"),
        rec("hamilton-2015", "nytimes--jesse-green.json", outlet="The New York Times", criticName="Jesse Green",
            fullText=LONG_TEXT, originalScore="B+"),
        rec("hamilton-2015", "vulture--sara-holdren.json", outlet="Vulture", criticName="Sara Holdren"),
    ]

    collapsed, merged_count = collapse_duplicates(records)

    assert merged_count == 1
    assert len(collapsed) == 2
    assert collapsed[0]["outlet"] == "NYT"
    assert collapsed[0]["fullText"] == LONG_TEXT
    assert collapsed[0]["originalScore"] == "B+"
    assert collapsed[1]["criticName"] == "Sara Holdren"
