from scorecard.dedupe.shows import (
    are_titles_similar,
    check_for_duplicate,
    check_known_duplicates,
    filter_duplicates,
    normalize_title,
)

HAMILTON = {"id": "hamilton-2015", "title": "Hamilton", "slug": "hamilton"}


def test_normalize_title():
    assert normalize_title("SIX: The Musical") == "six"
    assert normalize_title("The Outsiders") == "outsiders"
    assert normalize_title("Disney's Aladdin") == "aladdin"
    assert normalize_title("Oh, Mary!") == "oh mary"
    assert normalize_title("Six on Broadway") == "six"
    assert normalize_title("") == ""


def test_are_titles_similar():
    assert are_titles_similar("merrily we roll along", "merily we roll along") is True
    assert are_titles_similar("abcde", "abcdf") is False
    assert are_titles_similar("", "") is False


def test_check_known_duplicates():
    assert check_known_duplicates("les miz", "les miserables") == (True, "les miserables")
    assert check_known_duplicates("tina", "tina the tina turner musical") == (True, "tina")
    assert check_known_duplicates("christina", "tina") == (False, None)
    assert check_known_duplicates("", "six") == (False, None)


def test_exact_title_match():
    is_dup, reason, existing = check_for_duplicate({"title": "Hamilton"}, [HAMILTON])
    assert is_dup is True
    assert reason.startswith("Exact title match")
    assert existing is HAMILTON


def test_id_base_match():
    six = {"id": "six-2021", "title": "Six: The Musical", "slug": "six-the-musical"}
    is_dup, reason, _ = check_for_duplicate({"title": "SIX"}, [six])
    assert is_dup is True
    assert reason.startswith("ID base match")


def test_known_duplicate_group():
    les_mis = {"id": "les-miserables-2014", "title": "Les Miserables", "slug": "les-miserables"}
    is_dup, reason, _ = check_for_duplicate({"title": "Les Miz"}, [les_mis])
    assert is_dup is True
    assert reason.startswith('Known duplicate group "les miserables"')


def test_normalized_title_match():
    existing = {
        "id": "stranger-things-the-first-shadow-2025",
        "title": "Stranger Things: The First Shadow",
        "slug": "stranger-things-the-first-shadow",
    }
    is_dup, reason, _ = check_for_duplicate({"title": "Stranger Things"}, [existing])
    assert is_dup is True
    assert reason.startswith("Normalized title match")


def test_slug_prefix_match():
    existing = {"id": "appropriate-revival-2023", "title": "Appropriate Revival", "slug": "appropriate-revival"}
    is_dup, reason, _ = check_for_duplicate({"title": "Appropriate"}, [existing])
    assert is_dup is True
    assert reason.startswith("Slug prefix match")


def test_same_venue_similar_title_start():
    existing = {
        "id": "great-expectations-reimagined-2024",
        "title": "Great Expectations Reimagined",
        "slug": "great-expectations-reimagined",
        "venue": "Booth Theatre",
    }
    candidate = {"title": "Great Expectations Live", "venue": "booth theatre"}
    is_dup, reason, _ = check_for_duplicate(candidate, [existing])
    assert is_dup is True
    assert reason.startswith("Same venue")


def test_fuzzy_match():
    existing = {"id": "merrily-we-roll-along-2023", "title": "Merrily We Roll Along", "slug": "merrily-we-roll-along"}
    is_dup, reason, _ = check_for_duplicate({"title": "Merily We Roll Along"}, [existing])
    assert is_dup is True
    assert reason.startswith("Fuzzy match")


def test_new_show_is_not_duplicate():
    assert check_for_duplicate({"title": "Purlie Victorious"}, [HAMILTON]) == (False, None, None)


def test_filter_duplicates_checks_earlier_candidates():
    candidates = [
        {"id": "hamilton-2015", "title": "Hamilton", "slug": "hamilton"},
        {"id": "purlie-victorious-2023", "title": "Purlie Victorious", "slug": "purlie-victorious"},
        {"id": "purlie-victorious-2023", "title": "Purlie Victorious", "slug": "purlie-victorious"},
    ]

    duplicates, new_shows = filter_duplicates(candidates, [HAMILTON])

    assert [s["title"] for s in new_shows] == ["Purlie Victorious"]
    assert len(duplicates) == 2
    assert duplicates[0]["existingShow"] is HAMILTON
    assert duplicates[1]["existingShow"] is candidates[1]
    assert duplicates[1]["reason"].startswith("Exact title match")
