import json

import pytest

from add_shows import prepare_candidate, run_add_shows
from backfill_review_flags import run_backfill
from scorecard import config
from scorecard.pipeline.io import save_json

HAMILTON = {"id": "hamilton-2015", "title": "Hamilton", "slug": "hamilton"}


def quiet(*_):
    pass


@pytest.fixture
def candidates_path(data_dir):
    save_json(config.SHOWS_PATH, {"shows": [HAMILTON]})
    path = data_dir / "candidates.json"
    save_json(path, [
        {"title": "Hamilton"},
        {"title": "Purlie Victorious", "openingDate": "September 27, 2023"},
        {"title": "Purlie Victorious: A Non-Confederate Romp Through the Cotton Patch"},
        {"slug": "no-title"},
    ])
    return path


def test_prepare_candidate():
    show = prepare_candidate({"title": "Purlie Victorious", "openingDate": "September 27, 2023"})
    assert show["slug"] == "purlie-victorious"
    assert show["id"] == "purlie-victorious-2023"

    assert prepare_candidate({"title": "Cats"})["id"] == "cats"
    assert prepare_candidate(HAMILTON) == HAMILTON


def test_add_shows(data_dir, candidates_path):
    added, duplicates, invalid = run_add_shows(candidates_path, log_func=quiet)

    assert [s["id"] for s in added] == ["purlie-victorious-2023"]
    assert len(duplicates) == 2
    assert duplicates[0]["existingShow"] == HAMILTON
    assert duplicates[1]["existingShow"]["id"] == "purlie-victorious-2023"
    assert invalid == [{"slug": "no-title", "id": "no-title"}]

    saved = json.loads(config.SHOWS_PATH.read_text())
    assert [s["id"] for s in saved["shows"]] == ["hamilton-2015", "purlie-victorious-2023"]

    backups = list(config.BACKUPS_DIR.glob("shows-*.json"))
    assert len(backups) == 1
    assert json.loads(backups[0].read_text()) == {"shows": [HAMILTON]}


def test_add_shows_dry_run(data_dir, candidates_path):
    added, _, _ = run_add_shows(candidates_path, dry_run=True, log_func=quiet)

    assert len(added) == 1
    assert json.loads(config.SHOWS_PATH.read_text()) == {"shows": [HAMILTON]}
    assert not config.BACKUPS_DIR.exists()


def test_add_shows_missing_files(data_dir):
    with pytest.raises(FileNotFoundError):
        run_add_shows(data_dir / "candidates.json", log_func=quiet)

    save_json(config.SHOWS_PATH, [HAMILTON])
    with pytest.raises(FileNotFoundError):
        run_add_shows(data_dir / "candidates.json", log_func=quiet)


def test_added_show_survives_later_runs_with_r2(data_dir, fake_r2):
    fake_r2.objects["shows.json"] = b'{"shows": [{"id": "stale-2020", "title": "Stale", "slug": "stale"}]}'
    save_json(config.SHOWS_PATH, {"shows": [HAMILTON]})
    candidates = data_dir / "candidates.json"
    save_json(candidates, [{"title": "Brand New Show", "openingDate": "2026-04-01"}])

    added, _, _ = run_add_shows(candidates, log_func=quiet)
    assert [s["id"] for s in added] == ["brand-new-show-2026"]
    assert fake_r2.puts == ["shows.json"]
    after_add = config.SHOWS_PATH.read_text()

    run_backfill(dry_run=True, log_func=quiet)

    assert config.SHOWS_PATH.read_text() == after_add
    assert [s["id"] for s in json.loads(after_add)["shows"]] == ["hamilton-2015", "brand-new-show-2026"]


def test_add_shows_pulls_missing_shows_file(data_dir, fake_r2):
    fake_r2.objects["shows.json"] = json.dumps({"shows": [HAMILTON]}).encode()
    candidates = data_dir / "candidates.json"
    save_json(candidates, [{"title": "Hamilton"}])

    with pytest.raises(FileNotFoundError):
        run_add_shows(candidates, dry_run=True, log_func=quiet)
    assert not config.SHOWS_PATH.exists()

    added, duplicates, _ = run_add_shows(candidates, log_func=quiet)
    assert added == []
    assert duplicates[0]["existingShow"] == HAMILTON
    assert json.loads(config.SHOWS_PATH.read_text()) == {"shows": [HAMILTON]}
    assert fake_r2.puts == []
