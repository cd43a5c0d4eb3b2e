import json
import shutil
from datetime import datetime

from scorecard import config
from scorecard.pipeline.r2 import download_from_r2


def load_json(path, default=None):
    """Read a JSON file; return default when it is missing or unreadable."""
    try:
        if path.exists():
            with open(path, "r") as f:
                return json.load(f)
    except Exception as e:
        print(f"  Warning: Could not read {path}: {e}")
    return default


def save_json(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")


def pull_if_missing(key, path, pull=True):
    """
    Fetch a data file from R2 only when there is no local copy.
    An existing local file is never replaced.
    """
    if pull and not path.exists():
        return download_from_r2(key, path)
    return False


def load_shows(path=None, pull=True):
    """
    Load shows.json (pulled from R2 when missing locally and pull is set).
    Accepts {"shows": [...]} or a bare list; always returns a list.
    """
    path = path or config.SHOWS_PATH
    pull_if_missing("shows.json", path, pull)
    data = load_json(path, default=[])
    if isinstance(data, dict):
        return data.get("shows", [])
    return data or []


def load_reviews(path=None, pull=True):
    """Load reviews.json; returns the list of review entries."""
    path = path or config.REVIEWS_PATH
    pull_if_missing("reviews.json", path, pull)
    data = load_json(path, default={})
    if isinstance(data, list):
        return data
    return data.get("reviews", [])


def load_status(path=None):
    return load_json(path or config.STATUS_PATH, default={"shows": {}}) or {"shows": {}}


def iter_show_dirs(show_filter=None):
    """Yield review-texts/<show-id> directories in sorted order."""
    if not config.REVIEW_TEXTS_DIR.exists():
        return
    for show_dir in sorted(config.REVIEW_TEXTS_DIR.iterdir()):
        if not show_dir.is_dir():
            continue
        if show_filter and show_dir.name != show_filter:
            continue
        yield show_dir


def iter_review_files(show_dir):
    """Yield review JSON files for one show; failed-fetches.json is not a review."""
    for path in sorted(show_dir.glob("*.json")):
        if path.name == config.FAILED_FETCHES_NAME:
            continue
        yield path


def load_review_file(path):
    """Read one review file. Raises on malformed JSON so callers can record the error."""
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path.name}: expected an object, got {type(data).__name__}")
    data.setdefault("showId", path.parent.name)
    return data


def write_review_file(path, data):
    save_json(path, data)


def load_show_reviews(show_dir, on_error=None):
    """
    Load every review file in a show directory.
    Returns list of (path, record). Unreadable files are reported through on_error(path, exc).
    """
    records = []
    for path in iter_review_files(show_dir):
        try:
            records.append((path, load_review_file(path)))
        except Exception as e:
            if on_error:
                on_error(path, e)
            else:
                raise
    return records


def backup_file(path, backups_dir=None):
    """
    Copy a data file to backups/<stem>-YYYY-MM-DD-HHMMSS.json.
    Returns the backup path, or None if the source doesn't exist.
    """
    if not path.exists():
        return None
    backups_dir = backups_dir or config.BACKUPS_DIR
    backups_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.utcnow().strftime("%Y-%m-%d-%H%M%S")
    target = backups_dir / f"{path.stem}-{stamp}{path.suffix}"
    shutil.copy2(path, target)
    return target
