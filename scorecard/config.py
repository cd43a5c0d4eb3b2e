import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

REPO_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = Path(os.environ.get("SCORECARD_DATA_DIR", REPO_ROOT / "data"))
SHOWS_PATH = DATA_DIR / "shows.json"
REVIEWS_PATH = DATA_DIR / "reviews.json"
REVIEW_TEXTS_DIR = DATA_DIR / "review-texts"
OUTLET_REGISTRY_PATH = DATA_DIR / "outlet-registry.json"
AUDIT_DIR = DATA_DIR / "audit"
BACKUPS_DIR = DATA_DIR / "backups"
LOGS_DIR = DATA_DIR / "logs"
STATUS_PATH = DATA_DIR / "rebuild-status.json"
FAILED_FETCHES_NAME = "failed-fetches.json"

R2_ACCOUNT_ID = os.environ.get("R2_ACCOUNT_ID")
R2_ACCESS_KEY_ID = os.environ.get("R2_ACCESS_KEY_ID")
R2_SECRET_ACCESS_KEY = os.environ.get("R2_SECRET_ACCESS_KEY")
R2_BUCKET_NAME = os.environ.get("R2_BUCKET_NAME", "broadway-scorecard-data")

FETCH_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Connection": "keep-alive",
}
FETCH_TIMEOUT = int(os.environ.get("FETCH_TIMEOUT", "30"))
FETCH_DELAY = float(os.environ.get("FETCH_DELAY", "1.5"))
FETCH_MAX_RETRIES = 3

LOG_RETENTION_DAYS = 14
SCORE_TOLERANCE = 10
DEFAULT_SCORE = 50
MIN_COMPLETE_WORDS = 300
MIN_FULLTEXT_WORDS = 50
MIN_EXCERPT_CHARS = 30

CONTENT_TIERS = ["complete", "truncated", "excerpt", "stub", "invalid"]
THUMBS = ["Up", "Flat", "Meh", "Down"]
REQUIRED_REVIEW_FIELDS = ["showId", "outlet", "criticName"]
REQUIRED_SHOW_FIELDS = ["id", "title", "slug"]


def use_data_dir(data_dir):
    """Point every data path at another directory (used by --data-dir and tests)."""
    global DATA_DIR, SHOWS_PATH, REVIEWS_PATH, REVIEW_TEXTS_DIR, OUTLET_REGISTRY_PATH
    global AUDIT_DIR, BACKUPS_DIR, LOGS_DIR, STATUS_PATH

    DATA_DIR = Path(data_dir)
    SHOWS_PATH = DATA_DIR / "shows.json"
    REVIEWS_PATH = DATA_DIR / "reviews.json"
    REVIEW_TEXTS_DIR = DATA_DIR / "review-texts"
    OUTLET_REGISTRY_PATH = DATA_DIR / "outlet-registry.json"
    AUDIT_DIR = DATA_DIR / "audit"
    BACKUPS_DIR = DATA_DIR / "backups"
    LOGS_DIR = DATA_DIR / "logs"
    STATUS_PATH = DATA_DIR / "rebuild-status.json"
