import re
from datetime import datetime

DATE_FORMATS = [
    "%Y-%m-%d",
    "%B %d, %Y",
    "%b %d, %Y",
    "%b. %d, %Y",
    "%d %B %Y",
    "%m/%d/%Y",
]


def normalize_publish_date(value):
    """
    Normalize publish dates to YYYY-MM-DD.
    Handles: "2024-04-25", "2024-04-25T19:00:00Z", "April 25, 2024",
    "Apr. 25, 2024", "Sept. 5, 2024", "4/25/2024"
    """
    if not value or not isinstance(value, str):
        return None

    value = value.strip()

    match = re.match(r"^(\d{4}-\d{2}-\d{2})[T ]", value)
    if match:
        value = match.group(1)

    value = re.sub(r"\bSept\b", "Sep", value)
    value = re.sub(r"(\d)(st|nd|rd|th),", r"\1,", value)
    value = re.sub(r"\s+", " ", value)

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).strftime("%Y-%m-%d")
        except ValueError:
            continue
    return None
