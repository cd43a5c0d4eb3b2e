import re
from decimal import Decimal, ROUND_HALF_UP


def slugify(text):
    """
    Create a slug: lowercase, hyphenated, no punctuation.
    "Talkin' Broadway" -> "talkin-broadway", "Town & Country" -> "town-and-country"
    """
    if not text:
        return ""
    text = text.lower().strip()
    text = re.sub(r"['‘’]", "", text)
    text = text.replace("&", "and")
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"\s+", "-", text)
    text = re.sub(r"-+", "-", text)
    return text.strip("-")


def levenshtein_distance(a, b):
    """Edit distance between two strings (single-row dynamic programming)."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            if ca == cb:
                current.append(previous[j - 1])
            else:
                current.append(1 + min(previous[j], current[j - 1], previous[j - 1]))
        previous = current
    return previous[-1]


def similarity(a, b):
    """1.0 for identical strings, scaled down by edit distance over the longer length."""
    longer = max(len(a), len(b))
    if longer == 0:
        return 1.0
    return (longer - levenshtein_distance(a, b)) / longer


def count_words(text):
    if not text:
        return 0
    return len(text.split())


def round_half_up(value):
    """Round .5 away from zero, so 2.5 stars of 5 is 50 and 3.5 of 4 is 88."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
