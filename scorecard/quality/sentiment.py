POSITIVE_INDICATORS = [
    "brilliant", "magnificent", "stunning", "exceptional", "extraordinary",
    "masterpiece", "triumph", "joyous", "wonderful", "superb", "phenomenal",
    "breathtaking", "dazzling", "sensational", "riveting", "thrilling",
    "must-see", "unmissable", "outstanding", "excellent", "remarkable",
]

NEGATIVE_INDICATORS = [
    "disappointing", "fails", "failure", "weak", "boring", "tedious",
    "dull", "lifeless", "lackluster", "uninspired", "forgettable",
    "misguided", "misfire", "dismal", "poor", "terrible", "awful",
    "painful", "excruciating", "waste", "regrettable",
]


def infer_sentiment(text):
    """Keyword sentiment of an excerpt: positive, negative, mixed or neutral."""
    if not text:
        return "neutral"

    lower = text.lower()
    positive = sum(1 for word in POSITIVE_INDICATORS if word in lower)
    negative = sum(1 for word in NEGATIVE_INDICATORS if word in lower)

    if positive and not negative:
        return "positive"
    if negative and not positive:
        return "negative"
    if positive and negative:
        return "mixed"
    return "neutral"


def sentiments_conflict(s1, s2):
    """Only a clear positive against a clear negative counts as a conflict."""
    if s1 in ("neutral", "mixed") or s2 in ("neutral", "mixed"):
        return False
    return s1 != s2
