EXCERPT_FIELDS = ["dtliExcerpt", "bwwExcerpt", "showScoreExcerpt", "nycTheatreExcerpt"]
THUMB_FIELDS = ["dtliThumb", "bwwThumb"]


def merge_reviews(existing, incoming):
    """
    Merge two records of the same review, keeping the best data from each.
    - Longer fullText wins
    - url is replaced only when missing or broken ("undefined" in it)
    - Excerpts, thumbs, originalScore, publishDate, designation are filled in, never overwritten
    - Sources are unioned; source is the first of them
    Returns a new dict.
    """
    merged = dict(existing)

    incoming_text = incoming.get("fullText")
    if incoming_text:
        existing_text = existing.get("fullText")
        if not existing_text or len(incoming_text) > len(existing_text):
            merged["fullText"] = incoming_text

    url = incoming.get("url")
    if url and (not existing.get("url") or "undefined" in existing["url"]):
        merged["url"] = url

    for field in EXCERPT_FIELDS + THUMB_FIELDS:
        if incoming.get(field) and not existing.get(field):
            merged[field] = incoming[field]

    if incoming.get("originalScore") and not existing.get("originalScore"):
        merged["originalScore"] = incoming["originalScore"]
        merged["originalRating"] = incoming.get("originalRating")

    for field in ("publishDate", "designation"):
        if incoming.get(field) and not existing.get(field):
            merged[field] = incoming[field]

    sources = []
    for value in [existing.get("source"), incoming.get("source")]:
        if value and value not in sources:
            sources.append(value)
    for value in (existing.get("sources") or []) + (incoming.get("sources") or []):
        if value and value not in sources:
            sources.append(value)
    merged["sources"] = sources
    merged["source"] = sources[0] if sources else None

    return merged
