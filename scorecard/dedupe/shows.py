"""
Duplicate detection for shows.json entries.

Discovery scripts see the same production under many titles ("SIX",
"SIX: The Musical", "Six on Broadway"); check_for_duplicate runs a fixed
sequence of checks from strict to fuzzy and reports the first that fires.
"""

import re

from scorecard.utils.text import similarity, slugify

# Title variants that refer to the same show, keyed by the base title
KNOWN_DUPLICATES = {
    "six": ["six", "six the musical", "six on broadway"],
    "cats": ["cats", "cats the musical"],
    "rent": ["rent", "rent the musical"],
    "hair": ["hair", "hair the musical"],
    "chess": ["chess", "chess the musical"],
    "nine": ["nine", "nine the musical"],
    "sweeney todd": ["sweeney todd", "sweeney todd the demon barber of fleet street"],
    "les miserables": ["les miserables", "les mis", "les miz"],
    "miss saigon": ["miss saigon", "miss saigon the musical"],
    "annie": ["annie", "annie the musical"],
    "grease": ["grease", "grease the musical"],
    "chicago": ["chicago", "chicago the musical"],
    "cabaret": ["cabaret", "cabaret the musical"],
    "oklahoma": ["oklahoma", "oklahoma!"],
    "carousel": ["carousel", "carousel the musical"],
    "company": ["company", "company the musical"],
    "pippin": ["pippin", "pippin the musical"],
    "evita": ["evita", "evita the musical"],
    "dreamgirls": ["dreamgirls", "dream girls"],
    "hamilton": ["hamilton", "hamilton an american musical"],
    "wicked": ["wicked", "wicked the musical"],
    "aladdin": ["aladdin", "disneys aladdin", "aladdin the musical"],
    "frozen": ["frozen", "disneys frozen", "frozen the musical"],
    "shrek": ["shrek", "shrek the musical"],
    "matilda": ["matilda", "matilda the musical"],
    "hadestown": ["hadestown", "hades town"],
    "waitress": ["waitress", "waitress the musical"],
    "beetlejuice": ["beetlejuice", "beetlejuice the musical"],
    "moulin rouge": ["moulin rouge", "moulin rouge the musical"],
    "tina": ["tina", "tina the tina turner musical"],
    "mj": ["mj", "mj the musical"],
    "back to the future": ["back to the future", "back to the future the musical"],
    "the outsiders": ["the outsiders", "outsiders", "the outsiders a new musical"],
    "water for elephants": ["water for elephants", "water for elephants the musical"],
    "the great gatsby": ["the great gatsby", "great gatsby", "gatsby"],
    "maybe happy ending": ["maybe happy ending", "maybe happy ending a new musical"],
    "death becomes her": ["death becomes her", "death becomes her the musical"],
    "the notebook": ["the notebook", "notebook", "the notebook a new musical"],
    "gypsy": ["gypsy", "gypsy a musical"],
    "once upon a mattress": ["once upon a mattress", "once upon a mattress the musical"],
    "oh mary": ["oh mary", "oh mary!"],
    "sunset boulevard": ["sunset boulevard", "sunset blvd"],
    "the hills of california": ["the hills of california", "hills of california"],
    "left on tenth": ["left on tenth", "left on 10th"],
    "all in": ["all in", "all in the fight for democracy"],
    "our town": ["our town", "thornton wilders our town"],
    "the heart of rock and roll": ["the heart of rock and roll", "heart of rock and roll"],
    "the wiz": ["the wiz", "wiz"],
    "suffs": ["suffs", "the suffs"],
    "stereophonic": ["stereophonic", "stereo phonic"],
    "the roommate": ["the roommate", "roommate"],
    "mcneal": ["mcneal", "mc neal"],
    "yellow face": ["yellow face", "yellowface"],
    "purpose": ["purpose", "the purpose"],
    "tammy faye": ["tammy faye", "eyes of tammy faye", "tammy faye the musical"],
    "swept away": ["swept away", "swept away the musical"],
    "eureka day": ["eureka day", "eureka"],
}

TITLE_PUNCTUATION = re.compile(r"[!?'\"’:\-–—,.]")


def normalize_title(title):
    """
    Reduce a title to its comparable core: no subtitle, "The Musical" style
    suffix, leading article, "Disney's" prefix or punctuation.
    """
    if not title:
        return ""
    text = title.lower()
    text = re.sub(r":\s*.+$", "", text)
    text = re.sub(r"\s*-\s*.+$", "", text)
    text = re.sub(r"\s*\(.+\)$", "", text)
    text = re.sub(r"\s+on\s+broadway$", "", text)
    text = re.sub(r"\s+the\s+musical$", "", text)
    text = re.sub(r"\s+a\s+new\s+musical$", "", text)
    text = re.sub(r"\s+a\s+musical$", "", text)
    text = re.sub(r"^(the|a|an)\s+", "", text)
    text = re.sub(r"^(disney['’]?s?|roald dahl['’]?s?)\s+", "", text)
    text = TITLE_PUNCTUATION.sub("", text)
    return " ".join(text.split())


def are_titles_similar(title1, title2):
    """Levenshtein similarity: 90% for titles under 6 characters, 85% otherwise."""
    max_len = max(len(title1), len(title2))
    if max_len == 0:
        return False
    threshold = 0.9 if max_len < 6 else 0.85
    return similarity(title1, title2) >= threshold


def _contains_words(haystack, needle):
    return re.search(rf"(?:^|\s){re.escape(needle)}(?:\s|$)", haystack) is not None


def _in_group(title, variants):
    for variant in variants:
        if title == variant or _contains_words(title, variant) or _contains_words(variant, title):
            return True
    return False


def check_known_duplicates(new_title, existing_title):
    """
    Check two normalized titles against KNOWN_DUPLICATES.
    Returns (is_duplicate, group).
    """
    if not new_title or not existing_title:
        return False, None
    for group, variants in KNOWN_DUPLICATES.items():
        if _in_group(new_title, variants) and _in_group(existing_title, variants):
            return True, group
    return False, None


def _id_base(show):
    show_id = show.get("id")
    if show_id:
        return re.sub(r"-\d{4}$", "", show_id)
    return show.get("slug")


def _venue(show):
    venue = show.get("venue")
    return venue.lower().strip() if venue else None


def check_for_duplicate(new_show, existing_shows):
    """
    Check a candidate show against the existing list.
    Returns (is_duplicate, reason, existing_show); the first check that fires wins.
    """
    new_title = new_show["title"]
    new_slug = slugify(new_title)
    new_lower = new_title.lower().strip()
    new_normalized = normalize_title(new_title)
    new_venue = _venue(new_show)

    for existing in existing_shows:
        existing_title = existing.get("title") or ""
        existing_slug = existing.get("slug") or slugify(existing_title)
        existing_normalized = normalize_title(existing_title)
        existing_venue = _venue(existing)

        if new_lower == existing_title.lower().strip():
            return True, f'Exact title match: "{existing_title}"', existing

        if new_slug == existing_slug:
            return True, f"Exact slug match: {existing_slug}", existing

        existing_base = _id_base(existing)
        if new_slug == existing_base:
            return True, f'ID base match: "{new_slug}" matches existing "{existing.get("id")}"', existing

        is_known, group = check_known_duplicates(new_normalized, existing_normalized)
        if is_known:
            return True, f'Known duplicate group "{group}": "{new_title}" matches "{existing_title}"', existing

        if new_normalized == existing_normalized and len(new_normalized) >= 3:
            return True, f'Normalized title match: "{new_normalized}" matches "{existing_title}"', existing

        if len(new_slug) > 4 and len(existing_slug) > 4:
            if existing_slug.startswith(new_slug) or new_slug.startswith(existing_slug):
                return True, f'Slug prefix match: "{new_slug}" vs "{existing_slug}"', existing

        if new_venue and new_venue == existing_venue:
            if (len(new_normalized) > 4 and len(existing_normalized) > 4
                    and new_normalized[:8] == existing_normalized[:8]):
                return True, f'Same venue "{new_venue}" + similar title start', existing

        if len(new_normalized) > 4 and len(existing_normalized) > 4:
            if new_normalized in existing_normalized or existing_normalized in new_normalized:
                return True, f'Title containment: "{new_normalized}" vs "{existing_normalized}"', existing

        if len(new_normalized) > 5 and len(existing_normalized) > 5:
            if are_titles_similar(new_normalized, existing_normalized):
                return True, f'Fuzzy match (Levenshtein): "{new_normalized}" ~ "{existing_normalized}"', existing

    return False, None, None


def filter_duplicates(candidates, existing_shows):
    """
    Split candidate shows into duplicates and genuinely new shows.
    Accepted candidates join the comparison set, so a batch can't add the same show twice.
    Returns (duplicates, new_shows); duplicates are {"show", "reason", "existingShow"}.
    """
    duplicates = []
    new_shows = []
    known = list(existing_shows)

    for show in candidates:
        is_duplicate, reason, existing = check_for_duplicate(show, known)
        if is_duplicate:
            duplicates.append({"show": show, "reason": reason, "existingShow": existing})
        else:
            new_shows.append(show)
            known.append(show)

    return duplicates, new_shows
