"""
Text cleaning for review data.

Used when writing review files, before quality classification of fetched
text, and when building reviews.json.
"""

import html
import re

# Entities that should come out as plain ASCII rather than typographic characters
ASCII_ENTITIES = {
    "&rsquo;": "'",
    "&lsquo;": "'",
    "&rdquo;": '"',
    "&ldquo;": '"',
    "&hellip;": "...",
    "&apos;": "'",
    "&nbsp;": " ",
}

_I_S = re.IGNORECASE | re.DOTALL

TRAILING_JUNK_PATTERNS = [
    # TheaterMania newsletter promos
    re.compile(r"\s*Get the latest news, discounts and updates on theater and shows by signing up for TheaterMania.*$", _I_S),
    re.compile(r"\s*TheaterMania's newsletter today!.*$", _I_S),
    # BroadwayNews login prompts
    re.compile(r"\s*Already have an account\?\s*(Sign in|Log in).*$", _I_S),
    # amNY
    re.compile(r"\s*Read more:\s*[^\n]+$", re.IGNORECASE),
    # Vulture / NY Mag account signup
    re.compile(r"\s*This email will be used to sign into all New York sites.*$", _I_S),
    re.compile(r"\s*By submitting your email, you agree to our Terms and Privacy Policy.*$", _I_S),
    re.compile(r"\s*Password must be at least 8 characters.*$", _I_S),
    re.compile(r"\s*You're in!\s*As part of your account.*$", _I_S),
    re.compile(r"\s*which you can opt out of anytime\.\s*$", re.IGNORECASE),
    re.compile(r"\s*occasional updates and offers from New York.*$", _I_S),
    # Generic newsletter promos
    re.compile(r"\s*Sign up for our newsletter.*$", _I_S),
    re.compile(r"\s*Subscribe to our newsletter.*$", _I_S),
    # Site footers
    re.compile(r"\s*About Us\s*\|\s*Editorial Guidelines\s*\|\s*Contact Us.*$", _I_S),
    re.compile(r"\s*Share full article\d*Related Content.*$", _I_S),
    re.compile(r"\s*Copyright\s*©?\s*\d{4}.*$", _I_S),
    re.compile(r"\s*All rights reserved\.?\s*$", re.IGNORECASE),
    re.compile(r"\s*Excerpts and links to the content may be used.*$", _I_S),
    # NYT critic bios
    re.compile(r"\s*is the chief theater critic for The Times\..*$", _I_S),
    re.compile(r"\s*is a theater critic for The Times\..*$", _I_S),
    # EW image markup and related blocks
    re.compile(r"\s*<img\b[^>]*>.*$", _I_S),
    re.compile(r"\s*srcset\s*=\s*\"[^\"]*\".*$", _I_S),
    re.compile(r"\s*Related\s+(Articles?|Content)\s*[\n\r].*$", _I_S),
    # BWW paywall
    re.compile(r"\s*Get Access To Every Broadway Story.*$", _I_S),
    re.compile(r"\s*Unlock access to every one of our articles.*$", _I_S),
    # Variety interstitials
    re.compile(r"\s*Related Stories\s*[\n\r].*$", _I_S),
    re.compile(r"\s*Popular on Variety\s*[\n\r].*$", _I_S),
    re.compile(r"\s*More From Our Brands\s*[\n\r].*$", _I_S),
    # BroadwayNews navigation rendered into the page body
    re.compile(r"\s*Broadway News\s*Menu\s*Close.*$", _I_S),
    re.compile(r"\s*Broadway Briefing.*$", _I_S),
    # The Times (UK) paywall prefix
    re.compile(r"^We haven't been able to take payment.*?(?=\b[A-Z][a-z])", re.DOTALL),
]

CROSS_REFERENCE_PATTERNS = [
    re.compile(r"\[Read\s+[^\]]*?★[^\]]*?review[^\]]*?\]", re.IGNORECASE),
    re.compile(r"Read\s+\w[^.]*?★+☆*[^.]*?review here\.?", re.IGNORECASE),
]

CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def decode_html_entities(text):
    """Decode numeric (&#8220;, &#x201C;) and named (&amp;, &rsquo;) entities."""
    if not text:
        return text
    for entity, replacement in ASCII_ENTITIES.items():
        text = text.replace(entity, replacement)
    text = html.unescape(text)
    return text.replace("\xa0", " ")


def strip_trailing_junk(text):
    """
    Strip newsletter promos, login prompts and site footers from review text.
    Runs until no pattern matches.
    """
    if not text:
        return text
    cleaned = text
    changed = True
    while changed:
        changed = False
        for pattern in TRAILING_JUNK_PATTERNS:
            before = cleaned
            cleaned = pattern.sub("", cleaned, count=1).strip()
            if cleaned != before:
                changed = True
    return cleaned


def strip_cross_references(text):
    """Remove "[Read X's ★★★★☆ review here.]" lines pointing at other critics."""
    if not text:
        return text
    for pattern in CROSS_REFERENCE_PATTERNS:
        text = pattern.sub("", text)
    return text


def clean_text(text):
    """
    Apply every cleaning step in order: entities, control characters,
    cross references, whitespace runs, trailing junk.
    """
    if not text:
        return text

    cleaned = decode_html_entities(text)
    cleaned = CONTROL_CHARS.sub("", cleaned)
    cleaned = strip_cross_references(cleaned)
    cleaned = re.sub(r"[^\S\n\r]+", " ", cleaned)
    cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)
    cleaned = strip_trailing_junk(cleaned)

    return cleaned.strip()
