"""
Outlet canonicalization.

Every source spells outlets differently ("The New York Times", "NY Times",
"nyt"). All of them map to one canonical id through OUTLET_ALIASES, and the
outlet registry (outlet-registry.json) adds display names, tiers and any
aliases added after the fact.
"""

import json
import re

from scorecard import config
from scorecard.utils.text import slugify

# canonical id -> lowercase aliases. Order matters: when an alias appears
# under two ids ("new york magazine", "ny mag") the first id wins.
OUTLET_ALIASES = {
    "nytimes": [
        "nytimes", "new york times", "the new york times", "ny times", "nyt",
        "newyorktimes", "new-york-times", "the-new-york-times",
    ],
    "vulture": [
        "vulture", "new york magazine / vulture", "new york magazine/vulture",
        "ny mag", "nymag", "new york magazine", "vult",
    ],
    "variety": ["variety", "variety magazine"],
    "hollywood-reporter": ["hollywood reporter", "the hollywood reporter", "thr", "hollywoodreporter"],
    "deadline": ["deadline", "deadline hollywood", "deadline.com"],
    "timeout": [
        "timeout", "time out", "time out new york", "timeout new york",
        "time out ny", "timeout ny", "timeout-ny", "time-out-new-york",
    ],
    "guardian": ["guardian", "the guardian", "theguardian"],
    "washpost": ["washpost", "washington post", "the washington post", "wapo", "wash post", "washingtonpost"],
    "wsj": ["wsj", "wall street journal", "the wall street journal", "wallstreetjournal", "wall-street-journal"],
    "nypost": ["nypost", "new york post", "ny post", "nyp", "newyorkpost", "new-york-post"],
    "nydailynews": [
        "nydailynews", "new york daily news", "daily news", "ny daily news",
        "nydn", "newyorkdailynews", "new-york-daily-news",
    ],
    "ew": ["ew", "entertainment weekly", "entertainmentweekly", "entertainment-weekly"],
    "theatermania": ["theatermania", "theater mania", "theatremania", "theatre mania", "tmania"],
    "broadwaynews": ["broadwaynews", "broadway news", "broadway-news", "bwaynews"],
    "broadwayworld": ["broadwayworld", "broadway world", "bww", "broadway-world"],
    "playbill": ["playbill", "play bill"],
    "thewrap": ["thewrap", "the wrap", "wrap", "the-wrap"],
    "indiewire": ["indiewire", "indie wire", "indie-wire"],
    "observer": ["observer", "the observer", "ny observer", "new york observer"],
    "newyorker": ["newyorker", "the new yorker", "new yorker", "the-new-yorker", "new-yorker"],
    "ap": ["ap", "associated press", "the associated press", "ap news"],
    "reuters": ["reuters"],
    "theatrely": ["theatrely", "theater ly", "thly"],
    "nysr": ["nysr", "new york stage review", "ny stage review", "newyorkstagereview", "new-york-stage-review"],
    "nytg": [
        "nytg", "new york theatre guide", "ny theatre guide", "nytheatreguide",
        "new-york-theatre-guide", "new york theater guide",
    ],
    "nyt-theater": ["nyt-theater", "new york theater", "newyorktheater", "ny theater", "new-york-theater"],
    "cititour": ["cititour", "citi tour", "city tour"],
    "stageandcinema": ["stageandcinema", "stage and cinema", "stage & cinema", "stage-and-cinema"],
    "talkinbroadway": ["talkinbroadway", "talkin broadway", "talkin' broadway", "talkin-broadway"],
    "frontmezzjunkies": ["frontmezzjunkies", "front mezz junkies", "front-mezz-junkies", "fmj"],
    "dailybeast": ["dailybeast", "the daily beast", "daily beast", "tdb", "the-daily-beast"],
    "usatoday": ["usatoday", "usa today", "usa-today"],
    "forward": ["forward", "the forward", "jewish forward"],
    "rollingstone": ["rollingstone", "rolling stone", "rolling-stone"],
    "chicagotribune": ["chicagotribune", "chicago tribune", "chicago-tribune", "chi tribune"],
    "latimes": ["latimes", "los angeles times", "la times", "los-angeles-times"],
    "sfchronicle": ["sfchronicle", "san francisco chronicle", "sf chronicle"],
    "thestage": ["thestage", "the stage", "stage", "the-stage"],
    "whatsonstage": ["whatsonstage", "what's on stage", "whats on stage", "whatson"],
    "telegraph": ["telegraph", "the telegraph", "daily telegraph"],
    "financialtimes": ["financialtimes", "financial times", "ft", "the financial times"],
    "billboard": ["billboard", "bill board"],
    "amny": ["amny", "amnewyork", "am new york", "am-new-york", "amnewsyork"],
    "culturesauce": ["culturesauce", "culture sauce", "culture-sauce"],
    "oneminutecritic": ["oneminutecritic", "one minute critic", "one-minute-critic", "1 minute critic"],
    "artsfuse": ["artsfuse", "the arts fuse", "arts fuse", "the-arts-fuse"],
    "jitney": ["jitney", "the jitney", "the-jitney"],
    "slantmagazine": ["slantmagazine", "slant magazine", "slant", "slant-magazine"],
    "buzzfeed": ["buzzfeed", "buzz feed", "buzz-feed"],
    "vox": ["vox", "vox media"],
    "huffpost": ["huffpost", "huffington post", "the huffington post", "huff post"],
    "nbcnews": ["nbcnews", "nbc news", "nbc", "nbc-news"],
    "cbsnews": ["cbsnews", "cbs news", "cbs", "cbs-news"],
    "newsweek": ["newsweek", "news week"],
    "time": ["time", "time magazine"],
    "towncountry": ["towncountry", "town & country", "town and country", "town-and-country"],
    "newyorkmagazine": ["newyorkmagazine", "new york magazine", "ny magazine", "ny mag"],
}

OUTLET_DISPLAY_NAMES = {
    "nytimes": "The New York Times",
    "vulture": "Vulture",
    "variety": "Variety",
    "hollywood-reporter": "The Hollywood Reporter",
    "deadline": "Deadline",
    "timeout": "Time Out New York",
    "guardian": "The Guardian",
    "washpost": "The Washington Post",
    "wsj": "The Wall Street Journal",
    "nypost": "New York Post",
    "nydailynews": "New York Daily News",
    "ew": "Entertainment Weekly",
    "theatermania": "TheaterMania",
    "broadwaynews": "Broadway News",
    "broadwayworld": "BroadwayWorld",
    "playbill": "Playbill",
    "thewrap": "The Wrap",
    "indiewire": "IndieWire",
    "observer": "Observer",
    "newyorker": "The New Yorker",
    "ap": "Associated Press",
    "theatrely": "Theatrely",
    "nysr": "New York Stage Review",
    "nytg": "New York Theatre Guide",
    "nyt-theater": "New York Theater",
    "cititour": "Cititour",
    "stageandcinema": "Stage and Cinema",
    "talkinbroadway": "Talkin' Broadway",
    "frontmezzjunkies": "Front Mezz Junkies",
    "dailybeast": "The Daily Beast",
    "usatoday": "USA Today",
    "forward": "The Forward",
    "rollingstone": "Rolling Stone",
    "thestage": "The Stage",
    "chicagotribune": "Chicago Tribune",
    "latimes": "Los Angeles Times",
    "amny": "amNewYork",
    "culturesauce": "Culture Sauce",
    "slantmagazine": "Slant Magazine",
    "towncountry": "Town & Country",
}

OUTLET_TIERS = {
    "nytimes": 1,
    "vulture": 1,
    "variety": 1,
    "hollywood-reporter": 1,
    "newyorker": 1,
    "wsj": 1,
    "washpost": 1,
    "ew": 1,
    "ap": 1,
    "nypost": 2,
    "theatermania": 2,
    "broadwayworld": 2,
    "deadline": 2,
    "timeout": 2,
    "guardian": 2,
    "nydailynews": 2,
    "chicagotribune": 2,
    "usatoday": 2,
    "thewrap": 2,
    "dailybeast": 2,
    "observer": 2,
    "indiewire": 2,
    "slantmagazine": 2,
    "broadwaynews": 2,
    "nysr": 2,
    "latimes": 2,
    "nytg": 3,
    "nyt-theater": 3,
    "theatrely": 3,
    "cititour": 3,
}
DEFAULT_TIER = 3

OUTLET_DOMAINS = {
    "nytimes": "nytimes.com",
    "vulture": "vulture.com",
    "variety": "variety.com",
    "hollywood-reporter": "hollywoodreporter.com",
    "deadline": "deadline.com",
    "timeout": "timeout.com",
    "guardian": "theguardian.com",
    "washpost": "washingtonpost.com",
    "wsj": "wsj.com",
    "nypost": "nypost.com",
    "nydailynews": "nydailynews.com",
    "ew": "ew.com",
    "theatermania": "theatermania.com",
    "broadwaynews": "broadwaynews.com",
    "broadwayworld": "broadwayworld.com",
    "playbill": "playbill.com",
    "thewrap": "thewrap.com",
    "indiewire": "indiewire.com",
    "observer": "observer.com",
    "newyorker": "newyorker.com",
    "ap": "apnews.com",
    "theatrely": "theatrely.com",
    "nysr": "nystagereview.com",
    "nytg": "newyorktheatreguide.com",
    "nyt-theater": "newyorktheater.me",
    "cititour": "cititour.com",
    "dailybeast": "thedailybeast.com",
    "usatoday": "usatoday.com",
    "amny": "amny.com",
    "culturesauce": "culturesauce.com",
}


def _build_alias_index():
    index = {}
    for canonical, aliases in OUTLET_ALIASES.items():
        for alias in aliases:
            index.setdefault(alias, canonical)
    return index


_ALIAS_INDEX = _build_alias_index()
_registry_cache = {}


def _strip_the(name):
    return re.sub(r"^the\s+", "", name)


def normalize_outlet(name, registry=None):
    """
    Normalize an outlet name to its canonical id.
    Unknown outlets come back slugified; empty input is "unknown".
    """
    if not name or not name.strip():
        return "unknown"

    lower = name.lower().strip()
    for candidate in (lower, _strip_the(lower)):
        if candidate in _ALIAS_INDEX:
            return _ALIAS_INDEX[candidate]

    if registry:
        alias_index = registry.get("_aliasIndex", {})
        for candidate in (lower, _strip_the(lower)):
            if candidate in alias_index:
                return alias_index[candidate]

    return slugify(name)


def are_outlets_same(outlet1, outlet2):
    if not outlet1 or not outlet2:
        return False
    return normalize_outlet(outlet1) == normalize_outlet(outlet2)


def get_outlet_display_name(outlet_id):
    return OUTLET_DISPLAY_NAMES.get(outlet_id, outlet_id)


def build_registry():
    """Build the registry structure (outlets + _aliasIndex) from the built-in tables."""
    outlets = {}
    for outlet_id, aliases in OUTLET_ALIASES.items():
        entry = {
            "displayName": get_outlet_display_name(outlet_id),
            "tier": OUTLET_TIERS.get(outlet_id, DEFAULT_TIER),
            "aliases": list(aliases),
        }
        if outlet_id in OUTLET_DOMAINS:
            entry["domain"] = OUTLET_DOMAINS[outlet_id]
        outlets[outlet_id] = entry
    return {"outlets": outlets, "_aliasIndex": dict(_ALIAS_INDEX)}


def load_outlet_registry(path=None):
    """
    Load outlet-registry.json. Falls back to the built-in registry when the
    file is missing or unreadable. Results are cached per path.
    """
    path = path or config.OUTLET_REGISTRY_PATH
    key = str(path)
    if key in _registry_cache:
        return _registry_cache[key]

    registry = None
    try:
        if path.exists():
            with open(path, "r") as f:
                registry = json.load(f)
    except Exception as e:
        print(f"  Warning: Could not load outlet registry {path}: {e}")

    if not registry or "outlets" not in registry:
        registry = build_registry()
    registry.setdefault("_aliasIndex", {})
    for outlet_id, entry in registry["outlets"].items():
        for alias in entry.get("aliases", []):
            registry["_aliasIndex"].setdefault(alias.lower(), outlet_id)

    _registry_cache[key] = registry
    return registry


def clear_registry_cache():
    _registry_cache.clear()


def get_outlet_from_registry(name, registry=None):
    """Return the registry entry for an outlet name (normalized first), or None."""
    registry = registry or load_outlet_registry()
    outlet_id = normalize_outlet(name, registry)
    return registry["outlets"].get(outlet_id)


def get_outlet_tier(name, registry=None):
    registry = registry or load_outlet_registry()
    outlet_id = normalize_outlet(name, registry)
    entry = registry["outlets"].get(outlet_id)
    if entry and entry.get("tier"):
        return entry["tier"]
    return OUTLET_TIERS.get(outlet_id, DEFAULT_TIER)
