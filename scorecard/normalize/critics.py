from scorecard.normalize.outlets import normalize_outlet
from scorecard.utils.text import levenshtein_distance, slugify

# canonical slug -> lowercase variations, typos and initials.
# No bare first names: "Jesse" alone must not become jesse-green.
CRITIC_ALIASES = {
    "jesse-green": ["jesse green", "j green", "j. green"],
    "ben-brantley": ["ben brantley", "b brantley", "b. brantley"],
    "charles-isherwood": ["charles isherwood", "c isherwood", "c. isherwood"],
    "johnny-oleksinski": ["johnny oleksinski", "johnny oleksinki", "j oleksinski", "john oleksinski"],
    "sara-holdren": ["sara holdren", "s holdren", "s. holdren"],
    "helen-shaw": ["helen shaw", "h shaw"],
    "adam-feldman": ["adam feldman", "a feldman"],
    "david-rooney": ["david rooney", "d rooney"],
    "frank-scheck": ["frank scheck", "f scheck"],
    "greg-evans": ["greg evans", "g evans"],
    "dalton-ross": ["dalton ross", "d ross"],
    "aramide-tinubu": ["aramide tinubu", "aramide timubu", "a tinubu"],
    "juan-a-ramirez": ["juan a ramirez", "juan a. ramirez", "juan ramirez"],
    "zachary-stewart": ["zachary stewart", "zach stewart", "z stewart", "z. stewart"],
    "brittani-samuel": ["brittani samuel", "b samuel"],
    "chris-jones": ["chris jones", "christopher jones", "c jones"],
    "gillian-russo": ["gillian russo", "g russo"],
    "jd-knapp": ["jd knapp", "j.d. knapp", "j d knapp"],
    "vinson-cunningham": ["vinson cunningham", "v cunningham"],
    "naveen-kumar": ["naveen kumar", "n kumar"],
    "jonathan-mandell": ["jonathan mandell", "j mandell", "jon mandell"],
    "brian-scott-lipton": ["brian scott lipton", "brian lipton", "b lipton"],
    "melissa-rose-bernardo": ["melissa rose bernardo", "melissa bernardo", "m bernardo"],
    "david-finkle": ["david finkle", "d finkle"],
    "david-cote": ["david cote", "d cote"],
    "tim-teeman": ["tim teeman", "t teeman"],
    "kristen-baldwin": ["kristen baldwin", "k baldwin"],
    "adrian-horton": ["adrian horton", "a horton"],
    "lane-williamson": ["lane williamson", "l williamson"],
    "linda-winer": ["linda winer", "l winer"],
    "michael-kuchwara": ["michael kuchwara", "m kuchwara"],
    "rex-reed": ["rex reed", "r reed"],
    "elysa-gardner": ["elysa gardner", "e gardner"],
    "peter-marks": ["peter marks", "p marks"],
    "matt-windman": ["matt windman", "m windman", "matthew windman"],
    "robert-hofler": ["robert hofler", "r hofler", "bob hofler"],
    "steven-suskin": ["steven suskin", "s suskin", "steve suskin"],
}

_ALIAS_INDEX = {}
for _canonical, _aliases in CRITIC_ALIASES.items():
    for _alias in _aliases:
        _ALIAS_INDEX.setdefault(_alias, _canonical)


def normalize_critic(name):
    """
    Normalize a critic name to its canonical slug.
    Aliases match exactly or with periods dropped ("s. holdren" -> "s holdren").
    Anything else is slugified; names under 2 characters are "unknown".
    """
    if not name or not name.strip():
        return "unknown"

    lower = " ".join(name.lower().split())
    if lower in _ALIAS_INDEX:
        return _ALIAS_INDEX[lower]

    without_periods = " ".join(lower.replace(".", " ").split())
    if without_periods in _ALIAS_INDEX:
        return _ALIAS_INDEX[without_periods]

    if len(lower) < 2:
        return "unknown"

    return slugify(name)


def are_critics_similar(critic1, critic2):
    """
    True when two critic names are the same person: equal, same canonical
    slug, or a typo (edit distance <= 2 for names longer than 5 characters).
    A first name alone never matches a full name.
    """
    if not critic1 or not critic2:
        return False

    c1 = critic1.lower().strip()
    c2 = critic2.lower().strip()
    if not c1 or not c2:
        return False
    if c1 == c2:
        return True

    n1 = normalize_critic(critic1)
    n2 = normalize_critic(critic2)
    if n1 == n2:
        return True

    if len(c1) > 5 and len(c2) > 5:
        if levenshtein_distance(c1, c2) <= 2:
            return True

    return False


def generate_review_key(outlet, critic):
    """Key identifying one review across sources: "outlet|critic"."""
    return f"{normalize_outlet(outlet)}|{normalize_critic(critic)}"


def generate_review_filename(outlet, critic):
    return f"{normalize_outlet(outlet)}--{normalize_critic(critic)}.json"


def parse_review_filename(filename):
    """Split "outlet--critic.json" into (outlet, critic), or None."""
    if not filename.endswith(".json") or "--" not in filename:
        return None
    stem = filename[: -len(".json")]
    outlet, _, critic = stem.partition("--")
    if not outlet or not critic:
        return None
    return outlet, critic


def are_reviews_duplicates(review1, review2):
    key1 = generate_review_key(review1.get("outlet"), review1.get("criticName"))
    key2 = generate_review_key(review2.get("outlet"), review2.get("criticName"))
    return key1 == key2
