import random
import time

import requests
from bs4 import BeautifulSoup

from scorecard import config

MIN_PARAGRAPH_CHARS = 40
STRIP_TAGS = ["script", "style", "nav", "footer", "aside", "header", "form", "noscript", "iframe"]
CONTENT_SELECTORS = [
    "article",
    "[itemprop='articleBody']",
    "main",
    "div.entry-content",
    "div.article-body",
    "div.post-content",
]


def fetch_with_retry(url, max_retries=None):
    """
    GET a page, retrying 5xx responses, timeouts and connection errors with
    exponential backoff plus jitter. Returns the HTML, or None for any other
    non-200 response. Re-raises the last network error once retries run out.
    """
    max_retries = max_retries or config.FETCH_MAX_RETRIES
    for attempt in range(max_retries):
        try:
            r = requests.get(url, headers=config.FETCH_HEADERS, timeout=config.FETCH_TIMEOUT)
            if r.status_code == 200:
                return r.text
            elif r.status_code >= 500:
                if attempt < max_retries - 1:
                    wait = (2 ** attempt) * 2 + random.uniform(1, 3)
                    time.sleep(wait)
                    continue
            return None
        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
            if attempt < max_retries - 1:
                wait = (2 ** attempt) * 2 + random.uniform(1, 3)
                print(f"    Retry {attempt + 1}/{max_retries} after {type(e).__name__}...")
                time.sleep(wait)
            else:
                raise
    return None


def extract_article_text(html):
    """
    Pull the readable article body out of a review page: paragraphs of the
    <article> (or main content) element joined with blank lines.
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(STRIP_TAGS):
        tag.decompose()

    container = None
    for selector in CONTENT_SELECTORS:
        container = soup.select_one(selector)
        if container:
            break
    container = container or soup.body or soup

    paragraphs = []
    for p in container.find_all("p"):
        text = " ".join(p.get_text(" ", strip=True).split())
        if len(text) >= MIN_PARAGRAPH_CHARS:
            paragraphs.append(text)
    return "\n\n".join(paragraphs)


def fetch_review_text(review):
    """
    Fetch a review's URL and extract its text.
    Returns (text, html), or (None, None) when there is no URL or no page.
    """
    url = review.get("url")
    if not url or "undefined" in url:
        return None, None

    html = fetch_with_retry(url)
    if html is None:
        return None, None

    text = extract_article_text(html)
    return (text or None), html
