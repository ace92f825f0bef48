"""
Readable-content extraction from article HTML.

Extraction runs in three steps:
1. Best-effort parse: stylesheets are stripped and the markup is loaded into
   a BeautifulSoup document; parser diagnostics are logged, never raised.
2. Boilerplate removal: navigation, asides and ad/comment/share hooks are
   dropped (a hooked wrapper holding most of the paragraph text is kept),
   then Mozilla's readability algorithm (readability-lxml) isolates the
   main content.
3. Image resolution: Open Graph / Twitter meta tags first, then the first
   image inside the extracted content.

A page with no readable text yields ``None`` rather than an error.
"""

from __future__ import annotations

import logging
import re
import warnings
from urllib.parse import urljoin, urlparse

import httpx
from bs4 import BeautifulSoup, ParserRejectedMarkup
from bs4.element import Tag
from readability import Document
from readability.readability import Unparseable

from ..config import FetchConfig, load_config
from ..core.types import ExtractedArticle
from .fetcher import fetch_html

logger = logging.getLogger(__name__)

_STYLE_BLOCK_RE = re.compile(r"<style\b[\s\S]*?</style\s*>", re.IGNORECASE)
_STYLESHEET_LINK_RE = re.compile(
    r"<link\b[^>]*rel\s*=\s*[\"']?stylesheet[\"']?[^>]*>", re.IGNORECASE
)
_WHITESPACE_RE = re.compile(r"\s+")

_BOILERPLATE_TAGS = ["script", "style", "noscript", "template", "nav", "aside", "iframe", "svg"]
_PAGE_CHROME_TAGS = ["header", "footer"]
_BOILERPLATE_HOOK_RE = re.compile(
    r"(?:^|[\s_-])(?:ads?|advert\w*|banner|breadcrumbs?|comments?|cookie\w*|menu|navbar|"
    r"newsletter|promo\w*|related|share|sharing|sidebar|social|sponsor\w*|subscribe)(?:$|[\s_-])",
    re.IGNORECASE,
)
_PROTECTED_TAGS = {"html", "body", "article", "main"}

_META_IMAGE_SELECTORS = [
    ("meta", {"property": "og:image"}),
    ("meta", {"property": "og:image:url"}),
    ("meta", {"name": "twitter:image"}),
    ("meta", {"name": "twitter:image:src"}),
    ("link", {"rel": "image_src"}),
]
_META_DESCRIPTION_SELECTORS = [
    ("meta", {"property": "og:description"}),
    ("meta", {"name": "description"}),
    ("meta", {"name": "twitter:description"}),
]


async def extract_article(
    url: str,
    cfg: FetchConfig | None = None,
    client: httpx.AsyncClient | None = None,
) -> ExtractedArticle | None:
    """Fetch ``url`` and extract its readable content.

    Returns:
        ExtractedArticle, or None when the page has no readable text

    Raises:
        ExtractionError: If the page could not be fetched
    """
    html = await fetch_html(url, cfg or load_config(None).fetch, client=client)
    article = extract_from_html(html, url)
    if article is None:
        logger.info("No readable content at %s", url)
    return article


def extract_from_html(html: str, url: str) -> ExtractedArticle | None:
    """Extract title, excerpt, text and image from already-fetched markup.

    Args:
        html: Raw page markup
        url: Page URL, used as the base for relative image URLs

    Returns:
        ExtractedArticle, or None if no readable text remains
    """
    document = build_document(html)
    base_url = _base_url(document, url)

    cleaned = _remove_boilerplate(build_document(html))
    body = cleaned.body or cleaned
    if not body.get_text(strip=True):
        return None

    readable = Document(str(cleaned), url=url)
    try:
        content_html = readable.summary(html_partial=True)
        title = readable.short_title()
    except Unparseable as exc:
        logger.warning("Readability could not parse %s: %s", url, exc)
        return None

    content = build_document(content_html)
    text = normalize_whitespace(content.get_text(" "))
    if not text:
        return None

    image_url = extract_meta_image_url(document, base_url) or extract_content_image_url(
        content, base_url
    )
    return ExtractedArticle(
        title=_resolve_title(title, document),
        excerpt=_resolve_excerpt(document, content),
        text=text,
        image_url=image_url,
    )


def strip_styles(html: str) -> str:
    """Remove <style> blocks and stylesheet <link> tags from markup."""
    if not html:
        return html
    html = _STYLE_BLOCK_RE.sub("", html)
    return _STYLESHEET_LINK_RE.sub("", html)


def build_document(html: str) -> BeautifulSoup:
    """Parse markup into a document tree, treating parser diagnostics as telemetry.

    Styles are stripped first since text extraction never needs them.
    Warnings raised while parsing are logged at DEBUG; markup the parser
    rejects outright produces an empty document.
    """
    markup = strip_styles(html or "")
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            soup = BeautifulSoup(markup, "html.parser")
        except ParserRejectedMarkup as exc:
            logger.warning("Markup rejected by parser: %s", exc)
            soup = BeautifulSoup("", "html.parser")
    for diagnostic in caught:
        logger.debug("Suppressed markup diagnostic: %s", diagnostic.message)
    return soup


def normalize_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_url(raw: str | None, base_url: str) -> str | None:
    """Resolve ``raw`` against ``base_url``; unusable values become None."""
    if not raw:
        return None
    candidate = str(raw).strip()
    if not candidate:
        return None
    try:
        resolved = urljoin(base_url, candidate)
        parsed = urlparse(resolved)
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None
    return resolved


def pick_from_srcset(srcset: str | None) -> str | None:
    """Return the URL of the first candidate in a srcset attribute."""
    if not srcset:
        return None
    for part in srcset.split(","):
        part = part.strip()
        if part:
            return part.split()[0]
    return None


def extract_meta_image_url(document: BeautifulSoup, base_url: str) -> str | None:
    for name, attrs in _META_IMAGE_SELECTORS:
        el = document.find(name, attrs=attrs)
        if not isinstance(el, Tag):
            continue
        url = normalize_url(el.get("content") or el.get("href"), base_url)
        if url:
            return url
    return None


def extract_content_image_url(content: BeautifulSoup, base_url: str) -> str | None:
    img = content.find("img")
    if not isinstance(img, Tag):
        return None
    src = pick_from_srcset(_attr(img, "srcset")) or _attr(img, "src")
    return normalize_url(src, base_url)


def _remove_boilerplate(soup: BeautifulSoup) -> BeautifulSoup:
    targets: list[Tag] = list(soup.find_all(_BOILERPLATE_TAGS))
    for tag in soup.find_all(_PAGE_CHROME_TAGS):
        if tag.find_parent("article") is None:
            targets.append(tag)
    page_chars = _paragraph_chars(soup)
    for tag in soup.find_all(True):
        if tag.name in _PROTECTED_TAGS:
            continue
        hooks = " ".join(tag.get("class") or []) + " " + (_attr(tag, "id") or "")
        if not _BOILERPLATE_HOOK_RE.search(hooks):
            continue
        # Never drop a wrapper that holds the article itself.
        if tag.find(["article", "main"]) is not None:
            continue
        if page_chars and _paragraph_chars(tag) * 2 >= page_chars:
            continue
        targets.append(tag)
    for tag in targets:
        if not tag.decomposed:
            tag.decompose()
    return soup


def _paragraph_chars(tag: Tag) -> int:
    return sum(len(p.get_text(strip=True)) for p in tag.find_all("p"))


def _base_url(document: BeautifulSoup, url: str) -> str:
    base = document.find("base", href=True)
    if isinstance(base, Tag):
        resolved = normalize_url(_attr(base, "href"), url)
        if resolved:
            return resolved
    return url


def _resolve_title(readability_title: str | None, document: BeautifulSoup) -> str:
    title = normalize_whitespace(readability_title or "")
    if title:
        return title
    og_title = document.find("meta", attrs={"property": "og:title"})
    if isinstance(og_title, Tag) and _attr(og_title, "content"):
        return normalize_whitespace(_attr(og_title, "content") or "")
    for name in ("title", "h1"):
        el = document.find(name)
        if isinstance(el, Tag):
            text = normalize_whitespace(el.get_text(" "))
            if text:
                return text
    return ""


def _resolve_excerpt(document: BeautifulSoup, content: BeautifulSoup) -> str | None:
    for name, attrs in _META_DESCRIPTION_SELECTORS:
        el = document.find(name, attrs=attrs)
        if isinstance(el, Tag):
            description = normalize_whitespace(_attr(el, "content") or "")
            if description:
                return description
    for paragraph in content.find_all("p"):
        text = normalize_whitespace(paragraph.get_text(" "))
        if text:
            return text
    return None


def _attr(tag: Tag, name: str) -> str | None:
    value = tag.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return value
