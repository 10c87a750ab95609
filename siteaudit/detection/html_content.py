"""
Parsed view of one page's HTML.

The page is parsed once with BeautifulSoup and every extractor reads from the
resulting ``PageContent``; nothing here keeps state between pages.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

import structlog
import tldextract
from bs4 import BeautifulSoup

logger = structlog.get_logger(__name__)

JSONLD_TYPE_RE = re.compile(r"application/ld\+json", re.I)
INLINE_TYPE_RE = re.compile(r"[\"']@type[\"']\s*:\s*[\"']([A-Za-z]+)[\"']")
ITEMTYPE_RE = re.compile(r"schema\.org/([A-Za-z]+)", re.I)
_WHITESPACE_RE = re.compile(r"\s+")
_NON_TEXT_TAGS = ("script", "style", "noscript", "template")


@dataclass(frozen=True)
class PageContent:
    """Read-only facts pulled out of a page."""

    domain: str
    text: str
    display_text: str
    title: str = ""
    headings: Tuple[str, ...] = ()
    links: Tuple[str, ...] = ()
    nav_text: str = ""
    structured_types: Tuple[str, ...] = ()
    json_ld: Tuple[Any, ...] = ()
    meta: Dict[str, str] = field(default_factory=dict)
    soup: Any = field(default=None, repr=False, compare=False)


def normalize_domain(domain: str) -> str:
    """Strip scheme, path and a leading www. from a domain or URL."""
    value = (domain or "").strip().lower()
    value = re.sub(r"^[a-z]+://", "", value)
    value = value.split("/", 1)[0].split("?", 1)[0].split(":", 1)[0]
    if value.startswith("www."):
        value = value[4:]
    return value


def collapse_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub(" ", value or "").strip()


def iter_json_ld_nodes(payload: Any):
    """Yield every dict node in a JSON-LD payload, following @graph and nesting."""
    if isinstance(payload, list):
        for item in payload:
            yield from iter_json_ld_nodes(item)
    elif isinstance(payload, dict):
        yield payload
        for key, value in payload.items():
            if key == "@context":
                continue
            if isinstance(value, (dict, list)):
                yield from iter_json_ld_nodes(value)


def node_types(node: Dict[str, Any]) -> List[str]:
    raw = node.get("@type") or node.get("type")
    if isinstance(raw, str):
        return [raw]
    if isinstance(raw, list):
        return [t for t in raw if isinstance(t, str)]
    return []


def _extract_json_ld(soup: BeautifulSoup) -> List[Any]:
    blocks = []
    for index, script in enumerate(soup.find_all("script", attrs={"type": JSONLD_TYPE_RE}), start=1):
        raw = (script.string or script.get_text() or "").strip()
        if not raw:
            continue
        try:
            blocks.append(json.loads(raw))
        except json.JSONDecodeError as e:
            logger.debug("Skipping malformed structured data block", block=index, error=str(e))
    return blocks


def _structured_types(html: str, soup: BeautifulSoup, blocks: List[Any]) -> Tuple[str, ...]:
    found: List[str] = []
    for block in blocks:
        for node in iter_json_ld_nodes(block):
            found.extend(node_types(node))
    # Inline "@type" attributes and hits inside blocks that failed to parse
    found.extend(INLINE_TYPE_RE.findall(html))
    for tag in soup.find_all(attrs={"itemtype": True}):
        itemtype = tag.get("itemtype")
        if isinstance(itemtype, list):
            itemtype = " ".join(itemtype)
        found.extend(ITEMTYPE_RE.findall(itemtype or ""))

    ordered = []
    for item in found:
        name = item.split("/")[-1].strip()
        if name and name not in ordered:
            ordered.append(name)
    return tuple(ordered)


def _same_domain_links(soup: BeautifulSoup, domain: str) -> Tuple[str, ...]:
    links = []
    for anchor in soup.find_all("a", href=True):
        href = str(anchor["href"]).strip().lower()
        if (domain and domain in href) or href.startswith("/"):
            links.append(href)
    return tuple(links)


def _navigation_text(soup: BeautifulSoup) -> str:
    parts = [nav.get_text(" ", strip=True) for nav in soup.find_all("nav")]
    parts.extend(menu.get_text(" ", strip=True) for menu in soup.select('ul[class*="menu"]'))
    return collapse_whitespace(" ".join(parts)).lower()


def _meta_tags(soup: BeautifulSoup) -> Dict[str, str]:
    meta: Dict[str, str] = {}
    for tag in soup.find_all("meta"):
        key = tag.get("property") or tag.get("name")
        content = tag.get("content")
        if key and content and key.lower() not in meta:
            meta[key.lower()] = collapse_whitespace(content)
    return meta


def parse_page(html: str, domain: str) -> PageContent:
    """Parse raw HTML (or plain text) into a ``PageContent``."""
    html = html or ""
    domain = normalize_domain(domain)
    soup = BeautifulSoup(html, "html.parser")

    blocks = _extract_json_ld(soup)
    structured_types = _structured_types(html, soup, blocks)
    meta = _meta_tags(soup)
    title = collapse_whitespace(soup.title.get_text(" ", strip=True)) if soup.title else ""

    for tag in soup(list(_NON_TEXT_TAGS)):
        tag.decompose()

    display_text = collapse_whitespace(soup.get_text(" ", strip=True))
    headings = tuple(
        collapse_whitespace(h.get_text(" ", strip=True)) for h in soup.find_all("h1")
    )

    return PageContent(
        domain=domain,
        text=display_text.lower(),
        display_text=display_text,
        title=title,
        headings=tuple(h for h in headings if h),
        links=_same_domain_links(soup, domain),
        nav_text=_navigation_text(soup),
        structured_types=structured_types,
        json_ld=tuple(blocks),
        meta=meta,
        soup=soup,
    )


# Offline extractor: the bundled public suffix snapshot, no network fetch
_tld_extract = tldextract.TLDExtract(suffix_list_urls=())


def domain_label(domain: str) -> str:
    """The registrable label of a domain, e.g. ``smith-law`` for www.smith-law.co.uk."""
    host = normalize_domain(domain)
    if not host:
        return ""
    ext = _tld_extract(host)
    return (ext.domain or host.split(".")[0]).lower()


def domain_suffix(domain: str) -> str:
    host = normalize_domain(domain)
    return _tld_extract(host).suffix.lower() if host else ""


def registered_domain(value: str) -> str:
    host = normalize_domain(value)
    if not host:
        return ""
    ext = _tld_extract(host)
    if ext.domain and ext.suffix:
        return f"{ext.domain}.{ext.suffix}".lower()
    return host
