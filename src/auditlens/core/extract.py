# AuditLens — Extraction: title, headings, meta tags and links
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import re
from typing import List, Optional, Set, Tuple, Union
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Tag

from .models import ContentLink, ParsedDocument, ParsedLink


PARSER_CANDIDATES = ["lxml", "html.parser"]

SKIPPED_SCHEMES = ("javascript:", "mailto:", "tel:", "sms:")

# structural regions that never count as content
EXCLUDED_TAGS = {"header", "footer", "nav", "aside"}
EXCLUDED_ROLES = {"navigation", "banner", "contentinfo", "complementary"}
EXCLUDED_CLASSES = {"header", "footer", "site-header", "site-footer", "announcement-bar", "breadcrumb"}

SYSTEM_PATHS = (
	"/account",
	"/cart",
	"/checkout",
	"/login",
	"/register",
	"/auth",
	"/admin",
	"/search",
	"/wishlist",
)

CONTEXT_RULES: List[Tuple[str, Set[str], Set[str], Set[str]]] = [
	# (context, tags, classes, ids)
	("article", {"article"}, {"article", "post", "blog-post"}, set()),
	("product", set(), {"product", "product-card", "product-item"}, set()),
	("collection", set(), {"collection", "category"}, set()),
	("main", {"main"}, set(), {"main"}),
]


def parse_html(content: Union[bytes, str]) -> BeautifulSoup:
	"""Parse HTML using lxml if available, else builtin parser."""
	for parser in PARSER_CANDIDATES:
		try:
			return BeautifulSoup(content, parser)
		except Exception:
			continue
	return BeautifulSoup(content, "html.parser")


def _text(el: Tag) -> str:
	return " ".join(el.get_text(" ", strip=True).split())


def _classes(el: Tag) -> Set[str]:
	return set(el.get("class") or [])


def _self_and_parents(el: Tag):
	node = el
	while node is not None and getattr(node, "name", None) and node.name != "[document]":
		yield node
		node = node.parent


def in_excluded_region(el: Tag) -> bool:
	for node in _self_and_parents(el):
		if node.name in EXCLUDED_TAGS:
			return True
		if (node.get("role") or "").lower() in EXCLUDED_ROLES:
			return True
		if _classes(node) & EXCLUDED_CLASSES:
			return True
	return False


def context_type(el: Tag) -> str:
	"""Classify where a link sits: article, product, collection, main or content."""
	ancestors = list(_self_and_parents(el))
	for name, tags, classes, ids in CONTEXT_RULES:
		for node in ancestors:
			if node.name in tags or _classes(node) & classes or node.get("id") in ids:
				return name
			if name == "main" and (node.get("role") or "").lower() == "main":
				return name
	return "content"


def extract_title(soup: BeautifulSoup) -> Optional[str]:
	title_el = soup.find("title")
	title = title_el.get_text(strip=True) if title_el else ""
	return title.strip() or None


def extract_h1s(soup: BeautifulSoup) -> List[str]:
	return [t for t in (_text(h) for h in soup.find_all("h1")) if t]


def extract_meta(soup: BeautifulSoup, name: str) -> Optional[str]:
	el = soup.find("meta", attrs={"name": re.compile(rf"^{name}$", re.I)})
	if not el:
		return None
	return el.get("content") or None


def _usable_href(href: Optional[str]) -> bool:
	return bool(href) and not href.strip().lower().startswith(SKIPPED_SCHEMES)


def extract_links(soup: BeautifulSoup, base_url: str, canonicalizer) -> List[ParsedLink]:
	links: List[ParsedLink] = []
	for a in soup.find_all("a", href=True):
		href = a.get("href", "")
		if not _usable_href(href):
			continue
		normalized = canonicalizer.canonicalize(href, base_url)
		if not normalized:
			continue
		links.append(ParsedLink(original=href, normalized=normalized, is_internal=canonicalizer.is_same_origin(normalized)))
	return links


def extract_content_links(soup: BeautifulSoup, base_url: str, canonicalizer) -> List[ContentLink]:
	"""Internal links outside navigation chrome, deduplicated by (destination, anchor)."""
	content_links: List[ContentLink] = []
	seen: Set[Tuple[str, str]] = set()
	for a in soup.find_all("a", href=True):
		if in_excluded_region(a):
			continue
		href = a.get("href", "").strip()
		if not _usable_href(href) or href.startswith("#"):
			continue
		normalized = canonicalizer.canonicalize(href, base_url)
		if not normalized or not canonicalizer.is_same_origin(normalized):
			continue
		if urlsplit(normalized).path.lower().startswith(SYSTEM_PATHS):
			continue
		anchor = _text(a)
		if not anchor:
			continue
		key = (normalized, anchor)
		if key in seen:
			continue
		seen.add(key)
		content_links.append(ContentLink(
			source_url=base_url,
			destination_url=normalized,
			anchor_text=anchor,
			context_type=context_type(a),
		))
	return content_links


def parse_document(html: Union[bytes, str], base_url: str, canonicalizer) -> ParsedDocument:
	soup = parse_html(html)
	meta_robots = extract_meta(soup, "robots")
	return ParsedDocument(
		title=extract_title(soup),
		h1s=extract_h1s(soup),
		meta_robots=meta_robots.lower() if meta_robots else None,
		meta_description=extract_meta(soup, "description"),
		links=extract_links(soup, base_url, canonicalizer),
		content_links=extract_content_links(soup, base_url, canonicalizer),
	)
