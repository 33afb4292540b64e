# AuditLens — Sitemap discovery and parsing
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import logging
import xml.etree.ElementTree as ET
from typing import List, Set, Tuple
from urllib.parse import urljoin, urlsplit

from .session import TransportError


logger = logging.getLogger(__name__)

SITEMAP_INDEX = "sitemapindex"
URLSET = "urlset"


def _local(tag: str) -> str:
	return tag.rsplit("}", 1)[-1]


def parse_sitemap_xml(text: str) -> Tuple[str, List[str]]:
	"""Return (kind, locs) for a sitemap document.

	kind is "sitemapindex", "urlset" or "" for anything else. For an index the
	locs are child sitemap URLs, for a urlset the page URLs.
	"""
	root = ET.fromstring(text.strip())
	kind = _local(root.tag)
	if kind == SITEMAP_INDEX:
		parent = "sitemap"
	elif kind == URLSET:
		parent = "url"
	else:
		return "", []
	locs: List[str] = []
	for entry in root:
		if _local(entry.tag) != parent:
			continue
		for child in entry:
			if _local(child.tag) == "loc":
				u = (child.text or "").strip()
				if u:
					locs.append(u)
	return kind, locs


class SitemapReader:
	"""Flattens /sitemap.xml (and nested indexes) into canonical URLs.

	Recursion depth is capped; the cap bounds index cycles as well. Failures in
	any branch contribute nothing and never reach the caller.
	"""

	def __init__(self, transport, canonicalizer, max_depth: int = 5) -> None:
		self.transport = transport
		self.canonicalizer = canonicalizer
		self.max_depth = max_depth

	def fetch(self, base_url: str) -> Set[str]:
		p = urlsplit(base_url)
		sitemap_url = urljoin(f"{p.scheme}://{p.netloc}", "/sitemap.xml")
		logger.info("Fetching sitemap: %s", sitemap_url)
		urls: Set[str] = set()
		self._read(sitemap_url, 0, urls)
		logger.info("Sitemap parsing complete: %d URLs", len(urls))
		return urls

	def _read(self, sitemap_url: str, depth: int, urls: Set[str]) -> None:
		if depth > self.max_depth:
			logger.warning("Max sitemap depth exceeded at %s (depth %d)", sitemap_url, depth)
			return
		try:
			r = self.transport.fetch(sitemap_url)
			if not r.ok:
				logger.warning("Sitemap not accessible: %s (HTTP %s)", sitemap_url, r.status)
				return
			kind, locs = parse_sitemap_xml(r.body)
		except (TransportError, ET.ParseError, ValueError) as e:
			logger.warning("Error reading sitemap %s: %s", sitemap_url, e)
			return
		if kind == SITEMAP_INDEX:
			logger.info("Sitemap index %s lists %d child sitemaps", sitemap_url, len(locs))
			for child in locs:
				self._read(child, depth + 1, urls)
			return
		logger.debug("Sitemap %s lists %d URLs", sitemap_url, len(locs))
		for loc in locs:
			canonical = self.canonicalizer.canonicalize(loc)
			if canonical:
				urls.add(canonical)
