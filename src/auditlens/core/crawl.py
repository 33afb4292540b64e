# AuditLens — Core crawler (BFS, robots gating, redirects, classification)
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import logging
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Set

from ..utils.urls import resolve_location
from .extract import parse_document
from .graph import LinkGraph
from .models import DiscoveryMethod, FetchError, PageRecord, ParsedDocument, ResourceType
from .robots import RobotsRuleset
from .session import FetchResponse, TransportError


logger = logging.getLogger(__name__)

ProgressCallback = Callable[[dict], None]


class CrawlOptions:
	def __init__(
		self,
		max_pages: Optional[int] = 100,
		max_redirects: int = 5,
		timeout: float = 10.0,
	):
		# None means no page budget
		self.max_pages = None if max_pages is None else max(0, int(max_pages))
		self.max_redirects = max(0, int(max_redirects))
		self.timeout = float(timeout)

	@property
	def unlimited(self) -> bool:
		return self.max_pages is None


class CrawlResult:
	def __init__(self, seed_url: str, pages: Dict[str, PageRecord], link_graph: LinkGraph) -> None:
		self.seed_url = seed_url
		self.pages = pages
		self.link_graph = link_graph

	@property
	def page_list(self) -> List[PageRecord]:
		return list(self.pages.values())

	@property
	def html_page_count(self) -> int:
		return sum(1 for p in self.pages.values() if p.is_page)

	@property
	def resource_count(self) -> int:
		return sum(1 for p in self.pages.values() if p.is_resource)


def classify_content_type(content_type: str) -> ResourceType:
	if (content_type or "").strip().lower().startswith("text/html"):
		return ResourceType.PAGE
	return ResourceType.RESOURCE


class PageFetcher:
	"""Fetches one URL into a PageRecord: redirects, classification, parsing.

	Shared by the spider and the sitemap-only pass; it never touches a queue
	or a link graph.
	"""

	def __init__(self, transport, canonicalizer, options: CrawlOptions) -> None:
		self.transport = transport
		self.canonicalizer = canonicalizer
		self.options = options

	def fetch_with_redirects(self, url: str, record: PageRecord) -> Optional[FetchResponse]:
		"""Follow redirects in a bounded loop, recording each hop's source URL.

		Returns None when the redirect ceiling trips or the transport fails;
		record.fetch_error says which. Cycles are not detected here.
		"""
		current = url
		redirects = 0
		while True:
			try:
				response = self.transport.fetch(current, timeout=self.options.timeout, html_only=True)
			except TransportError as e:
				logger.warning("HTTP request failed for %s: %s", current, e)
				record.fetch_error = FetchError.NETWORK_ERROR
				return None
			if not response.is_redirect:
				return response
			location = response.headers.get("Location")
			if not location:
				logger.warning("Redirect without Location header: %s (HTTP %s)", current, response.status)
				return response
			target = resolve_location(location, current)
			if not target:
				logger.warning("Invalid redirect target from %s: %r", current, location)
				return response
			record.redirect_chain.append(current)
			redirects += 1
			if redirects > self.options.max_redirects:
				logger.warning("Max redirects exceeded for %s (%d hops)", url, redirects)
				record.fetch_error = FetchError.MAX_REDIRECTS_EXCEEDED
				return None
			logger.debug("Following redirect %s -> %s (HTTP %s)", current, target, response.status)
			current = target

	def fetch(self, url: str, record: PageRecord) -> Optional[ParsedDocument]:
		"""Fill record from one fetch attempt; return the parsed document for HTML pages."""
		try:
			response = self.fetch_with_redirects(url, record)
			if response is None:
				record.resource_type = ResourceType.PAGE
				if record.fetch_error is None:
					record.fetch_error = FetchError.UNKNOWN_FETCH_FAILURE
				return None
			record.http_status = response.status
			record.final_url = response.final_url
			for key, value in response.headers.items():
				record.headers[key.lower()] = value
			xrobots = response.headers.get("X-Robots-Tag")
			if xrobots is not None:
				record.x_robots_tag = xrobots.lower()
			content_type = response.headers.get("Content-Type", "")
			record.resource_type = classify_content_type(content_type)
			if not record.is_page:
				logger.debug("Classified as RESOURCE: %s (%s)", url, content_type)
				return None
			doc = parse_document(response.body, record.final_url, self.canonicalizer)
			record.apply_document(doc)
		except Exception as e:
			logger.warning("Exception while fetching %s: %s", url, e, exc_info=logger.isEnabledFor(logging.DEBUG))
			record.resource_type = ResourceType.PAGE
			record.fetch_error = FetchError.EXCEPTION_DURING_FETCH
			return None
		logger.info("Fetched %s [%s] title=%r h1s=%d links=%d", url, record.http_status, record.title, len(doc.h1s), len(doc.links))
		return doc


class Crawler:
	"""Sequential breadth-first crawler for one audit run.

	Owns its queue, visited set, page store and link graph; they are only
	mutated from the crawl loop.
	"""

	def __init__(
		self,
		transport,
		canonicalizer,
		robots: Optional[RobotsRuleset] = None,
		options: Optional[CrawlOptions] = None,
		on_progress: Optional[ProgressCallback] = None,
	) -> None:
		self.options = options or CrawlOptions()
		self.canonicalizer = canonicalizer
		self.robots = robots or RobotsRuleset()
		self.fetcher = PageFetcher(transport, canonicalizer, self.options)
		self.on_progress = on_progress or (lambda event: None)
		self.queue: Deque[str] = deque()
		self.queued: Set[str] = set()
		self.visited: Set[str] = set()
		self.pages: Dict[str, PageRecord] = {}
		self.link_graph = LinkGraph()

	def _budget_left(self, page_count: int) -> bool:
		return self.options.unlimited or page_count < self.options.max_pages

	def _enqueue(self, url: str) -> bool:
		if url in self.visited or url in self.queued:
			return False
		self.queue.append(url)
		self.queued.add(url)
		return True

	def crawl(self, seed: str) -> CrawlResult:
		seed_url = self.canonicalizer.canonicalize(seed) or seed
		logger.info("Starting crawl at %s (max pages: %s)", seed_url, "unlimited" if self.options.unlimited else self.options.max_pages)
		self._enqueue(seed_url)
		page_count = 0

		while self.queue and self._budget_left(page_count):
			url = self.queue.popleft()
			self.queued.discard(url)
			if url in self.visited:
				continue
			self.visited.add(url)
			logger.info("Crawling [%d pages] %s (queue: %d)", page_count, url, len(self.queue))
			self.on_progress({
				"type": "crawling",
				"url": url,
				"visited": len(self.visited),
				"queued": len(self.queue),
				"total": self.options.max_pages,
			})

			record = PageRecord(url=url, discovery_method=DiscoveryMethod.SPIDER)
			self.pages[url] = record

			if not self.robots.is_allowed(url):
				record.blocked_by_robots = True
				record.blocked_by_robots_rule = self.robots.get_disallow_rule(url)
				record.resource_type = ResourceType.PAGE
				logger.warning("Blocked by robots.txt: %s (rule %r)", url, record.blocked_by_robots_rule)
				page_count += 1
				continue

			doc = self.fetcher.fetch(url, record)
			if doc is not None:
				self._record_links(record, doc)
			if record.is_page:
				page_count += 1

		self.link_graph.apply_incoming_counts(self.pages.values(), seed_url)
		result = CrawlResult(seed_url, self.pages, self.link_graph)
		logger.info(
			"Crawl completed: %d URLs visited, %d pages, %d resources, %d still queued",
			len(self.visited),
			result.html_page_count,
			result.resource_count,
			len(self.queue),
		)
		return result

	def _record_links(self, record: PageRecord, doc: ParsedDocument) -> None:
		added = 0
		for link in doc.links:
			if not link.is_internal:
				record.external_outgoing_links.append(link.normalized)
				continue
			record.internal_outgoing_links.append(link.normalized)
			self.link_graph.record(record.url, link.normalized)
			if self._enqueue(link.normalized):
				added += 1
		logger.debug(
			"Links on %s: %d internal, %d external, %d newly queued",
			record.url,
			len(record.internal_outgoing_links),
			len(record.external_outgoing_links),
			added,
		)


def fetch_sitemap_only_pages(fetcher: PageFetcher, urls: List[str], robots: Optional[RobotsRuleset] = None, on_progress: Optional[ProgressCallback] = None) -> List[PageRecord]:
	"""Fetch sitemap URLs the spider never reached.

	Links found here are stored on the record but are neither queued nor
	graphed, so incoming counts are unaffected.
	"""
	robots = robots or RobotsRuleset()
	on_progress = on_progress or (lambda event: None)
	records: List[PageRecord] = []
	for i, url in enumerate(urls, start=1):
		on_progress({"type": "sitemap_fetch", "url": url, "fetched": i, "total": len(urls)})
		record = PageRecord(url=url, discovery_method=DiscoveryMethod.SITEMAP_ONLY)
		records.append(record)
		if not robots.is_allowed(url):
			record.blocked_by_robots = True
			record.blocked_by_robots_rule = robots.get_disallow_rule(url)
			record.resource_type = ResourceType.PAGE
			continue
		doc = fetcher.fetch(url, record)
		if doc is None:
			continue
		for link in doc.links:
			if link.is_internal:
				record.internal_outgoing_links.append(link.normalized)
			else:
				record.external_outgoing_links.append(link.normalized)
	logger.info("Sitemap-only pass fetched %d URLs", len(records))
	return records
