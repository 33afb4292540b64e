# AuditLens — Audit orchestration: robots, sitemap, crawl, rules, AI checks
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import logging
import time
from typing import Any, Dict, List, Optional

from ..config import Settings
from ..utils.urls import UrlCanonicalizer
from .crawl import CrawlOptions, Crawler, PageFetcher, ProgressCallback, fetch_sitemap_only_pages
from .intent import IntentClassifier, LinkIntentPipeline, OpenAIIntentClassifier, PageIntentPipeline
from .issues import Issue
from .models import PageRecord
from .robots import fetch_robots
from .rules import RuleEngine, summarize
from .session import HttpTransport
from .sitemap import SitemapReader


logger = logging.getLogger(__name__)


class AuditResult:
	def __init__(
		self,
		seed_url: str,
		pages: List[PageRecord],
		sitemap_urls: List[str],
		link_graph: Dict[str, List[str]],
		issues: List[Issue],
		spider_pages: int,
		sitemap_only_pages: int,
		duration_seconds: float,
	) -> None:
		self.seed_url = seed_url
		self.pages = pages
		self.sitemap_urls = sitemap_urls
		self.link_graph = link_graph
		self.issues = issues
		self.issue_summary = summarize(issues)
		self.crawl_stats = {
			"pages_crawled": len(pages),
			"spider_pages": spider_pages,
			"sitemap_only_pages": sitemap_only_pages,
			"sitemap_urls": len(sitemap_urls),
			"issues_found": len(issues),
			"duration_seconds": round(duration_seconds, 2),
		}

	def to_dict(self) -> Dict[str, Any]:
		return {
			"seed_url": self.seed_url,
			"crawl_stats": dict(self.crawl_stats),
			"pages": [p.to_dict() for p in self.pages],
			"sitemap_urls": list(self.sitemap_urls),
			"link_graph": self.link_graph,
			"issues": [i.to_dict() for i in self.issues],
			"issue_summary": dict(self.issue_summary),
		}


class Auditor:
	"""Runs one audit end to end. Every run builds its own crawler state."""

	def __init__(
		self,
		settings: Optional[Settings] = None,
		transport=None,
		classifier: Optional[IntentClassifier] = None,
		on_progress: Optional[ProgressCallback] = None,
	) -> None:
		self.settings = settings or Settings()
		self.transport = transport or HttpTransport(
			user_agent=self.settings.user_agent,
			timeout=self.settings.timeout,
			retries=self.settings.retries,
			backoff=self.settings.backoff,
		)
		self.classifier = classifier
		self.on_progress = on_progress or (lambda event: None)

	def _classifier(self) -> Optional[IntentClassifier]:
		if self.classifier is not None:
			return self.classifier
		if not self.settings.enable_ai:
			return None
		if not self.settings.openai_api_key:
			logger.warning("AI checks enabled but no OpenAI API key configured; skipping")
			return None
		return OpenAIIntentClassifier(api_key=self.settings.openai_api_key, model=self.settings.ai_model)

	def run(self, seed: str) -> AuditResult:
		start = time.monotonic()
		try:
			return self._run(seed, start)
		except Exception as e:
			logger.error("Audit failed: %s", e)
			self.on_progress({"type": "error", "message": f"Audit failed: {e}"})
			raise

	def _run(self, seed: str, start: float) -> AuditResult:
		cfg = self.settings
		canonicalizer = UrlCanonicalizer(seed)
		options = CrawlOptions(max_pages=cfg.page_budget, max_redirects=cfg.max_redirects, timeout=cfg.timeout)
		logger.info("Audit started for %s", seed)

		self.on_progress({"type": "robots", "message": "Fetching robots.txt..."})
		robots = fetch_robots(self.transport, seed)

		self.on_progress({"type": "sitemap", "message": "Fetching sitemap.xml..."})
		sitemap_urls = sorted(SitemapReader(self.transport, canonicalizer, max_depth=cfg.sitemap_max_depth).fetch(seed))

		self.on_progress({"type": "crawl_start", "message": "Starting crawl..."})
		crawler = Crawler(self.transport, canonicalizer, robots, options, on_progress=self.on_progress)
		crawl = crawler.crawl(seed)
		pages = crawl.page_list
		spider_pages = len(pages)

		sitemap_only: List[PageRecord] = []
		if cfg.fetch_sitemap_only:
			missing = [u for u in sitemap_urls if u not in crawl.pages]
			if missing:
				self.on_progress({"type": "sitemap_fetch", "message": "Fetching sitemap-only URLs..."})
				fetcher = PageFetcher(self.transport, canonicalizer, options)
				sitemap_only = fetch_sitemap_only_pages(fetcher, missing, robots, self.on_progress)
				pages = pages + sitemap_only

		self.on_progress({"type": "detect", "message": "Detecting issues..."})
		issues: List[Issue] = RuleEngine(pages, sitemap_urls, crawl.seed_url, robots).evaluate()

		classifier = self._classifier()
		if classifier is not None:
			issues.extend(LinkIntentPipeline(classifier, pages, cfg.link_batch_size, cfg.ai_workers).run())
			issues.extend(PageIntentPipeline(classifier, pages, cfg.page_batch_size, cfg.ai_workers).run())
		else:
			logger.info("AI checks disabled")

		result = AuditResult(
			seed_url=crawl.seed_url,
			pages=pages,
			sitemap_urls=sitemap_urls,
			link_graph=crawl.link_graph.to_dict(),
			issues=issues,
			spider_pages=spider_pages,
			sitemap_only_pages=len(sitemap_only),
			duration_seconds=time.monotonic() - start,
		)
		logger.info("Audit completed in %.2fs: %d pages, %d issues", result.crawl_stats["duration_seconds"], len(pages), len(issues))
		self.on_progress({"type": "complete", "message": "Audit complete!"})
		return result
