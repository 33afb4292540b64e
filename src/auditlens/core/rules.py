# AuditLens — Deterministic rule checks over crawl results
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import logging
from collections import Counter
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from .issues import (
	BlockedByRobotsIssue,
	BrokenInternalLinkEvidence,
	BrokenInternalLinkIssue,
	BrokenPageIssue,
	DuplicateMetaDescriptionIssue,
	DuplicateTitleEvidence,
	DuplicateTitleIssue,
	H1Evidence,
	HttpStatusEvidence,
	IncomingLinksEvidence,
	Issue,
	MissingH1Issue,
	MissingTitleIssue,
	MultipleH1Issue,
	NoindexEvidence,
	NoindexPageIssue,
	OutgoingLinksEvidence,
	RedirectChainEvidence,
	RedirectChainIssue,
	RedirectLoopEvidence,
	RedirectLoopIssue,
	RobotsEvidence,
	SitemapOrphanEvidence,
	SitemapOrphanIssue,
	TitleEvidence,
	ZeroIncomingLinksIssue,
	ZeroOutgoingLinksIssue,
)
from .models import DiscoveryMethod, PageRecord
from .robots import RobotsRuleset


logger = logging.getLogger(__name__)


def _is_ok_page(page: PageRecord) -> bool:
	return page.is_page and page.http_status == 200


def _group_by(pages: Iterable[PageRecord], value: Callable[[PageRecord], Optional[str]]) -> Dict[str, List[str]]:
	groups: Dict[str, List[str]] = {}
	for page in pages:
		if not _is_ok_page(page):
			continue
		v = value(page)
		if v and v.strip():
			groups.setdefault(v, []).append(page.url)
	return groups


class RuleEngine:
	"""Runs every check in declaration order and concatenates their issues.

	Checks only read their inputs. An exception from a check is a bug and is
	left to abort the audit.
	"""

	def __init__(
		self,
		pages: Iterable[PageRecord],
		sitemap_urls: Iterable[str] = (),
		seed_url: str = "",
		robots: Optional[RobotsRuleset] = None,
	) -> None:
		self.pages: List[PageRecord] = list(pages)
		self.sitemap_urls: List[str] = sorted(set(sitemap_urls))
		self.seed_url = seed_url
		self.robots = robots or RobotsRuleset()

	def checks(self) -> List[Tuple[str, Callable[[], List[Issue]]]]:
		return [
			("Broken Pages", self.check_broken_pages),
			("Broken Internal Links", self.check_broken_internal_links),
			("Redirect Chains", self.check_redirect_chains),
			("Redirect Loops", self.check_redirect_loops),
			("Blocked by Robots", self.check_blocked_by_robots),
			("Noindex Pages", self.check_noindex_pages),
			("Sitemap Orphans", self.check_sitemap_orphans),
			("Zero Incoming Links", self.check_zero_incoming_links),
			("Zero Outgoing Links", self.check_zero_outgoing_links),
			("Missing Title", self.check_missing_title),
			("Duplicate Title", self.check_duplicate_title),
			("Missing H1", self.check_missing_h1),
			("Multiple H1", self.check_multiple_h1),
			("Duplicate Meta Description", self.check_duplicate_meta_description),
		]

	def evaluate(self) -> List[Issue]:
		issues: List[Issue] = []
		for name, check in self.checks():
			found = check()
			if found:
				logger.warning("%s: %d issue(s) found", name, len(found))
			else:
				logger.info("%s: no issues found", name)
			issues.extend(found)
		logger.info("Rule evaluation complete: %d issues", len(issues))
		return issues

	def check_broken_pages(self) -> List[Issue]:
		return [
			BrokenPageIssue(
				url=p.url,
				explanation=f"Page returns HTTP {p.http_status} status code",
				evidence=HttpStatusEvidence(http_status=p.http_status),
			)
			for p in self.pages
			if p.http_status is not None and p.http_status >= 400
		]

	def check_broken_internal_links(self) -> List[Issue]:
		status = {p.url: p.http_status for p in self.pages}
		issues: List[Issue] = []
		for page in self.pages:
			for link in page.internal_outgoing_links:
				target_status = status.get(link)
				if target_status is not None and target_status >= 400:
					issues.append(BrokenInternalLinkIssue(
						url=page.url,
						explanation=f"Page links to broken internal page: {link}",
						evidence=BrokenInternalLinkEvidence(source_url=page.url, target_url=link, target_status=target_status),
					))
		return issues

	def check_redirect_chains(self) -> List[Issue]:
		return [
			RedirectChainIssue(
				url=p.url,
				explanation=f"Page has redirect chain of length {len(p.redirect_chain)}",
				evidence=RedirectChainEvidence(
					redirect_chain=[*p.redirect_chain, p.final_url],
					chain_length=len(p.redirect_chain),
				),
			)
			for p in self.pages
			if len(p.redirect_chain) > 1
		]

	def check_redirect_loops(self) -> List[Issue]:
		issues: List[Issue] = []
		for page in self.pages:
			chain = page.redirect_chain
			if not chain:
				continue
			seen: Set[str] = set(chain)
			if len(seen) < len(chain) or (page.final_url and page.final_url in seen):
				issues.append(RedirectLoopIssue(
					url=page.url,
					explanation="Page has redirect loop",
					evidence=RedirectLoopEvidence(redirect_chain=[*chain, page.final_url]),
				))
		return issues

	def check_blocked_by_robots(self) -> List[Issue]:
		return [
			BlockedByRobotsIssue(
				url=p.url,
				explanation="Page is blocked by robots.txt",
				evidence=RobotsEvidence(blocked=True, rule=p.blocked_by_robots_rule or self.robots.get_disallow_rule(p.url)),
			)
			for p in self.pages
			if p.blocked_by_robots
		]

	def check_noindex_pages(self) -> List[Issue]:
		return [
			NoindexPageIssue(
				url=p.url,
				explanation="Page is marked as noindex",
				evidence=NoindexEvidence(meta_robots=p.meta_robots, x_robots_tag=p.x_robots_tag),
			)
			for p in self.pages
			if "noindex" in (p.meta_robots or "") or "noindex" in (p.x_robots_tag or "")
		]

	def check_sitemap_orphans(self) -> List[Issue]:
		# sitemap-only fetches must not hide orphans, so compare against spider keys
		crawled = {p.url for p in self.pages if p.discovery_method is DiscoveryMethod.SPIDER}
		return [
			SitemapOrphanIssue(
				url=u,
				explanation="Page is in sitemap but not reachable via internal links",
				evidence=SitemapOrphanEvidence(in_sitemap=True, crawled=False),
			)
			for u in self.sitemap_urls
			if u not in crawled
		]

	def check_zero_incoming_links(self) -> List[Issue]:
		return [
			ZeroIncomingLinksIssue(
				url=p.url,
				explanation="Page has zero incoming internal links",
				evidence=IncomingLinksEvidence(incoming_internal_link_count=0),
			)
			for p in self.pages
			if p.is_page
			and p.url != self.seed_url
			and not p.blocked_by_robots
			and p.incoming_internal_link_count == 0
		]

	def check_zero_outgoing_links(self) -> List[Issue]:
		return [
			ZeroOutgoingLinksIssue(
				url=p.url,
				explanation="Page has zero outgoing internal links (dead-end page)",
				evidence=OutgoingLinksEvidence(internal_outgoing_links_count=0),
			)
			for p in self.pages
			if _is_ok_page(p) and not p.internal_outgoing_links
		]

	def check_missing_title(self) -> List[Issue]:
		return [
			MissingTitleIssue(url=p.url, explanation="Page is missing <title> tag", evidence=TitleEvidence(title=p.title))
			for p in self.pages
			if _is_ok_page(p) and not (p.title or "").strip()
		]

	def check_duplicate_title(self) -> List[Issue]:
		issues: List[Issue] = []
		for title, urls in _group_by(self.pages, lambda p: p.title).items():
			if len(urls) < 2:
				continue
			evidence = DuplicateTitleEvidence(title=title, duplicate_count=len(urls), all_urls=urls)
			for url in urls:
				issues.append(DuplicateTitleIssue(url=url, explanation=f'Page has duplicate title: "{title}"', evidence=evidence))
		return issues

	def check_missing_h1(self) -> List[Issue]:
		return [
			MissingH1Issue(url=p.url, explanation="Page is missing <h1> tag", evidence=H1Evidence(h1_count=0))
			for p in self.pages
			if _is_ok_page(p) and not p.h1s
		]

	def check_multiple_h1(self) -> List[Issue]:
		return [
			MultipleH1Issue(
				url=p.url,
				explanation=f"Page has {len(p.h1s)} <h1> tags",
				evidence=H1Evidence(h1_count=len(p.h1s), h1s=list(p.h1s)),
			)
			for p in self.pages
			if len(p.h1s) > 1
		]

	def check_duplicate_meta_description(self) -> List[Issue]:
		return [
			DuplicateMetaDescriptionIssue(meta_description=desc, affected_urls=urls)
			for desc, urls in _group_by(self.pages, lambda p: p.meta_description).items()
			if len(urls) > 1
		]


def summarize(issues: Iterable[Issue]) -> Dict[str, int]:
	counts = Counter(i.issue_type.value for i in issues)
	return dict(counts.most_common())
