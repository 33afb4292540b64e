# AuditLens — Issue kinds and their evidence models
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class IssueKind(str, Enum):
	BROKEN_PAGE = "BROKEN_PAGE"
	BROKEN_INTERNAL_LINK = "BROKEN_INTERNAL_LINK"
	REDIRECT_CHAIN = "REDIRECT_CHAIN"
	REDIRECT_LOOP = "REDIRECT_LOOP"
	BLOCKED_BY_ROBOTS = "BLOCKED_BY_ROBOTS"
	NOINDEX_PAGE = "NOINDEX_PAGE"
	SITEMAP_ORPHAN = "SITEMAP_ORPHAN"
	ZERO_INCOMING_LINKS = "ZERO_INCOMING_LINKS"
	ZERO_OUTGOING_LINKS = "ZERO_OUTGOING_LINKS"
	MISSING_TITLE = "MISSING_TITLE"
	DUPLICATE_TITLE = "DUPLICATE_TITLE"
	MISSING_H1 = "MISSING_H1"
	MULTIPLE_H1 = "MULTIPLE_H1"
	DUPLICATE_META_DESCRIPTION = "DUPLICATE_META_DESCRIPTION"
	LINK_INTENT_MISMATCH = "LINK_INTENT_MISMATCH"
	SOFT_404 = "SOFT_404"
	PAGE_INTENT_MISMATCH = "PAGE_INTENT_MISMATCH"


class _Frozen(BaseModel):
	model_config = ConfigDict(frozen=True)


class _UrlIssue(_Frozen):
	url: str
	explanation: str

	def to_dict(self) -> Dict[str, Any]:
		return self.model_dump(mode="json")


# evidence payloads

class HttpStatusEvidence(_Frozen):
	http_status: int


class BrokenInternalLinkEvidence(_Frozen):
	source_url: str
	target_url: str
	target_status: int


class RedirectChainEvidence(_Frozen):
	redirect_chain: List[Optional[str]]
	chain_length: int


class RedirectLoopEvidence(_Frozen):
	redirect_chain: List[Optional[str]]


class RobotsEvidence(_Frozen):
	blocked: bool = True
	rule: Optional[str] = None


class NoindexEvidence(_Frozen):
	meta_robots: Optional[str] = None
	x_robots_tag: Optional[str] = None


class SitemapOrphanEvidence(_Frozen):
	in_sitemap: bool = True
	crawled: bool = False


class IncomingLinksEvidence(_Frozen):
	incoming_internal_link_count: int = 0


class OutgoingLinksEvidence(_Frozen):
	internal_outgoing_links_count: int = 0


class TitleEvidence(_Frozen):
	title: Optional[str] = None


class DuplicateTitleEvidence(_Frozen):
	title: str
	duplicate_count: int
	all_urls: List[str]


class H1Evidence(_Frozen):
	h1_count: int
	h1s: List[str] = Field(default_factory=list)


class LinkIntentEvidence(_Frozen):
	anchor_text: str
	destination_url: str
	destination_title: Optional[str] = None
	destination_h1: Optional[str] = None
	confidence: float


class Soft404Evidence(_Frozen):
	title: Optional[str] = None
	h1: Optional[str] = None
	confidence: float


class PageIntentEvidence(_Frozen):
	title: Optional[str] = None
	h1: Optional[str] = None
	confidence: float


# issue variants

class BrokenPageIssue(_UrlIssue):
	issue_type: Literal[IssueKind.BROKEN_PAGE] = IssueKind.BROKEN_PAGE
	evidence: HttpStatusEvidence


class BrokenInternalLinkIssue(_UrlIssue):
	issue_type: Literal[IssueKind.BROKEN_INTERNAL_LINK] = IssueKind.BROKEN_INTERNAL_LINK
	evidence: BrokenInternalLinkEvidence


class RedirectChainIssue(_UrlIssue):
	issue_type: Literal[IssueKind.REDIRECT_CHAIN] = IssueKind.REDIRECT_CHAIN
	evidence: RedirectChainEvidence


class RedirectLoopIssue(_UrlIssue):
	issue_type: Literal[IssueKind.REDIRECT_LOOP] = IssueKind.REDIRECT_LOOP
	evidence: RedirectLoopEvidence


class BlockedByRobotsIssue(_UrlIssue):
	issue_type: Literal[IssueKind.BLOCKED_BY_ROBOTS] = IssueKind.BLOCKED_BY_ROBOTS
	evidence: RobotsEvidence


class NoindexPageIssue(_UrlIssue):
	issue_type: Literal[IssueKind.NOINDEX_PAGE] = IssueKind.NOINDEX_PAGE
	evidence: NoindexEvidence


class SitemapOrphanIssue(_UrlIssue):
	issue_type: Literal[IssueKind.SITEMAP_ORPHAN] = IssueKind.SITEMAP_ORPHAN
	evidence: SitemapOrphanEvidence


class ZeroIncomingLinksIssue(_UrlIssue):
	issue_type: Literal[IssueKind.ZERO_INCOMING_LINKS] = IssueKind.ZERO_INCOMING_LINKS
	evidence: IncomingLinksEvidence


class ZeroOutgoingLinksIssue(_UrlIssue):
	issue_type: Literal[IssueKind.ZERO_OUTGOING_LINKS] = IssueKind.ZERO_OUTGOING_LINKS
	evidence: OutgoingLinksEvidence


class MissingTitleIssue(_UrlIssue):
	issue_type: Literal[IssueKind.MISSING_TITLE] = IssueKind.MISSING_TITLE
	evidence: TitleEvidence


class DuplicateTitleIssue(_UrlIssue):
	issue_type: Literal[IssueKind.DUPLICATE_TITLE] = IssueKind.DUPLICATE_TITLE
	evidence: DuplicateTitleEvidence


class MissingH1Issue(_UrlIssue):
	issue_type: Literal[IssueKind.MISSING_H1] = IssueKind.MISSING_H1
	evidence: H1Evidence


class MultipleH1Issue(_UrlIssue):
	issue_type: Literal[IssueKind.MULTIPLE_H1] = IssueKind.MULTIPLE_H1
	evidence: H1Evidence


class DuplicateMetaDescriptionIssue(_Frozen):
	"""One issue per group of pages sharing a meta description."""

	issue_type: Literal[IssueKind.DUPLICATE_META_DESCRIPTION] = IssueKind.DUPLICATE_META_DESCRIPTION
	meta_description: str
	affected_urls: List[str]
	explanation: str = "Multiple pages declare the same meta description."

	def to_dict(self) -> Dict[str, Any]:
		return self.model_dump(mode="json")


class LinkIntentMismatchIssue(_UrlIssue):
	issue_type: Literal[IssueKind.LINK_INTENT_MISMATCH] = IssueKind.LINK_INTENT_MISMATCH
	evidence: LinkIntentEvidence


class Soft404Issue(_UrlIssue):
	issue_type: Literal[IssueKind.SOFT_404] = IssueKind.SOFT_404
	evidence: Soft404Evidence


class PageIntentMismatchIssue(_UrlIssue):
	issue_type: Literal[IssueKind.PAGE_INTENT_MISMATCH] = IssueKind.PAGE_INTENT_MISMATCH
	evidence: PageIntentEvidence


Issue = Annotated[
	Union[
		BrokenPageIssue,
		BrokenInternalLinkIssue,
		RedirectChainIssue,
		RedirectLoopIssue,
		BlockedByRobotsIssue,
		NoindexPageIssue,
		SitemapOrphanIssue,
		ZeroIncomingLinksIssue,
		ZeroOutgoingLinksIssue,
		MissingTitleIssue,
		DuplicateTitleIssue,
		MissingH1Issue,
		MultipleH1Issue,
		DuplicateMetaDescriptionIssue,
		LinkIntentMismatchIssue,
		Soft404Issue,
		PageIntentMismatchIssue,
	],
	Field(discriminator="issue_type"),
]


def issue_urls(issue) -> List[str]:
	"""URLs an issue points at: its url, or every affected URL of a group issue."""
	if isinstance(issue, DuplicateMetaDescriptionIssue):
		return list(issue.affected_urls)
	return [issue.url]
