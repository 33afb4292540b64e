# AuditLens — Page records and parser output types
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ResourceType(str, Enum):
	PAGE = "PAGE"
	RESOURCE = "RESOURCE"


class FetchError(str, Enum):
	NETWORK_ERROR = "network_error"
	MAX_REDIRECTS_EXCEEDED = "max_redirects_exceeded"
	EXCEPTION_DURING_FETCH = "exception_during_fetch"
	UNKNOWN_FETCH_FAILURE = "unknown_fetch_failure"


class DiscoveryMethod(str, Enum):
	SPIDER = "spider"
	SITEMAP_ONLY = "sitemap_only"


@dataclass
class ParsedLink:
	original: str
	normalized: str
	is_internal: bool


@dataclass
class ContentLink:
	"""An in-content internal link, used only by the link intent stage."""

	source_url: str
	destination_url: str
	anchor_text: str
	context_type: str = "content"


@dataclass
class ParsedDocument:
	title: Optional[str] = None
	h1s: List[str] = field(default_factory=list)
	meta_robots: Optional[str] = None
	meta_description: Optional[str] = None
	links: List[ParsedLink] = field(default_factory=list)
	content_links: List[ContentLink] = field(default_factory=list)


@dataclass
class PageRecord:
	"""Result of the single fetch attempt made for one enqueued URL.

	Keyed by ``url`` exactly as it was enqueued. Everything except
	``incoming_internal_link_count`` is settled by the time the crawl moves
	on to the next URL.
	"""

	url: str
	final_url: Optional[str] = None
	resource_type: Optional[ResourceType] = None
	http_status: Optional[int] = None
	redirect_chain: List[str] = field(default_factory=list)
	fetch_error: Optional[FetchError] = None
	headers: Dict[str, str] = field(default_factory=dict)
	x_robots_tag: Optional[str] = None
	title: Optional[str] = None
	h1s: List[str] = field(default_factory=list)
	meta_description: Optional[str] = None
	meta_robots: Optional[str] = None
	internal_outgoing_links: List[str] = field(default_factory=list)
	external_outgoing_links: List[str] = field(default_factory=list)
	content_internal_links: List[ContentLink] = field(default_factory=list)
	incoming_internal_link_count: int = 0
	blocked_by_robots: bool = False
	blocked_by_robots_rule: Optional[str] = None
	discovery_method: DiscoveryMethod = DiscoveryMethod.SPIDER

	@property
	def is_page(self) -> bool:
		return self.resource_type is ResourceType.PAGE

	@property
	def is_resource(self) -> bool:
		return self.resource_type is ResourceType.RESOURCE

	def apply_document(self, doc: ParsedDocument) -> None:
		self.title = doc.title
		self.h1s = list(doc.h1s)
		self.meta_robots = doc.meta_robots
		self.meta_description = doc.meta_description
		self.content_internal_links = list(doc.content_links)

	def to_dict(self) -> Dict[str, Any]:
		data = asdict(self)
		data["resource_type"] = self.resource_type.value if self.resource_type else None
		data["fetch_error"] = self.fetch_error.value if self.fetch_error else None
		data["discovery_method"] = self.discovery_method.value
		return data
