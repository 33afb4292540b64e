# AuditLens — Internal link graph and incoming-link accounting
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import logging
from collections import Counter
from typing import Dict, Iterable, Iterator, List, Tuple

from .models import PageRecord


logger = logging.getLogger(__name__)


class LinkGraph:
	"""Directed graph of canonical source URL -> distinct canonical targets.

	Repeated links from one page to the same target collapse into one edge, so
	incoming counts measure distinct linking pages.
	"""

	def __init__(self) -> None:
		# dict keeps insertion order for both sources and targets
		self._edges: Dict[str, Dict[str, None]] = {}

	def record(self, source: str, target: str) -> None:
		self._edges.setdefault(source, {})[target] = None

	def edges(self) -> Iterator[Tuple[str, str]]:
		for source, targets in self._edges.items():
			for target in targets:
				yield source, target

	def incoming_counts(self) -> Counter:
		counts: Counter = Counter()
		for _, target in self.edges():
			counts[target] += 1
		return counts

	def apply_incoming_counts(self, pages: Iterable[PageRecord], seed_url: str = "") -> None:
		"""Set incoming_internal_link_count on every record from the edge set."""
		counts = self.incoming_counts()
		page_total = 0
		unlinked = 0
		for page in pages:
			if page.is_page:
				page.incoming_internal_link_count = counts.get(page.url, 0)
				page_total += 1
				if page.incoming_internal_link_count == 0 and page.url != seed_url:
					unlinked += 1
			else:
				page.incoming_internal_link_count = 0
		logger.info("Incoming link counts built: %d pages, %d without incoming links", page_total, unlinked)

	def to_dict(self) -> Dict[str, List[str]]:
		return {source: list(targets) for source, targets in self._edges.items()}

	def __len__(self) -> int:
		return len(self._edges)

	def __contains__(self, source: str) -> bool:
		return source in self._edges
