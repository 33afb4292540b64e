# AuditLens — Optional AI intent checks (link intent, soft 404, page intent)
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import json
import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Sequence, TypeVar

from openai import OpenAI
from pydantic import BaseModel, Field, ValidationError, field_validator

from .issues import (
	LinkIntentEvidence,
	LinkIntentMismatchIssue,
	PageIntentEvidence,
	PageIntentMismatchIssue,
	Soft404Evidence,
	Soft404Issue,
)
from .models import PageRecord


logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

LINK_INTENT_SYSTEM_PROMPT = (
	"You are an SEO intent analysis engine. Decide whether the intent implied by an internal "
	"link's anchor text matches the destination page (title, H1, meta description). "
	"Flag only clear mismatches, e.g. 'Pricing' -> blog article. Vague anchors such as "
	"'Learn more' and related-content navigation are not mismatches. "
	'Return JSON only: {"results": [{"index": 0, "is_mismatch": false, "confidence": 0.0, "explanation": "..."}]}'
)

PAGE_INTENT_SYSTEM_PROMPT = (
	"You analyze pages for SOFT_404 (HTTP 200 but the content says not found, unavailable, "
	"no results) and PAGE_INTENT_MISMATCH (the URL path implies one purpose, the content serves "
	"another, e.g. /pricing -> blog post). Be conservative and flag only clear issues. "
	'Return JSON only: {"results": [{"index": 0, "is_soft_404": false, "is_intent_mismatch": false, '
	'"confidence": 0.0, "explanation": "..."}]}'
)

_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


class LinkIntent(BaseModel):
	source_url: str
	anchor_text: str
	context_type: str = "content"
	destination_url: str
	destination_title: Optional[str] = None
	destination_h1: Optional[str] = None
	destination_meta: Optional[str] = None

	@property
	def link_key(self) -> str:
		return f"{self.destination_url}|{self.anchor_text}"


class PageIntent(BaseModel):
	url: str
	title: str = ""
	h1: str = ""
	meta_description: str = ""
	http_status: Optional[int] = None


class _Verdict(BaseModel):
	index: int
	confidence: float = Field(default=0.5, ge=0.0, le=1.0)
	explanation: str = ""

	@field_validator("explanation", mode="before")
	@classmethod
	def none_to_empty(cls, value):
		return value or ""


class LinkIntentResult(_Verdict):
	is_mismatch: bool = False


class PageIntentResult(_Verdict):
	is_soft_404: bool = False
	is_intent_mismatch: bool = False


class IntentClassifier(Protocol):
	def classify_links(self, batch: Sequence[LinkIntent]) -> List[LinkIntentResult]:
		...

	def classify_pages(self, batch: Sequence[PageIntent]) -> List[PageIntentResult]:
		...


def parse_results(content: str, model, size: int) -> List:
	"""Validate a JSON reply ({"results": [...]} or a bare list) against model.

	Raises ValueError for anything malformed, including indexes outside the batch.
	"""
	match = _FENCE.search(content or "")
	text = match.group(1).strip() if match else (content or "").strip()
	try:
		payload = json.loads(text)
	except json.JSONDecodeError as e:
		raise ValueError(f"reply is not JSON: {e}") from e
	items = payload.get("results") if isinstance(payload, dict) else payload
	if not isinstance(items, list):
		raise ValueError("reply has no results list")
	results = []
	for i, item in enumerate(items):
		if isinstance(item, dict):
			item = {"index": i, **item}
		try:
			result = model.model_validate(item)
		except ValidationError as e:
			raise ValueError(f"invalid result {i}: {e}") from e
		if not 0 <= result.index < size:
			raise ValueError(f"result index {result.index} outside batch of {size}")
		results.append(result)
	return results


class OpenAIIntentClassifier:
	"""Intent classifier backed by the OpenAI chat completions API."""

	def __init__(self, api_key: str, model: str = "gpt-4o-mini", client: Optional[OpenAI] = None) -> None:
		if not api_key and client is None:
			raise RuntimeError("An OpenAI API key is required for AI checks.")
		self.model = model
		self.client = client or OpenAI(api_key=api_key)

	def _complete(self, system_prompt: str, payload: list) -> str:
		start = time.perf_counter()
		response = self.client.chat.completions.create(
			model=self.model,
			messages=[
				{"role": "system", "content": system_prompt},
				{"role": "user", "content": json.dumps(payload, ensure_ascii=False)},
			],
		)
		content = response.choices[0].message.content or ""
		logger.debug("Intent model answered %d items in %.2fs", len(payload), time.perf_counter() - start)
		return content

	def classify_links(self, batch: Sequence[LinkIntent]) -> List[LinkIntentResult]:
		payload = [
			{
				"index": i,
				"anchor_text": link.anchor_text,
				"destination_title": link.destination_title or "(no title)",
				"destination_h1": link.destination_h1 or "(no h1)",
				"destination_meta": link.destination_meta or "(no description)",
			}
			for i, link in enumerate(batch)
		]
		return parse_results(self._complete(LINK_INTENT_SYSTEM_PROMPT, payload), LinkIntentResult, len(batch))

	def classify_pages(self, batch: Sequence[PageIntent]) -> List[PageIntentResult]:
		payload = [{"index": i, **page.model_dump()} for i, page in enumerate(batch)]
		return parse_results(self._complete(PAGE_INTENT_SYSTEM_PROMPT, payload), PageIntentResult, len(batch))


def chunk(items: Sequence[T], size: int) -> List[Sequence[T]]:
	size = max(1, int(size))
	return [items[i : i + size] for i in range(0, len(items), size)]


def _classify_batch(classify: Callable[[Sequence[T]], List[R]], batch: Sequence[T], batch_id: int) -> List[R]:
	try:
		results = classify(batch)
		if not isinstance(results, list):
			raise ValueError(f"classifier returned {type(results).__name__}, expected list")
		if any(not 0 <= r.index < len(batch) for r in results):
			raise ValueError("classifier returned an index outside the batch")
	except Exception as e:
		# a failed batch contributes nothing; the other batches carry on
		logger.error("Intent batch %d (%d items) failed: %s", batch_id, len(batch), e)
		return []
	return results


def classify_in_batches(items: Sequence[T], classify: Callable[[Sequence[T]], List[R]], batch_size: int, workers: int) -> List[List[R]]:
	"""Classify items in fixed-size batches on a bounded thread pool.

	Each batch task returns its own list; lists come back in batch order.
	"""
	batches = chunk(items, batch_size)
	if not batches:
		return []
	with ThreadPoolExecutor(max_workers=max(1, min(workers, len(batches)))) as pool:
		futures = [pool.submit(_classify_batch, classify, batch, i + 1) for i, batch in enumerate(batches)]
		return [f.result() for f in futures]


class LinkIntentPipeline:
	"""Anchor text vs destination page checks over in-content internal links."""

	def __init__(self, classifier: IntentClassifier, pages: Iterable[PageRecord], batch_size: int = 5, workers: int = 5) -> None:
		self.classifier = classifier
		self.pages = list(pages)
		self.by_url: Dict[str, PageRecord] = {p.url: p for p in self.pages}
		self.batch_size = batch_size
		self.workers = workers

	def build_intents(self) -> List[LinkIntent]:
		intents: Dict[str, LinkIntent] = {}
		for page in self.pages:
			for link in page.content_internal_links:
				dest = self.by_url.get(link.destination_url)
				if dest is None or not (dest.title or dest.h1s):
					continue
				intent = LinkIntent(
					source_url=link.source_url,
					anchor_text=link.anchor_text,
					context_type=link.context_type,
					destination_url=link.destination_url,
					destination_title=dest.title,
					destination_h1=dest.h1s[0] if dest.h1s else None,
					destination_meta=dest.meta_description,
				)
				intents.setdefault(intent.link_key, intent)
		return list(intents.values())

	def run(self) -> List[LinkIntentMismatchIssue]:
		intents = self.build_intents()
		logger.info("Link intent: %d unique links to classify", len(intents))
		batches = chunk(intents, self.batch_size)
		per_batch = classify_in_batches(intents, self.classifier.classify_links, self.batch_size, self.workers)
		issues: List[LinkIntentMismatchIssue] = []
		for batch, results in zip(batches, per_batch):
			for result in results:
				if not result.is_mismatch:
					continue
				intent = batch[result.index]
				issues.append(LinkIntentMismatchIssue(
					url=intent.source_url,
					explanation=result.explanation or "AI detected intent mismatch between anchor text and destination page",
					evidence=LinkIntentEvidence(
						anchor_text=intent.anchor_text,
						destination_url=intent.destination_url,
						destination_title=intent.destination_title,
						destination_h1=intent.destination_h1,
						confidence=result.confidence,
					),
				))
		logger.info("Link intent: %d mismatches", len(issues))
		return issues


class PageIntentPipeline:
	"""Soft 404 and URL-vs-content intent checks over healthy HTML pages."""

	def __init__(self, classifier: IntentClassifier, pages: Iterable[PageRecord], batch_size: int = 30, workers: int = 5) -> None:
		self.classifier = classifier
		self.pages = list(pages)
		self.batch_size = batch_size
		self.workers = workers

	def build_page_intents(self) -> List[PageIntent]:
		intents: List[PageIntent] = []
		for page in self.pages:
			if not page.is_page or page.http_status is None or page.http_status >= 400:
				continue
			if page.redirect_chain or not (page.title or page.h1s):
				continue
			intents.append(PageIntent(
				url=page.url,
				title=page.title or "",
				h1=page.h1s[0] if page.h1s else "",
				meta_description=page.meta_description or "",
				http_status=page.http_status,
			))
		return intents

	def run(self) -> List:
		intents = self.build_page_intents()
		logger.info("Page intent: %d pages to classify", len(intents))
		batches = chunk(intents, self.batch_size)
		per_batch = classify_in_batches(intents, self.classifier.classify_pages, self.batch_size, self.workers)
		issues: List = []
		for batch, results in zip(batches, per_batch):
			for result in results:
				page = batch[result.index]
				if result.is_soft_404:
					issues.append(Soft404Issue(
						url=page.url,
						explanation=result.explanation or "Page returns HTTP 200 but content indicates it does not exist",
						evidence=Soft404Evidence(title=page.title, h1=page.h1, confidence=result.confidence),
					))
				if result.is_intent_mismatch:
					issues.append(PageIntentMismatchIssue(
						url=page.url,
						explanation=result.explanation or "URL structure does not match page content",
						evidence=PageIntentEvidence(title=page.title, h1=page.h1, confidence=result.confidence),
					))
		logger.info("Page intent: %d issues", len(issues))
		return issues
