# AuditLens — Robots.txt rules for the wildcard agent
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import logging
from typing import List, Optional
from urllib.parse import urljoin, urlsplit

from .session import TransportError


logger = logging.getLogger(__name__)


class RobotsRuleset:
	"""Allow/Disallow path rules recorded for ``User-agent: *`` only.

	Blocks for named agents are read but not evaluated; the auditor crawls
	under a single identity. An empty ruleset allows everything.
	"""

	def __init__(self, allow: Optional[List[str]] = None, disallow: Optional[List[str]] = None) -> None:
		self.allow: List[str] = list(allow or [])
		self.disallow: List[str] = list(disallow or [])

	@classmethod
	def parse(cls, text: str) -> "RobotsRuleset":
		rules = cls()
		current_agent = None
		for line in (text or "").splitlines():
			trimmed = line.split("#", 1)[0].strip()
			if not trimmed or ":" not in trimmed:
				continue
			directive, value = trimmed.split(":", 1)
			directive = directive.strip().lower()
			value = value.strip()
			if directive == "user-agent":
				current_agent = value
			elif current_agent == "*" and value:
				if directive == "disallow":
					rules.disallow.append(value)
				elif directive == "allow":
					rules.allow.append(value)
		return rules

	@staticmethod
	def _path_of(url: str) -> str:
		p = urlsplit(url)
		path = p.path or "/"
		if p.query:
			path += "?" + p.query
		return path

	@staticmethod
	def matches(path: str, rule: str) -> bool:
		if rule == "/":
			return True
		if rule.endswith("*"):
			return path.startswith(rule[:-1])
		return path.startswith(rule)

	def is_allowed(self, url: str) -> bool:
		try:
			path = self._path_of(url)
		except ValueError:
			return True
		for rule in self.allow:
			if self.matches(path, rule):
				return True
		return self.get_disallow_rule(url) is None

	def get_disallow_rule(self, url: str) -> Optional[str]:
		"""Longest disallow rule matching url, or None."""
		try:
			path = self._path_of(url)
		except ValueError:
			return None
		matched = None
		for rule in self.disallow:
			if self.matches(path, rule) and (matched is None or len(rule) > len(matched)):
				matched = rule
		return matched

	def __repr__(self) -> str:
		return f"RobotsRuleset(allow={self.allow!r}, disallow={self.disallow!r})"


def fetch_robots(transport, base_url: str) -> RobotsRuleset:
	"""Fetch /robots.txt once and parse it.

	Missing or unreachable robots.txt yields an empty (allow-all) ruleset.
	"""
	p = urlsplit(base_url)
	robots_url = urljoin(f"{p.scheme}://{p.netloc}", "/robots.txt")
	logger.info("Fetching robots.txt: %s", robots_url)
	try:
		r = transport.fetch(robots_url)
	except TransportError as e:
		logger.warning("robots.txt unreachable, allowing everything: %s", e)
		return RobotsRuleset()
	if not r.ok:
		logger.warning("robots.txt not available (HTTP %s), allowing everything", r.status)
		return RobotsRuleset()
	rules = RobotsRuleset.parse(r.body)
	logger.info("robots.txt parsed: %d allow, %d disallow rules", len(rules.allow), len(rules.disallow))
	return rules
