# AuditLens — URL utilities: canonicalization and origin checks
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

from typing import Optional
from urllib.parse import urldefrag, urljoin, urlsplit, urlunsplit


DEFAULT_PORTS = {"http": 80, "https": 443}


def canonicalize_url(href: str, base_url: Optional[str] = None) -> Optional[str]:
	"""Resolve href against base_url and return its canonical absolute form.

	Lowercases scheme and host, drops the fragment and default ports, and strips
	trailing slashes except for the root path. Query strings are kept verbatim.
	Returns None for unparseable input or non-http(s) URLs.
	"""
	if href is None:
		return None
	href = href.strip()
	if not href and not base_url:
		return None
	try:
		absolute = urljoin(base_url, href) if base_url else href
		p = urlsplit(absolute)
		scheme = p.scheme.lower()
		if scheme not in DEFAULT_PORTS:
			return None
		host = p.hostname
		if not host:
			return None
		port = p.port
	except ValueError:
		return None
	if ":" in host:
		host = f"[{host}]"
	netloc = host
	if port is not None and port != DEFAULT_PORTS[scheme]:
		netloc = f"{host}:{port}"
	if p.username is not None:
		userinfo = p.username
		if p.password is not None:
			userinfo += f":{p.password}"
		netloc = f"{userinfo}@{netloc}"
	path = p.path.rstrip("/") or "/"
	return urlunsplit((scheme, netloc, path, p.query, ""))


def resolve_location(location: str, current_url: str) -> Optional[str]:
	"""Absolute form of a redirect Location, as the server sent it.

	Only the fragment is dropped; the path is left untouched so a redirect to
	`/about/` is followed to `/about/`. Returns None for non-http(s) targets.
	"""
	if not location or not location.strip():
		return None
	try:
		target = urldefrag(urljoin(current_url, location.strip()))[0]
		p = urlsplit(target)
		if p.scheme.lower() not in DEFAULT_PORTS or not p.hostname:
			return None
	except ValueError:
		return None
	return target


class UrlCanonicalizer:
	"""Canonicalizes hrefs and answers same-origin queries for one audited site.

	The origin host is captured once from the base URL; nothing else is mutable.
	"""

	def __init__(self, base_url: str) -> None:
		self.base_url = base_url
		self.origin_host = (urlsplit(base_url).hostname or "").lower()

	def canonicalize(self, href: str, base_url: Optional[str] = None) -> Optional[str]:
		return canonicalize_url(href, base_url or self.base_url)

	def is_same_origin(self, url: str) -> bool:
		# hostname comparison only; scheme and port may differ
		try:
			host = urlsplit(url).hostname
		except ValueError:
			return False
		return bool(host) and host.lower() == self.origin_host


__all__ = [
	"canonicalize_url",
	"resolve_location",
	"UrlCanonicalizer",
	"DEFAULT_PORTS",
]
