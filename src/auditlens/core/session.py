# AuditLens — HTTP transport used by the crawler, robots and sitemap readers
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import logging
from typing import Mapping, Optional

import requests
from requests.structures import CaseInsensitiveDict

from ..utils.net import build_session


logger = logging.getLogger(__name__)


class TransportError(Exception):
	"""Network-level failure (connection refused, DNS, timeout, TLS...)."""

	def __init__(self, url: str, message: str) -> None:
		super().__init__(f"{url}: {message}")
		self.url = url


class FetchResponse:
	"""Status, headers, requested URL and decoded body of one HTTP exchange."""

	def __init__(self, status: int, headers: Optional[Mapping[str, str]], final_url: str, body: str = "") -> None:
		self.status = int(status)
		self.headers = CaseInsensitiveDict(headers or {})
		self.final_url = final_url
		self.body = body

	@property
	def ok(self) -> bool:
		return 200 <= self.status < 300

	@property
	def is_redirect(self) -> bool:
		return 300 <= self.status < 400

	def __repr__(self) -> str:
		return f"FetchResponse(status={self.status}, final_url={self.final_url!r})"


class HttpTransport:
	"""Single-request transport over a requests Session.

	Never follows redirects itself and always applies a timeout.
	"""

	def __init__(self, user_agent: str, timeout: float = 10.0, retries: int = 0, backoff: float = 0.5, session: Optional[requests.Session] = None) -> None:
		self.timeout = float(timeout)
		self.session = session or build_session(user_agent=user_agent, retries=retries, backoff=backoff)

	def fetch(
		self,
		url: str,
		method: str = "GET",
		headers: Optional[Mapping[str, str]] = None,
		timeout: Optional[float] = None,
		html_only: bool = False,
	) -> FetchResponse:
		"""One request, no redirects followed.

		With html_only the body is read and decoded only for text/html
		responses; other payloads are left unread and the connection released.
		"""
		try:
			r = self.session.request(
				method,
				url,
				headers=dict(headers or {}),
				timeout=timeout if timeout is not None else self.timeout,
				allow_redirects=False,
				stream=True,
			)
			try:
				body = r.text if self._wants_body(method, r.headers, html_only) else ""
			finally:
				r.close()
		except requests.RequestException as e:
			logger.debug("Request failed for %s: %s", url, e)
			raise TransportError(url, str(e)) from e
		return FetchResponse(status=r.status_code, headers=r.headers, final_url=url, body=body)

	@staticmethod
	def _wants_body(method: str, headers: Mapping[str, str], html_only: bool) -> bool:
		if method.upper() == "HEAD":
			return False
		if not html_only:
			return True
		return (headers.get("Content-Type") or "").strip().lower().startswith("text/html")

	def close(self) -> None:
		self.session.close()
