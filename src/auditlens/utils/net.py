# AuditLens — Networking utilities (requests session with retries)
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


def build_session(user_agent: str, retries: int = 0, backoff: float = 0.5) -> requests.Session:
	"""Build a requests Session for auditing.

	Redirects are never followed by urllib3; the crawler drives them. Error
	statuses are returned to the caller instead of raising once retries run out.
	"""
	s = requests.Session()
	s.headers.update(
		{
			"User-Agent": user_agent,
			"Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
		}
	)
	retry = Retry(
		total=max(0, int(retries)),
		backoff_factor=backoff,
		status_forcelist=(429, 500, 502, 503, 504),
		allowed_methods=frozenset({"GET", "HEAD"}),
		redirect=False,
		raise_on_status=False,
		raise_on_redirect=False,
	)
	adapter = HTTPAdapter(max_retries=retry)
	s.mount("http://", adapter)
	s.mount("https://", adapter)
	return s
