
from auditlens.core.session import FetchResponse


def html_page(title="", h1s=(), links=(), meta_description=None, meta_robots=None, body=""):
	head = f"<title>{title}</title>" if title else ""
	if meta_description is not None:
		head += f'<meta name="description" content="{meta_description}">'
	if meta_robots is not None:
		head += f'<meta name="robots" content="{meta_robots}">'
	parts = [f"<h1>{h}</h1>" for h in h1s]
	parts += [f'<a href="{href}">{href}</a>' for href in links]
	return f"<html><head>{head}</head><body><main>{''.join(parts)}{body}</main></body></html>"


class FakeTransport:
	"""Dict-backed transport: url -> FetchResponse or exception instance.

	Unknown URLs answer 404 text/plain. Every call is recorded.
	"""

	def __init__(self, mapping):
		self.mapping = mapping
		self.calls = []

	def fetch(self, url, method="GET", headers=None, timeout=None, html_only=False):
		self.calls.append(url)
		entry = self.mapping.get(url)
		if entry is None:
			return FetchResponse(404, {"Content-Type": "text/plain"}, url, "not found")
		if isinstance(entry, Exception):
			raise entry
		return FetchResponse(entry.status, entry.headers, url, entry.body)


def ok(body, content_type="text/html; charset=utf-8", **headers):
	return FetchResponse(200, {"Content-Type": content_type, **headers}, "", body)


def status(code, body="", content_type="text/html"):
	return FetchResponse(code, {"Content-Type": content_type}, "", body)


def redirect(location, code=301):
	headers = {"Location": location} if location is not None else {}
	return FetchResponse(code, headers, "", "")
