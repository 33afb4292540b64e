from auditlens.core.extract import context_type, parse_document, parse_html
from auditlens.utils.urls import UrlCanonicalizer


PAGE = b"""
<html><head>
<title> Shoes | Shop </title>
<meta name="description" content="All our shoes">
<meta name="ROBOTS" content="NoIndex, follow">
</head><body>
<header><a href="/">Home</a><nav><a href="/shoes">Shoes</a></nav></header>
<main>
<h1>Shoes</h1>
<h1>   </h1>
<article><a href="/blog/care/">Shoe care</a></article>
<div class="product-card"><a href="/p/1">Runner</a></div>
<p><a href="/p/1">Runner</a> <a href="/cart">Cart</a> <a href="#reviews">Reviews</a>
<a href="/p/2"><img src="x.png"></a>
<a href="mailto:hi@ex.com">Mail</a> <a href="javascript:void(0)">JS</a>
<a href="https://other.com/x">Partner</a></p>
</main>
<footer><a href="/about">About</a></footer>
</body></html>
"""


def _doc():
	return parse_document(PAGE, "https://ex.com/shoes", UrlCanonicalizer("https://ex.com/"))


def test_metadata():
	doc = _doc()
	assert doc.title == "Shoes | Shop"
	assert doc.h1s == ["Shoes"]
	assert doc.meta_description == "All our shoes"
	assert doc.meta_robots == "noindex, follow"


def test_links_are_canonical_and_classified():
	doc = _doc()
	normalized = [l.normalized for l in doc.links]
	assert "https://ex.com/blog/care" in normalized
	assert "https://ex.com/shoes#reviews" not in normalized
	assert all(not l.original.startswith(("mailto:", "javascript:")) for l in doc.links)
	external = [l.normalized for l in doc.links if not l.is_internal]
	assert external == ["https://other.com/x"]


def test_content_links_skip_chrome_system_paths_and_duplicates():
	doc = _doc()
	pairs = [(c.destination_url, c.anchor_text, c.context_type) for c in doc.content_links]
	assert pairs == [
		("https://ex.com/blog/care", "Shoe care", "article"),
		("https://ex.com/p/1", "Runner", "product"),
	]
	assert all(c.source_url == "https://ex.com/shoes" for c in doc.content_links)


def test_missing_metadata_is_none():
	doc = parse_document("<html><body><p>hi</p></body></html>", "https://ex.com/", UrlCanonicalizer("https://ex.com/"))
	assert doc.title is None
	assert doc.h1s == []
	assert doc.meta_description is None
	assert doc.meta_robots is None
	assert doc.links == []


def test_context_type_defaults_to_content():
	soup = parse_html("<div><a href='/x'>x</a></div><div role='main'><a href='/y'>y</a></div>")
	a, b = soup.find_all("a")
	assert context_type(a) == "content"
	assert context_type(b) == "main"
