from auditlens.core.crawl import CrawlOptions, Crawler, PageFetcher, fetch_sitemap_only_pages
from auditlens.core.models import DiscoveryMethod, FetchError, PageRecord, ResourceType
from auditlens.core.robots import RobotsRuleset
from auditlens.core.session import TransportError
from auditlens.utils.urls import UrlCanonicalizer
from helpers import FakeTransport, html_page, ok, redirect, status


SEED = "https://ex.com/"


def _crawl(mapping, robots=None, **options):
	transport = FakeTransport(mapping)
	crawler = Crawler(transport, UrlCanonicalizer(SEED), robots, CrawlOptions(**options))
	return crawler, crawler.crawl(SEED), transport


def test_bfs_order_and_incoming_counts():
	crawler, result, _ = _crawl({
		SEED: ok(html_page("Home", ["Home"], ["/a", "/b", "/a", "https://other.com/"])),
		"https://ex.com/a": status(404, html_page("Missing")),
		"https://ex.com/b": ok(html_page("B", ["B"], ["/", "/c/"])),
		"https://ex.com/c": ok(html_page("C", ["C"])),
	})
	assert list(result.pages) == [SEED, "https://ex.com/a", "https://ex.com/b", "https://ex.com/c"]
	home = result.pages[SEED]
	assert home.internal_outgoing_links == ["https://ex.com/a", "https://ex.com/b", "https://ex.com/a"]
	assert home.external_outgoing_links == ["https://other.com/"]
	assert result.link_graph.to_dict()[SEED] == ["https://ex.com/a", "https://ex.com/b"]
	assert home.incoming_internal_link_count == 1
	assert result.pages["https://ex.com/b"].incoming_internal_link_count == 1
	assert result.pages["https://ex.com/a"].http_status == 404
	assert crawler.visited == set(result.pages)


def test_each_url_is_fetched_once():
	_, result, transport = _crawl({
		SEED: ok(html_page("Home", links=["/a", "/a/", "/a#x", "/A"])),
		"https://ex.com/a": ok(html_page("A", links=["/", "/a"])),
	})
	assert transport.calls.count("https://ex.com/a") == 1
	assert transport.calls.count(SEED) == 1
	assert "https://ex.com/A" in result.pages


def test_seed_is_canonicalized():
	transport = FakeTransport({SEED: ok(html_page("Home", links=["/"]))})
	result = Crawler(transport, UrlCanonicalizer(SEED)).crawl("HTTPS://EX.COM:443/#top")
	assert list(result.pages) == [SEED]
	assert result.seed_url == SEED


def test_page_budget_counts_pages_only():
	mapping = {SEED: ok(html_page("Home", links=["/file.pdf", "/style.css", "/p1"]))}
	mapping["https://ex.com/file.pdf"] = ok("%PDF", "application/pdf")
	mapping["https://ex.com/style.css"] = ok("body{}", "text/css")
	for i in range(1, 6):
		mapping[f"https://ex.com/p{i}"] = ok(html_page(f"P{i}", links=[f"/p{i + 1}"]))
	_, result, _ = _crawl(mapping, max_pages=2)
	pages = [p for p in result.pages.values() if p.resource_type is ResourceType.PAGE]
	resources = [p for p in result.pages.values() if p.resource_type is ResourceType.RESOURCE]
	assert len(pages) == 2
	assert [p.url for p in resources] == ["https://ex.com/file.pdf", "https://ex.com/style.css"]
	assert resources[0].title is None


def test_unlimited_budget():
	mapping = {SEED: ok(html_page("Home", links=["/p1"]))}
	for i in range(1, 150):
		mapping[f"https://ex.com/p{i}"] = ok(html_page(f"P{i}", links=[f"/p{i + 1}"]))
	_, result, _ = _crawl(mapping, max_pages=None)
	assert len(result.pages) == 151


def test_redirect_chain_fidelity():
	_, result, _ = _crawl({
		SEED: ok(html_page("Home", links=["/a"])),
		"https://ex.com/a": redirect("/b"),
		"https://ex.com/b": redirect("https://ex.com/c", 302),
		"https://ex.com/c": ok(html_page("C", links=["/"])),
	})
	page = result.pages["https://ex.com/a"]
	assert page.redirect_chain == ["https://ex.com/a", "https://ex.com/b"]
	assert page.final_url == "https://ex.com/c"
	assert page.http_status == 200
	assert page.fetch_error is None
	# links resolve against the final URL and are attributed to the enqueued URL
	assert result.link_graph.to_dict()["https://ex.com/a"] == [SEED]


def test_redirect_cycle_is_bounded_by_ceiling():
	_, result, transport = _crawl({
		SEED: ok(html_page("Home", links=["/loop-a"])),
		"https://ex.com/loop-a": redirect("/loop-b"),
		"https://ex.com/loop-b": redirect("/loop-a"),
	}, max_redirects=5)
	page = result.pages["https://ex.com/loop-a"]
	assert page.fetch_error is FetchError.MAX_REDIRECTS_EXCEEDED
	assert page.resource_type is ResourceType.PAGE
	assert page.http_status is None
	assert len(page.redirect_chain) == 6
	assert page.redirect_chain[:3] == ["https://ex.com/loop-a", "https://ex.com/loop-b", "https://ex.com/loop-a"]
	assert len(transport.calls) == 1 + 6


def test_redirect_without_location_is_terminal():
	_, result, _ = _crawl({
		SEED: ok(html_page("Home", links=["/r"])),
		"https://ex.com/r": redirect(None, 302),
	})
	page = result.pages["https://ex.com/r"]
	assert page.http_status == 302
	assert page.redirect_chain == []
	assert page.fetch_error is None


def test_fetch_failures_are_recorded_pages():
	_, result, transport = _crawl({
		SEED: ok(html_page("Home", links=["/down", "/boom"])),
		"https://ex.com/down": TransportError("https://ex.com/down", "timed out"),
		"https://ex.com/boom": RuntimeError("unexpected"),
	}, max_pages=3)
	down = result.pages["https://ex.com/down"]
	boom = result.pages["https://ex.com/boom"]
	assert down.fetch_error is FetchError.NETWORK_ERROR
	assert boom.fetch_error is FetchError.EXCEPTION_DURING_FETCH
	assert down.resource_type is boom.resource_type is ResourceType.PAGE
	assert transport.calls.count("https://ex.com/down") == 1


def test_robots_blocked_page_is_not_fetched():
	robots = RobotsRuleset.parse("User-agent: *\nDisallow: /admin")
	_, result, transport = _crawl({
		SEED: ok(html_page("Home", links=["/admin/x"])),
		"https://ex.com/admin/x": ok(html_page("Admin", links=["/secret"])),
	}, robots=robots)
	page = result.pages["https://ex.com/admin/x"]
	assert page.blocked_by_robots
	assert page.blocked_by_robots_rule == "/admin"
	assert page.resource_type is ResourceType.PAGE
	assert "https://ex.com/admin/x" not in transport.calls
	assert "https://ex.com/admin/x" not in result.link_graph
	assert "https://ex.com/secret" not in result.pages


def test_headers_and_x_robots_tag():
	_, result, _ = _crawl({SEED: ok(html_page("Home"), **{"X-Robots-Tag": "NOINDEX"})})
	page = result.pages[SEED]
	assert page.x_robots_tag == "noindex"
	assert page.headers["content-type"].startswith("text/html")


def test_sitemap_only_pages_do_not_touch_graph():
	transport = FakeTransport({"https://ex.com/orphan": ok(html_page("Orphan", ["Orphan"], ["/", "https://other.com/"]))})
	fetcher = PageFetcher(transport, UrlCanonicalizer(SEED), CrawlOptions())
	records = fetch_sitemap_only_pages(fetcher, ["https://ex.com/orphan"])
	assert len(records) == 1
	record = records[0]
	assert record.discovery_method is DiscoveryMethod.SITEMAP_ONLY
	assert record.title == "Orphan"
	assert record.internal_outgoing_links == [SEED]
	assert record.external_outgoing_links == ["https://other.com/"]


def test_fetch_with_redirects_sets_unknown_failure_when_reason_missing():
	class NoResponseFetcher(PageFetcher):
		def fetch_with_redirects(self, url, record):
			return None

	record = PageRecord(url=SEED)
	NoResponseFetcher(FakeTransport({}), UrlCanonicalizer(SEED), CrawlOptions()).fetch(SEED, record)
	assert record.fetch_error is FetchError.UNKNOWN_FETCH_FAILURE
	assert record.resource_type is ResourceType.PAGE


def test_redirect_to_trailing_slash_is_followed_verbatim():
	_, result, transport = _crawl({
		SEED: ok(html_page("Home", links=["/about"])),
		"https://ex.com/about": redirect("/about/"),
		"https://ex.com/about/": ok(html_page("About", ["About"], ["/"])),
	})
	page = result.pages["https://ex.com/about"]
	assert page.http_status == 200
	assert page.fetch_error is None
	assert page.redirect_chain == ["https://ex.com/about"]
	assert page.final_url == "https://ex.com/about/"
	assert page.title == "About"
	assert transport.calls == [SEED, "https://ex.com/about", "https://ex.com/about/"]


def test_redirect_target_drops_only_the_fragment():
	_, result, transport = _crawl({
		SEED: ok(html_page("Home", links=["/old"])),
		"https://ex.com/old": redirect("/New/?q=1#top"),
		"https://ex.com/New/?q=1": ok(html_page("New")),
	})
	assert result.pages["https://ex.com/old"].final_url == "https://ex.com/New/?q=1"
	assert "https://ex.com/New/?q=1" in transport.calls


def test_redirect_to_non_http_target_is_terminal():
	_, result, _ = _crawl({
		SEED: ok(html_page("Home", links=["/ftp"])),
		"https://ex.com/ftp": redirect("ftp://files.ex.com/x"),
	})
	page = result.pages["https://ex.com/ftp"]
	assert page.http_status == 301
	assert page.redirect_chain == []


def test_crawl_result_counts():
	_, result, _ = _crawl({
		SEED: ok(html_page("Home", links=["/a", "/style.css"])),
		"https://ex.com/a": ok(html_page("A")),
		"https://ex.com/style.css": ok("body{}", "text/css"),
	})
	assert result.html_page_count == 2
	assert result.resource_count == 1
	assert [p.url for p in result.page_list] == [SEED, "https://ex.com/a", "https://ex.com/style.css"]
