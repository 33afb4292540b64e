from auditlens.core.graph import LinkGraph
from auditlens.core.models import PageRecord, ResourceType


def test_duplicate_edges_collapse():
	g = LinkGraph()
	g.record("https://ex.com/", "https://ex.com/a")
	g.record("https://ex.com/", "https://ex.com/a")
	g.record("https://ex.com/b", "https://ex.com/a")
	assert g.to_dict() == {"https://ex.com/": ["https://ex.com/a"], "https://ex.com/b": ["https://ex.com/a"]}
	assert g.incoming_counts()["https://ex.com/a"] == 2


def test_incoming_counts_match_distinct_sources():
	g = LinkGraph()
	edges = [("s1", "t1"), ("s2", "t1"), ("s1", "t2"), ("s1", "t1"), ("t1", "s1")]
	for s, t in edges:
		g.record(s, t)
	pages = [
		PageRecord(url="s1", resource_type=ResourceType.PAGE),
		PageRecord(url="t1", resource_type=ResourceType.PAGE),
		PageRecord(url="t2", resource_type=ResourceType.RESOURCE),
		PageRecord(url="lonely", resource_type=ResourceType.PAGE),
	]
	g.apply_incoming_counts(pages)
	counts = {p.url: p.incoming_internal_link_count for p in pages}
	for p in pages:
		if p.is_page:
			assert counts[p.url] == len({s for s, t in g.edges() if t == p.url})
	assert counts == {"s1": 1, "t1": 2, "t2": 0, "lonely": 0}
