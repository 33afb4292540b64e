# AuditLens — Report writers (summary, issue files, JSON result)
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List

from ..utils.io import ensure_dirs, write_json, write_jsonl, write_lines


logger = logging.getLogger(__name__)

RULE = "=" * 80


def _now() -> str:
	return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _title_key(key: str) -> str:
	return " ".join(w.capitalize() for w in key.split("_"))


def format_issue(issue: Dict[str, Any]) -> str:
	lines = [
		f"Type: {issue['issue_type']}",
		f"Explanation: {issue.get('explanation', '')}",
		"",
	]
	for key, value in issue.items():
		if key in ("issue_type", "explanation"):
			continue
		if key == "evidence":
			lines.append("Evidence:")
			lines.append(json.dumps(value, indent=2, ensure_ascii=False))
		elif isinstance(value, list):
			lines.append(f"{_title_key(key)}: ({len(value)} items)")
			lines.extend(f"  - {item}" for item in value)
		else:
			lines.append(f"{_title_key(key)}: {value}")
	return "\n".join(lines)


class ReportWriter:
	"""Writes one directory per audit under output_dir."""

	def __init__(self, output_dir: str = "outputs") -> None:
		self.output_dir = output_dir
		ensure_dirs(self.output_dir)

	def audit_dir(self, audit_id: str) -> str:
		return os.path.join(self.output_dir, audit_id)

	def write(self, audit_id: str, result) -> str:
		"""Persist an AuditResult and return its directory."""
		data = result.to_dict()
		audit_dir = self.audit_dir(audit_id)
		ensure_dirs(audit_dir, os.path.join(audit_dir, "issues"))
		self.write_crawled_urls(audit_dir, data["pages"])
		self.write_issues_by_type(audit_dir, data["issues"])
		self.write_summary(audit_dir, data)
		write_jsonl(os.path.join(audit_dir, "issues.jsonl"), data["issues"])
		write_json(os.path.join(audit_dir, "full-result.json"), data)
		logger.info("Audit results written to %s", audit_dir)
		return audit_dir

	def write_crawled_urls(self, audit_dir: str, pages: List[Dict[str, Any]]) -> None:
		lines = [
			"# CRAWLED URLs",
			f"# Total: {len(pages)}",
			f"# Generated: {_now()}",
			"",
			"# Format: [STATUS] URL",
			"",
		]
		for page in pages:
			status = page.get("http_status") or "N/A"
			lines.append(f"[{status}] {page['url']}")
		write_lines(os.path.join(audit_dir, "crawled-urls.txt"), lines)

	def write_issues_by_type(self, audit_dir: str, issues: List[Dict[str, Any]]) -> None:
		by_type: Dict[str, List[Dict[str, Any]]] = {}
		for issue in issues:
			by_type.setdefault(issue["issue_type"], []).append(issue)
		for issue_type, items in by_type.items():
			lines = [f"# {issue_type}", f"# Count: {len(items)}", f"# Generated: {_now()}", "", RULE, ""]
			for n, issue in enumerate(items, start=1):
				lines.extend([f"## Issue {n} of {len(items)}", "", format_issue(issue), "", "-" * 80, ""])
			write_lines(os.path.join(audit_dir, "issues", f"{issue_type.lower()}.txt"), lines)

	def write_summary(self, audit_dir: str, data: Dict[str, Any]) -> None:
		stats = data["crawl_stats"]
		lines = [
			"# AUDIT SUMMARY",
			f"# Generated: {_now()}",
			"",
			RULE,
			"",
			f"Seed URL: {data['seed_url']}",
			f"Pages Crawled: {stats['pages_crawled']}",
			f"Sitemap URLs: {stats['sitemap_urls']}",
			f"Issues Found: {stats['issues_found']}",
			f"Duration: {stats['duration_seconds']}s",
			"",
			RULE,
			"",
			"## ISSUES BY TYPE",
			"",
		]
		for issue_type, count in sorted(data["issue_summary"].items(), key=lambda kv: -kv[1]):
			lines.append(f"{issue_type:<40} {count}")
		lines.extend(["", RULE])
		write_lines(os.path.join(audit_dir, "summary.txt"), lines)
