# AuditLens — CLI (Typer)
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

from datetime import datetime
from typing import Optional

import typer
from rich import print
from rich.table import Table

from .config import Settings
from .core.audit import Auditor
from .logging_config import configure_logging
from .storage.writers import ReportWriter

app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.command()
def audit(
	seed: str = typer.Argument(..., help="Seed URL to audit"),
	max_pages: Optional[int] = typer.Option(None, help="Page budget (overrides env)"),
	unlimited: bool = typer.Option(False, "--unlimited", help="Crawl without a page budget"),
	max_redirects: Optional[int] = typer.Option(None, help="Maximum redirect hops per URL"),
	timeout: Optional[float] = typer.Option(None, help="Per-request timeout (seconds)"),
	sitemap_only: Optional[bool] = typer.Option(None, "--sitemap-only/--no-sitemap-only", help="Also fetch sitemap URLs the crawl never reached"),
	ai: Optional[bool] = typer.Option(None, "--ai/--no-ai", help="Run AI intent checks"),
	output_dir: Optional[str] = typer.Option(None, help="Report output directory"),
	audit_id: Optional[str] = typer.Option(None, help="Report directory name (default: timestamp)"),
	user_agent: Optional[str] = typer.Option(None, help="Override User-Agent"),
	log_level: Optional[str] = typer.Option(None, help="Log level"),
):
	"""Crawl a site, evaluate audit rules and write a report."""
	overrides = {
		"max_pages": 0 if unlimited else max_pages,
		"max_redirects": max_redirects,
		"timeout": timeout,
		"fetch_sitemap_only": sitemap_only,
		"enable_ai": ai,
		"output_dir": output_dir,
		"user_agent": user_agent,
		"log_level": log_level,
	}
	cfg = Settings(**{k: v for k, v in overrides.items() if v is not None})
	configure_logging(level=cfg.log_level)
	print(f"[bold]Auditing:[/bold] {seed}")
	try:
		result = Auditor(cfg).run(seed)
	except Exception as e:
		print(f"[bold red]Audit failed:[/bold red] {e}")
		raise typer.Exit(code=1)

	path = ReportWriter(cfg.output_dir).write(audit_id or datetime.now().strftime("%Y%m%d-%H%M%S"), result)

	table = Table(title=f"Issues ({len(result.issues)})")
	table.add_column("Issue type")
	table.add_column("Count", justify="right")
	for issue_type, count in result.issue_summary.items():
		table.add_row(issue_type, str(count))
	print(result.crawl_stats)
	print(table)
	print(f"[bold]Report:[/bold] {path}")


@app.command("print-config")
def print_config():
	"""Print effective configuration from environment."""
	cfg = Settings()
	print(cfg.model_dump(exclude={"openai_api_key"}))


def main():
	app()


if __name__ == "__main__":
	main()
