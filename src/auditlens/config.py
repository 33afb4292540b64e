# AuditLens — Configuration via Pydantic BaseSettings
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	"""Audit settings with sane defaults.

	Environment variables are prefixed with AUDITLENS_. CLI flags can override.
	max_pages = 0 means no page budget.
	"""

	model_config = SettingsConfigDict(env_prefix="AUDITLENS_", env_file=".env", extra="ignore")

	user_agent: str = Field(default="AuditLens/0.1 (+https://example.com)")
	max_pages: int = Field(default=100, ge=0)
	max_redirects: int = Field(default=5, ge=0)
	timeout: float = Field(default=10.0, gt=0)
	sitemap_max_depth: int = Field(default=5, ge=0)
	retries: int = Field(default=0, ge=0)
	backoff: float = Field(default=0.5)
	fetch_sitemap_only: bool = Field(default=False)
	output_dir: str = Field(default="outputs")
	log_level: str = Field(default="INFO")
	enable_ai: bool = Field(default=False)
	ai_model: str = Field(default="gpt-4o-mini")
	openai_api_key: Optional[str] = Field(default=None)
	ai_workers: int = Field(default=5, ge=1)
	link_batch_size: int = Field(default=5, ge=1)
	page_batch_size: int = Field(default=30, ge=1)

	@property
	def page_budget(self) -> Optional[int]:
		return self.max_pages or None
