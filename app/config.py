"""Reelpulse — Central Configuration via Pydantic Settings."""

import os
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Record Store ──
    store_backend: str = "supabase"  # supabase | sql
    supabase_url: str = ""
    supabase_key: str = ""
    store_table: str = "mv_video_performance_deduped"
    store_page_size: int = 1000  # PostgREST default max-rows
    store_timeout: float = 30.0

    # ── Database (sql backend) ──
    database_url: str = ""

    # ── App ──
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    # ── Dashboard ──
    default_time_window: str = "last30"
    blocked_brands: str = "PLEASEEE,Unknown,0,2,3"
    best_accounts_min_views: int = 500
    default_top_n: int = 5

    @property
    def effective_database_url(self) -> str:
        """Return the configured DB URL, otherwise fall back to SQLite."""
        if self.database_url:
            return self.database_url
        # Vercel has a read-only filesystem; use /tmp for SQLite
        if os.environ.get("VERCEL"):
            return "sqlite:////tmp/reelpulse.db"
        return "sqlite:///./reelpulse.db"

    @property
    def blocked_brand_set(self) -> set[str]:
        return {b.strip() for b in self.blocked_brands.split(",") if b.strip()}

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
