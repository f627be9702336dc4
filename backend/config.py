"""Centralized configuration: all env vars in one place."""

import os

DEFAULT_UPSTREAM_BASE_URL = "http://20.244.56.144/test"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Upstream social-graph API
        self.upstream_base_url: str = os.getenv("UPSTREAM_BASE_URL", DEFAULT_UPSTREAM_BASE_URL).rstrip("/")
        self.upstream_auth_url: str = os.getenv("UPSTREAM_AUTH_URL", f"{self.upstream_base_url}/auth")
        self.upstream_timeout_seconds: float = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "10"))

        # Client credentials posted to the auth endpoint
        self.client_company_name: str | None = os.getenv("CLIENT_COMPANY_NAME")
        self.client_id: str | None = os.getenv("CLIENT_ID")
        self.client_secret: str | None = os.getenv("CLIENT_SECRET")
        self.client_owner_name: str | None = os.getenv("CLIENT_OWNER_NAME")
        self.client_owner_email: str | None = os.getenv("CLIENT_OWNER_EMAIL")
        self.client_roll_no: str | None = os.getenv("CLIENT_ROLL_NO")

        # Snapshot files, one per slot
        self.user_snapshot_path: str = os.getenv("USER_SNAPSHOT_PATH", "heap.json")
        self.post_snapshot_path: str = os.getenv("POST_SNAPSHOT_PATH", "popular_posts.json")

        self.top_n: int = int(os.getenv("TOP_N", "5"))

        # Periodic refresh
        self.scheduler_enabled: bool = _env_bool("SCHEDULER_ENABLED", True)
        self.scheduler_timezone: str = os.getenv("SCHEDULER_TIMEZONE", "Asia/Kolkata")
        self.user_refresh_cron_minute: str = os.getenv("USER_REFRESH_CRON_MINUTE", "*/30")
        self.post_refresh_cron_minute: str = os.getenv("POST_REFRESH_CRON_MINUTE", "*/15")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def client_credentials(self) -> dict:
        """Body of the auth request, in the field names the upstream expects."""
        return {
            "companyName": self.client_company_name,
            "clientID": self.client_id,
            "clientSecret": self.client_secret,
            "ownerName": self.client_owner_name,
            "ownerEmail": self.client_owner_email,
            "rollNo": self.client_roll_no,
        }

    def validate(self) -> list[str]:
        """Return list of missing required env vars for upstream auth."""
        required = ["CLIENT_ID", "CLIENT_SECRET"]
        return [var for var in required if not getattr(self, _attr_for(var))]


settings = Settings()


def _attr_for(env_var: str) -> str:
    """Map env var name to Settings attribute name."""
    mapping = {
        "CLIENT_ID": "client_id",
        "CLIENT_SECRET": "client_secret",
    }
    return mapping.get(env_var, env_var.lower())
