"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Secrets and host coordinates come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://chainmgr:chainmgr@db:5432/chainmgr"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Generated chain files
    nodes_root: str = "./NODES_ROOT"
    build_chain_script: str = "./script/deploy/build_chain.sh"
    build_chain_timeout_seconds: int = 600

    # SSH
    ssh_private_key_path: str = "~/.ssh/id_rsa"
    ssh_connect_timeout_seconds: int = 10

    # Docker
    docker_image_repository: str = "fiscoorg/fisco-webase"
    docker_connect_timeout_seconds: int = 5

    # Front
    default_front_port: int = 5002
    front_health_path: str = "/WeBASE-Front/actuator/health"
    front_health_timeout_seconds: float = 3.0

    # Background reset-group-list task
    reset_group_list_interval_seconds: int = 30

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
