import os
from dataclasses import dataclass, field


def _get_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() == "true"


def _get_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    database_url: str
    jwt_secret: str
    db_schema: str = "product"
    jwt_issuer: str | None = None
    jwt_audience: str | None = None
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    auto_create_schema: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Required env:
          DATABASE_URL
          JWT_SECRET

        Optional env:
          DB_SCHEMA (default product, Postgres only)
          JWT_ISSUER
          JWT_AUDIENCE
          CORS_ORIGINS (comma separated, default *)
          AUTO_CREATE_SCHEMA (true/false, default true)
          LOG_LEVEL (default INFO)
        """
        database_url = os.getenv("DATABASE_URL")
        if not database_url:
            raise RuntimeError("DATABASE_URL is not set")

        jwt_secret = os.getenv("JWT_SECRET")
        if not jwt_secret:
            raise RuntimeError("JWT_SECRET is not set")

        return cls(
            database_url=database_url,
            jwt_secret=jwt_secret,
            db_schema=os.getenv("DB_SCHEMA", "product"),
            jwt_issuer=os.getenv("JWT_ISSUER") or None,
            jwt_audience=os.getenv("JWT_AUDIENCE") or None,
            cors_origins=_get_list("CORS_ORIGINS", "*"),
            auto_create_schema=_get_bool("AUTO_CREATE_SCHEMA", "true"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
