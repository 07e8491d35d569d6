import os
from typing import List, Tuple


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(
            f"Missing required environment variable '{name}'. "
            "Set it in the service .env before starting the API."
        )
    return value


# PUBLIC_INTERFACE
def secret_key() -> str:
    """Shared secret used to sign and verify JWTs."""
    # Required for security; do not default.
    return _required_env("SECRET_KEY")


# PUBLIC_INTERFACE
def jwt_algorithm() -> str:
    return os.getenv("JWT_ALGORITHM", "HS256")


# PUBLIC_INTERFACE
def jwt_expires_minutes() -> int:
    return int(os.getenv("JWT_EXPIRES_MINUTES", "10080"))  # default: 7 days


# PUBLIC_INTERFACE
def bcrypt_work_factor() -> int:
    return int(os.getenv("BCRYPT_WORK_FACTOR", "12"))


# PUBLIC_INTERFACE
def database_dsn() -> str:
    """
    Build DSN from the standardized database env vars.

    Uses:
      - POSTGRES_URL (optional full DSN; if provided, it wins)
      - POSTGRES_USER, POSTGRES_PASSWORD, POSTGRES_DB, POSTGRES_PORT
    """
    url = os.getenv("POSTGRES_URL")
    if url:
        return url

    user = _required_env("POSTGRES_USER")
    password = _required_env("POSTGRES_PASSWORD")
    db = _required_env("POSTGRES_DB")
    db_port = _required_env("POSTGRES_PORT")
    host = os.getenv("POSTGRES_HOST", "localhost")
    return f"postgresql://{user}:{password}@{host}:{db_port}/{db}"


# PUBLIC_INTERFACE
def pool_bounds() -> Tuple[int, int]:
    return int(os.getenv("DB_POOL_MIN", "1")), int(os.getenv("DB_POOL_MAX", "10"))


# PUBLIC_INTERFACE
def cors_allow_origins() -> List[str]:
    """Origins allowed by CORS; CORS_ALLOW_ORIGINS is comma separated."""
    env_val = os.getenv("CORS_ALLOW_ORIGINS")
    if not env_val:
        return ["*"]
    return [o.strip() for o in env_val.split(",") if o.strip()]


# PUBLIC_INTERFACE
def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


# PUBLIC_INTERFACE
def port() -> int:
    return int(os.getenv("PORT", "3000"))
