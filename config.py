import os
from dotenv import load_dotenv

load_dotenv()

# Initialize Sentry early, before the app and its blueprints are imported
_sentry_dsn = os.getenv("SENTRY_DSN")
if _sentry_dsn:
    import sentry_sdk
    sentry_sdk.init(
        dsn=_sentry_dsn,
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1")),
        environment=os.getenv("FLASK_ENV", "production"),
    )


def _env_flag(name, default):
    return os.getenv(name, default).lower() == "true"


class Config:
    # Flask
    SECRET_KEY = os.getenv("FLASK_SECRET_KEY", "clockbook-secret-key-change-in-production")
    DEBUG = _env_flag("FLASK_DEBUG", "False")
    PORT = int(os.getenv("FLASK_PORT", "3000"))

    # --- Storage ---
    # Single SQLite file holding contacts, properties, clocks and inspections.
    DATA_DIR = os.getenv("DATA_DIR", "data")
    DATABASE_PATH = os.getenv("DATABASE_PATH", os.path.join(DATA_DIR, "app.db"))

    # Apply pending Alembic revisions when the app starts
    AUTO_MIGRATE = _env_flag("AUTO_MIGRATE", "True")

    # --- Observability ---
    LOG_DIR = os.getenv("LOG_DIR", "logs")
    LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # "text" or "json"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    SENTRY_DSN = _sentry_dsn
