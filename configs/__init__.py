"""Settings and infrastructure clients for the skill matrix service."""

from .postgres import Base, get_db, init_engine, shutdown_engine  # noqa: F401
from .settings import Settings, get_settings  # noqa: F401
