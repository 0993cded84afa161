"""
Core infrastructure package for the change impact service.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL connectivity to the prediction store via asyncpg
- FastAPI dependency injection utilities

Usage Examples:
    from change_impact.core import get_settings
    settings = get_settings()

    # Database pool lifecycle (in FastAPI lifespan)
    from change_impact.core import init_db, close_db

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_db()
        yield
        await close_db()
"""

# =============================================================================
# Re-exports from change_impact.core.config
# =============================================================================
from change_impact.core.config import Settings, get_settings

# =============================================================================
# Re-exports from change_impact.core.database
# =============================================================================
from change_impact.core.database import (
    DatabaseNotConfiguredError,
    init_db,
    close_db,
    get_db_pool,
)

# =============================================================================
# Re-exports from change_impact.core.dependencies
# =============================================================================
from change_impact.core.dependencies import get_settings_dependency, SettingsDep


__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Database pool lifecycle (from database.py)
    'DatabaseNotConfiguredError',
    'init_db',
    'close_db',
    'get_db_pool',
    # FastAPI dependency injection (from dependencies.py)
    'get_settings_dependency',
    'SettingsDep',
]
