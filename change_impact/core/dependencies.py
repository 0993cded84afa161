"""
FastAPI dependency injection module for the change impact service.

Key Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- SettingsDep: Type alias for injecting Settings into endpoints

Prediction store access goes through change_impact.services.prediction_store,
which acquires pool connections per call; endpoints do not hold a connection
for the lifetime of the request.

Usage Example:
    @router.get("/predictions")
    async def list_predictions(settings: SettingsDep):
        limit = settings.default_list_limit
        ...
"""

from typing import Annotated

from fastapi import Depends

from change_impact.core.config import Settings, get_settings


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    This is a thin wrapper around get_settings() to enable FastAPI's
    dependency override mechanism for testing:

        app.dependency_overrides[get_settings_dependency] = lambda: mock_settings

    Returns:
        Settings: The cached Settings instance with all configuration values.
    """
    return get_settings()


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

# Usage: async def endpoint(settings: SettingsDep)
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]
