"""commitcache - build caches keyed by git history."""
from .settings import Settings, create_settings_from_env

__version__ = "0.1.0"

__all__ = ["Settings", "create_settings_from_env", "__version__"]
