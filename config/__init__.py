from .settings import ServiceSettings, settings

__all__ = ["ServiceSettings", "settings"]
