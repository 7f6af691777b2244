"""Centralized service registry for neurodash.

Import `registry` or use `get_registry()` to access shared services.
"""

from dataclasses import dataclass, field

from neurodash.engine.playback import PlaybackEngine


@dataclass
class ServiceRegistry:
    playback_engine: PlaybackEngine = field(default_factory=PlaybackEngine)


# Singleton-like shared registry instance
registry = ServiceRegistry()


def get_registry() -> ServiceRegistry:
    """Return the shared registry instance."""
    return registry


__all__ = ["ServiceRegistry", "registry", "get_registry"]
