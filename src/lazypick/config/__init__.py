"""Configuration for lazypick sessions."""

from lazypick.config.settings import PickConfig, load_config

__all__ = ["PickConfig", "load_config"]
