"""Configuration loading for SCHEMA2ERD."""

from .loader import load_config, get_config, reload_config, config_path, CONFIG_ENV_VAR
from .settings import (
    ParserOptions,
    LayoutConfig,
    RouterConfig,
    InteractionConfig,
    get_parser_options,
    get_layout_config,
    get_router_config,
    get_interaction_config,
)

__all__ = [
    "load_config",
    "get_config",
    "reload_config",
    "config_path",
    "CONFIG_ENV_VAR",
    "ParserOptions",
    "LayoutConfig",
    "RouterConfig",
    "InteractionConfig",
    "get_parser_options",
    "get_layout_config",
    "get_router_config",
    "get_interaction_config",
]
