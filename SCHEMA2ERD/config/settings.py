"""Typed views over config.yaml sections.

Each dataclass carries defaults equal to the shipped YAML, so the core keeps
working when a section (or the whole file) is missing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Tuple, Type, TypeVar

from .loader import get_config

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ParserOptions:
    infer_foreign_keys: bool = True
    excluded_table_prefixes: Tuple[str, ...] = ("active_storage_", "action_text_", "action_mailbox_")
    excluded_tables: Tuple[str, ...] = ("ar_internal_metadata", "schema_migrations")


@dataclass(frozen=True)
class LayoutConfig:
    spiral_base_radius: float = 200.0
    spiral_step: float = 6.0
    charge_strength: float = -900.0
    link_base_distance: float = 220.0
    link_size_factor: float = 0.2
    link_strength: float = 0.3
    collide_margin: float = 36.0
    collide_iterations: int = 3
    center_strength: float = 0.04
    max_ticks: int = 1200
    ticks_per_sqrt_node: float = 30.0
    margin: float = 200.0
    overlap_padding: float = 28.0
    overlap_step: float = 10.0
    overlap_max_iterations: int = 400
    seed: int = 7


@dataclass(frozen=True)
class RouterConfig:
    offset: float = 12.0
    slot_edge_padding: float = 10.0
    epsilon: float = 2.0
    corner_radius: float = 3.0
    label_offset: float = 6.0
    label_near: float = 14.0


@dataclass(frozen=True)
class InteractionConfig:
    min_scale: float = 0.2
    max_scale: float = 3.0
    zoom_step: float = 1.2
    zoom_duration_ms: float = 200.0
    pan_duration_ms: float = 450.0
    fit_padding: float = 40.0
    reserved_bottom_extra_px: float = 24.0
    compaction_ms: float = 260.0
    compact_rows: int = 3
    search_debounce_ms: float = 220.0
    parse_debounce_ms: float = 250.0
    click_move_threshold_px: float = 5.0
    default_highlight_depth: str = "1"


def _from_section(cls: Type[T], section: str) -> T:
    try:
        raw: Dict[str, Any] = get_config(section)
    except FileNotFoundError:
        logger.warning(f"config.yaml missing, using built-in defaults for '{section}'")
        raw = {}

    known = {f.name: f for f in fields(cls)}
    kwargs: Dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known:
            logger.debug(f"Ignoring unknown config key {section}.{key}")
            continue
        if isinstance(value, list):
            value = tuple(value)
        kwargs[key] = value
    return cls(**kwargs)


def get_parser_options() -> ParserOptions:
    return _from_section(ParserOptions, "parser")


def get_layout_config() -> LayoutConfig:
    return _from_section(LayoutConfig, "layout")


def get_router_config() -> RouterConfig:
    return _from_section(RouterConfig, "routing")


def get_interaction_config() -> InteractionConfig:
    return _from_section(InteractionConfig, "interaction")
