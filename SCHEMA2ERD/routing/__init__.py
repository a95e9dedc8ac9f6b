"""Orthogonal link routing between table boxes."""

from .anchors import Anchor, anchor_point, anchor_point_with_slot, auto_anchor
from .labels import LabelPlacement, place_labels
from .manhattan import manhattan
from .paths import simplify_orthogonal, to_rounded_path
from .router import RoutedLink, link_endpoints, route_links

__all__ = [
    "Anchor",
    "anchor_point",
    "anchor_point_with_slot",
    "auto_anchor",
    "LabelPlacement",
    "place_labels",
    "manhattan",
    "simplify_orthogonal",
    "to_rounded_path",
    "RoutedLink",
    "link_endpoints",
    "route_links",
]
