"""Link routing: sides, slots, Manhattan routes, path data and labels.

`route_links` is a pure function of the current boxes and the link list;
identical input always produces identical output, which is what lets it
re-run on every frame while a table is dragged.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from SCHEMA2ERD.config import RouterConfig, get_router_config
from SCHEMA2ERD.layout.geometry import TableBox
from .anchors import anchor_point_with_slot, auto_anchor
from .labels import LabelPlacement, place_labels
from .manhattan import Point, manhattan
from .paths import simplify_orthogonal, to_rounded_path


@dataclass(frozen=True)
class RoutedLink:
    index: int
    from_id: str
    to_id: str
    side_from: str
    side_to: str
    slot_from: int
    slots_from: int
    slot_to: int
    slots_to: int
    points: Tuple[Point, ...]
    path: str
    start_label: LabelPlacement
    end_label: LabelPlacement


def link_endpoints(link: Any) -> Tuple[str, str, str, str]:
    """(from, to, fromCard, toCard) of a `GraphLink` or a wire-format dict."""
    if isinstance(link, Mapping):
        return (
            str(link["from"]),
            str(link["to"]),
            str(link.get("fromCard", "many")),
            str(link.get("toCard", "1")),
        )
    return link.from_, link.to, link.fromCard, link.toCard


def route_links(
    boxes: Mapping[str, TableBox],
    links: Sequence[Any],
    config: Optional[RouterConfig] = None,
) -> List[RoutedLink]:
    """Route every link whose endpoints are both present in `boxes`.

    Sides are counted for all links first; slots are then handed out in link
    order, so k links on one side get k distinct, ordered anchor points.
    """
    cfg = config or get_router_config()

    side_counts: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
    planned = []
    for index, link in enumerate(links):
        from_id, to_id, from_card, to_card = link_endpoints(link)
        a = boxes.get(from_id)
        b = boxes.get(to_id)
        if a is None or b is None:
            continue
        side_a = auto_anchor(a, b)
        side_b = auto_anchor(b, a)
        side_counts[a.id][side_a] += 1
        side_counts[b.id][side_b] += 1
        planned.append((index, a, b, side_a, side_b, from_card, to_card))

    side_used: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
    routed: List[RoutedLink] = []
    for index, a, b, side_a, side_b, from_card, to_card in planned:
        slot_a = side_used[a.id][side_a]
        side_used[a.id][side_a] += 1
        slot_b = side_used[b.id][side_b]
        side_used[b.id][side_b] += 1
        slots_a = side_counts[a.id][side_a]
        slots_b = side_counts[b.id][side_b]

        p1 = anchor_point_with_slot(a, side_a, slot_a, slots_a, cfg.slot_edge_padding)
        p2 = anchor_point_with_slot(b, side_b, slot_b, slots_b, cfg.slot_edge_padding)
        points = simplify_orthogonal(manhattan(p1, p2, side_a, side_b, cfg.offset), cfg.epsilon)
        start_label, end_label = place_labels(points, from_card, to_card, cfg.label_near, cfg.label_offset)

        routed.append(RoutedLink(
            index=index,
            from_id=a.id,
            to_id=b.id,
            side_from=side_a,
            side_to=side_b,
            slot_from=slot_a,
            slots_from=slots_a,
            slot_to=slot_b,
            slots_to=slots_b,
            points=tuple(points),
            path=to_rounded_path(points, cfg.corner_radius, cfg.epsilon),
            start_label=start_label,
            end_label=end_label,
        ))
    return routed
