# Copyright 2025 topo-view contributors
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# This file was created or modified with the assistance of an AI (Large Language Model).
# Review required for correctness, security, and licensing.
"""Trace overlay composition over the base edge set."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from topo_view.graph import restrict_edges
from topo_view.models import (
    EDGE_KIND_TRACE,
    STYLE_TRACE,
    EdgeKey,
    LinkKey,
    TraceCable,
    VisualEdge,
)

_LOGGER = logging.getLogger(__name__)


def map_trace_cables_to_edges(cables: Sequence[TraceCable], salt: int | str) -> list[VisualEdge]:
    """Build trace edges; each key is salted with the request and list position."""

    return [
        VisualEdge(
            key=EdgeKey(
                EDGE_KIND_TRACE,
                cable.cable_id,
                f"{cable.from_port_id}-{cable.to_port_id}-{salt}-{index}",
            ),
            source=str(cable.from_device_id),
            target=str(cable.to_device_id),
            style=STYLE_TRACE,
            link_key=LinkKey.of(cable.from_device_id, cable.to_device_id),
            label=f"{cable.from_device_id} to {cable.to_device_id}",
        )
        for index, cable in enumerate(cables)
    ]


def exclude_trace_overlaps(
    base_edges: Iterable[VisualEdge],
    trace_edges: Iterable[VisualEdge],
) -> list[VisualEdge]:
    """Drop base edges for links that are also drawn as trace edges."""

    trace_links = {edge.link_key for edge in trace_edges if edge.link_key is not None}
    return [edge for edge in base_edges if edge.link_key is None or edge.link_key not in trace_links]


def compose_edges(
    base_edges: Sequence[VisualEdge],
    trace_edges: Sequence[VisualEdge],
    node_ids: set[str],
) -> list[VisualEdge]:
    """Final drawable edges: base edges not covered by the trace, then trace edges.

    Both inputs are restricted to ``node_ids``. The result never holds two
    edges with the same key.
    """

    visible_base = restrict_edges(base_edges, node_ids)
    visible_trace = [
        edge.with_trace_key() if edge.key.kind != EDGE_KIND_TRACE else edge
        for edge in restrict_edges(trace_edges, node_ids)
    ]

    seen: set[EdgeKey] = set()
    composed: list[VisualEdge] = []
    for edge in [*exclude_trace_overlaps(visible_base, visible_trace), *visible_trace]:
        if edge.key in seen:
            _LOGGER.debug("Dropping duplicate edge %s", edge.key)
            continue
        seen.add(edge.key)
        composed.append(edge)
    return composed
