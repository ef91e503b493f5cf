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
"""Centroid alignment of hub nodes onto their neighbours."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Sequence

from topo_view.config import ViewConfig
from topo_view.models import (
    STRUCTURAL_HUB_TYPES,
    CenterInfo,
    EdgeKey,
    Position,
    VisualEdge,
    VisualNode,
)

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class EdgeSignature:
    """Cheap identity of an edge list: length plus first and last keys."""

    count: int
    first: EdgeKey | None
    last: EdgeKey | None

    @classmethod
    def of(cls, edges: Sequence[VisualEdge]) -> EdgeSignature:
        if not edges:
            return cls(0, None, None)
        return cls(len(edges), edges[0].key, edges[-1].key)


class EdgeIndex:
    """Incident edges per node id, rebuilt only when the signature changes."""

    def __init__(self) -> None:
        self._index: dict[str, list[VisualEdge]] = {}
        self._signature: EdgeSignature | None = None
        self.builds = 0

    @property
    def signature(self) -> EdgeSignature | None:
        return self._signature

    def refresh(self, edges: Sequence[VisualEdge]) -> bool:
        """Rebuild for ``edges`` if needed; returns True when rebuilt."""

        signature = EdgeSignature.of(edges)
        if signature == self._signature:
            return False

        index: dict[str, list[VisualEdge]] = {}
        for edge in edges:
            index.setdefault(edge.source, []).append(edge)
            if edge.target != edge.source:
                index.setdefault(edge.target, []).append(edge)
        self._index = index
        self._signature = signature
        self.builds += 1
        return True

    def incident(self, node_id: str) -> list[VisualEdge]:
        return self._index.get(node_id, [])

    def clear(self) -> None:
        self._index = {}
        self._signature = None


class CenterCache:
    """Computed centroids keyed by node id."""

    def __init__(self) -> None:
        self._entries: dict[str, CenterInfo] = {}

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, node_id: str) -> CenterInfo | None:
        return self._entries.get(node_id)

    def put(self, info: CenterInfo) -> None:
        self._entries[info.node_id] = info

    def clear(self) -> None:
        self._entries.clear()


class CentroidAligner:
    """Moves structural hubs to the centroid of their connected neighbours.

    The edge index and the centroid cache survive between calls. Both are
    dropped wholesale when the edge signature changes; a change that keeps
    length and end keys intact is not detected.
    """

    def __init__(
        self,
        config: ViewConfig | None = None,
        hub_types: Sequence[str] = STRUCTURAL_HUB_TYPES,
    ) -> None:
        self._config = config or ViewConfig()
        self._hub_types = tuple(hub_types)
        self.edge_index = EdgeIndex()
        self.cache = CenterCache()
        self.computed = 0

    def compute_centers(
        self,
        nodes: Sequence[VisualNode],
        edges: Sequence[VisualEdge],
    ) -> dict[str, CenterInfo]:
        """Centroid info for every hub that has at least one valid neighbour."""

        if self.edge_index.refresh(edges):
            if len(self.cache):
                _LOGGER.debug("Edge signature changed, dropping %d cached centres", len(self.cache))
            self.cache.clear()

        node_map = {node.node_id: node for node in nodes}
        centers: dict[str, CenterInfo] = {}
        for node in nodes:
            if node.device_type not in self._hub_types:
                continue
            info = self.cache.get(node.node_id)
            if info is None:
                info = self._compute(node, node_map)
                if info is None:
                    continue
                self.cache.put(info)
            centers[node.node_id] = info
        return centers

    def align(
        self,
        nodes: Sequence[VisualNode],
        edges: Sequence[VisualEdge],
    ) -> list[VisualNode]:
        """Return nodes with hubs re-anchored on their neighbours' centroid."""

        centers = self.compute_centers(nodes, edges)
        if not centers:
            return list(nodes)

        aligned: list[VisualNode] = []
        for node in nodes:
            info = centers.get(node.node_id)
            if info is None:
                aligned.append(node)
                continue
            width, height = self._config.center_box(node.device_type)
            aligned.append(
                replace(
                    node,
                    position=Position(info.center.x - width / 2, info.center.y - height / 2),
                    center_aligned=True,
                )
            )
        _LOGGER.debug("Aligned %d hub nodes to neighbour centroids", len(centers))
        return aligned

    def invalidate(self) -> None:
        """Drop the edge index and every cached centroid."""

        self.edge_index.clear()
        self.cache.clear()

    def _compute(self, node: VisualNode, node_map: dict[str, VisualNode]) -> CenterInfo | None:
        xs: list[float] = []
        ys: list[float] = []
        neighbor_ids: list[str] = []
        for edge in self.edge_index.incident(node.node_id):
            other = node_map.get(edge.opposite(node.node_id))
            if other is None or other.node_id == node.node_id:
                continue
            if not other.position.is_finite():
                continue
            xs.append(other.position.x)
            ys.append(other.position.y)
            neighbor_ids.append(other.node_id)

        if not neighbor_ids:
            return None

        self.computed += 1
        return CenterInfo(
            node_id=node.node_id,
            center=Position(sum(xs) / len(xs), sum(ys) / len(ys)),
            neighbor_ids=tuple(neighbor_ids),
            original_position=node.position,
        )
