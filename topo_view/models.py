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
"""Data models for topo-view."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping, Sequence

TYPE_PC = "pc"
TYPE_SWITCH = "switch"
TYPE_SERVER = "server"
TYPE_ROUTER = "router"
DEVICE_TYPES = (TYPE_PC, TYPE_SWITCH, TYPE_SERVER, TYPE_ROUTER)

STATUS_ONLINE = "online"
STATUS_OFFLINE = "offline"
STATUS_UNSTABLE = "unstable"
STATUS_UNKNOWN = "unknown"
STATUS_UNREACHABLE = "unreachable"
DEVICE_STATUSES = (
    STATUS_ONLINE,
    STATUS_OFFLINE,
    STATUS_UNSTABLE,
    STATUS_UNKNOWN,
    STATUS_UNREACHABLE,
)

# Top-level aggregation point of the network.
TOP_HUB_TYPE = TYPE_SERVER
# Concentrator whose endpoints are revealed when the view zooms in on it.
INTERMEDIATE_HUB_TYPE = TYPE_SWITCH
# Types re-centred on their neighbours after layout.
STRUCTURAL_HUB_TYPES = (TYPE_SERVER, TYPE_SWITCH)
LEAF_TYPES = (TYPE_PC,)

STYLE_BASE = "base"
STYLE_TRACE = "trace"

EDGE_KIND_CABLE = "cable"
EDGE_KIND_TRACE = "trace"


class LayoutMode(str, Enum):
    """Placement strategy for the diagram."""

    RADIAL = "radial"
    HIERARCHICAL = "hierarchical"


@dataclass(frozen=True)
class Device:
    """Device record from the device feed."""

    device_id: int
    name: str
    device_type: str
    status: str = STATUS_UNKNOWN
    ip_address: str | None = None
    rack_id: int | None = None

    @property
    def node_id(self) -> str:
        return str(self.device_id)


@dataclass(frozen=True)
class Cable:
    """Undirected physical link between two devices."""

    cable_id: str
    from_device_id: int
    to_device_id: int
    description: str | None = None


@dataclass(frozen=True)
class Position:
    """Point in graph space."""

    x: float
    y: float

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


ORIGIN = Position(0.0, 0.0)


@dataclass(frozen=True, order=True)
class LinkKey:
    """Correlation key for a physical link: the unordered pair of device ids."""

    node_a: str
    node_b: str

    @classmethod
    def of(cls, node_a: str | int, node_b: str | int) -> LinkKey:
        left, right = str(node_a), str(node_b)
        if left <= right:
            return cls(left, right)
        return cls(right, left)


@dataclass(frozen=True, order=True)
class EdgeKey:
    """Composite edge identity: kind, cable or trace id, uniqueness salt."""

    kind: str
    ident: str
    salt: str = ""

    def with_kind(self, kind: str) -> EdgeKey:
        return EdgeKey(kind=kind, ident=self.ident, salt=self.salt)

    def __str__(self) -> str:
        if self.salt:
            return f"{self.kind}:{self.ident}:{self.salt}"
        return f"{self.kind}:{self.ident}"


@dataclass
class VisualNode:
    """Renderable node derived from a device."""

    node_id: str
    label: str
    device_type: str
    status: str
    ip_address: str | None = None
    position: Position = ORIGIN
    highlighted: bool = False
    center_aligned: bool = False
    selected: bool = False

    @property
    def is_leaf(self) -> bool:
        return self.device_type in LEAF_TYPES


@dataclass(frozen=True)
class VisualEdge:
    """Renderable edge between two visual nodes."""

    key: EdgeKey
    source: str
    target: str
    style: str = STYLE_BASE
    link_key: LinkKey | None = None
    label: str = ""

    def touches(self, node_id: str) -> bool:
        return node_id in (self.source, self.target)

    def opposite(self, node_id: str) -> str:
        return self.target if self.source == node_id else self.source

    def with_trace_key(self) -> VisualEdge:
        """Copy re-keyed and styled as a trace edge."""

        return replace(self, key=self.key.with_kind(EDGE_KIND_TRACE), style=STYLE_TRACE)


@dataclass(frozen=True)
class CenterInfo:
    """Cached centroid of a hub's neighbours."""

    node_id: str
    center: Position
    neighbor_ids: tuple[str, ...]
    original_position: Position


@dataclass(frozen=True)
class ViewportState:
    """Viewport reported by the rendering surface."""

    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0
    width: float = 0.0
    height: float = 0.0
    center_x: float = math.nan
    center_y: float = math.nan

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ViewportState:
        """Build from the ``{x, y, zoom, width, height, centerX, centerY}`` shape."""

        if not isinstance(data, Mapping):
            raise ValueError(f"viewport must be an object, got {type(data).__name__}")

        def _number(name: str, default: float) -> float:
            value = data.get(name)
            if value is None:
                return default
            try:
                return float(value)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"viewport field {name} is not a number: {value!r}") from exc

        return cls(
            x=_number("x", 0.0),
            y=_number("y", 0.0),
            zoom=_number("zoom", 1.0),
            width=_number("width", 0.0),
            height=_number("height", 0.0),
            center_x=_number("centerX", math.nan),
            center_y=_number("centerY", math.nan),
        )

    @property
    def center(self) -> Position | None:
        point = Position(self.center_x, self.center_y)
        return point if point.is_finite() else None


@dataclass(frozen=True)
class ViewState:
    """UI state the filter pipeline is evaluated against."""

    search_query: str = ""
    problem_only: bool = False
    zoom: float = 1.0
    trace_filter: frozenset[str] | None = None
    trace_edges: Sequence[VisualEdge] = field(default_factory=tuple)
    selected_id: str | None = None
    viewport: ViewportState | None = None
    layout_mode: LayoutMode = LayoutMode.RADIAL

    @property
    def effective_zoom(self) -> float:
        """Zoom of the viewport when one is reported, else ``zoom``."""

        return self.viewport.zoom if self.viewport is not None else self.zoom


@dataclass(frozen=True)
class TraceHop:
    """Single hop of a traced path."""

    cable_id: str
    from_device_id: int
    from_device: str
    from_port: str
    to_device_id: int
    to_device: str
    to_port: str


@dataclass(frozen=True)
class TraceCable:
    """Cable on a traced path, with port endpoints."""

    cable_id: str
    from_port_id: int
    from_device_id: int
    to_port_id: int
    to_device_id: int


@dataclass(frozen=True)
class TraceResult:
    """Trace from a device towards the server."""

    start_device_name: str
    success: bool
    path: tuple[TraceHop, ...] = ()
    cables: tuple[TraceCable, ...] = ()
    end_device_name: str | None = None

    def device_ids(self) -> set[str]:
        """Ids of every device on the hop path or the cable list."""

        ids: set[str] = set()
        for hop in self.path:
            ids.add(str(hop.from_device_id))
            ids.add(str(hop.to_device_id))
        for cable in self.cables:
            ids.add(str(cable.from_device_id))
            ids.add(str(cable.to_device_id))
        return ids
