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
"""View engine configuration."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from topo_view.models import TYPE_PC, TYPE_ROUTER, TYPE_SERVER, TYPE_SWITCH, Position

_DEFAULT_CENTER_BOXES: dict[str, tuple[float, float]] = {
    TYPE_SERVER: (58.0, 80.0),
    TYPE_SWITCH: (48.0, 72.0),
    TYPE_ROUTER: (48.0, 72.0),
    TYPE_PC: (48.0, 72.0),
}


@dataclass(frozen=True)
class ViewConfig:
    """Geometry and filter thresholds for the topology view."""

    origin: Position = Position(800.0, 500.0)
    node_width: float = 180.0
    node_height: float = 60.0
    core_ring_radius: float = 300.0
    hub_ring_radius: float = 1000.0
    leaf_ring_base: float = 150.0
    leaf_ring_step: float = 5.0
    grid_spacing_x: float = 220.0
    grid_spacing_y: float = 120.0
    grid_columns: int = 8
    rank_spacing: float = 100.0
    node_spacing: float = 80.0
    center_boxes: dict[str, tuple[float, float]] = field(
        default_factory=lambda: dict(_DEFAULT_CENTER_BOXES)
    )
    zoom_hide_leaf: float = 0.7
    smart_reveal_zoom: float = 1.0
    smart_reveal_radius: float = 900.0

    def center_box(self, device_type: str) -> tuple[float, float]:
        return self.center_boxes.get(device_type, self.center_boxes.get(TYPE_PC, (48.0, 72.0)))


def load_view_config(path: str | Path) -> ViewConfig:
    """Load a JSON object of overrides on top of the default configuration."""

    with Path(path).open(encoding="utf-8") as handle:
        try:
            data = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return apply_overrides(ViewConfig(), data, source=str(path))


def apply_overrides(config: ViewConfig, overrides: dict[str, Any], source: str = "config") -> ViewConfig:
    """Return a copy of ``config`` with validated overrides applied."""

    known = {item.name for item in fields(ViewConfig)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValueError(f"{source} has unknown keys: {', '.join(unknown)}")

    changes: dict[str, Any] = {}
    for name, value in overrides.items():
        if name == "origin":
            changes[name] = _parse_origin(source, value)
        elif name == "center_boxes":
            changes[name] = _parse_center_boxes(source, config, value)
        elif name == "grid_columns":
            if not isinstance(value, int) or value < 1:
                raise ValueError(f"{source}: grid_columns must be a positive integer")
            changes[name] = value
        else:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{source}: {name} must be a number")
            changes[name] = float(value)
    return replace(config, **changes)


def _parse_origin(source: str, value: Any) -> Position:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"{source}: origin must be a pair of numbers")
    return Position(float(value[0]), float(value[1]))


def _parse_center_boxes(
    source: str, config: ViewConfig, value: Any
) -> dict[str, tuple[float, float]]:
    if not isinstance(value, dict):
        raise ValueError(f"{source}: center_boxes must be an object")
    boxes = dict(config.center_boxes)
    for device_type, box in value.items():
        if not isinstance(box, (list, tuple)) or len(box) != 2:
            raise ValueError(f"{source}: center box for {device_type} must be [width, height]")
        boxes[str(device_type).lower()] = (float(box[0]), float(box[1]))
    return boxes
