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
"""Trace feeds: payload parsing, the HTTP trace API and a local path finder."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol, Sequence

import httpx
import networkx as nx

from topo_view.models import (
    TOP_HUB_TYPE,
    Cable,
    Device,
    TraceCable,
    TraceHop,
    TraceResult,
)

_LOGGER = logging.getLogger(__name__)

_HOP_REQUIRED_FIELDS = ("cableId", "fromDeviceId", "toDeviceId")
_CABLE_REQUIRED_FIELDS = ("cableId", "fromDeviceId", "toDeviceId")


class TraceRequestError(RuntimeError):
    """Raised when a trace cannot be obtained for a device."""


class TraceFeed(Protocol):
    """Source of trace results for a device."""

    async def fetch_trace(self, device_id: int) -> TraceResult:
        ...


def parse_trace_payload(payload: Mapping[str, Any]) -> TraceResult:
    """Parse a trace API payload (camelCase JSON) into a TraceResult."""

    if not isinstance(payload, Mapping):
        raise ValueError("trace payload is not an object")

    path_records = payload.get("path") or []
    cable_records = payload.get("cables") or []
    if not isinstance(path_records, list) or not isinstance(cable_records, list):
        raise ValueError("trace payload path and cables must be arrays")

    hops = tuple(_parse_hop(index, record) for index, record in enumerate(path_records))
    cables = tuple(_parse_cable(index, record) for index, record in enumerate(cable_records))
    end_device = payload.get("endDeviceName")
    return TraceResult(
        start_device_name=str(payload.get("startDeviceName") or ""),
        success=bool(payload.get("success", True)),
        path=hops,
        cables=cables,
        end_device_name=str(end_device) if end_device else None,
    )


def _parse_hop(index: int, record: Mapping[str, Any]) -> TraceHop:
    _require(f"path[{index}]", record, _HOP_REQUIRED_FIELDS)
    return TraceHop(
        cable_id=str(record["cableId"]),
        from_device_id=_as_int(f"path[{index}].fromDeviceId", record["fromDeviceId"]),
        from_device=str(record.get("fromDevice") or ""),
        from_port=str(record.get("fromPort") or ""),
        to_device_id=_as_int(f"path[{index}].toDeviceId", record["toDeviceId"]),
        to_device=str(record.get("toDevice") or ""),
        to_port=str(record.get("toPort") or ""),
    )


def _parse_cable(index: int, record: Mapping[str, Any]) -> TraceCable:
    _require(f"cables[{index}]", record, _CABLE_REQUIRED_FIELDS)
    return TraceCable(
        cable_id=str(record["cableId"]),
        from_port_id=_as_int(f"cables[{index}].fromPortId", record.get("fromPortId", 0)),
        from_device_id=_as_int(f"cables[{index}].fromDeviceId", record["fromDeviceId"]),
        to_port_id=_as_int(f"cables[{index}].toPortId", record.get("toPortId", 0)),
        to_device_id=_as_int(f"cables[{index}].toDeviceId", record["toDeviceId"]),
    )


def _require(where: str, record: Mapping[str, Any], required: tuple[str, ...]) -> None:
    if not isinstance(record, Mapping):
        raise ValueError(f"trace payload {where} is not an object")
    missing = [name for name in required if record.get(name) is None]
    if missing:
        raise ValueError(f"trace payload {where} is missing fields: {', '.join(missing)}")


def _as_int(where: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"trace payload {where} is not an integer: {value!r}") from exc


class HttpTraceFeed:
    """Trace feed backed by ``GET /api/trace/{deviceId}``."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    async def fetch_trace(self, device_id: int) -> TraceResult:
        path = f"/api/trace/{device_id}"
        _LOGGER.debug("Requesting trace %s%s", self._base_url, path)
        try:
            if self._client is not None:
                response = await self._client.get(path)
            else:
                async with httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout) as client:
                    response = await client.get(path)
        except httpx.TimeoutException as exc:
            raise TraceRequestError(f"trace request for device {device_id} timed out") from exc
        except httpx.HTTPError as exc:
            raise TraceRequestError(f"trace request for device {device_id} failed: {exc}") from exc

        if response.is_error:
            raise TraceRequestError(
                f"trace request for device {device_id} failed: "
                f"HTTP {response.status_code} {_error_message(response)}".rstrip()
            )

        try:
            result = parse_trace_payload(response.json())
        except ValueError as exc:
            raise TraceRequestError(f"invalid trace payload for device {device_id}: {exc}") from exc

        if not result.success:
            raise TraceRequestError(f"no path found from device {device_id}")
        return result


def _error_message(response: httpx.Response) -> str:
    """Message field of an error body, if the body carries one."""

    try:
        body = response.json()
    except ValueError:
        return ""
    if isinstance(body, dict):
        return str(body.get("message") or body.get("details") or "")
    return ""


class LocalTraceFeed:
    """Trace feed that walks the cable graph to the nearest server."""

    def __init__(
        self,
        devices: Sequence[Device],
        cables: Sequence[Cable],
        max_depth: int = 20,
    ) -> None:
        self._devices = {device.device_id: device for device in devices}
        self._order = {device.device_id: index for index, device in enumerate(devices)}
        self._max_depth = max_depth
        self._graph = nx.Graph()
        for cable in cables:
            self._graph.add_edge(cable.from_device_id, cable.to_device_id, cable_id=cable.cable_id)

    async def fetch_trace(self, device_id: int) -> TraceResult:
        return self.trace(device_id)

    def trace(self, device_id: int) -> TraceResult:
        """Shortest cable path from ``device_id`` to a server."""

        start = self._devices.get(device_id)
        if start is None:
            raise TraceRequestError(f"starting device {device_id} not found")
        if start.device_type == TOP_HUB_TYPE:
            return TraceResult(
                start_device_name=start.name,
                success=True,
                end_device_name=start.name,
            )
        if device_id not in self._graph:
            raise TraceRequestError(f"device {device_id} has no cables")

        paths = nx.single_source_shortest_path(self._graph, device_id, cutoff=self._max_depth)
        candidates = [
            node
            for node in paths
            if node in self._devices and self._devices[node].device_type == TOP_HUB_TYPE
        ]
        if not candidates:
            raise TraceRequestError(f"no path to a {TOP_HUB_TYPE} from device {device_id}")

        target = min(candidates, key=lambda node: (len(paths[node]), self._order[node]))
        route = paths[target]
        _LOGGER.debug("Traced device %s to %s in %d hops", device_id, target, len(route) - 1)

        hops: list[TraceHop] = []
        cables: list[TraceCable] = []
        for left, right in zip(route, route[1:]):
            cable_id = str(self._graph.edges[left, right]["cable_id"])
            hops.append(
                TraceHop(
                    cable_id=cable_id,
                    from_device_id=left,
                    from_device=self._name(left),
                    from_port="",
                    to_device_id=right,
                    to_device=self._name(right),
                    to_port="",
                )
            )
            cables.append(
                TraceCable(
                    cable_id=cable_id,
                    from_port_id=0,
                    from_device_id=left,
                    to_port_id=0,
                    to_device_id=right,
                )
            )

        return TraceResult(
            start_device_name=start.name,
            success=True,
            path=tuple(hops),
            cables=tuple(cables),
            end_device_name=self._name(target),
        )

    def _name(self, device_id: int) -> str:
        device = self._devices.get(device_id)
        return device.name if device is not None else str(device_id)
