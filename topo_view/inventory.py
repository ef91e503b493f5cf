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
"""Device and cable feed parsing."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Sequence

import httpx

from topo_view.models import Cable, Device
from topo_view.normalize import normalize_device_type, normalize_ip, normalize_status

_LOGGER = logging.getLogger(__name__)

_DEVICE_REQUIRED_FIELDS = ("deviceId", "name")
_CABLE_REQUIRED_FIELDS = ("cableId", "fromDeviceId", "toDeviceId")


def parse_devices(records: Sequence[Mapping[str, Any]], source: str = "device feed") -> list[Device]:
    """Parse device feed records."""

    devices: list[Device] = []
    for index, record in enumerate(records):
        _validate_record(source, index, record, _DEVICE_REQUIRED_FIELDS)
        rack_id = record.get("rackId")
        devices.append(
            Device(
                device_id=_as_int(source, index, "deviceId", record["deviceId"]),
                name=str(record["name"]).strip(),
                device_type=normalize_device_type(_as_text(source, index, "type", record.get("type"))),
                status=normalize_status(_as_text(source, index, "status", record.get("status"))),
                ip_address=normalize_ip(_as_text(source, index, "ipAddress", record.get("ipAddress"))),
                rack_id=_as_int(source, index, "rackId", rack_id) if rack_id is not None else None,
            )
        )
    return devices


def parse_cables(records: Sequence[Mapping[str, Any]], source: str = "cable feed") -> list[Cable]:
    """Parse cable feed records."""

    cables: list[Cable] = []
    for index, record in enumerate(records):
        _validate_record(source, index, record, _CABLE_REQUIRED_FIELDS)
        description = record.get("description")
        cables.append(
            Cable(
                cable_id=str(record["cableId"]).strip(),
                from_device_id=_as_int(source, index, "fromDeviceId", record["fromDeviceId"]),
                to_device_id=_as_int(source, index, "toDeviceId", record["toDeviceId"]),
                description=str(description) if description else None,
            )
        )
    return cables


def load_devices(path: str | Path) -> list[Device]:
    """Load the device feed from a JSON file."""

    return parse_devices(_load_json_list(path), source=str(path))


def load_cables(path: str | Path) -> list[Cable]:
    """Load the cable feed from a JSON file."""

    return parse_cables(_load_json_list(path), source=str(path))


def fetch_inventory(
    base_url: str,
    timeout: float = 10.0,
    client: httpx.Client | None = None,
) -> tuple[list[Device], list[Cable]]:
    """Fetch device and cable feeds from the REST collaborator."""

    owns_client = client is None
    http = client or httpx.Client(base_url=base_url, timeout=timeout)
    try:
        device_records = _get_json_list(http, "/api/device")
        cable_records = _get_json_list(http, "/api/cable")
    finally:
        if owns_client:
            http.close()

    devices = parse_devices(device_records, source=f"{base_url}/api/device")
    cables = parse_cables(cable_records, source=f"{base_url}/api/cable")
    _LOGGER.info("Fetched %s devices and %s cables", len(devices), len(cables))
    return devices, cables


def _get_json_list(client: httpx.Client, path: str) -> list[Mapping[str, Any]]:
    response = client.get(path)
    response.raise_for_status()
    data = response.json()
    if not isinstance(data, list):
        raise ValueError(f"{path} did not return a JSON array")
    return data


def _load_json_list(path: str | Path) -> list[Mapping[str, Any]]:
    with Path(path).open(encoding="utf-8") as handle:
        try:
            data = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array")
    return data


def _validate_record(
    source: str,
    index: int,
    record: Mapping[str, Any],
    required: tuple[str, ...],
) -> None:
    """Ensure required record fields are populated."""

    if not isinstance(record, Mapping):
        raise ValueError(f"{source} record {index} is not an object")
    missing = [name for name in required if record.get(name) in (None, "")]
    if missing:
        raise ValueError(f"{source} record {index} is missing required fields: {', '.join(missing)}")


def _as_int(source: str, index: int, name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{source} record {index} has non-integer {name}: {value!r}") from exc


def _as_text(source: str, index: int, name: str, value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    raise ValueError(f"{source} record {index} has non-string {name}: {value!r}")
