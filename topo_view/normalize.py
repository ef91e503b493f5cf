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
"""Normalization utilities for device feed values."""

from __future__ import annotations

import re

from topo_view.models import (
    DEVICE_STATUSES,
    STATUS_UNKNOWN,
    TYPE_PC,
    TYPE_ROUTER,
    TYPE_SERVER,
    TYPE_SWITCH,
)

_TYPE_PREFIX_MAP: tuple[tuple[str, str], ...] = (
    (r"^server", TYPE_SERVER),
    (r"^srv", TYPE_SERVER),
    (r"^switch", TYPE_SWITCH),
    (r"^sw", TYPE_SWITCH),
    (r"^router", TYPE_ROUTER),
    (r"^rtr", TYPE_ROUTER),
    (r"^pc", TYPE_PC),
    (r"^workstation", TYPE_PC),
)


def normalize_device_type(raw_type: str | None) -> str:
    """Normalize a device type tag; anything unrecognised is treated as a pc."""

    if not raw_type:
        return TYPE_PC

    cleaned = re.sub(r"\s+", "", raw_type.strip()).lower()
    for pattern, device_type in _TYPE_PREFIX_MAP:
        if re.match(pattern, cleaned):
            return device_type

    return TYPE_PC


def normalize_status(raw_status: str | None) -> str:
    """Normalize a connectivity status to one of the known values."""

    if not raw_status:
        return STATUS_UNKNOWN

    lowered = raw_status.strip().lower()
    if lowered in DEVICE_STATUSES:
        return lowered
    return STATUS_UNKNOWN


def normalize_ip(raw_ip: str | None) -> str | None:
    """Strip an IP string; empty values become None."""

    if raw_ip is None:
        return None
    cleaned = raw_ip.strip()
    return cleaned or None
