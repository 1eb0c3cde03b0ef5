# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Services package - State ownership, persistence and response formatting.
"""

from .store import StateStore
from .persistence import (
    STORAGE_KEY,
    SnapshotBackend,
    MemorySnapshotBackend,
    FileSnapshotBackend,
    RedisSnapshotBackend,
    create_backend,
    decode_snapshot,
    encode_snapshot
)
from .seed import seed_state
from .hal import HalFormatter, create_hal_formatter

__all__ = [
    "StateStore",
    "STORAGE_KEY",
    "SnapshotBackend",
    "MemorySnapshotBackend",
    "FileSnapshotBackend",
    "RedisSnapshotBackend",
    "create_backend",
    "decode_snapshot",
    "encode_snapshot",
    "seed_state",
    "HalFormatter",
    "create_hal_formatter"
]
