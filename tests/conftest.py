"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from tests.fixtures.snapshots import MINIMAL_META, build_snapshot


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def scenario_snapshot() -> dict[str, Any]:
    """Three nodes: a WeakMap with 2 edges, Foo with 1 edge, a native with none."""
    return build_snapshot(
        [
            ("object", "WeakMap", 2),
            ("object", "Foo", 1),
            ("native", "Bar", 0),
        ],
        meta=MINIMAL_META,
    )


@pytest.fixture
def mixed_snapshot() -> dict[str, Any]:
    """V8-layout snapshot mixing every weak-retainer kind with ordinary nodes."""
    return build_snapshot(
        [
            ("synthetic", "(GC roots)", 3),
            ("object", "Foo", 2),
            ("object", "WeakSet", 1),
            ("closure", "WeakMap", 2),
            ("object", "WeakRef", 3),
            ("string", "WeakMap", 0),
            ("object", "DebugWeakCache", 1),
            ("object", "Bar", 0),
            ("object", "DebugWeakMap", 2),
            ("array", "(object elements)", 1),
        ],
        extra={
            "trace_function_infos": [],
            "samples": [],
            "locations": [5, 1, 10, 2],
        },
    )


@pytest.fixture
def clean_snapshot() -> dict[str, Any]:
    """Snapshot with no weak retainers at all."""
    return build_snapshot(
        [
            ("object", "Foo", 1),
            ("object", "Bar", 2),
            ("native", "WeakMap", 1),
        ]
    )


@pytest.fixture
def write_json(tmp_path: Path):
    """Write a document to a file under tmp_path and return its path."""

    def _write(document: dict[str, Any], name: str = "heap.heapsnapshot") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write
