"""Pydantic models for the heap snapshot header.

Only the header is validated; the flat ``nodes``/``edges``/``strings`` arrays
are far too large to run through model validation and are kept as raw lists.

Field lists default to empty so that a snapshot with incomplete metadata
still loads. Missing schema fields surface later as unresolved offsets, which
the cleaner treats as "nothing to remove".
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SnapshotMeta(BaseModel):
    """Field layout and type tables describing the flat arrays."""

    model_config = ConfigDict(extra="allow")

    node_fields: list[str] = Field(default_factory=list, description="Ordered node field names")
    node_types: list[str | list[str]] = Field(
        default_factory=list,
        description="Per-field type info; the 'type' field's entry is the node type enum",
    )
    edge_fields: list[str] = Field(default_factory=list, description="Ordered edge field names")
    edge_types: list[str | list[str]] = Field(
        default_factory=list,
        description="Per-field type info; the 'type' field's entry is the edge type enum",
    )


class SnapshotHeader(BaseModel):
    """The ``snapshot`` object at the top of a heap snapshot file."""

    model_config = ConfigDict(extra="allow")

    meta: SnapshotMeta = Field(default_factory=SnapshotMeta)
    node_count: int = Field(default=0, ge=0, description="Declared number of nodes")
    edge_count: int = Field(default=0, ge=0, description="Declared number of edges")
