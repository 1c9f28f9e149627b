"""Request models exchanged between the pipeline components."""

from kanvas_snapshot.core.schema.design import (
    OFFLINE_PREFIX,
    SOURCE_TYPE,
    DesignRequest,
    is_offline_identifier,
)
from kanvas_snapshot.core.schema.snapshot import DEFAULT_ASSET_LOCATION_TEMPLATE, SnapshotRequest

__all__ = [
    "DesignRequest",
    "SnapshotRequest",
    "is_offline_identifier",
    "OFFLINE_PREFIX",
    "SOURCE_TYPE",
    "DEFAULT_ASSET_LOCATION_TEMPLATE",
]
