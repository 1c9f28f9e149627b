"""Meshery API integration.

Submits designs, downloads stored designs and resolves design identifiers
from the loosely structured responses the Meshery API returns.
"""

from kanvas_snapshot.meshery.client import DesignDownload, MesheryClient, design_view_url
from kanvas_snapshot.meshery.extraction import extract_design_id
from kanvas_snapshot.meshery.offline import offline_identifier

__all__ = [
    "MesheryClient",
    "DesignDownload",
    "design_view_url",
    "extract_design_id",
    "offline_identifier",
]
