"""Snapshot request model."""

from dataclasses import dataclass
from typing import Dict, Optional

DEFAULT_ASSET_LOCATION_TEMPLATE = (
    "https://raw.githubusercontent.com/layer5labs/meshery-extensions-packages/"
    "master/action-assets/kubectl-plugin-assets/{design_id}.png"
)


@dataclass(frozen=True)
class SnapshotRequest:
    """Input of a single snapshot workflow dispatch.

    Attributes:
        identifier: Design identifier returned by Meshery
        access_token: GitHub token used to dispatch the workflow
        asset_location: Where the workflow stores the screenshot (None = default)
        email: Address forwarded to the workflow (optional)
    """
    identifier: str
    access_token: str
    asset_location: Optional[str] = None
    email: Optional[str] = None

    def resolved_asset_location(self) -> str:
        """Return the asset location, templating the default from the identifier."""
        if self.asset_location:
            return self.asset_location
        return DEFAULT_ASSET_LOCATION_TEMPLATE.format(design_id=self.identifier)

    def workflow_inputs(self) -> Dict[str, str]:
        """Inputs map sent with the workflow dispatch."""
        inputs = {
            "designID": self.identifier,
            "assetLocation": self.resolved_asset_location(),
        }
        if self.email:
            inputs["email"] = self.email
        return inputs
