"""Snapshot pipeline: collect manifests, create the design, then publish it.

This module provides the main entry point of the plugin:
- run_pipeline: walks the pipeline states exactly once and returns a
  PipelineResult describing what happened

States::

    INIT -> MANIFESTS_COLLECTED -> DESIGN_SUBMITTED
         -> SNAPSHOT_TRIGGERED | DOWNLOADED_DIRECTLY | SKIPPED -> DONE
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from kanvas_snapshot.core.config import Settings
from kanvas_snapshot.core.errors import InvalidEmailFormatError, OutputWriteError, is_valid_email
from kanvas_snapshot.core.schema.design import is_offline_identifier
from kanvas_snapshot.core.schema.snapshot import SnapshotRequest
from kanvas_snapshot.github.workflow import WorkflowDispatcher
from kanvas_snapshot.k8s.manifests import collect_manifests, design_name_from_path
from kanvas_snapshot.meshery.client import MesheryClient, design_view_url
from kanvas_snapshot.meshery.offline import sanitize_design_name

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    INIT = "init"
    MANIFESTS_COLLECTED = "manifests_collected"
    DESIGN_SUBMITTED = "design_submitted"
    SNAPSHOT_TRIGGERED = "snapshot_triggered"
    DOWNLOADED_DIRECTLY = "downloaded_directly"
    SKIPPED = "skipped"
    DONE = "done"


TERMINAL_BRANCHES = (
    PipelineState.SNAPSHOT_TRIGGERED,
    PipelineState.DOWNLOADED_DIRECTLY,
    PipelineState.SKIPPED,
)


@dataclass(frozen=True)
class PipelineOptions:
    """Per-run inputs taken from the command line.

    Attributes:
        path: Manifest file or directory
        recursive: Descend into nested directories
        name: Design name (None = derived from path)
        email: Notification address (validated before any I/O)
        skip_workflow: Create the design but do not dispatch the workflow
        download: Download the design instead of dispatching the workflow
        output: File the downloaded design is written to
        asset_location: Where the workflow stores the screenshot
    """
    path: str
    recursive: bool = False
    name: Optional[str] = None
    email: Optional[str] = None
    skip_workflow: bool = False
    download: bool = False
    output: Optional[str] = None
    asset_location: Optional[str] = None


@dataclass
class PipelineResult:
    """Outcome of one pipeline run.

    Attributes:
        design_id: Identifier returned by Meshery (or an offline one)
        design_name: Name the design was submitted under
        offline: True if ``design_id`` was synthesized locally
        view_url: Meshery UI URL of the design
        manifest_count: Number of manifest files collected
        snapshot_triggered: True if the workflow dispatch was sent
        asset_location: Where the snapshot will be published
        output_path: File written by the download branch
        states: Every state visited, in order
    """
    design_id: str = ""
    design_name: str = ""
    offline: bool = False
    view_url: str = ""
    manifest_count: int = 0
    snapshot_triggered: bool = False
    asset_location: str = ""
    output_path: Optional[str] = None
    states: List[PipelineState] = field(default_factory=lambda: [PipelineState.INIT])

    @property
    def state(self) -> PipelineState:
        return self.states[-1]

    @property
    def branch(self) -> Optional[PipelineState]:
        """The terminal branch taken after the design was submitted."""
        for state in self.states:
            if state in TERMINAL_BRANCHES:
                return state
        return None

    def advance(self, state: PipelineState) -> None:
        if state in self.states:
            raise RuntimeError(f"Pipeline state '{state.value}' entered twice")
        logger.debug(f"Pipeline: {self.state.value} -> {state.value}")
        self.states.append(state)


def default_output_path(design_name: str) -> Path:
    return Path(f"{sanitize_design_name(design_name)}.yaml")


def run_pipeline(
    options: PipelineOptions,
    settings: Settings,
    meshery_client: Optional[MesheryClient] = None,
    dispatcher: Optional[WorkflowDispatcher] = None,
) -> PipelineResult:
    """Run the snapshot pipeline once.

    Args:
        options: Per-run inputs
        settings: Process-wide settings
        meshery_client: Client for Meshery (default: built from settings)
        dispatcher: Workflow dispatcher (default: built from settings)

    Returns:
        PipelineResult in state DONE

    Raises:
        InvalidEmailFormatError: If the email is malformed
        ManifestReadError: If manifests cannot be collected
        PayloadEncodingError: If the design request cannot be encoded
        DesignCreationError: If submission fails in strict mode
        HTTPRequestError: If the download fails in strict mode
        OutputWriteError: If the downloaded design cannot be written
        SnapshotTriggerError: If the workflow dispatch fails
    """
    result = PipelineResult()

    email = options.email or ""
    if email and not is_valid_email(email):
        raise InvalidEmailFormatError(email)
    notify_email = email if email and settings.notify_on_completion else None

    design_name = options.name
    if not design_name:
        design_name = design_name_from_path(options.path) or settings.snapshot_name
        logger.warning(f"No design name provided. Using extracted name: {design_name}")
    result.design_name = design_name

    logger.info("Processing manifest files...")
    manifests = collect_manifests(options.path, recursive=options.recursive)
    result.manifest_count = len(manifests)
    result.advance(PipelineState.MANIFESTS_COLLECTED)
    logger.info(f"Processed {len(manifests)} manifest file(s)")

    combined = manifests.combined()
    logger.debug(f"Manifest size: {len(combined)} bytes")

    client = meshery_client or MesheryClient(settings)
    source = Path(options.path)
    logger.info("Creating Meshery design...")
    result.design_id = client.submit(
        combined,
        design_name,
        email=notify_email,
        file_name=source.name if source.is_file() else None,
    )
    result.offline = is_offline_identifier(result.design_id)
    result.view_url = design_view_url(settings.api_base_url, result.design_id)
    result.advance(PipelineState.DESIGN_SUBMITTED)
    if not result.offline:
        logger.info(f"View your design in Meshery: {result.view_url}")

    if options.download:
        output_path = Path(options.output) if options.output else default_output_path(design_name)
        download = client.download(result.design_id, fallback_content=combined)
        try:
            output_path.write_text(download.content, encoding="utf-8")
        except OSError as e:
            raise OutputWriteError(str(e), path=str(output_path)) from e
        result.output_path = str(output_path)
        logger.info(f"Wrote design to: {output_path}")
        result.advance(PipelineState.DOWNLOADED_DIRECTLY)
    elif options.skip_workflow:
        logger.info("Skipping publishing as --skip-workflow flag is set.")
        result.advance(PipelineState.SKIPPED)
    else:
        dispatcher = dispatcher or WorkflowDispatcher(settings)
        request = SnapshotRequest(
            identifier=result.design_id,
            access_token=settings.workflow_access_token,
            asset_location=options.asset_location,
            email=notify_email,
        )
        result.snapshot_triggered = dispatcher.trigger(request)
        if result.snapshot_triggered:
            result.asset_location = request.resolved_asset_location()
        result.advance(PipelineState.SNAPSHOT_TRIGGERED)

    result.advance(PipelineState.DONE)
    return result
