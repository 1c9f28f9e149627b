"""Snapshot workflow dispatch.

The screenshot itself is produced by a GitHub Actions workflow; this module
only starts it through the workflow-dispatch REST endpoint.
"""

import json
import logging
from dataclasses import dataclass
from typing import Dict, Optional

import requests

from kanvas_snapshot.core.config import Settings
from kanvas_snapshot.core.errors import SnapshotTriggerError
from kanvas_snapshot.core.schema.design import is_offline_identifier
from kanvas_snapshot.core.schema.snapshot import SnapshotRequest

logger = logging.getLogger(__name__)

DEFAULT_REPO_OWNER = "layer5labs"
DEFAULT_REPO_NAME = "kubectl-kanvas-snapshot"
DEFAULT_WORKFLOW = "kanvas.yaml"
DEFAULT_BRANCH = "master"

DISPATCH_SUCCESS_CODES = (200, 204)


@dataclass(frozen=True)
class WorkflowTarget:
    owner: str
    repo: str
    workflow: str
    branch: str


def resolve_target(settings: Settings) -> WorkflowTarget:
    """Resolve the workflow coordinates, falling back to the defaults."""
    owner = settings.repo_owner
    if not owner:
        owner = DEFAULT_REPO_OWNER
        logger.info(f"No repository owner specified, using default: {owner}")
    repo = settings.repo_name
    if not repo:
        repo = DEFAULT_REPO_NAME
        logger.info(f"No repository name specified, using default: {repo}")
    workflow = settings.workflow
    if not workflow:
        workflow = DEFAULT_WORKFLOW
        logger.info(f"No workflow ID specified, using default: {workflow}")
    branch = settings.branch
    if not branch:
        branch = DEFAULT_BRANCH
        logger.info(f"No branch specified, using default: {branch}")
    return WorkflowTarget(owner=owner, repo=repo, workflow=workflow, branch=branch)


def workflow_runs_url(settings: Settings) -> str:
    """Web page listing the runs of the snapshot workflow."""
    target = resolve_target(settings)
    return f"https://github.com/{target.owner}/{target.repo}/actions/workflows/{target.workflow}"


class WorkflowDispatcher:
    """Starts the snapshot workflow for a design."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session if session is not None else requests.Session()

    def _headers(self, token: str) -> Dict[str, str]:
        return {
            "Authorization": "Bearer " + token,
            "Accept": "application/vnd.github+json",
            "Content-Type": "application/json",
            "User-Agent": "kubectl-kanvas-snapshot",
        }

    def dispatch_url(self, target: WorkflowTarget) -> str:
        base = self.settings.github_api_url.rstrip("/")
        return f"{base}/repos/{target.owner}/{target.repo}/actions/workflows/{target.workflow}/dispatches"

    def trigger(self, request: SnapshotRequest) -> bool:
        """Dispatch the snapshot workflow.

        Offline identifiers and a missing access token are not errors: they
        are reported and nothing is sent.

        Args:
            request: Design identifier, asset location and token

        Returns:
            True if the workflow was dispatched, False if it was skipped

        Raises:
            SnapshotTriggerError: If the dispatch call fails or GitHub
                answers with anything but 200/204
        """
        if is_offline_identifier(request.identifier):
            logger.warning("Design was created in offline mode. Snapshot generation will be skipped.")
            logger.info("Set MESHERY_TOKEN and make sure Meshery is reachable to generate snapshots.")
            return False

        if not request.access_token:
            logger.warning("GITHUB_TOKEN environment variable not set. Snapshot generation will be skipped.")
            logger.info("Please set GITHUB_TOKEN environment variable to trigger GitHub workflow.")
            return False

        target = resolve_target(self.settings)
        if not request.asset_location:
            logger.info(f"Using default asset location: {request.resolved_asset_location()}")

        url = self.dispatch_url(target)
        payload = {"ref": target.branch, "inputs": request.workflow_inputs()}
        logger.info(f"Triggering GitHub workflow {target.workflow} in {target.owner}/{target.repo}")

        try:
            response = self.session.post(
                url,
                data=json.dumps(payload),
                headers=self._headers(request.access_token),
                timeout=self.settings.timeout_seconds,
            )
        except requests.RequestException as e:
            logger.error(f"Failed to trigger workflow: {e}")
            raise SnapshotTriggerError(str(e)) from e

        try:
            if response.status_code not in DISPATCH_SUCCESS_CODES:
                body = response.text
                logger.error(f"Workflow trigger failed with status {response.status_code}: {body}")
                raise SnapshotTriggerError(
                    f"workflow trigger failed with status {response.status_code}: {body}",
                    status_code=response.status_code,
                )
        finally:
            response.close()

        logger.info("Workflow triggered successfully!")
        return True
