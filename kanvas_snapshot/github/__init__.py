"""GitHub Actions integration: dispatches the workflow that renders snapshots."""

from kanvas_snapshot.github.workflow import WorkflowDispatcher, WorkflowTarget, resolve_target, workflow_runs_url

__all__ = ["WorkflowDispatcher", "WorkflowTarget", "resolve_target", "workflow_runs_url"]
