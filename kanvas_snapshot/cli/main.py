"""kanvas-snapshot CLI - kubectl plugin entrypoint.

This module provides the ``kubectl kanvas-snapshot`` command, which turns
Kubernetes manifests into a Meshery design and triggers a snapshot of it.
"""

import argparse
import logging
import sys
from typing import List, Optional

from kanvas_snapshot.core.config import load_config, load_settings
from kanvas_snapshot.core.errors import KanvasSnapshotError, format_error
from kanvas_snapshot.core.pipeline import PipelineOptions, PipelineResult, PipelineState, run_pipeline
from kanvas_snapshot.github.workflow import workflow_runs_url

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kubectl kanvas-snapshot",
        description="Generate a Kanvas snapshot using Kubernetes manifests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Snapshot a single manifest and get notified by email
  kubectl kanvas-snapshot -f ./manifests/deployment.yaml -e your-email@example.com --name my-deployment

  # Snapshot every manifest in a directory tree
  kubectl kanvas-snapshot -f ./manifests/ --recursive --name my-project

  # Create the design only, without triggering the snapshot workflow
  kubectl kanvas-snapshot -f ./manifests/ --skip-workflow

  # Download the stored design instead of triggering the workflow
  kubectl kanvas-snapshot -f ./manifests/ --download -o design.yaml

Environment:
  MESHERY_TOKEN      Meshery provider token
  MESHERY_API_URL    Meshery server URL
  MESHERY_CLOUD_URL  Meshery Cloud URL
  GITHUB_TOKEN       Token used to dispatch the snapshot workflow
  Unset variables are read from a local .env file if present.
"""
    )
    parser.add_argument(
        "-f", "--file",
        required=True,
        help="Path to Kubernetes manifest file or directory (required)"
    )
    parser.add_argument(
        "-r", "--recursive",
        action="store_true",
        help="Process manifest files recursively in directories"
    )
    parser.add_argument(
        "-n", "--name",
        help="Name for the Meshery design (default: extracted from manifest path)"
    )
    parser.add_argument(
        "-e", "--email",
        help="Email address for notifications when the design is ready"
    )
    parser.add_argument(
        "-s", "--skip-workflow",
        action="store_true",
        help="Create the design but skip triggering the snapshot workflow"
    )
    parser.add_argument(
        "-d", "--download",
        action="store_true",
        help="Download the design to a local file instead of triggering the workflow"
    )
    parser.add_argument(
        "-o", "--output",
        help="Output file for --download (default: <name>.yaml)"
    )
    parser.add_argument(
        "-m", "--meshery-url",
        help="Meshery API URL (default: from config or http://localhost:9081)"
    )
    parser.add_argument(
        "-t", "--meshery-token",
        help="Meshery authentication token (default: MESHERY_TOKEN)"
    )
    parser.add_argument("--repo-owner", help="GitHub repository owner (default: layer5labs)")
    parser.add_argument("--repo-name", help="GitHub repository name (default: kubectl-kanvas-snapshot)")
    parser.add_argument("--branch", help="GitHub repository branch (default: master)")
    parser.add_argument("--workflow", help="GitHub workflow file or ID (default: kanvas.yaml)")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail instead of falling back to offline mode when Meshery is unreachable or rejects the request"
    )
    parser.add_argument(
        "--config",
        help="Path to config.yaml (default: config/config.yaml, then ~/.meshery/kubectl-kanvas-snapshot/config.yaml)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )
    return parser


def print_summary(result: PipelineResult, runs_url: str) -> None:
    """Print the end-of-run report."""
    if result.offline:
        print(f"\n⚠ Design created in offline mode with ID: {result.design_id}")
        print("   Set MESHERY_TOKEN and check the Meshery URL to create the design remotely.")
    else:
        print(f"\n✅ Design created successfully with ID: {result.design_id}")
        print(f"   View your design in Meshery: {result.view_url}")

    if result.branch == PipelineState.DOWNLOADED_DIRECTLY:
        print(f"   Wrote design to: {result.output_path}")
    elif result.branch == PipelineState.SKIPPED:
        print("   Snapshot workflow skipped (--skip-workflow)")
    elif result.snapshot_triggered:
        print("   GitHub workflow has been triggered to generate a snapshot.")
        print(f"   Your design snapshot will be available at: {result.asset_location}")
        print("\nTo access the snapshot images:")
        print(f"1. Go to {runs_url}")
        print(f"2. Find the most recent workflow run for designID: {result.design_id}")
        print("3. Wait for the workflow run to complete (~1-2 minutes)")
        print("4. Download the 'design-screenshots' artifact from the completed workflow")
    else:
        print("   Snapshot workflow was not triggered.")


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entrypoint for kanvas-snapshot."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging
    if args.verbose:
        logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
    else:
        logging.basicConfig(level=logging.WARNING, format='%(levelname)s: %(message)s')

    try:
        settings = load_settings(
            config=load_config(args.config),
            config_path=args.config,
            overrides={
                "api_base_url": args.meshery_url,
                "provider_token": args.meshery_token,
                "repo_owner": args.repo_owner,
                "repo_name": args.repo_name,
                "branch": args.branch,
                "workflow": args.workflow,
                "strict": args.strict,
            },
        )
        logger.info(f"Using Meshery API URL: {settings.api_base_url}")
        logger.info(f"Using API endpoint: {settings.snapshot_endpoint}")
        logger.debug(f"Meshery Cloud API URL: {settings.cloud_api_base_url}")
        if not settings.provider_token:
            logger.warning("MESHERY_TOKEN environment variable not set. Working in offline mode.")
            logger.info("You can obtain a token from your Meshery or Meshery Cloud profile.")

        options = PipelineOptions(
            path=args.file,
            recursive=args.recursive,
            name=args.name,
            email=args.email,
            skip_workflow=args.skip_workflow,
            download=args.download,
            output=args.output,
        )
        result = run_pipeline(options, settings)
    except KanvasSnapshotError as e:
        print(format_error(e), file=sys.stderr)
        logger.debug("Pipeline failed", exc_info=True)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        logger.exception("Pipeline failed")
        return 1

    print_summary(result, workflow_runs_url(settings))
    return 0


if __name__ == "__main__":
    sys.exit(main())
