"""
kanvas-snapshot: Kubernetes manifests to Kanvas designs

A kubectl plugin that submits Kubernetes manifests to a Meshery server as a
design, then dispatches a GitHub Actions workflow that renders and captures
a screenshot of that design.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
