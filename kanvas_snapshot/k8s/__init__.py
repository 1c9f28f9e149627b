"""Kubernetes manifest handling for kanvas-snapshot.

Manifests are treated as opaque text: files are discovered and read, never
parsed or validated.
"""

from kanvas_snapshot.k8s.manifests import ManifestSet, collect_manifests, design_name_from_path

__all__ = ["ManifestSet", "collect_manifests", "design_name_from_path"]
