"""Design request model and its wire layouts.

The Meshery API has accepted three incompatible body layouts for design
submission over time. :meth:`DesignRequest.to_payload` produces each of them:

- ``file``: base64-encoded manifest with a file name (``/api/pattern/import``)
- ``manifest``: raw manifest in a flat field (``/api/k8scontext/manifest``)
- ``pattern``: raw manifest nested in a pattern object (``/api/pattern``)
"""

import base64
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from kanvas_snapshot.core.errors import PayloadEncodingError

SOURCE_TYPE = "Kubernetes Manifest"
OFFLINE_PREFIX = "offline-mode-"

PAYLOAD_FORMATS = ("file", "manifest", "pattern")


def is_offline_identifier(identifier: str) -> bool:
    """Return True if ``identifier`` was synthesized locally in offline mode."""
    return bool(identifier) and identifier.startswith(OFFLINE_PREFIX)


@dataclass(frozen=True)
class DesignRequest:
    """A single design submission.

    Attributes:
        name: Design name shown in Meshery
        manifest_content: Combined manifest text
        file_name: File name reported to Meshery for the ``file`` layout
        email: Address Meshery notifies when the design is ready (optional)
        source_type: Always "Kubernetes Manifest"
    """
    name: str
    manifest_content: str
    file_name: str = "manifest.yaml"
    email: Optional[str] = None
    source_type: str = SOURCE_TYPE

    def to_payload(self, payload_format: str = "file") -> Dict[str, Any]:
        """Lay the request out for one of the Meshery body variants.

        Raises:
            PayloadEncodingError: If ``payload_format`` is unknown or the
                manifest cannot be encoded
        """
        if payload_format == "file":
            try:
                encoded = base64.b64encode(self.manifest_content.encode("utf-8")).decode("ascii")
            except UnicodeError as e:
                raise PayloadEncodingError(f"cannot base64-encode manifest: {e}") from e
            payload: Dict[str, Any] = {
                "name": self.name,
                "file": encoded,
                "file_name": self.file_name,
                "source_type": self.source_type,
            }
        elif payload_format == "manifest":
            payload = {
                "name": self.name,
                "manifest": self.manifest_content,
                "source_type": self.source_type,
            }
        elif payload_format == "pattern":
            payload = {
                "name": self.name,
                "save": True,
                "pattern_data": {
                    "name": self.name,
                    "pattern_file": self.manifest_content,
                },
                "source_type": self.source_type,
            }
        else:
            raise PayloadEncodingError(
                f"unknown payload format '{payload_format}' (expected one of: {', '.join(PAYLOAD_FORMATS)})"
            )

        if self.email:
            payload["email"] = self.email
        return payload

    def encode(self, payload_format: str = "file") -> bytes:
        """Serialize the request body to JSON bytes.

        Raises:
            PayloadEncodingError: If the payload cannot be serialized
        """
        payload = self.to_payload(payload_format)
        try:
            return json.dumps(payload).encode("utf-8")
        except (TypeError, ValueError, UnicodeError) as e:
            raise PayloadEncodingError(f"cannot serialize design request: {e}") from e
