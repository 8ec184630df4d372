"""
Request Fingerprinter - Stable cache keys for recipe requests.

Two requests that differ only in ingredient order, letter case, duplicate
ingredients or surrounding whitespace share a fingerprint.
"""

from __future__ import annotations

import hashlib
import json

from .models import InferenceRequest

__all__ = ["RequestFingerprinter", "fingerprint"]


class RequestFingerprinter:
    """Derive cache keys from the semantic content of a request."""

    @staticmethod
    def canonicalize(request: InferenceRequest) -> str:
        """Canonical serialization hashed by fingerprint()."""
        ingredients = sorted({i.strip().lower() for i in request.ingredients} - {""})
        payload = {
            "ingredients": ingredients,
            "preferences": request.preferences.strip().lower(),
            "plan": request.plan.value,
        }
        return json.dumps(payload, sort_keys=True, separators=(",", ":"))

    def fingerprint(self, request: InferenceRequest) -> str:
        """SHA-256 hex digest of the canonical form."""
        return hashlib.sha256(self.canonicalize(request).encode("utf-8")).hexdigest()


def fingerprint(request: InferenceRequest) -> str:
    """Module-level shortcut for RequestFingerprinter().fingerprint()."""
    return RequestFingerprinter().fingerprint(request)
