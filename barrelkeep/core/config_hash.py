import hashlib
import json

from barrelkeep.config.schema import ResolvedConfig


def hash_config(config: ResolvedConfig) -> str:
    """Short fingerprint of the resolved config (first 16 hex chars of sha256)."""
    canonical = json.dumps(config.to_dict(), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]
