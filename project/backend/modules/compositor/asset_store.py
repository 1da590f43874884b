"""
On-disk asset store for compositor module.

Assets live at stable, deterministic keys (derived from scene index,
speaker and a fingerprint of the synthesis inputs, or from a content hash),
so a retried run finds the audio and renders of the previous attempt and
does not regenerate them, while edited narration gets a fresh key.
"""
import hashlib
import json
from pathlib import Path
from typing import Any, Dict, Union

from shared.errors import ValidationError
from shared.logging import get_logger
from shared.models.scene import Speaker

logger = get_logger("compositor.asset_store")

FINGERPRINT_LENGTH = 16


def input_fingerprint(*parts: Any) -> str:
    """Short SHA-256 digest of the JSON encoding of parts."""
    encoded = json.dumps(parts, sort_keys=True, ensure_ascii=False, default=str)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def narration_fingerprint(narration: str, speaker: Speaker, voice_settings: Dict[str, Any]) -> str:
    """Fingerprint of every input that shapes a narration's synthesized audio."""
    return input_fingerprint(narration, speaker.voice, speaker.model, voice_settings)


def audio_key(scene_index: int, speaker: str, fingerprint: str) -> str:
    """Key of the raw narration audio for a scene synthesized from fingerprinted inputs."""
    return f"audio/step_{scene_index + 1:03d}_{speaker}_{fingerprint}.wav"


def boosted_audio_key(scene_index: int, speaker: str, fingerprint: str, volume_boost: str) -> str:
    """Key of the volume boosted narration audio; the boost level is part of the key."""
    boosted = input_fingerprint(fingerprint, volume_boost)
    return f"audio/boosted/step_{scene_index + 1:03d}_{speaker}_{boosted}_boosted.wav"


def render_key(content_hash: str) -> str:
    """Key of the rendered still for a content hash."""
    return f"unique_frames/unique_{content_hash}.png"


def placeholder_key(content_hash: str) -> str:
    """Key of the placeholder still for a content hash whose render failed."""
    return f"unique_frames/placeholder_{content_hash}.png"


class AssetStore:
    """Keyed file store rooted at a run's output directory."""

    def __init__(self, root: Union[str, Path]):
        """
        Initialize asset store.

        Args:
            root: Directory under which all keys are resolved
        """
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        """
        Resolve a key to its absolute path.

        Raises:
            ValidationError: If the key escapes the store root
        """
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise ValidationError(f"Asset key escapes store root: {key}")
        return path

    def exists(self, key: str) -> bool:
        """Whether a non-empty asset is already stored under key."""
        path = self.path_for(key)
        return path.is_file() and path.stat().st_size > 0

    def write_bytes(self, key: str, data: bytes) -> Path:
        """
        Store bytes under key, replacing any previous asset.

        Writes go through a temporary sibling file; a partially written
        asset is never visible under key.
        """
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".part")
        tmp_path.write_bytes(data)
        tmp_path.replace(path)
        logger.debug(f"Stored asset {key} ({len(data)} bytes)", extra={"key": key, "size": len(data)})
        return path

    def prepare(self, key: str) -> Path:
        """Create the parent directory of key and return its path, for writers that take a path."""
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path
