"""
Render deduplication cache for compositor module.

Maps a canonical content hash of a scene to its rendered still. The first
scene presenting a hash is the master and the only one that gets rendered;
later scenes with the same hash inherit the master's asset.
"""
import hashlib
import json
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from shared.errors import IntegrityError
from shared.logging import get_logger
from shared.models.scene import Scene

logger = get_logger("compositor.frame_cache")


def compute_content_hash(scene: Scene) -> str:
    """
    Deterministic fingerprint of the visual-relevant fields of a scene.

    Only speaker, title, content, content2, visual and equation take part;
    narration and duration hints do not.
    """
    encoded = json.dumps(scene.visual_identity(), sort_keys=True, ensure_ascii=True).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


class Registration(BaseModel):
    """Outcome of registering one scene."""

    content_hash: str
    is_master: bool


class CacheEntry(BaseModel):
    """Rendered asset for one content hash."""

    content_hash: str
    master_index: int
    scene_indices: List[int] = Field(default_factory=list)
    asset_ref: Optional[str] = None
    is_placeholder: bool = False


class FrameDeduplicationCache:
    """
    Content-addressed render cache owned by a single run.

    Populated during the render phase only. After seal() it is read-only,
    so downstream stages can share it without locking.
    """

    def __init__(self):
        self._entries: Dict[str, CacheEntry] = {}
        self._sealed = False

    def register_scene(self, scene: Scene) -> Registration:
        """
        Register a scene and decide whether it is the master of its hash.

        Sets scene.content_hash as a side effect.
        """
        if self._sealed:
            raise IntegrityError("Cannot register scenes after the cache is sealed")

        content_hash = compute_content_hash(scene)
        scene.content_hash = content_hash

        entry = self._entries.get(content_hash)
        if entry is None:
            self._entries[content_hash] = CacheEntry(
                content_hash=content_hash,
                master_index=scene.index,
                scene_indices=[scene.index]
            )
            return Registration(content_hash=content_hash, is_master=True)

        entry.scene_indices.append(scene.index)
        return Registration(content_hash=content_hash, is_master=False)

    def register_all(self, scenes: List[Scene]) -> Dict[str, int]:
        """
        Register every scene in input order.

        Returns:
            Counts of unique and duplicate scenes
        """
        unique = 0
        duplicates = 0
        for scene in scenes:
            if self.register_scene(scene).is_master:
                unique += 1
            else:
                duplicates += 1

        logger.info(
            f"Frame analysis complete: {unique} unique, {duplicates} reused",
            extra={"unique_frames": unique, "duplicate_frames": duplicates, "scene_count": len(scenes)}
        )
        return {"unique": unique, "duplicates": duplicates}

    def masters(self) -> List[CacheEntry]:
        """Entries in order of their master scene."""
        return sorted(self._entries.values(), key=lambda e: e.master_index)

    def store(self, content_hash: str, asset_ref: str, is_placeholder: bool = False) -> None:
        """
        Record the rendered asset of a hash.

        Raises:
            IntegrityError: If the cache is sealed, the hash is unknown, or
                the hash already has an asset
        """
        if self._sealed:
            raise IntegrityError(f"Cache is sealed, cannot store asset for {content_hash}")
        entry = self._entries.get(content_hash)
        if entry is None:
            raise IntegrityError(f"Unknown content hash: {content_hash}")
        if entry.asset_ref is not None:
            raise IntegrityError(f"Content hash rendered twice: {content_hash}")
        entry.asset_ref = asset_ref
        entry.is_placeholder = is_placeholder

    def lookup(self, content_hash: str) -> Optional[str]:
        """Asset of a hash, or None if it has not been rendered."""
        entry = self._entries.get(content_hash)
        return entry.asset_ref if entry else None

    def entry(self, content_hash: str) -> Optional[CacheEntry]:
        return self._entries.get(content_hash)

    def seal(self) -> None:
        """
        Make the cache read-only.

        Raises:
            IntegrityError: If any entry is still missing an asset
        """
        missing = [h for h, e in self._entries.items() if e.asset_ref is None]
        if missing:
            raise IntegrityError(f"{len(missing)} content hash(es) have no asset: {missing[:3]}")
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def placeholder_count(self) -> int:
        return sum(1 for e in self._entries.values() if e.is_placeholder)

    def __len__(self) -> int:
        return len(self._entries)

    def resolve_scene_assets(self, scenes: List[Scene]) -> None:
        """
        Give every scene the asset of its hash (own, inherited or placeholder).

        Raises:
            IntegrityError: If a scene was never registered or its hash has no asset
        """
        for scene in scenes:
            if scene.content_hash is None:
                raise IntegrityError(f"Scene {scene.index} was never registered")
            asset_ref = self.lookup(scene.content_hash)
            if asset_ref is None:
                raise IntegrityError(f"No asset for scene {scene.index} ({scene.content_hash})")
            scene.render_asset_ref = asset_ref
