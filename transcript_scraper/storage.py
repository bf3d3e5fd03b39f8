"""
Transcript storage: one text file per saved transcript plus a manifest.

Artifacts are append-only. Saving the same video twice produces two files;
consolidation keeps both.
"""

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from .config import StorageConfig
from .exceptions import PersistenceError
from .models import TranscriptArtifact
from .utils import sanitize_name

logger = logging.getLogger(__name__)

ARTIFACT_SUFFIX = ".txt"
TEMP_SUFFIX = ".part"


def artifact_prefix(channel_handle: str, video_id: str) -> str:
    """File name prefix shared by every artifact of a (channel, video) pair."""
    return f"{sanitize_name(channel_handle)}_{sanitize_name(video_id)}_"


def artifact_timestamp(now: Optional[datetime] = None) -> str:
    """UTC ISO timestamp with ':' and '.' replaced so it is file-name safe."""
    now = now or datetime.now(timezone.utc)
    return now.isoformat(timespec='milliseconds').replace('+00:00', 'Z').replace(':', '-').replace('.', '-')


class TranscriptStore:
    """Writes transcript artifacts and answers "was this video saved before?"."""

    def __init__(self, config: Optional[StorageConfig] = None):
        """
        Initialize storage. Nothing is created on disk until the first save.

        Args:
            config: StorageConfig instance, uses defaults if None
        """
        self.config = config or StorageConfig()
        self.base_path = Path(self.config.output_dir)
        self.manifest_path = self.base_path / self.config.manifest_file
        self._manifest: Optional[Dict[str, dict]] = None
        self._dir_ready = False

    # ------------------------------------------------------------------
    # Manifest
    # ------------------------------------------------------------------

    @staticmethod
    def _key(channel_handle: str, video_id: str) -> str:
        return f"{sanitize_name(channel_handle)}/{sanitize_name(video_id)}"

    def _load_manifest(self) -> Dict[str, dict]:
        if self._manifest is not None:
            return self._manifest

        self._manifest = {}
        if not self.manifest_path.exists():
            return self._manifest

        try:
            with open(self.manifest_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if isinstance(data, dict):
                self._manifest = data.get('videos', {})
        except (json.JSONDecodeError, OSError) as e:
            # The directory scan in exists() still finds older artifacts
            logger.warning("Manifest %s unreadable, ignoring it: %s", self.manifest_path, e)
        return self._manifest

    def _save_manifest(self):
        """Atomically write the manifest: temp file, then rename."""
        data = {
            'updated_at': datetime.now(timezone.utc).isoformat(),
            'videos': self._load_manifest(),
        }
        temp_file = self.manifest_path.with_suffix('.tmp')
        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_file, self.manifest_path)
        except OSError as e:
            logger.error("Failed to write manifest %s: %s", self.manifest_path, e)
            if temp_file.exists():
                try:
                    temp_file.unlink()
                except OSError:
                    pass

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def exists(self, channel_handle: str, video_id: str) -> bool:
        """
        Check whether a transcript was saved for this pair in any run.

        Save time is not part of the identity; any earlier artifact counts.
        """
        key = self._key(channel_handle, video_id)
        manifest = self._load_manifest()
        entry = manifest.get(key)
        if entry is not None:
            if any((self.base_path / name).is_file() for name in entry.get('files', [])):
                return True
            # Every recorded file was removed; forget the entry
            logger.info("Recorded transcripts for %s are gone from disk", video_id)
            del manifest[key]

        if not self.base_path.is_dir():
            return False

        prefix = artifact_prefix(channel_handle, video_id)
        matches = sorted(
            p.name for p in self.base_path.iterdir()
            if p.name.startswith(prefix) and p.name.endswith(ARTIFACT_SUFFIX)
        )
        if not matches:
            return False

        # Artifact written without a manifest entry; remember it
        manifest[key] = {
            'channel': channel_handle,
            'video_id': video_id,
            'status': 'saved',
            'files': matches,
        }
        return True

    def save(self, channel_handle: str, video_id: str, content: str) -> TranscriptArtifact:
        """
        Write a new artifact for the pair. Never overwrites an existing one.

        Raises:
            PersistenceError: If content is empty or the file cannot be written
        """
        if not content or not content.strip():
            raise PersistenceError(f"Refusing to save empty transcript for {video_id}")

        self._ensure_dir()

        created_at = artifact_timestamp()
        path = self.base_path / f"{artifact_prefix(channel_handle, video_id)}{created_at}{ARTIFACT_SUFFIX}"
        # Two saves in the same millisecond must still produce two files
        counter = 1
        while path.exists():
            path = self.base_path / (
                f"{artifact_prefix(channel_handle, video_id)}{created_at}-{counter}{ARTIFACT_SUFFIX}"
            )
            counter += 1

        # Written under a temporary name so a half-written file never looks saved
        temp_file = path.with_suffix(TEMP_SUFFIX)
        try:
            with open(temp_file, 'x', encoding='utf-8') as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_file, path)
        except OSError as e:
            if temp_file.exists():
                try:
                    temp_file.unlink()
                except OSError:
                    pass
            raise PersistenceError(f"Could not write {path}: {e}") from e

        manifest = self._load_manifest()
        entry = manifest.setdefault(self._key(channel_handle, video_id), {
            'channel': channel_handle,
            'video_id': video_id,
            'status': 'saved',
            'files': [],
        })
        entry['files'].append(path.name)
        entry['updated_at'] = created_at
        self._save_manifest()

        logger.info("Saved transcript for %s to %s", video_id, path)
        return TranscriptArtifact(
            channel_handle=channel_handle,
            video_id=video_id,
            content=content,
            created_at=created_at,
            path=path,
        )

    def list_artifacts(self) -> List[Path]:
        """Artifact files in listing order (sorted by name)."""
        if not self.base_path.is_dir():
            return []
        return sorted(
            p for p in self.base_path.iterdir()
            if p.is_file() and p.suffix == ARTIFACT_SUFFIX
        )

    def consolidate(self, output_path: Optional[Path] = None) -> Path:
        """
        Combine the raw content of every artifact into one export.

        Contents are joined with newlines in listing order. Files that cannot
        be read are logged and left out.

        Returns:
            Path of the export file
        """
        output_path = Path(output_path or self.config.consolidated_file)
        contents = []
        for path in self.list_artifacts():
            if path.resolve() == output_path.resolve():
                continue
            try:
                contents.append(path.read_text(encoding='utf-8'))
            except (OSError, UnicodeDecodeError) as e:
                logger.error("Error reading file %s: %s", path.name, e)

        if output_path.parent and not output_path.parent.exists():
            output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text('\n'.join(contents), encoding='utf-8')
        logger.info("Consolidated %d transcripts into %s", len(contents), output_path)
        return output_path

    def get_stats(self) -> dict:
        manifest = self._load_manifest()
        return {
            'videos': len(manifest),
            'artifacts': len(self.list_artifacts()),
            'output_dir': str(self.base_path),
        }

    def _ensure_dir(self):
        """Create the storage directory once, on first save."""
        if self._dir_ready:
            return
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Could not create {self.base_path}: {e}") from e
        self._dir_ready = True
