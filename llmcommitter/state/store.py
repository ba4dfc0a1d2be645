"""Per-workspace persistence of staged groups and general context.

Contains:
- STATE_VERSION: Current schema version of the workspace state file
- WorkspaceSnapshot: What a load returns
- WorkspaceStateStore: Versioned, best-effort JSON store

The file layout is:

    {"version": 1, "staged_groups": [...], "general_context": "..."}

A bare JSON list is an unversioned (version 0) file holding only staged
group records. Persistence is best-effort: read and write failures are
logged as warnings and never raised.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from loguru import logger
from pydantic import ValidationError

from llmcommitter.state.models import StagedGroup
from llmcommitter.state.paths import ensure_state_dir, get_state_file

STATE_VERSION = 1


@dataclass(frozen=True)
class WorkspaceSnapshot:
    """Persisted workspace state."""

    staged_groups: tuple[StagedGroup, ...] = ()
    general_context: str = ""


def _validate_records(records: list[Any]) -> tuple[StagedGroup, ...]:
    """Turn raw records into staged groups, repairing what can be repaired.

    Invalid records are dropped. A file claimed by an earlier record is
    removed from later ones, and a record left with no files is dropped.

    Args:
        records: Raw JSON records.

    Returns:
        Valid, pairwise-disjoint staged groups in file order.
    """
    groups = []
    claimed: set[str] = set()
    seen_ids: set[str] = set()

    for index, record in enumerate(records):
        try:
            group = StagedGroup.model_validate(record)
        except ValidationError as e:
            logger.warning(f"Dropping invalid staged group record #{index}: {e.error_count()} validation error(s)")
            continue

        if group.id in seen_ids:
            logger.warning(f"Dropping staged group record #{index}: duplicate id {group.id}")
            continue

        files = tuple(path for path in group.files if path not in claimed)
        if len(files) < len(group.files):
            duplicates = [path for path in group.files if path in claimed]
            logger.warning(
                f"Staged group {group.id} claims files already staged elsewhere; dropping {duplicates}"
            )
            if not files:
                logger.warning(f"Dropping staged group {group.id}: no files left")
                continue
            group = group.model_copy(update={"files": files})

        seen_ids.add(group.id)
        claimed.update(files)
        groups.append(group)

    return tuple(groups)


class WorkspaceStateStore:
    """Reads and writes the workspace state file of one repository.

    The store keeps the last written values so that saving one key
    rewrites the file without reading it back first.
    """

    def __init__(self, repo_root: Path):
        self.repo_root = repo_root
        self._staged_groups: tuple[StagedGroup, ...] = ()
        self._general_context = ""

    @property
    def path(self) -> Path:
        return get_state_file(self.repo_root)

    def load(self) -> WorkspaceSnapshot:
        """Load persisted state, migrating older layouts.

        Returns:
            The loaded snapshot, empty if nothing usable is stored.
        """
        snapshot = self._read()
        self._staged_groups = snapshot.staged_groups
        self._general_context = snapshot.general_context
        return snapshot

    def _read(self) -> WorkspaceSnapshot:
        path = self.path
        if not path.exists():
            return WorkspaceSnapshot()

        try:
            raw = json.loads(path.read_text())
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read workspace state from {path}: {e}")
            return WorkspaceSnapshot()

        if isinstance(raw, list):
            version, records, general_context = 0, raw, ""
        elif isinstance(raw, dict):
            version = raw.get("version", 0)
            records = raw.get("staged_groups", [])
            general_context = raw.get("general_context", "")
        else:
            logger.warning(f"Ignoring workspace state with unexpected type {type(raw).__name__}")
            return WorkspaceSnapshot()

        if not isinstance(version, int) or isinstance(version, bool):
            logger.warning(f"Ignoring workspace state with invalid version {version!r}")
            return WorkspaceSnapshot()
        if version > STATE_VERSION:
            logger.warning(
                f"Workspace state version {version} is newer than supported version "
                f"{STATE_VERSION}; ignoring it"
            )
            return WorkspaceSnapshot()
        if version < STATE_VERSION:
            logger.warning(f"Migrating workspace state from version {version} to {STATE_VERSION}")

        if not isinstance(records, list):
            logger.warning("Ignoring staged groups: expected a list")
            records = []
        if not isinstance(general_context, str):
            logger.warning("Ignoring general context: expected a string")
            general_context = ""

        groups = _validate_records(records)
        logger.debug(f"Loaded {len(groups)} staged group(s) from {path}")
        return WorkspaceSnapshot(staged_groups=groups, general_context=general_context)

    def save_staged_groups(self, groups: Sequence[StagedGroup]) -> bool:
        """Persist the staged group list.

        Returns:
            True if the file was written.
        """
        self._staged_groups = tuple(groups)
        return self._write()

    def save_general_context(self, text: str) -> bool:
        """Persist the general context string.

        Returns:
            True if the file was written.
        """
        self._general_context = text
        return self._write()

    def _write(self) -> bool:
        document = {
            "version": STATE_VERSION,
            "staged_groups": [group.model_dump(mode="json") for group in self._staged_groups],
            "general_context": self._general_context,
        }
        try:
            ensure_state_dir(self.repo_root)
            self.path.write_text(json.dumps(document, indent=2))
        except OSError as e:
            logger.warning(f"Failed to persist workspace state to {self.path}: {e}")
            return False
        return True
