"""Group lifecycle state machine.

Contains:
- GroupStateMachine: Single owner of selection, draft, staged groups and view

Every mutator replaces the current AppState with a new immutable snapshot
and emits it on the `changes` channel. Rejected transitions leave the
state unchanged and return False; expected precondition violations never
raise. The machine is the only writer of the workspace state store.
"""

import uuid
from typing import Callable, Optional, Sequence

from loguru import logger

from llmcommitter.events import EventChannel, Subscription
from llmcommitter.state.models import (
    AppState,
    DraftGroup,
    SettingsSummary,
    StagedGroup,
    View,
)
from llmcommitter.state.store import WorkspaceStateStore


def _unique(paths: Sequence[str]) -> tuple[str, ...]:
    """De-duplicate paths, keeping first occurrence order."""
    return tuple(dict.fromkeys(path for path in paths if path))


def _short_id(group_id: str) -> str:
    return group_id[:8]


class GroupStateMachine:
    """Owns grouping state for one workspace."""

    def __init__(
        self,
        store: Optional[WorkspaceStateStore] = None,
        settings: Optional[SettingsSummary] = None,
    ):
        self._store = store
        self._state = AppState(settings=settings or SettingsSummary())
        self.changes: EventChannel[AppState] = EventChannel("state")

    @property
    def state(self) -> AppState:
        return self._state

    def subscribe(self, listener: Callable[[AppState], None]) -> Subscription:
        """Subscribe to state snapshots."""
        return self.changes.subscribe(listener)

    def _set(self, state: AppState, reason: str) -> AppState:
        self._state = state
        logger.debug(f"State transition: {reason}")
        self.changes.emit(state)
        return state

    def _persist_groups(self) -> None:
        if self._store is not None:
            self._store.save_staged_groups(self._state.staged_groups)

    # ------------------------------------------------------------------
    # Loading and refresh
    # ------------------------------------------------------------------

    def load(self) -> AppState:
        """Load staged groups and general context from the store."""
        if self._store is None:
            return self._state
        snapshot = self._store.load()
        return self._set(
            self._state.model_copy(
                update={
                    "staged_groups": snapshot.staged_groups,
                    "general_context": snapshot.general_context,
                }
            ),
            f"loaded {len(snapshot.staged_groups)} staged group(s)",
        )

    def refresh_changed_files(self, files: Sequence[str]) -> AppState:
        """Replace the changed-file snapshot and repair dependent state.

        The selection is pruned to the new snapshot. Staged groups lose
        files that are no longer changed, and a group left with no files
        is removed. The draft is pruned the same way. The store is only
        written if a staged group changed.

        Args:
            files: The current changed files.

        Returns:
            The new state.
        """
        state = self._state
        snapshot = _unique(files)
        present = set(snapshot)

        selection = tuple(path for path in state.selection if path in present)

        groups = []
        groups_changed = False
        for group in state.staged_groups:
            kept = tuple(path for path in group.files if path in present)
            if kept == group.files:
                groups.append(group)
                continue
            groups_changed = True
            if not kept:
                logger.warning(
                    f"Staged group {_short_id(group.id)} has no changed files left; removing it"
                )
                continue
            groups.append(group.model_copy(update={"files": kept}))

        draft = state.draft
        view = state.view
        if draft is not None:
            kept = tuple(path for path in draft.files if path in present)
            if not kept:
                draft = None
                if view == View.GROUP:
                    view = View.FILE_SELECTION
            elif kept != draft.files:
                draft = draft.model_copy(update={"files": kept})

        review_group_id = state.review_group_id
        if review_group_id is not None and not any(g.id == review_group_id for g in groups):
            review_group_id = None
            if view == View.REVIEW_STAGED_GROUP:
                view = View.FILE_SELECTION

        new_state = self._set(
            state.model_copy(
                update={
                    "changed_files": snapshot,
                    "selection": selection,
                    "staged_groups": tuple(groups),
                    "draft": draft,
                    "review_group_id": review_group_id,
                    "view": view,
                }
            ),
            f"refreshed {len(snapshot)} changed file(s)",
        )
        if groups_changed:
            self._persist_groups()
        return new_state

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def toggle_selection(self, path: str) -> bool:
        """Add path to the selection, or remove it if already selected.

        Returns:
            False if path is not a changed file.
        """
        state = self._state
        if path in state.selection:
            selection = tuple(p for p in state.selection if p != path)
        elif path in state.changed_files:
            selected = set(state.selection) | {path}
            selection = tuple(p for p in state.changed_files if p in selected)
        else:
            logger.debug(f"Ignoring selection of unknown path {path}")
            return False
        self._set(state.model_copy(update={"selection": selection}), f"toggled {path}")
        return True

    def set_selection(self, paths: Sequence[str]) -> AppState:
        """Replace the selection, keeping only changed files."""
        wanted = set(paths)
        selection = tuple(p for p in self._state.changed_files if p in wanted)
        return self._set(
            self._state.model_copy(update={"selection": selection}),
            f"selected {len(selection)} file(s)",
        )

    # ------------------------------------------------------------------
    # Draft group
    # ------------------------------------------------------------------

    def start_group(self, paths: Optional[Sequence[str]] = None, replace_existing: bool = True) -> bool:
        """Create a draft group from paths (default: the selection).

        Files already in a staged group, and paths that are not changed
        files, are left out.

        Args:
            paths: Candidate files.
            replace_existing: Whether an existing draft may be replaced.

        Returns:
            True if a draft was created.
        """
        state = self._state
        candidates = _unique(state.selection if paths is None else paths)
        changed = set(state.changed_files)
        claimed = state.claimed_files
        files = tuple(path for path in candidates if path in changed and path not in claimed)

        if not files:
            logger.info("No unstaged changed files to group")
            self._set(state, "start group rejected: no eligible files")
            return False

        if state.draft is not None:
            if not replace_existing:
                logger.debug("Start group rejected: a draft group already exists")
                return False
            logger.debug(f"Replacing existing draft group of {len(state.draft.files)} file(s)")

        self._set(
            state.model_copy(
                update={
                    "draft": DraftGroup(files=files),
                    "selection": (),
                    "review_group_id": None,
                    "view": View.GROUP,
                }
            ),
            f"started group with {len(files)} file(s)",
        )
        return True

    def clear_draft(self) -> None:
        """Discard the draft group."""
        state = self._state
        view = View.FILE_SELECTION if state.view == View.GROUP else state.view
        self._set(state.model_copy(update={"draft": None, "view": view}), "cleared draft")

    def _update_draft(self, reason: str, **changes) -> bool:
        draft = self._state.draft
        if draft is None:
            logger.debug(f"No draft group: {reason} ignored")
            return False
        self._set(
            self._state.model_copy(update={"draft": draft.model_copy(update=changes)}),
            reason,
        )
        return True

    def update_draft_context(self, text: str) -> bool:
        return self._update_draft("updated draft context", specific_context=text)

    def update_draft_message(self, message: Optional[str]) -> bool:
        return self._update_draft("updated draft message", commit_message=message)

    def set_generating(self, generating: bool) -> bool:
        return self._update_draft(f"draft generating={generating}", generating=generating)

    def stage_draft(self) -> bool:
        """Turn the draft into a staged group.

        Requires a draft with at least one file and a non-blank message.

        Returns:
            True if the draft was staged.
        """
        state = self._state
        draft = state.draft
        if draft is None or not draft.files:
            logger.debug("Stage rejected: no draft group")
            return False
        message = (draft.commit_message or "").strip()
        if not message:
            logger.debug("Stage rejected: commit message is blank")
            return False

        claimed = state.claimed_files
        files = tuple(path for path in draft.files if path not in claimed)
        if not files:
            logger.debug("Stage rejected: every draft file is already staged")
            return False

        group = StagedGroup(
            id=uuid.uuid4().hex,
            files=files,
            specific_context=draft.specific_context,
            commit_message=message,
        )
        self._set(
            state.model_copy(
                update={
                    "staged_groups": state.staged_groups + (group,),
                    "draft": None,
                    "view": View.FILE_SELECTION,
                }
            ),
            f"staged group {_short_id(group.id)} with {len(files)} file(s)",
        )
        self._persist_groups()
        return True

    # ------------------------------------------------------------------
    # Staged groups
    # ------------------------------------------------------------------

    def _without_group(self, group_id: str) -> AppState:
        state = self._state
        groups = tuple(g for g in state.staged_groups if g.id != group_id)
        update = {"staged_groups": groups}
        if state.review_group_id == group_id:
            update["review_group_id"] = None
            if state.view == View.REVIEW_STAGED_GROUP:
                update["view"] = View.FILE_SELECTION
        return state.model_copy(update=update)

    def unstage(self, group_id: str) -> bool:
        """Remove a staged group, returning its files to the pool.

        Returns:
            False if no group has that id.
        """
        if self._state.get_staged_group(group_id) is None:
            logger.debug(f"Unstage rejected: unknown group {group_id}")
            return False
        self._set(self._without_group(group_id), f"unstaged group {_short_id(group_id)}")
        self._persist_groups()
        return True

    def update_staged_group(
        self,
        group_id: str,
        specific_context: Optional[str] = None,
        commit_message: Optional[str] = None,
        files: Optional[Sequence[str]] = None,
    ) -> bool:
        """Update fields of a staged group.

        A files update is de-duplicated and loses paths owned by other
        staged groups. If nothing is left, the files update is dropped
        and the other fields still apply. A blank message is dropped the
        same way.

        Returns:
            True if any field was applied.
        """
        state = self._state
        group = state.get_staged_group(group_id)
        if group is None:
            logger.debug(f"Update rejected: unknown group {group_id}")
            return False

        update = {}
        if specific_context is not None:
            update["specific_context"] = specific_context
        if commit_message is not None:
            if commit_message.strip():
                update["commit_message"] = commit_message.strip()
            else:
                logger.warning(f"Ignoring blank commit message for group {_short_id(group_id)}")
        if files is not None:
            claimed_elsewhere = {
                path for other in state.staged_groups if other.id != group_id for path in other.files
            }
            new_files = tuple(path for path in _unique(files) if path not in claimed_elsewhere)
            if new_files:
                update["files"] = new_files
            else:
                logger.warning(f"Ignoring empty file list for group {_short_id(group_id)}")

        if not update:
            return False

        updated = group.model_copy(update=update)
        groups = tuple(updated if g.id == group_id else g for g in state.staged_groups)
        self._set(
            state.model_copy(update={"staged_groups": groups}),
            f"updated group {_short_id(group_id)} ({', '.join(update)})",
        )
        self._persist_groups()
        return True

    def remove_file_from_staged_group(self, group_id: str, path: str) -> bool:
        """Remove one file from a staged group.

        Removing the last file unstages the group.

        Returns:
            False if the group does not exist or does not hold path.
        """
        group = self._state.get_staged_group(group_id)
        if group is None or path not in group.files:
            logger.debug(f"Remove file rejected: {path} is not in group {group_id}")
            return False

        files = tuple(p for p in group.files if p != path)
        if not files:
            return self.unstage(group_id)

        groups = tuple(
            g.model_copy(update={"files": files}) if g.id == group_id else g
            for g in self._state.staged_groups
        )
        self._set(
            self._state.model_copy(update={"staged_groups": groups}),
            f"removed {path} from group {_short_id(group_id)}",
        )
        self._persist_groups()
        return True

    def remove_group_by_id(self, group_id: str) -> bool:
        """Remove a group after it was committed.

        Returns:
            True if a group was removed.
        """
        removed = self._state.get_staged_group(group_id) is not None
        self._set(self._without_group(group_id), f"removed group {_short_id(group_id)}")
        self._persist_groups()
        return removed

    # ------------------------------------------------------------------
    # Navigation, context and settings
    # ------------------------------------------------------------------

    def review_staged_group(self, group_id: str) -> bool:
        """Open a staged group for review, discarding any draft."""
        state = self._state
        if state.get_staged_group(group_id) is None:
            logger.debug(f"Review rejected: unknown group {group_id}")
            return False
        self._set(
            state.model_copy(
                update={
                    "review_group_id": group_id,
                    "draft": None,
                    "view": View.REVIEW_STAGED_GROUP,
                }
            ),
            f"reviewing group {_short_id(group_id)}",
        )
        return True

    def set_view(self, view: View) -> bool:
        """Navigate to a view.

        FILE_SELECTION discards the draft and the review target. SETTINGS
        clears only the review target. GROUP needs a draft and
        REVIEW_STAGED_GROUP needs a review target.

        Returns:
            False if the view cannot be entered.
        """
        state = self._state
        if view == View.FILE_SELECTION:
            update = {"draft": None, "review_group_id": None}
        elif view == View.SETTINGS:
            update = {"review_group_id": None}
        elif view == View.GROUP:
            if state.draft is None:
                logger.debug("Cannot show group view without a draft group")
                return False
            update = {"review_group_id": None}
        elif view == View.REVIEW_STAGED_GROUP:
            if state.review_group_id is None:
                logger.debug("Cannot show review view without a group under review")
                return False
            update = {"draft": None}
        else:
            raise ValueError(f"Unknown view: {view}")

        update["view"] = view
        self._set(state.model_copy(update=update), f"view -> {view.value}")
        return True

    def set_general_context(self, text: str) -> None:
        """Set and persist the workspace-wide context."""
        self._set(self._state.model_copy(update={"general_context": text}), "updated general context")
        if self._store is not None:
            self._store.save_general_context(text)

    def update_settings(self, settings: SettingsSummary) -> None:
        self._set(self._state.model_copy(update={"settings": settings}), "updated settings")
