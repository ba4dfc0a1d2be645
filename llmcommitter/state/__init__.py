"""Grouping state for llmcommitter.

This package owns selection, draft and staged group state:
- models: View, DraftGroup, StagedGroup, SettingsSummary, AppState
- paths: get_state_dir, ensure_state_dir, get_state_file
- store: WorkspaceStateStore, WorkspaceSnapshot, STATE_VERSION
- machine: GroupStateMachine
"""

# Models
from llmcommitter.state.models import (
    AppState,
    DraftGroup,
    SettingsSummary,
    StagedGroup,
    View,
)

# Paths
from llmcommitter.state.paths import (
    ensure_state_dir,
    get_state_dir,
    get_state_file,
)

# Persistence
from llmcommitter.state.store import (
    STATE_VERSION,
    WorkspaceSnapshot,
    WorkspaceStateStore,
)

# State machine
from llmcommitter.state.machine import GroupStateMachine


__all__ = [
    # Models
    "AppState",
    "DraftGroup",
    "SettingsSummary",
    "StagedGroup",
    "View",
    # Paths
    "ensure_state_dir",
    "get_state_dir",
    "get_state_file",
    # Persistence
    "STATE_VERSION",
    "WorkspaceSnapshot",
    "WorkspaceStateStore",
    # State machine
    "GroupStateMachine",
]
