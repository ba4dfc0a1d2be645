"""State data models for llmcommitter.

Contains Pydantic models for the grouping state:
- View: Which screen the user is on
- DraftGroup: The group currently being assembled
- StagedGroup: A group ready to be committed
- SettingsSummary: Provider settings shown alongside the state
- AppState: Immutable snapshot of everything above
"""

from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from llmcommitter.config import LLMSettings


class View(str, Enum):
    """Navigation state."""

    FILE_SELECTION = "fileselection"
    GROUP = "group"
    SETTINGS = "settings"
    REVIEW_STAGED_GROUP = "reviewStagedGroup"


def _unique_paths(paths: tuple[str, ...]) -> tuple[str, ...]:
    """Drop duplicate and blank paths, keeping first occurrence order."""
    seen = set()
    result = []
    for path in paths:
        if path and path not in seen:
            seen.add(path)
            result.append(path)
    return tuple(result)


class DraftGroup(BaseModel):
    """The in-progress group. At most one exists at a time."""

    model_config = ConfigDict(frozen=True)

    files: tuple[str, ...]
    specific_context: str = ""
    commit_message: Optional[str] = None
    generating: bool = False

    @field_validator("files")
    @classmethod
    def files_must_not_be_empty(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Ensure the draft holds at least one file."""
        v = _unique_paths(v)
        if not v:
            raise ValueError("A group needs at least one file")
        return v


class StagedGroup(BaseModel):
    """A group with a commit message, waiting to be committed.

    Attributes:
        id: Opaque unique identifier.
        files: Non-empty ordered set of repo-relative paths.
        specific_context: Free-text context for this group only.
        commit_message: Non-blank commit message.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    files: tuple[str, ...]
    # camelCase aliases accept records written by the editor extension
    specific_context: str = Field(
        default="", validation_alias=AliasChoices("specific_context", "specificContext")
    )
    commit_message: str = Field(
        validation_alias=AliasChoices("commit_message", "commitMessage")
    )

    @field_validator("id")
    @classmethod
    def id_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Group id cannot be empty")
        return v

    @field_validator("files")
    @classmethod
    def files_must_not_be_empty(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Ensure the group holds at least one file."""
        v = _unique_paths(v)
        if not v:
            raise ValueError("A staged group needs at least one file")
        return v

    @field_validator("commit_message")
    @classmethod
    def message_must_not_be_blank(cls, v: str) -> str:
        """Ensure the commit message is not blank."""
        if not v or not v.strip():
            raise ValueError("Commit message cannot be empty")
        return v.strip()


class SettingsSummary(BaseModel):
    """Provider settings as exposed to the UI layer. Never holds the key."""

    model_config = ConfigDict(frozen=True)

    has_api_key: bool = False
    provider: str = ""
    model: str = ""
    max_tokens: int = 0
    temperature: float = 0.0
    instructions_length: int = 0

    @classmethod
    def from_settings(cls, settings: LLMSettings) -> "SettingsSummary":
        return cls(
            has_api_key=settings.has_api_key,
            provider=settings.provider.value,
            model=settings.model,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            instructions_length=len(settings.instructions),
        )


class AppState(BaseModel):
    """Immutable snapshot of the grouping state."""

    model_config = ConfigDict(frozen=True)

    changed_files: tuple[str, ...] = ()
    selection: tuple[str, ...] = ()
    draft: Optional[DraftGroup] = None
    staged_groups: tuple[StagedGroup, ...] = ()
    general_context: str = ""
    settings: SettingsSummary = SettingsSummary()
    review_group_id: Optional[str] = None
    view: View = View.FILE_SELECTION

    @property
    def claimed_files(self) -> set[str]:
        """All paths that belong to some staged group."""
        return {path for group in self.staged_groups for path in group.files}

    @property
    def unclaimed_files(self) -> tuple[str, ...]:
        """Changed files not yet in a staged group, in snapshot order."""
        claimed = self.claimed_files
        return tuple(path for path in self.changed_files if path not in claimed)

    def get_staged_group(self, group_id: str) -> Optional[StagedGroup]:
        for group in self.staged_groups:
            if group.id == group_id:
                return group
        return None
