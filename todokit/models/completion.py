"""Completion policies for todokit."""

from enum import Enum

from pydantic import BaseModel, Field


class CompletionMode(str, Enum):
    """What happens to a task's priority when it is completed."""
    JUST_MARK = "just_mark"
    MOVE_PRIORITY = "move_priority"
    PRIORITY_TO_TAG = "priority_to_tag"
    REMOVE_PRIORITY = "remove_priority"


class CompletionDateMode(str, Enum):
    """When a completion date is written."""
    WHEN_CREATION_DATE_IS_PRESENT = "when_creation_date_is_present"
    ALWAYS_SET = "always_set"


class CompletionConfig(BaseModel):
    mode: CompletionMode = Field(CompletionMode.JUST_MARK, description="Priority disposition on completion")
    date_mode: CompletionDateMode = Field(
        CompletionDateMode.WHEN_CREATION_DATE_IS_PRESENT,
        description="Whether the finish date needs a creation date",
    )
