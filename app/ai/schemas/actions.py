"""
Action Schemas - typed inventory actions and execution results.

Actions are a tagged union keyed by "type". Each variant carries only the
fields its operation needs; field validators normalize the loose JSON a
model (or an API client) sends:

- item/tag arrays: non-strings dropped, entries trimmed, empty strings
  dropped, and the array must still be non-empty where it is required
- optional fields of the wrong type become None instead of failing
- bin_name defaults to "" (it is only used in human-readable details)

Usage:
======
```python
from app.ai.schemas.actions import ACTION_MODELS

action = ACTION_MODELS["add_items"].model_validate(
    {"type": "add_items", "bin_id": "T1", "items": [" Hammer ", ""]}
)
assert action.items == ["Hammer"]
```
"""

import logging
from typing import Annotated, Any, Dict, List, Literal, Optional, Type, Union

from pydantic import BaseModel, Field, ValidationInfo, field_validator


logger = logging.getLogger("openbin.ai.actions")


# ---------------------------------------------------------------------------
# FIELD NORMALIZERS
# ---------------------------------------------------------------------------

def clean_string_list(value: Any) -> List[str]:
    """Keep the string entries of a list, trimmed, without empty strings."""
    if not isinstance(value, list):
        return []
    return [v.strip() for v in value if isinstance(v, str) and v.strip()]


def _required_list(value: Any, info: ValidationInfo) -> List[str]:
    cleaned = clean_string_list(value)
    if not cleaned:
        raise ValueError(f'requires non-empty "{info.field_name}" array')
    return cleaned


def _optional_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    return clean_string_list(value)


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _optional_trimmed(value: Any) -> Optional[str]:
    return value.strip() if isinstance(value, str) else None


def _required_trimmed(value: Any, info: ValidationInfo) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f'requires "{info.field_name}"')
    return value.strip()


# ---------------------------------------------------------------------------
# BASE VARIANTS
# ---------------------------------------------------------------------------

class BinAction(BaseModel):
    """Base for every action that targets an existing bin."""
    bin_id: str
    bin_name: str = ""

    @field_validator("bin_id", mode="before")
    @classmethod
    def validate_bin_id(cls, v: Any, info: ValidationInfo) -> str:
        return _required_trimmed(v, info)

    @field_validator("bin_name", mode="before")
    @classmethod
    def default_bin_name(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""


# ---------------------------------------------------------------------------
# ITEM ACTIONS
# ---------------------------------------------------------------------------

class AddItemsAction(BinAction):
    type: Literal["add_items"] = "add_items"
    items: List[str]

    clean_items = field_validator("items", mode="before")(_required_list)


class RemoveItemsAction(BinAction):
    type: Literal["remove_items"] = "remove_items"
    items: List[str]

    clean_items = field_validator("items", mode="before")(_required_list)


class ModifyItemAction(BinAction):
    type: Literal["modify_item"] = "modify_item"
    old_item: str
    new_item: str

    trim_values = field_validator("old_item", "new_item", mode="before")(_required_trimmed)


# ---------------------------------------------------------------------------
# BIN LIFECYCLE ACTIONS
# ---------------------------------------------------------------------------

class CreateBinAction(BaseModel):
    """The only action that does not reference an existing bin."""
    type: Literal["create_bin"] = "create_bin"
    name: str
    area_name: Optional[str] = None
    tags: Optional[List[str]] = None
    items: Optional[List[str]] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    notes: Optional[str] = None
    card_style: Optional[str] = None

    require_name = field_validator("name", mode="before")(_required_trimmed)
    trim_area_name = field_validator("area_name", mode="before")(_optional_trimmed)
    clean_lists = field_validator("tags", "items", mode="before")(_optional_list)
    keep_strings = field_validator("color", "icon", "notes", "card_style", mode="before")(_optional_str)


class DeleteBinAction(BinAction):
    type: Literal["delete_bin"] = "delete_bin"


class RestoreBinAction(BinAction):
    type: Literal["restore_bin"] = "restore_bin"


# ---------------------------------------------------------------------------
# TAG ACTIONS
# ---------------------------------------------------------------------------

class AddTagsAction(BinAction):
    type: Literal["add_tags"] = "add_tags"
    tags: List[str]

    clean_tags = field_validator("tags", mode="before")(_required_list)


class RemoveTagsAction(BinAction):
    type: Literal["remove_tags"] = "remove_tags"
    tags: List[str]

    clean_tags = field_validator("tags", mode="before")(_required_list)


class ModifyTagAction(BinAction):
    type: Literal["modify_tag"] = "modify_tag"
    old_tag: str
    new_tag: str

    trim_values = field_validator("old_tag", "new_tag", mode="before")(_required_trimmed)


# ---------------------------------------------------------------------------
# ATTRIBUTE ACTIONS
# ---------------------------------------------------------------------------

class SetAreaAction(BinAction):
    """area_id None means: look the area up by name, creating it if missing."""
    type: Literal["set_area"] = "set_area"
    area_id: Optional[str] = None
    area_name: str

    @field_validator("area_id", mode="before")
    @classmethod
    def validate_area_id(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) and v else None

    @field_validator("area_name", mode="before")
    @classmethod
    def validate_area_name(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise ValueError('requires "area_name"')
        return v.strip()


class SetNotesAction(BinAction):
    type: Literal["set_notes"] = "set_notes"
    notes: str = ""
    mode: Literal["set", "append", "clear"]

    @field_validator("notes", mode="before")
    @classmethod
    def default_notes(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""

    @field_validator("mode", mode="before")
    @classmethod
    def validate_mode(cls, v: Any) -> str:
        if v not in ("set", "append", "clear"):
            raise ValueError('requires "mode" of "set", "append" or "clear"')
        return v


class SetIconAction(BinAction):
    type: Literal["set_icon"] = "set_icon"
    icon: str

    @field_validator("icon", mode="before")
    @classmethod
    def validate_icon(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise ValueError('requires "icon"')
        return v


class SetColorAction(BinAction):
    type: Literal["set_color"] = "set_color"
    color: str

    @field_validator("color", mode="before")
    @classmethod
    def validate_color(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise ValueError('requires "color"')
        return v


class UpdateBinAction(BinAction):
    """Bulk edit; fields left as None are not touched."""
    type: Literal["update_bin"] = "update_bin"
    name: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None
    area_name: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    card_style: Optional[str] = None
    visibility: Optional[Literal["location", "private"]] = None

    trim_strings = field_validator("name", "area_name", mode="before")(_optional_trimmed)
    keep_strings = field_validator("notes", "icon", "color", "card_style", mode="before")(_optional_str)
    clean_tags = field_validator("tags", mode="before")(_optional_list)

    @field_validator("visibility", mode="before")
    @classmethod
    def validate_visibility(cls, v: Any) -> Optional[str]:
        return v if v in ("location", "private") else None


# ---------------------------------------------------------------------------
# UNION + LOOKUP TABLE
# ---------------------------------------------------------------------------

Action = Annotated[
    Union[
        AddItemsAction,
        RemoveItemsAction,
        ModifyItemAction,
        CreateBinAction,
        DeleteBinAction,
        AddTagsAction,
        RemoveTagsAction,
        ModifyTagAction,
        SetAreaAction,
        SetNotesAction,
        SetIconAction,
        SetColorAction,
        UpdateBinAction,
        RestoreBinAction,
    ],
    Field(discriminator="type"),
]

ACTION_MODELS: Dict[str, Type[BaseModel]] = {
    "add_items": AddItemsAction,
    "remove_items": RemoveItemsAction,
    "modify_item": ModifyItemAction,
    "create_bin": CreateBinAction,
    "delete_bin": DeleteBinAction,
    "add_tags": AddTagsAction,
    "remove_tags": RemoveTagsAction,
    "modify_tag": ModifyTagAction,
    "set_area": SetAreaAction,
    "set_notes": SetNotesAction,
    "set_icon": SetIconAction,
    "set_color": SetColorAction,
    "update_bin": UpdateBinAction,
    "restore_bin": RestoreBinAction,
}


# ---------------------------------------------------------------------------
# RESULTS
# ---------------------------------------------------------------------------

class CommandResult(BaseModel):
    """
    Parsed model output.

    interpretation is always present, even when no action survived.
    """
    actions: List[Action] = Field(default_factory=list)
    interpretation: str


class ActionResult(BaseModel):
    """Outcome of one executed action."""
    type: str
    success: bool
    details: str
    bin_id: Optional[str] = None
    bin_name: Optional[str] = None
    error: Optional[str] = None


class ExecuteResult(BaseModel):
    """
    Outcome of a whole action sequence.

    executed has one entry per input action, in input order; errors holds
    "<type>: <message>" for each failed one.
    """
    executed: List[ActionResult] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
