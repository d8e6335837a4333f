"""
Action Registry - the closed set of inventory actions.

Purpose:
========
1. Single source of truth for which action types exist
2. Field list per action, used to describe the grammar to the model
3. Whether an action targets an existing bin (so bin_id must be known)

Every consumer reads from here: the prompt builder enumerates the
definitions, and both validator policies reject any type not registered.

Usage:
======
```python
from app.ai.actions.registry import action_registry

if action_registry.has_action("add_items"):
    action = action_registry.get_action("add_items")

for line in action_registry.describe_actions():
    print(line)
```
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


logger = logging.getLogger("openbin.ai.actions.registry")


# ---------------------------------------------------------------------------
# ACTION CATEGORIES
# ---------------------------------------------------------------------------

class ActionCategory(str, Enum):
    """Categories of actions for organization."""
    ITEMS = "items"           # Bin contents
    BIN = "bin"               # Bin lifecycle (create, delete, restore)
    TAGS = "tags"             # Tag list edits
    ATTRIBUTES = "attributes" # Area, notes, icon, color, bulk update


# ---------------------------------------------------------------------------
# ACTION DEFINITION
# ---------------------------------------------------------------------------

@dataclass
class ActionDefinition:
    """
    Definition of one action type.

    Attributes:
        name: Action type, the value of the "type" discriminator
        category: Action category
        description: One-line description shown to the model
        fields: Field names in prompt notation ("items[]", "area_name?")
        targets_bin: True when the action needs the bin_id of an existing bin
        examples: Example phrasings
    """
    name: str
    category: ActionCategory
    description: str
    fields: List[str] = field(default_factory=list)
    targets_bin: bool = True
    examples: List[str] = field(default_factory=list)

    def describe(self) -> str:
        """Prompt line: '- add_items: Add items to an existing bin. Fields: bin_id, ...'"""
        return f"- {self.name}: {self.description}. Fields: {', '.join(self.fields)}"


# ---------------------------------------------------------------------------
# ACTION REGISTRY
# ---------------------------------------------------------------------------

_BIN_REF = ["bin_id", "bin_name"]


class ActionRegistry:
    """
    Registry of all actions the command pipeline can execute.

    Registration order is preserved; it is also the order in which the
    actions are listed to the model.
    """

    def __init__(self):
        self._actions: Dict[str, ActionDefinition] = {}
        self._register_builtin_actions()
        logger.info(f"Action registry initialized with {len(self._actions)} actions")

    def _register_builtin_actions(self):
        """Register all built-in actions."""

        # -----------------------------------------------------------------------
        # ITEM ACTIONS
        # -----------------------------------------------------------------------
        self.register(ActionDefinition(
            name="add_items",
            category=ActionCategory.ITEMS,
            description="Add items to an existing bin",
            fields=_BIN_REF + ["items[]"],
            examples=["Put the AA batteries in the Electronics bin"],
        ))

        self.register(ActionDefinition(
            name="remove_items",
            category=ActionCategory.ITEMS,
            description="Remove items from an existing bin",
            fields=_BIN_REF + ["items[]"],
            examples=["Remove hammer from Tools bin"],
        ))

        self.register(ActionDefinition(
            name="modify_item",
            category=ActionCategory.ITEMS,
            description="Change an item's name in a bin",
            fields=_BIN_REF + ["old_item", "new_item"],
            examples=["Rename drill to cordless drill in the Garage bin"],
        ))

        # -----------------------------------------------------------------------
        # BIN LIFECYCLE ACTIONS
        # -----------------------------------------------------------------------
        self.register(ActionDefinition(
            name="create_bin",
            category=ActionCategory.BIN,
            description="Create a new bin",
            fields=["name", "area_name?", "tags?[]", "items?[]", "color?", "icon?", "notes?"],
            targets_bin=False,
            examples=["Create a bin called Camping Gear in the Attic"],
        ))

        self.register(ActionDefinition(
            name="delete_bin",
            category=ActionCategory.BIN,
            description="Delete a bin (moves it to the trash)",
            fields=list(_BIN_REF),
            examples=["Delete the Old Cables bin"],
        ))

        self.register(ActionDefinition(
            name="restore_bin",
            category=ActionCategory.BIN,
            description="Restore a bin from the trash. Use IDs from trash_bins only",
            fields=list(_BIN_REF),
            examples=["Bring back the Old Cables bin"],
        ))

        # -----------------------------------------------------------------------
        # TAG ACTIONS
        # -----------------------------------------------------------------------
        self.register(ActionDefinition(
            name="add_tags",
            category=ActionCategory.TAGS,
            description="Add tags to a bin",
            fields=_BIN_REF + ["tags[]"],
        ))

        self.register(ActionDefinition(
            name="remove_tags",
            category=ActionCategory.TAGS,
            description="Remove tags from a bin",
            fields=_BIN_REF + ["tags[]"],
        ))

        self.register(ActionDefinition(
            name="modify_tag",
            category=ActionCategory.TAGS,
            description="Rename a tag on a bin",
            fields=_BIN_REF + ["old_tag", "new_tag"],
        ))

        # -----------------------------------------------------------------------
        # ATTRIBUTE ACTIONS
        # -----------------------------------------------------------------------
        self.register(ActionDefinition(
            name="set_area",
            category=ActionCategory.ATTRIBUTES,
            description="Assign a bin to an area",
            fields=_BIN_REF + ["area_id (null if new area)", "area_name"],
        ))

        self.register(ActionDefinition(
            name="set_notes",
            category=ActionCategory.ATTRIBUTES,
            description="Set/append/clear bin notes",
            fields=_BIN_REF + ["notes", 'mode ("set"|"append"|"clear")'],
        ))

        self.register(ActionDefinition(
            name="set_icon",
            category=ActionCategory.ATTRIBUTES,
            description="Set a bin's icon",
            fields=_BIN_REF + ["icon"],
        ))

        self.register(ActionDefinition(
            name="set_color",
            category=ActionCategory.ATTRIBUTES,
            description="Set a bin's color",
            fields=_BIN_REF + ["color"],
        ))

        self.register(ActionDefinition(
            name="update_bin",
            category=ActionCategory.ATTRIBUTES,
            description="Update several bin fields at once",
            fields=_BIN_REF + [
                "name?", "notes?", "tags?[]", "area_name?", "icon?", "color?",
                "card_style?", 'visibility? ("location"|"private")',
            ],
        ))

    # ---------------------------------------------------------------------------
    # REGISTRY OPERATIONS
    # ---------------------------------------------------------------------------

    def register(self, action: ActionDefinition) -> None:
        self._actions[action.name] = action
        logger.debug(f"Registered action: {action.name}")

    def get_action(self, name: str) -> Optional[ActionDefinition]:
        """
        Get an action by its exact type name.

        Matching is exact: model output with "Add_Items" is not an action.
        """
        if not isinstance(name, str):
            return None
        return self._actions.get(name)

    def has_action(self, name: str) -> bool:
        return self.get_action(name) is not None

    def targets_existing_bin(self, name: str) -> bool:
        """True when the action must reference a bin already in the snapshot."""
        action = self.get_action(name)
        return action is not None and action.targets_bin

    def list_actions(self, category: Optional[ActionCategory] = None) -> List[ActionDefinition]:
        """List registered actions in registration order, optionally by category."""
        if category:
            return [a for a in self._actions.values() if a.category == category]
        return list(self._actions.values())

    def list_action_names(self) -> List[str]:
        return list(self._actions.keys())

    def describe_actions(self) -> List[str]:
        """One prompt line per action, in registration order."""
        return [action.describe() for action in self._actions.values()]


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------

action_registry = ActionRegistry()
