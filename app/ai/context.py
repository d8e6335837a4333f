"""
Inventory Context - request-scoped snapshot of a location for the AI paths.

The snapshot is read once per request and handed to both the prompt
builder (serialized into the user message) and the validator (as the set
of bin ids an action may reference). Nothing here mutates the store.

Usage:
======
```python
from app.ai.context import build_command_context

context = build_command_context(db, location_id, user_id=user.id)
result = await command_parser.parse(config, text, context)
```
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from app.models.area import Area
from app.models.bin import Bin


AVAILABLE_COLORS = [
    "red", "orange", "amber", "lime", "green", "teal", "cyan",
    "sky", "blue", "indigo", "purple", "rose", "pink", "gray",
]

AVAILABLE_ICONS = [
    "Package", "Box", "Archive", "Wrench", "Shirt", "Book", "Utensils", "Laptop", "Camera", "Music",
    "Heart", "Star", "Home", "Car", "Bike", "Plane", "Briefcase", "ShoppingBag", "Gift", "Lightbulb",
    "Scissors", "Hammer", "Paintbrush", "Leaf", "Apple", "Coffee", "Wine", "Baby", "Dog", "Cat",
]

NOTES_PREVIEW_LENGTH = 200


def truncate_notes(notes: Optional[str]) -> str:
    if not notes:
        return ""
    if len(notes) > NOTES_PREVIEW_LENGTH:
        return notes[:NOTES_PREVIEW_LENGTH] + "..."
    return notes


@dataclass
class BinSummary:
    """One active bin as the model sees it."""
    id: str
    name: str
    items: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    area_id: Optional[str] = None
    area_name: str = ""
    notes: str = ""
    icon: str = ""
    color: str = ""
    visibility: str = "location"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "items": self.items,
            "tags": self.tags,
            "area_id": self.area_id,
            "area_name": self.area_name,
            "notes": truncate_notes(self.notes),
            "icon": self.icon,
            "color": self.color,
            "visibility": self.visibility,
        }


@dataclass
class AreaSummary:
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass
class TrashBinSummary:
    """A soft-deleted bin; only restore_bin may target it."""
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass
class CommandContext:
    """
    Snapshot fed to the command prompt and the action validator.

    Attributes:
        bins: Active bins with item names in position order
        areas: All areas of the location
        trash_bins: Soft-deleted bins
        available_colors: Palette keys accepted by set_color
        available_icons: Icon names accepted by set_icon
    """
    bins: List[BinSummary] = field(default_factory=list)
    areas: List[AreaSummary] = field(default_factory=list)
    trash_bins: List[TrashBinSummary] = field(default_factory=list)
    available_colors: List[str] = field(default_factory=lambda: list(AVAILABLE_COLORS))
    available_icons: List[str] = field(default_factory=lambda: list(AVAILABLE_ICONS))

    def known_bin_ids(self) -> Set[str]:
        """Bin ids an action may reference: active bins plus the trash."""
        return {b.id for b in self.bins} | {b.id for b in self.trash_bins}

    def to_prompt_dict(self) -> Dict[str, Any]:
        return {
            "bins": [b.to_dict() for b in self.bins],
            "areas": [a.to_dict() for a in self.areas],
            "trash_bins": [b.to_dict() for b in self.trash_bins],
        }


@dataclass
class InventoryContext:
    """Read-only snapshot for inventory questions."""
    bins: List[BinSummary] = field(default_factory=list)
    areas: List[AreaSummary] = field(default_factory=list)
    trash_bins: List[TrashBinSummary] = field(default_factory=list)

    def bin_ids(self) -> Set[str]:
        return {b.id for b in self.bins}

    def to_prompt_dict(self) -> Dict[str, Any]:
        return {
            "bins": [
                {
                    "id": b.id,
                    "name": b.name,
                    "items": b.items,
                    "tags": b.tags,
                    "area_name": b.area_name,
                    "notes": truncate_notes(b.notes),
                    "visibility": b.visibility,
                }
                for b in self.bins
            ],
            "areas": [a.to_dict() for a in self.areas],
            "trash_bins": [b.to_dict() for b in self.trash_bins],
        }


# ---------------------------------------------------------------------------
# BUILDERS
# ---------------------------------------------------------------------------

def _fetch(db: Session, location_id: str, user_id: Optional[str]):
    """Load areas, visible active bins and trashed bins for a location."""
    areas = (
        db.query(Area)
        .filter(Area.location_id == location_id)
        .order_by(Area.name)
        .all()
    )
    area_names = {a.id: a.name for a in areas}

    query = db.query(Bin).filter(Bin.location_id == location_id)
    if user_id is not None:
        # Private bins are only visible to their creator
        query = query.filter(or_(Bin.visibility != "private", Bin.created_by == user_id))

    bins = (
        query.filter(Bin.deleted_at.is_(None))
        .options(selectinload(Bin.items))
        .order_by(Bin.name)
        .all()
    )
    trashed = (
        query.filter(Bin.deleted_at.is_not(None))
        .order_by(Bin.deleted_at.desc())
        .all()
    )

    summaries = [
        BinSummary(
            id=b.id,
            name=b.name,
            items=b.item_names,
            tags=list(b.tags or []),
            area_id=b.area_id,
            area_name=area_names.get(b.area_id, "") if b.area_id else "",
            notes=b.notes or "",
            icon=b.icon or "",
            color=b.color or "",
            visibility=b.visibility,
        )
        for b in bins
    ]
    return (
        summaries,
        [AreaSummary(id=a.id, name=a.name) for a in areas],
        [TrashBinSummary(id=b.id, name=b.name) for b in trashed],
    )


def build_command_context(db: Session, location_id: str, user_id: Optional[str] = None) -> CommandContext:
    bins, areas, trash_bins = _fetch(db, location_id, user_id)
    return CommandContext(bins=bins, areas=areas, trash_bins=trash_bins)


def build_inventory_context(db: Session, location_id: str, user_id: Optional[str] = None) -> InventoryContext:
    bins, areas, trash_bins = _fetch(db, location_id, user_id)
    return InventoryContext(bins=bins, areas=areas, trash_bins=trash_bins)
