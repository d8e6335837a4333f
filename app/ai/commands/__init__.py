"""
AI Commands Module - the model-backed inventory paths.

- CommandParser: natural language -> validated actions (lenient policy)
- InventoryQuery: natural language question -> answer + matching bins
- TextStructurer: dictated text -> item names
"""

from app.ai.commands.parser import CommandParser, command_parser
from app.ai.commands.query import InventoryQuery, QueryMatch, QueryResult, inventory_query
from app.ai.commands.structure import StructureTextResult, TextStructurer, text_structurer

__all__ = [
    "CommandParser",
    "command_parser",
    "InventoryQuery",
    "QueryMatch",
    "QueryResult",
    "inventory_query",
    "StructureTextResult",
    "TextStructurer",
    "text_structurer",
]
