"""
AI Module - natural-language commands and questions over a location's bins.

Architecture Overview:
=====================

┌─────────────────────────────────────────────────────────────────────────┐
│                    Inventory snapshot (context.py)                       │
│           active bins + areas + trash, read once per request             │
└───────────────────────────────┬─────────────────────────────────────────┘
                                │
        ┌───────────────────────┴───────────────────────┐
        │                                               │
        ▼                                               ▼
┌───────────────────┐                         ┌───────────────────┐
│  CommandParser    │                         │  InventoryQuery   │
│  text -> actions  │                         │  question ->      │
│  (lenient checks) │                         │  answer + matches │
└─────────┬─────────┘                         └───────────────────┘
          │
          ▼
   command_executor (app.services) ──► activity log

Module Structure:
================
- providers/: one HTTP call per request to OpenAI, Anthropic, Gemini or an
  OpenAI-compatible server, behind an egress guard
- actions/: the action registry and the two validation policies
- prompts/: system prompts and user messages
- commands/: the command parser and the inventory query
- schemas/: typed actions and execution results
- monitoring/: structured logging of provider traffic
"""

__version__ = "0.4.0"

from app.ai.commands import CommandParser, InventoryQuery, command_parser, inventory_query

__all__ = [
    "CommandParser",
    "command_parser",
    "InventoryQuery",
    "inventory_query",
]
