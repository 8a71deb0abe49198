"""Concatenate a source tree into one document, honoring .gitignore rules."""

__version__ = "0.1.0"

from tree_concat.aggregator import Aggregator, format_block
from tree_concat.errors import ConfigError, PatternError, TreeConcatError
from tree_concat.matcher import IgnoreRule, IgnoreRuleSet, compile_rules, matches
from tree_concat.walker import Entry, EntryKind, TreeWalker, WalkStats, walk

__all__ = [
    "Aggregator",
    "format_block",
    "ConfigError",
    "PatternError",
    "TreeConcatError",
    "IgnoreRule",
    "IgnoreRuleSet",
    "compile_rules",
    "matches",
    "Entry",
    "EntryKind",
    "TreeWalker",
    "WalkStats",
    "walk",
]
