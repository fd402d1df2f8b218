"""
Jokester - joke generation with a deduplicating memory.

Generates short jokes about captured content through an LLM provider and
remembers every accepted joke (hash + embedding) so near-duplicates are
rejected and regenerated.
"""

__version__ = "1.0.0"
