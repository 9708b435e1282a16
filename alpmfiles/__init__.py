"""Readers for ALPM package metadata: the key = value INI dialect and MTREE v2 files."""

__version__ = "0.1.0"