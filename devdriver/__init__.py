"""Bit-level field sets and register, command and buffer operations for device drivers, plus a JSON, YAML and TOML manifest value tree."""

__version__ = "1.0.5"

__all__ = ["buffer", "command", "fieldset", "manifest_tree", "ops", "register"]