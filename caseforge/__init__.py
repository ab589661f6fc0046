"""Fixture tear-down guards, declaration checks, attribute templates and scratch cargo projects."""

__version__ = "0.1.0"