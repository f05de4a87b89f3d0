"""CLI layer: the interactive shell, prompts, built-in commands and the
error boundary.

This package is the outermost layer.  It may import from ``core`` and
``infra``; no other layer may import from ``cli``.
"""
