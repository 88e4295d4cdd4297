"""Bundlewright CLI — Typer-based command-line interface.

Provides the ``bundlewright`` command with subcommands for inspecting
platform normalization and artifact file names, merging per-platform
build manifests, and reconciling a staging area against a remote store.

All output uses Rich for formatted terminal display.
"""
