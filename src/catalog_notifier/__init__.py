"""
Catalog Notifier - change detection and notification routing for EventCatalog

This package compares an EventCatalog between two git revisions, turns the
differences into typed notifications and routes them to the teams that
subscribed to them over webhook channels.

Main modules:
- core: data models, runtime settings, subscription config and errors
- vcs: git access (changed files, file snapshots at a revision)
- catalog: read-only access to catalog services, events and owners
- detectors: consumer-added / consumer-removed / schema-changed detection
- notifications: interest filter, message formatters, providers, dispatcher
- cli: the notifierctl command line entry point
"""

__version__ = "0.2.0"
__author__ = "Catalog Notifier Team"

from typing import Any, Dict

# Defaults shared by the CLI and settings
DEFAULT_CONFIG: Dict[str, Any] = {
    "config_file": "eventcatalog.notifier.yml",
    "commit_range": "HEAD~1..HEAD",
    "lifecycle": "active",
    "log_level": "INFO",
}


__all__ = ["__version__", "__author__", "DEFAULT_CONFIG"]
