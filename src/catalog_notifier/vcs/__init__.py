"""
Version control access (git).
"""

from .git import GitRepository, VersionControl

__all__ = ["GitRepository", "VersionControl"]
