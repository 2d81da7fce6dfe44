"""Version-control adapters that feed file changes into the analysis."""

from .jujutsu import JujutsuFetcher, JujutsuRepository, VcsError, parse_git_diff

__all__ = ["JujutsuFetcher", "JujutsuRepository", "VcsError", "parse_git_diff"]
