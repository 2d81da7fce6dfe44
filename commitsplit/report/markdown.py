"""Markdown rendering of commit-division proposals."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

from jinja2 import Environment, FileSystemLoader

from ..models import CrossRepoProposal

_TEMPLATE_NAME = "proposal.md.j2"


def _create_env(templates_dir: Path | None = None) -> Environment:
    directories: List[str] = []
    if templates_dir:
        directories.append(str(templates_dir))
    directories.append(str(Path(__file__).with_name("templates")))
    loader = FileSystemLoader(directories)
    return Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)


def render_markdown(proposal: CrossRepoProposal, *, templates_dir: Path | None = None) -> str:
    """Render ``proposal`` as a Markdown review document.

    A ``proposal.md.j2`` found in ``templates_dir`` takes precedence over the
    bundled template.
    """
    template = _create_env(templates_dir).get_template(_TEMPLATE_NAME)
    return template.render(**_template_context(proposal)).rstrip() + "\n"


def _template_context(proposal: CrossRepoProposal) -> Dict[str, Any]:
    repositories = sorted(
        set(proposal.original_commit_ids) | set(proposal.target_commit_ids)
    )
    return {
        "proposal": proposal,
        "groups": proposal.commit_groups,
        "repositories": repositories,
        "file_count": sum(group.file_count() for group in proposal.commit_groups),
    }


__all__ = ["render_markdown"]
