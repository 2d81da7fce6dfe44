"""Service mode for commitsplit."""

from .app import create_app, make_manager_loader, run_service

__all__ = ["create_app", "make_manager_loader", "run_service"]
