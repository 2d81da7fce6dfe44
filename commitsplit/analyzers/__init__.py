"""Change classification and cross-repository dependency detection."""

from .classifier import ChangeClassifier, Classification, classify, detect_change_type, extract_keywords
from .dependencies import DependencyDetector, build_dependency_graph

__all__ = [
    "ChangeClassifier",
    "Classification",
    "DependencyDetector",
    "build_dependency_graph",
    "classify",
    "detect_change_type",
    "extract_keywords",
]
