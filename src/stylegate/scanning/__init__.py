"""Project scanning: classification, traversal and inline suppression discovery."""

from stylegate.scanning.classifier import classify, is_candidate
from stylegate.scanning.scanner import SKIP_DIRS, is_ignored, scan_project
from stylegate.scanning.suppressions import SuppressionSet, extract_suppressions

__all__ = [
    "SKIP_DIRS",
    "SuppressionSet",
    "classify",
    "extract_suppressions",
    "is_candidate",
    "is_ignored",
    "scan_project",
]
