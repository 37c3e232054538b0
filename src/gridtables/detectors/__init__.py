"""Table boundary and header detection."""

from .header_detector import HeaderDetector
from .table_analyzer import TableAnalyzer

__all__ = ["TableAnalyzer", "HeaderDetector"]
