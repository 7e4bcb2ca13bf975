"""Data models for the regulatory intelligence system."""

from .regulation import RegulationEntry, AnalysisResult, NewsItem
from .translation import TranslationLog, CorrectionRationale, QCStatus
from .records import AuditEntry, MonitoringReportLog, ChatMessage

__all__ = [
    "RegulationEntry", "AnalysisResult", "NewsItem",
    "TranslationLog", "CorrectionRationale", "QCStatus",
    "AuditEntry", "MonitoringReportLog", "ChatMessage",
]
