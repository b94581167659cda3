"""
Editor Module — Staging, paste interception, upload and reconciliation.
"""

from .orchestrator import CancelToken, UploadOrchestrator
from .pipeline import SubmissionPipeline
from .reconcile import ReconciledContent, reconcile
from .registry import PendingFile, PendingUploadRegistry
from .session import EditorSession, Mutation

__all__ = [
    "CancelToken",
    "EditorSession",
    "Mutation",
    "PendingFile",
    "PendingUploadRegistry",
    "ReconciledContent",
    "SubmissionPipeline",
    "UploadOrchestrator",
    "reconcile",
]
