"""Persistence helpers for devassist."""

from .evidence_cache import CACHE_RELATIVE_PATH, EvidenceCache
from .results import analysis_path, load_analysis, save_analysis

__all__ = ["CACHE_RELATIVE_PATH", "EvidenceCache", "analysis_path", "load_analysis", "save_analysis"]
