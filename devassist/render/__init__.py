"""Documentation rendering for analysis results."""

from .markdown import DOCUMENTS, DocumentationRenderer, write_docs

__all__ = ["DOCUMENTS", "DocumentationRenderer", "write_docs"]
