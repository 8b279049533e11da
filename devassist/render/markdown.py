"""Markdown documentation rendered from an AnalysisResult."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence

from jinja2 import ChoiceLoader, DictLoader, Environment, FileSystemLoader

from ..impact import ImpactAnalyzer
from ..logging import get_logger
from ..models import AnalysisResult
from .templates import TEMPLATES

DOCUMENTS = tuple(TEMPLATES)
_HUB_LIMIT = 5


class DocumentationRenderer:
    """Renders the report, architecture and focus documents.

    Templates found in ``templates_dir`` take precedence over the built-in
    ones with the same name.
    """

    def __init__(self, templates_dir: Optional[Path] = None) -> None:
        loaders = []
        if templates_dir is not None:
            loaders.append(FileSystemLoader(str(templates_dir)))
        loaders.append(DictLoader(TEMPLATES))
        self._env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.logger = get_logger("render")

    def render(self, name: str, result: AnalysisResult) -> str:
        template = self._env.get_template(name)
        return template.render(**self._context(result)).strip() + "\n"

    def render_all(self, result: AnalysisResult, documents: Sequence[str] = DOCUMENTS) -> Dict[str, str]:
        return {name: self.render(name, result) for name in documents}

    def write(
        self,
        result: AnalysisResult,
        output_dir: Path,
        documents: Sequence[str] = DOCUMENTS,
    ) -> List[Path]:
        output_dir.mkdir(parents=True, exist_ok=True)
        written: List[Path] = []
        for name, content in self.render_all(result, documents).items():
            path = output_dir / name
            path.write_text(content, encoding="utf-8")
            written.append(path)
        self.logger.info("Wrote %d documents to %s", len(written), output_dir)
        return written

    def _context(self, result: AnalysisResult) -> Dict[str, object]:
        analyzer = ImpactAnalyzer(result.graph)
        internal_edges = analyzer.graph.number_of_edges()
        hubs = sorted(
            ((path, count) for path, count in analyzer.graph.in_degree() if count),
            key=lambda item: (-item[1], item[0]),
        )
        return {
            "meta": result.metadata,
            "project": result.project,
            "structure": result.structure,
            "dependencies": result.dependencies,
            "metrics": result.metrics,
            "quality": result.quality,
            "quality_findings": [f for f in result.quality.findings if f.category != "security"],
            "security": result.security,
            "recommendations": result.recommendations,
            "cycles": analyzer.find_cycles(),
            "hubs": hubs[:_HUB_LIMIT],
            "graph_stats": {
                "files": analyzer.graph.number_of_nodes(),
                "internal": internal_edges,
                "external": len(result.graph.external_nodes()),
                "unresolved": len(result.graph.unresolved),
            },
        }


def write_docs(result: AnalysisResult, output_dir: Path) -> List[Path]:
    return DocumentationRenderer().write(result, Path(output_dir))


__all__ = ["DOCUMENTS", "DocumentationRenderer", "write_docs"]
