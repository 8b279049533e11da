"""Pipeline wiring: walk, detect, analyze, score, recommend."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence

from . import __version__
from .analyzers import (
    DependencyGraphBuilder,
    MetricsEngine,
    ProjectTypeDetector,
    StructureAnalyzer,
    count_lines,
    extract_exports,
    extract_references,
    read_manifests,
)
from .config import AnalysisOptions, ConfigError, DevAssistConfig, load_config
from .constants import DEFAULT_TABLES, AnalysisTables
from .content import ContentReader
from .logging import get_logger, log_stage
from .models import AnalysisMetadata, AnalysisResult, FileEvidence, FileRecord
from .recommendations import synthesize
from .rules import Rule, discover_rules
from .rules.base import ProjectContext
from .rules.engine import HeuristicsEngine
from .stores import CACHE_RELATIVE_PATH, EvidenceCache
from .walker import DirectoryWalker, ScanResult, check_root

# Bump when reference or export extraction changes so cached evidence is discarded.
_EXTRACTION_VERSION = 1


class Orchestrator:
    """Runs the full static analysis pipeline for a project root."""

    def __init__(
        self,
        tables: AnalysisTables = DEFAULT_TABLES,
        rules: Optional[Sequence[Rule]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.tables = tables
        self._rule_overrides = list(rules) if rules is not None else None
        self._clock = clock or (lambda: datetime.now(UTC))
        self.detector = ProjectTypeDetector(tables)
        self.structure = StructureAnalyzer(tables)
        self.graph_builder = DependencyGraphBuilder(tables)
        self.metrics = MetricsEngine(tables)
        self.logger = get_logger("orchestrator")

    def resolve_options(self, root: Path, options: Optional[AnalysisOptions] = None, **overrides) -> AnalysisOptions:
        """Combine .devassist.yml, defaults and explicit overrides."""
        if options is None:
            options = AnalysisOptions.from_config(self._load_config(root))
        return options.with_overrides(**overrides)

    def run_analysis(
        self,
        path: Path | str,
        options: Optional[AnalysisOptions] = None,
        **overrides,
    ) -> AnalysisResult:
        """Analyze ``path`` and return a fresh AnalysisResult.

        Raises FileNotFoundError, NotADirectoryError or PermissionError when the
        root itself is unusable; every other problem degrades the result.
        """
        root = Path(path).expanduser().resolve()
        self.logger.info("Analyzing %s", root)
        check_root(root)

        options = self.resolve_options(root, options, **overrides)
        walker = self._build_walker(options)
        with log_stage(self.logger, "walk"):
            scan = walker.scan(root)

        reader = ContentReader(scan.root, options.max_file_size)
        root_files = scan.root_files()
        manifests = read_manifests(scan.root, root_files)
        engine = HeuristicsEngine(self._select_rules(options))

        with log_stage(self.logger, "project type"):
            project = self.detector.detect(root_files, manifests)
            dependencies = self.detector.summarize_dependencies(manifests)
        with log_stage(self.logger, "evidence"):
            evidence = self._gather_evidence(scan, reader, engine, options)
        with log_stage(self.logger, "structure"):
            structure = self.structure.analyze(scan.tree)
        with log_stage(self.logger, "dependency graph"):
            graph = self.graph_builder.build(scan.files, evidence, manifests)
        with log_stage(self.logger, "metrics"):
            metrics = self.metrics.measure(scan.files, evidence)

        context = ProjectContext(
            root=scan.root,
            root_files=frozenset(root_files),
            records=scan.files,
            tree=scan.tree,
            project=project,
            manifests=manifests,
            metrics=metrics,
            reader=reader,
            tables=self.tables,
            dependency_names=frozenset(
                name.lower() for name in dependencies.production + dependencies.development
            ),
        )
        with log_stage(self.logger, "heuristics"):
            quality = engine.evaluate(context, evidence)
        security = quality.security_findings
        recommendations = synthesize(metrics, quality, security, project)

        result = AnalysisResult(
            metadata=AnalysisMetadata(
                name=scan.root.name,
                root=str(scan.root),
                analyzed_at=self._clock().isoformat().replace("+00:00", "Z"),
                version=__version__,
                skipped=scan.skipped,
            ),
            project=project,
            tree=scan.tree,
            structure=structure,
            dependencies=dependencies,
            graph=graph,
            metrics=metrics,
            quality=quality,
            security=security,
            recommendations=recommendations,
        )
        self.logger.info(
            "Analysis complete: %s project, %d files, score %d",
            project.type,
            metrics.total_files,
            quality.score,
        )
        return result

    def _build_walker(self, options: AnalysisOptions) -> DirectoryWalker:
        output_root = Path(options.output_dir).parts[0] if options.output_dir else None
        ignore_dirs = options.ignore_dirs | ({output_root} if output_root else set())
        return DirectoryWalker(
            ignore_dirs=ignore_dirs,
            max_depth=options.max_depth,
            exclude_patterns=options.exclude_paths,
            use_gitignore=options.use_gitignore,
            max_file_size=options.max_file_size,
            tables=self.tables,
        )

    def _select_rules(self, options: AnalysisOptions) -> Sequence[Rule]:
        if self._rule_overrides is not None:
            return [rule for rule in self._rule_overrides if rule.id not in options.disabled_rules]
        return discover_rules(options.disabled_rules, options.oversized_file_lines)

    def _gather_evidence(
        self,
        scan: ScanResult,
        reader: ContentReader,
        engine: HeuristicsEngine,
        options: AnalysisOptions,
    ) -> Dict[str, FileEvidence]:
        cache = self._load_cache(scan.root, options)
        signature = engine.signature(options.oversized_file_lines, _EXTRACTION_VERSION)
        evidence: Dict[str, FileEvidence] = {}
        for record in scan.files:
            if not self.tables.is_countable(record.language):
                continue
            cached = cache.get(record, signature=signature) if cache is not None else None
            if cached is not None:
                evidence[record.path] = cached
                continue
            facts = self.collect_evidence(record, reader.read(record.path), engine)
            evidence[record.path] = facts
            if cache is not None:
                cache.store(record, signature=signature, evidence=facts)

        if cache is not None:
            cache.prune(evidence)
            self.logger.debug("Evidence cache: %d hits, %d misses", cache.hits, cache.misses)
            try:
                cache.persist()
            except OSError as exc:
                self._log_exception("Could not write evidence cache", exc)
        return evidence

    @staticmethod
    def collect_evidence(
        record: FileRecord, text: Optional[str], engine: HeuristicsEngine
    ) -> FileEvidence:
        if text is None:
            return FileEvidence(path=record.path)
        return FileEvidence(
            path=record.path,
            lines=count_lines(text),
            references=extract_references(record.language, text),
            exports=extract_exports(record.language, text),
            findings=engine.scan_content(record, text),
        )

    def _load_cache(self, root: Path, options: AnalysisOptions) -> Optional[EvidenceCache]:
        if not options.cache:
            return None
        return EvidenceCache(root / options.output_dir / CACHE_RELATIVE_PATH)

    def _load_config(self, root: Path) -> DevAssistConfig:
        try:
            return load_config(root)
        except ConfigError as exc:
            self.logger.warning("Ignoring invalid configuration: %s", exc)
            return DevAssistConfig(root=root)

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.warning("%s: %s", message, exc)


def run_analysis(
    path: Path | str,
    options: Optional[AnalysisOptions] = None,
    **overrides,
) -> AnalysisResult:
    """Run the analysis pipeline with default tables and rules."""
    return Orchestrator().run_analysis(path, options, **overrides)


__all__ = ["Orchestrator", "run_analysis"]
