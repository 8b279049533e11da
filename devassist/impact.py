"""Change-impact queries over the internal dependency graph."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

import networkx as nx

from .logging import get_logger
from .models import DependencyGraph


@dataclass(frozen=True)
class ImpactReport:
    path: str
    direct_dependents: Tuple[str, ...]
    transitive_dependents: Tuple[str, ...]
    dependencies: Tuple[str, ...]
    in_cycle: bool

    @property
    def risk(self) -> str:
        count = len(self.transitive_dependents)
        if count >= 10:
            return "high"
        if count >= 3:
            return "medium"
        return "low"


class ImpactAnalyzer:
    """Wraps resolved file-to-file edges in a networkx DiGraph.

    External package nodes and unresolved edges are left out; an edge
    ``a -> b`` means ``a`` references ``b``.
    """

    def __init__(self, graph: DependencyGraph) -> None:
        self.logger = get_logger("impact")
        self.graph = nx.DiGraph()
        for key, node in graph.nodes.items():
            if node.kind != "external":
                self.graph.add_node(key, kind=node.kind, language=node.language)
        for edge in graph.edges:
            if edge.unresolved or edge.target not in self.graph or edge.source not in self.graph:
                continue
            self.graph.add_edge(edge.source, edge.target, reference=edge.reference)
        self.logger.debug(
            "Impact graph: %d files, %d internal edges",
            self.graph.number_of_nodes(),
            self.graph.number_of_edges(),
        )

    def find_cycles(self) -> List[List[str]]:
        """Strongly connected components with more than one file, sorted."""
        components = [
            sorted(component)
            for component in nx.strongly_connected_components(self.graph)
            if len(component) > 1
        ]
        return sorted(components)

    def dependents(self, path: str) -> Tuple[str, ...]:
        """Every file that reaches ``path`` through one or more references."""
        self._require(path)
        return tuple(sorted(nx.ancestors(self.graph, path)))

    def dependencies(self, path: str) -> Tuple[str, ...]:
        self._require(path)
        return tuple(sorted(nx.descendants(self.graph, path)))

    def impact(self, path: str) -> ImpactReport:
        self._require(path)
        in_cycle = any(path in component for component in self.find_cycles())
        return ImpactReport(
            path=path,
            direct_dependents=tuple(sorted(self.graph.predecessors(path))),
            transitive_dependents=self.dependents(path),
            dependencies=self.dependencies(path),
            in_cycle=in_cycle,
        )

    def _require(self, path: str) -> None:
        if path not in self.graph:
            raise KeyError(f"Unknown file in dependency graph: {path}")


def find_cycles(graph: DependencyGraph) -> List[List[str]]:
    return ImpactAnalyzer(graph).find_cycles()


__all__ = ["ImpactAnalyzer", "ImpactReport", "find_cycles"]
