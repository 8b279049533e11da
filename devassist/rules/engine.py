"""Quality and security heuristics engine."""

from __future__ import annotations

import hashlib
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..logging import get_logger
from ..models import FileEvidence, FileRecord, QualityFinding, QualityResult
from . import builtin_rules
from .base import ContentRule, ProjectContext, ProjectRule, Rule

MAX_SCORE = 100


def clamp_score(value: int) -> int:
    return max(0, min(MAX_SCORE, value))


class HeuristicsEngine:
    """Applies the rule table and aggregates a score.

    Each triggered rule subtracts its penalty once, however many files it
    matched. A rule that raises is logged and counts as not triggered.
    """

    def __init__(self, rules: Optional[Sequence[Rule]] = None) -> None:
        self.rules: List[Rule] = list(rules) if rules is not None else builtin_rules()
        self.logger = get_logger("rules.engine")

    @property
    def content_rules(self) -> List[ContentRule]:
        return [rule for rule in self.rules if isinstance(rule, ContentRule)]

    @property
    def project_rules(self) -> List[ProjectRule]:
        return [rule for rule in self.rules if isinstance(rule, ProjectRule)]

    def signature(self, *extra: object) -> str:
        """Fingerprint of the content rule table, used to validate cached hits."""
        digest = hashlib.sha256()
        for rule in self.content_rules:
            digest.update(f"{rule.id}:{rule.category}:{rule.severity}:{sorted(rule.languages)}".encode())
        for value in extra:
            digest.update(repr(value).encode())
        return digest.hexdigest()

    def scan_content(self, record: FileRecord, text: str) -> Tuple[QualityFinding, ...]:
        """Run every applicable content rule against one file's text."""
        findings: List[QualityFinding] = []
        for rule in self.content_rules:
            if not rule.applies_to(record):
                continue
            try:
                finding = rule.evaluate(record, text)
            except Exception as exc:
                self.logger.debug("Rule %s failed on %s: %s", rule.id, record.path, exc)
                continue
            if finding is not None:
                findings.append(finding)
        return tuple(findings)

    def evaluate(
        self,
        context: ProjectContext,
        evidence: Mapping[str, FileEvidence],
    ) -> QualityResult:
        content_hits: Dict[str, List[QualityFinding]] = {}
        for path in sorted(evidence):
            for finding in evidence[path].findings:
                content_hits.setdefault(finding.rule_id, []).append(finding)

        findings: List[QualityFinding] = []
        triggered: List[Rule] = []
        for rule in self.rules:
            if isinstance(rule, ProjectRule):
                rule_findings = self._run_project_rule(rule, context)
            else:
                rule_findings = content_hits.get(rule.id, [])
            if rule_findings:
                triggered.append(rule)
                findings.extend(rule_findings)

        score = clamp_score(MAX_SCORE - sum(rule.penalty for rule in triggered))
        suggestions = tuple(dict.fromkeys(rule.suggestion for rule in triggered))
        self.logger.debug(
            "Heuristics: %d rules triggered, %d findings, score %d",
            len(triggered),
            len(findings),
            score,
        )
        return QualityResult(score=score, findings=tuple(findings), suggestions=suggestions)

    def _run_project_rule(self, rule: ProjectRule, context: ProjectContext) -> List[QualityFinding]:
        try:
            return rule.evaluate(context)
        except Exception as exc:
            self.logger.debug("Rule %s failed: %s", rule.id, exc)
            return []


__all__ = ["HeuristicsEngine", "MAX_SCORE", "clamp_score"]
