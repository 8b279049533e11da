"""Built-in jinja2 templates for generated project documentation."""

from __future__ import annotations

from typing import Dict

ANALYSIS_REPORT = """\
# Project Analysis Report: {{ meta.name }}

- **Analyzed at**: {{ meta.analyzed_at }}
- **Project type**: {{ project.type }}
- **Primary language**: {{ project.language }}
{% if project.frameworks %}
- **Frameworks**: {{ project.frameworks | join(", ") }}
{% endif %}
- **Build tool**: {{ project.build_tool }}
- **Package manager**: {{ project.package_manager }}

## Code Metrics

- Source files: {{ metrics.total_files }}
- Lines of code: {{ metrics.total_lines }}
- Complexity: {{ metrics.complexity }}
{% if metrics.file_type_histogram %}

| Extension | Files |
| --- | --- |
{% for ext, count in metrics.file_type_histogram | dictsort %}
| `{{ ext }}` | {{ count }} |
{% endfor %}
{% endif %}

## Quality

**Score**: {{ quality.score }}/100 ({{ recommendations.quality_level }})

{% if quality_findings %}
**Issues**:
{% for finding in quality_findings %}
- [{{ finding.severity }}] {{ finding.description }}{% if finding.file %} (`{{ finding.file }}`{% if finding.line %}:{{ finding.line }}{% endif %}){% endif %}

{% endfor %}
{% else %}
No quality issues detected.
{% endif %}
{% if quality.suggestions %}

**Suggestions**:
{% for suggestion in quality.suggestions %}
- {{ suggestion }}
{% endfor %}
{% endif %}

## Security

{% if security %}
{% for finding in security %}
- [{{ finding.severity }}] {{ finding.description }}{% if finding.file %} (`{{ finding.file }}`{% if finding.line %}:{{ finding.line }}{% endif %}){% endif %}

{% endfor %}
{% else %}
No security issues detected.
{% endif %}
{% if dependencies.security %}

Security packages in use: {{ dependencies.security | join(", ") }}
{% endif %}

## Development Guidance

- **Development phase**: {{ recommendations.development_phase }}
- **Technical debt**: {{ recommendations.technical_debt }}
{% if recommendations.priority %}

**Priorities**:
{% for item in recommendations.priority %}
{{ loop.index }}. {{ item }}
{% endfor %}
{% endif %}
{% if recommendations.insights %}

**Insights**:
{% for insight in recommendations.insights %}
- {{ insight }}
{% endfor %}
{% endif %}
{% if meta.skipped %}

## Skipped Directories

{% for path in meta.skipped %}
- `{{ path }}`
{% endfor %}
{% endif %}
"""

ARCHITECTURE = """\
# Architecture: {{ meta.name }}

{% if structure.patterns %}
Detected patterns: {{ structure.patterns | join(", ") }}.
{% else %}
No architectural pattern detected.
{% endif %}
{% if structure.conventions %}
Naming conventions: {{ structure.conventions | join(", ") }}.
{% endif %}

## Directories

| Directory | Purpose | Files | Languages |
| --- | --- | --- | --- |
{% for name, summary in structure.directories | dictsort %}
| `{{ name }}` | {{ summary.purpose }} | {{ summary.file_count }} | {{ summary.languages | join(", ") }} |
{% endfor %}

## Dependencies

{% if dependencies.production %}
**Production**: {{ dependencies.production | join(", ") }}
{% endif %}
{% if dependencies.development %}

**Development**: {{ dependencies.development | join(", ") }}
{% endif %}
{% if not dependencies.production and not dependencies.development %}
No declared dependencies.
{% endif %}

## Module Graph

- Files: {{ graph_stats.files }}
- Internal references: {{ graph_stats.internal }}
- External packages: {{ graph_stats.external }}
- Unresolved references: {{ graph_stats.unresolved }}
{% if cycles %}

**Circular references**:
{% for cycle in cycles %}
- {{ cycle | join(" -> ") }}
{% endfor %}
{% endif %}
{% if hubs %}

**Most referenced files**:
{% for path, count in hubs %}
- `{{ path }}` ({{ count }} dependents)
{% endfor %}
{% endif %}
"""

FOCUS = """\
# Development Focus: {{ meta.name }}

- **Phase**: {{ recommendations.development_phase }}
- **Technical debt**: {{ recommendations.technical_debt }}
- **Quality level**: {{ recommendations.quality_level }}

## Focus Areas

{% for area in recommendations.focus_areas %}
- {{ area }}
{% else %}
- No specific focus areas.
{% endfor %}

## Priorities

{% for item in recommendations.priority %}
{{ loop.index }}. {{ item }}
{% else %}
No urgent priorities.
{% endfor %}
"""

TEMPLATES: Dict[str, str] = {
    "analysis-report.md": ANALYSIS_REPORT,
    "architecture.md": ARCHITECTURE,
    "focus.md": FOCUS,
}
