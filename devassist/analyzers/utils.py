"""Manifest parsing helpers shared by the analyzers."""

from __future__ import annotations

import json
import re
import tomllib
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from ..logging import get_logger
from ..models import ProjectManifestSignal

_REQUIREMENT_NAME = re.compile(r"^([A-Za-z0-9][A-Za-z0-9._-]*)(\[[^\]]*\])?\s*(.*)$")

logger = get_logger("analyzers.utils")


# Node.js


def parse_package_json(text: str) -> ProjectManifestSignal:
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("package.json must contain an object")

    def _extract(key: str) -> Dict[str, str]:
        deps = data.get(key, {})
        if isinstance(deps, dict):
            return {str(name): str(version) for name, version in deps.items()}
        return {}

    dependencies = _extract("dependencies")
    dependencies.update(_extract("peerDependencies"))
    return ProjectManifestSignal(
        name="package.json",
        dependencies=dependencies,
        dev_dependencies=_extract("devDependencies"),
        scripts=_extract("scripts"),
        flags={"workspaces": "workspaces" in data, "private": bool(data.get("private"))},
    )


def parse_composer_json(text: str) -> ProjectManifestSignal:
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("composer.json must contain an object")

    def _extract(key: str) -> Dict[str, str]:
        deps = data.get(key, {})
        if isinstance(deps, dict):
            return {str(name): str(version) for name, version in deps.items() if name != "php"}
        return {}

    scripts = data.get("scripts", {})
    return ProjectManifestSignal(
        name="composer.json",
        dependencies=_extract("require"),
        dev_dependencies=_extract("require-dev"),
        scripts={k: str(v) for k, v in scripts.items()} if isinstance(scripts, dict) else {},
    )


# Python


def _split_requirement(line: str) -> Optional[Tuple[str, str]]:
    line = line.split("#", 1)[0].split(";", 1)[0].strip()
    if not line or line.startswith(("-", "git+", "http:", "https:")):
        return None
    match = _REQUIREMENT_NAME.match(line)
    if not match:
        return None
    name, _extras, version = match.groups()
    if name.lower() == "python":
        return None
    return name, version.strip() or "*"


def parse_requirements(text: str) -> ProjectManifestSignal:
    dependencies: Dict[str, str] = {}
    for raw_line in text.splitlines():
        parsed = _split_requirement(raw_line)
        if parsed:
            dependencies[parsed[0]] = parsed[1]
    return ProjectManifestSignal(name="requirements.txt", dependencies=dependencies)


def parse_pyproject(text: str) -> ProjectManifestSignal:
    data = tomllib.loads(text)
    dependencies: Dict[str, str] = {}
    dev_dependencies: Dict[str, str] = {}
    scripts: Dict[str, str] = {}

    project = data.get("project")
    if isinstance(project, dict):
        for dep in _toml_list(project.get("dependencies")):
            parsed = _split_requirement(str(dep))
            if parsed:
                dependencies[parsed[0]] = parsed[1]
        optional = project.get("optional-dependencies")
        if isinstance(optional, dict):
            for values in optional.values():
                for dep in _toml_list(values):
                    parsed = _split_requirement(str(dep))
                    if parsed:
                        dev_dependencies[parsed[0]] = parsed[1]
        project_scripts = project.get("scripts")
        if isinstance(project_scripts, dict):
            scripts.update({str(k): str(v) for k, v in project_scripts.items()})

    tool = data.get("tool") if isinstance(data.get("tool"), dict) else {}
    poetry = tool.get("poetry", {})
    if isinstance(poetry, dict):
        dependencies.update(_toml_table(poetry.get("dependencies")))
        dev_dependencies.update(_toml_table(poetry.get("dev-dependencies")))
        groups = poetry.get("group")
        if isinstance(groups, dict):
            for group in groups.values():
                if isinstance(group, dict):
                    dev_dependencies.update(_toml_table(group.get("dependencies")))
    dependencies.pop("python", None)

    build_backend = ""
    build_system = data.get("build-system")
    if isinstance(build_system, dict):
        build_backend = str(build_system.get("build-backend", ""))

    return ProjectManifestSignal(
        name="pyproject.toml",
        dependencies=dependencies,
        dev_dependencies=dev_dependencies,
        scripts=scripts,
        flags={
            "poetry": bool(poetry) or "poetry" in build_backend,
            "hatch": "hatch" in build_backend,
            "pdm": "pdm" in build_backend,
            "flit": "flit" in build_backend,
            "setuptools": "setuptools" in build_backend,
        },
    )


def parse_pipfile(text: str) -> ProjectManifestSignal:
    data = tomllib.loads(text)
    return ProjectManifestSignal(
        name="Pipfile",
        dependencies=_toml_table(data.get("packages")),
        dev_dependencies=_toml_table(data.get("dev-packages")),
        flags={"pipenv": True},
    )


# Rust / Go


def parse_cargo_toml(text: str) -> ProjectManifestSignal:
    data = tomllib.loads(text)
    return ProjectManifestSignal(
        name="Cargo.toml",
        dependencies=_toml_table(data.get("dependencies")),
        dev_dependencies=_toml_table(data.get("dev-dependencies")),
        flags={"workspace": "workspace" in data},
    )


def parse_go_mod(text: str) -> ProjectManifestSignal:
    dependencies: Dict[str, str] = {}
    in_block = False
    for raw_line in text.splitlines():
        line = raw_line.split("//", 1)[0].strip()
        if not line:
            continue
        if line.startswith("require ("):
            in_block = True
            continue
        if in_block and line == ")":
            in_block = False
            continue
        if line.startswith("require "):
            line = line[len("require "):].strip()
        elif not in_block:
            continue
        parts = line.split()
        if len(parts) >= 2:
            dependencies[parts[0]] = parts[1]
    return ProjectManifestSignal(name="go.mod", dependencies=dependencies)


# Ruby


_GEM_LINE = re.compile(r"""^\s*gem\s+['"]([^'"]+)['"](?:\s*,\s*['"]([^'"]+)['"])?""")


def parse_gemfile(text: str) -> ProjectManifestSignal:
    dependencies: Dict[str, str] = {}
    dev_dependencies: Dict[str, str] = {}
    in_dev_group = False
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("group") and ("development" in stripped or "test" in stripped):
            in_dev_group = True
            continue
        if stripped == "end":
            in_dev_group = False
            continue
        match = _GEM_LINE.match(line)
        if match:
            target = dev_dependencies if in_dev_group else dependencies
            target[match.group(1)] = match.group(2) or "*"
    return ProjectManifestSignal(
        name="Gemfile", dependencies=dependencies, dev_dependencies=dev_dependencies
    )


# Java


def parse_pom(text: str) -> ProjectManifestSignal:
    root = ET.fromstring(text)
    namespace = _detect_xml_namespace(root)
    prefix = f"{{{namespace}}}" if namespace else ""

    dependencies: Dict[str, str] = {}
    dev_dependencies: Dict[str, str] = {}
    for dep in root.findall(f".//{prefix}dependency"):
        group = dep.findtext(f"{prefix}groupId", default="")
        artifact = dep.findtext(f"{prefix}artifactId", default="")
        if not (group and artifact):
            continue
        version = dep.findtext(f"{prefix}version", default="*") or "*"
        scope = dep.findtext(f"{prefix}scope", default="")
        target = dev_dependencies if scope == "test" else dependencies
        target[f"{group}:{artifact}"] = version
    return ProjectManifestSignal(
        name="pom.xml", dependencies=dependencies, dev_dependencies=dev_dependencies
    )


def _detect_xml_namespace(element: ET.Element) -> Optional[str]:
    match = re.match(r"\{(.+)}", element.tag)
    return match.group(1) if match else None


_GRADLE_DEPENDENCY = re.compile(r"['\"]([\w\-.]+:[\w\-.]+)(?::([\w\-.]+))?['\"]")


def parse_gradle(text: str, name: str = "build.gradle") -> ProjectManifestSignal:
    dependencies: Dict[str, str] = {}
    dev_dependencies: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("//"):
            continue
        match = _GRADLE_DEPENDENCY.search(line)
        if not match:
            continue
        if line.startswith(("testImplementation", "testCompile", "androidTestImplementation")):
            dev_dependencies[match.group(1)] = match.group(2) or "*"
        elif line.startswith(("implementation", "api", "compile", "runtimeOnly", "compileOnly")):
            dependencies[match.group(1)] = match.group(2) or "*"
    return ProjectManifestSignal(
        name=name, dependencies=dependencies, dev_dependencies=dev_dependencies
    )


def _toml_list(value: object) -> List[object]:
    return value if isinstance(value, list) else []


def _toml_table(value: object) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    result: Dict[str, str] = {}
    for name, spec in value.items():
        if isinstance(spec, str):
            result[str(name)] = spec
        elif isinstance(spec, dict):
            result[str(name)] = str(spec.get("version", "*"))
        else:
            result[str(name)] = "*"
    return result


MANIFEST_PARSERS: Mapping[str, Callable[[str], ProjectManifestSignal]] = {
    "package.json": parse_package_json,
    "composer.json": parse_composer_json,
    "requirements.txt": parse_requirements,
    "pyproject.toml": parse_pyproject,
    "Pipfile": parse_pipfile,
    "Cargo.toml": parse_cargo_toml,
    "go.mod": parse_go_mod,
    "Gemfile": parse_gemfile,
    "pom.xml": parse_pom,
    "build.gradle": parse_gradle,
    "build.gradle.kts": lambda text: parse_gradle(text, "build.gradle.kts"),
}


def read_manifests(root: Path, root_files: Iterable[str]) -> Dict[str, ProjectManifestSignal]:
    """Parse every known manifest present at the root.

    A manifest that cannot be read or parsed is reported as an empty signal
    so its presence still counts for runtime detection.
    """
    signals: Dict[str, ProjectManifestSignal] = {}
    for name in root_files:
        parser = MANIFEST_PARSERS.get(name)
        if parser is None:
            continue
        try:
            signals[name] = parser((root / name).read_text(encoding="utf-8"))
        except (
            OSError,
            ValueError,
            TypeError,
            AttributeError,
            RecursionError,
            ET.ParseError,
        ) as exc:
            logger.warning("Could not parse %s: %s", name, exc)
            signals[name] = ProjectManifestSignal(name=name)
    return signals


__all__ = [
    "MANIFEST_PARSERS",
    "parse_cargo_toml",
    "parse_composer_json",
    "parse_gemfile",
    "parse_go_mod",
    "parse_gradle",
    "parse_package_json",
    "parse_pipfile",
    "parse_pom",
    "parse_pyproject",
    "parse_requirements",
    "read_manifests",
]
