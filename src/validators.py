"""
Input validation run before anything in the cluster is touched.
"""

import os
import re
from typing import Optional
from urllib.parse import urlparse

from errors import (
    ChartNameMismatch,
    HelmReleaseNotFound,
    HelmVersionError,
    InvalidRestEndpoint,
    NotADirectory,
    NotAFile,
    YamlStructureError,
)
from helm import load_yaml_file, run_helm
from models import ChartVariant


def validate_rest_endpoint(rest_endpoint: str) -> None:
    parsed = urlparse(rest_endpoint)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidRestEndpoint(rest_endpoint)


def validate_helm_v3_in_path() -> None:
    version = run_helm(["version", "--short"])
    if not re.match(r"^v3\.[0-9]+\.[0-9]", version):
        raise HelmVersionError(version)


def validate_helm_release(name: str, namespace: str) -> None:
    output = run_helm(["list", "-n", namespace, "--deployed", "--short"])
    if name not in output.splitlines():
        raise HelmReleaseNotFound(name, namespace)


def validate_helm_chart_dirs(
    umbrella_dir: Optional[str], core_dir: Optional[str]
) -> None:
    if umbrella_dir:
        validate_chart_dir(ChartVariant.UMBRELLA, umbrella_dir)
    if core_dir:
        validate_chart_dir(ChartVariant.CORE, core_dir)


def _require_dir(path: str) -> None:
    if not os.path.isdir(path):
        raise NotADirectory(path)


def _require_file(path: str) -> None:
    if not os.path.isfile(path):
        raise NotAFile(path)


def validate_chart_dir(variant: ChartVariant, dir_path: str) -> None:
    """
    Check that `dir_path` holds a dependency-updated chart of the given variant:
    Chart.yaml naming the chart, values.yaml, README.md and the charts/,
    crds/ and templates/ directories.
    """
    _require_dir(dir_path)

    chart_yaml = os.path.join(dir_path, "Chart.yaml")
    _require_file(chart_yaml)
    chart = load_yaml_file(chart_yaml) or {}
    name = chart.get("name") if isinstance(chart, dict) else None
    if not isinstance(name, str):
        raise YamlStructureError("name", chart_yaml)
    if name != variant.chart_name:
        raise ChartNameMismatch(dir_path, variant.chart_name, name)

    # charts/ only exists once `helm dependency update` has run.
    _require_dir(os.path.join(dir_path, "charts"))
    _require_file(os.path.join(dir_path, "values.yaml"))
    _require_file(os.path.join(dir_path, "README.md"))
    _require_dir(os.path.join(dir_path, "crds"))
    _require_dir(os.path.join(dir_path, "templates"))
