"""
Helm wrapper: applies the control-plane chart upgrade.

The release is upgraded in place with its existing values; only the image
tag is overridden with the one shipped in the target chart's values.yaml.
"""

import logging
import os
import re
import subprocess
from typing import Dict, List, Optional

import yaml

from constants import CORE_CHART_NAME, UMBRELLA_CHART_NAME
from errors import (
    FileOpenError,
    HelmCommandError,
    HelmReleaseNotFound,
    MissingChartDir,
    UnsupportedChartVariant,
    YamlParseError,
    YamlStructureError,
)
from models import ChartVariant

logger = logging.getLogger(__name__)

HELM = "helm"


def load_yaml_file(path: str):
    """
    Read and parse a YAML file.

    Raises:
        FileOpenError: The file could not be read
        YamlParseError: The file is not valid YAML
    """
    try:
        with open(path) as f:
            return yaml.safe_load(f)
    except OSError as e:
        raise FileOpenError(path, str(e)) from e
    except yaml.YAMLError as e:
        raise YamlParseError(path, str(e)) from e


def run_helm(args: List[str]) -> str:
    """
    Run helm with `args` and return its stdout.

    Raises:
        HelmCommandError: helm could not be started or exited non-zero
    """
    logger.debug(f"Running: {HELM} {' '.join(args)}")
    try:
        proc = subprocess.run(
            [HELM, *args], capture_output=True, text=True, check=False
        )
    except OSError as e:
        raise HelmCommandError(HELM, args, str(e)) from e
    if proc.returncode != 0:
        raise HelmCommandError(HELM, args, proc.stderr.strip())
    return proc.stdout


class HelmClient:
    """Namespace-scoped helm CLI calls."""

    def __init__(self, namespace: str):
        self.namespace = namespace

    def list(self, extra_args: Optional[List[str]] = None) -> List[Dict]:
        """List deployed releases as dictionaries (name, chart, ...)."""
        args = ["list", "-n", self.namespace, "--deployed"]
        args.extend(extra_args or [])
        # Output flag has to go last.
        args.extend(["-o", "yaml"])
        output = run_helm(args)
        try:
            return yaml.safe_load(output) or []
        except yaml.YAMLError as e:
            raise YamlParseError(f"{HELM} {' '.join(args)}", str(e)) from e

    def upgrade(
        self,
        release_name: str,
        chart_dir: str,
        extra_args: Optional[List[str]] = None,
    ) -> None:
        args = ["upgrade", release_name, chart_dir, "-n", self.namespace]
        args.extend(extra_args or [])
        run_helm(args)
        logger.info(f"Helm upgrade of release {release_name} successful")

    def release_info(self, release_name: str) -> Dict:
        for release in self.list():
            if release.get("name") == release_name:
                return release
        raise HelmReleaseNotFound(release_name, self.namespace)


def classify_chart(chart: str) -> Optional[ChartVariant]:
    """Map a release's `chart` field (e.g. 'openebs-3.4.0') to its variant."""
    if re.match(rf"^{UMBRELLA_CHART_NAME}-[0-9]+\.[0-9]+\.[0-9]+$", chart):
        return ChartVariant.UMBRELLA
    if re.match(rf"^{CORE_CHART_NAME}-[0-9]+\.[0-9]+\.[0-9]+$", chart):
        return ChartVariant.CORE
    return None


def read_image_tag(values_path: str, variant: ChartVariant) -> str:
    """Read the control-plane image tag from a chart's values.yaml."""
    values = load_yaml_file(values_path) or {}

    node = values
    for key in variant.image_tag_key.split("."):
        node = node.get(key) if isinstance(node, dict) else None
    if not isinstance(node, str):
        raise YamlStructureError(f".{variant.image_tag_key}", values_path)
    return node


class HelmUpgrade:
    """Upgrades the release using whichever chart it was installed from."""

    def __init__(self, release_name: str, client: HelmClient):
        self.release_name = release_name
        self.client = client
        self.chart_variant: Optional[ChartVariant] = None

    def build(self) -> "HelmUpgrade":
        chart = self.client.release_info(self.release_name).get("chart", "")
        variant = classify_chart(chart)
        if variant is None:
            raise UnsupportedChartVariant(
                self.release_name, self.client.namespace, chart
            )
        self.chart_variant = variant
        logger.info(f"Release {self.release_name} uses the {variant.chart_name} chart ({chart})")
        return self

    def upgrade_args(self, image_tag: str) -> List[str]:
        return [
            "--set",
            f"{self.chart_variant.image_tag_key}={image_tag}",
            "--reuse-values",
            "--wait",
        ]

    def run(
        self,
        umbrella_chart_dir: Optional[str],
        core_chart_dir: Optional[str],
    ) -> None:
        if self.chart_variant is None:
            self.build()

        if self.chart_variant is ChartVariant.UMBRELLA:
            chart_dir = umbrella_chart_dir
        else:
            chart_dir = core_chart_dir
        if not chart_dir:
            raise MissingChartDir(self.chart_variant.chart_name)

        image_tag = read_image_tag(
            os.path.join(chart_dir, "values.yaml"), self.chart_variant
        )
        logger.info(f"Upgrading release {self.release_name} to image tag {image_tag}")
        self.client.upgrade(self.release_name, chart_dir, self.upgrade_args(image_tag))
