"""Workload manifest loading for the monitoring e2e suite"""

import copy
import hashlib
from pathlib import Path
from typing import Any

from mako.exceptions import MakoException
from mako.lookup import TemplateLookup
from pydantic import ValidationError
from yaml import SafeLoader, YAMLError, load

from monitoring_e2e.config import WorkloadConfig
from monitoring_e2e.exceptions import DeploymentError
from monitoring_e2e.models import DeploymentManifest
from monitoring_e2e.utils import get_logger

logger = get_logger("manifest")

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "manifest_template"


class ManifestService:
    """Service producing the Deployment manifest deployed by each scenario"""

    def __init__(self, config: WorkloadConfig, template_dir: str | Path = TEMPLATE_DIR) -> None:
        self.config = config
        self.template_dir = Path(template_dir)

    def _render_template(self, context: dict[str, Any], file_name: str) -> str:
        """Render a mako template

        Args:
            context: Template context
            file_name: Template file name

        Returns:
            str: Rendered template
        """
        try:
            lookup = TemplateLookup(directories=[str(self.template_dir)], default_filters=["h"], input_encoding="utf-8")
            content = lookup.get_template(file_name).render(**context)
        except (MakoException, OSError) as e:
            logger.exception("Failed to render template %s", file_name)
            msg = f"Failed to render template: {e}"
            raise DeploymentError(msg) from e

        sha256_hash = hashlib.sha256(content.encode("utf-8")).hexdigest()
        logger.debug("Generated content:\n%s\nSHA256: %s", content, sha256_hash)
        return content

    def decode_manifest(self, content: str) -> dict[str, Any]:
        """Decode a YAML Deployment manifest and check its shape

        Raises:
            DeploymentError: If the content is not a valid Deployment
        """
        try:
            manifest = load(content, Loader=SafeLoader)
            DeploymentManifest.model_validate(manifest)
        except (YAMLError, ValidationError) as e:
            logger.error("Invalid workload manifest: %s", str(e))
            msg = f"Failed to decode workload manifest: {e}"
            raise DeploymentError(msg) from e
        return manifest

    def load_manifest(self) -> dict[str, Any]:
        """Load the workload manifest, from the configured file or the bundled template

        Returns:
            dict: Decoded Deployment manifest
        """
        if self.config.manifest:
            logger.info("Loading workload manifest %s", self.config.manifest)
            try:
                content = Path(self.config.manifest).read_text(encoding="utf-8")
            except OSError as e:
                msg = f"Failed to read workload manifest {self.config.manifest}: {e}"
                raise DeploymentError(msg) from e
        else:
            content = self._render_template({"name": self.config.name, "image": self.config.image}, self.config.template)
        return self.decode_manifest(content)

    def crash_looping(self, manifest: dict[str, Any]) -> dict[str, Any]:
        """Copy of the manifest whose first container exits right away"""
        return with_command(manifest, self.config.crash_command)


def with_command(manifest: dict[str, Any], command: list[str]) -> dict[str, Any]:
    """Copy of the manifest with the command of the first container replaced"""
    patched = copy.deepcopy(manifest)
    patched["spec"]["template"]["spec"]["containers"][0]["command"] = list(command)
    return patched


def container_name(manifest: dict[str, Any]) -> str:
    """Name of the first container of a Deployment manifest"""
    return manifest["spec"]["template"]["spec"]["containers"][0]["name"]
