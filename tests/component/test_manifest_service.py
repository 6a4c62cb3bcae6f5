import pytest

from monitoring_e2e.config import WorkloadConfig
from monitoring_e2e.exceptions import DeploymentError
from monitoring_e2e.services import ManifestService
from monitoring_e2e.services.manifest_service import container_name, with_command

DEPLOYMENT_YAML = """
apiVersion: apps/v1
kind: Deployment
metadata:
  name: custom
spec:
  selector:
    matchLabels: {app: custom}
  template:
    metadata:
      labels: {app: custom}
    spec:
      containers:
      - name: app
        image: nginx:1.27
"""


@pytest.mark.component
def test_render_bundled_template():
    manifest = ManifestService(WorkloadConfig(name="probe", image="busybox:1.36")).load_manifest()

    assert manifest["kind"] == "Deployment"
    assert manifest["metadata"]["name"] == "probe"
    assert manifest["spec"]["selector"]["matchLabels"] == {"app": "probe"}
    container = manifest["spec"]["template"]["spec"]["containers"][0]
    assert container["name"] == "probe"
    assert container["image"] == "busybox:1.36"
    assert container["command"] == ["sleep", "3600"]


@pytest.mark.component
def test_load_manifest_file(tmp_path):
    path = tmp_path / "deploy.yaml"
    path.write_text(DEPLOYMENT_YAML)

    manifest = ManifestService(WorkloadConfig(manifest=str(path))).load_manifest()

    assert container_name(manifest) == "app"


@pytest.mark.component
def test_load_missing_manifest_file(tmp_path):
    with pytest.raises(DeploymentError):
        ManifestService(WorkloadConfig(manifest=str(tmp_path / "missing.yaml"))).load_manifest()


@pytest.mark.component
def test_missing_template():
    with pytest.raises(DeploymentError, match="render"):
        ManifestService(WorkloadConfig(template="missing.yaml.tpl")).load_manifest()


@pytest.mark.component
@pytest.mark.parametrize(
    "content",
    [
        "kind: Deployment\n  bad: [indent",
        DEPLOYMENT_YAML.replace("kind: Deployment", "kind: StatefulSet"),
        DEPLOYMENT_YAML.replace("apps/v1", "apps/v1beta1"),
        DEPLOYMENT_YAML.split("      containers:")[0] + "      containers: []\n",
        "just a string",
    ],
)
def test_decode_invalid_manifest(content):
    with pytest.raises(DeploymentError):
        ManifestService(WorkloadConfig()).decode_manifest(content)


@pytest.mark.component
def test_crash_looping_replaces_first_command():
    service = ManifestService(WorkloadConfig())
    manifest = service.load_manifest()

    crashing = service.crash_looping(manifest)

    assert crashing["spec"]["template"]["spec"]["containers"][0]["command"] == ["echo"]
    # the original manifest is left untouched
    assert manifest["spec"]["template"]["spec"]["containers"][0]["command"] == ["sleep", "3600"]


@pytest.mark.component
def test_with_command_on_container_without_command():
    manifest = ManifestService(WorkloadConfig()).decode_manifest(DEPLOYMENT_YAML)
    assert with_command(manifest, ["false"])["spec"]["template"]["spec"]["containers"][0]["command"] == ["false"]
