"""Models for the deployed workload manifest"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Container(BaseModel):
    """Container of the pod template"""

    model_config = ConfigDict(extra="allow")

    name: str
    image: str
    command: list[str] | None = None


class PodSpec(BaseModel):
    """Pod spec, only the containers are checked"""

    model_config = ConfigDict(extra="allow")

    containers: list[Container] = Field(min_length=1)


class PodTemplate(BaseModel):
    """Pod template of the deployment"""

    model_config = ConfigDict(extra="allow")

    spec: PodSpec


class DeploymentSpec(BaseModel):
    """Deployment spec"""

    model_config = ConfigDict(extra="allow")

    template: PodTemplate


class ObjectMeta(BaseModel):
    """Object metadata"""

    model_config = ConfigDict(extra="allow")

    name: str


class DeploymentManifest(BaseModel):
    """Shape a workload manifest must have to be deployed by a scenario"""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    api_version: Literal["apps/v1"] = Field(alias="apiVersion")
    kind: Literal["Deployment"]
    metadata: ObjectMeta
    spec: DeploymentSpec
