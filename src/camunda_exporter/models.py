"""Typed records for the Camunda REST API responses.

Every collector decodes its JSON payload into one of these models before
turning it into measurements. The models ignore unknown fields so newer
engine versions that add attributes keep working, and optional strings are
normalised to ``""`` so they can be used directly as Prometheus label values.
"""
from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CamundaModel(BaseModel):
    """Base model: accept camelCase aliases and ignore unknown fields."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class MetricCount(CamundaModel):
    """Body of every ``.../count`` endpoint."""

    count: int


class EngineMetric(CamundaModel):
    timestamp: str
    name: str
    reporter: Optional[str] = None
    value: int = 0


class ProcessDefinition(CamundaModel):
    id: str = ""
    key: str = ""
    category: str = ""
    description: str = ""
    name: str = ""
    version: int = 0
    resource: str = ""
    deployment_id: str = Field("", alias="deploymentId")
    tenant_id: str = Field("", alias="tenantId")
    version_tag: str = Field("", alias="versionTag")
    suspended: bool = False

    @field_validator(
        "id",
        "key",
        "category",
        "description",
        "name",
        "resource",
        "deployment_id",
        "tenant_id",
        "version_tag",
        mode="before",
    )
    @classmethod
    def _none_to_empty(cls, value: Optional[str]) -> str:
        return "" if value is None else value

    def __str__(self) -> str:
        if not self.key:
            return "<EmptyDefinition>"
        return f"{self.key}@{self.version}"

    def identity_labels(self) -> Dict[str, str]:
        """Labels identifying this definition, shared by every collector."""
        return {
            "definitionId": self.id,
            "definitionKey": self.key,
            "definitionVersion": str(self.version),
        }


class ProcessDefinitionStatistics(CamundaModel):
    id: str = ""
    instances: int = 0
    failed_jobs: int = Field(0, alias="failedJobs")
    definition: ProcessDefinition = Field(default_factory=ProcessDefinition)

    def labels(self) -> Dict[str, str]:
        return {
            "id": self.id,
            **self.definition.identity_labels(),
            "deploymentId": self.definition.deployment_id,
            "tenantId": self.definition.tenant_id,
        }


class ActivityStatistics(CamundaModel):
    activity_id: str = Field(alias="id")
    instances: int = 0
    failed_jobs: int = Field(0, alias="failedJobs")


class HistoryActivityStatistics(CamundaModel):
    activity_id: str = Field(alias="id")
    instances: int = 0
    canceled: int = 0
    finished: int = 0
    complete_scope: int = Field(0, alias="completeScope")


class ActivityCounter(BaseModel):
    """One row of the operator-maintained named activity table."""

    id: str = Field(..., description="BPMN activity id to count in the history.")
    label: str = Field(..., description="Human readable name exported as activityName.")
    group_key: str = Field(
        ..., description="Process definition key exported as definitionKey."
    )


def activity_labels(activity_id: str, definition: ProcessDefinition) -> Dict[str, str]:
    """Label set for per-activity series of a process definition."""
    return {"activityId": activity_id, **definition.identity_labels()}
