# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Configuration of the Cloud Monitoring metric exporter."""

from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from gcp_telemetry.environment import project_id_from_environment

from .constants import DEFAULT_DEADLINE_SECONDS, DEFAULT_PREFIX, DEFAULT_RESOURCE_ATTRIBUTES_FILTER
from .strategy import MetricDescriptorStrategy, send_once


class MonitoredResourceDescription(BaseModel):
    """A custom monitored resource to report every metric against.

    Each label is read from the resource attribute of the same name, with
    underscores standing in for dots (label ``service_name`` reads
    ``service.name``). Labels whose attribute is missing are left out.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    type: str = Field(min_length=1, description='Monitored resource type, e.g. "generic_task".')
    labels: tuple[str, ...] = Field(default=(), description='Monitored resource label names.')


class MetricConfiguration(BaseModel):
    """Settings for `CloudMonitoringMetricExporter`.

    Parameters:
        project_id: Project that receives the metrics.
        prefix: Namespace for custom metric types.
        deadline_seconds: Per-RPC deadline.
        descriptor_strategy: When to create metric descriptors.
        use_service_time_series: Use CreateServiceTimeSeries instead of
            CreateTimeSeries. Descriptors are never created in this mode.
        metric_service_endpoint: Override of the Monitoring API endpoint.
        credentials: Google auth credentials; application default
            credentials are used when unset.
        resource_attributes_filter: Resource attributes copied onto every
            metric as labels.
        instrumentation_library_labels: Add the instrumentation scope name and
            version as metric labels.
        monitored_resource_description: Report against a custom monitored
            resource instead of the one mapped from the resource.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    project_id: str = Field(min_length=1)
    prefix: str = Field(default=DEFAULT_PREFIX, min_length=1)
    deadline_seconds: float = Field(default=DEFAULT_DEADLINE_SECONDS, gt=0)
    descriptor_strategy: MetricDescriptorStrategy = Field(default_factory=send_once)
    use_service_time_series: bool = False
    metric_service_endpoint: str | None = None
    credentials: Any | None = None
    resource_attributes_filter: tuple[str, ...] = DEFAULT_RESOURCE_ATTRIBUTES_FILTER
    instrumentation_library_labels: bool = True
    monitored_resource_description: MonitoredResourceDescription | None = None

    @classmethod
    def from_environment(cls, env: Mapping[str, str] | None = None, **kwargs: Any) -> 'MetricConfiguration':
        """Builds a configuration whose project id comes from the environment.

        An explicit ``project_id`` keyword takes precedence.

        Args:
            env: Environment mapping; defaults to the process environment.
            **kwargs: Other configuration fields.

        Raises:
            pydantic.ValidationError: If no project id can be found.
        """
        if not kwargs.get('project_id'):
            kwargs['project_id'] = project_id_from_environment(env) or ''
        return cls(**kwargs)
