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

"""One-call setup of Cloud Monitoring metric export.

`add_gcp_metrics()` resolves the project, detects the hosting platform,
builds the exporter and installs a `MeterProvider` that exports periodically:

    ┌──────────────────┐   ┌──────────────────────────────┐   ┌──────────────────────────────┐
    │ resolve project  │──►│ Resource = service attributes│──►│ CloudMonitoringMetricExporter│
    │ id               │   │ + GoogleCloudResourceDetector│   │ + PeriodicExportingMetric-   │
    └──────────────────┘   └──────────────────────────────┘   │   Reader + MeterProvider     │
                                                              └──────────────────────────────┘

Example:
    ```python
    from gcp_telemetry import add_gcp_metrics

    add_gcp_metrics(service_name='checkout')
    ```
"""

import uuid
from collections.abc import Mapping
from typing import Any

from opentelemetry import metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_INSTANCE_ID, SERVICE_NAME, Resource

from gcp_telemetry.detection import GoogleCloudResourceDetector, MetadataSource, PlatformDetector
from gcp_telemetry.environment import project_id_from_environment
from gcp_telemetry.logging import get_logger
from gcp_telemetry.metrics import CloudMetricClient, CloudMonitoringMetricExporter, MetricConfiguration
from gcp_telemetry.metrics.constants import DEFAULT_METRIC_EXPORT_INTERVAL_MS, MIN_METRIC_EXPORT_INTERVAL_MS
from gcp_telemetry.metrics.errors import handle_metric_error

logger = get_logger(__name__)

DEFAULT_SERVICE_NAME = 'unknown_service:python'


def resolve_project_id(
    project_id: str | None = None,
    credentials: Any | None = None,
    env: Mapping[str, str] | None = None,
    metadata: MetadataSource | None = None,
) -> str | None:
    """Resolve the Google Cloud project id from multiple sources.

    Resolution order:
    1. Explicit project_id parameter
    2. GOOGLE_CLOUD_PROJECT, GCLOUD_PROJECT, GCP_PROJECT environment variables
    3. Project id of the credentials
    4. The metadata server, when one is passed in

    Args:
        project_id: Explicitly provided project id.
        credentials: Optional credentials object or dict carrying a project id.
        env: Environment mapping; defaults to the process environment.
        metadata: Metadata source to ask last.

    Returns:
        The resolved project id or None.
    """
    if project_id:
        return project_id

    env_project_id = project_id_from_environment(env)
    if env_project_id:
        return env_project_id

    if isinstance(credentials, Mapping):
        credentials_project_id = credentials.get('project_id')
    else:
        credentials_project_id = getattr(credentials, 'project_id', None)
    if credentials_project_id:
        return credentials_project_id

    if metadata is not None:
        return metadata.project_id() or None
    return None


class GcpMetrics:
    """Wires platform detection and the metric exporter into a MeterProvider."""

    def __init__(
        self,
        project_id: str | None = None,
        credentials: Any | None = None,
        service_name: str = DEFAULT_SERVICE_NAME,
        metric_export_interval_ms: int | None = None,
        metric_export_timeout_ms: int | None = None,
        metadata: MetadataSource | None = None,
        client: CloudMetricClient | None = None,
        **config: Any,
    ) -> None:
        """Initialize the setup helper.

        Args:
            project_id: Google Cloud project id.
            credentials: Optional Google auth credentials.
            service_name: Value of the ``service.name`` resource attribute.
            metric_export_interval_ms: Export interval in ms.
            metric_export_timeout_ms: Export timeout in ms.
            metadata: Metadata source used for detection and project lookup.
                A default one is created when omitted and closed at the end of
                `initialize()`.
            client: RPC sink override, mainly for tests.
            **config: Further `MetricConfiguration` fields.
        """
        self._owns_metadata = metadata is None
        self.metadata = metadata if metadata is not None else MetadataSource()
        self.credentials = credentials
        self.service_name = service_name
        self.client = client
        self.config_overrides = config
        self.project_id = resolve_project_id(project_id, credentials, metadata=self.metadata)

        self.metric_export_interval_ms = metric_export_interval_ms or DEFAULT_METRIC_EXPORT_INTERVAL_MS
        if self.metric_export_interval_ms < MIN_METRIC_EXPORT_INTERVAL_MS:
            logger.warning(
                f'metric_export_interval_ms ({self.metric_export_interval_ms}) is below minimum '
                f'({MIN_METRIC_EXPORT_INTERVAL_MS}), using minimum'
            )
            self.metric_export_interval_ms = MIN_METRIC_EXPORT_INTERVAL_MS

        self.metric_export_timeout_ms = metric_export_timeout_ms or self.metric_export_interval_ms

    def build_resource(self) -> Resource:
        """Returns the service resource merged with the detected platform."""
        resource = Resource.create({
            SERVICE_NAME: self.service_name,
            SERVICE_INSTANCE_ID: str(uuid.uuid4()),
        })
        try:
            detector = PlatformDetector(metadata=self.metadata)
            gcp_resource = GoogleCloudResourceDetector(detector, raise_on_error=True).detect()
            resource = resource.merge(gcp_resource)
        except Exception as e:
            # Detection failure leaves the default resource in place.
            logger.warning('Google Cloud resource detection failed', error=str(e))
        return resource

    def build_exporter(self) -> CloudMonitoringMetricExporter:
        config = MetricConfiguration(
            project_id=self.project_id or '',
            credentials=self.credentials,
            **self.config_overrides,
        )
        return CloudMonitoringMetricExporter(config, client=self.client)

    def initialize(self, set_global: bool = True) -> MeterProvider | None:
        """Builds the MeterProvider and optionally installs it globally.

        Args:
            set_global: Install the provider with `metrics.set_meter_provider`.

        Returns:
            The provider, or None when setup failed.
        """
        try:
            reader = PeriodicExportingMetricReader(
                self.build_exporter(),
                export_interval_millis=self.metric_export_interval_ms,
                export_timeout_millis=self.metric_export_timeout_ms,
            )
            provider = MeterProvider(metric_readers=[reader], resource=self.build_resource())
        except Exception as e:
            handle_metric_error(e)
            return None
        finally:
            if self._owns_metadata:
                self.metadata.close()

        if set_global:
            metrics.set_meter_provider(provider)
        logger.info(
            'Metric export initialized',
            project_id=self.project_id,
            export_interval_ms=self.metric_export_interval_ms,
        )
        return provider


def add_gcp_metrics(
    project_id: str | None = None,
    credentials: Any | None = None,
    service_name: str = DEFAULT_SERVICE_NAME,
    metric_export_interval_ms: int | None = None,
    metric_export_timeout_ms: int | None = None,
    set_global: bool = True,
    **config: Any,
) -> MeterProvider | None:
    """Configures Cloud Monitoring metric export for the process.

    Args:
        project_id: Google Cloud project id; resolved from the environment,
            credentials or metadata server when omitted.
        credentials: Optional Google auth credentials.
        service_name: Value of the ``service.name`` resource attribute.
        metric_export_interval_ms: Export interval in ms (minimum 5000).
        metric_export_timeout_ms: Export timeout in ms.
        set_global: Install the provider as the global MeterProvider.
        **config: Further `MetricConfiguration` fields.

    Returns:
        The configured MeterProvider, or None when setup failed.
    """
    return GcpMetrics(
        project_id=project_id,
        credentials=credentials,
        service_name=service_name,
        metric_export_interval_ms=metric_export_interval_ms,
        metric_export_timeout_ms=metric_export_timeout_ms,
        **config,
    ).initialize(set_global=set_global)
