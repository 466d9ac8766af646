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

"""Google Cloud platform detection and Cloud Monitoring metric export.

Module Structure:
    ┌─────────────────────┬──────────────────────────────────────────────────┐
    │ Module              │ Purpose                                          │
    ├─────────────────────┼──────────────────────────────────────────────────┤
    │ detection/          │ Metadata server, platform detection, resources   │
    │ resource_mapping.py │ OpenTelemetry resource → monitored resource      │
    │ metrics/            │ Descriptors, time series, batching, exporter     │
    │ telemetry.py        │ add_gcp_metrics() setup helper                   │
    │ environment.py      │ Environment variables read by detection          │
    │ logging.py          │ Typed structlog access                           │
    └─────────────────────┴──────────────────────────────────────────────────┘

Quick Start:
    ```python
    from gcp_telemetry import add_gcp_metrics

    add_gcp_metrics(project_id='my-project', service_name='checkout')
    ```

GCP Documentation:
    - Monitored resources: https://cloud.google.com/monitoring/api/resources
    - Metric writes: https://cloud.google.com/monitoring/custom-metrics/creating-metrics
    - Quotas & Limits: https://cloud.google.com/monitoring/quotas
"""

from .detection import DetectedPlatform, GoogleCloudResourceDetector, MetadataSource, Platform, PlatformDetector
from .metrics import CloudMonitoringMetricExporter, MetricConfiguration
from .resource_mapping import MappedResource, map_resource
from .telemetry import add_gcp_metrics, resolve_project_id

__all__ = [
    'CloudMonitoringMetricExporter',
    'DetectedPlatform',
    'GoogleCloudResourceDetector',
    'MappedResource',
    'MetadataSource',
    'MetricConfiguration',
    'Platform',
    'PlatformDetector',
    'add_gcp_metrics',
    'map_resource',
    'resolve_project_id',
]
