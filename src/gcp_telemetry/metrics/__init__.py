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

"""Cloud Monitoring metric export.

Module Structure:
    ┌───────────────┬──────────────────────────────────────────────────────┐
    │ Module        │ Purpose                                              │
    ├───────────────┼──────────────────────────────────────────────────────┤
    │ constants.py  │ Batch size, metric type prefix, known domains        │
    │ config.py     │ Exporter configuration (pydantic)                    │
    │ descriptor.py │ Metric kind/value type mapping and descriptors       │
    │ aggregator.py │ Time series grouping and interval bookkeeping        │
    │ strategy.py   │ When metric descriptors are created                  │
    │ client.py     │ RPC sink wrapping MetricServiceClient                │
    │ errors.py     │ Export error logging with IAM hints                  │
    │ exporter.py   │ The OpenTelemetry MetricExporter                     │
    └───────────────┴──────────────────────────────────────────────────────┘
"""

from .aggregator import ExportKey, IntervalTracker, TimeSeriesAggregator
from .client import CloudMetricClient, MetricServiceCloudClient
from .config import MetricConfiguration, MonitoredResourceDescription
from .descriptor import UnsupportedMetricKindError, build_descriptor, map_label, map_metric_type
from .exporter import CloudMonitoringMetricExporter
from .strategy import (
    ALWAYS_SEND,
    NEVER_SEND,
    AlwaysSendStrategy,
    MetricDescriptorStrategy,
    NeverSendStrategy,
    SendOnceStrategy,
    send_once,
)

__all__ = [
    'ALWAYS_SEND',
    'NEVER_SEND',
    'AlwaysSendStrategy',
    'CloudMetricClient',
    'CloudMonitoringMetricExporter',
    'ExportKey',
    'IntervalTracker',
    'MetricConfiguration',
    'MetricDescriptorStrategy',
    'MetricServiceCloudClient',
    'MonitoredResourceDescription',
    'NeverSendStrategy',
    'SendOnceStrategy',
    'TimeSeriesAggregator',
    'UnsupportedMetricKindError',
    'build_descriptor',
    'map_label',
    'map_metric_type',
    'send_once',
]
