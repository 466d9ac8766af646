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

"""Constants for Cloud Monitoring metric export."""

# Cloud Monitoring accepts at most 200 time series per CreateTimeSeries call.
MAX_BATCH_SIZE = 200

# Metric types are namespaced under this prefix unless they already belong to
# one of KNOWN_DOMAINS.
DEFAULT_PREFIX = 'workload.googleapis.com'

KNOWN_DOMAINS = (
    'googleapis.com',
    'kubernetes.io',
    'istio.io',
    'knative.dev',
)

# Cumulative intervals for the same series must not overlap, so a new interval
# starts 1 millisecond after the previous one ended.
MIN_INTERVAL_GAP_NS = 1_000_000  # 1 millisecond in nanoseconds

DEFAULT_DEADLINE_SECONDS = 10.0

# Metric labels describing the instrumentation scope that recorded the metric.
INSTRUMENTATION_SOURCE_LABEL = 'instrumentation_source'
INSTRUMENTATION_VERSION_LABEL = 'instrumentation_version'

# Resource attributes copied onto every metric as labels by default.
DEFAULT_RESOURCE_ATTRIBUTES_FILTER = (
    'service.name',
    'service.namespace',
    'service.instance.id',
)

# Periodic export intervals
MIN_METRIC_EXPORT_INTERVAL_MS = 5000
DEFAULT_METRIC_EXPORT_INTERVAL_MS = 60000

PROJECT_NAME_TEMPLATE = 'projects/{project_id}'
