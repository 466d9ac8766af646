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

"""Translation of OpenTelemetry metric shapes into Cloud Monitoring descriptors.

Supported shapes:
    ┌───────────────────────────┬──────────────┬──────────────────┐
    │ OpenTelemetry data        │ Metric kind  │ Value type       │
    ├───────────────────────────┼──────────────┼──────────────────┤
    │ Gauge, int points         │ GAUGE        │ INT64            │
    │ Gauge, float points       │ GAUGE        │ DOUBLE           │
    │ Sum, int points           │ CUMULATIVE   │ INT64            │
    │ Sum, float points         │ CUMULATIVE   │ DOUBLE           │
    │ Histogram                 │ CUMULATIVE   │ DISTRIBUTION     │
    └───────────────────────────┴──────────────┴──────────────────┘

Every other shape (exponential histograms, for example) raises
`UnsupportedMetricKindError`; the exporter skips such metrics.
"""

import re
from collections.abc import Mapping

from google.api.label_pb2 import LabelDescriptor
from google.api.metric_pb2 import MetricDescriptor
from opentelemetry.sdk.metrics.export import (
    Gauge,
    Histogram,
    HistogramDataPoint,
    Metric,
    NumberDataPoint,
    Sum,
)

from .constants import DEFAULT_PREFIX, KNOWN_DOMAINS


class UnsupportedMetricKindError(ValueError):
    """Raised for metric data that Cloud Monitoring cannot represent."""

    def __init__(self, metric_name: str, data_type: str) -> None:
        super().__init__(f'Metric {metric_name!r} has unsupported data type {data_type}')
        self.metric_name = metric_name
        self.data_type = data_type


def map_metric_type(name: str, prefix: str = DEFAULT_PREFIX) -> str:
    """Returns the Cloud Monitoring metric type for an instrument name.

    Names that already belong to a known Google domain are kept verbatim,
    everything else is namespaced under `prefix`.

    Args:
        name: Instrument name, e.g. ``http.server.duration``.
        prefix: Namespace for custom metrics.

    Returns:
        The metric type, e.g. ``workload.googleapis.com/http.server.duration``.
    """
    for domain in KNOWN_DOMAINS:
        if domain in name:
            return name
    return f'{prefix}/{name}'


_INT64_PATTERN = re.compile(r'-?[0-9]+')


def _is_int64(value: str) -> bool:
    if not _INT64_PATTERN.fullmatch(value):
        return False
    return -(2**63) <= int(value) < 2**63


def map_label(key: str, value: str) -> LabelDescriptor:
    """Builds a label descriptor, guessing the type from a sample value.

    The guess only affects how the label is displayed; the value itself is
    always sent as a string.
    """
    if value.lower() in ('true', 'false'):
        value_type = LabelDescriptor.ValueType.BOOL
    elif _is_int64(value):
        value_type = LabelDescriptor.ValueType.INT64
    else:
        value_type = LabelDescriptor.ValueType.STRING
    return LabelDescriptor(key=key, value_type=value_type)


def map_kind_and_value_type(
    metric: Metric, point: NumberDataPoint | HistogramDataPoint
) -> tuple['MetricDescriptor.MetricKind', 'MetricDescriptor.ValueType']:
    """Returns the (metric kind, value type) pair for a metric and one of its points.

    Raises:
        UnsupportedMetricKindError: If the data is not a gauge, sum or histogram.
    """
    data = metric.data
    if isinstance(data, Histogram):
        return MetricDescriptor.MetricKind.CUMULATIVE, MetricDescriptor.ValueType.DISTRIBUTION

    if isinstance(data, Gauge):
        kind = MetricDescriptor.MetricKind.GAUGE
    elif isinstance(data, Sum):
        kind = MetricDescriptor.MetricKind.CUMULATIVE
    else:
        raise UnsupportedMetricKindError(metric.name, type(data).__name__)

    if not isinstance(point, NumberDataPoint):
        raise UnsupportedMetricKindError(metric.name, type(point).__name__)
    if isinstance(point.value, int):
        return kind, MetricDescriptor.ValueType.INT64
    if isinstance(point.value, float):
        return kind, MetricDescriptor.ValueType.DOUBLE
    raise UnsupportedMetricKindError(metric.name, type(point.value).__name__)


def build_descriptor(
    metric: Metric,
    point: NumberDataPoint | HistogramDataPoint,
    labels: Mapping[str, str],
    prefix: str = DEFAULT_PREFIX,
) -> MetricDescriptor:
    """Builds the metric descriptor for a metric.

    Args:
        metric: The OpenTelemetry metric.
        point: One of its points; decides between INT64 and DOUBLE.
        labels: Metric labels of the point, used to describe the label set.
        prefix: Namespace for custom metric types.

    Returns:
        The descriptor.

    Raises:
        UnsupportedMetricKindError: If the metric shape is not supported.
    """
    kind, value_type = map_kind_and_value_type(metric, point)
    return MetricDescriptor(
        type=map_metric_type(metric.name, prefix),
        display_name=metric.name,
        description=metric.description or '',
        unit=metric.unit or '',
        metric_kind=kind,
        value_type=value_type,
        labels=[map_label(key, value) for key, value in labels.items()],
    )
