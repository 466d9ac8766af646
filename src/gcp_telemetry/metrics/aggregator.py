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

"""Aggregation of OpenTelemetry points into Cloud Monitoring time series.

A time series is identified by its metric type and metric labels
(`ExportKey`). Cloud Monitoring accepts one point per time series in a
CreateTimeSeries call, so when the same key is recorded twice in one export
the later point replaces the earlier one.

Intervals:
    Gauge points use the point time as both start and end.

    Cumulative points (sums and histograms) describe the total since a
    reset. The first export of a key starts at the exporter's start time;
    later exports start 1 millisecond after the previous end time of the same
    key, because Cloud Monitoring rejects overlapping intervals:

        export 1:  [exporter start ............. t1]
        export 2:                                  [t1 + 1ms ....... t2]
        export 3:                                                      [t2 + 1ms .. t3]

    Previous end times live in an `IntervalTracker` owned by the exporter and
    shared by every export call.

    A key recorded more than once in the same export keeps the start of its
    first recording, and the tracker only moves its end forward. A start is
    never later than its end.
"""

import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from google.api.distribution_pb2 import Distribution
from google.api.metric_pb2 import Metric as GMetric, MetricDescriptor
from google.api.monitored_resource_pb2 import MonitoredResource
from google.cloud.monitoring_v3 import Point, TimeInterval, TimeSeries, TypedValue
from google.protobuf.timestamp_pb2 import Timestamp
from opentelemetry.sdk.metrics.export import HistogramDataPoint, Metric, NumberDataPoint
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.util.instrumentation import InstrumentationScope

from gcp_telemetry.resource_mapping import map_resource

from .config import MonitoredResourceDescription
from .constants import (
    DEFAULT_PREFIX,
    DEFAULT_RESOURCE_ATTRIBUTES_FILTER,
    INSTRUMENTATION_SOURCE_LABEL,
    INSTRUMENTATION_VERSION_LABEL,
    MIN_INTERVAL_GAP_NS,
)
from .descriptor import build_descriptor, map_kind_and_value_type, map_metric_type


@dataclass(frozen=True)
class ExportKey:
    """Identity of a time series: metric type plus metric labels."""

    metric_type: str
    labels: frozenset[tuple[str, str]]

    @classmethod
    def of(cls, metric_type: str, labels: Mapping[str, str]) -> 'ExportKey':
        return cls(metric_type, frozenset(labels.items()))


class IntervalTracker:
    """Remembers the last exported end time of every cumulative time series.

    Entries are kept for the tracker's lifetime and never removed.
    """

    def __init__(self, start_time_unix_nano: int) -> None:
        """Initialize the tracker.

        Args:
            start_time_unix_nano: Exporter start time, used as the start of the
                first interval of every series.
        """
        self._start_time_unix_nano = start_time_unix_nano
        self._last_end: dict[ExportKey, int] = {}
        self._lock = threading.Lock()

    @property
    def start_time_unix_nano(self) -> int:
        return self._start_time_unix_nano

    def next_interval(self, key: ExportKey, end_time_unix_nano: int) -> tuple[int, int]:
        """Returns (start, end) for the next point of `key` and records `end`."""
        with self._lock:
            previous_end = self._last_end.get(key)
            if previous_end is None:
                start = self._start_time_unix_nano
            else:
                start = previous_end + MIN_INTERVAL_GAP_NS
            self._last_end[key] = end_time_unix_nano
        return start, end_time_unix_nano

    def extend(self, key: ExportKey, end_time_unix_nano: int) -> None:
        """Moves the recorded end of `key` forward to `end_time_unix_nano` if it is later."""
        with self._lock:
            previous_end = self._last_end.get(key)
            if previous_end is None or end_time_unix_nano > previous_end:
                self._last_end[key] = end_time_unix_nano

    def last_end(self, key: ExportKey) -> int | None:
        with self._lock:
            return self._last_end.get(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._last_end)


def _label_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (list, tuple)):
        return ','.join(_label_value(v) for v in value)
    return str(value)


def _timestamp(unix_nano: int) -> Timestamp:
    timestamp = Timestamp()
    timestamp.FromNanoseconds(unix_nano)
    return timestamp


def _typed_value(point: NumberDataPoint | HistogramDataPoint) -> TypedValue:
    if isinstance(point, HistogramDataPoint):
        mean = point.sum / point.count if point.count else 0.0
        return TypedValue(
            distribution_value=Distribution(
                count=point.count,
                mean=mean,
                bucket_counts=point.bucket_counts,
                bucket_options=Distribution.BucketOptions(
                    explicit_buckets=Distribution.BucketOptions.Explicit(bounds=point.explicit_bounds),
                ),
            )
        )
    if isinstance(point.value, int):
        return TypedValue(int64_value=point.value)
    return TypedValue(double_value=point.value)


def _custom_monitored_resource(description: MonitoredResourceDescription, resource: Resource) -> MonitoredResource:
    labels = {}
    for label in description.labels:
        value = resource.attributes.get(label.replace('_', '.'))
        if value is not None:
            labels[label] = _label_value(value)
    return MonitoredResource(type=description.type, labels=labels)


class TimeSeriesAggregator:
    """Collects the time series and descriptors of one export call."""

    def __init__(
        self,
        tracker: IntervalTracker,
        prefix: str = DEFAULT_PREFIX,
        resource_attributes_filter: tuple[str, ...] = DEFAULT_RESOURCE_ATTRIBUTES_FILTER,
        instrumentation_library_labels: bool = True,
        monitored_resource_description: MonitoredResourceDescription | None = None,
    ) -> None:
        """Initialize the aggregator.

        Args:
            tracker: Previous end times, shared across export calls.
            prefix: Namespace for custom metric types.
            resource_attributes_filter: Resource attributes added as metric labels.
            instrumentation_library_labels: Add instrumentation scope labels.
            monitored_resource_description: Custom monitored resource to use
                instead of the mapped one.
        """
        self._tracker = tracker
        self._prefix = prefix
        self._resource_attributes_filter = resource_attributes_filter
        self._instrumentation_library_labels = instrumentation_library_labels
        self._monitored_resource_description = monitored_resource_description
        self._series: dict[ExportKey, TimeSeries] = {}
        self._descriptors: dict[str, MetricDescriptor] = {}
        self._starts: dict[ExportKey, int] = {}

    def _metric_labels(
        self,
        point: NumberDataPoint | HistogramDataPoint,
        resource: Resource,
        scope: InstrumentationScope | None,
    ) -> dict[str, str]:
        labels = {str(key): _label_value(value) for key, value in (point.attributes or {}).items()}
        for key in self._resource_attributes_filter:
            value = resource.attributes.get(key)
            if value is not None:
                labels[key.replace('.', '_')] = _label_value(value)
        if self._instrumentation_library_labels and scope is not None:
            labels[INSTRUMENTATION_SOURCE_LABEL] = scope.name
            labels[INSTRUMENTATION_VERSION_LABEL] = scope.version or ''
        return labels

    def _monitored_resource(self, resource: Resource) -> MonitoredResource:
        if self._monitored_resource_description is not None:
            return _custom_monitored_resource(self._monitored_resource_description, resource)
        return map_resource(resource).to_monitored_resource()

    def record_point(
        self,
        metric: Metric,
        point: NumberDataPoint | HistogramDataPoint,
        resource: Resource,
        scope: InstrumentationScope | None = None,
    ) -> None:
        """Adds one point, replacing any earlier point of the same series.

        Args:
            metric: Metric the point belongs to.
            point: The point.
            resource: Resource that produced the metric.
            scope: Instrumentation scope that recorded the metric.

        Raises:
            UnsupportedMetricKindError: If the metric shape is not supported.
        """
        kind, value_type = map_kind_and_value_type(metric, point)
        metric_type = map_metric_type(metric.name, self._prefix)
        labels = self._metric_labels(point, resource, scope)
        key = ExportKey.of(metric_type, labels)

        if kind == MetricDescriptor.MetricKind.GAUGE:
            start, end = point.time_unix_nano, point.time_unix_nano
        elif key in self._starts:
            # Recorded again in this export: the tracker advances once per call.
            start, end = self._starts[key], point.time_unix_nano
            self._tracker.extend(key, end)
        else:
            start, end = self._tracker.next_interval(key, point.time_unix_nano)
            self._starts[key] = start
        start = min(start, end)

        if metric_type not in self._descriptors:
            self._descriptors[metric_type] = build_descriptor(metric, point, labels, self._prefix)

        self._series[key] = TimeSeries(
            metric=GMetric(type=metric_type, labels=labels),
            resource=self._monitored_resource(resource),
            metric_kind=kind,
            value_type=value_type,
            unit=metric.unit or '',
            points=[
                Point(
                    interval=TimeInterval(start_time=_timestamp(start), end_time=_timestamp(end)),
                    value=_typed_value(point),
                )
            ],
        )

    def get_time_series(self) -> list[TimeSeries]:
        """Returns the time series in first-recorded order."""
        return list(self._series.values())

    def get_descriptors(self) -> list[MetricDescriptor]:
        return list(self._descriptors.values())
