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

"""Tests for time series aggregation and interval tracking."""

from google.api.metric_pb2 import MetricDescriptor
from google.cloud.monitoring_v3 import TimeSeries
from opentelemetry.sdk.metrics.export import AggregationTemporality, Histogram, HistogramDataPoint, Metric
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.util.instrumentation import InstrumentationScope

from conftest import gauge_metric, number_point, sum_metric
from gcp_telemetry.metrics.aggregator import ExportKey, IntervalTracker, TimeSeriesAggregator
from gcp_telemetry.metrics.config import MonitoredResourceDescription

START = 1_000_000_000
T1 = 5_000_000_000
T2 = 9_000_000_000
MS = 1_000_000

RESOURCE = Resource.create({'service.name': 'checkout'})
SCOPE = InstrumentationScope('test.meter', '1.0.0')


def interval(series: TimeSeries) -> tuple[int, int]:
    point = TimeSeries.pb(series).points[0]
    return point.interval.start_time.ToNanoseconds(), point.interval.end_time.ToNanoseconds()


def value(series: TimeSeries):
    return TimeSeries.pb(series).points[0].value


class TestIntervalTracker:
    """Tests for IntervalTracker."""

    def test_first_interval_starts_at_tracker_start(self) -> None:
        """Test First interval starts at tracker start."""
        tracker = IntervalTracker(START)
        key = ExportKey.of('a', {})
        assert tracker.next_interval(key, T1) == (START, T1)

    def test_later_interval_starts_after_previous_end(self) -> None:
        """Test Later interval starts after previous end."""
        tracker = IntervalTracker(START)
        key = ExportKey.of('a', {})
        tracker.next_interval(key, T1)
        assert tracker.next_interval(key, T2) == (T1 + MS, T2)
        assert tracker.last_end(key) == T2

    def test_keys_are_tracked_separately(self) -> None:
        """Different label sets have their own history."""
        tracker = IntervalTracker(START)
        tracker.next_interval(ExportKey.of('a', {'k': '1'}), T1)
        assert tracker.next_interval(ExportKey.of('a', {'k': '2'}), T2) == (START, T2)
        assert len(tracker) == 2

    def test_extend_only_moves_end_forward(self) -> None:
        """Test Extend only moves end forward."""
        tracker = IntervalTracker(START)
        key = ExportKey.of('a', {})
        tracker.next_interval(key, T2)
        tracker.extend(key, T1)
        assert tracker.last_end(key) == T2
        tracker.extend(key, T2 + MS)
        assert tracker.last_end(key) == T2 + MS

    def test_unknown_key_has_no_last_end(self) -> None:
        """Test Unknown key has no last end."""
        assert IntervalTracker(START).last_end(ExportKey.of('a', {})) is None

    def test_export_key_ignores_label_order(self) -> None:
        """Test Export key ignores label order."""
        assert ExportKey.of('a', {'x': '1', 'y': '2'}) == ExportKey.of('a', {'y': '2', 'x': '1'})


class TestTimeSeriesAggregator:
    """Tests for TimeSeriesAggregator."""

    def test_gauge_interval_is_a_single_instant(self) -> None:
        """Test Gauge interval is a single instant."""
        tracker = IntervalTracker(START)
        aggregator = TimeSeriesAggregator(tracker)
        metric = gauge_metric('queue.depth', number_point(7, T1))

        aggregator.record_point(metric, metric.data.data_points[0], RESOURCE, SCOPE)

        [series] = aggregator.get_time_series()
        assert interval(series) == (T1, T1)
        assert value(series).int64_value == 7
        assert TimeSeries.pb(series).metric_kind == MetricDescriptor.MetricKind.GAUGE
        assert len(tracker) == 0

    def test_cumulative_intervals_advance_across_aggregators(self) -> None:
        """Test Cumulative intervals advance across aggregators."""
        tracker = IntervalTracker(START)

        first = TimeSeriesAggregator(tracker)
        metric = sum_metric('bytes.sent', number_point(10, T1))
        first.record_point(metric, metric.data.data_points[0], RESOURCE, SCOPE)

        second = TimeSeriesAggregator(tracker)
        metric = sum_metric('bytes.sent', number_point(25, T2))
        second.record_point(metric, metric.data.data_points[0], RESOURCE, SCOPE)

        assert interval(first.get_time_series()[0]) == (START, T1)
        assert interval(second.get_time_series()[0]) == (T1 + MS, T2)
        assert TimeSeries.pb(second.get_time_series()[0]).metric_kind == MetricDescriptor.MetricKind.CUMULATIVE

    def test_double_values(self) -> None:
        """Test Double values."""
        aggregator = TimeSeriesAggregator(IntervalTracker(START))
        metric = gauge_metric('cpu.load', number_point(0.5, T1))
        aggregator.record_point(metric, metric.data.data_points[0], RESOURCE, SCOPE)

        [series] = aggregator.get_time_series()
        assert value(series).double_value == 0.5
        assert TimeSeries.pb(series).value_type == MetricDescriptor.ValueType.DOUBLE

    def test_same_series_keeps_the_last_point(self) -> None:
        """Test Same series keeps the last point."""
        aggregator = TimeSeriesAggregator(IntervalTracker(START))
        metric = gauge_metric('queue.depth', number_point(1, T1), number_point(2, T2))
        for point in metric.data.data_points:
            aggregator.record_point(metric, point, RESOURCE, SCOPE)

        [series] = aggregator.get_time_series()
        assert value(series).int64_value == 2

    def test_different_attributes_make_different_series(self) -> None:
        """Test Different attributes make different series."""
        aggregator = TimeSeriesAggregator(IntervalTracker(START))
        metric = gauge_metric(
            'queue.depth',
            number_point(1, T1, {'queue': 'a'}),
            number_point(2, T1, {'queue': 'b'}),
        )
        for point in metric.data.data_points:
            aggregator.record_point(metric, point, RESOURCE, SCOPE)

        assert len(aggregator.get_time_series()) == 2
        assert len(aggregator.get_descriptors()) == 1

    def test_metric_type_and_labels(self) -> None:
        """Test Metric type and labels."""
        aggregator = TimeSeriesAggregator(IntervalTracker(START))
        metric = gauge_metric('queue.depth', number_point(1, T1, {'queue': 'a'}))
        aggregator.record_point(metric, metric.data.data_points[0], RESOURCE, SCOPE)

        [series] = aggregator.get_time_series()
        assert series.metric.type == 'workload.googleapis.com/queue.depth'
        assert dict(series.metric.labels) == {
            'queue': 'a',
            'service_name': 'checkout',
            'instrumentation_source': 'test.meter',
            'instrumentation_version': '1.0.0',
        }
        assert series.unit == '1'

    def test_instrumentation_labels_can_be_disabled(self) -> None:
        """Test Instrumentation labels can be disabled."""
        aggregator = TimeSeriesAggregator(
            IntervalTracker(START),
            resource_attributes_filter=(),
            instrumentation_library_labels=False,
        )
        metric = gauge_metric('queue.depth', number_point(1, T1, {'queue': 'a'}))
        aggregator.record_point(metric, metric.data.data_points[0], RESOURCE, SCOPE)

        assert dict(aggregator.get_time_series()[0].metric.labels) == {'queue': 'a'}

    def test_label_values_are_stringified(self) -> None:
        """Test Label values are stringified."""
        aggregator = TimeSeriesAggregator(
            IntervalTracker(START), resource_attributes_filter=(), instrumentation_library_labels=False
        )
        point = number_point(1, T1, {'ok': True, 'code': 404, 'tags': ('a', 'b')})
        metric = gauge_metric('requests', point)
        aggregator.record_point(metric, point, RESOURCE, SCOPE)

        assert dict(aggregator.get_time_series()[0].metric.labels) == {'ok': 'true', 'code': '404', 'tags': 'a,b'}

    def test_custom_prefix(self) -> None:
        """Test Custom prefix."""
        aggregator = TimeSeriesAggregator(IntervalTracker(START), prefix='custom.googleapis.com/checkout')
        metric = gauge_metric('queue.depth', number_point(1, T1))
        aggregator.record_point(metric, metric.data.data_points[0], RESOURCE, SCOPE)

        assert aggregator.get_time_series()[0].metric.type == 'custom.googleapis.com/checkout/queue.depth'
        assert aggregator.get_descriptors()[0].type == 'custom.googleapis.com/checkout/queue.depth'

    def test_mapped_monitored_resource(self) -> None:
        """Test Mapped monitored resource."""
        aggregator = TimeSeriesAggregator(IntervalTracker(START))
        resource = Resource.create({
            'cloud.platform': 'gcp_compute_engine',
            'cloud.availability_zone': 'us-central1-a',
            'host.id': '1234',
        })
        metric = gauge_metric('queue.depth', number_point(1, T1))
        aggregator.record_point(metric, metric.data.data_points[0], resource, SCOPE)

        series = aggregator.get_time_series()[0]
        assert series.resource.type == 'gce_instance'
        assert dict(series.resource.labels) == {'zone': 'us-central1-a', 'instance_id': '1234'}

    def test_custom_monitored_resource(self) -> None:
        """Test Custom monitored resource."""
        aggregator = TimeSeriesAggregator(
            IntervalTracker(START),
            monitored_resource_description=MonitoredResourceDescription(
                type='generic_task', labels=('service_name', 'service_namespace')
            ),
        )
        metric = gauge_metric('queue.depth', number_point(1, T1))
        aggregator.record_point(metric, metric.data.data_points[0], RESOURCE, SCOPE)

        series = aggregator.get_time_series()[0]
        assert series.resource.type == 'generic_task'
        assert dict(series.resource.labels) == {'service_name': 'checkout'}

    def test_histogram_becomes_distribution(self) -> None:
        """Test Histogram becomes distribution."""
        point = HistogramDataPoint(
            attributes={},
            start_time_unix_nano=0,
            time_unix_nano=T1,
            count=4,
            sum=10.0,
            bucket_counts=[1, 2, 1],
            explicit_bounds=[1.0, 5.0],
            min=0.5,
            max=6.0,
        )
        metric = Metric(
            name='latency',
            description='latency description',
            unit='ms',
            data=Histogram(data_points=[point], aggregation_temporality=AggregationTemporality.CUMULATIVE),
        )
        aggregator = TimeSeriesAggregator(IntervalTracker(START))
        aggregator.record_point(metric, point, RESOURCE, SCOPE)

        [series] = aggregator.get_time_series()
        distribution = value(series).distribution_value
        assert distribution.count == 4
        assert distribution.mean == 2.5
        assert list(distribution.bucket_counts) == [1, 2, 1]
        assert list(distribution.bucket_options.explicit_buckets.bounds) == [1.0, 5.0]
        assert interval(series) == (START, T1)
        assert TimeSeries.pb(series).value_type == MetricDescriptor.ValueType.DISTRIBUTION

    def test_first_descriptor_per_type_wins(self) -> None:
        """Test First descriptor per type wins."""
        aggregator = TimeSeriesAggregator(IntervalTracker(START), resource_attributes_filter=())
        metric = gauge_metric('queue.depth', number_point(1, T1, {'queue': 'a'}), number_point(2, T1, {'shard': '3'}))
        for point in metric.data.data_points:
            aggregator.record_point(metric, point, RESOURCE, SCOPE)

        [descriptor] = aggregator.get_descriptors()
        assert {label.key for label in descriptor.labels} == {
            'queue',
            'instrumentation_source',
            'instrumentation_version',
        }

    def test_cumulative_series_recorded_twice_keeps_first_start(self) -> None:
        """Two points of one cumulative series in a single export share one interval."""
        tracker = IntervalTracker(START)
        aggregator = TimeSeriesAggregator(tracker)
        metric = sum_metric('requests', number_point(1, T1), number_point(2, T1))
        for point in metric.data.data_points:
            aggregator.record_point(metric, point, RESOURCE, SCOPE)

        [series] = aggregator.get_time_series()
        assert interval(series) == (START, T1)
        assert value(series).int64_value == 2

    def test_repeated_series_advances_tracker_once(self) -> None:
        """Test Repeated series advances tracker once."""
        tracker = IntervalTracker(START)
        first = TimeSeriesAggregator(tracker)
        metric = sum_metric('requests', number_point(1, T1), number_point(2, T2))
        for point in metric.data.data_points:
            first.record_point(metric, point, RESOURCE, SCOPE)

        second = TimeSeriesAggregator(tracker)
        later = sum_metric('requests', number_point(3, T2 + 10 * MS))
        second.record_point(later, later.data.data_points[0], RESOURCE, SCOPE)

        assert interval(first.get_time_series()[0]) == (START, T2)
        assert interval(second.get_time_series()[0]) == (T2 + MS, T2 + 10 * MS)

    def test_repeated_histogram_interval_is_not_inverted(self) -> None:
        """Test Repeated histogram interval is not inverted."""
        tracker = IntervalTracker(START)
        tracker.next_interval(ExportKey.of('workload.googleapis.com/latency', {}), T1)
        aggregator = TimeSeriesAggregator(tracker, resource_attributes_filter=(), instrumentation_library_labels=False)
        point = HistogramDataPoint(
            attributes={},
            start_time_unix_nano=0,
            time_unix_nano=T1 + MS,
            count=1,
            sum=2.0,
            bucket_counts=[1, 0],
            explicit_bounds=[5.0],
            min=2.0,
            max=2.0,
        )
        metric = Metric(
            name='latency',
            description='',
            unit='ms',
            data=Histogram(data_points=[point, point], aggregation_temporality=AggregationTemporality.CUMULATIVE),
        )
        for p in metric.data.data_points:
            aggregator.record_point(metric, p, RESOURCE, SCOPE)

        start, end = interval(aggregator.get_time_series()[0])
        assert start <= end
        assert (start, end) == (T1 + MS, T1 + MS)
