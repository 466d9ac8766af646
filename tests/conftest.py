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

"""Shared test doubles for metadata lookups, the RPC sink and metric data."""

from collections.abc import Mapping, Sequence

import httpx
import pytest
from google.api.metric_pb2 import MetricDescriptor
from google.cloud.monitoring_v3 import TimeSeries
from opentelemetry.sdk.metrics.export import (
    AggregationTemporality,
    Gauge,
    Metric,
    MetricsData,
    NumberDataPoint,
    ResourceMetrics,
    ScopeMetrics,
    Sum,
)
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.util.instrumentation import InstrumentationScope

from gcp_telemetry.detection.constants import METADATA_BASE_URL
from gcp_telemetry.detection.metadata import MetadataSource


class FakeMetricClient:
    """Records every call the exporter makes."""

    def __init__(self) -> None:
        self.descriptors: list[tuple[str, MetricDescriptor]] = []
        self.time_series_calls: list[tuple[str, list[TimeSeries]]] = []
        self.service_time_series_calls: list[tuple[str, list[TimeSeries]]] = []
        self.shutdown_count = 0
        self.descriptor_error: Exception | None = None
        self.time_series_error: Exception | None = None

    def create_metric_descriptor(self, name: str, descriptor: MetricDescriptor) -> None:
        if self.descriptor_error is not None:
            raise self.descriptor_error
        self.descriptors.append((name, descriptor))

    def create_time_series(self, name: str, series: Sequence[TimeSeries]) -> None:
        if self.time_series_error is not None:
            raise self.time_series_error
        self.time_series_calls.append((name, list(series)))

    def create_service_time_series(self, name: str, series: Sequence[TimeSeries]) -> None:
        if self.time_series_error is not None:
            raise self.time_series_error
        self.service_time_series_calls.append((name, list(series)))

    def shutdown(self) -> None:
        self.shutdown_count += 1


class MetadataServer:
    """In-memory metadata server served through `httpx.MockTransport`."""

    def __init__(self, values: Mapping[str, str]) -> None:
        self.values = dict(values)
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = str(request.url)[len(METADATA_BASE_URL) :]
        if request.headers.get('Metadata-Flavor') != 'Google' or path not in self.values:
            return httpx.Response(404, headers={'Metadata-Flavor': 'Google'})
        return httpx.Response(200, text=self.values[path], headers={'Metadata-Flavor': 'Google'})

    def source(self) -> MetadataSource:
        return MetadataSource(client=httpx.Client(transport=httpx.MockTransport(self.handler)))


@pytest.fixture
def fake_client() -> FakeMetricClient:
    """A recording RPC sink."""
    return FakeMetricClient()


def number_point(value: int | float, time_unix_nano: int, attributes: Mapping[str, str] | None = None) -> NumberDataPoint:
    """Builds a NumberDataPoint starting at 0."""
    return NumberDataPoint(
        attributes=dict(attributes or {}),
        start_time_unix_nano=0,
        time_unix_nano=time_unix_nano,
        value=value,
    )


def gauge_metric(name: str, *points: NumberDataPoint) -> Metric:
    return Metric(name=name, description=f'{name} description', unit='1', data=Gauge(data_points=list(points)))


def sum_metric(name: str, *points: NumberDataPoint) -> Metric:
    return Metric(
        name=name,
        description=f'{name} description',
        unit='By',
        data=Sum(
            data_points=list(points),
            aggregation_temporality=AggregationTemporality.CUMULATIVE,
            is_monotonic=True,
        ),
    )


def metrics_data(
    *metrics: Metric,
    resource: Resource | None = None,
    scope: InstrumentationScope | None = None,
) -> MetricsData:
    """Wraps metrics into a single resource and scope."""
    return MetricsData(
        resource_metrics=[
            ResourceMetrics(
                resource=resource if resource is not None else Resource.create({'service.name': 'checkout'}),
                scope_metrics=[
                    ScopeMetrics(
                        scope=scope if scope is not None else InstrumentationScope('test.meter', '1.0.0'),
                        metrics=list(metrics),
                        schema_url='',
                    )
                ],
                schema_url='',
            )
        ]
    )

