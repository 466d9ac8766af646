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

"""RPC sink used by the exporter to reach Cloud Monitoring."""

from collections.abc import Sequence
from typing import Any, Protocol

from google.api.metric_pb2 import MetricDescriptor
from google.api_core.client_options import ClientOptions
from google.cloud.monitoring_v3 import CreateTimeSeriesRequest, MetricServiceClient, TimeSeries

from .constants import DEFAULT_DEADLINE_SECONDS


class CloudMetricClient(Protocol):
    """Operations the exporter needs from the Monitoring API."""

    def create_metric_descriptor(self, name: str, descriptor: MetricDescriptor) -> None:
        """Creates or updates a metric descriptor."""
        ...

    def create_time_series(self, name: str, series: Sequence[TimeSeries]) -> None:
        """Writes at most 200 time series."""
        ...

    def create_service_time_series(self, name: str, series: Sequence[TimeSeries]) -> None:
        """Writes at most 200 time series for Google Cloud services."""
        ...

    def shutdown(self) -> None:
        """Releases the underlying channel."""
        ...


class MetricServiceCloudClient:
    """`CloudMetricClient` backed by the generated `MetricServiceClient`."""

    def __init__(
        self,
        client: MetricServiceClient | None = None,
        credentials: Any | None = None,
        endpoint: str | None = None,
        deadline_seconds: float = DEFAULT_DEADLINE_SECONDS,
    ) -> None:
        """Initialize the client.

        Args:
            client: Preconfigured client; when None one is created from
                `credentials` and `endpoint`.
            credentials: Google auth credentials.
            endpoint: API endpoint override.
            deadline_seconds: Timeout applied to every call.
        """
        if client is None:
            client_options = ClientOptions(api_endpoint=endpoint) if endpoint else None
            client = MetricServiceClient(credentials=credentials, client_options=client_options)
        self._client = client
        self._timeout = deadline_seconds

    def create_metric_descriptor(self, name: str, descriptor: MetricDescriptor) -> None:
        self._client.create_metric_descriptor(name=name, metric_descriptor=descriptor, timeout=self._timeout)

    def create_time_series(self, name: str, series: Sequence[TimeSeries]) -> None:
        self._client.create_time_series(
            CreateTimeSeriesRequest(name=name, time_series=list(series)),
            timeout=self._timeout,
        )

    def create_service_time_series(self, name: str, series: Sequence[TimeSeries]) -> None:
        self._client.create_service_time_series(
            CreateTimeSeriesRequest(name=name, time_series=list(series)),
            timeout=self._timeout,
        )

    def shutdown(self) -> None:
        self._client.transport.close()
