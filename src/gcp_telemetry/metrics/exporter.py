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

"""OpenTelemetry metric exporter writing to Google Cloud Monitoring.

Each `export` call runs the same pipeline:

    MetricsData ──► TimeSeriesAggregator ──► descriptors ──► strategy ──► create_metric_descriptor
                            │
                            └──────────────► time series ──► batches of 200 ──► create_(service_)time_series

Unsupported metric shapes are logged and skipped. Descriptor failures are
logged and do not stop the time series from being written. RPC failures
while writing time series are reported through the error handler and then
re-raised; nothing is retried here.

Example:
    ```python
    from opentelemetry.sdk.metrics import MeterProvider
    from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader

    exporter = CloudMonitoringMetricExporter(MetricConfiguration(project_id='my-project'))
    reader = PeriodicExportingMetricReader(exporter, export_interval_millis=60_000)
    provider = MeterProvider(metric_readers=[reader])
    ```
"""

import threading
import time
from collections.abc import Callable, Sequence

from google.api.metric_pb2 import MetricDescriptor
from google.cloud.monitoring_v3 import TimeSeries
from opentelemetry.sdk.metrics import (
    Counter,
    Histogram,
    ObservableCounter,
    ObservableGauge,
    ObservableUpDownCounter,
    UpDownCounter,
)
from opentelemetry.sdk.metrics.export import (
    AggregationTemporality,
    Metric,
    MetricExporter,
    MetricExportResult,
    MetricsData,
)
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.util.instrumentation import InstrumentationScope

from gcp_telemetry.logging import get_logger

from .aggregator import IntervalTracker, TimeSeriesAggregator
from .client import CloudMetricClient, MetricServiceCloudClient
from .config import MetricConfiguration
from .constants import MAX_BATCH_SIZE, PROJECT_NAME_TEMPLATE
from .descriptor import UnsupportedMetricKindError
from .errors import handle_metric_error

logger = get_logger(__name__)


class CloudMonitoringMetricExporter(MetricExporter):
    """Exports OpenTelemetry metrics as Cloud Monitoring time series.

    Cloud Monitoring only accepts cumulative custom metrics, so the exporter
    asks the SDK for CUMULATIVE temporality on every instrument.
    """

    def __init__(
        self,
        config: MetricConfiguration,
        client: CloudMetricClient | None = None,
        error_handler: Callable[[Exception], None] | None = handle_metric_error,
        start_time_unix_nano: int | None = None,
    ) -> None:
        """Initialize the exporter.

        Args:
            config: Exporter configuration.
            client: RPC sink. Defaults to a `MetricServiceCloudClient` built
                from the configuration.
            error_handler: Optional callback for RPC errors.
            start_time_unix_nano: Start of the first interval of every
                cumulative series. Defaults to now.
        """
        cumulative = AggregationTemporality.CUMULATIVE
        super().__init__(
            preferred_temporality={
                Counter: cumulative,
                UpDownCounter: cumulative,
                Histogram: cumulative,
                ObservableCounter: cumulative,
                ObservableUpDownCounter: cumulative,
                ObservableGauge: cumulative,
            }
        )
        if client is None:
            client = MetricServiceCloudClient(
                credentials=config.credentials,
                endpoint=config.metric_service_endpoint,
                deadline_seconds=config.deadline_seconds,
            )
        self._config = config
        self._client = client
        self._error_handler = error_handler
        self._project_name = PROJECT_NAME_TEMPLATE.format(project_id=config.project_id)
        self._tracker = IntervalTracker(time.time_ns() if start_time_unix_nano is None else start_time_unix_nano)
        self._shutdown = False
        self._shutdown_lock = threading.Lock()

    @classmethod
    def create_with_client(
        cls,
        client: CloudMetricClient,
        config: MetricConfiguration,
        start_time_unix_nano: int | None = None,
    ) -> 'CloudMonitoringMetricExporter':
        """Creates an exporter that writes through `client`."""
        return cls(config, client=client, start_time_unix_nano=start_time_unix_nano)

    @property
    def interval_tracker(self) -> IntervalTracker:
        return self._tracker

    def _new_aggregator(self) -> TimeSeriesAggregator:
        return TimeSeriesAggregator(
            self._tracker,
            prefix=self._config.prefix,
            resource_attributes_filter=self._config.resource_attributes_filter,
            instrumentation_library_labels=self._config.instrumentation_library_labels,
            monitored_resource_description=self._config.monitored_resource_description,
        )

    def export(
        self,
        metrics_data: MetricsData,
        timeout_millis: float = 10_000,
        **kwargs: object,
    ) -> MetricExportResult:
        """Writes one collection cycle to Cloud Monitoring.

        Args:
            metrics_data: The metrics data to export.
            timeout_millis: Ignored; every RPC uses the configured deadline.
            **kwargs: Additional arguments for base class compatibility.

        Returns:
            FAILURE if fewer time series were written than metrics were
            received, SUCCESS otherwise.

        Raises:
            Exception: Whatever the RPC sink raised while writing time series.
        """
        with self._shutdown_lock:
            is_shutdown = self._shutdown
        if is_shutdown:
            logger.warning('Exporter already shutdown, ignoring export')
            return MetricExportResult.FAILURE

        aggregator = self._new_aggregator()
        metric_count = 0
        for resource_metrics in metrics_data.resource_metrics:
            for scope_metrics in resource_metrics.scope_metrics:
                for metric in scope_metrics.metrics:
                    metric_count += 1
                    self._record_metric(aggregator, metric, resource_metrics.resource, scope_metrics.scope)

        if not self._config.use_service_time_series:
            self._export_descriptors(aggregator.get_descriptors())

        all_series = aggregator.get_time_series()
        try:
            self._batch_write(all_series)
        except Exception as e:
            if self._error_handler:
                self._error_handler(e)
            raise

        if len(all_series) < metric_count:
            logger.warning(
                'Some metrics were not exported',
                metric_count=metric_count,
                time_series_count=len(all_series),
            )
            return MetricExportResult.FAILURE
        return MetricExportResult.SUCCESS

    def _record_metric(
        self,
        aggregator: TimeSeriesAggregator,
        metric: Metric,
        resource: Resource,
        scope: InstrumentationScope | None,
    ) -> None:
        try:
            for point in metric.data.data_points:
                aggregator.record_point(metric, point, resource, scope)
        except UnsupportedMetricKindError as e:
            logger.warning('Skipping unsupported metric', metric=e.metric_name, data_type=e.data_type)

    def _export_descriptors(self, descriptors: Sequence[MetricDescriptor]) -> None:
        def create(descriptor: MetricDescriptor) -> None:
            logger.debug('Creating metric descriptor', metric_type=descriptor.type)
            self._client.create_metric_descriptor(self._project_name, descriptor)

        try:
            self._config.descriptor_strategy.export_descriptors(descriptors, create)
        except Exception as e:
            logger.warning('Failed to create metric descriptors', error=str(e))

    def _batch_write(self, series: Sequence[TimeSeries]) -> None:
        """Writes `series` in order, at most MAX_BATCH_SIZE per request."""
        if self._config.use_service_time_series:
            write = self._client.create_service_time_series
        else:
            write = self._client.create_time_series
        for offset in range(0, len(series), MAX_BATCH_SIZE):
            write(self._project_name, series[offset : offset + MAX_BATCH_SIZE])

    def force_flush(self, timeout_millis: float = 10_000) -> bool:
        """Nothing is buffered between exports, so this always succeeds."""
        return True

    def shutdown(self, timeout_millis: float = 30_000, **kwargs: object) -> None:
        """Releases the RPC sink. Later calls are ignored.

        Args:
            timeout_millis: Ignored.
            **kwargs: Additional arguments for base class compatibility.
        """
        with self._shutdown_lock:
            if self._shutdown:
                logger.warning('Exporter already shutdown')
                return
            self._shutdown = True
        self._client.shutdown()
