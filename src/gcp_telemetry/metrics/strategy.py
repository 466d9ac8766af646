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

"""Policies deciding when metric descriptors are sent to Cloud Monitoring.

Cloud Monitoring creates a descriptor on its own the first time it sees a
custom metric type, but an explicitly created descriptor carries the
description, unit and label types. The strategy is consulted once per export
call with every descriptor produced during that call:

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Strategy            │ Behaviour                                      │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ AlwaysSendStrategy  │ Sends every descriptor on every export         │
    │ NeverSendStrategy   │ Sends nothing                                  │
    │ SendOnceStrategy    │ Sends each descriptor type once per instance   │
    └─────────────────────┴────────────────────────────────────────────────┘
"""

import abc
import threading
from collections.abc import Callable, Iterable

from google.api.metric_pb2 import MetricDescriptor

DescriptorExport = Callable[[MetricDescriptor], None]


class MetricDescriptorStrategy(abc.ABC):
    """Decides which descriptors are handed to `export`."""

    @abc.abstractmethod
    def export_descriptors(self, descriptors: Iterable[MetricDescriptor], export: DescriptorExport) -> None:
        """Sends the descriptors that need sending.

        Args:
            descriptors: Descriptors produced by the current export call.
            export: Callback creating one descriptor in Cloud Monitoring.
        """


class AlwaysSendStrategy(MetricDescriptorStrategy):
    """Sends every descriptor, every time."""

    def export_descriptors(self, descriptors: Iterable[MetricDescriptor], export: DescriptorExport) -> None:
        for descriptor in descriptors:
            export(descriptor)


class NeverSendStrategy(MetricDescriptorStrategy):
    """Leaves descriptor creation to Cloud Monitoring."""

    def export_descriptors(self, descriptors: Iterable[MetricDescriptor], export: DescriptorExport) -> None:
        pass


class SendOnceStrategy(MetricDescriptorStrategy):
    """Sends each descriptor type at most once.

    A type is remembered only after `export` returns, so a failed creation is
    attempted again on the next call. The lock is held across the callback to
    keep two concurrent exports from creating the same descriptor twice.
    """

    def __init__(self) -> None:
        self._sent: set[str] = set()
        self._lock = threading.Lock()

    def export_descriptors(self, descriptors: Iterable[MetricDescriptor], export: DescriptorExport) -> None:
        with self._lock:
            for descriptor in descriptors:
                if descriptor.type in self._sent:
                    continue
                export(descriptor)
                self._sent.add(descriptor.type)


ALWAYS_SEND: MetricDescriptorStrategy = AlwaysSendStrategy()
NEVER_SEND: MetricDescriptorStrategy = NeverSendStrategy()


def send_once() -> MetricDescriptorStrategy:
    """Returns a new `SendOnceStrategy` with an empty history."""
    return SendOnceStrategy()
