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

"""Mapping of OpenTelemetry resources to Cloud Monitoring monitored resources.

Cloud Monitoring groups every time series under a monitored resource: a type
string plus a fixed set of labels. This module picks the type from the
resource's semantic attributes and fills its labels from static tables.

Type selection:
    ┌──────────────────────────────────────────────┬──────────────────────┐
    │ Resource attributes                          │ Monitored resource   │
    ├──────────────────────────────────────────────┼──────────────────────┤
    │ cloud.platform = gcp_compute_engine          │ gce_instance         │
    │ cloud.platform = aws_ec2                     │ aws_ec2_instance     │
    │ cloud.platform = gcp_app_engine              │ gae_instance         │
    │ k8s.cluster.name + k8s.container.name        │ k8s_container        │
    │ k8s.cluster.name + k8s.pod.name              │ k8s_pod              │
    │ k8s.cluster.name + k8s.node.name             │ k8s_node             │
    │ k8s.cluster.name                             │ k8s_cluster          │
    │ (service.name | faas.name) and               │ generic_task         │
    │ (service.instance.id | faas.instance)        │                      │
    │ anything else                                │ generic_node         │
    └──────────────────────────────────────────────┴──────────────────────┘

Each label rule lists candidate attribute keys in priority order and takes
the first one present. A ``service.name`` generated by the SDK
(``unknown_service`` or ``unknown_service:<process>``) is passed over in
favour of the next candidate, but is still used when nothing else resolves.
Otherwise the rule's fallback literal applies, and without one the label is
left out.

See Also:
    - https://cloud.google.com/monitoring/api/resources
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from google.api.monitored_resource_pb2 import MonitoredResource
from opentelemetry.sdk.resources import Resource
from opentelemetry.semconv.resource import CloudPlatformValues, ResourceAttributes

UNKNOWN_SERVICE_PREFIX = 'unknown_service'


class ResourceLabels(Mapping[str, str]):
    """Immutable label mapping of a monitored resource.

    Built with `ResourceLabelsBuilder`; compares equal to any mapping with
    the same items.
    """

    __slots__ = ('_labels',)

    def __init__(self, labels: Mapping[str, str] | None = None) -> None:
        self._labels = MappingProxyType(dict(labels or {}))

    def __getitem__(self, key: str) -> str:
        return self._labels[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def __len__(self) -> int:
        return len(self._labels)

    def __hash__(self) -> int:
        return hash(frozenset(self._labels.items()))

    def __repr__(self) -> str:
        return f'ResourceLabels({dict(self._labels)!r})'


class ResourceLabelsBuilder:
    """Accumulates labels and freezes them into `ResourceLabels`."""

    def __init__(self) -> None:
        self._labels: dict[str, str] = {}

    def add(self, name: str, value: str) -> 'ResourceLabelsBuilder':
        self._labels[name] = value
        return self

    def build(self) -> ResourceLabels:
        return ResourceLabels(self._labels)


@dataclass(frozen=True)
class MappedResource:
    """A monitored resource type and its labels."""

    type: str
    labels: ResourceLabels

    def to_monitored_resource(self) -> MonitoredResource:
        """Returns the `google.api.MonitoredResource` wire message."""
        return MonitoredResource(type=self.type, labels=dict(self.labels))


@dataclass(frozen=True)
class AttributeMapping:
    """Rule filling one monitored resource label from resource attributes.

    Attributes:
        label_name: Name of the monitored resource label.
        otel_keys: Candidate attribute keys, highest priority first.
        fallback: Literal used when no candidate is present.
    """

    label_name: str
    otel_keys: tuple[str, ...]
    fallback: str | None = None

    def resolve(self, attributes: Mapping[str, Any]) -> str | None:
        """Returns the label value for `attributes`, or None to omit it."""
        for key in self.otel_keys:
            value = attributes.get(key)
            if value is None:
                continue
            value = str(value)
            if key == ResourceAttributes.SERVICE_NAME and value.startswith(UNKNOWN_SERVICE_PREFIX):
                continue
            return value

        if ResourceAttributes.SERVICE_NAME in self.otel_keys:
            service_name = attributes.get(ResourceAttributes.SERVICE_NAME)
            if service_name is not None:
                return str(service_name)

        return self.fallback


_LOCATION = AttributeMapping(
    'location',
    (ResourceAttributes.CLOUD_AVAILABILITY_ZONE, ResourceAttributes.CLOUD_REGION),
    'global',
)
_CLUSTER_NAME = AttributeMapping('cluster_name', (ResourceAttributes.K8S_CLUSTER_NAME,))
_NAMESPACE_NAME = AttributeMapping('namespace_name', (ResourceAttributes.K8S_NAMESPACE_NAME,), '')
_POD_NAME = AttributeMapping('pod_name', (ResourceAttributes.K8S_POD_NAME,))
_SERVICE_NAMESPACE = AttributeMapping('namespace', (ResourceAttributes.SERVICE_NAMESPACE,), '')

GCE_INSTANCE_LABELS = (
    AttributeMapping('zone', (ResourceAttributes.CLOUD_AVAILABILITY_ZONE,)),
    AttributeMapping('instance_id', (ResourceAttributes.HOST_ID,)),
)

K8S_CONTAINER_LABELS = (
    _LOCATION,
    _CLUSTER_NAME,
    _NAMESPACE_NAME,
    AttributeMapping('container_name', (ResourceAttributes.K8S_CONTAINER_NAME,)),
    _POD_NAME,
)

K8S_POD_LABELS = (_LOCATION, _CLUSTER_NAME, _NAMESPACE_NAME, _POD_NAME)

K8S_NODE_LABELS = (
    _LOCATION,
    _CLUSTER_NAME,
    AttributeMapping('node_name', (ResourceAttributes.K8S_NODE_NAME,)),
)

K8S_CLUSTER_LABELS = (_LOCATION, _CLUSTER_NAME)

AWS_EC2_INSTANCE_LABELS = (
    AttributeMapping('instance_id', (ResourceAttributes.HOST_ID,)),
    AttributeMapping('region', (ResourceAttributes.CLOUD_AVAILABILITY_ZONE,)),
    AttributeMapping('aws_account', (ResourceAttributes.CLOUD_ACCOUNT_ID,)),
)

GAE_INSTANCE_LABELS = (
    AttributeMapping('module_id', (ResourceAttributes.FAAS_NAME,)),
    AttributeMapping('version_id', (ResourceAttributes.FAAS_VERSION,)),
    AttributeMapping('instance_id', (ResourceAttributes.FAAS_INSTANCE,)),
    AttributeMapping('location', (ResourceAttributes.CLOUD_REGION,)),
)

GENERIC_TASK_LABELS = (
    _LOCATION,
    _SERVICE_NAMESPACE,
    AttributeMapping('job', (ResourceAttributes.SERVICE_NAME, ResourceAttributes.FAAS_NAME), ''),
    AttributeMapping('task_id', (ResourceAttributes.SERVICE_INSTANCE_ID, ResourceAttributes.FAAS_INSTANCE), ''),
)

GENERIC_NODE_LABELS = (
    _LOCATION,
    _SERVICE_NAMESPACE,
    AttributeMapping('node_id', (ResourceAttributes.HOST_ID, ResourceAttributes.HOST_NAME), ''),
)

_PLATFORM_TABLES: dict[str, tuple[str, tuple[AttributeMapping, ...]]] = {
    CloudPlatformValues.GCP_COMPUTE_ENGINE.value: ('gce_instance', GCE_INSTANCE_LABELS),
    CloudPlatformValues.AWS_EC2.value: ('aws_ec2_instance', AWS_EC2_INSTANCE_LABELS),
    CloudPlatformValues.GCP_APP_ENGINE.value: ('gae_instance', GAE_INSTANCE_LABELS),
}


def _attributes_of(resource: Resource | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(resource, Resource):
        return resource.attributes
    return resource


def _select_table(attributes: Mapping[str, Any]) -> tuple[str, tuple[AttributeMapping, ...]]:
    platform = attributes.get(ResourceAttributes.CLOUD_PLATFORM)
    if platform in _PLATFORM_TABLES:
        return _PLATFORM_TABLES[platform]

    # Also matches clusters outside Google Cloud, e.g. minikube.
    if attributes.get(ResourceAttributes.K8S_CLUSTER_NAME) is not None:
        if attributes.get(ResourceAttributes.K8S_CONTAINER_NAME) is not None:
            return 'k8s_container', K8S_CONTAINER_LABELS
        if attributes.get(ResourceAttributes.K8S_POD_NAME) is not None:
            return 'k8s_pod', K8S_POD_LABELS
        if attributes.get(ResourceAttributes.K8S_NODE_NAME) is not None:
            return 'k8s_node', K8S_NODE_LABELS
        return 'k8s_cluster', K8S_CLUSTER_LABELS

    has_job = ResourceAttributes.SERVICE_NAME in attributes or ResourceAttributes.FAAS_NAME in attributes
    has_task = ResourceAttributes.SERVICE_INSTANCE_ID in attributes or ResourceAttributes.FAAS_INSTANCE in attributes
    if has_job and has_task:
        return 'generic_task', GENERIC_TASK_LABELS
    return 'generic_node', GENERIC_NODE_LABELS


def map_resource(resource: Resource | Mapping[str, Any]) -> MappedResource:
    """Maps a resource onto a Cloud Monitoring monitored resource.

    Args:
        resource: An OpenTelemetry `Resource` or its attribute mapping.

    Returns:
        The monitored resource type and labels.
    """
    attributes = _attributes_of(resource)
    resource_type, mappings = _select_table(attributes)
    builder = ResourceLabelsBuilder()
    for mapping in mappings:
        value = mapping.resolve(attributes)
        if value is not None:
            builder.add(mapping.label_name, value)
    return MappedResource(type=resource_type, labels=builder.build())
