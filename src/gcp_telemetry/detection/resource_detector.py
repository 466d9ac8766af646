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

"""OpenTelemetry resource detector backed by `PlatformDetector`.

Translates the flat attributes of a `DetectedPlatform` into OpenTelemetry
semantic resource attributes (``cloud.*``, ``host.*``, ``k8s.*``, ``faas.*``)
so that the resulting `Resource` can be merged into a `MeterProvider` and
later mapped back to a monitored resource by `map_resource`.

Attribute translation:
    ┌─────────────────┬──────────────────────────┬──────────────────────────┐
    │ Platform        │ cloud.platform           │ Main attributes          │
    ├─────────────────┼──────────────────────────┼──────────────────────────┤
    │ GCE             │ gcp_compute_engine       │ host.id/name/type, zone  │
    │ GKE             │ gcp_kubernetes_engine    │ k8s.*, host.id, location │
    │ GAE             │ gcp_app_engine           │ faas.name/version/inst.  │
    │ Cloud Run       │ gcp_cloud_run            │ faas.*, zone, region     │
    │ Cloud Run job   │ gcp_cloud_run            │ faas.*, job execution    │
    │ Cloud Functions │ gcp_cloud_functions      │ faas.*, zone, region     │
    └─────────────────┴──────────────────────────┴──────────────────────────┘
"""

from collections.abc import Callable, Mapping

from opentelemetry.sdk.resources import Resource, ResourceDetector
from opentelemetry.semconv.resource import CloudPlatformValues, CloudProviderValues, ResourceAttributes

from gcp_telemetry.logging import get_logger

from . import constants as keys
from .platform import DetectedPlatform, Platform, PlatformDetector

logger = get_logger(__name__)

GCR_JOB_EXECUTION_ATTRIBUTE = 'gcp.cloud_run.job.execution'
GCR_JOB_TASK_INDEX_ATTRIBUTE = 'gcp.cloud_run.job.task_index'

_CLOUD_PLATFORMS: dict[Platform, str] = {
    Platform.GCE: CloudPlatformValues.GCP_COMPUTE_ENGINE.value,
    Platform.GKE: CloudPlatformValues.GCP_KUBERNETES_ENGINE.value,
    Platform.GAE: CloudPlatformValues.GCP_APP_ENGINE.value,
    Platform.CLOUD_RUN: CloudPlatformValues.GCP_CLOUD_RUN.value,
    Platform.CLOUD_RUN_JOB: CloudPlatformValues.GCP_CLOUD_RUN.value,
    Platform.CLOUD_FUNCTIONS: CloudPlatformValues.GCP_CLOUD_FUNCTIONS.value,
}

_GCE_KEYS = {
    keys.AVAILABILITY_ZONE: ResourceAttributes.CLOUD_AVAILABILITY_ZONE,
    keys.CLOUD_REGION: ResourceAttributes.CLOUD_REGION,
    keys.INSTANCE_ID: ResourceAttributes.HOST_ID,
    keys.INSTANCE_NAME: ResourceAttributes.HOST_NAME,
    keys.MACHINE_TYPE: ResourceAttributes.HOST_TYPE,
}

_GKE_KEYS = {
    keys.GKE_POD_NAME: ResourceAttributes.K8S_POD_NAME,
    keys.GKE_NAMESPACE: ResourceAttributes.K8S_NAMESPACE_NAME,
    keys.GKE_CONTAINER_NAME: ResourceAttributes.K8S_CONTAINER_NAME,
    keys.GKE_CLUSTER_NAME: ResourceAttributes.K8S_CLUSTER_NAME,
    keys.INSTANCE_ID: ResourceAttributes.HOST_ID,
}

_SERVERLESS_KEYS = {
    keys.SERVERLESS_COMPUTE_NAME: ResourceAttributes.FAAS_NAME,
    keys.SERVERLESS_COMPUTE_REVISION: ResourceAttributes.FAAS_VERSION,
    keys.INSTANCE_ID: ResourceAttributes.FAAS_INSTANCE,
    keys.AVAILABILITY_ZONE: ResourceAttributes.CLOUD_AVAILABILITY_ZONE,
    keys.CLOUD_REGION: ResourceAttributes.CLOUD_REGION,
}

_CLOUD_RUN_JOB_KEYS = {
    keys.SERVERLESS_COMPUTE_NAME: ResourceAttributes.FAAS_NAME,
    keys.INSTANCE_ID: ResourceAttributes.FAAS_INSTANCE,
    keys.CLOUD_REGION: ResourceAttributes.CLOUD_REGION,
    keys.GCR_JOB_EXECUTION_KEY: GCR_JOB_EXECUTION_ATTRIBUTE,
    keys.GCR_JOB_TASK_INDEX: GCR_JOB_TASK_INDEX_ATTRIBUTE,
}

_GAE_KEYS = {
    keys.GAE_MODULE_NAME: ResourceAttributes.FAAS_NAME,
    keys.GAE_APP_VERSION: ResourceAttributes.FAAS_VERSION,
    keys.INSTANCE_ID: ResourceAttributes.FAAS_INSTANCE,
    keys.AVAILABILITY_ZONE: ResourceAttributes.CLOUD_AVAILABILITY_ZONE,
    keys.CLOUD_REGION: ResourceAttributes.CLOUD_REGION,
}


def _rename(attributes: Mapping[str, str], renames: Mapping[str, str]) -> dict[str, str]:
    return {otel_key: attributes[key] for key, otel_key in renames.items() if attributes.get(key)}


def _gke_location(attributes: Mapping[str, str]) -> dict[str, str]:
    location = attributes.get(keys.GKE_CLUSTER_LOCATION)
    location_type = attributes.get(keys.GKE_CLUSTER_LOCATION_TYPE)
    if location and location_type == keys.GKE_LOCATION_TYPE_ZONE:
        return {ResourceAttributes.CLOUD_AVAILABILITY_ZONE: location}
    if location and location_type == keys.GKE_LOCATION_TYPE_REGION:
        return {ResourceAttributes.CLOUD_REGION: location}
    logger.warning('Unrecognized format for cluster location', cluster_location=location)
    return {}


_TRANSLATORS: dict[Platform, Callable[[Mapping[str, str]], dict[str, str]]] = {
    Platform.GCE: lambda attrs: _rename(attrs, _GCE_KEYS),
    Platform.GKE: lambda attrs: {**_rename(attrs, _GKE_KEYS), **_gke_location(attrs)},
    Platform.GAE: lambda attrs: _rename(attrs, _GAE_KEYS),
    Platform.CLOUD_RUN: lambda attrs: _rename(attrs, _SERVERLESS_KEYS),
    Platform.CLOUD_FUNCTIONS: lambda attrs: _rename(attrs, _SERVERLESS_KEYS),
    Platform.CLOUD_RUN_JOB: lambda attrs: _rename(attrs, _CLOUD_RUN_JOB_KEYS),
}


def semantic_attributes(detected: DetectedPlatform) -> dict[str, str]:
    """Returns OpenTelemetry resource attributes for a detection result.

    Args:
        detected: Output of `PlatformDetector.detect()`.

    Returns:
        Semantic attributes; empty when not running on Google Cloud.
    """
    if detected.platform == Platform.UNKNOWN:
        return {}

    attributes = {
        ResourceAttributes.CLOUD_PROVIDER: CloudProviderValues.GCP.value,
        ResourceAttributes.CLOUD_PLATFORM: _CLOUD_PLATFORMS[detected.platform],
    }
    if detected.project_id:
        attributes[ResourceAttributes.CLOUD_ACCOUNT_ID] = detected.project_id
    attributes.update(_TRANSLATORS[detected.platform](detected.attributes))
    return attributes


class GoogleCloudResourceDetector(ResourceDetector):
    """Resource detector for GCE, GKE, App Engine, Cloud Run and Cloud Functions."""

    def __init__(self, detector: PlatformDetector | None = None, raise_on_error: bool = False) -> None:
        """Initialize the resource detector.

        Args:
            detector: Platform detector to use. A default one is created lazily
                on the first call to `detect()`.
            raise_on_error: Re-raise detection failures instead of returning an
                empty resource.
        """
        super().__init__(raise_on_error=raise_on_error)
        self._detector = detector

    def detect(self) -> Resource:
        try:
            if self._detector is None:
                self._detector = PlatformDetector()
            return Resource(semantic_attributes(self._detector.detect()))
        except Exception as e:
            if self.raise_on_error:
                raise
            logger.warning('Google Cloud resource detection failed', error=str(e))
            return Resource.get_empty()
