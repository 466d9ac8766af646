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

"""Detection of the Google Cloud compute platform the process runs on.

Classification is a pure function of two inputs: whether the metadata server
reports a non-empty project id, and which platform signal variables are set
in the environment. The signals are checked in a fixed order:

    ┌────┬──────────────────────────────────────────────┬─────────────────┐
    │ #  │ Signal                                       │ Platform        │
    ├────┼──────────────────────────────────────────────┼─────────────────┤
    │ 0  │ no project id from the metadata server       │ UNKNOWN         │
    │ 1  │ KUBERNETES_SERVICE_HOST                      │ GKE             │
    │ 2  │ K_CONFIGURATION without FUNCTION_TARGET      │ CLOUD_RUN       │
    │ 3  │ FUNCTION_TARGET                              │ CLOUD_FUNCTIONS │
    │ 4  │ CLOUD_RUN_JOB                                │ CLOUD_RUN_JOB   │
    │ 5  │ GAE_SERVICE                                  │ GAE             │
    │ 6  │ (default)                                    │ GCE             │
    └────┴──────────────────────────────────────────────┴─────────────────┘

Cloud Functions (2nd gen) sets both K_CONFIGURATION and FUNCTION_TARGET, so
row 3 must win over row 2. A variable counts as set when it is present, even
with an empty value.

Each platform then collects a flat attribute mapping from the environment and
the metadata server. Attributes that cannot be resolved are left out.
"""

import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from gcp_telemetry.environment import GAE_STANDARD_ENVIRONMENT, EnvVar, current_environment
from gcp_telemetry.logging import get_logger

from . import constants as keys
from .metadata import MetadataSource

if sys.version_info < (3, 11):
    from strenum import StrEnum
else:
    from enum import StrEnum

logger = get_logger(__name__)


class Platform(StrEnum):
    """Google Cloud compute platforms that can be told apart at runtime."""

    GCE = 'gce'
    GKE = 'gke'
    GAE = 'gae'
    CLOUD_RUN = 'cloud_run'
    CLOUD_RUN_JOB = 'cloud_run_job'
    CLOUD_FUNCTIONS = 'cloud_functions'
    UNKNOWN = 'unknown'


@dataclass(frozen=True)
class DetectedPlatform:
    """Result of a detection: the platform, its project and its attributes."""

    platform: Platform
    project_id: str | None = None
    attributes: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))


# Precedence-ordered (platform, predicate) pairs. GCE is the fallback.
_PLATFORM_SIGNALS: tuple[tuple[Platform, Callable[[Mapping[str, str]], bool]], ...] = (
    (Platform.GKE, lambda env: EnvVar.KUBERNETES_SERVICE_HOST in env),
    (
        Platform.CLOUD_RUN,
        lambda env: EnvVar.K_CONFIGURATION in env and EnvVar.FUNCTION_TARGET not in env,
    ),
    (Platform.CLOUD_FUNCTIONS, lambda env: EnvVar.FUNCTION_TARGET in env),
    (Platform.CLOUD_RUN_JOB, lambda env: EnvVar.CLOUD_RUN_JOB in env),
    (Platform.GAE, lambda env: EnvVar.GAE_SERVICE in env),
)


def classify(project_id: str | None, env: Mapping[str, str]) -> Platform:
    """Returns the platform for a project id and an environment.

    Args:
        project_id: Project id reported by the metadata server, if any.
        env: Environment variables.

    Returns:
        The detected platform.
    """
    if not project_id:
        return Platform.UNKNOWN
    for platform, is_signalled in _PLATFORM_SIGNALS:
        if is_signalled(env):
            return platform
    return Platform.GCE


def gke_location_type(cluster_location: str | None) -> str:
    """Classifies a GKE cluster location by counting its dashes.

    ``us-central1-c`` (two dashes) is a zone, ``us-central1`` (one dash) a
    region. Any other shape yields an empty marker.
    """
    dash_count = cluster_location.count('-') if cluster_location else 0
    if dash_count == 1:
        return keys.GKE_LOCATION_TYPE_REGION
    if dash_count == 2:
        return keys.GKE_LOCATION_TYPE_ZONE
    return ''


def _gce_attributes(env: Mapping[str, str], metadata: MetadataSource) -> dict[str, str | None]:
    return {
        keys.PROJECT_ID: metadata.project_id(),
        keys.AVAILABILITY_ZONE: metadata.zone(),
        keys.CLOUD_REGION: metadata.region_from_zone(),
        keys.INSTANCE_ID: metadata.instance_id(),
        keys.INSTANCE_NAME: metadata.instance_name(),
        keys.INSTANCE_HOSTNAME: metadata.instance_hostname(),
        keys.MACHINE_TYPE: metadata.machine_type(),
    }


def _gke_attributes(env: Mapping[str, str], metadata: MetadataSource) -> dict[str, str | None]:
    cluster_location = metadata.cluster_location()
    pod_name = env.get(EnvVar.POD_NAME)
    if pod_name is None:
        pod_name = env.get(EnvVar.HOSTNAME)
    return {
        keys.GKE_POD_NAME: pod_name,
        keys.GKE_NAMESPACE: env.get(EnvVar.NAMESPACE),
        keys.GKE_CONTAINER_NAME: env.get(EnvVar.CONTAINER_NAME),
        keys.GKE_CLUSTER_NAME: metadata.cluster_name(),
        keys.GKE_CLUSTER_LOCATION: cluster_location,
        keys.GKE_CLUSTER_LOCATION_TYPE: gke_location_type(cluster_location),
        keys.INSTANCE_ID: metadata.instance_id(),
    }


def _serverless_attributes(env: Mapping[str, str], metadata: MetadataSource) -> dict[str, str | None]:
    return {
        keys.SERVERLESS_COMPUTE_NAME: env.get(EnvVar.K_SERVICE),
        keys.SERVERLESS_COMPUTE_REVISION: env.get(EnvVar.K_REVISION),
        keys.AVAILABILITY_ZONE: metadata.zone(),
        keys.CLOUD_REGION: metadata.region_from_zone(),
        keys.INSTANCE_ID: metadata.instance_id(),
    }


def _cloud_run_job_attributes(env: Mapping[str, str], metadata: MetadataSource) -> dict[str, str | None]:
    return {
        keys.SERVERLESS_COMPUTE_NAME: env.get(EnvVar.CLOUD_RUN_JOB),
        keys.GCR_JOB_EXECUTION_KEY: env.get(EnvVar.CLOUD_RUN_EXECUTION),
        keys.GCR_JOB_TASK_INDEX: env.get(EnvVar.CLOUD_RUN_TASK_INDEX),
        keys.INSTANCE_ID: metadata.instance_id(),
        keys.CLOUD_REGION: metadata.region_from_zone(),
    }


def _gae_attributes(env: Mapping[str, str], metadata: MetadataSource) -> dict[str, str | None]:
    # App Engine standard does not expose a zone that the region can be parsed from.
    if env.get(EnvVar.GAE_ENV) == GAE_STANDARD_ENVIRONMENT:
        region = metadata.region()
    else:
        region = metadata.region_from_zone()
    return {
        keys.GAE_MODULE_NAME: env.get(EnvVar.GAE_SERVICE),
        keys.GAE_APP_VERSION: env.get(EnvVar.GAE_VERSION),
        keys.INSTANCE_ID: env.get(EnvVar.GAE_INSTANCE),
        keys.AVAILABILITY_ZONE: metadata.zone(),
        keys.CLOUD_REGION: region,
    }


_ATTRIBUTE_BUILDERS: dict[Platform, Callable[[Mapping[str, str], MetadataSource], dict[str, str | None]]] = {
    Platform.GCE: _gce_attributes,
    Platform.GKE: _gke_attributes,
    Platform.CLOUD_RUN: _serverless_attributes,
    Platform.CLOUD_FUNCTIONS: _serverless_attributes,
    Platform.CLOUD_RUN_JOB: _cloud_run_job_attributes,
    Platform.GAE: _gae_attributes,
}


class PlatformDetector:
    """Detects the hosting platform once and caches the result.

    The metadata source and the environment are passed in explicitly so that
    tests can supply doubles; there is no process-wide instance.
    """

    def __init__(
        self,
        metadata: MetadataSource | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the detector and run detection.

        Args:
            metadata: Metadata server access. Defaults to a new `MetadataSource`
                that is closed once detection finishes; a source passed in is
                left open for its owner.
            env: Environment variables. Defaults to the process environment.
        """
        owns_metadata = metadata is None
        self._metadata = metadata if metadata is not None else MetadataSource()
        self._env = env if env is not None else current_environment()
        try:
            self._detected = self._detect()
        finally:
            if owns_metadata:
                self._metadata.close()

    def _detect(self) -> DetectedPlatform:
        project_id = self._metadata.project_id()
        platform = classify(project_id, self._env)
        if platform == Platform.UNKNOWN:
            logger.debug('Not running on Google Cloud')
            return DetectedPlatform(platform=Platform.UNKNOWN)

        raw = _ATTRIBUTE_BUILDERS[platform](self._env, self._metadata)
        attributes = {key: value for key, value in raw.items() if value is not None}
        logger.debug('Detected platform', platform=str(platform), project_id=project_id)
        return DetectedPlatform(
            platform=platform,
            project_id=project_id,
            attributes=MappingProxyType(attributes),
        )

    def detect(self) -> DetectedPlatform:
        """Returns the cached detection result."""
        return self._detected

    @property
    def platform(self) -> Platform:
        return self._detected.platform

    @property
    def project_id(self) -> str | None:
        return self._detected.project_id

    @property
    def attributes(self) -> Mapping[str, str]:
        return self._detected.attributes
