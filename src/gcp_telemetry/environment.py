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

"""Environment variables read while detecting the hosting platform."""

import os
import sys
from collections.abc import Mapping

if sys.version_info < (3, 11):
    from strenum import StrEnum
else:
    from enum import StrEnum


class EnvVar(StrEnum):
    """Enumerates all the environment variables consulted by this package."""

    # Platform signals.
    KUBERNETES_SERVICE_HOST = 'KUBERNETES_SERVICE_HOST'
    K_CONFIGURATION = 'K_CONFIGURATION'
    FUNCTION_TARGET = 'FUNCTION_TARGET'
    CLOUD_RUN_JOB = 'CLOUD_RUN_JOB'
    GAE_SERVICE = 'GAE_SERVICE'

    # Serverless details.
    K_SERVICE = 'K_SERVICE'
    K_REVISION = 'K_REVISION'
    CLOUD_RUN_EXECUTION = 'CLOUD_RUN_EXECUTION'
    CLOUD_RUN_TASK_INDEX = 'CLOUD_RUN_TASK_INDEX'

    # App Engine details.
    GAE_VERSION = 'GAE_VERSION'
    GAE_INSTANCE = 'GAE_INSTANCE'
    GAE_ENV = 'GAE_ENV'

    # Kubernetes details (set through the downward API).
    NAMESPACE = 'NAMESPACE'
    POD_NAME = 'POD_NAME'
    HOSTNAME = 'HOSTNAME'
    CONTAINER_NAME = 'CONTAINER_NAME'

    # Project resolution.
    GOOGLE_CLOUD_PROJECT = 'GOOGLE_CLOUD_PROJECT'
    GCLOUD_PROJECT = 'GCLOUD_PROJECT'
    GCP_PROJECT = 'GCP_PROJECT'


# Resolution order for the project id when none is passed explicitly.
PROJECT_ID_ENV_VARS = (
    EnvVar.GOOGLE_CLOUD_PROJECT,
    EnvVar.GCLOUD_PROJECT,
    EnvVar.GCP_PROJECT,
)

GAE_STANDARD_ENVIRONMENT = 'standard'


def current_environment() -> Mapping[str, str]:
    """Returns the process environment as a read-only mapping."""
    return os.environ


def project_id_from_environment(env: Mapping[str, str] | None = None) -> str | None:
    """Returns the first non-empty project id found in the environment.

    Args:
        env: Environment mapping to read; defaults to the process environment.

    Returns:
        The project id or None.
    """
    env = current_environment() if env is None else env
    for name in PROJECT_ID_ENV_VARS:
        value = env.get(name)
        if value:
            return value
    return None
