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

"""Constants for Google Cloud platform detection.

Attribute keys are the flat keys of `DetectedPlatform.attributes`; they are
shared between platforms where the meaning is the same (for example every
platform that knows its instance records it under `instance_id`).
"""

# Metadata server
METADATA_BASE_URL = 'http://metadata.google.internal/computeMetadata/v1/'
METADATA_FLAVOR_HEADER = 'Metadata-Flavor'
METADATA_FLAVOR_VALUE = 'Google'
METADATA_TIMEOUT_SECONDS = 2.0

# Metadata paths, relative to METADATA_BASE_URL
PROJECT_ID_PATH = 'project/project-id'
ZONE_PATH = 'instance/zone'
REGION_PATH = 'instance/region'
INSTANCE_ID_PATH = 'instance/id'
INSTANCE_NAME_PATH = 'instance/name'
MACHINE_TYPE_PATH = 'instance/machine-type'
CLUSTER_NAME_PATH = 'instance/attributes/cluster-name'
CLUSTER_LOCATION_PATH = 'instance/attributes/cluster-location'
INSTANCE_HOSTNAME_PATH = 'instance/hostname'

# Shared attribute keys
AVAILABILITY_ZONE = 'availability_zone'
CLOUD_REGION = 'cloud_region'
INSTANCE_ID = 'instance_id'
INSTANCE_NAME = 'instance_name'
MACHINE_TYPE = 'machine_type'
INSTANCE_HOSTNAME = 'instance_hostname'
PROJECT_ID = 'project_id'

# GKE
GKE_POD_NAME = 'gke_pod_name'
GKE_NAMESPACE = 'gke_namespace'
GKE_CONTAINER_NAME = 'gke_container_name'
GKE_CLUSTER_NAME = 'gke_cluster_name'
GKE_CLUSTER_LOCATION = 'gke_cluster_location'
GKE_CLUSTER_LOCATION_TYPE = 'gke_cluster_location_type'
GKE_LOCATION_TYPE_ZONE = 'ZONE'
GKE_LOCATION_TYPE_REGION = 'REGION'

# App Engine
GAE_MODULE_NAME = 'gae_module_name'
GAE_APP_VERSION = 'gae_app_version'

# Cloud Run, Cloud Functions and Cloud Run jobs
SERVERLESS_COMPUTE_NAME = 'serverless_compute_name'
SERVERLESS_COMPUTE_REVISION = 'serverless_compute_revision'
GCR_JOB_EXECUTION_KEY = 'gcr_job_execution_key'
GCR_JOB_TASK_INDEX = 'gcr_job_task_index'
