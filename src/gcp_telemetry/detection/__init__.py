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

"""Google Cloud platform detection.

Module Structure:
    ┌──────────────────────┬──────────────────────────────────────────────────┐
    │ Module               │ Purpose                                          │
    ├──────────────────────┼──────────────────────────────────────────────────┤
    │ constants.py         │ Metadata paths and platform attribute keys       │
    │ metadata.py          │ Cached metadata server lookups                   │
    │ platform.py          │ Precedence-ordered platform classification       │
    │ resource_detector.py │ OpenTelemetry ResourceDetector on top of the two │
    └──────────────────────┴──────────────────────────────────────────────────┘
"""

from .metadata import MetadataSource, region_from_zone
from .platform import DetectedPlatform, Platform, PlatformDetector
from .resource_detector import GoogleCloudResourceDetector

__all__ = [
    'DetectedPlatform',
    'GoogleCloudResourceDetector',
    'MetadataSource',
    'Platform',
    'PlatformDetector',
    'region_from_zone',
]
