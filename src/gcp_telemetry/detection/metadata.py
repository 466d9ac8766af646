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

"""Cached access to the GCE instance metadata server.

The metadata server answers plain-text GETs under
``http://metadata.google.internal/computeMetadata/v1/``. Every request must
carry ``Metadata-Flavor: Google`` and a genuine answer echoes that header
back; anything else (DNS failure off-cloud, a proxy page, a 404) is treated
as "not available".

Lookups never raise. Resolved values are cached per path for the lifetime of
the `MetadataSource`; absent results are not cached so that attributes which
appear late (cluster location on a freshly started GKE node, for example)
are picked up on a later call.

Example:
    ```python
    source = MetadataSource()
    source.project_id()  # 'my-project' on GCP, None elsewhere
    source.zone()  # 'us-central1-a'
    source.region_from_zone()  # 'us-central1'
    ```

See Also:
    - https://cloud.google.com/compute/docs/metadata/querying-metadata
"""

import threading

import httpx

from gcp_telemetry.logging import get_logger

from .constants import (
    CLUSTER_LOCATION_PATH,
    CLUSTER_NAME_PATH,
    INSTANCE_HOSTNAME_PATH,
    INSTANCE_ID_PATH,
    INSTANCE_NAME_PATH,
    MACHINE_TYPE_PATH,
    METADATA_BASE_URL,
    METADATA_FLAVOR_HEADER,
    METADATA_FLAVOR_VALUE,
    METADATA_TIMEOUT_SECONDS,
    PROJECT_ID_PATH,
    REGION_PATH,
    ZONE_PATH,
)

logger = get_logger(__name__)


def last_path_segment(value: str | None) -> str | None:
    """Strips everything up to and including the last '/'.

    ``projects/640212054955/zones/us-central1-a`` becomes ``us-central1-a``.
    """
    if value is None or '/' not in value:
        return value
    return value[value.rindex('/') + 1 :]


def region_from_zone(zone: str | None) -> str | None:
    """Derives the region a zone belongs to.

    Args:
        zone: A zone such as ``us-central1-a``.

    Returns:
        ``us-central1`` for the example above, or None when the zone is
        missing or does not have more than two dash-separated components.
    """
    if not zone:
        return None
    parts = zone.split('-')
    if len(parts) > 2:
        return f'{parts[0]}-{parts[1]}'
    return None


class MetadataSource:
    """Key/value lookups against the instance metadata server."""

    def __init__(
        self,
        base_url: str = METADATA_BASE_URL,
        client: httpx.Client | None = None,
        timeout: float = METADATA_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the metadata source.

        Args:
            base_url: Base URL that paths are appended to. Must end with '/'.
            client: Optional HTTP client; tests pass one built on
                `httpx.MockTransport`.
            timeout: Per-request timeout in seconds for the default client.
        """
        self._base_url = base_url
        self._client = client if client is not None else httpx.Client(timeout=timeout)
        self._cache: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, path: str) -> str | None:
        """Returns the first line of the value stored at `path`, or None."""
        with self._lock:
            if path in self._cache:
                return self._cache[path]

        value = self._fetch(path)
        if value is None:
            return None

        with self._lock:
            # A concurrent caller may have resolved the same path first.
            return self._cache.setdefault(path, value)

    def _fetch(self, path: str) -> str | None:
        url = f'{self._base_url}{path}'
        try:
            response = self._client.get(url, headers={METADATA_FLAVOR_HEADER: METADATA_FLAVOR_VALUE})
        except httpx.HTTPError as e:
            logger.debug('Metadata server unavailable', path=path, error=str(e))
            return None

        if response.status_code != 200:
            logger.debug('Metadata lookup failed', path=path, status_code=response.status_code)
            return None
        if response.headers.get(METADATA_FLAVOR_HEADER) != METADATA_FLAVOR_VALUE:
            logger.debug('Metadata response missing flavor header', path=path)
            return None

        return response.text.split('\n', 1)[0].rstrip('\r')

    def project_id(self) -> str | None:
        return self.get(PROJECT_ID_PATH)

    def zone(self) -> str | None:
        """Zone of the instance, e.g. ``us-central1-a``."""
        return last_path_segment(self.get(ZONE_PATH))

    def region(self) -> str | None:
        """Region of the instance as reported by the server.

        Only needed where the region cannot be parsed from the zone (App
        Engine standard).
        """
        return last_path_segment(self.get(REGION_PATH))

    def region_from_zone(self) -> str | None:
        return region_from_zone(self.zone())

    def machine_type(self) -> str | None:
        return last_path_segment(self.get(MACHINE_TYPE_PATH))

    def instance_id(self) -> str | None:
        return self.get(INSTANCE_ID_PATH)

    def instance_name(self) -> str | None:
        return self.get(INSTANCE_NAME_PATH)

    def instance_hostname(self) -> str | None:
        return self.get(INSTANCE_HOSTNAME_PATH)

    def cluster_name(self) -> str | None:
        return self.get(CLUSTER_NAME_PATH)

    def cluster_location(self) -> str | None:
        return self.get(CLUSTER_LOCATION_PATH)

    def close(self) -> None:
        """Closes the underlying HTTP client."""
        self._client.close()
