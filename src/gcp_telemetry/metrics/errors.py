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

"""Error reporting for metric export.

Permission problems are by far the most common export failure, so the first
one is logged together with the IAM roles that fix it. Later failures are
logged without the help text.
"""

import threading

from gcp_telemetry.logging import get_logger

logger = get_logger(__name__)

METRICS_HELP_TEXT = (
    'Ensure the service account has the "Monitoring Metric Writer" '
    '(roles/monitoring.metricWriter) or "Cloud Telemetry Metrics Writer" '
    '(roles/telemetry.metricsWriter) role.'
)


def is_permission_error(error: Exception) -> bool:
    """Returns True for errors that look like a missing IAM permission."""
    error_str = str(error).lower()
    return 'permission' in error_str or 'denied' in error_str or '403' in error_str


class ErrorHandler:
    """Logs export errors, adding help text to the first one only."""

    def __init__(self, error_message: str, help_text: str) -> None:
        """Initialize the error handler.

        Args:
            error_message: Brief description of what failed.
            help_text: Detailed help text shown only on the first error.
        """
        self._error_message = error_message
        self._help_text = help_text
        self._logged = False
        self._lock = threading.Lock()

    def handle(self, error: Exception) -> None:
        with self._lock:
            first = not self._logged
            self._logged = True
        if first:
            logger.error(f'{self._error_message}\n{self._help_text}\nError: {error}')
        else:
            logger.error(f'{self._error_message}: {error}')

    def reset(self) -> None:
        with self._lock:
            self._logged = False


_metrics_error_handler = ErrorHandler('Unable to send metrics to Google Cloud.', METRICS_HELP_TEXT)


def handle_metric_error(error: Exception) -> None:
    """Logs a metric export error.

    Only the first permission error carries the detailed instructions.

    Args:
        error: The export error.
    """
    if is_permission_error(error):
        _metrics_error_handler.handle(error)
    else:
        logger.error('Error exporting metrics to Google Cloud', error=str(error))
