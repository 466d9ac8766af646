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

"""Tests for metric export error reporting."""

import pytest
from structlog.testing import capture_logs

from gcp_telemetry.metrics.errors import METRICS_HELP_TEXT, ErrorHandler, is_permission_error


class TestIsPermissionError:
    """Tests for is_permission_error."""

    @pytest.mark.parametrize(
        'message',
        ['403 Forbidden', 'Permission monitoring.timeSeries.create denied', 'PERMISSION_DENIED'],
    )
    def test_permission_errors(self, message: str) -> None:
        """Test Permission errors."""
        assert is_permission_error(RuntimeError(message))

    def test_other_errors(self) -> None:
        """Test Other errors."""
        assert not is_permission_error(RuntimeError('deadline exceeded'))


class TestErrorHandler:
    """Tests for ErrorHandler."""

    def test_help_text_only_on_first_error(self) -> None:
        """Test Help text only on first error."""
        handler = ErrorHandler('Unable to send metrics.', METRICS_HELP_TEXT)

        with capture_logs() as logs:
            handler.handle(RuntimeError('denied'))
            handler.handle(RuntimeError('denied again'))

        assert METRICS_HELP_TEXT in logs[0]['event']
        assert METRICS_HELP_TEXT not in logs[1]['event']
        assert all(log['log_level'] == 'error' for log in logs)

    def test_reset_shows_help_again(self) -> None:
        """Test Reset shows help again."""
        handler = ErrorHandler('Unable to send metrics.', METRICS_HELP_TEXT)

        with capture_logs() as logs:
            handler.handle(RuntimeError('denied'))
            handler.reset()
            handler.handle(RuntimeError('denied'))

        assert all(METRICS_HELP_TEXT in log['event'] for log in logs)
