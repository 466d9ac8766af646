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

"""Typed structlog access for the detection and export modules.

Every module in this package obtains its logger through `get_logger()` so
that events are emitted as structured key/value records:

    from gcp_telemetry.logging import get_logger

    logger = get_logger(__name__)
    logger.debug('Detected platform', platform='gke')
"""

from typing import Protocol

import structlog


class Logger(Protocol):
    """The subset of structlog's BoundLogger used by this package."""

    def debug(self, event: str | None = None, **kw: object) -> None:
        """Log a debug message."""
        ...

    def info(self, event: str | None = None, **kw: object) -> None:
        """Log an info message."""
        ...

    def warning(self, event: str | None = None, **kw: object) -> None:
        """Log a warning message."""
        ...

    def error(self, event: str | None = None, **kw: object) -> None:
        """Log an error message."""
        ...

    def exception(self, event: str | None = None, **kw: object) -> None:
        """Log an exception with traceback."""
        ...

    def bind(self, **new_values: object) -> 'Logger':
        """Return a new logger with bound context values."""
        ...


def get_logger(name: str | None = None) -> Logger:
    """Get a typed logger instance.

    Args:
        name: Optional logger name (typically __name__).

    Returns:
        A structlog logger typed as `Logger`.
    """
    return structlog.get_logger(name)
