# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Remote API error types.

Transport errors carry the HTTP status and the redacted endpoint. This module imports
nothing from the package, so any layer can catch them.
"""

from __future__ import annotations


class RemoteAPIError(Exception):
    def __init__(self, *, status_code: int, endpoint: str, message: str):
        super().__init__(message)
        self.status_code = int(status_code)
        self.endpoint = str(endpoint or "")


class RemoteAuthError(RemoteAPIError):
    pass


class RemoteForbiddenError(RemoteAPIError):
    pass


class RemoteNotFoundError(RemoteAPIError):
    pass


class RemoteRequestError(RemoteAPIError):
    pass


class ConfigurationError(Exception):
    """A host is configured without the token(s) it requires.

    Fatal for that host's repos only; the orchestrator records a notice and keeps going.
    """

    def __init__(self, host: str, message: str):
        super().__init__(message)
        self.host = str(host or "")
