# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Normalizers for payload shapes shared by more than one provider."""

from __future__ import annotations

import base64
from typing import Any, List, Optional


def decode_file_payload(response: Any) -> Optional[str]:
    """Text of a repository-file payload ({"content": ..., "encoding": "base64"})."""
    if not isinstance(response, dict) or not response.get("content"):
        return None
    content = response["content"]
    if str(response.get("encoding") or "base64") == "base64":
        # GitHub wraps base64 at 60 columns; b64decode drops the newlines.
        return base64.b64decode(content).decode("utf-8")
    return str(content)


def ref_names(response: Any) -> Optional[List[str]]:
    """Names from a tag/branch listing ([{"name": ...}, ...])."""
    if not isinstance(response, list):
        return None
    return [str(item["name"]) for item in response if isinstance(item, dict) and item.get("name")]
