"""Type aliases used across the wire batch pipeline."""

from __future__ import annotations

from typing import Any

JsonDict = dict[str, Any]
BatchId = str
IdempotencyKey = str
