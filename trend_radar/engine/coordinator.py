"""Ordered multi-source fetching with per-adapter failure isolation."""

from __future__ import annotations

from typing import Sequence

import structlog

from ..logging_conf import configure_logging, source_logger
from .adapters import SourceAdapter
from .entity import CanonicalEntity


class FetchCoordinator:
    """Try adapters in priority order and return the first non-empty result.

    Any failure inside an adapter (network, timeout, malformed payload, or a
    bug in normalization) is logged against that source and the next adapter
    is tried. ``fetch`` never raises; an empty list means no source had data.
    """

    def __init__(
        self,
        adapters: Sequence[SourceAdapter],
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.adapters = list(adapters)
        self.logger = logger or configure_logging().bind(component="coordinator")
        self.last_source: str | None = None

    def fetch(self) -> list[CanonicalEntity]:
        for adapter in self.adapters:
            adapter_log = source_logger(adapter.name)
            try:
                entities = adapter.normalize(adapter.fetch_raw())
            except Exception as exc:  # noqa: BLE001
                adapter_log.warning(
                    "adapter_failed", error=str(exc), error_type=type(exc).__name__
                )
                continue
            if not entities:
                adapter_log.info("adapter_empty")
                continue
            adapter_log.info("adapter_succeeded", entities=len(entities))
            self.last_source = adapter.name
            return entities
        self.logger.warning("all_sources_exhausted", adapters=len(self.adapters))
        return []


__all__ = ["FetchCoordinator"]
