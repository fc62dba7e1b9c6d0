# Taptik Converter Registry
# Converter lookup keyed by ordered (source, target) platform pair

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

from taptik.context import Platform
from taptik.convert.converters import DEFAULT_CONVERTERS, BaseConverter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConverterNotFound:
    """Lookup result when no converter is registered for a pair."""

    source: Platform
    target: Platform

    @property
    def message(self) -> str:
        return f"No converter available for {self.source.value} to {self.target.value}"


class ConverterRegistry:
    """
    Registry of converters keyed by (source, target).

    Lookups return either the converter or a ConverterNotFound value, never None.
    """

    def __init__(self, converters: list[BaseConverter] | None = None):
        self._converters: dict[tuple[Platform, Platform], BaseConverter] = {}
        for converter in converters or []:
            self.register(converter)

    @classmethod
    def with_defaults(cls) -> ConverterRegistry:
        """Create a registry holding every built-in converter."""
        return cls([converter_cls() for converter_cls in DEFAULT_CONVERTERS])

    def register(self, converter: BaseConverter) -> None:
        """Register a converter, replacing any existing one for its pair."""
        key = (converter.source, converter.target)
        if key in self._converters:
            logger.debug("Replacing converter for %s -> %s", key[0].value, key[1].value)
        self._converters[key] = converter

    def unregister(self, source: Platform, target: Platform) -> bool:
        """
        Remove the converter for a pair.

        Returns:
            True if a converter was removed.
        """
        return self._converters.pop((source, target), None) is not None

    def get(self, source: Platform, target: Platform) -> BaseConverter | ConverterNotFound:
        converter = self._converters.get((source, target))
        if converter is None:
            return ConverterNotFound(source, target)
        return converter

    def has_converter(self, source: Platform, target: Platform) -> bool:
        return (source, target) in self._converters

    def pairs(self) -> list[tuple[Platform, Platform]]:
        """All registered pairs in registration order."""
        return list(self._converters)

    def targets_for(self, source: Platform) -> list[Platform]:
        """Platforms directly reachable from a source platform."""
        return [target for (src, target) in self._converters if src == source]

    def conversion_chain(self, source: Platform, target: Platform) -> list[Platform] | None:
        """
        Find the shortest chain of registered conversions between two platforms.

        Returns:
            Platforms from source to target inclusive, or None if unreachable.
        """
        if source == target:
            return [source]

        previous: dict[Platform, Platform] = {}
        queue = deque([source])
        seen = {source}
        while queue:
            current = queue.popleft()
            for nxt in self.targets_for(current):
                if nxt in seen:
                    continue
                previous[nxt] = current
                if nxt == target:
                    chain = [target]
                    while chain[-1] != source:
                        chain.append(previous[chain[-1]])
                    return list(reversed(chain))
                seen.add(nxt)
                queue.append(nxt)
        return None
