"""Registry of processors, metadata enhancers and quality validators."""

import logging
from dataclasses import dataclass

from docconverter.plugins.types import (
    FileProcessor,
    MetadataEnhancer,
    PluginInfo,
    QualityValidator,
)

log = logging.getLogger(__name__)


class PluginRegistrationError(ValueError):
    """Raised when a plugin descriptor is incomplete."""


@dataclass
class RegistryStats:
    processors: int
    enhancers: int
    validators: int

    @property
    def total(self) -> int:
        return self.processors + self.enhancers + self.validators


def _check_identity(info: PluginInfo | None) -> None:
    if info is None or not info.name or not info.version:
        raise PluginRegistrationError("Plugin must have a name and a version")


class PluginRegistry:
    """Holds plugins for one converter instance."""

    def __init__(self):
        self._processors: dict[str, FileProcessor] = {}
        self._enhancers: list[MetadataEnhancer] = []
        self._validators: list[QualityValidator] = []

    def register_processor(self, processor: FileProcessor) -> None:
        """Add a processor; re-registering the same name@version replaces it.

        Raises:
            PluginRegistrationError: If identity, process callable or extensions are missing.
        """
        _check_identity(processor.info)
        if not callable(processor.process):
            raise PluginRegistrationError(f"Processor {processor.info.name} must provide process()")
        if not processor.extensions:
            raise PluginRegistrationError(
                f"Processor {processor.info.name} must handle at least one extension"
            )

        processor.extensions = tuple(ext.lower() for ext in processor.extensions)
        self._processors[processor.info.key] = processor
        log.debug("Registered processor %s", processor.info.key)

    def register_enhancer(self, enhancer: MetadataEnhancer) -> None:
        _check_identity(enhancer.info)
        if not callable(enhancer.enhance):
            raise PluginRegistrationError(f"Enhancer {enhancer.info.name} must provide enhance()")

        self._enhancers = [e for e in self._enhancers if e.info.key != enhancer.info.key]
        self._enhancers.append(enhancer)
        # sort is stable, equal priorities keep registration order
        self._enhancers.sort(key=lambda e: -e.priority)
        log.debug("Registered enhancer %s (priority %d)", enhancer.info.key, enhancer.priority)

    def register_validator(self, validator: QualityValidator) -> None:
        _check_identity(validator.info)
        if not callable(validator.validate):
            raise PluginRegistrationError(f"Validator {validator.info.name} must provide validate()")

        self._validators = [v for v in self._validators if v.info.key != validator.info.key]
        self._validators.append(validator)
        log.debug("Registered validator %s", validator.info.key)

    def get_processors_for_extension(self, extension: str) -> list[FileProcessor]:
        return [p for p in self._processors.values() if p.handles(extension)]

    def get_processors(self) -> list[FileProcessor]:
        return list(self._processors.values())

    def get_enhancers(self, extension: str | None = None) -> list[MetadataEnhancer]:
        if extension is None:
            return list(self._enhancers)
        return [e for e in self._enhancers if e.handles(extension)]

    def get_validators(self, extension: str | None = None) -> list[QualityValidator]:
        if extension is None:
            return list(self._validators)
        return [v for v in self._validators if v.handles(extension)]

    def get_stats(self) -> RegistryStats:
        return RegistryStats(
            processors=len(self._processors),
            enhancers=len(self._enhancers),
            validators=len(self._validators),
        )

    def clear(self) -> None:
        self._processors.clear()
        self._enhancers.clear()
        self._validators.clear()
