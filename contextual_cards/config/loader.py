"""Card catalog loader with validation."""

import hashlib
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from contextual_cards.config.schemas import CardCatalogConfig


logger = structlog.get_logger()


class ConfigValidationError(Exception):
    """Raised when a catalog file cannot be loaded or validated."""

    def __init__(self, errors: list[dict[str, str]], file_path: str) -> None:
        """Initialize the error.

        Args:
            errors: List of validation error details.
            file_path: Path to the file that failed validation.
        """
        self.errors = errors
        self.file_path = file_path
        super().__init__(f"Validation failed for {file_path}: {len(errors)} errors")


class CatalogLoader:
    """Loads and validates card catalog YAML files."""

    def __init__(self) -> None:
        """Initialize the loader."""
        self._file_checksums: dict[str, str] = {}
        self._log = logger.bind(component="config")

    @property
    def file_checksums(self) -> dict[str, str]:
        """Get SHA-256 checksums of loaded files."""
        return self._file_checksums.copy()

    def load(self, catalog_path: Path) -> CardCatalogConfig:
        """Load and validate a catalog file.

        Args:
            catalog_path: Path to the catalog YAML file.

        Returns:
            Validated catalog.

        Raises:
            ConfigValidationError: If the file is missing, not valid YAML,
                or does not match the schema.
        """
        log = self._log.bind(file_path=str(catalog_path))
        log.info("loading_config_file", file_type="catalog")

        try:
            content_bytes = catalog_path.read_bytes()
        except FileNotFoundError as e:
            log.error("config_file_not_found", error=str(e))
            raise ConfigValidationError(
                [{"loc": "file", "msg": str(e), "type": "file_not_found"}],
                str(catalog_path),
            ) from e

        checksum = hashlib.sha256(content_bytes).hexdigest()

        try:
            parsed = yaml.safe_load(content_bytes.decode("utf-8")) or {}
        except yaml.YAMLError as e:
            log.error("config_yaml_parse_error", error=str(e))
            raise ConfigValidationError(
                [{"loc": "yaml", "msg": str(e), "type": "yaml_parse_error"}],
                str(catalog_path),
            ) from e

        try:
            catalog = CardCatalogConfig.model_validate(parsed)
        except ValidationError as e:
            errors = [
                {
                    "loc": ".".join(str(loc) for loc in err["loc"]),
                    "msg": err["msg"],
                    "type": err["type"],
                }
                for err in e.errors()
            ]
            log.error(
                "config_validation_failed",
                validation_error_count=len(errors),
                errors=errors,
            )
            raise ConfigValidationError(errors, str(catalog_path)) from e

        self._file_checksums[str(catalog_path.resolve())] = checksum
        log.info(
            "config_file_loaded",
            file_sha256=checksum,
            source_count=len(catalog.sources),
        )
        return catalog
