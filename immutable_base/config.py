"""ImmutableBase configuration.

The configuration is process-wide: it is read by the validation chain
(default walk order), the updater (JSON text detection in patches) and
the serializer (JSON encoding options).

Example:
    From code::

        from immutable_base.config import HydrationConfig, set_config
        from immutable_base.hydration.api import ValidationOrder

        config = HydrationConfig(validation_order=ValidationOrder.ROOT_FIRST)
        set_config(config)

    From YAML::

        set_config(HydrationConfig.from_yaml("immutable-base.yml"))
"""

import os
import threading
from typing import Optional, Union

from immutable_base.exceptions import ConfigurationException
from immutable_base.hydration.api import ValidationOrder
from immutable_base.logging import CONFIG, get_logger

_logger = get_logger(CONFIG)


class HydrationConfig:
    """Configuration for hydration, validation and serialization."""

    def __init__(
        self,
        validation_order: Union[ValidationOrder, str] = ValidationOrder.LEAF_FIRST,
        decode_json_patch_values: bool = True,
        json_ensure_ascii: bool = False,
        json_sort_keys: bool = False,
        json_indent: Optional[int] = None,
    ):
        self._validation_order = self._coerce_order(validation_order)
        self._decode_json_patch_values = decode_json_patch_values
        self._json_ensure_ascii = json_ensure_ascii
        self._json_sort_keys = json_sort_keys
        self._json_indent = json_indent
        self._validate()

    @staticmethod
    def _coerce_order(value: Union[ValidationOrder, str]) -> ValidationOrder:
        if isinstance(value, ValidationOrder):
            return value
        try:
            return ValidationOrder(str(value).upper())
        except ValueError:
            valid = ", ".join(o.value for o in ValidationOrder)
            raise ConfigurationException(
                f"validation_order must be one of {valid}, got {value!r}"
            )

    def _validate(self) -> None:
        if not isinstance(self._decode_json_patch_values, bool):
            raise ConfigurationException("decode_json_patch_values must be a boolean")
        if not isinstance(self._json_ensure_ascii, bool):
            raise ConfigurationException("json_ensure_ascii must be a boolean")
        if not isinstance(self._json_sort_keys, bool):
            raise ConfigurationException("json_sort_keys must be a boolean")
        if self._json_indent is not None:
            if isinstance(self._json_indent, bool) or not isinstance(self._json_indent, int):
                raise ConfigurationException("json_indent must be an integer or None")
            if self._json_indent < 0:
                raise ConfigurationException("json_indent must be non-negative")

    @property
    def validation_order(self) -> ValidationOrder:
        """Get the default lineage walk order of the validation chain."""
        return self._validation_order

    @validation_order.setter
    def validation_order(self, value: Union[ValidationOrder, str]) -> None:
        self._validation_order = self._coerce_order(value)

    @property
    def decode_json_patch_values(self) -> bool:
        """Whether ``with_()`` decodes JSON text given for non-string fields."""
        return self._decode_json_patch_values

    @decode_json_patch_values.setter
    def decode_json_patch_values(self, value: bool) -> None:
        self._decode_json_patch_values = value
        self._validate()

    @property
    def json_ensure_ascii(self) -> bool:
        """Whether ``to_json()`` escapes non-ASCII characters."""
        return self._json_ensure_ascii

    @json_ensure_ascii.setter
    def json_ensure_ascii(self, value: bool) -> None:
        self._json_ensure_ascii = value
        self._validate()

    @property
    def json_sort_keys(self) -> bool:
        """Whether ``to_json()`` sorts object keys."""
        return self._json_sort_keys

    @json_sort_keys.setter
    def json_sort_keys(self, value: bool) -> None:
        self._json_sort_keys = value
        self._validate()

    @property
    def json_indent(self) -> Optional[int]:
        """Get the ``to_json()`` indent, or None for compact output."""
        return self._json_indent

    @json_indent.setter
    def json_indent(self, value: Optional[int]) -> None:
        self._json_indent = value
        self._validate()

    def to_dict(self) -> dict:
        """Convert the configuration to a plain dictionary."""
        return {
            "validation_order": self._validation_order.value,
            "decode_json_patch_values": self._decode_json_patch_values,
            "json_ensure_ascii": self._json_ensure_ascii,
            "json_sort_keys": self._json_sort_keys,
            "json_indent": self._json_indent,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HydrationConfig":
        """Create HydrationConfig from a dictionary."""
        if not isinstance(data, dict):
            raise ConfigurationException(
                f"Configuration must be a mapping, got {type(data).__name__}"
            )
        return cls(
            validation_order=data.get("validation_order", ValidationOrder.LEAF_FIRST),
            decode_json_patch_values=data.get("decode_json_patch_values", True),
            json_ensure_ascii=data.get("json_ensure_ascii", False),
            json_sort_keys=data.get("json_sort_keys", False),
            json_indent=data.get("json_indent"),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "HydrationConfig":
        """Load configuration from a YAML file.

        Args:
            yaml_path: Path to the YAML configuration file.

        Returns:
            HydrationConfig instance.

        Raises:
            ConfigurationException: If the file cannot be read or parsed.
        """
        import yaml

        if not os.path.exists(yaml_path):
            raise ConfigurationException(f"Configuration file not found: {yaml_path}")

        try:
            with open(yaml_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationException(f"Failed to parse YAML: {e}", cause=e)
        except IOError as e:
            raise ConfigurationException(f"Failed to read configuration file: {e}", cause=e)

        _logger.debug("Loaded configuration from %s", yaml_path)
        return cls._from_yaml_data(data)

    @classmethod
    def from_yaml_string(cls, yaml_content: str) -> "HydrationConfig":
        """Load configuration from a YAML string.

        Args:
            yaml_content: YAML configuration as a string.

        Returns:
            HydrationConfig instance.

        Raises:
            ConfigurationException: If the YAML cannot be parsed.
        """
        import yaml

        try:
            data = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ConfigurationException(f"Failed to parse YAML: {e}", cause=e)

        return cls._from_yaml_data(data)

    @classmethod
    def _from_yaml_data(cls, data) -> "HydrationConfig":
        if data is None:
            data = {}

        if isinstance(data, dict) and "immutable_base" in data:
            data = data["immutable_base"] or {}

        return cls.from_dict(data)

    def __repr__(self) -> str:
        return f"HydrationConfig({self.to_dict()!r})"


_config_lock = threading.Lock()
_config: Optional[HydrationConfig] = None


def get_config() -> HydrationConfig:
    """Get the process-wide configuration, creating the default on first use."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = HydrationConfig()
    return _config


def set_config(config: HydrationConfig) -> None:
    """Replace the process-wide configuration.

    Raises:
        ConfigurationException: If ``config`` is not a HydrationConfig.
    """
    global _config
    if not isinstance(config, HydrationConfig):
        raise ConfigurationException(
            f"Expected HydrationConfig, got {type(config).__name__}"
        )
    with _config_lock:
        _config = config
    _logger.debug("Configuration replaced: %r", config)


def reset_config() -> None:
    """Restore the default configuration."""
    global _config
    with _config_lock:
        _config = None
