import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from poolwarden.validators import validate_ou_id, validate_shard_name

logger = logging.getLogger(__name__)

# Operator configuration keys
POOL_OU_KEY = "root"
SHARD_NAME_KEY = "shard-name"
MOVE_FLAG_KEY = "feature.validation_move_account"
TAG_FLAG_KEY = "feature.validation_tag_account"

_TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_VALUES = {"0", "f", "F", "FALSE", "false", "False"}


class InvalidSettingsError(ValueError):
    """The configuration is readable but unusable (bad pool OU, no shard name)."""
    pass


def parse_bool(raw: Optional[str]) -> bool:
    """
    Strict boolean parsing for feature flags.
    Raises ValueError for anything that is not an accepted spelling.
    """
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {raw!r}")


@dataclass(frozen=True)
class FeatureGates:
    """Both gates start disabled: validation only reports until told otherwise."""
    move_enabled: bool = False
    tag_enabled: bool = False

    @classmethod
    def from_config_map(cls, data: Dict[str, str], previous: Optional["FeatureGates"] = None) -> "FeatureGates":
        """
        Reads both flags. A flag that is missing or unparseable keeps its previous value.
        """
        previous = previous or cls()

        try:
            move_enabled = parse_bool(data.get(MOVE_FLAG_KEY))
        except ValueError:
            logger.info(f"Could not read feature flag '{MOVE_FLAG_KEY}' - keeping move_enabled={previous.move_enabled}")
            move_enabled = previous.move_enabled

        try:
            tag_enabled = parse_bool(data.get(TAG_FLAG_KEY))
        except ValueError:
            logger.info(f"Could not read feature flag '{TAG_FLAG_KEY}' - keeping tag_enabled={previous.tag_enabled}")
            tag_enabled = previous.tag_enabled

        return cls(move_enabled=move_enabled, tag_enabled=tag_enabled)


@dataclass(frozen=True)
class ValidationSettings:
    """
    Everything one validation run needs to know about its environment.
    Built once per reconciliation and passed down, never shared mutably.
    """
    pool_ou_id: str
    shard_name: str
    gates: FeatureGates = field(default_factory=FeatureGates)

    @classmethod
    def from_config_map(
        cls,
        data: Dict[str, str],
        previous_gates: Optional[FeatureGates] = None,
        default_shard_name: str = "",
    ) -> "ValidationSettings":
        try:
            pool_ou_id = validate_ou_id(data.get(POOL_OU_KEY, ""))
        except ValueError as e:
            raise InvalidSettingsError(f"Pool OU ('{POOL_OU_KEY}'): {e}") from e

        try:
            shard_name = validate_shard_name(data.get(SHARD_NAME_KEY) or default_shard_name)
        except ValueError as e:
            raise InvalidSettingsError(f"Shard name ('{SHARD_NAME_KEY}'): {e}") from e

        gates = FeatureGates.from_config_map(data, previous=previous_gates)
        return cls(pool_ou_id=pool_ou_id, shard_name=shard_name, gates=gates)
