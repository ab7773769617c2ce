import os
import re
import logging
import boto3
import yaml
from typing import Dict
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

ENV_VAR_PATTERN = re.compile(r'\$\{([A-Z0-9_]+)\}')


class ConfigSourceError(Exception):
    """Raised when the operator configuration cannot be fetched or parsed."""
    pass


class YamlConfigSource:
    """
    Reads the operator configuration from a flat YAML mapping, e.g.

        root: ou-ab12-pool0001
        shard-name: ${SHARD_NAME}
        feature.validation_move_account: "false"

    Every value is kept as the raw string written in the file (no YAML 1.1
    'yes'/'on' booleans), and ${VAR} placeholders are expanded in values only.
    The file is re-read on every load() so edits apply to the next reconciliation.
    """
    def __init__(self, path: str):
        self.path = path

    def __repr__(self):
        return f"YamlConfigSource(path={self.path})"

    def _expand_env_vars(self, value: str) -> str:
        """
        Replaces ${VAR_NAME} in a config value with the value from os.environ.
        A missing variable fails the load instead of producing an empty setting.
        """
        def replace(match):
            var_name = match.group(1)
            val = os.environ.get(var_name)
            if not val:
                raise ConfigSourceError(
                    f"Config {self.path} references ${{{var_name}}}, but the environment variable is missing."
                )
            return val

        return ENV_VAR_PATTERN.sub(replace, value)

    def load(self) -> Dict[str, str]:
        try:
            with open(self.path, 'r') as file:
                raw_content = file.read()
        except OSError as e:
            raise ConfigSourceError(f"Cannot read config file {self.path}: {e}") from e

        try:
            # BaseLoader resolves no tags: every scalar stays a string
            data = yaml.load(raw_content, Loader=yaml.BaseLoader) or {}
        except yaml.YAMLError as e:
            raise ConfigSourceError(f"Invalid YAML in {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigSourceError(f"Config {self.path} must be a mapping, got {type(data).__name__}")

        config_map = {}
        for key, value in data.items():
            if not isinstance(value, str):
                raise ConfigSourceError(f"Config key '{key}' in {self.path} must be a plain value")
            config_map[key] = self._expand_env_vars(value)
        return config_map


class SSMConfigSource:
    """
    Reads the operator configuration from SSM Parameter Store.
    Every parameter under the prefix becomes one key, named by its path
    relative to the prefix: /poolwarden/config/shard-name -> 'shard-name'.
    """
    def __init__(self, path_prefix: str, ssm_client=None):
        self.path_prefix = path_prefix.rstrip("/") + "/"
        self.ssm = ssm_client or boto3.client("ssm")

    def __repr__(self):
        return f"SSMConfigSource(path={self.path_prefix})"

    def load(self) -> Dict[str, str]:
        params = []
        next_token = None
        try:
            while True:
                kwargs = {"Path": self.path_prefix, "Recursive": True, "WithDecryption": False}
                if next_token:
                    kwargs["NextToken"] = next_token
                resp = self.ssm.get_parameters_by_path(**kwargs)
                params.extend(resp.get("Parameters", []))
                next_token = resp.get("NextToken")
                if not next_token:
                    break
        except (ClientError, BotoCoreError) as e:
            code = e.response.get("Error", {}).get("Code", "Unknown") if isinstance(e, ClientError) else type(e).__name__
            raise ConfigSourceError(f"Failed to read parameters under {self.path_prefix}: {code}") from e

        if not params:
            raise ConfigSourceError(f"No configuration parameters found under {self.path_prefix}")

        logger.debug(f"Loaded {len(params)} parameter(s) from {self.path_prefix}")
        return {p["Name"][len(self.path_prefix):]: p.get("Value", "") for p in params}
