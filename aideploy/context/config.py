import dataclasses
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import toml
import yaml

import aideploy.context._globals as _globals
from aideploy.errors import ConfigError
from aideploy.util import sanitization as sanny
from aideploy.util.error_handling import PollPolicy


@dataclass(frozen=True)
class AiServiceTier:
    """An AI account kind paired with its pricing tier."""
    kind: str
    sku: str

    def __str__(self) -> str:
        return f"{self.kind}/{self.sku}"


@dataclass(frozen=True)
class DeploymentConfig:
    """
    Everything a deployment run needs to know up front. Immutable once built.
    """
    project: str = _globals.PROJECT
    environment: str = _globals.ENVIRONMENT
    location: str = _globals.LOCATION
    vault_sku: str = _globals.VAULT_SKU
    vault_rbac_authorization: bool = _globals.VAULT_RBAC_AUTHORIZATION
    ai_tiers: Tuple[AiServiceTier, ...] = tuple(AiServiceTier(k, s) for k, s in _globals.AI_SERVICE_TIERS)
    secret_key_name: str = _globals.SECRET_KEY_NAME
    secret_endpoint_name: str = _globals.SECRET_ENDPOINT_NAME
    provider_namespaces: Tuple[str, ...] = _globals.PROVIDER_NAMESPACES
    register_providers: bool = _globals.REGISTER_PROVIDERS
    poll: PollPolicy = field(default_factory=lambda: PollPolicy(
        max_attempts=_globals.POLL_MAX_ATTEMPTS,
        interval=_globals.POLL_INTERVAL_SECONDS,
        backoff=_globals.POLL_BACKOFF,
    ))

    def __post_init__(self):
        object.__setattr__(self, "project", sanny.identifier(self.project, "project"))
        object.__setattr__(self, "environment", sanny.identifier(self.environment, "environment"))
        longest_vault = len("kv-") + len(self.project) + _globals.SUFFIX_MAX_LENGTH
        if longest_vault > 24:
            raise ConfigError(
                f"project '{self.project}' is too long: the Key Vault name could reach {longest_vault} characters (max 24)"
            )
        if not self.location or not str(self.location).strip():
            raise ConfigError("location must not be empty")
        if len(self.ai_tiers) not in (1, 2):
            raise ConfigError(f"ai_tiers takes a primary and at most one fallback, got {len(self.ai_tiers)}")
        if self.secret_key_name == self.secret_endpoint_name:
            raise ConfigError("secret_key_name and secret_endpoint_name must differ")

    @property
    def primary_tier(self) -> AiServiceTier:
        return self.ai_tiers[0]

    @property
    def fallback_tier(self) -> Optional[AiServiceTier]:
        return self.ai_tiers[1] if len(self.ai_tiers) > 1 else None

    @property
    def tags(self) -> Dict[str, str]:
        return {"Project": self.project, "Environment": self.environment}

    @property
    def secret_names(self) -> Tuple[str, str]:
        return self.secret_key_name, self.secret_endpoint_name


class Config:
    """
    Builds a DeploymentConfig from defaults, an optional TOML/JSON/YAML file and
    explicit overrides (highest precedence).

    File format is auto-detected based on file extension. Settings may sit at the top
    level or under a [deploy] table.
    """

    POLL_KEYS = {
        "poll_attempts": "max_attempts",
        "poll_interval": "interval",
        "poll_backoff": "backoff",
        "poll_max_interval": "max_interval",
    }

    @staticmethod
    def dump(path: Path) -> dict:
        """
        Parse a config file into a dict.

        Raises:
            ConfigError: If the file is missing, has an unsupported extension or is malformed.
        """
        path = Path(path)
        if not path.is_file():
            raise ConfigError(f"[Config.dump] Config file not found: {path}")

        file_ext = path.suffix.lower().lstrip(".")

        def parse_toml(p: Path) -> dict:
            return toml.load(p)

        def parse_json(p: Path) -> dict:
            return json.loads(p.read_text(encoding="utf-8"))

        def parse_yaml(p: Path) -> dict:
            return yaml.safe_load(p.read_text(encoding="utf-8")) or {}

        parsers = {
            "toml": parse_toml,
            "json": parse_json,
            "yaml": parse_yaml,
            "yml": parse_yaml,
        }

        if file_ext not in parsers:
            raise ConfigError(f"[Config.dump] Unsupported config format: {file_ext or path.name}")
        try:
            parsed_data = parsers[file_ext](path)
        except (toml.TomlDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"[Config.dump] Failed to parse config at {path}: {e}") from e
        if not isinstance(parsed_data, dict):
            raise ConfigError(f"[Config.dump] Parsed config is not a mapping: {type(parsed_data).__name__}")
        return parsed_data

    @staticmethod
    def section(data: dict) -> dict:
        """Return the [deploy] table if present, otherwise the whole mapping."""
        inner = data.get(_globals.CONFIG_SECTION)
        return inner if isinstance(inner, dict) else data

    @staticmethod
    def _coerce(settings: Dict[str, Any]) -> Dict[str, Any]:
        known = {f.name for f in dataclasses.fields(DeploymentConfig)}
        fields: Dict[str, Any] = {}
        poll: Dict[str, Any] = {}

        for key, value in settings.items():
            if value is None:
                continue
            if key in Config.POLL_KEYS:
                poll[Config.POLL_KEYS[key]] = value
            elif key == "ai_tiers":
                try:
                    fields[key] = tuple(
                        t if isinstance(t, AiServiceTier) else AiServiceTier(kind=t["kind"], sku=t["sku"])
                        for t in value
                    )
                except (KeyError, TypeError) as e:
                    raise ConfigError(f"ai_tiers entries need 'kind' and 'sku': {e}") from e
            elif key == "provider_namespaces":
                fields[key] = tuple(value)
            elif key in known and key != "poll":
                fields[key] = value
            else:
                raise ConfigError(f"Unknown configuration key: {key}")

        if poll:
            try:
                fields["poll"] = PollPolicy(**{**dataclasses.asdict(DeploymentConfig().poll), **poll})
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Invalid poll settings: {e}") from e
        return fields

    @staticmethod
    def load(path: Optional[Path] = None, **overrides: Any) -> DeploymentConfig:
        """
        Build the run's DeploymentConfig.

        Args:
            path (Path, optional): Config file to read.
            **overrides: Field values (or poll_* shortcuts) that win over the file. None is ignored.
        """
        settings: Dict[str, Any] = {}
        if path is not None:
            settings.update(Config.section(Config.dump(path)))
        settings.update({k: v for k, v in overrides.items() if v is not None})
        return DeploymentConfig(**Config._coerce(settings))


