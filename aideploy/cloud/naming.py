"""
Resource naming for a deployment run.

Names are `rg-<project>-<environment>-<suffix>`, `kv-<project><suffix>` and
`ai-<project><suffix>`, where the suffix is a short random alphabetic token. Nothing
checks that the names are free; a collision surfaces later as a failed create.
"""
import re
import secrets
from dataclasses import dataclass
from typing import Callable, Optional

import aideploy.context._globals as _globals
from aideploy.context.config import DeploymentConfig
from aideploy.errors import ConfigError
from aideploy.util import sanitization as sanny

RandomBytes = Callable[[int], bytes]


def generate_suffix(
        random_bytes: RandomBytes = secrets.token_bytes,
        nbytes: int = _globals.SUFFIX_RANDOM_BYTES,
        max_length: int = _globals.SUFFIX_MAX_LENGTH,
) -> str:
    """
    Hex-encode `nbytes` random bytes, drop the digits and keep at most `max_length` letters.

    The result only contains a-f and can be shorter than `max_length` (even empty).
    """
    return sanny.alpha(random_bytes(nbytes).hex())[:max_length]


@dataclass(frozen=True)
class ResourceNames:
    resource_group: str
    key_vault: str
    ai_service: str
    suffix: str

    @classmethod
    def generate(
            cls,
            config: DeploymentConfig,
            suffix: Optional[str] = None,
            random_bytes: RandomBytes = secrets.token_bytes,
    ) -> "ResourceNames":
        """
        Derive all names from the config and a suffix (generated when not given).

        Raises:
            ConfigError: If a name would break Azure's naming rules.
        """
        if suffix is None:
            suffix = generate_suffix(random_bytes)
        elif not re.fullmatch(r"[a-z]*", suffix):
            raise ConfigError(f"suffix must be lowercase letters only: {suffix!r}")

        names = cls(
            resource_group=f"rg-{config.project}-{config.environment}-{suffix}".rstrip("-"),
            key_vault=f"kv-{config.project}{suffix}",
            ai_service=f"ai-{config.project}{suffix}",
            suffix=suffix,
        )
        names.validate()
        return names

    def validate(self) -> None:
        if len(self.resource_group) > 90:
            raise ConfigError(f"Resource group name '{self.resource_group}' exceeds 90 characters")
        sanny.standard(self.key_vault, "Key Vault name", min_len=3, max_len=24)
        sanny.standard(self.ai_service, "AI service name", min_len=2, max_len=64)
