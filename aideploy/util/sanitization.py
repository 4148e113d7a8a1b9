import re

from aideploy.errors import ConfigError


class Sanitization:
    """
    Validation helpers for the identifiers that end up inside Azure resource names.
    """

    @staticmethod
    def identifier(value: str, label: str = "identifier") -> str:
        """
        Normalise a project/environment identifier.

        Rules:
        - Lowercased and stripped
        - Only lowercase letters and digits
        - Must start with a letter

        Raises:
            ConfigError: If the value cannot be used inside a resource name.
        """
        if not isinstance(value, str):
            raise ConfigError(f"{label} must be a string, got {type(value).__name__}")

        value = value.strip().lower()
        if not value:
            raise ConfigError(f"{label} must not be empty")
        if not re.fullmatch(r"[a-z][a-z0-9]*", value):
            raise ConfigError(f"{label} may only contain letters and digits and must start with a letter: {value!r}")
        return value

    @staticmethod
    def standard(value: str, label: str = "name", min_len: int = 3, max_len: int = 24) -> str:
        """
        Check a full resource name against the common Azure rule set:
        - min_len..max_len characters
        - Starts with a letter, ends with a letter or digit
        - Only lowercase alphanumerics and single hyphens

        Returns the name unchanged; raises ConfigError otherwise.
        """
        if not min_len <= len(value) <= max_len:
            raise ConfigError(f"{label} '{value}' must be {min_len}-{max_len} characters (got {len(value)})")
        if not re.fullmatch(r"[a-z][a-z0-9-]*[a-z0-9]", value):
            raise ConfigError(f"{label} '{value}' contains characters Azure does not allow")
        if "--" in value:
            raise ConfigError(f"{label} '{value}' must not contain consecutive hyphens")
        return value

    @staticmethod
    def alpha(value: str) -> str:
        """Drop every character that is not an ASCII letter."""
        return re.sub(r"[^a-zA-Z]", "", value)


identifier = Sanitization.identifier
standard = Sanitization.standard
alpha = Sanitization.alpha
