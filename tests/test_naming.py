import pytest

from aideploy.cloud.naming import ResourceNames, generate_suffix
from aideploy.context.config import DeploymentConfig
from aideploy.errors import ConfigError


def test_suffix_drops_digits_from_hex():
    assert generate_suffix(lambda n: bytes.fromhex("a1b2c3")) == "abc"


def test_suffix_is_capped_at_six_letters():
    assert generate_suffix(lambda n: bytes.fromhex("abcdef")) == "abcdef"
    assert generate_suffix(lambda n: b"\xab\xcd\xef\xfe", nbytes=4) == "abcdef"


def test_suffix_can_be_empty():
    assert generate_suffix(lambda n: bytes.fromhex("123456")) == ""


def test_suffix_requests_three_bytes():
    seen = []

    def source(n):
        seen.append(n)
        return b"\x00" * n

    generate_suffix(source)
    assert seen == [3]


def test_suffix_is_deterministic_for_fixed_source(fixed_bytes):
    assert generate_suffix(fixed_bytes) == generate_suffix(fixed_bytes)


@pytest.mark.parametrize("_", range(20))
def test_random_suffix_shape(_):
    suffix = generate_suffix()
    assert len(suffix) <= 6
    assert set(suffix) <= set("abcdef")


def test_names_follow_patterns(fixed_bytes):
    names = ResourceNames.generate(DeploymentConfig(), random_bytes=fixed_bytes)
    assert names.resource_group == "rg-aiagent-dev-abc"
    assert names.key_vault == "kv-aiagentabc"
    assert names.ai_service == "ai-aiagentabc"
    assert names.suffix == "abc"


def test_explicit_suffix_wins():
    names = ResourceNames.generate(DeploymentConfig(project="demo", environment="prod"), suffix="fab")
    assert names.resource_group == "rg-demo-prod-fab"
    assert names.key_vault == "kv-demofab"


def test_empty_suffix_still_valid():
    names = ResourceNames.generate(DeploymentConfig(), suffix="")
    assert names.resource_group == "rg-aiagent-dev"
    assert names.key_vault == "kv-aiagent"


def test_invalid_suffix_rejected():
    with pytest.raises(ConfigError):
        ResourceNames.generate(DeploymentConfig(), suffix="AB1")


def test_longest_project_fits_vault_name():
    config = DeploymentConfig(project="p" * 15)
    assert len(ResourceNames.generate(config, suffix="abcdef").key_vault) == 24


@pytest.mark.parametrize("suffix", ["", "abcdef"])
def test_project_too_long_rejected_whatever_the_suffix(suffix):
    with pytest.raises(ConfigError, match="Key Vault name"):
        ResourceNames.generate(DeploymentConfig(project="p" * 16), suffix=suffix)
