import pytest
from click.testing import CliRunner

from aideploy.cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, tmp_path, fake_sleep, fixed_bytes):
    def _invoke(plane, *args):
        obj = {
            "plane_factory": lambda backend: plane,
            "sleep": fake_sleep,
            "random_bytes": fixed_bytes,
        }
        return runner.invoke(cli, [*args, "--log-dir", str(tmp_path / "logs")], obj=obj)
    return _invoke


def test_help_lists_commands(runner):
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "deploy" in result.output
    assert "register" in result.output


def test_deploy_end_to_end(invoke, plane):
    result = invoke(plane, "deploy")

    assert result.exit_code == 0, result.output
    assert "AiServiceKey" in result.output
    assert "AiServiceEndpoint" in result.output
    assert "https://example.cognitiveservices.azure.com/" in result.output
    assert "abc123" not in result.output
    assert "✅ Deployment completed successfully!" in result.output


def test_deploy_writes_log_file(invoke, plane, tmp_path):
    assert invoke(plane, "deploy").exit_code == 0
    assert list((tmp_path / "logs").glob("*.log"))


def test_deploy_not_logged_in(invoke, make_plane):
    plane = make_plane(session=None)
    result = invoke(plane, "deploy")

    assert result.exit_code == 1
    assert "Not logged into Azure. Run 'az login' first." in result.output
    assert [name for name, _ in plane.calls] == ["account_show"]


def test_deploy_ai_fallback_then_failure(invoke, make_plane):
    plane = make_plane(fail={"create_ai_account": 2})
    result = invoke(plane, "deploy")

    assert result.exit_code == 1
    assert len(plane.called("create_ai_account")) == 2
    assert plane.called("set_secret") == []


def test_deploy_options_override_config(invoke, plane, tmp_path):
    cfg = tmp_path / "deploy.toml"
    cfg.write_text('[deploy]\nproject = "fromfile"\nlocation = "westeurope"\n')

    result = invoke(plane, "deploy", "--config", str(cfg), "--project", "cli", "--skip-provider-registration")

    assert result.exit_code == 0, result.output
    (rg_args,) = plane.called("create_resource_group")
    assert rg_args[0] == "rg-cli-dev-abc"
    assert rg_args[1] == "westeurope"
    assert plane.called("provider_state") == []


def test_deploy_invalid_project_is_config_error(invoke, plane):
    result = invoke(plane, "deploy", "--project", "bad_name!")
    assert result.exit_code == 1
    assert plane.calls == []


def test_deploy_poll_options(invoke, make_plane, fake_sleep):
    plane = make_plane(states={"Microsoft.KeyVault": ["NotRegistered"]})
    result = invoke(plane, "deploy", "--poll-attempts", "3", "--poll-interval", "1")

    assert result.exit_code == 1
    assert len(plane.called("provider_state")) == 3
    assert fake_sleep.calls == [1.0, 1.0]


def test_deploy_project_too_long_fails_before_cloud_calls(invoke, plane):
    result = invoke(plane, "deploy", "--project", "p" * 16)
    assert result.exit_code == 1
    assert "Key Vault name" in result.output
    assert plane.calls == []


def test_deploy_rejects_unknown_backend(invoke, plane):
    result = invoke(plane, "deploy", "--backend", "rest")
    assert result.exit_code == 2


def test_register_command(invoke, make_plane):
    plane = make_plane(states={"Microsoft.App": ["NotRegistered", "Registered"]})
    result = invoke(plane, "register", "Microsoft.App")

    assert result.exit_code == 0, result.output
    assert plane.called("register_provider") == [("Microsoft.App",)]
    assert "Microsoft.App registered successfully" in result.output


def test_register_timeout_exits_1(invoke, make_plane):
    plane = make_plane(states={"Microsoft.App": ["Registering"]})
    result = invoke(plane, "register", "Microsoft.App", "--poll-attempts", "2")

    assert result.exit_code == 1
    assert "Failed to register Microsoft.App" in result.output


def test_register_requires_namespace(runner):
    result = runner.invoke(cli, ["register"])
    assert result.exit_code != 0
    assert "Missing argument" in result.output


@pytest.mark.parametrize("command", [["deploy"], ["register", "Microsoft.App"]])
def test_unusable_log_dir_is_fatal_message(runner, plane, tmp_path, command):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    result = runner.invoke(
        cli,
        [*command, "--log-dir", str(blocker / "logs")],
        obj={"plane_factory": lambda backend: plane},
    )

    assert result.exit_code == 1
    assert "❌ Cannot write logs to" in result.output
    assert not isinstance(result.exception, OSError)
    assert plane.calls == []
