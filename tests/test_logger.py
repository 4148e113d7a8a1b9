import logging

from aideploy.context.logger import Console, Logger, log_func


def test_init_logger_creates_file(tmp_path):
    Logger.init_logger(log_dir=tmp_path, label="unit")
    logging.getLogger("aideploy.test").info("hello")
    Logger.get_loguru().complete()
    path = Logger.log_path()
    assert path.parent == tmp_path
    assert path.name.endswith("__unit.log")


def test_init_logger_is_idempotent(tmp_path):
    first = Logger.init_logger(log_dir=tmp_path)
    assert Logger.init_logger(log_dir=tmp_path / "other") is first
    assert len(list(tmp_path.glob("*.log"))) == 1


def test_reset_restores_root_handlers(tmp_path):
    before = list(logging.root.handlers)
    Logger.init_logger(log_dir=None)
    assert logging.root.handlers != before
    Logger.reset()
    assert logging.root.handlers == before


def test_log_func_nests(tmp_path):
    Logger.init_logger(log_dir=tmp_path, label="nest")
    with log_func("deploy"):
        with log_func("secrets"):
            logging.getLogger("aideploy.test").info("inside")
    Logger.reset()
    assert "deploy.secrets" in _log_text(tmp_path)


def _log_text(directory):
    return "".join(p.read_text(encoding="utf-8") for p in directory.glob("*.log"))


def test_console_markers(capsys):
    console = Console(color=False)
    console.info("working")
    console.ok("done")
    console.fail("broken")
    captured = capsys.readouterr()
    assert "ℹ️  working" in captured.out
    assert "✅ done" in captured.out
    assert "❌ broken" in captured.err
    assert "broken" not in captured.out
