import logging

import pytest

from clarion.config import Settings
from clarion.logging_utils import configure_logging

ENV_VARS = [
    "CLARION_BACKEND_PORT",
    "BACKEND_PORT",
    "CLARION_LOG_LEVEL",
    "LOG_LEVEL",
    "CLARION_LOG_FILE",
    "LOG_FILE",
    "CLARION_OPENAI_API_KEY",
    "OPENAI_API_KEY",
    "CLARION_OPENAI_BASE_URL",
    "OPENAI_BASE_URL",
    "CLARION_OPENROUTER_BASE_URL",
    "OPENROUTER_BASE_URL",
    "CLARION_TOKENIZER_MODEL",
]


@pytest.fixture()
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


def test_defaults(clean_env, tmp_path):
    s = Settings.load(cwd=tmp_path)
    assert s.backend_port == 2077
    assert s.log_level == "INFO"
    assert s.openai_api_key is None
    assert s.openrouter_base_url == "https://openrouter.ai/api/v1"


def test_project_toml_overrides_home_toml(clean_env, tmp_path):
    (clean_env / ".clarion").mkdir()
    (clean_env / ".clarion" / "config.toml").write_text('log_level = "DEBUG"\nbackend_port = 9000\n')
    (tmp_path / ".clarion.toml").write_text("backend_port = 9100\n")

    s = Settings.load(cwd=tmp_path)
    assert s.log_level == "DEBUG"
    assert s.backend_port == 9100


def test_env_wins_and_prefixed_beats_bare(clean_env, tmp_path, monkeypatch):
    (tmp_path / ".clarion.toml").write_text("backend_port = 9100\n")
    monkeypatch.setenv("BACKEND_PORT", "1111")
    monkeypatch.setenv("CLARION_BACKEND_PORT", "2222")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-bare")

    s = Settings.load(cwd=tmp_path)
    assert s.backend_port == 2222
    assert s.openai_api_key == "sk-bare"


def test_bad_toml_raises(clean_env, tmp_path):
    (tmp_path / ".clarion.toml").write_text("this is = = not toml")
    with pytest.raises(RuntimeError, match="Failed to parse TOML"):
        Settings.load(cwd=tmp_path)


def test_unknown_keys_ignored(clean_env, tmp_path):
    (tmp_path / ".clarion.toml").write_text('theme = "dark"\n')
    assert not hasattr(Settings.load(cwd=tmp_path), "theme")


# ---------------------- logging ----------------------


@pytest.fixture()
def pristine_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    flag = getattr(root, "_clarion_configured", None)
    if flag is not None:
        delattr(root, "_clarion_configured")
    yield root
    for h in root.handlers:
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
    if hasattr(root, "_clarion_configured"):
        delattr(root, "_clarion_configured")
    if flag is not None:
        setattr(root, "_clarion_configured", flag)


def test_configure_logging_is_idempotent(pristine_root_logger, tmp_path):
    log_file = tmp_path / "logs" / "clarion.log"
    before = len(pristine_root_logger.handlers)

    configure_logging("INFO", str(log_file), also_console=False)
    configure_logging("DEBUG", str(log_file), also_console=False)

    assert len(pristine_root_logger.handlers) == before + 1
    assert pristine_root_logger.level == logging.DEBUG

    logging.getLogger("clarion.test").info("hello from the test")
    for h in pristine_root_logger.handlers:
        h.flush()
    assert "hello from the test" in log_file.read_text()
