import pytest

from config import number_env


def test_number_env_default_when_unset(monkeypatch):
    monkeypatch.delenv("TASKS_LOCK_TIMEOUT", raising=False)

    assert number_env("TASKS_LOCK_TIMEOUT", 10.0, float) == 10.0


def test_number_env_parses_value(monkeypatch):
    monkeypatch.setenv("TASKS_LOCK_TIMEOUT", "2.5")

    assert number_env("TASKS_LOCK_TIMEOUT", 10.0, float) == 2.5


@pytest.mark.parametrize("raw", ["nan", "inf", "-inf", "-1", "soon"])
def test_number_env_rejects_unusable_values(monkeypatch, capsys, raw):
    monkeypatch.setenv("TASKS_LOCK_TIMEOUT", raw)

    with pytest.raises(SystemExit) as exc_info:
        number_env("TASKS_LOCK_TIMEOUT", 10.0, float)

    assert exc_info.value.code == 1
    assert "FATAL: TASKS_LOCK_TIMEOUT" in capsys.readouterr().out
