import pytest

from pyucpu.utils import debug


@pytest.fixture
def categories(monkeypatch):
    def _set(value):
        monkeypatch.setenv(debug.ENVIRONMENT_VARIABLE, value)
        debug.reload_categories()

    yield _set
    monkeypatch.delenv(debug.ENVIRONMENT_VARIABLE, raising=False)
    debug.reload_categories()


def test_disabled_without_environment(categories):
    categories("")

    assert not debug.debug_enabled()
    assert not debug.debug_enabled("cpu")


def test_selected_categories(categories, capsys):
    categories("CPU, asm")

    assert debug.debug_enabled("cpu")
    assert debug.debug_enabled("asm")
    assert not debug.debug_enabled("memory")

    debug.debug_log("cpu", "pc=%02x", 0x1F)
    debug.debug_log("memory", "hidden")
    assert capsys.readouterr().out == "[UCPU][cpu] pc=1f\n"


def test_all_enables_everything(categories):
    categories("all")

    assert debug.debug_enabled("pipeline")


def test_bad_format_arguments_are_appended(categories, capsys):
    categories("cpu")

    debug.debug_log("cpu", "value=%d", "x")

    assert capsys.readouterr().out == "[UCPU][cpu] value=%d ('x',)\n"
