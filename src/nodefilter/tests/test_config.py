"""
Configuration tests
"""

import pytest

from nodefilter.config import (
    SIGNAL_OPTION_DELETED,
    SIGNAL_OPTION_SET,
    ConfigStore,
    config_candidates,
    flatten_options,
    load_config,
    write_default_config,
)


def test_set_and_delete_emit(tmp_path):
    config = ConfigStore()
    seen = []
    config.connect(SIGNAL_OPTION_SET, lambda key: seen.append(("set", key)))
    config.connect(SIGNAL_OPTION_DELETED, lambda key: seen.append(("deleted", key)))

    config.set("columns/size/type", "size")
    assert config.get("columns/size/type") == "size"
    assert config.delete("columns/size/type") is True
    assert config.delete("columns/size/type") is False
    assert seen == [("set", "columns/size/type"), ("deleted", "columns/size/type")]


def test_disconnect():
    config = ConfigStore()
    seen = []
    handler_id = config.connect(SIGNAL_OPTION_SET, seen.append)
    config.disconnect(handler_id)
    config.set("a", 1)
    assert seen == []


def test_disconnect_while_emitting():
    config = ConfigStore()
    seen = []
    ids = []

    def once(key):
        seen.append(key)
        config.disconnect(ids[0])

    ids.append(config.connect(SIGNAL_OPTION_SET, once))
    config.set("a", 1)
    config.set("b", 2)
    assert seen == ["a"]


def test_unknown_signal():
    with pytest.raises(ValueError):
        ConfigStore().connect("option-renamed", print)


def test_get_string():
    config = ConfigStore({"a": "x", "b": 3})
    assert config.get_string("a") == "x"
    assert config.get_string("b") is None
    assert config.get_string("c") is None


def test_flatten_options():
    data = {"defaults": {"lists": {"columns": {"size": {"type": "size"}}}}, "top": 1}
    assert flatten_options(data) == {
        "defaults/lists/columns/size/type": "size",
        "top": 1,
    }


def test_load_default_config(monkeypatch, tmp_path):
    monkeypatch.delenv("NODEFILTER_CONFIG", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    config = load_config()
    assert config.get("defaults/lists/columns/size/type") == "size"
    assert config.get("defaults/lists/columns/ext/property") == "ext"
    assert config.get("defaults/lists/columns/mtime/type") == "time"


def test_load_explicit_path(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('[defaults.lists.columns.comment]\ntype = "text"\n', encoding="utf-8")
    config = load_config(path)
    assert config.get("defaults/lists/columns/comment/type") == "text"
    assert "defaults/lists/columns/size/type" not in config


def test_load_from_env(monkeypatch, tmp_path):
    path = tmp_path / "env.toml"
    path.write_text('[defaults.lists.columns.x]\ntype = "size"\n', encoding="utf-8")
    monkeypatch.setenv("NODEFILTER_CONFIG", str(path))
    assert load_config().get("defaults/lists/columns/x/type") == "size"


def test_write_default_config(tmp_path):
    target = write_default_config(tmp_path / "sub" / "config.toml")
    assert target.is_file()
    config = load_config(target)
    assert config.get("defaults/lists/columns/name/type") == "name"


def test_write_default_config_keeps_existing(tmp_path):
    target = tmp_path / "config.toml"
    target.write_text("# mine\n", encoding="utf-8")
    with pytest.raises(FileExistsError):
        write_default_config(target)
    assert target.read_text(encoding="utf-8") == "# mine\n"
    write_default_config(target, overwrite=True)
    assert "defaults.lists.columns.name" in target.read_text(encoding="utf-8")


def test_config_candidates_order(monkeypatch, tmp_path):
    monkeypatch.setenv("NODEFILTER_CONFIG", str(tmp_path / "env.toml"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    assert list(config_candidates(tmp_path / "explicit.toml")) == [
        tmp_path / "explicit.toml",
        tmp_path / "env.toml",
        tmp_path / "home" / ".config" / "nodefilter" / "config.toml",
    ]
