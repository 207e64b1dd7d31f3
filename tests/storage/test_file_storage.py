"""Unit tests for FileStorage."""

import pytest

from storelite import FileStorage, StateStorage


def test_round_trip(tmp_path) -> None:
    storage = FileStorage(tmp_path / "state")

    assert storage.get_item("cart") is None
    storage.set_item("cart", '{"version": 0}')

    assert storage.get_item("cart") == '{"version": 0}'
    assert (tmp_path / "state" / "cart.json").exists()


def test_overwrite_leaves_no_temporary_files(tmp_path) -> None:
    storage = FileStorage(tmp_path)
    storage.set_item("cart", "1")
    storage.set_item("cart", "2")

    assert storage.get_item("cart") == "2"
    assert sorted(path.name for path in tmp_path.iterdir()) == ["cart.json"]


def test_names_are_quoted(tmp_path) -> None:
    storage = FileStorage(tmp_path)
    storage.set_item("../escape/me", "x")

    assert storage.get_item("../escape/me") == "x"
    assert [path.parent for path in tmp_path.iterdir()] == [tmp_path]


def test_remove_missing_is_noop(tmp_path) -> None:
    storage = FileStorage(tmp_path)
    storage.remove_item("missing")
    storage.set_item("cart", "x")
    storage.remove_item("cart")
    assert storage.get_item("cart") is None


def test_empty_name_rejected(tmp_path) -> None:
    with pytest.raises(ValueError):
        FileStorage(tmp_path).get_item("")


def test_satisfies_protocol(tmp_path) -> None:
    assert isinstance(FileStorage(tmp_path), StateStorage)
