import json
from unittest.mock import patch

import pytest

from user_store import UserStore, load_json, new_user_record


class TestLoad:

    def test_missing_file_is_empty(self, tmp_path):
        store = UserStore.load(str(tmp_path / "missing.json"))
        assert len(store) == 0

    def test_broken_file_is_empty(self, tmp_path):
        path = tmp_path / "userData.json"
        path.write_text("{not json")
        assert load_json(str(path)) == {}

    def test_non_object_file_is_empty(self, tmp_path):
        path = tmp_path / "userData.json"
        path.write_text("[1, 2]")
        assert load_json(str(path)) == {}

    def test_fills_missing_fields(self, tmp_path):
        path = tmp_path / "userData.json"
        path.write_text(json.dumps({"U1": {"assets": {"btc": 1}}, "U2": {"goal": 5}}))
        store = UserStore.load(str(path))
        assert store.get_user("U1") == {"goal": 0, "assets": {"btc": 1}}
        assert store.get_user("U2") == {"goal": 5, "assets": {}}


class TestMutation:

    def test_get_user_creates_default(self):
        store = UserStore()
        assert "U1" not in store
        assert store.get_user("U1") == new_user_record()
        assert "U1" in store

    def test_set_asset_overwrites(self):
        store = UserStore()
        store.set_asset("U1", "BTC", 1.0)
        store.set_asset("U1", "btc", 0.25)
        assert store.get_user("U1")["assets"] == {"btc": 0.25}

    def test_save_round_trip(self, tmp_path):
        path = tmp_path / "userData.json"
        store = UserStore.load(str(path))
        store.set_asset("U1", "eth", 2.0)
        store.set_goal("U1", 1000)
        store.save()

        assert json.loads(path.read_text()) == {"U1": {"goal": 1000, "assets": {"eth": 2.0}}}
        assert list(tmp_path.iterdir()) == [path]

    def test_in_memory_store_does_not_write(self, tmp_path):
        store = UserStore()
        store.set_goal("U1", 1)
        store.save()
        assert list(tmp_path.iterdir()) == []


class TestTransaction:

    def test_commits_and_saves(self, tmp_path):
        path = tmp_path / "userData.json"
        store = UserStore.load(str(path))

        with store.transaction("U1"):
            store.set_goal("U1", 42)

        assert json.loads(path.read_text())["U1"]["goal"] == 42

    def test_failed_save_restores_record(self, tmp_path):
        store = UserStore.load(str(tmp_path / "userData.json"))
        store.set_asset("U1", "btc", 1.0)

        with patch.object(store, "save", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                with store.transaction("U1"):
                    store.set_asset("U1", "btc", 5.0)
                    store.set_goal("U1", 99)

        assert store.get_user("U1") == {"goal": 0, "assets": {"btc": 1.0}}
