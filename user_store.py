# user_store.py
"""
JSON-file backed store of every user's goal and crypto holdings.

File layout:
    {
        "<user_id>": {"goal": 1000000, "assets": {"btc": 0.5, "eth": 2.0}},
        ...
    }

The whole file is read once per batch of incoming messages and rewritten
after any command that changes a record.
"""
import copy
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager

logger = logging.getLogger(__name__)

# Serialises load -> process -> save cycles inside one process
store_lock = threading.RLock()


def new_user_record():
    """Return the record given to a user on first contact."""
    return {"goal": 0, "assets": {}}


# ---------------- UTILITIES ----------------
def load_json(file_path):
    """Load JSON safely, returning empty dict on a missing or broken file."""
    if not os.path.exists(file_path):
        return {}
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.warning("Ignoring unreadable user data file %s: %s", file_path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring user data file %s: top level is not an object", file_path)
        return {}
    return data


def save_json(file_path, data):
    """Write JSON atomically: dump to a temp file, then move it into place."""
    directory = os.path.dirname(os.path.abspath(file_path))
    fd, tmp_path = tempfile.mkstemp(prefix=".userdata-", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, file_path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


# ---------------- STORE ----------------
class UserStore:
    """
    Mapping of user id -> user record.

    `path=None` keeps everything in memory, which is what the tests and the
    console chat use when no file is wanted.
    """

    def __init__(self, users=None, path=None):
        self.users = users if users is not None else {}
        self.path = path

    @classmethod
    def load(cls, path):
        users = {}
        for user_id, record in load_json(path).items():
            if not isinstance(record, dict):
                record = {}
            record.setdefault("goal", 0)
            record.setdefault("assets", {})
            users[str(user_id)] = record
        return cls(users, path)

    def get_user(self, user_id):
        """Return the user's record, creating a default one on first contact."""
        return self.users.setdefault(str(user_id), new_user_record())

    def set_asset(self, user_id, symbol, amount):
        self.get_user(user_id)["assets"][symbol.lower()] = amount

    def set_goal(self, user_id, goal):
        self.get_user(user_id)["goal"] = goal

    @contextmanager
    def transaction(self, user_id):
        """
        Change one user's record and save. If the block or the save fails,
        the record goes back to what it was before and the error propagates.
        """
        user_id = str(user_id)
        before = copy.deepcopy(self.get_user(user_id))
        try:
            yield self.users[user_id]
            self.save()
        except BaseException:
            self.users[user_id] = before
            raise

    def save(self):
        """Rewrite the whole store to disk."""
        if self.path is None:
            return
        save_json(self.path, self.users)
        logger.debug("Saved %d user records to %s", len(self.users), self.path)

    def __contains__(self, user_id):
        return str(user_id) in self.users

    def __len__(self):
        return len(self.users)
