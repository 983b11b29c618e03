# ----------------- Command Parser -----------------
# Turns one chat message into a command object. Bad arguments raise
# CommandError carrying the usage text to send back to the user.
import math
import re
from dataclasses import dataclass
from typing import Union

ADD_USAGE = "⚠️ Usage: /add [coin] [amount]\ne.g. /add btc 0.5"
SETGOAL_USAGE = "⚠️ Usage: /setgoal [target amount]\ne.g. /setgoal 1000000"

_INTEGER_RE = re.compile(r"^[+-]?\d+$")


class CommandError(ValueError):
    """Raised when a known command has missing or malformed arguments."""

    def __init__(self, usage):
        super().__init__(usage)
        self.usage = usage


@dataclass(frozen=True)
class AddCommand:
    symbol: str
    amount: float
    raw_amount: str


@dataclass(frozen=True)
class SetGoalCommand:
    goal: int


@dataclass(frozen=True)
class StatusCommand:
    pass


@dataclass(frozen=True)
class HelpCommand:
    pass


Command = Union[AddCommand, SetGoalCommand, StatusCommand, HelpCommand]


def parse_amount(token):
    """Parse a holding amount: finite and not negative, else None."""
    try:
        amount = float(token)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(amount) or amount < 0:
        return None
    return amount


def parse_goal(token):
    """Parse a goal: plain base-10 integer, not negative, else None."""
    if token is None or not _INTEGER_RE.match(token):
        return None
    goal = int(token)
    return goal if goal >= 0 else None


def parse_command(text) -> Command:
    parts = (text or "").strip().split()
    cmd = parts[0] if parts else ""
    arg1 = parts[1] if len(parts) > 1 else None
    arg2 = parts[2] if len(parts) > 2 else None

    if cmd == "/add":
        amount = parse_amount(arg2)
        if not arg1 or amount is None:
            raise CommandError(ADD_USAGE)
        return AddCommand(symbol=arg1.lower(), amount=amount, raw_amount=arg2)

    if cmd == "/setgoal":
        goal = parse_goal(arg1)
        if goal is None:
            raise CommandError(SETGOAL_USAGE)
        return SetGoalCommand(goal=goal)

    if cmd == "/status":
        return StatusCommand()

    return HelpCommand()
