"""Domain helpers and board state for the team shuffle app."""

from __future__ import annotations

import copy
import logging
import math
import random
import re
from dataclasses import asdict, dataclass, field
from typing import Iterable, Sequence

__all__ = [
    "Team",
    "Event",
    "TeamBoard",
    "Stage",
    "parse_names",
    "read_upload_text",
    "shuffle_names",
    "partition",
    "coerce_score",
]

logger = logging.getLogger(__name__)

HEADER_VALUE = "name"
TEAM_NAME_PATTERN = "Team {number}"

_LINE_BREAK = re.compile(r"\r?\n")


class Stage:
    """Labels for the board's position in the import cycle."""

    EMPTY = "empty"
    NAMES_LOADED = "names-loaded"
    TEAMS_GENERATED = "teams-generated"
    EVENT_SAVED = "event-saved"


@dataclass
class Team:
    """A named, ordered slice of the shuffled name list."""

    name: str
    members: list[str]
    score: float | int | None = None

    @property
    def export_score(self) -> float | int:
        return self.score if self.score is not None else 0


@dataclass
class Event:
    """A titled snapshot of a generated team list."""

    title: str
    teams: list[Team] = field(default_factory=list)


def read_upload_text(upload) -> str:
    """Return the decoded text of an uploaded file.

    UTF-8 is tried first (a BOM is stripped), then Latin-1.
    """

    raw = upload.read()
    if isinstance(raw, str):
        return raw
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def parse_names(text: str) -> tuple[str, ...]:
    """Extract participant names from comma-delimited text.

    Only the first field of each line is used. Blank values and a ``name``
    header (in any case) are dropped.
    """

    names: list[str] = []
    for line in _LINE_BREAK.split(text or ""):
        value = line.split(",", 1)[0].strip()
        if value and value.lower() != HEADER_VALUE:
            names.append(value)
    return tuple(names)


def shuffle_names(names: Sequence[str], rng: random.Random | None = None) -> list[str]:
    """Return a shuffled copy of ``names`` using Fisher-Yates."""

    rng = rng or random.Random()
    shuffled = list(names)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def partition(names: Sequence[str], group_size: int) -> list[Team]:
    """Slice ``names`` into consecutive teams of ``group_size`` members."""

    if group_size <= 0:
        raise ValueError("Group size must be at least 1.")
    teams: list[Team] = []
    for start in range(0, len(names), group_size):
        teams.append(
            Team(
                name=TEAM_NAME_PATTERN.format(number=len(teams) + 1),
                members=list(names[start : start + group_size]),
            )
        )
    return teams


def coerce_score(value) -> float | int:
    """Turn raw score input into a number; unusable input counts as 0."""

    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0
        try:
            number = float(text)
        except ValueError:
            return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    if number.is_integer():
        return int(number)
    return number


def _team_from_dict(data: dict) -> Team:
    return Team(
        name=str(data["name"]),
        members=[str(member) for member in data.get("members", [])],
        score=data.get("score"),
    )


class TeamBoard:
    """In-memory application state with one method per user action.

    Every mutator returns ``True`` when it changed the board and ``False``
    when its preconditions were not met, in which case nothing changes.
    """

    def __init__(
        self,
        names: Iterable[str] = (),
        group_size: int = 2,
        teams: Iterable[Team] = (),
        event: Event | None = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.names: tuple[str, ...] = tuple(names)
        self.group_size = group_size
        self.teams: list[Team] = list(teams)
        self.event = event
        self.rng = rng or random.Random()

    @property
    def stage(self) -> str:
        if self.event is not None:
            return Stage.EVENT_SAVED
        if self.teams:
            return Stage.TEAMS_GENERATED
        if self.names:
            return Stage.NAMES_LOADED
        return Stage.EMPTY

    @property
    def displayed_teams(self) -> list[Team]:
        """Teams shown to the user: the saved event wins over the draft."""

        if self.event is not None:
            return self.event.teams
        return self.teams

    def import_names(self, text: str) -> int:
        """Replace the name list and drop any downstream teams or event."""

        self.names = parse_names(text)
        self.teams = []
        self.event = None
        logger.info("Imported %d names", len(self.names))
        return len(self.names)

    def set_group_size(self, group_size: int) -> None:
        self.group_size = group_size

    def generate_teams(self, group_size: int | None = None) -> bool:
        if group_size is not None:
            self.group_size = group_size
        if not self.names or self.group_size <= 0:
            return False
        shuffled = shuffle_names(self.names, self.rng)
        self.teams = partition(shuffled, self.group_size)
        self.event = None
        logger.info(
            "Generated %d teams from %d names (size=%d)",
            len(self.teams),
            len(self.names),
            self.group_size,
        )
        return True

    def save_event(self, title: str) -> bool:
        title = (title or "").strip()
        if not title or not self.teams:
            return False
        self.event = Event(title=title, teams=copy.deepcopy(self.teams))
        logger.info("Saved event %r with %d teams", title, len(self.teams))
        return True

    def update_score(self, index: int, score: float | int) -> bool:
        if self.event is None:
            return False
        if not 0 <= index < len(self.event.teams):
            return False
        self.event.teams[index].score = score
        return True

    def to_dict(self) -> dict:
        return {
            "names": list(self.names),
            "group_size": self.group_size,
            "teams": [asdict(team) for team in self.teams],
            "event": asdict(self.event) if self.event is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict | None, *, default_group_size: int = 2, rng: random.Random | None = None) -> "TeamBoard":
        if not data:
            return cls(group_size=default_group_size, rng=rng)
        event_data = data.get("event")
        event = None
        if event_data:
            event = Event(
                title=str(event_data["title"]),
                teams=[_team_from_dict(item) for item in event_data.get("teams", [])],
            )
        return cls(
            names=[str(name) for name in data.get("names", [])],
            group_size=int(data.get("group_size", default_group_size)),
            teams=[_team_from_dict(item) for item in data.get("teams", [])],
            event=event,
            rng=rng,
        )
