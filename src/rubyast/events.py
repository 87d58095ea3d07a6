"""Bridge to Ruby's Ripper.

``ripper_events.rb`` runs inside a Ruby interpreter and writes one log line
per builder callback. This module runs it and parses the log into ``Event``
records with a lark grammar. It also replays the records into a Python
builder object.
"""
from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, List, Optional, Tuple

from lark import Lark, Transformer, UnexpectedInput, v_args

from .config import FrontendConfig
from .errors import FrontendError, InternalError
from .tree import Symbol

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent
GRAMMAR_PATH = PACKAGE_DIR / "events.lark"
RECORDER_PATH = PACKAGE_DIR / "ripper_events.rb"


@dataclass(frozen=True)
class Ref:
    """Points at the value returned for an earlier event."""

    id: int


@dataclass(frozen=True)
class Event:
    ref: int
    name: str
    line: int
    column: int
    args: Tuple[Any, ...]

    @property
    def is_scanner(self) -> bool:
        return self.name.startswith("@")


@v_args(inline=True)
class EventTransformer(Transformer):
    def start(self, *events: Event) -> List[Event]:
        return list(events)

    def event(self, ref, name, position, *args) -> Event:
        line, column = (int(part) for part in position.split(":"))
        return Event(int(ref[1:]), str(name), line, column, tuple(args))

    def ref(self, token) -> Ref:
        return Ref(int(token[1:]))

    def string(self, token) -> str:
        return json.loads(token)

    def symbol(self, token) -> Symbol:
        return Symbol(json.loads(token[1:]))

    def integer(self, token) -> int:
        return int(token)

    def none(self) -> None:
        return None

    def true(self) -> bool:
        return True

    def false(self) -> bool:
        return False

    def array(self, *items: Any) -> List[Any]:
        return list(items)


@lru_cache(maxsize=1)
def build_event_parser() -> Lark:
    return Lark(
        GRAMMAR_PATH.read_text(encoding="utf-8"),
        parser="lalr",
        maybe_placeholders=False,
        transformer=EventTransformer(),
    )


def read_events(log: str) -> List[Event]:
    """Parse an event log into records."""
    if not log:
        return []
    try:
        return build_event_parser().parse(log)
    except UnexpectedInput as exc:
        raise InternalError(f"malformed Ripper event log at line {exc.line}: {exc}") from exc


def run_ripper(source: str, filename: str = "(string)", lineno: int = 1,
               config: Optional[FrontendConfig] = None) -> str:
    """Run the recorder script over ``source`` and return its event log."""
    config = config or FrontendConfig.from_env()
    command = [config.ruby, str(RECORDER_PATH), filename, str(lineno)]
    logger.debug("running %s for %s", config.ruby, filename)

    try:
        completed = subprocess.run(
            command,
            input=source.encode("utf-8"),
            capture_output=True,
            timeout=config.timeout,
            check=False,
        )
    except OSError as exc:
        raise FrontendError(f"could not start Ruby interpreter {config.ruby}: {exc}") from exc
    except subprocess.TimeoutExpired as exc:
        raise FrontendError(f"Ripper timed out after {config.timeout}s") from exc

    stderr = completed.stderr.decode("utf-8", errors="replace")
    if completed.returncode != 0:
        raise FrontendError(f"Ripper exited with status {completed.returncode}", stderr)
    if stderr.strip():
        logger.debug("ruby stderr: %s", stderr.strip())

    return completed.stdout.decode("utf-8")


def resolve(value: Any, values: dict) -> Any:
    """Replace references in an event argument with the values they point at."""
    if isinstance(value, Ref):
        try:
            return values[value.id]
        except KeyError:
            raise InternalError(f"event refers to unknown event #{value.id}") from None
    if isinstance(value, list):
        return [resolve(item, values) for item in value]
    return value
