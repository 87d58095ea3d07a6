from __future__ import annotations

import logging
from typing import Any, Optional

from .builder import RawTreeBuilder
from .config import FrontendConfig
from .events import read_events, run_ripper
from .lines import propagate_lines
from .rewriter import Rewriter
from .tree import Node, RawNode

logger = logging.getLogger(__name__)


class Parser:
    """Parses Ruby source into parser-gem shaped ``Node`` trees.

    Each call builds fresh builder and rewriter state, so one ``Parser`` can be
    shared between threads.
    """

    def __init__(self, config: Optional[FrontendConfig] = None,
                 numbered_params: Optional[bool] = None):
        base = config if config is not None else FrontendConfig.from_env()
        self.config = base.with_overrides(numbered_params=numbered_params)

    def parse(self, source: str, filename: str = "(string)", lineno: int = 1) -> Optional[Node]:
        """Parse ``source``; returns None for a program without statements."""
        log = run_ripper(source, filename, lineno, self.config)
        events = read_events(log)
        raw = RawTreeBuilder(filename, lineno).replay(events)
        return self.process(raw, filename)

    def process(self, raw: RawNode, filename: str = "(string)") -> Optional[Node]:
        """Rewrite an already built raw tree and fill in line numbers."""
        tree = Rewriter(filename, self.config.numbered_params).rewrite(raw)
        if tree is None:
            logger.debug("%s: empty program", filename)
            return None
        return propagate_lines(tree)


def parse(source: str, filename: str = "(string)", lineno: int = 1, **options: Any) -> Optional[Node]:
    return Parser(**options).parse(source, filename, lineno)
