from __future__ import annotations

import logging
import re
from pathlib import Path

from panelsync.models.records import DetectRule
from panelsync.services.adapters.base import RuleListError

logger = logging.getLogger(__name__)

LOCAL_RULE_ID = -1


def read_local_rule_list(path: str | Path | None) -> list[DetectRule]:
    """Load newline-delimited regular expressions from ``path``.

    A missing or unopenable file is not fatal: it is logged and yields no rules.
    A read error after opening, or a line that does not compile, raises RuleListError.
    """
    rules: list[DetectRule] = []
    if not path:
        return rules

    try:
        fh = Path(path).open("r", encoding="utf-8")
    except OSError as e:
        logger.warning("local rule list unavailable path=%s err=%s", path, str(e)[:220])
        return rules

    with fh:
        try:
            for lineno, line in enumerate(fh, start=1):
                expr = line.rstrip("\r\n")
                if not expr:
                    continue
                try:
                    rules.append(DetectRule(id=LOCAL_RULE_ID, pattern=re.compile(expr)))
                except re.error as e:
                    raise RuleListError(f"{path}:{lineno}: invalid pattern {expr!r}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise RuleListError(f"error while reading rule list {path}: {e}") from e

    logger.info("local rule list loaded path=%s rules=%s", path, len(rules))
    return rules
