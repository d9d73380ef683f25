"""Parsing of ``![[...]]`` embed references."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"^\d+$")


@dataclass(frozen=True)
class EmbedReference:
    """A normalized embed target plus its optional display attributes.

    ``section`` holds the part after ``#`` (a heading or ``^block-id``).
    """

    raw: str
    target: str
    section: str | None = None
    width: str | None = None
    page: int | None = None


def parse_embed_reference(raw: str) -> EmbedReference:
    """Split ``target#section|key=value,key=value`` into an EmbedReference.

    Attribute order is insignificant. Unknown keys and values that fail to
    parse are dropped rather than rejected.
    """
    link, _, suffix = raw.partition("|")
    target, _, section = link.partition("#")

    width: str | None = None
    page: int | None = None
    for item in suffix.split(","):
        key, sep, value = item.partition("=")
        key, value = key.strip().lower(), value.strip()
        if not sep or not value:
            if item.strip():
                logger.debug("ignoring embed attribute %r in %r", item, raw)
            continue
        if key == "width":
            width = value
        elif key == "page" and _INT_RE.match(value):
            page = int(value)
        else:
            logger.debug("ignoring embed attribute %r in %r", item, raw)

    return EmbedReference(
        raw=raw,
        target=target.strip(),
        section=section.strip() or None,
        width=width,
        page=page,
    )
