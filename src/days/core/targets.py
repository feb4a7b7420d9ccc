"""What a days view is about - the subject of an aggregation."""

from dataclasses import dataclass

DYNAMIC = "*"
CUSTOM = "@"


@dataclass(frozen=True)
class DynamicTarget:
    """Follows whichever page is on screen; current_name is that page, if any."""

    current_name: str | None = None


@dataclass(frozen=True)
class CustomQueryTarget:
    """A user-authored raw query, optionally with a title for year views."""

    query: str
    title: str | None = None


@dataclass(frozen=True)
class NamedTarget:
    """A page name or block UUID."""

    name: str


@dataclass(frozen=True)
class EmptyTarget:
    """No entry context: only configured date properties."""


QueryTarget = DynamicTarget | CustomQueryTarget | NamedTarget | EmptyTarget


def extract_custom_query(child_content: str | None) -> str | None:
    """Query text inside a fenced block: every line but the first and last."""
    if not child_content:
        return None
    lines = child_content.split("\n")
    query = "\n".join(lines[1:-1]).strip()
    return query or None


def parse_target(
    arg: str | None,
    custom_query: str | None = None,
    current_name: str | None = None,
    title: str | None = None,
) -> QueryTarget:
    """
    Interpret a renderer argument.

    "*" follows the current page, "@" uses custom_query (the query written
    under the renderer), "[[page]]" / "((uuid))" / bare text name an entry,
    and blank means no entry.
    """
    arg = (arg or "").strip()
    if not arg:
        return EmptyTarget()
    if arg == DYNAMIC:
        return DynamicTarget(current_name)
    if arg == CUSTOM:
        if custom_query and custom_query.strip():
            return CustomQueryTarget(custom_query.strip(), title)
        return EmptyTarget()
    if arg.startswith("[[") or arg.startswith("(("):
        arg = arg[2:-2]
    return NamedTarget(arg)
