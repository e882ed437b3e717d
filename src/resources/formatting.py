"""Markdown rendering helpers shared by the resource handlers."""

import json
from datetime import datetime
from typing import Any, Iterable, Optional


def cell(value: Any, default: str = "-") -> str:
    """Render a value for a markdown table cell."""
    if value is None or value == "" or value == []:
        return default
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (list, tuple)):
        value = ", ".join(str(v) for v in value)
    text = str(value).replace("|", "\\|")
    return " ".join(text.split())


def markdown_table(headers: list[str], rows: Iterable[Iterable[Any]]) -> str:
    """Render a markdown table, one line per row."""
    lines = [
        "| " + " | ".join(headers) + " |",
        "|" + "|".join("-" * (len(h) + 2) for h in headers) + "|",
    ]
    for row in rows:
        lines.append("| " + " | ".join(cell(value) for value in row) + " |")
    return "\n".join(lines) + "\n"


def id_reference(kind: str, pairs: Iterable[tuple[Any, Any]]) -> str:
    """Render the trailing name to identifier list."""
    lines = [f"\n### {kind} IDs for Reference\n"]
    for name, identifier in pairs:
        lines.append(f"- **{name or 'Unnamed'}**: `{identifier}`")
    return "\n".join(lines) + "\n"


def call_example(tool: str, **arguments: Any) -> str:
    """Render a literal tool invocation such as ``auth0_list_logs(from="x")``."""
    rendered = []
    for name, value in arguments.items():
        if value is None:
            continue
        if isinstance(value, str):
            rendered.append(f'{name}="{value}"')
        else:
            rendered.append(f"{name}={json.dumps(value)}")
    return f"`{tool}({', '.join(rendered)})`"


def pagination_hint(
    tool: str,
    page: int,
    total_pages: int,
    per_page: int,
    total: Optional[int] = None,
    **arguments: Any
) -> str:
    """Render the page footer and the next-page invocation."""
    summary = f"{per_page} items per page"
    if total is not None:
        summary += f", {total} total"
    text = f"\n*Page {page + 1} of {total_pages} ({summary})*\n"
    if page + 1 < total_pages:
        example = call_example(tool, **arguments, page=page + 1, per_page=per_page)
        text += f"\nTo see more results, use: {example}\n"
    return text


def bullet(label: str, value: Any, default: str = "Not specified") -> str:
    """Render a ``- **Label**: value`` line."""
    if value is None or value == "":
        value = default
    elif isinstance(value, bool):
        value = "Yes" if value else "No"
    return f"- **{label}**: {value}\n"


def json_block(data: Any) -> str:
    """Render data as a fenced JSON block."""
    return "```json\n" + json.dumps(data, indent=2, default=str) + "\n```\n"


def format_timestamp(value: Any) -> str:
    """Render an ISO-8601 timestamp as ``YYYY-MM-DD HH:MM:SS``."""
    if not isinstance(value, str) or not value:
        return "Unknown"
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%Y-%m-%d %H:%M:%S")
