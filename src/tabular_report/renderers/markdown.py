"""Markdown materializer: replays the Markdown instruction list into a pipe table."""

import re

from jinja2 import BaseLoader, Environment, TemplateError

from tabular_report.core.app_config import AppConfig
from tabular_report.instructions import Backend, LabelMode
from tabular_report.renderers.base import Cell, ReplayMaterializer, TableDraft

_MARKDOWN_SPECIAL = re.compile(r"([\\`*_\[\]<>#|])")
NBSP = "&nbsp;"

MARKDOWN_TEMPLATE = """\
| {{ headers|join(" | ") }} |
|{% for _ in headers %}{{ "---" }}|{% endfor %}

{% for row in rows %}
| {{ row|join(" | ") }} |
{% endfor %}
{% if notes or abbreviation_note %}

{% for note in notes %}
<sup>{{ loop.index }}</sup> {{ note }}
{% endfor %}
{% if abbreviation_note %}
{{ abbreviation_note }}
{% endif %}
{% endif %}
"""


def escape_markdown(text: str) -> str:
    """Backslash-escape characters with markdown meaning."""
    return _MARKDOWN_SPECIAL.sub(r"\\\1", text)


def escape_cell(text: str) -> str:
    """Escape only what breaks a pipe-table cell."""
    return text.replace("|", "\\|").replace("\n", " ")


class MarkdownMaterializer(ReplayMaterializer):
    """Renders a GitHub-flavoured pipe table with notes underneath."""

    backend = Backend.MARKDOWN

    def __init__(self) -> None:
        self.env = Environment(
            loader=BaseLoader(),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.from_string(MARKDOWN_TEMPLATE)

    def place_label(self, label: str, mode: LabelMode) -> str:
        if mode is LabelMode.ESCAPED:
            return escape_markdown(label)
        return escape_cell(label)

    def render_cell(self, cell: Cell, indent: int) -> str:
        """Format functions own their markdown; raw values are escaped."""
        if cell.formatted:
            text = escape_cell(cell.text)
        else:
            text = escape_markdown(cell.text).replace("\n", " ")
        if cell.bold and text:
            text = f"**{text}**"
        if cell.indent:
            text = NBSP * indent + text
        return text

    def write(self, draft: TableDraft, rows: list[list[Cell]], settings: AppConfig) -> str:
        notes, markers = draft.numbered_notes()
        headers = []
        for column in draft.columns:
            label = draft.labels.get(column, escape_markdown(column))
            if column in markers:
                label += "<sup>" + ",".join(str(n) for n in markers[column]) + "</sup>"
            headers.append(label)

        indent = settings.rendering.level_indent
        try:
            return self.template.render(
                headers=headers,
                rows=[[self.render_cell(cell, indent) for cell in row] for row in rows],
                notes=notes,
                abbreviation_note=draft.abbreviation_note,
            )
        except TemplateError as e:
            raise ValueError(f"Markdown template rendering error: {e}") from e
