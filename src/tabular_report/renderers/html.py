"""HTML materializer: replays the HTML instruction list into a table string."""

import re

import markdown
from jinja2 import BaseLoader, Environment, TemplateError
from markupsafe import Markup, escape

from tabular_report.core.app_config import AppConfig
from tabular_report.instructions import Backend, LabelMode
from tabular_report.renderers.base import Cell, ReplayMaterializer, TableDraft

_PARAGRAPH = re.compile(r"^<p>(.*)</p>$", re.DOTALL)

HTML_TEMPLATE = """\
<table class="tabular-report">
  <thead>
    <tr>
{% for header in headers %}
      <th scope="col">{{ header.label }}{% if header.markers %}<sup>{{ header.markers }}</sup>{% endif %}</th>
{% endfor %}
    </tr>
  </thead>
  <tbody>
{% for row in rows %}
    <tr>
{% for cell in row %}
      <td{% if cell.indent %} style="padding-left: {{ indent }}ch"{% endif %}>{% if cell.bold and cell.text %}<strong>{{ cell.text }}</strong>{% else %}{{ cell.text }}{% endif %}</td>
{% endfor %}
    </tr>
{% endfor %}
  </tbody>
{% if notes or abbreviation_note %}
  <tfoot>
{% for note in notes %}
    <tr><td colspan="{{ headers|length }}"><sup>{{ loop.index }}</sup> {{ note }}</td></tr>
{% endfor %}
{% if abbreviation_note %}
    <tr><td colspan="{{ headers|length }}">{{ abbreviation_note }}</td></tr>
{% endif %}
  </tfoot>
{% endif %}
</table>
"""


class HtmlMaterializer(ReplayMaterializer):
    """Renders an HTML ``<table>``; markdown labels are converted to inline HTML."""

    backend = Backend.HTML

    def __init__(self) -> None:
        self.env = Environment(
            loader=BaseLoader(),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.from_string(HTML_TEMPLATE)

    def place_label(self, label: str, mode: LabelMode) -> str:
        if mode is LabelMode.VERBATIM:
            return Markup(label)
        if mode is LabelMode.MARKDOWN:
            rendered = markdown.markdown(label).strip()
            match = _PARAGRAPH.match(rendered)
            return Markup(match.group(1) if match else rendered)
        return escape(label)

    def write(self, draft: TableDraft, rows: list[list[Cell]], settings: AppConfig) -> str:
        notes, markers = draft.numbered_notes()
        headers = [
            {
                "label": draft.labels.get(column, escape(column)),
                "markers": ",".join(str(n) for n in markers.get(column, [])),
            }
            for column in draft.columns
        ]
        try:
            return self.template.render(
                headers=headers,
                rows=rows,
                notes=notes,
                abbreviation_note=draft.abbreviation_note,
                indent=settings.rendering.level_indent,
            )
        except TemplateError as e:
            raise ValueError(f"HTML template rendering error: {e}") from e
