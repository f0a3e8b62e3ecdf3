from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from html import escape
from pathlib import Path
from typing import List, Mapping, Optional

from .errors import RenderError
from .models import CheckResult, Report, Status


@dataclass(frozen=True)
class StatusStyle:
    css_class: str
    label: str
    color: str


DEFAULT_STYLES: Mapping[Status, StatusStyle] = {
    Status.HEALTHY: StatusStyle("status-healthy", "Healthy", "#2e7d32"),
    Status.WARNING: StatusStyle("status-warning", "Warning", "#ed6c02"),
    Status.CRITICAL: StatusStyle("status-critical", "Critical", "#c62828"),
    Status.MANUAL_CHECK: StatusStyle("status-manual", "Manual check", "#1565c0"),
    Status.UNKNOWN: StatusStyle("status-unknown", "Unknown", "#616161"),
}


@dataclass(frozen=True)
class StyleConfig:
    """Explicit Status -> style table used by the renderer."""

    styles: Mapping[Status, StatusStyle] = field(default_factory=lambda: dict(DEFAULT_STYLES))
    title: str = "Configuration Manager Health Report"

    def style_for(self, status: object) -> StatusStyle:
        if not isinstance(status, Status):
            raise RenderError(f"not a status value: {status!r}")
        style = self.styles.get(status)
        if style is None:
            raise RenderError(f"no style configured for status {status.value!r}")
        return style


_CSS = """
body { font-family: Segoe UI, Arial, sans-serif; margin: 24px; color: #212121; }
h1 { font-size: 22px; margin-bottom: 4px; }
.meta { color: #616161; margin-bottom: 16px; }
.summary span { display: inline-block; margin-right: 12px; font-weight: bold; }
h2 { font-size: 17px; margin: 24px 0 6px; border-bottom: 1px solid #e0e0e0; }
table { border-collapse: collapse; width: 100%; }
th, td { text-align: left; padding: 6px 8px; border-bottom: 1px solid #eeeeee; vertical-align: top; }
th { background: #f5f5f5; }
td.status { font-weight: bold; white-space: nowrap; }
.error { color: #c62828; font-family: Consolas, monospace; font-size: 12px; }
"""


def _stamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


class HtmlRenderer:
    """Serializes a :class:`Report` into one self-contained HTML document."""

    def __init__(self, style: Optional[StyleConfig] = None) -> None:
        self.style = style or StyleConfig()

    def _css(self) -> str:
        rules = [
            f".{s.css_class} {{ color: {s.color}; }}"
            for s in self.style.styles.values()
        ]
        return _CSS + "\n".join(rules) + "\n"

    def _head(self, title: str) -> List[str]:
        return [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "<head>",
            '<meta charset="utf-8">',
            f"<title>{escape(title, quote=True)}</title>",
            f"<style>{self._css()}</style>",
            "</head>",
            "<body>",
        ]

    def _row(self, result: CheckResult) -> str:
        style = self.style.style_for(result.status)
        note = escape(result.note, quote=True)
        if result.error:
            note += f'<div class="error">{escape(result.error, quote=True)}</div>'
        return (
            "<tr>"
            f'<td class="status {style.css_class}">{escape(style.label, quote=True)}</td>'
            f"<td>{escape(result.name, quote=True)}</td>"
            f"<td>{note}</td>"
            "</tr>"
        )

    def render(self, report: Report) -> str:
        # Rows first, so an unmapped status fails before anything is emitted.
        body: List[str] = []
        for section in report.sections:
            body.append(f"<h2>{escape(section.title, quote=True)}</h2>")
            body.append("<table>")
            body.append("<tr><th>Status</th><th>Check</th><th>Details</th></tr>")
            body.extend(self._row(r) for r in section.results)
            body.append("</table>")

        counts = report.counts()
        summary = "".join(
            f'<span class="{s.css_class}">{escape(s.label, quote=True)}: {counts.get(status, 0)}</span>'
            for status, s in self.style.styles.items()
        )
        out = self._head(self.style.title)
        out.append(f"<h1>{escape(self.style.title, quote=True)}</h1>")
        out.append(
            f'<div class="meta">Target: {escape(report.target, quote=True)} | '
            f"Generated: {escape(_stamp(report.generated_at), quote=True)}</div>"
        )
        out.append(f'<div class="summary">{summary}</div>')
        out.extend(body)
        out.append("</body>")
        out.append("</html>")
        return "\n".join(out) + "\n"

    def render_error(self, target: str, message: str, generated_at: Optional[datetime] = None) -> str:
        """Minimal document written when no report could be produced."""
        when = generated_at or datetime.now(timezone.utc)
        out = self._head(self.style.title)
        out.append(f"<h1>{escape(self.style.title, quote=True)}</h1>")
        out.append(
            f'<div class="meta">Target: {escape(target, quote=True)} | '
            f"Generated: {escape(_stamp(when), quote=True)}</div>"
        )
        out.append(f'<p class="error">Report could not be generated: {escape(message, quote=True)}</p>')
        out.append("</body>")
        out.append("</html>")
        return "\n".join(out) + "\n"


def write_document(path: Path, text: str) -> Path:
    """Write ``text`` to ``path``, replacing any previous report."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
