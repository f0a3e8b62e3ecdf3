"""
tests/test_renderer.py — HTML rendering, escaping and style lookup.
"""
from datetime import datetime, timezone

import pytest

from cm_health.errors import RenderError
from cm_health.models import CheckResult, Report, Status
from cm_health.renderer import DEFAULT_STYLES, HtmlRenderer, StyleConfig, write_document

WHEN = datetime(2026, 10, 16, 8, 30, tzinfo=timezone.utc)


def _report(*results, target="PS1 @ cm01.corp.local"):
    report = Report(target=target, generated_at=WHEN)
    for r in results:
        report.section(r.section).append(r)
    return report


def _result(status=Status.HEALTHY, section="Site Server", name="CPU load", note="ok", error=None):
    return CheckResult(section=section, name=name, status=status, note=note, error=error)


class TestEscaping:
    def test_free_text_is_escaped(self):
        payload = '<script>alert("x")</script>'
        html = HtmlRenderer().render(_report(
            _result(name=payload, note=payload, error=payload, status=Status.CRITICAL, section=payload)
        ))
        assert "<script>" not in html
        assert 'alert("x")' not in html
        assert "&lt;script&gt;alert(&quot;x&quot;)&lt;/script&gt;" in html

    def test_single_quotes_escaped(self):
        html = HtmlRenderer().render(_report(_result(note="it's \\\\CM01\\share")))
        assert "it&#x27;s" in html

    def test_target_escaped(self):
        html = HtmlRenderer().render(_report(_result(), target="<b>PS1</b>"))
        assert "<b>PS1</b>" not in html
        assert "&lt;b&gt;PS1&lt;/b&gt;" in html


class TestStyles:
    def test_every_status_has_a_default_style(self):
        assert set(DEFAULT_STYLES) == set(Status)

    def test_unmapped_status_raises(self):
        style = StyleConfig(styles={Status.HEALTHY: DEFAULT_STYLES[Status.HEALTHY]})
        with pytest.raises(RenderError, match="Warning"):
            HtmlRenderer(style).render(_report(_result(), _result(status=Status.WARNING, name="Memory")))

    def test_value_outside_enum_raises(self):
        with pytest.raises(RenderError, match="not a status"):
            HtmlRenderer().render(_report(_result(status="Healthy")))

    def test_class_from_table(self):
        html = HtmlRenderer().render(_report(_result(status=Status.MANUAL_CHECK)))
        assert '<td class="status status-manual">Manual check</td>' in html


class TestLayout:
    def test_sections_in_supplied_order(self):
        html = HtmlRenderer().render(_report(
            _result(section="Site Server"),
            _result(section="Clients", name="Active clients"),
            _result(section="Logs", name="Site server logs", status=Status.MANUAL_CHECK),
        ))
        positions = [html.index(f"<h2>{t}</h2>") for t in ("Site Server", "Clients", "Logs")]
        assert positions == sorted(positions)

    def test_header_has_target_and_single_timestamp(self):
        html = HtmlRenderer().render(_report(_result()))
        assert "Target: PS1 @ cm01.corp.local" in html
        assert html.count("Generated: 2026-10-16 08:30:00 UTC") == 1

    def test_summary_counts(self):
        html = HtmlRenderer().render(_report(
            _result(), _result(name="b"), _result(status=Status.CRITICAL, name="c", error="boom"),
        ))
        assert '<span class="status-healthy">Healthy: 2</span>' in html
        assert '<span class="status-critical">Critical: 1</span>' in html

    def test_error_shown_under_note(self):
        html = HtmlRenderer().render(_report(_result(status=Status.CRITICAL, note="query SMS_Site failed", error="timed out")))
        assert 'query SMS_Site failed<div class="error">timed out</div>' in html


class TestErrorDocument:
    def test_minimal_document(self):
        html = HtmlRenderer().render_error("PS1 @ cm01", "site <PS1> not found", generated_at=WHEN)
        assert "<table>" not in html
        assert "Report could not be generated: site &lt;PS1&gt; not found" in html
        assert "Target: PS1 @ cm01" in html


class TestWriteDocument:
    def test_overwrites_previous_report(self, tmp_path):
        path = tmp_path / "out" / "report.html"
        write_document(path, "first")
        write_document(path, "second")
        assert path.read_text(encoding="utf-8") == "second"
