"""
SEO monitor report rendering.
Turns a RunReport into an e-mail friendly HTML document plus subject line.

Validation policy (single source of truth for both e-mail and file reports):
- Critical: HTTP status other than 200, missing/invalid title, canonical
  missing, no H1.
- Minor: title longer than 60 chars, canonical not self-referencing, meta
  description missing or longer than 160 chars, multiple H1s.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from html import escape
from typing import Dict, List

from crawler.url_utils import is_robots_txt
from detection.models import FIELD_CHANGE_TYPES, NAV_CHANGE_TYPES, ChangeType
from monitor.models import RunReport

TITLE_MAX_LENGTH = 60
META_DESCRIPTION_MAX_LENGTH = 160
ROBOTS_PREVIEW_LENGTH = 200

SUBJECT_ALL_OK = "SEO Monitor - All OK"

_FIELD_LABELS = {
    ChangeType.TITLE: "Title changed",
    ChangeType.CANONICAL: "Canonical URL changed",
    ChangeType.H1: "H1 changed",
}

_NAV_LABELS = {
    ChangeType.NAV_REMOVED: "Navigation links removed",
    ChangeType.NAV_ADDED: "Navigation links added",
    ChangeType.NAV_TEXT_CHANGED: "Navigation link text changed",
}

# (counter key, bullet, label, unit) in display order
_SUMMARY_ROWS = (
    ("http_errors", "🔴", "HTTP Errors", "URLs"),
    ("missing_titles", "🔴", "Missing Titles", "URLs"),
    ("missing_canonicals", "🔴", "Missing Canonicals", "URLs"),
    ("missing_h1", "🔴", "Missing H1", "URLs"),
    ("source_changes", "🟠", "Source Code Changes", "URLs"),
    ("robots_changes", "🟠", "Robots.txt Changes", "URLs"),
    ("long_titles", "🟡", "Long Titles", "URLs"),
    ("non_self_ref_canonicals", "🟡", "Non-Self-Ref Canonicals", "URLs"),
    ("meta_issues", "🟡", "Meta Desc Issues", "URLs"),
    ("multiple_h1", "🟡", "Multiple H1s", "URLs"),
    ("nav_changes", "🟡", "Nav Menu Changes", "events"),
    ("scraping_failures", "🔵", "Scraping Failures", "URLs"),
)


@dataclass(frozen=True)
class Report:
    subject: str
    html: str


@dataclass
class _Sections:
    critical: List[str] = field(default_factory=list)
    source: List[str] = field(default_factory=list)
    robots: List[str] = field(default_factory=list)
    nav: List[str] = field(default_factory=list)
    minor: List[str] = field(default_factory=list)
    notices: List[str] = field(default_factory=list)
    counts: Dict[str, int] = field(default_factory=lambda: {key: 0 for key, *_ in _SUMMARY_ROWS})


def _item(url, lines):
    return f"<li><strong>{escape(url)}</strong><br>{'<br>'.join(lines)}</li>"


def _diff_lines(old, new):
    return (f'<span style="color:#d9534f">- "{escape(old)}"</span><br>'
            f'<span style="color:#5cb85c">+ "{escape(new)}"</span>')


def _validate_pages(report: RunReport, s: _Sections) -> None:
    for page in report.snapshots:
        if is_robots_txt(page.url):
            continue

        critical = []
        minor = []

        if page.status_code and page.status_code != 200:
            critical.append(f"HTTP Status: {page.status_code} (expected 200)")
            s.counts["http_errors"] += 1

        if not page.has_title:
            critical.append("Missing or invalid Title")
            s.counts["missing_titles"] += 1
        elif len(page.title) > TITLE_MAX_LENGTH:
            minor.append(f'Title too long ({len(page.title)} chars): "{escape(page.title)}"')
            s.counts["long_titles"] += 1

        if not page.canonical:
            critical.append("Canonical tag missing")
            s.counts["missing_canonicals"] += 1
        elif not page.is_canonical_self_ref:
            minor.append(f"Canonical not self-referencing (points to: {escape(page.canonical)})")
            s.counts["non_self_ref_canonicals"] += 1

        if not page.h1:
            critical.append("No H1 tag found")
            s.counts["missing_h1"] += 1

        if not page.has_meta_description:
            minor.append("Meta description missing")
            s.counts["meta_issues"] += 1
        elif len(page.meta_description) > META_DESCRIPTION_MAX_LENGTH:
            minor.append(f"Meta description longer than {META_DESCRIPTION_MAX_LENGTH} characters")
            s.counts["meta_issues"] += 1

        if page.multiple_h1s:
            minor.append("Multiple H1 tags found")
            s.counts["multiple_h1"] += 1

        if critical:
            s.critical.append(_item(page.url, critical))
        if minor:
            s.minor.append(_item(page.url, minor))


def _nav_block(change):
    label = _NAV_LABELS[change.type]
    items = []
    for link in change.links:
        if change.type == ChangeType.NAV_TEXT_CHANGED:
            items.append(f"<li>{escape(link.url)}<br>{_diff_lines(link.old_text, link.new_text)}</li>")
        else:
            items.append(f'<li>"{escape(link.text)}" → {escape(link.url)}</li>')
    return f'{label} ({len(change.links)}):<ul style="margin-top:0;">{"".join(items)}</ul>'


def _collect_changes(report: RunReport, s: _Sections) -> None:
    for comparison in report.comparisons:
        if comparison.first_scrape:
            s.notices.append(_item(comparison.url, ["First scrape, no previous version to compare"]))
            continue

        metadata = []
        nav = []
        for change in comparison.changes:
            if change.type == ChangeType.CONTENT:
                s.counts["source_changes"] += 1
                s.source.append(_item(comparison.url, [escape(change.message)]))
            elif change.type == ChangeType.ROBOTSTXT:
                s.counts["robots_changes"] += 1
                old_preview = escape(change.old_content[:ROBOTS_PREVIEW_LENGTH])
                new_preview = escape(change.new_content[:ROBOTS_PREVIEW_LENGTH])
                preview = (
                    '<div style="font-size:0.9em; color:#666; margin-top:5px; background:#f5f5f5; padding:5px;">'
                    f"Previous: {old_preview}...<br>Current: {new_preview}...</div>"
                )
                s.robots.append(_item(comparison.url, [escape(change.message) + preview]))
            elif change.type in FIELD_CHANGE_TYPES:
                metadata.append(f"{_FIELD_LABELS[change.type]}:<br>{_diff_lines(change.old_value, change.new_value)}")
            elif change.type in NAV_CHANGE_TYPES:
                s.counts["nav_changes"] += 1
                nav.append(_nav_block(change))

        if metadata:
            s.critical.append(_item(comparison.url, metadata))
        if nav:
            s.nav.append(_item(comparison.url, nav))


def _section(heading, color, background, border, lines, note=None):
    note_html = f'<p style="font-size: 0.9em; color: #666;">{note}</p>' if note else ""
    return f"""
      <h3 style="color: {color}; margin-top: 20px;">{heading}</h3>
      {note_html}
      <ul style="background: {background}; border: 1px solid {border}; padding: 15px 15px 15px 30px; border-radius: 4px;">
        {''.join(lines)}
      </ul>
    """


def generate_report(report: RunReport, generated_at: datetime = None) -> Report:
    generated_at = generated_at or datetime.now(timezone.utc)
    s = _Sections()

    for failure in report.failures:
        s.counts["scraping_failures"] += 1
        s.notices.append(_item(failure.url, [f"Scrape failed: {escape(failure.error)}"]))

    _validate_pages(report, s)
    _collect_changes(report, s)

    all_ok = not any((s.critical, s.source, s.robots, s.nav, s.minor, s.notices))

    html = """
    <div style="font-family: Arial, sans-serif; color: #333;">
      <h2 style="color: #2c3e50; border-bottom: 2px solid #eee; padding-bottom: 10px;">SEO Monitor Report</h2>
    """

    if not all_ok:
        rows = "".join(
            f"<li>{bullet} {label}: <strong>{s.counts[key]}</strong> {unit}</li>"
            for key, bullet, label, unit in _SUMMARY_ROWS
            if s.counts[key] > 0
        )
        html += f"""<div style="background: #f8f9fa; padding: 15px; border-radius: 5px; margin-bottom: 20px; border: 1px solid #e9ecef;">
      <h3 style="margin-top: 0; color: #495057;">📊 Summary</h3>
      <ul style="columns: 2; list-style-type: none; padding: 0; margin: 0;">{rows}</ul></div>"""

    subject = SUBJECT_ALL_OK

    # Highest-severity section present decides the subject
    sections = (
        (s.critical, "SEO Monitor - Critical Issues Found", _section(
            "🚨 Critical Issues &amp; Metadata Changes", "#d9534f", "#fff5f5", "#ebccd1", s.critical,
            "(HTTP Errors, Missing Titles, Missing Canonicals, Missing H1)")),
        (s.source, "SEO Monitor - Source Code Changes", _section(
            "📝 Source Code Changes", "#e67e22", "#fffcf5", "#faebcc", s.source)),
        (s.robots, "SEO Monitor - Robots.txt Changes", _section(
            "🤖 Robots.txt Changes", "#9b59b6", "#fbf5fd", "#e1bee7", s.robots)),
        (s.nav, "SEO Monitor - Navigation Changes", _section(
            "🧭 Navigation Menu Changes", "#17a2b8", "#f0f8ff", "#bee5eb", s.nav)),
        (s.minor, "SEO Monitor - Minor Issues Found", _section(
            "⚠️ Minor Issues &amp; Changes", "#f0ad4e", "#fcf8e3", "#faebcc", s.minor,
            "(Meta Descriptions, Long Titles, Non-Self-Ref Canonicals, Multiple H1s)")),
        (s.notices, "SEO Monitor - Notices", _section(
            "ℹ️ Notices", "#5bc0de", "#d9edf7", "#bce8f1", s.notices,
            "(Scraping Failures, First Time Scrapes)")),
    )
    for lines, section_subject, section_html in sections:
        if lines:
            html += section_html
            if subject == SUBJECT_ALL_OK:
                subject = section_subject

    if all_ok:
        html += """
      <div style="background: #dff0d8; border: 1px solid #d6e9c6; color: #3c763d; padding: 15px; border-radius: 4px; margin-top: 20px;">
        <strong>✅ All Good!</strong><br>
        All pages passed SEO validation with no content changes detected.
      </div>
    """

    html += f"""
      <div style="margin-top: 30px; font-size: 0.8em; color: #999; border-top: 1px solid #eee; padding-top: 10px;">
        Generated by SEO Monitor • {generated_at.strftime("%Y-%m-%d %H:%M:%S UTC")}
      </div>
    </div>
    """

    return Report(subject=subject, html=html)
