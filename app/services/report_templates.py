"""
Report Templates
Jinja2 HTML bodies for scheduler summary, alert and statistics emails
"""

from jinja2 import Environment

_env = Environment(
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
)

REFRESH_SUMMARY_SUBJECT = "Daily Match Refresh Summary - Errors Detected"
SLA_ALERT_SUBJECT = "SLA Expiration Alert - Immediate Action Required"
WEEKLY_REPORT_SUBJECT = "Weekly Match Statistics Report"

REFRESH_SUMMARY_TEMPLATE = """
<h2>Daily Match Refresh Summary</h2>
<p><strong>Total Projects Processed:</strong> {{ run.total }}</p>
<p><strong>Successful:</strong> {{ run.succeeded }}</p>
<p><strong>Errors:</strong> {{ run.failed }}</p>
{% if run.failures %}
<ul>
{% for failure in run.failures %}
  <li>Project {{ failure.project_id }}: {{ failure.error }}</li>
{% endfor %}
</ul>
{% endif %}
<p><em>Please check the logs for detailed error information.</em></p>
"""

SLA_ALERT_TEMPLATE = """
<h2>SLA Expiration Alert</h2>
<p>The following vendors have exceeded their response SLA:</p>
<ul>
{% for breach in breaches %}
  <li>
    <strong>Vendor:</strong> {{ breach.vendor.name }} (ID: {{ breach.vendor.id }})<br>
    <strong>SLA Hours:</strong> {{ breach.vendor.response_sla_hours }}<br>
    <strong>Hours Overdue:</strong> {{ breach.hours_overdue }}<br>
    <strong>Project:</strong> {{ breach.most_recent_match.project_id }}<br>
    <strong>Match Created:</strong> {{ breach.most_recent_match.created_at.isoformat() }}
  </li>
{% endfor %}
</ul>
<p><em>Please follow up with these vendors immediately.</em></p>
"""

WEEKLY_REPORT_TEMPLATE = """
<h2>Weekly Match Statistics Report</h2>
<p>Window start: {{ window_start.isoformat() }}</p>
<h3>Summary</h3>
<ul>
  <li><strong>Total Matches:</strong> {{ stats.total_matches }}</li>
  <li><strong>Average Score:</strong> {{ "%.2f"|format(stats.average_score) }}</li>
  <li><strong>Unique Projects:</strong> {{ stats.unique_projects }}</li>
  <li><strong>Unique Vendors:</strong> {{ stats.unique_vendors }}</li>
</ul>
<h3>Top Performing Vendors</h3>
{% if stats.top_vendors %}
<ol>
{% for entry in stats.top_vendors %}
  <li><strong>{{ entry.vendor.name }}</strong> - Score: {{ "%.2f"|format(entry.average_score) }}, Matches: {{ entry.match_count }}</li>
{% endfor %}
</ol>
{% else %}
<p><em>No matches in this window.</em></p>
{% endif %}
"""


def render(template_str: str, **variables) -> str:
    template = _env.from_string(template_str)
    return template.render(**variables)


def render_refresh_summary(run) -> str:
    return render(REFRESH_SUMMARY_TEMPLATE, run=run)


def render_sla_alert(breaches) -> str:
    return render(SLA_ALERT_TEMPLATE, breaches=breaches)


def render_weekly_report(stats, window_start) -> str:
    return render(WEEKLY_REPORT_TEMPLATE, stats=stats, window_start=window_start)
