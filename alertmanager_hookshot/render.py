"""Render Alertmanager alert groups into hookshot message records."""

from typing import List

from jinja2 import Environment
from markupsafe import Markup, escape

from alertmanager_hookshot.models import Alert, AlertGroup, AlertStatus, MessageRecord
from alertmanager_hookshot.silence import silence_link

PLAIN_TEMPLATE = """\
**[{{ status }} - {{ severity }}]** - {{ alertname }}:
**Labels**:
{% for key, value in labels.items() %}
{{ key }}: {{ value }}
{% endfor %}
**Annotations**:
{% for key, value in annotations.items() %}
{{ key }}: {{ value }}
{% endfor %}
{% if firing %}

[Silence]({{ silence_url }})
{% endif %}
"""

HTML_TEMPLATE = """\
<p>{{ badge }}</p>
<p>
<b>Labels</b>:
<ul>
{% for key, value in labels.items() %}
<li>{{ key }}: {{ value }}</li>
{% endfor %}
</ul>
<b>Annotations</b>:
<ul>
{% for key, value in annotations.items() %}
<li>{{ key }}: {{ value }}</li>
{% endfor %}
</ul>
</p>
{% if firing %}
<p><a href="{{ silence_url }}">Create Silence</a></p>
{% endif %}
"""

_plain_env = Environment(trim_blocks=True, lstrip_blocks=True, autoescape=False)
_html_env = Environment(trim_blocks=True, lstrip_blocks=True, autoescape=True)

_plain_template = _plain_env.from_string(PLAIN_TEMPLATE)
_html_template = _html_env.from_string(HTML_TEMPLATE)


def status_badge(status: str, severity: str) -> Markup:
    """Colored HTML rendering of an alert's status and severity.

    Args:
        status: firing or resolved
        severity: value of the alert's ``severity`` label

    Returns:
        Badge markup
    """
    if status == AlertStatus.RESOLVED.value:
        return Markup("<font color='green'><b>RESOLVED - ✅</b></font>")

    if status == AlertStatus.FIRING.value:
        if severity == "critical":
            return Markup("<font color='red'><b>FIRING - CRITICAL - ⛔️</b></font>")
        if severity == "warning":
            return Markup("<font color='orange'><b>FIRING - WARNING - ⚠️</b></font>")

    return Markup("<b>[{}]</b>").format(escape(status.upper()))


def render_plain(alert: Alert, silence_url: str) -> str:
    return _plain_template.render(
        status=alert.status.upper(),
        severity=alert.severity.upper(),
        alertname=alert.alertname,
        labels=alert.labels,
        annotations=alert.annotations,
        firing=alert.is_firing,
        silence_url=silence_url,
    )


def render_html(alert: Alert, silence_url: str) -> str:
    return _html_template.render(
        badge=status_badge(alert.status, alert.severity),
        labels=alert.labels,
        annotations=alert.annotations,
        firing=alert.is_firing,
        silence_url=silence_url,
    )


def render(group: AlertGroup, silence_base_url: str) -> List[MessageRecord]:
    """Render an alert group into one message record per alert.

    A group without alerts yields a single empty record so the upstream
    webhook is still notified.

    Args:
        group: The Alertmanager webhook payload
        silence_base_url: Alertmanager base URL for silence links

    Returns:
        Message records in alert order
    """
    if not group.alerts:
        return [MessageRecord.empty_record()]

    records = []
    for alert in group.alerts:
        silence_url = silence_link(alert.labels, silence_base_url)
        records.append(
            MessageRecord.text(
                plain=render_plain(alert, silence_url),
                html=render_html(alert, silence_url),
            )
        )
    return records
