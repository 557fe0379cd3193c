"""HTML pages served by the keyserver web interface."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

from jinja2 import DictLoader, Environment


def format_timestamp(ts: int) -> str:
    """Format nanoseconds since the epoch as RFC 3339 in local time."""
    seconds = ts // 1_000_000_000
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc).astimezone()
    text = moment.isoformat(timespec="seconds")
    if moment.utcoffset() == timedelta(0):
        return text[: -len("+00:00")] + "Z"
    return text


_STYLESHEETS = ("/css/reset.css", "/css/hkp.css")

# (label, link target or None, css class for unlinked entries)
_MENU = (
    ("OpenPGP:", None, "menu-label"),
    ("Search", "/openpgp/lookup", None),
    ("Add", "/openpgp/add", None),
    ("Stats", "/pks/lookup?op=stats", None),
    ("Machines:", None, "menu-label"),
    ("SSH", None, "todo-link"),
    ("SSL/TLS", None, "todo-link"),
)

_MACROS = """
{%- macro pair(label, value) -%}
<tr><th>{{ label }}</th><td>{{ value }}</td></tr>
{%- endmacro -%}
{%- macro heads(names) -%}
<tr>{% for name in names %}<th>{{ name }}</th>{% endfor %}</tr>
{%- endmacro -%}
{%- macro cells(values) -%}
<tr>{% for value in values %}<td>{{ value }}</td>{% endfor %}</tr>
{%- endmacro -%}
{%- macro submit(id, value, formaction=none) -%}
<input id="{{ id }}"{% if formaction %} formaction="{{ formaction }}"{% endif %} \
type="submit" value="{{ value }}"></input>
{%- endmacro -%}
{%- macro activity(caption, unit, rows, attr) -%}
{% if rows %}
<h3>{{ caption }}</h3>
<table>
{{ heads([unit, "New", "Updated"]) }}
{% for r in rows -%}
{{ cells([r[attr], r.created, r.modified]) }}
{% endfor -%}
</table>
{% endif %}
{%- endmacro -%}
"""

_LAYOUT = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8" />
<title>{% block title %}{% endblock %}</title>
{% for sheet in stylesheets -%}
<link rel="stylesheet" href="{{ sheet }}" />
{% endfor -%}
</head>
<body>
<div id="container">
<div id="header">
<h1><a id="logo" href="/">Hockeypuck</a></h1>
<div id="topmenu">
<ul>
{% for label, href, css in menu -%}
<li>{% if href %}<a href="{{ href }}">{{ label }}</a>\
{% else %}<span class="{{ css }}">{{ label }}</span>{% endif %}</li>
{% endfor -%}
</ul>
</div>
</div>
<div id="main">
{% block page_content %}{% endblock %}
</div><!-- main -->
</div><!-- container -->
<div id="footer">
<div id="about">Hockeypuck OpenPGP Key Server</div>
</div>
</body>
</html>
"""

_ADD_FORM = """{% extends "layout.html" %}
{% import "macros.html" as m %}
{% block title %}Hockeypuck | Add Public Key{% endblock %}
{% block page_content %}
<h2 class="pks-add">Add Public Key</h2>
<p>Paste the ASCII-armored public key block into the form below.</p>
<form class="pks-add" action="/pks/add" method="post">
<div><textarea name="keytext" cols="66" rows="20"></textarea></div>
<div>{{ m.submit("add_submit", "Add Public Key") }}</div>
</form>
{% endblock %}"""

_ADD_RESULT = """{% extends "layout.html" %}
{% block title %}Hockeypuck | Updated Public Keys{% endblock %}
{% block page_content %}
<h2>Updated Public Keys</h2>
{% for change in changes -%}
<p><a href="/pks/lookup?op=index&search=0x{{ change.fingerprint }}">{{ change }}</a></p>
{% endfor %}
{% endblock %}"""

_SEARCH_FORM = """{% extends "layout.html" %}
{% import "macros.html" as m %}
{% block title %}Hockeypuck | Search OpenPGP Public Keys{% endblock %}
{% block page_content %}
<h2 class="pks-search">OpenPGP Search</h2>
<form class="pks-search" method="post">
<div><input name="search" type="search"></input></div>
<div>
{{ m.submit("search_submit", "Public Key Search", "/pks/lookup?op=index") }}
{{ m.submit("get_submit", "I'm Feeling Lucky", "/pks/lookup?op=get") }}
</div>
</form>
{% endblock %}"""

_STATS = """{% extends "layout.html" %}
{% import "macros.html" as m %}
{% block title %}Hockeypuck | Server Status{% endblock %}
{% block page_content %}
<h2>Server Status</h2>
<table>
{{ m.pair("Hostname:", stats.hostname) }}
{{ m.pair("Port:", stats.port) }}
{{ m.pair("Version:", stats.version) }}
</table>
{% if stats.pks_peers %}
<h2>Outgoing Mailsync Peers</h2>
<table>
{{ m.heads(["Email Address", "Last Synchronized"]) }}
{% for peer in stats.pks_peers -%}
{{ m.cells([peer.addr, peer.last_sync | timef]) }}
{% endfor -%}
</table>
{% endif %}
<h2>Statistics</h2>
<table>
{{ m.pair("Total number of keys:", stats.total_keys) }}
</table>
{{ m.activity("Keys loaded in the last 24 hours", "Hour", stats.key_stats_hourly, "hour") }}
{{ m.activity("Keys loaded in the last 7 days", "Day", stats.key_stats_daily, "day") }}
{% endblock %}"""

_ENV = Environment(
    loader=DictLoader(
        {
            "macros.html": _MACROS,
            "layout.html": _LAYOUT,
            "add_form.html": _ADD_FORM,
            "add_result.html": _ADD_RESULT,
            "search_form.html": _SEARCH_FORM,
            "stats.html": _STATS,
        }
    ),
    autoescape=True,
)
_ENV.filters["timef"] = format_timestamp
_ENV.globals["stylesheets"] = _STYLESHEETS
_ENV.globals["menu"] = _MENU


def render_search_form() -> str:
    """Render the key search form."""
    return _ENV.get_template("search_form.html").render()


def render_add_form() -> str:
    """Render the form for submitting a public key."""
    return _ENV.get_template("add_form.html").render()


def render_add_result(changes: Iterable[Any]) -> str:
    """Render the list of key changes; each needs ``fingerprint`` and a string form."""
    return _ENV.get_template("add_result.html").render(changes=list(changes))


def render_stats(stats: Any) -> str:
    """Render the server status page.

    ``stats`` provides hostname, port, version, total_keys, pks_peers
    (items with addr and last_sync in nanoseconds), key_stats_hourly
    (hour, created, modified) and key_stats_daily (day, created, modified).
    """
    return _ENV.get_template("stats.html").render(stats=stats)