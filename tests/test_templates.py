from datetime import datetime
from types import SimpleNamespace

from hockeypuck.hkp.templates import (
    format_timestamp,
    render_add_form,
    render_add_result,
    render_search_form,
    render_stats,
)


class _Change:
    def __init__(self, fingerprint, text):
        self.fingerprint = fingerprint
        self._text = text

    def __str__(self):
        return self._text


def _stats(**overrides):
    values = dict(
        hostname="keys.example.com",
        port=11371,
        version="1.0",
        total_keys=42,
        pks_peers=[],
        key_stats_hourly=[],
        key_stats_daily=[],
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_format_timestamp_round_trip():
    seconds = 1_400_000_000
    text = format_timestamp(seconds * 1_000_000_000 + 123)
    assert datetime.fromisoformat(text).timestamp() == seconds


def test_format_timestamp_has_offset_or_zulu():
    text = format_timestamp(0)
    assert text.endswith("Z") or text[-6] in "+-"


def test_search_form():
    html = render_search_form()
    assert "<title>Hockeypuck | Search OpenPGP Public Keys</title>" in html
    assert 'formaction="/pks/lookup?op=index"' in html
    assert "OpenPGP Search" in html


def test_add_form():
    html = render_add_form()
    assert "<title>Hockeypuck | Add Public Key</title>" in html
    assert 'action="/pks/add"' in html
    assert 'name="keytext"' in html


def test_add_result_links_fingerprints():
    changes = [_Change("abcdef0123", "Add key abcdef0123"), _Change("9876", "No change")]
    html = render_add_result(changes)
    assert "Updated Public Keys" in html
    for change in changes:
        assert f"search=0x{change.fingerprint}" in html
        assert str(change) in html


def test_add_result_escapes_text():
    html = render_add_result([_Change("00", "<script>")])
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_stats_without_peers():
    stats = _stats()
    html = render_stats(stats)
    assert f"<td>{stats.hostname}</td>" in html
    assert f"<td>{stats.total_keys}</td>" in html
    assert "Outgoing Mailsync Peers" not in html
    assert "Keys loaded in the last 24 hours" not in html


def test_stats_with_peers_and_hourly():
    last_sync = 1_400_000_000 * 1_000_000_000
    peer = SimpleNamespace(addr="pks@example.com", last_sync=last_sync)
    hourly = [SimpleNamespace(hour="12", created=3, modified=4)]
    html = render_stats(_stats(pks_peers=[peer], key_stats_hourly=hourly))
    assert "Outgoing Mailsync Peers" in html
    assert peer.addr in html
    assert format_timestamp(last_sync) in html
    assert "Keys loaded in the last 24 hours" in html
    assert "Keys loaded in the last 7 days" not in html