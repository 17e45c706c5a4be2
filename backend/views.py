"""Presentation of survey pages and the responses dashboard.

View-model builders are plain functions so the dashboard can be tested
without a browser; HTML is rendered from the inline Jinja2 templates below.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Sequence
from urllib.parse import urlencode

from jinja2 import DictLoader, Environment, select_autoescape

from exporter import format_local
from form import SLIDER_COLORS, FormState, slider_display
from listing import DashboardState, close_detail
from questions import QUESTIONS, RATING_KEYS, RATINGS, humanize_key
from config import EXPORT_TZ_LABEL


# ------------------------
# View models
# ------------------------
def _ratings(record) -> list[dict]:
    return [
        {"key": k, "label": humanize_key(k), "value": record.responses.get(k, "")}
        for k in RATING_KEYS
    ]


def card_view(items: Sequence) -> list[dict]:
    return [{
        "id": r.id,
        "name": r.name,
        "email": r.email,
        "domain": r.email.partition("@")[2],
        "submitted_at": f"{format_local(r.created_at)} {EXPORT_TZ_LABEL}",
        "ratings": _ratings(r),
        "suggestions": r.suggestions or "",
    } for r in items]


def table_view(items: Sequence) -> dict:
    columns = ["Name", "Email", "Domain", "Submitted At", *(humanize_key(k) for k in RATING_KEYS), "Suggestions"]
    rows = []
    for card in card_view(items):
        rows.append({
            "id": card["id"],
            "cells": [
                card["name"], card["email"], card["domain"], card["submitted_at"],
                *(x["value"] for x in card["ratings"]),
                card["suggestions"] or "-",
            ],
        })
    return {"columns": columns, "rows": rows}


def detail_view(record) -> dict:
    """Every field of a single record, untruncated."""
    card = card_view([record])[0]
    card["created_at"] = record.created_at.isoformat()
    return card


# ------------------------
# Detail overlay keyboard handling
# ------------------------
def next_focus(index: int, count: int, backwards: bool = False) -> int:
    """Index of the element that receives focus on Tab / Shift+Tab.

    Focus wraps around at both ends so it never leaves the overlay.
    """
    if count <= 0:
        return -1
    if backwards:
        return count - 1 if index <= 0 else index - 1
    return 0 if index >= count - 1 else index + 1


@dataclass(frozen=True)
class OverlayKeyResult:
    state: DashboardState
    focus: int = -1


def handle_overlay_key(state: DashboardState, key: str, focus: int = 0,
                       focusable: int = 0, shift: bool = False) -> OverlayKeyResult:
    if state.selected is None:
        return OverlayKeyResult(state, focus)
    if key == "Escape":
        return OverlayKeyResult(close_detail(state), -1)
    if key == "Tab":
        return OverlayKeyResult(state, next_focus(focus, focusable, backwards=shift))
    return OverlayKeyResult(state, focus)


# ------------------------
# Templates
# ------------------------
_BASE = """<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
{% block meta %}{% endblock %}
<title>{% block title %}Client Survey{% endblock %}</title>
<style>
body { background:#111827; color:#f9fafb; font-family: system-ui, sans-serif; margin:0; padding:2rem; }
.card { background:#1f2937; border-radius:8px; padding:1.25rem; margin-bottom:1rem; }
.error { color:#ef4444; font-size:.875rem; }
.muted { color:#9ca3af; font-size:.875rem; }
table { border-collapse:collapse; width:100%; font-size:.875rem; }
th, td { padding:.6rem; text-align:left; border-top:1px solid #374151; }
tr.row { cursor:pointer; }
.overlay { position:fixed; inset:0; background:rgba(0,0,0,.6); display:flex; align-items:center; justify-content:center; }
.overlay .card { max-width:640px; width:100%; max-height:90vh; overflow:auto; }
.slider { position:relative; margin-top:2rem; }
.tooltip { position:absolute; top:-1.75rem; transform:translateX(-50%); background:#000; color:#fff; font-size:.75rem; padding:.1rem .4rem; border-radius:4px; }
.scale { display:flex; justify-content:space-between; color:#9ca3af; font-size:.875rem; }
input[type=range] { width:100%; appearance:none; height:.5rem; border-radius:8px; }
</style>
</head>
<body>{% block body %}{% endblock %}</body>
</html>"""

_SURVEY = """{% extends "base.html" %}
{% block meta %}<meta name="description" content="Share your feedback on our creative work.">{% endblock %}
{% block body %}
<div class="card" style="max-width:48rem;margin:auto">
<h1 style="text-align:center">Client Survey</h1>
<form id="survey">
  <label for="name">Name *</label>
  <input id="name" name="name" value="{{ state.name }}">
  <p class="error" data-error="name"></p>
  <label for="email">Email *</label>
  <input id="email" type="email" name="email" value="{{ state.email }}">
  <p class="error" data-error="email"></p>
  {% for q in questions %}
  <div class="question">
    <label for="{{ q.key }}">{{ q.label }}</label>
    <div class="slider">
      <input id="{{ q.key }}" type="range" name="{{ q.key }}" min="0" max="5" step="1"
             value="{{ q.slider.value }}" style="background: {{ q.slider.track_background }}">
      <div class="tooltip" style="left: {{ q.slider.tooltip_left }}">{{ q.slider.value }}</div>
    </div>
    <div class="scale">{% for r in ratings %}<span>{{ r }}</span>{% endfor %}</div>
    <p class="error" data-error="{{ q.key }}"></p>
  </div>
  {% endfor %}
  <label for="suggestions">Suggestions</label>
  <textarea id="suggestions" name="suggestions" style="min-height:150px;width:100%">{{ state.suggestions }}</textarea>
  <div style="text-align:center"><button type="submit">Submit</button></div>
</form>
</div>
<script>
const COLORS = {{ colors_json|safe }};
const RATING_KEYS = {{ keys_json|safe }};
function paint(input) {
  const v = parseInt(input.value, 10), pct = v / 5 * 100, c = COLORS[v];
  input.style.background = `linear-gradient(to right, ${c} 0%, ${c} ${pct}%, #d1d5db ${pct}%, #d1d5db 100%)`;
  const tip = input.parentElement.querySelector('.tooltip');
  tip.style.left = pct + '%';
  tip.textContent = v;
}
document.querySelectorAll('input[type=range]').forEach(i => i.addEventListener('input', () => paint(i)));
const form = document.getElementById('survey');
form.addEventListener('submit', async (e) => {
  e.preventDefault();
  const btn = form.querySelector('button');
  if (btn.disabled) return;
  const data = new FormData(form);
  const body = {name: data.get('name'), email: data.get('email'), suggestions: data.get('suggestions'), responses: {}};
  RATING_KEYS.forEach(k => body.responses[k] = data.get(k));
  document.querySelectorAll('[data-error]').forEach(p => p.textContent = '');
  btn.disabled = true; btn.textContent = 'Submitting...';
  try {
    const res = await fetch('/api/responses', {method: 'POST', headers: {'Content-Type': 'application/json'}, body: JSON.stringify(body)});
    const out = await res.json();
    if (res.status === 422 && out.detail && out.detail.errors) {
      Object.entries(out.detail.errors).forEach(([k, msg]) => {
        const p = document.querySelector(`[data-error="${k}"]`);
        if (p) p.textContent = msg;
      });
    } else if (!res.ok) {
      alert('Submission failed.');
    } else {
      window.location.href = out.redirect;
      return;
    }
  } catch (err) {
    alert('Submission failed.');
  }
  btn.disabled = false; btn.textContent = 'Submit';
});
</script>
{% endblock %}"""

_THANK_YOU = """{% extends "base.html" %}
{% block title %}Thank You{% endblock %}
{% block body %}
<div class="card" style="max-width:32rem;margin:4rem auto;text-align:center">
<h1>Thank You!</h1>
<p>Your feedback has been submitted successfully.</p>
</div>
{% endblock %}"""

_LOGIN = """{% extends "base.html" %}
{% block meta %}<meta name="robots" content="noindex, nofollow">{% endblock %}
{% block title %}Survey Responses – Dashboard{% endblock %}
{% block body %}
<div class="card" style="max-width:24rem;margin:4rem auto">
<h1>Login to view the survey report</h1>
<h2>Enter Password</h2>
<input id="password" type="password" placeholder="Enter dashboard password">
<p class="error" id="login-error">{{ error or "" }}</p>
<button id="access">Access</button>
</div>
<script>
document.getElementById('access').addEventListener('click', async () => {
  const res = await fetch('/api/dashboard/login', {method: 'POST', headers: {'Content-Type': 'application/json'},
    body: JSON.stringify({password: document.getElementById('password').value})});
  if (res.ok) { window.location.reload(); return; }
  const out = await res.json();
  document.getElementById('login-error').textContent = out.detail;
});
</script>
{% endblock %}"""

_DASHBOARD = """{% extends "base.html" %}
{% block meta %}<meta name="robots" content="noindex, nofollow">{% endblock %}
{% block title %}Survey Responses – Dashboard{% endblock %}
{% block body %}
<h1>Survey Responses</h1>
<form method="get" action="/responses">
  <input name="search" value="{{ state.search }}" placeholder="Search by name or email">
  <input type="hidden" name="view" value="{{ state.view_mode }}">
  <button type="submit">Search</button>
</form>
<p>
  <a href="{{ link(view=other_view, page=page.page) }}">Switch to {{ other_view }} view</a> |
  <a href="/api/responses/export.csv?search={{ state.search|urlencode }}">Export CSV</a> |
  <a href="/api/responses/export.pdf?search={{ state.search|urlencode }}">Export PDF</a>
</p>
{% if state.load_error %}<div class="card error" role="alert">{{ state.load_error }}</div>{% endif %}
{% if not page.items %}
  {% if not state.load_error %}<p class="muted">No responses found.</p>{% endif %}
{% elif state.view_mode == "card" %}
  {% for c in cards %}
  <div class="card">
    <h3><a href="{{ link(page=page.page, selected=c.id) }}">{{ c.name }}</a> <span class="muted">({{ c.email }})</span></h3>
    <p class="muted">Domain: {{ c.domain }} | {{ c.submitted_at }}</p>
    <ul>{% for x in c.ratings %}<li><strong>{{ x.label }}:</strong> {{ x.value }}</li>{% endfor %}</ul>
    {% if c.suggestions %}<div><strong>Suggestions:</strong><p>{{ c.suggestions }}</p></div>{% endif %}
  </div>
  {% endfor %}
{% else %}
  <table>
    <thead><tr>{% for col in table.columns %}<th>{{ col }}</th>{% endfor %}</tr></thead>
    <tbody>
    {% for row in table.rows %}
      <tr class="row" onclick="window.location.href='{{ link(page=page.page, selected=row.id) }}'">
        {% for cell in row.cells %}<td>{{ cell }}</td>{% endfor %}
      </tr>
    {% endfor %}
    </tbody>
  </table>
{% endif %}
{% if page.total_pages > 1 %}
<p>
  {% if page.page > 1 %}<a href="{{ link(page=page.page - 1) }}">Previous</a>{% endif %}
  {% for n in range(1, page.total_pages + 1) %}
    {% if n == page.page %}<strong aria-current="page">{{ n }}</strong>{% else %}<a href="{{ link(page=n) }}">{{ n }}</a>{% endif %}
  {% endfor %}
  <span class="muted">Page {{ page.page }} of {{ page.total_pages }}</span>
  {% if page.page < page.total_pages %}<a href="{{ link(page=page.page + 1) }}">Next</a>{% endif %}
</p>
{% endif %}
{% if detail %}
<div class="overlay" id="detail" role="dialog" aria-modal="true">
  <div class="card">
    <h2>{{ detail.name }}</h2>
    <p>{{ detail.email }} ({{ detail.domain }})</p>
    <p class="muted">{{ detail.submitted_at }}</p>
    <ul>{% for x in detail.ratings %}<li><strong>{{ x.label }}:</strong> {{ x.value }}</li>{% endfor %}</ul>
    <p><strong>Suggestions:</strong> {{ detail.suggestions or "-" }}</p>
    <a id="close-detail" href="{{ link(page=page.page) }}">Close</a>
  </div>
</div>
<script>
(function () {
  const modal = document.getElementById('detail');
  const closeUrl = document.getElementById('close-detail').href;
  const focusable = () => modal.querySelectorAll('button, [href], input, select, textarea, [tabindex]:not([tabindex="-1"])');
  document.addEventListener('keydown', (e) => {
    if (e.key === 'Escape') { window.location.href = closeUrl; return; }
    if (e.key !== 'Tab') return;
    const els = focusable(), first = els[0], last = els[els.length - 1];
    if (e.shiftKey && document.activeElement === first) { e.preventDefault(); last.focus(); }
    else if (!e.shiftKey && document.activeElement === last) { e.preventDefault(); first.focus(); }
  });
  focusable()[0].focus();
})();
</script>
{% endif %}
{% endblock %}"""

env = Environment(
    loader=DictLoader({
        "base.html": _BASE,
        "survey.html": _SURVEY,
        "thank_you.html": _THANK_YOU,
        "login.html": _LOGIN,
        "dashboard.html": _DASHBOARD,
    }),
    autoescape=select_autoescape(["html"]),
)


def render_survey(state: FormState | None = None) -> str:
    state = state or FormState.initial()
    questions = [
        {"key": k, "label": label, "slider": slider_display(state.responses.get(k))}
        for k, label in QUESTIONS
    ]
    return env.get_template("survey.html").render(
        state=state,
        questions=questions,
        ratings=RATINGS,
        colors_json=json.dumps(list(SLIDER_COLORS)),
        keys_json=json.dumps(list(RATING_KEYS)),
    )


def render_thank_you() -> str:
    return env.get_template("thank_you.html").render()


def render_login(error: str = "") -> str:
    return env.get_template("login.html").render(error=error)


def render_dashboard(state: DashboardState) -> str:
    def link(**params) -> str:
        q = {"search": state.search, "view": params.pop("view", state.view_mode)}
        q.update({k: v for k, v in params.items() if v is not None})
        return "/responses?" + urlencode({k: v for k, v in q.items() if v != ""})

    page = state.current_page
    return env.get_template("dashboard.html").render(
        state=state,
        page=page,
        cards=card_view(page.items),
        table=table_view(page.items),
        detail=detail_view(state.selected) if state.selected is not None else None,
        other_view="table" if state.view_mode == "card" else "card",
        link=link,
    )
