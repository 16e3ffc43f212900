"""
Flask web server for Brand Facts.

Routes
──────
GET  /            Brand form + idle display
POST /            Validate the form, find facts, render results or error
POST /api/facts   JSON: {"name"?: str, "url": str} → {"brand": {"name", "url", "inferred"}, "facts": [...]}
"""

from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv
from flask import Blueprint, Flask, current_app, jsonify, render_template, request
from markupsafe import Markup

# Allow running as `python web/app.py` from the project root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

load_dotenv()

from config.settings import Settings
from core.errors import (
    ApiError,
    BrandFactsError,
    InvalidInputError,
    InvalidUrlError,
    NoFactsFoundError,
)
from core.facts import FactFinder
from core.formatter import clean_content, parse_source, render_fragments
from core.forms import BrandForm
from core.models import Brand
from core.state import Failure, FactsView, Idle, Loading, RequestState, Success

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

bp = Blueprint("facts", __name__)


# ── Display ────────────────────────────────────────────────────────────────


def source_html(source: str) -> Markup:
    """Jinja filter: a fact's source text as safe, clickable HTML."""
    return render_fragments(parse_source(source))


def render_display(state: RequestState) -> Markup:
    """Render the results panel for *state* (needs an app context)."""
    if isinstance(state, Loading):
        kind = "loading"
    elif isinstance(state, Failure):
        kind = "error"
    elif isinstance(state, Success) and state.facts:
        kind = "facts"
    else:
        kind = "empty"
    return Markup(render_template("_display.html", kind=kind, state=state))


def _render_page(form: BrandForm, errors: dict[str, str], state: RequestState) -> str:
    return render_template(
        "index.html",
        form=form,
        errors=errors,
        display=render_display(state),
        loading_panel=render_display(Loading()),
    )


def _finder() -> FactFinder:
    return current_app.extensions["fact_finder"]


# ── UI ─────────────────────────────────────────────────────────────────────


@bp.route("/")
def index():
    return _render_page(BrandForm(), {}, Idle())


@bp.route("/", methods=["POST"])
def submit():
    """Handle a form submission.

    Inline validation errors re-render the form without calling the model.
    """
    form = BrandForm.from_mapping(request.form)
    errors = form.validate()
    if errors:
        return _render_page(form, errors, Idle()), 400

    name, url = form.name.strip(), form.url.strip()
    view = FactsView()
    ticket = view.start()

    try:
        facts = _finder().get_brand_facts(name, url)
    except NoFactsFoundError:
        view.succeed(ticket, Brand(name=name, url=url), [])
    except BrandFactsError as exc:
        logger.warning("Fact lookup failed for url=%r: %s", url, exc)
        view.fail(ticket, str(exc) or "Failed to generate facts")
    else:
        view.succeed(ticket, Brand(name=name, url=url), facts)

    return _render_page(form, {}, view.state)


# ── JSON API ───────────────────────────────────────────────────────────────


@bp.route("/api/facts", methods=["POST"])
def facts_api():
    """Return facts for ``{"name"?: str, "url": str}``.

    Status codes: 400 invalid input, 404 no facts, 502 model/API failure.
    """
    payload = request.get_json(silent=True) or {}
    name = (payload.get("name") or "").strip() or None
    url = payload.get("url") or ""

    try:
        brand, facts = _finder().lookup(name, url)
    except (InvalidInputError, InvalidUrlError) as exc:
        return jsonify({"error": str(exc)}), 400
    except NoFactsFoundError as exc:
        return jsonify({"error": str(exc)}), 404
    except ApiError as exc:
        return jsonify({"error": str(exc)}), 502

    return jsonify(
        {
            "brand": {"name": brand.name, "url": brand.url, "inferred": brand.inferred},
            "facts": [f.model_dump() for f in facts],
        }
    )


# ── App factory ────────────────────────────────────────────────────────────


def create_app(settings: Settings | None = None, finder: FactFinder | None = None) -> Flask:
    """Build the Flask app.

    Args:
        settings: Configuration; read from the environment when omitted.
        finder: Fact finder to use; built from *settings* when omitted.

    Raises:
        ValueError: If a required setting (the Anthropic API key) is missing.
    """
    settings = settings or Settings()
    settings.validate()

    app = Flask(__name__)
    app.config["SETTINGS"] = settings
    app.extensions["fact_finder"] = finder or FactFinder(settings)
    app.add_template_filter(clean_content, "clean_content")
    app.add_template_filter(source_html, "source_html")
    app.register_blueprint(bp)
    return app


# ── Entry point ────────────────────────────────────────────────────────────

if __name__ == "__main__":
    settings = Settings()
    create_app(settings).run(debug=settings.debug, host="0.0.0.0", port=settings.port)
