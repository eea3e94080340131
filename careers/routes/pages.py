"""Marketing pages, SEO files and health checks."""

from __future__ import annotations

import os

from flask import Blueprint, Response, abort, jsonify, render_template, request

from careers.services import mail_service
from careers.services.position_catalog import get_position, list_positions
from careers.utils.auth import tokens_match

bp = Blueprint("pages", __name__)

DEFAULT_SITE_URL = "https://www.corecrewlogistics.com"


def _site_url() -> str:
    return os.getenv("SITE_URL", DEFAULT_SITE_URL).rstrip("/")


@bp.get("/")
def index():
    return render_template("index.html", positions=list_positions())


@bp.get("/about")
def about():
    return render_template("about.html")


@bp.get("/services")
def services():
    return render_template("services.html")


@bp.get("/contact")
def contact():
    return render_template("contact.html")


@bp.get("/jobs")
def jobs():
    return render_template("jobs.html", positions=list_positions())


@bp.get("/jobs/<key>")
def job_detail(key: str):
    position = get_position(key)
    if position is None:
        abort(404)
    return render_template("job_detail.html", position=position)


@bp.get("/robots.txt")
def robots():
    body = f"User-agent: *\nAllow: /\nSitemap: {_site_url()}/sitemap.xml"
    return Response(body, mimetype="text/plain")


@bp.get("/sitemap.xml")
def sitemap():
    site = _site_url()
    body = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        f"  <url><loc>{site}/</loc><changefreq>weekly</changefreq><priority>1.0</priority></url>\n"
        f"  <url><loc>{site}/apply</loc><changefreq>weekly</changefreq><priority>0.9</priority></url>\n"
        f"  <url><loc>{site}/jobs</loc><changefreq>weekly</changefreq><priority>0.8</priority></url>\n"
        "</urlset>\n"
    )
    return Response(body, mimetype="application/xml")


@bp.get("/healthz")
def healthz():
    return jsonify(ok=True), 200


@bp.get("/healthz/email")
def healthz_email():
    """Probe the SMTP relay; gated by HEALTHZ_TOKEN."""
    expected = os.getenv("HEALTHZ_TOKEN")
    if not expected:
        abort(404)

    provided = request.args.get("token") or request.headers.get("X-Healthz-Token", "")
    if not tokens_match(expected, provided):
        return jsonify(ok=False, error="Forbidden."), 403

    result = mail_service.probe()
    return jsonify(ok=result.ok, error=result.error), 200 if result.ok else 503
