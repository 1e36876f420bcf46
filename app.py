# app.py
import io
import logging
from typing import Callable, Optional

from flask import Flask, Request, abort, jsonify, request, send_file

from config import Config
from models import BusinessProfile, Invoice
from output import PDF_MIMETYPE, PreviewRegistry, invoice_filename
from pdf_service import render_invoice_pdf

logger = logging.getLogger(__name__)


# -----------------------------
# Helpers
# -----------------------------
def _allow_all(req: Request) -> bool:
    return True


def _parse_payload(default_currency: str) -> tuple[Invoice, BusinessProfile]:
    body = request.get_json(silent=True) or {}
    raw_invoice = body.get("invoice")
    raw_profile = body.get("profile")
    if not isinstance(raw_invoice, dict) or not isinstance(raw_profile, dict):
        abort(400, description="Expected JSON body with 'invoice' and 'profile' objects.")
    try:
        inv = Invoice.from_dict(raw_invoice, default_currency=default_currency)
        profile = BusinessProfile.from_dict(raw_profile)
    except (AttributeError, TypeError, ValueError) as e:
        abort(400, description=str(e))
    return inv, profile


# -----------------------------
# App factory
# -----------------------------
def create_app(
    authorize: Optional[Callable[[Request], bool]] = None,
    previews: Optional[PreviewRegistry] = None,
):
    """
    `authorize` is checked on every request (admin allowlists, plan checks,
    ...). It is supplied by the host application; the default allows all.
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    logging.basicConfig(level=getattr(logging, str(Config.LOG_LEVEL).upper(), logging.INFO))

    check = authorize or _allow_all
    registry = previews if previews is not None else PreviewRegistry()
    app.extensions["invoice_previews"] = registry

    @app.before_request
    def _authorize():
        if not check(request):
            abort(403)

    @app.errorhandler(500)
    def _generation_failed(e):
        return jsonify(error="document generation failed"), 500

    # -----------------------------
    # PDF routes
    # -----------------------------
    @app.route("/invoices/pdf", methods=["POST"])
    def invoice_pdf_download():
        inv, profile = _parse_payload(app.config["DEFAULT_CURRENCY"])
        data = render_invoice_pdf(inv, profile)
        return send_file(
            io.BytesIO(data),
            as_attachment=True,
            download_name=invoice_filename(inv),
            mimetype=PDF_MIMETYPE,
        )

    @app.route("/invoices/preview", methods=["POST"])
    def invoice_preview_open():
        inv, profile = _parse_payload(app.config["DEFAULT_CURRENCY"])
        handle = registry.open(inv, profile)
        return jsonify(token=handle.token, url=handle.url), 201

    @app.route("/previews/<token>", methods=["GET"])
    def invoice_preview_show(token):
        handle = registry.get(token)
        if handle is None:
            abort(404)
        return send_file(
            io.BytesIO(handle.data),
            as_attachment=False,
            download_name=handle.filename,
            mimetype=PDF_MIMETYPE,
        )

    @app.route("/previews/<token>", methods=["DELETE"])
    def invoice_preview_close(token):
        if not registry.revoke(token):
            abort(404)
        return "", 204

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True)
