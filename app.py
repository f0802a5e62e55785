import json
import logging

import stripe
from flask import Flask, request, jsonify

from config import Settings, configure_logging, load_settings
from emails import EmailError, ResendMailer, contact_email, customer_order_email, merchant_order_email
from payments import CHECKOUT_COMPLETED, CheckoutCompleted, InvalidCart, build_line_items

log = logging.getLogger(__name__)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def create_app(settings: Settings = None, mailer=None) -> Flask:
    settings = settings or load_settings()
    stripe.api_key = settings.stripe_secret_key
    mailer = mailer or ResendMailer(settings.resend_api_key)

    # Flask app
    app = Flask(__name__)

    @app.after_request
    def add_cors_headers(resp):
        origin = request.headers.get("Origin")
        if origin and origin in settings.allowed_origins:
            resp.headers["Access-Control-Allow-Origin"] = origin
            resp.headers["Access-Control-Allow-Headers"] = "Content-Type"
            resp.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
            resp.headers["Vary"] = "Origin"
        return resp

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    # Webhook reads the raw body, the signature is over the exact bytes Stripe sent
    @app.post("/webhooks/stripe")
    def stripe_webhook():
        payload = request.get_data()
        sig_header = request.headers.get("Stripe-Signature", "")
        try:
            stripe.Webhook.construct_event(payload, sig_header, settings.stripe_webhook_secret)
            event = json.loads(payload)
        except (ValueError, stripe.SignatureVerificationError) as e:
            log.warning("webhook signature error: %s", e)
            return f"Webhook Error: {e}", 400

        if not isinstance(event, dict) or event.get("type") != CHECKOUT_COMPLETED:
            return jsonify({"received": True})

        data = event.get("data")
        session = data.get("object") if isinstance(data, dict) else None
        order = CheckoutCompleted.from_session(session if isinstance(session, dict) else {})

        # Verified events are always acknowledged, email failures are only logged
        try:
            mailer.send(merchant_order_email(settings, order))
            if order.customer_email:
                mailer.send(customer_order_email(settings, order))
            log.info("order %s paid (%s)", order.session_id, order.total_text)
        except Exception:
            log.exception("webhook handler error for session %s", order.session_id)

        return jsonify({"received": True})

    @app.post("/api/contact")
    def contact():
        data = _json_body()
        name = str(data.get("name") or "").strip()
        email = str(data.get("email") or "").strip()
        details = str(data.get("details") or "").strip()

        if not name or not email or not details:
            return jsonify({"ok": False, "error": "Missing fields"}), 400

        try:
            mailer.send(contact_email(settings, name, email, details))
        except EmailError:
            log.exception("contact email failed")
            return jsonify({"ok": False, "error": "Failed to send"}), 500

        return jsonify({"ok": True})

    @app.post("/api/create-checkout-session")
    def create_checkout_session():
        data = _json_body()
        cart = data.get("cart")

        if not cart:
            return jsonify({"ok": False, "error": "Cart empty"}), 400

        try:
            line_items = build_line_items(cart, settings.currency)
        except InvalidCart as e:
            return jsonify({"ok": False, "error": str(e)}), 400

        try:
            session = stripe.checkout.Session.create(
                mode="payment",
                line_items=line_items,
                shipping_address_collection={"allowed_countries": list(settings.shipping_countries)},
                phone_number_collection={"enabled": True},
                success_url=f"{settings.client_url}/success.html?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{settings.client_url}/cancel.html",
                metadata={"cart_json": json.dumps(cart, separators=(",", ":"))},
            )
        except stripe.StripeError:
            log.exception("create checkout session failed")
            return jsonify({"ok": False, "error": "Failed to start checkout"}), 500

        log.info("checkout session %s created with %d line items", session.id, len(line_items))
        return jsonify({"ok": True, "url": session.url})

    return app


app = create_app()

if __name__ == "__main__":
    settings = load_settings()
    configure_logging(settings.log_level)
    log.info("API running on port %s", settings.port)
    app.run(port=settings.port)
