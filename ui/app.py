"""Streamlit storefront - destinations, checkout and purchase status.

Run with: streamlit run ui/app.py
"""

# Add project root to sys.path for imports to work when run via streamlit
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import os  # noqa: E402
import time  # noqa: E402

import httpx  # noqa: E402
import streamlit as st  # noqa: E402
import streamlit.components.v1 as components  # noqa: E402

from ui.helpers import (  # noqa: E402
    CheckoutState,
    CheckoutStep,
    apply_promo_code,
    build_status_view,
    create_payment_intent,
    fetch_pricing,
    fetch_status,
    finish_payment,
    polling_window,
    should_keep_polling,
    submit_email,
)

# Configuration
BACKEND_URL = os.environ.get("BACKEND_URL", "http://localhost:8000")
STRIPE_PUBLISHABLE_KEY = os.environ.get("STRIPE_PUBLISHABLE_KEY", "")
PRODUCT_TYPE = "premium_itinerary"

# Page config
st.set_page_config(page_title="Deep Travel Collections", page_icon="✈️", layout="wide")

# Initialize session state
if "checkout" not in st.session_state:
    st.session_state.checkout = CheckoutState()
if "poll_started" not in st.session_state:
    st.session_state.poll_started = None


@st.cache_data(ttl=60)
def load_destinations() -> list[dict]:
    response = httpx.get(f"{BACKEND_URL}/destinations", timeout=10.0)
    response.raise_for_status()
    return response.json()


@st.cache_data(ttl=60)
def load_pricing() -> dict:
    return fetch_pricing(BACKEND_URL)


def render_payment_form(client_secret: str) -> None:
    """Embed the Stripe Payment Element for a client secret."""
    components.html(
        f"""
        <script src="https://js.stripe.com/v3/"></script>
        <form id="payment-form">
          <div id="payment-element"></div>
          <button id="submit" style="margin-top:12px">Pay now</button>
          <div id="message"></div>
        </form>
        <script>
          const stripe = Stripe("{STRIPE_PUBLISHABLE_KEY}");
          const elements = stripe.elements({{clientSecret: "{client_secret}"}});
          elements.create("payment").mount("#payment-element");
          document.getElementById("payment-form").addEventListener("submit", async (e) => {{
            e.preventDefault();
            const {{error}} = await stripe.confirmPayment({{elements, redirect: "if_required"}});
            document.getElementById("message").textContent =
              error ? error.message : "Payment received - press Continue below.";
          }});
        </script>
        """,
        height=420,
    )


def render_status(session_id: str, pricing: dict) -> None:
    """Poll and render fulfillment progress for a purchase."""
    try:
        status = fetch_status(BACKEND_URL, session_id)
    except httpx.HTTPError as e:
        st.error(f"❌ Could not load order status: {e}")
        return

    view = build_status_view(status)
    st.markdown(f"**{view['message']}**")

    if view["show_progress"]:
        st.progress(view["progress"] / 100)
        for label, done in view["checklist"]:
            st.markdown(f"{'✅' if done else '⬜'} {label}")
    if view["show_download"]:
        st.success("🎉 Your itinerary is ready!")
        st.link_button("⬇️ Download PDF", f"{BACKEND_URL}{view['download_url']}")
    if view["failed"]:
        st.error("We encountered a problem generating your itinerary. Please contact support.")

    started = st.session_state.poll_started or time.monotonic()
    st.session_state.poll_started = started
    interval_sec, timeout_sec = polling_window(pricing)
    if should_keep_polling(view["status"], time.monotonic() - started, timeout_sec):
        time.sleep(interval_sec)
        st.rerun()
    elif not view["show_download"] and not view["failed"]:
        st.warning("This is taking longer than expected. We'll email you when it's ready.")


st.title("✈️ Deep Travel Collections")
st.divider()

col_left, col_right = st.columns([1.2, 1])

# =============================================================================
# LEFT COLUMN - DESTINATIONS
# =============================================================================
with col_left:
    st.subheader("🌍 Destinations")
    try:
        destinations = load_destinations()
    except httpx.HTTPError as e:
        destinations = []
        st.error(f"❌ Could not load destinations: {e}")

    options = {f"{d['name']}, {d['country']}": d for d in destinations}
    choice = st.selectbox("Choose a destination", list(options)) if options else None
    destination = options.get(choice) if choice else None
    if destination:
        st.markdown(destination.get("description", ""))
        if destination.get("best_time_to_visit"):
            st.caption(f"Best time to visit: {destination['best_time_to_visit']}")

# =============================================================================
# RIGHT COLUMN - CHECKOUT
# =============================================================================
with col_right:
    st.subheader("🛒 Premium Itinerary")
    checkout: CheckoutState = st.session_state.checkout

    try:
        pricing = load_pricing()
    except httpx.HTTPError as e:
        pricing = None
        st.error(f"❌ Pricing unavailable: {e}")

    if pricing and destination:
        promo_code = st.text_input("Promo code", value="")
        price = apply_promo_code(pricing, PRODUCT_TYPE, promo_code)
        if price.original_label:
            st.markdown(f"### {price.original_label} {price.label}")
        else:
            st.markdown(f"### {price.label}")
        if price.message:
            (st.success if price.promo_applied else st.warning)(price.message)

        if checkout.step in (CheckoutStep.collecting_email, CheckoutStep.awaiting_client_secret):
            email = st.text_input("Email for delivery *", value=checkout.email)
            if st.button("Continue to payment", type="primary", use_container_width=True):
                st.session_state.checkout = submit_email(
                    checkout,
                    email,
                    lambda address: create_payment_intent(
                        BACKEND_URL,
                        address,
                        price.amount,
                        PRODUCT_TYPE,
                        destination_id=destination["id"],
                        promo_code=promo_code if price.promo_applied else None,
                    ),
                )
                st.rerun()
            if checkout.error:
                st.error(f"❌ {checkout.error}")

        elif checkout.step == CheckoutStep.rendering_payment_form and checkout.client_secret:
            render_payment_form(checkout.client_secret)
            if st.button("Continue", type="primary"):
                try:
                    httpx.post(
                        f"{BACKEND_URL}/payments/record-payment",
                        json={"paymentIntentId": checkout.payment_intent_id},
                        timeout=30.0,
                    ).raise_for_status()
                    st.session_state.checkout = finish_payment(checkout, True)
                except httpx.HTTPError:
                    st.session_state.checkout = finish_payment(
                        checkout, False, "Payment was not completed"
                    )
                st.rerun()

        elif checkout.step == CheckoutStep.succeeded and checkout.payment_intent_id:
            render_status(checkout.payment_intent_id, pricing)

        elif checkout.step == CheckoutStep.failed:
            st.error(f"❌ {checkout.error}")
            if st.button("Start over"):
                st.session_state.checkout = CheckoutState()
                st.rerun()
    elif pricing:
        st.info("👈 Pick a destination to buy its premium itinerary.")
