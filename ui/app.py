"""
app.py
-------
Streamlit application entry point for the Invoice Design Engine.

Run from the project root:
    streamlit run ui/app.py

Architecture:
    - The pipeline (and its template catalog) is built once and cached in
      st.session_state.
    - Sidebar collects the invoice, customer and preference inputs.
    - The Design Review view renders the resulting plan.
"""

import sys
import os
from datetime import datetime

import streamlit as st

# Ensure project root is on path regardless of where streamlit is invoked
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from core.errors import InvoiceDesignError
from core.models import Customer, Industry, Invoice, PaymentUrgency
from pipeline import InvoiceDesignPipeline
from ui.design_view import render_design_view


# =============================================================================
# PAGE CONFIG
# =============================================================================

st.set_page_config(
    page_title="Invoice Design",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stApp {
        font-family: 'Segoe UI', system-ui, sans-serif;
        background-color: #f4f6f9;
    }
    .main-header {
        background: linear-gradient(135deg, #1a2332 0%, #2c3e50 100%);
        color: white;
        padding: 20px 30px;
        border-radius: 12px;
        margin-bottom: 20px;
    }
    .main-header h1 { margin: 0; font-size: 24px; font-weight: 600; }
    .main-header p { margin: 4px 0 0 0; opacity: 0.7; font-size: 13px; }
    .section-title {
        font-size: 13px;
        font-weight: 700;
        color: #2c3e50;
        text-transform: uppercase;
        letter-spacing: 0.6px;
        margin: 18px 0 8px 0;
    }
</style>
""", unsafe_allow_html=True)


# =============================================================================
# STATE
# =============================================================================

if "pipeline" not in st.session_state:
    st.session_state.pipeline = InvoiceDesignPipeline()

pipeline: InvoiceDesignPipeline = st.session_state.pipeline


# =============================================================================
# SIDEBAR INPUTS
# =============================================================================

with st.sidebar:
    st.header("Invoice")
    invoice_number = st.text_input("Invoice number", value="INV-1001")
    total_amount = st.number_input("Total amount", min_value=0.0, value=12500.0, step=500.0)

    st.header("Customer")
    customer_name = st.text_input("Name", value="Acme Corp")
    payment_terms = st.number_input("Payment terms (days)", min_value=0, value=30, step=1)
    is_repeat = st.checkbox("Repeat customer", value=True)
    is_fast = st.checkbox("Consistently fast payer", value=False)
    avg_days = st.number_input("Average days to pay", min_value=0.0, value=28.0)
    avg_amount = st.number_input("Average invoice amount", min_value=0.0, value=5000.0)
    preferred = st.text_input("Preferred payment method", value="ACH")

    st.header("Preferences")
    industry = st.selectbox("Industry", ["—"] + [i.value for i in Industry])
    urgency = st.selectbox("Payment urgency", ["—"] + [u.value for u in PaymentUrgency])

invoice = Invoice(
    id=invoice_number,
    invoice_number=invoice_number,
    total_amount=float(total_amount),
    created_at=datetime.now(),
)
customer = Customer(
    id=customer_name,
    name=customer_name,
    payment_terms=int(payment_terms),
    is_repeat_customer=is_repeat,
    is_consistently_fast_payer=is_fast,
    average_days_to_pay=avg_days,
    preferred_payment_method=preferred or None,
    average_invoice_amount=avg_amount or None,
)
preferences = {
    "industry": None if industry == "—" else industry,
    "payment_urgency": None if urgency == "—" else urgency,
}

try:
    plan = pipeline.run(invoice, customer, preferences)
except InvoiceDesignError as e:
    st.error(str(e))
    st.stop()

render_design_view(plan)
