"""
main.py
--------
Entry point for the Invoice Design Engine.

Reads an invoice and a customer record (JSON), runs the design pipeline,
prints a summary and writes output to the outputs/ folder.

Usage (from the project root):
    python main.py --invoice invoice.json --customer customer.json

    # With optional arguments:
    python main.py --invoice invoice.json --customer customer.json --industry finance
    python main.py --invoice invoice.json --customer customer.json --urgency high
"""

import sys
import os
import argparse
import json
import logging
from datetime import datetime

# Ensure project root is on path (for VS Code runs from any working directory)
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from core.errors import InvoiceDesignError
from core.models import Customer, Industry, Invoice, PaymentUrgency, BrandPersonality
from pipeline import InvoiceDesignPipeline, DesignPlan


# =============================================================================
# LOGGING SETUP
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("main")


# =============================================================================
# ARGUMENT PARSING
# =============================================================================

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Invoice Design Engine — Recommend, personalize and score invoice templates."
    )
    parser.add_argument("--invoice", type=str, required=True, help="Path to invoice JSON.")
    parser.add_argument("--customer", type=str, required=True, help="Path to customer JSON.")
    parser.add_argument(
        "--industry", type=str, default=None, choices=[i.value for i in Industry],
        help="Customer industry, used for template and palette matching.",
    )
    parser.add_argument(
        "--urgency", type=str, default=None, choices=[u.value for u in PaymentUrgency],
        help="Payment urgency. 'high' adds payment and due-date emphasis.",
    )
    parser.add_argument(
        "--brand-personality", type=str, default=None, choices=[b.value for b in BrandPersonality],
        help="Brand personality preference.",
    )
    parser.add_argument(
        "--output-dir", type=str, default=None,
        help="Output directory. Defaults to outputs/ in project root.",
    )
    return parser.parse_args(argv)


def _read_json(path: str) -> dict:
    with open(path, "r") as f:
        return json.load(f)


# =============================================================================
# MAIN
# =============================================================================

def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    output_dir = args.output_dir or os.path.join(PROJECT_ROOT, "outputs")
    os.makedirs(output_dir, exist_ok=True)

    for path in (args.invoice, args.customer):
        if not os.path.exists(path):
            logger.error(f"Input file not found: {path}")
            return 1

    preferences = {
        "industry": args.industry,
        "payment_urgency": args.urgency,
        "brand_personality": args.brand_personality,
    }

    try:
        invoice = Invoice.from_dict(_read_json(args.invoice))
        customer = Customer.from_dict(_read_json(args.customer))
        logger.info(f"Loaded invoice {invoice.invoice_number} for customer {customer.name}.")

        pipeline = InvoiceDesignPipeline()
        plan = pipeline.run(invoice, customer, preferences)
    except InvoiceDesignError as e:
        logger.error(f"Design failed: {e}")
        return 1

    # --- Output: recommendations + optimization report ---
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    recs_path = os.path.join(output_dir, f"recommendations_{timestamp}.csv")
    pipeline.recommendations_frame(plan.recommendation).to_csv(recs_path, index=False)
    logger.info(f"Recommendations saved to: {recs_path}")

    report_path = os.path.join(output_dir, f"optimization_{timestamp}.json")
    with open(report_path, "w") as f:
        json.dump(
            {
                "template_id": plan.template.id,
                "customizations": plan.recommendation.customizations,
                "personalization": plan.personalization.to_dict(),
                "optimization": plan.report.to_dict(),
            },
            f,
            indent=2,
        )
    logger.info(f"Optimization report saved to: {report_path}")

    _print_summary(plan)
    return 0


def _print_summary(plan: DesignPlan):
    """Prints a clean summary to the console."""
    print("\n" + "=" * 80)
    print("  INVOICE DESIGN SUMMARY")
    print("=" * 80)

    print("\n  Recommended Templates:")
    print("  " + "-" * 60)
    for rank, s in enumerate(plan.recommendation.scored, start=1):
        print(f"    {rank}. {s.template.name:30s}  score {s.score:>7.1f}  ({s.template.category.value})")

    if plan.recommendation.reasoning:
        print("\n  Why the top template:")
        for reason in plan.recommendation.reasoning:
            print(f"    - {reason}")

    report = plan.report
    print("\n  Optimization:")
    print("  " + "-" * 60)
    print(f"    Readability        {report.readability.score:>6.1f} / 10")
    print(f"    Predicted payment  {report.conversion.predicted_payment_rate:>6.1f} %")
    print(f"    Brand consistency  {report.branding.consistency_score:>6.1f} / 10")
    print(f"    WCAG compliance    {report.accessibility.wcag_compliance.value:>6s}")
    print(f"    Overall            {report.optimization_score:>6.2f} / 10")

    print(f"\n  Greeting: {plan.personalization.greeting}")
    print("=" * 80 + "\n")


if __name__ == "__main__":
    sys.exit(main())
