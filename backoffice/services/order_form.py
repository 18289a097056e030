"""Bon de commande PDF (fpdf2, polices de base : latin-1 uniquement)."""

from __future__ import annotations

from fpdf import FPDF

from backoffice.app.db.models.models_v1 import Order


def _latin1(text) -> str:
    return str(text if text is not None else "").encode("latin-1", "replace").decode("latin-1")


def generate_order_pdf(order: Order) -> bytes:
    pdf = FPDF()
    pdf.add_page()

    pdf.set_font("Helvetica", "B", 16)
    pdf.cell(0, 10, _latin1(f"BON DE COMMANDE {order.order_number}"), new_x="LMARGIN", new_y="NEXT", align="C")
    pdf.ln(6)

    pdf.set_font("Helvetica", size=11)
    header = [
        f"Date : {order.order_date.isoformat()}",
        f"Fournisseur : {order.supplier.name if order.supplier else '-'}",
        f"Client : {order.client.name if order.client else '-'}",
        f"Transitaire : {order.transitaire.name if order.transitaire else '-'}",
        f"Paiement : {order.payment_type}",
    ]
    for line in header:
        pdf.cell(0, 8, _latin1(line), new_x="LMARGIN", new_y="NEXT")
    pdf.ln(4)

    # tableau des lignes
    widths = (30, 70, 20, 30, 30)
    pdf.set_font("Helvetica", "B", 10)
    for width, title in zip(widths, ("SKU", "Produit", "Qté", "PU HT", "Total HT")):
        pdf.cell(width, 8, _latin1(title), border=1)
    pdf.ln()

    pdf.set_font("Helvetica", size=10)
    for ln in order.lines:
        cells = (
            ln.product.sku,
            ln.product.name[:40],
            ln.quantity,
            f"{ln.unit_price:.2f}",
            f"{ln.total_price:.2f}",
        )
        for width, value in zip(widths, cells):
            pdf.cell(width, 8, _latin1(value), border=1)
        pdf.ln()

    pdf.ln(4)
    pdf.set_font("Helvetica", "B", 11)
    pdf.cell(0, 8, _latin1(f"Total HT : {order.total_ht:.2f} EUR"), new_x="LMARGIN", new_y="NEXT", align="R")
    pdf.cell(0, 8, _latin1(f"TVA : {order.tva_rate}%"), new_x="LMARGIN", new_y="NEXT", align="R")
    pdf.cell(0, 8, _latin1(f"Total TTC : {order.total_ttc:.2f} EUR"), new_x="LMARGIN", new_y="NEXT", align="R")

    return bytes(pdf.output())
