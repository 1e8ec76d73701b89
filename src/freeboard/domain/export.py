"""Export formatting for transactions and reports."""

import csv
import html
import io
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from freeboard.domain.entities import (
    ReportBundle,
    Transaction,
    TransactionFilters,
    TransactionType,
)
from freeboard.domain.errors import ValidationError, invalid_choice
from freeboard.utils.amount_parser import coerce_decimal, round_cents
from freeboard.utils.clock import SystemClock

CSV_DELIMITERS = (";", ",")

TRANSACTION_HEADERS = (
    "ID",
    "Date",
    "Description",
    "Client",
    "Catégorie",
    "Type",
    "Montant (€)",
    "Statut",
)

REPORT_HEADERS = ("Date", "Type", "Client", "Montant", "Catégorie", "Description")

STATUS_CLASSES = {
    "paid": "paid",
    "payé": "paid",
    "pending": "pending",
    "en attente": "pending",
}

HTML_STYLE = """\
        body { font-family: Arial, sans-serif; margin: 20px; color: #333; }
        .header { text-align: center; margin-bottom: 30px; border-bottom: 2px solid #3b82f6; padding-bottom: 20px; }
        .summary { background: #f8fafc; padding: 20px; border-radius: 8px; margin-bottom: 30px; }
        .summary-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); gap: 15px; }
        .summary-item { text-align: center; }
        .summary-value { font-size: 24px; font-weight: bold; margin-top: 5px; }
        .income { color: #10b981; }
        .expense { color: #ef4444; }
        .balance { color: #3b82f6; }
        table { width: 100%; border-collapse: collapse; margin-top: 20px; }
        th, td { padding: 12px; text-align: left; border-bottom: 1px solid #e5e7eb; }
        th { background-color: #f9fafb; font-weight: 600; }
        .amount-income { color: #10b981; font-weight: 600; }
        .amount-expense { color: #ef4444; font-weight: 600; }
        .status-paid { background: #dcfce7; color: #166534; padding: 4px 8px; border-radius: 4px; font-size: 12px; }
        .status-pending { background: #fef3c7; color: #92400e; padding: 4px 8px; border-radius: 4px; font-size: 12px; }
        .status-debited { background: #dbeafe; color: #1e40af; padding: 4px 8px; border-radius: 4px; font-size: 12px; }
        .filters { background: #eff6ff; padding: 15px; border-radius: 6px; margin-bottom: 20px; font-size: 14px; }
        .footer { margin-top: 30px; text-align: center; color: #6b7280; font-size: 12px; }"""


def format_french_date(value: date) -> str:
    """Format a date as DD/MM/YYYY."""
    return value.strftime("%d/%m/%Y")


def format_number(amount, decimals: int = 2) -> str:
    """Format a number the French way: space grouping and decimal comma."""
    amount = coerce_decimal(amount)
    text = f"{abs(amount):,.{decimals}f}".replace(",", " ").replace(".", ",")
    return f"-{text}" if amount < 0 else text


def format_currency(amount) -> str:
    """Format an amount in euros, e.g. 1 234,56 €."""
    return f"{format_number(amount)} €"


def type_label(txn_type: TransactionType) -> str:
    return "Revenu" if txn_type == TransactionType.INCOME else "Dépense"


def transaction_totals(transactions: Sequence[Transaction]) -> tuple[Decimal, Decimal]:
    """Return (total income, total absolute expenses)."""
    income = sum(
        (t.amount for t in transactions if t.type == TransactionType.INCOME), Decimal("0")
    )
    expenses = sum(
        (abs(t.amount) for t in transactions if t.type == TransactionType.EXPENSE), Decimal("0")
    )
    return income, expenses


def _plural(count: int) -> str:
    return "s" if count > 1 else ""


class ExportFormatter:
    """Serialize transactions and report bundles to CSV, HTML or plain text."""

    def __init__(self, clock=None):
        """Initialize export formatter.

        Args:
            clock: Object with a today() method, used for generation dates
        """
        self.clock = clock or SystemClock()

    def generate_csv_content(self, transactions: Sequence[Transaction], delimiter: str = ";") -> str:
        """Render transactions as a spreadsheet-friendly CSV document.

        The document has one header row, one row per transaction, a blank
        line, a "RÉSUMÉ" marker and four summary rows. Every field of a
        transaction row is quoted, so labels may contain the delimiter.

        Args:
            transactions: Transactions to export
            delimiter: Either ";" or ","

        Returns:
            CSV text with "\\n" line endings

        Raises:
            ValidationError: If the delimiter is not supported
        """
        if delimiter not in CSV_DELIMITERS:
            raise ValidationError(invalid_choice("delimiter", delimiter, list(CSV_DELIMITERS)))

        buffer = io.StringIO()
        writer = csv.writer(buffer, delimiter=delimiter, quoting=csv.QUOTE_ALL, lineterminator="\n")
        buffer.write(delimiter.join(TRANSACTION_HEADERS) + "\n")
        for txn in transactions:
            writer.writerow(
                [
                    txn.id,
                    format_french_date(txn.date),
                    txn.description or "",
                    txn.client_name or "-",
                    txn.category,
                    type_label(txn.type),
                    f"{round_cents(txn.amount):.2f}",
                    txn.status or "-",
                ]
            )

        income, expenses = transaction_totals(transactions)
        summary = [
            "RÉSUMÉ",
            f"Total Revenus{delimiter}{income:.2f}€",
            f"Total Dépenses{delimiter}{expenses:.2f}€",
            f"Solde Net{delimiter}{income - expenses:.2f}€",
            f"Nombre de transactions{delimiter}{len(transactions)}",
        ]
        return buffer.getvalue() + "\n" + "\n".join(summary)

    def generate_html_content(
        self,
        transactions: Sequence[Transaction],
        filters: Optional[TransactionFilters] = None,
        selected_count: int = 0,
    ) -> str:
        """Render transactions as a self-contained HTML page for printing.

        Args:
            transactions: Transactions to export
            filters: Filters that produced the list, echoed in the page
            selected_count: Number of explicitly selected transactions

        Returns:
            HTML document with inline CSS; all user text is escaped
        """
        count = len(transactions)
        income, expenses = transaction_totals(transactions)
        balance = income - expenses

        selection = ""
        if selected_count > 0:
            selection = (
                f"<p><strong>Sélection:</strong> {selected_count} transaction{_plural(selected_count)} "
                f"sélectionnée{_plural(selected_count)}</p>"
            )

        filter_info = self._describe_filters(filters)
        filter_block = ""
        if filter_info:
            filter_block = f'<div class="filters"><strong>Filtres appliqués:</strong> {filter_info}</div>'

        rows = "".join(self._html_row(txn) for txn in transactions)

        return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>Export Transactions - FreeBoard</title>
    <style>
{HTML_STYLE}
    </style>
</head>
<body>
    <div class="header">
        <h1>Export Transactions</h1>
        <p>Généré le {format_french_date(self.clock.today())} • {count} transaction{_plural(count)}</p>
        {selection}
    </div>
    {filter_block}
    <div class="summary">
        <h2>Résumé Financier</h2>
        <div class="summary-grid">
            <div class="summary-item">
                <div>Revenus Totaux</div>
                <div class="summary-value income">+{format_currency(income)}</div>
            </div>
            <div class="summary-item">
                <div>Dépenses Totales</div>
                <div class="summary-value expense">-{format_currency(expenses)}</div>
            </div>
            <div class="summary-item">
                <div>Solde Net</div>
                <div class="summary-value balance">{"+" if balance >= 0 else ""}{format_currency(balance)}</div>
            </div>
        </div>
    </div>

    <h2>Détail des Transactions</h2>
    <table>
        <thead>
            <tr>
                <th>Date</th>
                <th>Description</th>
                <th>Client</th>
                <th>Catégorie</th>
                <th>Montant</th>
                <th>Statut</th>
            </tr>
        </thead>
        <tbody>{rows}
        </tbody>
    </table>

    <div class="footer">
        <p>Généré par FreeBoard • Tableau de bord freelance</p>
    </div>
</body>
</html>
"""

    def _html_row(self, txn: Transaction) -> str:
        sign = "+" if txn.type == TransactionType.INCOME else "-"
        status = txn.status or "-"
        status_class = STATUS_CLASSES.get(status.strip().lower(), "debited")
        return f"""
            <tr>
                <td>{format_french_date(txn.date)}</td>
                <td>{html.escape(txn.description or "")}</td>
                <td>{html.escape(txn.client_name or "-")}</td>
                <td>{html.escape(txn.category)}</td>
                <td class="amount-{txn.type.value}">{sign}{format_currency(abs(txn.amount))}</td>
                <td><span class="status-{status_class}">{html.escape(status)}</span></td>
            </tr>"""

    @staticmethod
    def _describe_filters(filters: Optional[TransactionFilters]) -> str:
        if filters is None:
            return ""
        parts = []
        if filters.search:
            parts.append(f'Recherche: "{html.escape(filters.search)}"')
        if filters.categories:
            parts.append(f"Catégories: {html.escape(', '.join(filters.categories))}")
        if filters.type is not None:
            parts.append(f"Type: {'Revenus' if filters.type == TransactionType.INCOME else 'Dépenses'}")
        if filters.date_from or filters.date_to:
            start = format_french_date(filters.date_from) if filters.date_from else "…"
            end = format_french_date(filters.date_to) if filters.date_to else "…"
            parts.append(f"Période: {start} - {end}")
        return " • ".join(parts)

    def generate_report_csv(self, bundle: ReportBundle) -> str:
        """Render a report bundle's transactions as comma-delimited CSV.

        Every field is quoted and amounts use a decimal comma.
        """
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        buffer.write(",".join(REPORT_HEADERS) + "\n")
        for txn in bundle.transactions:
            writer.writerow(
                [
                    format_french_date(txn.date),
                    type_label(txn.type),
                    txn.client_name or "N/A",
                    f"{round_cents(txn.amount):.2f}".replace(".", ","),
                    txn.category,
                    txn.description or "",
                ]
            )
        return buffer.getvalue()

    def generate_report_text(self, bundle: ReportBundle) -> str:
        """Render a report bundle as a plain-text summary."""
        kpis = bundle.kpis
        lines = [
            f"RAPPORT {bundle.report_type.upper()}",
            f"Période: {bundle.period}",
            f"Généré le: {format_french_date(self.clock.today())}",
            "",
            "=== INDICATEURS CLÉS ===",
            f"Revenus totaux: {format_currency(kpis.total_revenue)}",
            f"Dépenses totales: {format_currency(kpis.total_expenses)}",
            f"Bénéfice net: {format_currency(kpis.net_profit)}",
            f"TVA collectée: {format_currency(kpis.total_vat_collected)}",
            "",
        ]

        if bundle.category_breakdown:
            lines.append("=== RÉPARTITION PAR CATÉGORIE ===")
            for share in bundle.category_breakdown:
                lines.append(f"{share.category}: {format_currency(share.amount)} ({share.percentage:.1f}%)")
            lines.append("")

        lines.append(f"=== TRANSACTIONS ({len(bundle.transactions)}) ===")
        for txn in bundle.transactions:
            lines.append(
                " - ".join(
                    [
                        format_french_date(txn.date),
                        type_label(txn.type),
                        txn.client_name or "N/A",
                        format_currency(txn.amount),
                        txn.category,
                    ]
                )
            )
        return "\n".join(lines) + "\n"
