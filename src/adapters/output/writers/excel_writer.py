"""
Adaptador de salida: Reporte Excel del diagnóstico.

Genera un libro por snapshot con 3 hojas:
- Resumen: CNPJ, situación, deuda total, conteos y la estimación por año.
- Guias DAS: una fila por guía, en el mismo orden del snapshot
  (vencimiento descendente).
- Declaraciones DASN: una fila por declaración anual.

Es la salida entregable de la CLI; en la app web este papel lo cumplía
el dashboard.
"""

from decimal import Decimal
from pathlib import Path

import pandas as pd

from src.domain.exceptions import OutputError
from src.domain.models.diagnostic_snapshot import DiagnosticSnapshot
from src.domain.ports.output_writer import OutputWriter
from src.domain.shared.cnpj import format_cnpj

SHEET_SUMMARY = "Resumen"
SHEET_DAS = "Guias DAS"
SHEET_DASN = "Declaraciones DASN"

_DAS_COLUMNS = [
    "Periodo",
    "Año",
    "Vencimiento",
    "Principal",
    "Multa",
    "Juros",
    "Total",
    "Monto válido",
    "Situación",
    "Estado",
]
_DASN_COLUMNS = ["Año", "Fecha de entrega", "Status", "Estado"]


class ExcelWriter(OutputWriter):
    """Genera el reporte Excel de un snapshot."""

    def write_snapshot(
        self, entity_id: str, snapshot: DiagnosticSnapshot, output_path: Path
    ) -> Path:
        """Escribe el reporte de un snapshot.

        Args:
            entity_id: CNPJ del snapshot.
            snapshot: Snapshot a reportar.
            output_path: Ruta del archivo. Si no termina en .xlsx, se le
                        agrega la extensión.

        Returns:
            Ruta del archivo creado.
        """
        if output_path.suffix.lower() != ".xlsx":
            output_path = output_path.with_suffix(".xlsx")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            self._escribir_excel(entity_id, snapshot, output_path)
        except Exception as e:
            raise OutputError(str(output_path), str(e))

        return output_path

    # =================================================================
    # MÉTODO PRIVADO: Generación del Excel
    # =================================================================

    def _escribir_excel(
        self, entity_id: str, snapshot: DiagnosticSnapshot, output_path: Path
    ) -> None:
        df_resumen = pd.DataFrame(_summary_rows(entity_id, snapshot), columns=["Concepto", "Valor"])

        df_das = pd.DataFrame(
            [
                {
                    "Periodo": o.period,
                    "Año": o.year,
                    "Vencimiento": o.due_date.strftime("%d/%m/%Y") if o.due_date else "",
                    "Principal": _to_float(o.principal),
                    "Multa": _to_float(o.fine),
                    "Juros": _to_float(o.interest),
                    "Total": float(o.amount),
                    "Monto válido": "Sí" if o.amount_valid else "No",
                    "Situación": o.raw_status,
                    "Estado": o.derived_status.value,
                }
                for o in snapshot.periodic_obligations
            ],
            columns=_DAS_COLUMNS,
        )

        df_dasn = pd.DataFrame(
            [
                {
                    "Año": f.year,
                    "Fecha de entrega": (
                        f.submitted_date.strftime("%d/%m/%Y") if f.submitted_date else ""
                    ),
                    "Status": f.raw_status,
                    "Estado": f.derived_status.value,
                }
                for f in snapshot.annual_filings
            ],
            columns=_DASN_COLUMNS,
        )

        with pd.ExcelWriter(output_path, engine="xlsxwriter") as writer:
            df_resumen.to_excel(writer, index=False, sheet_name=SHEET_SUMMARY)
            df_das.to_excel(writer, index=False, sheet_name=SHEET_DAS)
            df_dasn.to_excel(writer, index=False, sheet_name=SHEET_DASN)

            workbook = writer.book
            money_format = workbook.add_format({"num_format": "#,##0.00"})

            ws_resumen = writer.sheets[SHEET_SUMMARY]
            ws_resumen.set_column("A:A", 28)  # Concepto
            ws_resumen.set_column("B:B", 24)  # Valor

            ws_das = writer.sheets[SHEET_DAS]
            ws_das.set_column("A:A", 16)  # Periodo
            ws_das.set_column("B:B", 8)  # Año
            ws_das.set_column("C:C", 12)  # Vencimiento
            ws_das.set_column("D:G", 14, money_format)  # Montos
            ws_das.set_column("H:H", 12)  # Monto válido
            ws_das.set_column("I:I", 24)  # Situación
            ws_das.set_column("J:J", 10)  # Estado

            ws_dasn = writer.sheets[SHEET_DASN]
            ws_dasn.set_column("A:A", 8)
            ws_dasn.set_column("B:B", 16)
            ws_dasn.set_column("C:D", 16)


def _to_float(value: Decimal | None) -> float | None:
    return None if value is None else float(value)


def _summary_rows(entity_id: str, snapshot: DiagnosticSnapshot) -> list[tuple[str, object]]:
    rows: list[tuple[str, object]] = [
        ("CNPJ", format_cnpj(entity_id)),
        ("Situación", snapshot.compliance_state.value),
        ("Deuda total", float(snapshot.total_debt)),
        ("Deuda estimada", "Sí" if snapshot.is_estimated else "No"),
        ("Guías DAS", len(snapshot.periodic_obligations)),
        ("Guías vencidas", snapshot.overdue_count),
        ("DASN pendientes", snapshot.pending_filing_count),
        ("Calculado", snapshot.computed_at.strftime("%d/%m/%Y %H:%M:%S")),
    ]
    for period in snapshot.estimated_periods:
        rows.append((f"Estimación {period.year} ({period.months} meses)", float(period.amount)))
    return rows
