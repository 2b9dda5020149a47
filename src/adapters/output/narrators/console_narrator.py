"""
Adaptador de salida: Narrador a consola.

Igual que MemoryNarrator (guarda las líneas), pero además imprime cada
línea apenas se emite. Es el que usa la CLI: un diagnóstico tarda decenas
de segundos y la narración en vivo es la única señal de progreso.

Al final, `print_summary` imprime el bloque de resumen del snapshot.
"""

from src.adapters.output.narrators.memory_narrator import MemoryNarrator
from src.domain.models.diagnostic_run import DiagnosticRun
from src.domain.models.diagnostic_snapshot import DiagnosticSnapshot
from src.domain.shared.cnpj import format_cnpj
from src.domain.shared.money import format_money


class ConsoleNarrator(MemoryNarrator):
    """Narrador que imprime cada línea a stdout."""

    def _emit(self, message: str) -> None:
        super()._emit(message)
        print(f"  {self._lines[-1]}")


def print_summary(run: DiagnosticRun) -> None:
    """Imprime el resumen final de una corrida."""
    print("\n" + "=" * 60)
    print("RESUMEN DEL DIAGNÓSTICO")
    print("=" * 60)
    print(f"  CNPJ:                  {format_cnpj(run.entity_id)}")
    print(f"  Duración:              {run.elapsed_seconds:.1f} s")

    if not run.succeeded or run.snapshot is None:
        print(f"  Estado:                FALLÓ ({run.error_type})")
        print(f"\n  ERROR: {run.error}")
        print("=" * 60)
        return

    print_snapshot_summary(run.snapshot, saved=run.applied)


def print_snapshot_summary(snapshot: DiagnosticSnapshot, saved: bool = True) -> None:
    """Imprime los datos de un snapshot (de una corrida o del cache)."""
    print(f"  Situación:             {snapshot.compliance_state.value.upper()}")
    print(f"  Deuda total:           {format_money(snapshot.total_debt)}")
    print(f"  Guías DAS:             {len(snapshot.periodic_obligations)}")
    print(f"  Guías vencidas:        {snapshot.overdue_count}")
    print(f"  DASN pendientes:       {snapshot.pending_filing_count}")
    print(f"  Guardado localmente:   {'sí' if saved else 'no'}")

    if snapshot.is_estimated:
        print("\n  ESTIMACIÓN:")
        for period in snapshot.estimated_periods:
            print(f"    - {period.year}: {period.months} mes(es), {format_money(period.amount)}")

    print("=" * 60)
