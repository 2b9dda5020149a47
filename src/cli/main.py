"""
Punto de entrada CLI: fiscal-diagnostic.

Uso:
    # Diagnóstico completo (la URL también puede venir del entorno)
    fiscal-diagnostic 12.345.678/0001-90 --webhook-url https://n8n.exemplo/webhook/fiscal

    # Además genera el reporte Excel
    fiscal-diagnostic 12345678000190 -o /ruta/diagnostico.xlsx

    # Solo muestra el último snapshot guardado, sin llamar al webhook
    fiscal-diagnostic 12345678000190 --cache-only

Este módulo es el ÚNICO lugar donde se ensamblan los componentes para la
terminal: lee la configuración, crea el cliente httpx, arma el motor y
decide qué imprimir. No contiene lógica de negocio, solo "fontanería".
"""

import argparse
import sys
from datetime import date
from pathlib import Path

import httpx
from pydantic import ValidationError

from src.adapters.output.narrators.console_narrator import (
    ConsoleNarrator,
    print_snapshot_summary,
    print_summary,
)
from src.adapters.output.writers.excel_writer import ExcelWriter
from src.domain.exceptions import DiagnosticBaseError, OutputError
from src.domain.models.diagnostic_snapshot import DiagnosticSnapshot
from src.domain.services.due_alerts import build_due_alerts
from src.domain.shared.cnpj import format_cnpj, normalize_cnpj
from src.infrastructure.registry import create_engine
from src.infrastructure.settings import DiagnosticSettings


def main() -> None:
    """Punto de entrada principal del CLI."""
    args = _parse_args()

    try:
        settings = DiagnosticSettings(**_overrides(args))
    except ValidationError as e:
        print(f"❌ Configuración inválida:\n{e}")
        sys.exit(1)

    try:
        cnpj = normalize_cnpj(args.cnpj)
    except DiagnosticBaseError as e:
        print(f"❌ {e}")
        sys.exit(1)

    print("=" * 60)
    print("DIAGNÓSTICO FISCAL MEI")
    print("=" * 60)
    print(f"  CNPJ:         {format_cnpj(cnpj)}")
    print(f"  Webhook:      {settings.webhook_url or '(no configurado)'}")
    print(f"  Estrategias:  {', '.join(settings.strategy_order)}")
    print(f"  Cache:        {settings.cache_dir}")
    print()

    with httpx.Client() as client:
        try:
            engine = create_engine(settings, client, narrator_factory=ConsoleNarrator)
        except DiagnosticBaseError as e:
            print(f"❌ {e}")
            sys.exit(1)

        cached = engine.load_cached(cnpj, narrator=ConsoleNarrator())

        if args.cache_only:
            if cached is None:
                print("❌ No hay un diagnóstico guardado para este CNPJ.")
                sys.exit(1)
            print("\n" + "=" * 60)
            print("ÚLTIMO DIAGNÓSTICO GUARDADO")
            print("=" * 60)
            print_snapshot_summary(cached)
            active = cached
            failed = False
        else:
            run = engine.run(cnpj)
            print_summary(run)
            failed = not run.succeeded
            # Una corrida fallida deja activo el snapshot anterior.
            active = run.snapshot if run.snapshot is not None else cached
            if failed and cached is not None:
                print("\n  Se mantiene el último diagnóstico guardado.")

    if active is not None:
        _print_alerts(active)

        if args.output:
            try:
                output_file = ExcelWriter().write_snapshot(cnpj, active, Path(args.output))
            except OutputError as e:
                print(f"\n❌ {e}")
                sys.exit(1)
            print(f"\n📁 Excel generado: {output_file}")

    if failed:
        sys.exit(1)


def _print_alerts(snapshot: DiagnosticSnapshot) -> None:
    alerts = build_due_alerts(snapshot, date.today())
    if not alerts:
        return
    print("\n  ALERTAS:")
    for alert in alerts:
        print(f"    [{alert.priority.value}] {alert.title}: {alert.message}")


def _overrides(args: argparse.Namespace) -> dict:
    """Flags de la CLI que sobrescriben la configuración del entorno."""
    overrides = {
        "webhook_url": args.webhook_url,
        "header_key": args.header_key,
        "strategy_order_raw": args.strategies,
        "request_timeout_s": args.timeout,
        "cache_dir": args.cache_dir,
    }
    return {k: v for k, v in overrides.items() if v is not None}


def _parse_args() -> argparse.Namespace:
    """Parsea los argumentos de línea de comandos."""
    parser = argparse.ArgumentParser(
        description="Diagnóstico fiscal de MEI: guías DAS, declaraciones DASN y deuda estimada",
        epilog="Ejemplo: fiscal-diagnostic 12.345.678/0001-90 -o diagnostico.xlsx",
    )

    parser.add_argument("cnpj", help="CNPJ de la entidad, con o sin máscara")

    parser.add_argument(
        "--webhook-url",
        dest="webhook_url",
        help="URL del webhook de diagnóstico (o FISCAL_DIAGNOSTIC_WEBHOOK_URL)",
    )
    parser.add_argument(
        "--header-key",
        dest="header_key",
        help="Nombre del header que lleva el CNPJ (por defecto: cnpj)",
    )
    parser.add_argument(
        "--strategies",
        dest="strategies",
        help="Orden de estrategias separadas por coma (ej: direct,cors_relay)",
    )
    parser.add_argument(
        "--timeout",
        dest="timeout",
        type=float,
        help="Timeout por petición en segundos (por defecto: sin timeout)",
    )
    parser.add_argument(
        "--cache-dir",
        dest="cache_dir",
        help="Directorio de los snapshots guardados",
    )
    parser.add_argument(
        "--cache-only",
        dest="cache_only",
        action="store_true",
        help="No llamar al webhook; mostrar el último snapshot guardado",
    )
    parser.add_argument(
        "-o",
        "--output",
        dest="output",
        help="Ruta del reporte Excel a generar",
    )

    return parser.parse_args()


if __name__ == "__main__":
    main()
