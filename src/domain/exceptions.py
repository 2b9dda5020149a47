"""
Excepciones de dominio del proyecto fiscal-diagnostic.

¿Por qué excepciones propias en lugar de usar ValueError/RuntimeError?
Porque permiten que el orquestador (FiscalDiagnosticEngine) distinga entre
"ningún transporte respondió" y "la respuesta no tiene forma conocida" y
narre cada caso de forma diferente, mientras que los errores por registro
(un monto ilegible) se recuperan localmente sin abortar la corrida.

Jerarquía:
    DiagnosticBaseError
    ├── InvalidEntityId          → El CNPJ no tiene dígitos utilizables
    ├── ConfigurationError       → Falta la URL del webhook u otro ajuste
    ├── StrategyError            → Falló UNA estrategia de transporte
    ├── UpstreamUnavailable      → Fallaron TODAS las estrategias (fatal)
    ├── UnrecognizedShape        → La respuesta no tiene listas usables (fatal)
    ├── MalformedAmount          → Monto ilegible en un registro (no fatal)
    ├── PersistenceCorrupt       → Snapshot guardado ilegible (no fatal)
    └── OutputError              → Error al generar el reporte de salida
"""


class DiagnosticBaseError(Exception):
    """Excepción base del proyecto. Todas las demás heredan de esta.

    El motor captura esta base una sola vez para convertir cualquier falla
    fatal en una corrida con estado `failed`.
    """


class InvalidEntityId(DiagnosticBaseError):
    """Se lanza cuando el identificador recibido no es un CNPJ utilizable
    (sin dígitos, o sin los 14 dígitos al iniciar una corrida)."""

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"Identificador de entidad inválido: '{entity_id}'")


class ConfigurationError(DiagnosticBaseError):
    """Se lanza cuando falta un ajuste obligatorio (por ejemplo, la URL del
    webhook de diagnóstico)."""

    def __init__(self, setting: str, detalle: str = ""):
        self.setting = setting
        mensaje = f"Configuración incompleta: '{setting}'"
        if detalle:
            mensaje += f" — {detalle}"
        super().__init__(mensaje)


class StrategyError(DiagnosticBaseError):
    """Se lanza cuando una estrategia de transporte individual falla.

    Esto puede pasar porque:
    - El relay o el webhook respondieron con un status fuera de 2xx.
    - El cuerpo no es JSON válido.
    - El relay envolvió la respuesta y el contenido interno es ilegible.
    - Error de red (DNS, conexión rechazada, TLS).

    No es fatal por sí misma: StrategyTransport pasa a la siguiente estrategia.
    """

    def __init__(self, strategy: str, causa: str, status_code: int | None = None):
        self.strategy = strategy
        self.causa = causa
        self.status_code = status_code
        mensaje = f"Estrategia '{strategy}' falló: {causa}"
        if status_code is not None:
            mensaje += f" (HTTP {status_code})"
        super().__init__(mensaje)


class UpstreamUnavailable(DiagnosticBaseError):
    """Se lanza cuando se agotaron todas las estrategias sin éxito.

    Conserva el último error observado para el diagnóstico.
    """

    def __init__(self, entity_id: str, last_error: Exception | None, attempts: int):
        self.entity_id = entity_id
        self.last_error = last_error
        self.attempts = attempts
        mensaje = (
            f"No fue posible obtener el diagnóstico de '{entity_id}' "
            f"tras {attempts} estrategia(s)"
        )
        if last_error is not None:
            mensaje += f" — último error: {last_error}"
        super().__init__(mensaje)


class UnrecognizedShape(DiagnosticBaseError):
    """Se lanza cuando el normalizador no encuentra listas de registros
    utilizables después de agotar todos los niveles de extracción."""

    def __init__(self, detalle: str):
        self.detalle = detalle
        super().__init__(f"Estructura de respuesta no reconocida: {detalle}")


class MalformedAmount(DiagnosticBaseError):
    """Se lanza cuando el monto de una guía no se puede convertir.

    No es fatal: el clasificador la captura, deja el monto en 0, lo excluye
    de los totales y conserva el registro para mostrarlo.
    """

    def __init__(self, raw_amount: object, periodo: str = ""):
        self.raw_amount = raw_amount
        self.periodo = periodo
        mensaje = f"Monto ilegible: '{raw_amount}'"
        if periodo:
            mensaje += f" (periodo {periodo})"
        super().__init__(mensaje)


class PersistenceCorrupt(DiagnosticBaseError):
    """Se lanza cuando un snapshot guardado no se puede reconstruir.

    No es fatal: el store lo trata como ausencia y purga la entrada.
    """

    def __init__(self, key: str, causa: str):
        self.key = key
        self.causa = causa
        super().__init__(f"Snapshot corrupto en '{key}': {causa}")


class OutputError(DiagnosticBaseError):
    """Se lanza cuando falla la generación del reporte de salida.

    Esto puede pasar porque:
    - No hay permisos de escritura en el directorio de salida.
    - El disco está lleno.
    - Hay un error en el formato del Excel.
    """

    def __init__(self, ruta_salida: str, causa: str):
        self.ruta_salida = ruta_salida
        self.causa = causa
        super().__init__(f"Error generando salida en '{ruta_salida}': {causa}")
