# cyclops_gateway/Services/gateway_core/normalizers.py
"""
Path / Unit Normalizers Module
==============================
Normaliza títulos de sensores y lecturas crudas al schema canónico (SI).

Usado por los dos canales de entrada (HTTP polling y UDP NMEA0183):
- El canal HTTP registra la unidad de cada sensor en la UnitTable
- El canal UDP consulta la UnitTable (las frases NMEA no traen unidad física)

Funciones:
- coerce_number(): Convierte strings numéricos a float
- clean_title(): Título libre → fragmento de path canónico
- sensor_fragment(): clean_title() con fallback para títulos vacíos
- sensor_path() / tension_path(): Construcción de paths canónicos
- to_newtons(): Conversión kg / tonne / lbf → Newtons
"""

import re
import threading
from typing import Any, Dict, Optional, Union


# ==========================================================
# CONSTANTES
# ==========================================================

GRAVITATIONAL_ACCELERATION = 9.80665
"""Aceleración gravitacional estándar (m/s²)."""

NEWTONS_PER_LBF = 4.44822

UNIT_FACTORS: Dict[str, float] = {
    "kg": GRAVITATIONAL_ACCELERATION,
    "tonne": 1000 * GRAVITATIONAL_ACCELERATION,
    "lbf": NEWTONS_PER_LBF,
}
"""
Factores de conversión a Newtons.
Cualquier unidad que no esté aquí (incluyendo "N") pasa sin convertir.
"""

SENSOR_PATH_PREFIX = "sensors.cyclops"
RIGGING_PATH_PREFIX = "rigging"
FALLBACK_FRAGMENT = "unknown"

_TITLE_STRIP_RE = re.compile(r"[^A-Za-z0-9 _]")


# ==========================================================
# FUNCIONES DE BAJO NIVEL
# ==========================================================

def coerce_number(value: Any) -> Union[float, int, str, None]:
    """
    Convierte strings numéricos a float, maneja null/empty.

    Examples:
        >>> coerce_number("45.2")
        45.2
        >>> coerce_number("3,14")
        3.14
        >>> coerce_number("null")
        None
        >>> coerce_number(42)
        42
    """
    if value is None:
        return None

    if isinstance(value, bool):
        return value

    if isinstance(value, (int, float)):
        return value

    if isinstance(value, str):
        v = value.strip()

        if v == "" or v.lower() == "null":
            return None

        # Coma decimal europea
        v = v.replace(",", ".")

        try:
            return float(v)
        except ValueError:
            return value

    return value


def clean_title(raw_title: str) -> str:
    """
    Convierte un título libre en fragmento de path canónico.

    Reglas:
    1. Elimina todo carácter fuera de [A-Za-z0-9 _]
    2. Reemplaza espacios por '_'
    3. Pasa a minúsculas

    El '_' se conserva para que la función sea idempotente.

    Examples:
        >>> clean_title("Mast Tension #1")
        'mast_tension_1'
        >>> clean_title("PORT")
        'port'
    """
    stripped = _TITLE_STRIP_RE.sub("", str(raw_title))
    return stripped.replace(" ", "_").lower()


def sensor_fragment(title: Any, sensor_id: Any = None) -> str:
    """
    Fragmento canónico para un sensor, nunca vacío.

    Si el título limpio queda vacío se usa "sensor_<id limpio>" y, sin id
    utilizable, FALLBACK_FRAGMENT.

    Examples:
        >>> sensor_fragment("Port Shroud", 7)
        'port_shroud'
        >>> sensor_fragment("###", 7)
        'sensor_7'
        >>> sensor_fragment("")
        'unknown'
    """
    fragment = clean_title(title if title is not None else "")
    if fragment:
        return fragment

    if sensor_id is not None:
        id_fragment = clean_title(str(sensor_id))
        if id_fragment:
            return f"sensor_{id_fragment}"

    return FALLBACK_FRAGMENT


def sensor_path(fragment: str) -> str:
    return f"{SENSOR_PATH_PREFIX}.{fragment}"


def tension_path(fragment: str) -> str:
    return f"{RIGGING_PATH_PREFIX}.{fragment}.tension"


def to_newtons(value: float, units: Optional[str]) -> float:
    """
    Convierte una lectura de masa/fuerza a Newtons.

    kg → value * 9.80665
    tonne → value * 1000 * 9.80665
    lbf → value * 4.44822
    Cualquier otra unidad, o None → value sin cambios.

    Examples:
        >>> round(to_newtons(10, "kg"), 4)
        98.0665
        >>> to_newtons(10, "N")
        10
    """
    factor = UNIT_FACTORS.get(units) if units is not None else None
    if factor is None:
        return value
    return value * factor


# ==========================================================
# UNIT TABLE (ESTADO COMPARTIDO)
# ==========================================================

class UnitTable:
    """
    Tabla fragmento → última unidad física conocida.

    La escribe el poller HTTP (una vez por sensor y ciclo exitoso) y la lee
    el listener UDP. Last-write-wins, nunca se limpia. Una entrada ausente
    nunca es un error: get() retorna None y la conversión es pass-through.
    """

    def __init__(self):
        self._units: Dict[str, Optional[str]] = {}
        self._lock = threading.Lock()

    def record(self, fragment: str, units: Optional[str]):
        with self._lock:
            self._units[fragment] = units

    def get(self, fragment: str) -> Optional[str]:
        with self._lock:
            return self._units.get(fragment)

    def snapshot(self) -> Dict[str, Optional[str]]:
        with self._lock:
            return dict(self._units)

    def __len__(self) -> int:
        with self._lock:
            return len(self._units)
