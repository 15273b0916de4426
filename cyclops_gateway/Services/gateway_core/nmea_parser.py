# cyclops_gateway/Services/gateway_core/nmea_parser.py
"""
NMEA0183 Sentence Parser Module
===============================
Decodifica datagramas UDP del gateway Cyclops a frases NMEA0183 validadas.

Formato esperado (una frase por datagrama):
    $<talker+tipo>,<transductor>,<valor>,<unidad/clase>,<sensor>*<checksum hex>

Ejemplo:
    $CRXDR,C,0.65,C,PORT*5B\\r\\n

Reglas:
- Solo se decodifica la primera frase hasta el primer salto de línea
- El checksum es el XOR de todos los bytes entre '$' y '*' (ambos excluidos)
- Cualquier falla levanta una subclase de DecodeError (ValueError);
  el caller decide si loguea y descarta
"""

import re
from dataclasses import dataclass, field
from typing import List

from .errors import (
    ChecksumMismatch,
    ChecksumMissing,
    FieldCountMismatch,
    NoSentenceMarker,
)


SENTENCE_START = "$"
CHECKSUM_MARKER = "*"
MIN_FIELDS = 5

_LINE_BREAK_RE = re.compile(r"\r?\n")
_CHECKSUM_RE = re.compile(r"[0-9A-Fa-f]{2}")

# ==========================================================
# RESULTADO
# ==========================================================

@dataclass(frozen=True)
class ParsedSentence:
    talker_sentence_id: str
    transducer_type: str
    value: str
    units_hint: str
    sensor_id: str
    fields: List[str] = field(default_factory=list, compare=False)


# ==========================================================
# FUNCIONES
# ==========================================================

def compute_checksum(body: str) -> int:
    """
    XOR acumulado de los bytes de `body` (sin '$' ni '*').

    Examples:
        >>> hex(compute_checksum("CRXDR,C,0.65,C,PORT"))
        '0x5b'
    """
    checksum = 0
    for byte in body.encode("utf-8"):
        checksum ^= byte
    return checksum


def _decode_payload(data: bytes) -> str:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        text = data.decode("utf-8", errors="replace")
        print("[NMEA] Warning: decode replaced invalid bytes in datagram")
    return text.strip().lstrip("\ufeff").strip()


def extract_sentence(text: str) -> str:
    """
    Extrae la primera frase: desde el primer '$' hasta el primer salto de línea.

    Raises:
        NoSentenceMarker: Si no hay '$' en el texto
    """
    start = text.find(SENTENCE_START)
    if start == -1:
        raise NoSentenceMarker()
    return _LINE_BREAK_RE.split(text[start:], maxsplit=1)[0]


def decode_sentence(data: bytes) -> ParsedSentence:
    """
    Decodifica un datagrama UDP a una ParsedSentence validada.

    Args:
        data: Bytes crudos del datagrama

    Returns:
        ParsedSentence con los campos 0-4 de la frase

    Raises:
        NoSentenceMarker: No hay '$' en el payload
        ChecksumMissing: No hay '*' o faltan los dos dígitos hex
        ChecksumMismatch: El checksum no coincide
        FieldCountMismatch: Menos de 5 campos

    Examples:
        >>> decode_sentence(b"$CRXDR,C,0.65,C,PORT*5B\\r\\n").sensor_id
        'PORT'
    """
    sentence = extract_sentence(_decode_payload(data))

    star = sentence.find(CHECKSUM_MARKER)
    if star == -1 or star + 3 > len(sentence):
        raise ChecksumMissing(sentence)

    claimed = sentence[star + 1:star + 3]
    body = sentence[1:star]
    actual = compute_checksum(body)

    # Exactamente dos dígitos hex, sin signo ni espacios
    if not _CHECKSUM_RE.fullmatch(claimed):
        raise ChecksumMismatch(None, actual, claimed)
    expected = int(claimed, 16)

    if expected != actual:
        raise ChecksumMismatch(expected, actual, claimed)

    fields = body.split(",")
    if len(fields) < MIN_FIELDS:
        raise FieldCountMismatch(fields, MIN_FIELDS)

    return ParsedSentence(
        talker_sentence_id=fields[0],
        transducer_type=fields[1],
        value=fields[2],
        units_hint=fields[3],
        sensor_id=fields[4],
        fields=fields,
    )
