# cyclops_gateway/Services/gateway_core/__init__.py
"""
Gateway Core Module
===================
Motor de ingesta y normalización del gateway Cyclops.

Componentes:
- nmea_parser: Framing + checksum de frases NMEA0183 (canal UDP)
- sensor_records: Decodificación del array JSON de /latest/ (canal HTTP)
- normalizers: Paths canónicos, conversión a Newtons, UnitTable
- emitter: Armado de UpdateBatch y entrega al bus
- errors: Taxonomía de errores no fatales
"""

from .errors import (
    DecodeError,
    NoSentenceMarker,
    ChecksumMissing,
    ChecksumMismatch,
    FieldCountMismatch,
    InvalidValue,
    PollError,
    HttpStatusError,
    PollDecodeError,
    TransportError,
    EmitError,
    GatewayConfigError,
)
from .normalizers import (
    GRAVITATIONAL_ACCELERATION,
    UNIT_FACTORS,
    UnitTable,
    coerce_number,
    clean_title,
    sensor_fragment,
    sensor_path,
    tension_path,
    to_newtons,
)
from .nmea_parser import ParsedSentence, compute_checksum, decode_sentence
from .sensor_records import parse_sensor_array
from .emitter import UpdateEmitter

__all__ = [
    # Errors
    'DecodeError',
    'NoSentenceMarker',
    'ChecksumMissing',
    'ChecksumMismatch',
    'FieldCountMismatch',
    'InvalidValue',
    'PollError',
    'HttpStatusError',
    'PollDecodeError',
    'TransportError',
    'EmitError',
    'GatewayConfigError',

    # Normalizers
    'GRAVITATIONAL_ACCELERATION',
    'UNIT_FACTORS',
    'UnitTable',
    'coerce_number',
    'clean_title',
    'sensor_fragment',
    'sensor_path',
    'tension_path',
    'to_newtons',

    # NMEA0183
    'ParsedSentence',
    'compute_checksum',
    'decode_sentence',

    # HTTP sensor array
    'parse_sensor_array',

    # Emitter
    'UpdateEmitter',
]
