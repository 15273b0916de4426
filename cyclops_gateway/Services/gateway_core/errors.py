# cyclops_gateway/Services/gateway_core/errors.py
"""
Gateway Errors
==============
Taxonomía de errores de ingesta. Ninguno es fatal para el proceso: cada uno
termina el procesamiento de UN datagrama o UN ciclo de polling, se loguea
y se reporta al status del gateway.

- DecodeError (ValueError): canal UDP / NMEA0183
- PollError (RuntimeError): canal HTTP
- EmitError (RuntimeError): fallo del bus al recibir un delta
- GatewayConfigError: configuración inválida, única condición fatal
"""

from typing import List, Optional


# ==========================================================
# UDP / NMEA0183
# ==========================================================

class DecodeError(ValueError):
    """Base de todos los errores de decodificación de frases NMEA."""


class NoSentenceMarker(DecodeError):
    def __init__(self):
        super().__init__("No NMEA sentence found in the payload")


class ChecksumMissing(DecodeError):
    def __init__(self, sentence: str):
        self.sentence = sentence
        super().__init__(f"Invalid NMEA sentence: checksum not found in {sentence!r}")


class ChecksumMismatch(DecodeError):
    """
    El checksum declarado no coincide con el calculado.

    expected es None si los dos caracteres tras '*' no son hexadecimales.
    """

    def __init__(self, expected: Optional[int], actual: int, claimed: str = ""):
        self.expected = expected
        self.actual = actual
        self.claimed = claimed
        super().__init__(
            f"Checksum mismatch. Computed: {actual:02X}, Provided: {claimed or expected}"
        )


class FieldCountMismatch(DecodeError):
    def __init__(self, fields: List[str], minimum: int):
        self.fields = fields
        super().__init__(
            f"Malformed NMEA sentence: expected at least {minimum} fields, got {len(fields)}"
        )


class InvalidValue(DecodeError):
    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Non-numeric NMEA value: {raw!r}")


# ==========================================================
# HTTP POLLING
# ==========================================================

class PollError(RuntimeError):
    """Base de los errores de un ciclo de polling."""


class HttpStatusError(PollError):
    def __init__(self, code: int, reason: str = ""):
        self.code = code
        self.reason = reason
        super().__init__(f"Network response was not ok: {code} {reason}".rstrip())


class PollDecodeError(PollError):
    """El body no es JSON o no es un array JSON."""


class TransportError(PollError):
    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Fetch error: {cause}")


# ==========================================================
# BUS / CONFIG
# ==========================================================

class EmitError(RuntimeError):
    """El bus rechazó o falló al recibir un delta."""


class GatewayConfigError(RuntimeError):
    """Configuración inválida detectada antes de iniciar los canales."""
