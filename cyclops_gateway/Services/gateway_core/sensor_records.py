# cyclops_gateway/Services/gateway_core/sensor_records.py
"""
Sensor Array Parser Module
==========================
Decodifica el body de GET /latest/ del gateway Cyclops a SensorRecord.

El gateway responde con un array JSON:
    [{"id": 1, "title": "Port Shroud", "station": 1, "units": "kg",
      "value": "45.2", "rssi": "-60", "time": "1.0", "age": "0.2"}, ...]

Política:
- Body que no es JSON, o JSON que no es array → PollDecodeError (BLOCKING)
- Registro individual inválido → se descarta con warning (NON-BLOCKING),
  el resto del array se procesa igual
"""

import json
from typing import Any, List, Optional, Union

from pydantic import ValidationError

from cyclops_gateway.Schemas import sensor as sensor_schema
from cyclops_gateway.Core import log_ws
from .errors import PollDecodeError


def validate_sensor_record(raw: Any, index: int) -> Optional["sensor_schema.SensorRecord"]:
    """
    Valida un elemento del array contra SensorRecord.

    Returns:
        SensorRecord si es válido, None si no (ya logueado)
    """
    if not isinstance(raw, dict):
        print(f"[SENSORS] Record #{index} is not an object - skipping: {raw!r}")
        return None

    try:
        return sensor_schema.SensorRecord(**raw)
    except ValidationError as ve:
        log_ws.log_from_thread(
            f"[SENSORS] Record #{index} ({raw.get('title', '?')}) failed validation, skipping: {ve}",
            msg_type="warning"
        )
        print(f"[SENSORS] Problematic record: {raw}")
        return None


def parse_sensor_array(body: Union[bytes, str]) -> List["sensor_schema.SensorRecord"]:
    """
    Parse del body JSON del gateway a una lista de SensorRecord.

    Args:
        body: Body crudo de la respuesta HTTP

    Returns:
        list[SensorRecord]: Registros válidos, en el orden del array

    Raises:
        PollDecodeError: Si el body no es un array JSON

    Examples:
        >>> records = parse_sensor_array('[{"id": 1, "title": "Port", "value": "2"}]')
        >>> records[0].value
        2.0
    """
    if isinstance(body, bytes):
        text = body.decode("utf-8", errors="replace")
    else:
        text = body

    text = text.lstrip("\ufeff").strip()

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as jde:
        raise PollDecodeError(f"Gateway response is not valid JSON: {jde}") from jde

    if not isinstance(payload, list):
        raise PollDecodeError(
            f"Gateway response is not a JSON array (got {type(payload).__name__})"
        )

    return [
        record
        for index, raw in enumerate(payload)
        if (record := validate_sensor_record(raw, index)) is not None
    ]
