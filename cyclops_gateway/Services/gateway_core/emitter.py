# cyclops_gateway/Services/gateway_core/emitter.py
"""
Update Emitter Module
=====================
Arma UN UpdateBatch por evento de ingesta y lo entrega al bus.

- Ciclo de polling: 6 paths descriptivos + 1 path de tensión por sensor,
  más un meta {units: "N", description: "Newtons"} por path de tensión
- Frase UDP válida: 1 path de tensión

El emitter es el único que escribe en el bus. No bufferea, no agrupa ni
deduplica entre llamadas. Los errores del bus se re-levantan como EmitError.
"""

import math
from typing import Any, Callable, Dict, Iterable

from cyclops_gateway.Schemas.delta import UpdateBatch
from .errors import EmitError, InvalidValue
from .nmea_parser import ParsedSentence
from .normalizers import (
    UnitTable,
    coerce_number,
    sensor_fragment,
    sensor_path,
    tension_path,
    to_newtons,
)


TENSION_UNITS = "N"
TENSION_DESCRIPTION = "Newtons"

Publisher = Callable[[Dict[str, Any]], Any]


class UpdateEmitter:
    def __init__(self, publish: Publisher, source_label: str, context: str = "vessels.self"):
        self.publish = publish
        self.source_label = source_label
        self.context = context

    def new_batch(self) -> UpdateBatch:
        return UpdateBatch(source_label=self.source_label)

    def build_poll_batch(self, records: Iterable[Any], unit_table: UnitTable) -> UpdateBatch:
        """
        Batch de un ciclo de polling.

        Registra la unidad de cada sensor en unit_table antes de convertir,
        así el canal UDP puede convertir las lecturas siguientes.
        """
        batch = self.new_batch()

        for record in records:
            fragment = sensor_fragment(record.title, record.id)
            base = sensor_path(fragment)

            unit_table.record(fragment, record.units)

            batch.add_value(f"{base}.id", record.id)
            batch.add_value(f"{base}.title", record.title)
            batch.add_value(f"{base}.station", record.station)
            batch.add_value(f"{base}.rssi", record.rssi)
            batch.add_value(f"{base}.time", record.time)
            batch.add_value(f"{base}.age", record.age)

            path = tension_path(fragment)
            newtons = to_newtons(record.value, record.units)
            if not math.isfinite(newtons):
                print(f"[EMIT] Skipped {path}: {record.value} {record.units} overflows in Newtons")
                continue
            batch.add_value(path, newtons)
            batch.add_meta(path, TENSION_UNITS, TENSION_DESCRIPTION)

        return batch

    def build_sentence_batch(self, sentence: ParsedSentence, unit_table: UnitTable) -> UpdateBatch:
        """
        Batch de una frase NMEA: un solo path rigging.<sensor>.tension.

        Sin unidad registrada para el sensor el valor pasa sin convertir.

        Raises:
            InvalidValue: Si el campo de valor no es numérico o no es finito
                (nan, inf, o desborda al convertir a Newtons)
        """
        raw = coerce_number(sentence.value)
        if not isinstance(raw, (int, float)) or isinstance(raw, bool):
            raise InvalidValue(sentence.value)

        fragment = sensor_fragment(sentence.sensor_id)
        newtons = to_newtons(float(raw), unit_table.get(fragment))
        if not math.isfinite(newtons):
            raise InvalidValue(sentence.value)

        batch = self.new_batch()
        batch.add_value(tension_path(fragment), newtons)
        return batch

    def emit(self, batch: UpdateBatch):
        """
        Entrega el batch al bus en una sola llamada.

        Raises:
            EmitError: Si el bus falla
        """
        if not batch.values:
            print("[EMIT] Ignored empty update batch")
            return

        delta = batch.to_delta(self.context)
        try:
            self.publish(delta)
        except Exception as e:
            raise EmitError(f"Bus rejected delta ({len(batch.values)} values): {e}") from e
