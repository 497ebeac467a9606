# stockpos/shared/sequencer.py
"""
Generador de identificadores legibles (P001, S001, ...).

El siguiente valor se calcula a partir del identificador numéricamente más
alto de cada tipo, por lo que debe invocarse dentro de la misma unidad atómica
que inserta el registro. Dos unidades concurrentes que calculen el mismo valor
chocan en la clave primaria al insertar y una de ellas se aborta.
"""
import re
from enum import Enum
from typing import Iterable, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from stockpos.core.exceptions import IdentifierFormatError, ValidationError
from stockpos.shared.database.models import Product, Sale

ID_DIGITS = 3


class IdKind(str, Enum):
    PRODUCT = "product"
    SALE = "sale"


_PREFIXES = {
    IdKind.PRODUCT: "P",
    IdKind.SALE: "S",
}

_MODELS = {
    IdKind.PRODUCT: Product,
    IdKind.SALE: Sale,
}


def format_id(kind: IdKind, number: int) -> str:
    return f"{_PREFIXES[kind]}{number:0{ID_DIGITS}d}"


def parse_id(kind: IdKind, identifier: str) -> int:
    """Extraer la parte numérica de un identificador del tipo ``kind``"""
    prefix = _PREFIXES[kind]
    match = re.fullmatch(rf"{prefix}(\d+)", identifier or "")
    if match is None:
        raise IdentifierFormatError(
            f"Identificador '{identifier}' no coincide con el patrón {prefix}{'0' * ID_DIGITS}"
        )
    return int(match.group(1))


def check_caller_id(kind: IdKind, identifier: str) -> str:
    """
    Aceptar un ID enviado por el cliente solo si tiene la forma canónica que
    genera el secuenciador (``S001``, ``S1000``; no ``S0001`` ni ``SALE-7``).
    """
    try:
        number = parse_id(kind, identifier)
    except IdentifierFormatError:
        number = None

    if number is None or number < 1 or format_id(kind, number) != identifier:
        raise ValidationError(
            f"ID '{identifier}' inválido: se espera {format_id(kind, 1)}, {format_id(kind, 2)}, ..."
        )
    return identifier


class IdSequencer:

    def __init__(self, db: Session):
        self.db = db

    def highest_id(self, kind: IdKind):
        """Identificador más alto almacenado (incluye productos eliminados)"""
        model = _MODELS[kind]
        prefix = _PREFIXES[kind]
        # Orden por longitud y luego lexicográfico = orden numérico para P999 < P1000
        stmt = (
            select(model.id)
            .where(model.id.like(f"{prefix}%"))
            .order_by(func.length(model.id).desc(), model.id.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def next(self, kind: IdKind) -> str:
        return self.next_block(kind, 1)[0]

    def next_block(self, kind: IdKind, count: int, exclude: Iterable[str] = ()) -> List[str]:
        """
        Reservar ``count`` identificadores crecientes a partir del más alto.

        ``exclude`` son IDs aún no insertados que el llamador ya va a usar en
        la misma unidad (p. ej. IDs explícitos de otras ventas del lote).
        """
        if count <= 0:
            raise ValidationError("La cantidad de identificadores debe ser mayor a 0")

        last_id = self.highest_id(kind)
        number = 1 if last_id is None else parse_id(kind, last_id) + 1
        excluded = set(exclude)

        identifiers = []
        while len(identifiers) < count:
            candidate = format_id(kind, number)
            if candidate not in excluded:
                identifiers.append(candidate)
            number += 1
        return identifiers
