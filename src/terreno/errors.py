"""
Errores de dominio.

Todos heredan de la excepción estándar más cercana para que el
código que ya atrapa ValueError / LookupError siga funcionando.
"""


class TerrenoError(Exception):
    """Base de los errores propios del motor."""


class InvalidCoordinatesError(TerrenoError, ValueError):
    """Latitud o longitud fuera de dominio (o no finitas)."""

    def __init__(self, latitude, longitude):
        self.latitude = latitude
        self.longitude = longitude
        super().__init__(
            f"Coordenadas fuera de rango: lat={latitude}, lng={longitude}"
        )


class InvalidCellTokenError(TerrenoError, ValueError):
    """El token no corresponde a una celda S2 válida."""

    def __init__(self, token):
        self.token = token
        super().__init__(f"Token de celda inválido: {token!r}")


class NotFoundError(TerrenoError, LookupError):
    """La entidad de referencia no existe en el store."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} con ID {entity_id} no encontrado")


class BackfillStalledError(TerrenoError, RuntimeError):
    """El store devolvió el mismo lote después de confirmarlo."""
