"""
Modelo de Proyecto (desarrollo inmobiliario con varias unidades).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from terreno.geo import cell_tokens_for


class Project(BaseModel):
    """
    Proyecto tal como se guarda en la tabla 'projects'.

    El precio y la superficie promedio no son columnas: se derivan de
    las unidades (``properties``) que cuelgan del proyecto, ver unit_averages.
    """

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: Optional[str] = Field(None, description="UUID generado por la base")
    developer_id: Optional[str] = Field(None, description="FK al developer")

    name: str = Field(..., description="Nombre del proyecto")
    description: str = Field("", description="Descripción")

    type: str = Field(..., description="Tipo de propiedad predominante")
    category: str = Field(..., description="Categoría")
    city: str = Field(..., description="Ciudad")

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    def to_db_dict(self) -> dict:
        """Convierte a diccionario para inserción, con los tokens S2 calculados."""
        data = self.model_dump(exclude={"id"})
        data.update(cell_tokens_for(self.latitude, self.longitude))
        return data


def _mean(values: list[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def unit_averages(units: Optional[list[dict]]) -> tuple[Optional[float], Optional[float]]:
    """
    Precio y superficie promedio de las unidades de un proyecto.

    Ignora unidades sin precio/superficie o con valores no numéricos.
    """
    prices: list[float] = []
    spaces: list[float] = []
    for unit in units or []:
        for key, bucket in (("price", prices), ("space", spaces)):
            value = unit.get(key)
            if value is None:
                continue
            try:
                bucket.append(float(value))
            except (TypeError, ValueError):
                continue
    return _mean(prices), _mean(spaces)
