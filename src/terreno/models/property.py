"""
Modelo de Propiedad (unidad publicada en el marketplace).

El punto (latitude, longitude) es la fuente de verdad; los tokens S2 se
derivan de él al escribir y nunca se editan a mano.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from terreno.geo import cell_tokens_for


def first_media_url(media: Optional[list[dict]]) -> Optional[str]:
    """URL del media más antiguo (la portada). Sin created_at se respeta el orden."""
    if not media:
        return None
    ordered = sorted(
        enumerate(media),
        key=lambda pair: (pair[1].get("created_at") or "", pair[0]),
    )
    return ordered[0][1].get("url")


class SpatialPoint(BaseModel):
    """Punto geográfico validado en la frontera de escritura."""

    latitude: float = Field(..., ge=-90, le=90, description="Latitud en grados")
    longitude: float = Field(..., ge=-180, le=180, description="Longitud en grados")

    def cell_tokens(self) -> dict[str, str]:
        """Tokens de todas las columnas indexadas para este punto."""
        return cell_tokens_for(self.latitude, self.longitude)


class Property(BaseModel):
    """
    Propiedad tal como se guarda en la tabla 'properties'.

    Los conteos de ambientes/cocinas/baños son los que muestra el mapa
    en el popup de cada punto.
    """

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    # Identificadores
    id: Optional[str] = Field(None, description="UUID generado por la base")
    owner_id: Optional[str] = Field(None, description="FK al usuario dueño")
    broker_id: Optional[str] = Field(None, description="FK al broker asignado")
    project_id: Optional[str] = Field(None, description="FK al proyecto")

    # Contenido
    title: str = Field(..., description="Título del anuncio")
    description: str = Field("", description="Descripción completa")

    # Precio
    price: float = Field(..., ge=0, description="Precio publicado")
    currency: str = Field("SAR", description="Moneda del precio")
    discount_percentage: Optional[int] = Field(None, ge=0, le=100)

    # Clasificación
    type: str = Field(..., description="Ej: apartment, villa, land")
    category: str = Field(..., description="Ej: residential, commercial")
    unit_status: str = Field("available", description="available, reserved, sold")

    # Ubicación
    city: str = Field(..., description="Ciudad")
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    # Características físicas
    space: Optional[float] = Field(None, ge=0, description="Superficie en m²")
    number_of_living_rooms: Optional[int] = Field(None, ge=0)
    number_of_rooms: Optional[int] = Field(None, ge=0)
    number_of_kitchen: Optional[int] = Field(None, ge=0)
    number_of_wc: Optional[int] = Field(None, ge=0)
    number_of_floors: Optional[int] = Field(None, ge=0)
    street_width: Optional[int] = Field(None, ge=0)

    @property
    def point(self) -> SpatialPoint:
        return SpatialPoint(latitude=self.latitude, longitude=self.longitude)

    def to_db_dict(self) -> dict:
        """Convierte a diccionario para inserción, con los tokens S2 calculados."""
        data = self.model_dump(exclude={"id"})
        data.update(self.point.cell_tokens())
        return data


class LightweightListing(BaseModel):
    """
    Proyección liviana de una propiedad para pintar un punto en el mapa.

    Se serializa en camelCase (``model_dump(by_alias=True)``).
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    price: float
    currency: Optional[str] = None
    city: Optional[str] = None
    space: Optional[float] = None
    type: Optional[str] = None
    category: Optional[str] = None
    unit_status: Optional[str] = Field(None, alias="unitStatus")
    location: dict[str, float]
    number_of_living_rooms: Optional[int] = Field(None, alias="numberOfLivingRooms")
    number_of_rooms: Optional[int] = Field(None, alias="numberOfRooms")
    number_of_kitchen: Optional[int] = Field(None, alias="numberOfKitchen")
    number_of_wc: Optional[int] = Field(None, alias="numberOfWC")
    number_of_floors: Optional[int] = Field(None, alias="numberOfFloors")
    street_width: Optional[int] = Field(None, alias="streetWidth")
    discount_percentage: Optional[int] = Field(None, alias="discountPercentage")
    thumbnail: Optional[str] = None
    owner_role: Optional[str] = Field(None, alias="ownerRole")
    broker_license_number: Optional[str] = Field(None, alias="brokerLicenseNumber")

    @classmethod
    def from_row(cls, row: dict) -> "LightweightListing":
        """
        Construye la proyección desde una fila del store.

        La fila trae embebidos ``media`` y ``owner`` con su ``broker``
        si el dueño es broker.
        """
        thumbnail = first_media_url(row.get("media"))
        owner = row.get("owner") or {}
        broker = owner.get("broker") or {}

        return cls(
            id=str(row["id"]),
            title=row.get("title") or "",
            price=float(row.get("price") or 0),
            currency=row.get("currency"),
            city=row.get("city"),
            space=row.get("space"),
            type=row.get("type"),
            category=row.get("category"),
            unit_status=row.get("unit_status"),
            location={"lat": row["latitude"], "lng": row["longitude"]},
            number_of_living_rooms=row.get("number_of_living_rooms"),
            number_of_rooms=row.get("number_of_rooms"),
            number_of_kitchen=row.get("number_of_kitchen"),
            number_of_wc=row.get("number_of_wc"),
            number_of_floors=row.get("number_of_floors"),
            street_width=row.get("street_width"),
            discount_percentage=row.get("discount_percentage"),
            thumbnail=thumbnail,
            owner_role=owner.get("role"),
            broker_license_number=broker.get("license_number"),
        )
