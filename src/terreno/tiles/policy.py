"""Tope de filas por nivel de zoom."""

# (nivel mínimo, tope), de más fino a más grueso
CAP_TABLE: tuple[tuple[int, int], ...] = (
    (16, 4000),  # barrio
    (14, 2500),  # distrito
    (12, 1200),  # ciudad
    (10, 800),  # región
    (8, 500),  # país
)
DEFAULT_CAP = 300  # mundo


def cap_for_level(level: int) -> int:
    """
    Máximo de filas que puede devolver una consulta de tiles.

    Es una válvula de seguridad, no paginación: no hay offset ni cursor.
    """
    for min_level, cap in CAP_TABLE:
        if level >= min_level:
            return cap
    return DEFAULT_CAP
