"""Equipment repository - read access to venue_equipment."""

from psycopg2.extensions import cursor as PgCursor

from courtly.domain.models import EquipmentItem
from courtly.infra.db import fetchall


def fetch_equipment_catalog(cur: PgCursor, venue_id: str) -> dict[str, EquipmentItem]:
    """Load every equipment item of a venue, keyed by item ID.

    Unavailable items are included; pricing decides how to treat them.
    """
    rows = fetchall(
        cur,
        """
        SELECT id, name, price, equipment_type, is_available
        FROM venue_equipment
        WHERE venue_id = %s
        ORDER BY equipment_type, name
        """,
        (venue_id,),
    )
    catalog: dict[str, EquipmentItem] = {}
    for row in rows:
        item = EquipmentItem(
            id=str(row[0]),
            name=row[1],
            price=int(row[2]),
            equipment_type=row[3],
            is_available=bool(row[4]),
        )
        catalog[item.id] = item
    return catalog
