"""
Dashboard statistics
"""
from datetime import date, datetime, time
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.entity import Entity
from app.models.starter import Starter
from app.models.user import User
from app.services.access_service import apply_visibility
from app.utils.datetime_utils import today_local


def ytd_stats(db: Session, user: User, year: Optional[int] = None, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Starters of ``year`` that have already started (start day <= today)

    Cancelled starters are not counted; only entities with at least one
    starter are listed.
    """
    today = today or today_local()
    year = year or today.year
    # start_date is local wall-clock time; include the whole of today
    cutoff = datetime.combine(today, time.max)

    query = db.query(Starter).filter(
        Starter.year == year,
        Starter.start_date <= cutoff,
        Starter.is_cancelled.is_(False),
    )
    query = apply_visibility(query, user, Starter.entity_id)
    total = query.count()

    rows = (
        query.join(Entity, Entity.id == Starter.entity_id)
        .with_entities(Entity.id, Entity.name, Entity.color_hex, func.count(Starter.id))
        .group_by(Entity.id, Entity.name, Entity.color_hex)
        .order_by(Entity.name)
        .all()
    )
    return {
        "year": year,
        "total_ytd": total,
        "entities": [
            {"entity_id": entity_id, "entity_name": name, "entity_color": color, "count": count}
            for entity_id, name, color, count in rows
            if count > 0
        ],
    }
