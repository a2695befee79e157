"""
Notification-eligibility engine and scheduled digest emails

``build_digest_plan`` is the only place that decides who receives which
starters; the preview endpoint and the cron send path both call it.
"""
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Set

from jinja2 import TemplateError
from sqlalchemy.orm import Session

from app.models.notification_preference import NotificationPreference
from app.models.starter import Starter
from app.models.user import User
from app.services import email_service
from app.services.access_service import is_admin, membership_map
from app.services.audit_service import log_audit
from app.services.digest_windows import (  # noqa: F401  (re-exported)
    DigestType,
    PREFERENCE_FLAGS,
    Window,
    compute_window,
)
from app.services.email_template_service import get_effective_template, render_pair
from app.services.settings_service import SettingsSnapshot, load_snapshot
from app.utils.datetime_utils import today_local

logger = logging.getLogger(__name__)


@dataclass
class Recipient:
    user_id: int
    email: str
    name: Optional[str]
    starters: List[Starter] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.starters)

    @property
    def entity_names(self) -> List[str]:
        return sorted({s.entity.name for s in self.starters})

    def grouped(self) -> List[Dict[str, Any]]:
        """Starters grouped by entity name, entities alphabetical"""
        groups: "OrderedDict[str, List[Starter]]" = OrderedDict()
        for starter in sorted(self.starters, key=lambda s: (s.entity.name, s.start_date, s.id)):
            groups.setdefault(starter.entity.name, []).append(starter)
        return [{"entity_name": name, "starters": items} for name, items in groups.items()]


@dataclass
class DigestPlan:
    type: DigestType
    window: Window
    starters: List[Starter]
    recipients: List[Recipient]


def starters_in_window(db: Session, window: Window) -> List[Starter]:
    """Non-cancelled starters with an entity whose start date falls in [start, end)"""
    return db.query(Starter).filter(
        Starter.start_date >= window.start,
        Starter.start_date < window.end,
        Starter.is_cancelled.is_(False),
        Starter.entity_id.isnot(None),
    ).order_by(Starter.start_date, Starter.id).all()


def accessible_entity_ids(user: User, enabled_entity_ids: Set[int]) -> Set[int]:
    """
    Entities whose starters the user receives in a digest

    Admins get every entity they enabled the digest for; everyone else only
    gets enabled entities they are also a member of.
    """
    if is_admin(user):
        return set(enabled_entity_ids)
    return set(membership_map(user).keys()) & set(enabled_entity_ids)


def build_digest_plan(db: Session, digest_type: DigestType, today: date) -> DigestPlan:
    """
    Decide recipients and their starters for one digest run

    Pure with respect to (digest type, today, database contents).
    """
    digest_type = DigestType(digest_type)
    window = compute_window(digest_type, today)
    starters = starters_in_window(db, window)

    flag_column = getattr(NotificationPreference, PREFERENCE_FLAGS[digest_type])
    enabled_rows = db.query(NotificationPreference).join(
        User, User.id == NotificationPreference.user_id
    ).filter(
        flag_column.is_(True),
        User.active.is_(True),
    ).all()

    enabled_by_user: Dict[int, Set[int]] = {}
    for pref in enabled_rows:
        enabled_by_user.setdefault(pref.user_id, set()).add(pref.entity_id)

    recipients: List[Recipient] = []
    if starters and enabled_by_user:
        users = db.query(User).filter(User.id.in_(enabled_by_user.keys())).order_by(User.email).all()
        for user in users:
            allowed = accessible_entity_ids(user, enabled_by_user[user.id])
            matching = [s for s in starters if s.entity_id in allowed]
            if not matching:
                continue
            recipients.append(Recipient(user_id=user.id, email=user.email, name=user.name, starters=matching))

    return DigestPlan(type=digest_type, window=window, starters=starters, recipients=recipients)


def preview_digest(db: Session, digest_type: DigestType, today: Optional[date] = None) -> Dict[str, Any]:
    """Dry run: who would receive what, without sending anything"""
    plan = build_digest_plan(db, digest_type, today or today_local())
    return {
        "type": plan.type,
        "window_start": plan.window.start,
        "window_end": plan.window.end,
        "starter_count": len(plan.starters),
        "recipients": [
            {"email": r.email, "name": r.name, "count": r.count, "entity_names": r.entity_names}
            for r in plan.recipients
        ],
    }


def _template_context(plan: DigestPlan, recipient: Recipient, app_url: str) -> Dict[str, Any]:
    return {
        "user_name": recipient.name or recipient.email,
        "user_email": recipient.email,
        "period": plan.window.label,
        "total_starters": recipient.count,
        "entity_names": recipient.entity_names,
        "groups": [
            {
                "entity_name": group["entity_name"],
                "starters": [
                    {
                        "name": s.name,
                        "role_title": s.role_title,
                        "region": s.region,
                        "start_date": s.start_date.strftime("%d/%m/%Y"),
                    }
                    for s in group["starters"]
                ],
            }
            for group in recipient.grouped()
        ],
        "app_url": app_url,
    }


def send_digest(
    db: Session,
    digest_type: DigestType,
    today: Optional[date] = None,
    snapshot: Optional[SettingsSnapshot] = None,
) -> Dict[str, Any]:
    """
    Send one digest email per recipient

    A failing recipient is audited as EMAIL_FAILED and the job moves on.
    """
    plan = build_digest_plan(db, digest_type, today or today_local())
    app_url = (snapshot or load_snapshot(db)).app_url()
    subject_source, body_source = get_effective_template(db, plan.type)

    sent = 0
    failed = 0
    for recipient in plan.recipients:
        meta = {"digest": plan.type.value, "email": recipient.email, "count": recipient.count, "period": plan.window.label}
        try:
            subject, html = render_pair(subject_source, body_source, _template_context(plan, recipient, app_url))
            delivered = email_service.send_email(recipient.email, subject, html)
            if not delivered:
                raise email_service.EmailError("Email is not configured")
        except (email_service.EmailError, TemplateError) as e:
            failed += 1
            logger.error(f"Digest {plan.type.value} to {recipient.email} failed: {e}")
            log_audit(db, None, "EMAIL_FAILED", "digest", recipient.user_id, {**meta, "error": str(e)})
            continue

        sent += 1
        log_audit(db, None, "EMAIL_SENT", "digest", recipient.user_id, meta)

    logger.info(
        f"Digest {plan.type.value} ({plan.window.label}): {sent} sent, {failed} failed, "
        f"{len(plan.recipients)} recipient(s), {len(plan.starters)} starter(s)"
    )
    return {"type": plan.type, "sent": sent, "failed": failed, "recipients": len(plan.recipients)}
