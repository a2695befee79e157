"""
System settings service

Settings are read as one versioned snapshot per request; ``set_setting`` is the
only writer and always records an audit entry.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.system_setting import SystemSetting
from app.services.audit_service import log_audit

logger = logging.getLogger(__name__)

# Overrides settings.APP_BASE_URL for links in outgoing email
APP_URL_KEY = "app_base_url"


@dataclass(frozen=True)
class SettingsSnapshot:
    version: int
    values: Dict[str, Optional[str]] = field(default_factory=dict)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.values.get(key, default)

    def app_url(self) -> str:
        """Frontend base URL used in email links"""
        return (self.get(APP_URL_KEY) or settings.APP_BASE_URL).rstrip("/")


def load_snapshot(db: Session) -> SettingsSnapshot:
    """Read all settings at once; version is the highest row version (0 when empty)"""
    rows = db.query(SystemSetting).all()
    version = max((row.version for row in rows), default=0)
    return SettingsSnapshot(version=version, values={row.key: row.value for row in rows})


def set_setting(db: Session, key: str, value: Optional[str], actor_id: int) -> SystemSetting:
    """
    Upsert a setting keyed on ``key`` and bump the global snapshot version
    """
    current_version = db.query(func.max(SystemSetting.version)).scalar() or 0
    new_version = current_version + 1

    setting = db.query(SystemSetting).filter(SystemSetting.key == key).first()
    old_value = setting.value if setting else None
    if setting is None:
        setting = SystemSetting(key=key, value=value, version=new_version, updated_by=actor_id)
        db.add(setting)
    else:
        setting.value = value
        setting.version = new_version
        setting.updated_by = actor_id

    db.commit()
    db.refresh(setting)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="UPDATE_SETTING",
        target_type="system_setting",
        target_id=setting.id,
        meta={"key": key, "old_value": old_value, "new_value": value, "version": new_version}
    )
    logger.info(f"System setting {key!r} updated to version {new_version}")
    return setting
