"""
Scheduled-job endpoints (called by an external scheduler with the cron secret)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_settings_snapshot, verify_cron_secret
from app.schemas.digest import DigestSendResult
from app.services.digest_service import DigestType, send_digest
from app.services.settings_service import SettingsSnapshot

router = APIRouter(dependencies=[Depends(verify_cron_secret)])


@router.api_route("/send-weekly-reminders", methods=["GET", "POST"], response_model=DigestSendResult)
def send_weekly_reminders(
    db: Session = Depends(get_db),
    snapshot: SettingsSnapshot = Depends(get_settings_snapshot),
):
    """Starters beginning in exactly seven days"""
    return send_digest(db, DigestType.WEEKLY, snapshot=snapshot)


@router.api_route("/send-monthly-summary", methods=["GET", "POST"], response_model=DigestSendResult)
def send_monthly_summary(
    db: Session = Depends(get_db),
    snapshot: SettingsSnapshot = Depends(get_settings_snapshot),
):
    """Starters of the previous calendar month"""
    return send_digest(db, DigestType.MONTHLY, snapshot=snapshot)


@router.api_route("/send-quarterly-summary", methods=["GET", "POST"], response_model=DigestSendResult)
def send_quarterly_summary(
    db: Session = Depends(get_db),
    snapshot: SettingsSnapshot = Depends(get_settings_snapshot),
):
    """Starters of the previous calendar quarter"""
    return send_digest(db, DigestType.QUARTERLY, snapshot=snapshot)


@router.api_route("/send-yearly-summary", methods=["GET", "POST"], response_model=DigestSendResult)
def send_yearly_summary(
    db: Session = Depends(get_db),
    snapshot: SettingsSnapshot = Depends(get_settings_snapshot),
):
    """Starters of the previous calendar year"""
    return send_digest(db, DigestType.YEARLY, snapshot=snapshot)
