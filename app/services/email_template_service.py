"""
Email templates: built-in defaults, admin overrides per digest type, Jinja2 rendering
"""
import logging
from typing import Any, Dict, List, Tuple

from fastapi import HTTPException, status
from jinja2 import BaseLoader, Environment, TemplateError
from sqlalchemy.orm import Session

from app.models.email_template import EmailTemplate
from app.schemas.digest import EmailTemplateUpsert
from app.services.audit_service import log_audit
from app.services.digest_windows import DigestType

logger = logging.getLogger(__name__)

_JINJA_ENV = Environment(loader=BaseLoader(), autoescape=True, trim_blocks=True, lstrip_blocks=True)

_STARTER_LIST = """
{% for group in groups %}
<h3 style="margin-bottom: 4px;">{{ group.entity_name }}</h3>
<ul>
{% for s in group.starters %}
  <li><strong>{{ s.name }}</strong>{% if s.role_title %} - {{ s.role_title }}{% endif %} (start {{ s.start_date }})</li>
{% endfor %}
</ul>
{% endfor %}
"""

DEFAULT_TEMPLATES: Dict[DigestType, Dict[str, str]] = {
    DigestType.WEEKLY: {
        "subject": "Herinnering: {{ total_starters }} starter(s) beginnen op {{ period }}",
        "description": "Sent daily for starters beginning in exactly seven days",
        "body": "<p>Hallo {{ user_name }},</p>\n<p>Volgende starters beginnen over een week:</p>\n"
        + _STARTER_LIST
        + '<p><a href="{{ app_url }}">Open de Starterskalender</a></p>',
    },
    DigestType.MONTHLY: {
        "subject": "Maandoverzicht starters {{ period }}",
        "description": "Summary of the previous calendar month",
        "body": "<p>Hallo {{ user_name }},</p>\n<p>{{ total_starters }} starter(s) in {{ period }}:</p>\n"
        + _STARTER_LIST,
    },
    DigestType.QUARTERLY: {
        "subject": "Kwartaaloverzicht starters {{ period }}",
        "description": "Summary of the previous calendar quarter",
        "body": "<p>Hallo {{ user_name }},</p>\n<p>{{ total_starters }} starter(s) in {{ period }}:</p>\n"
        + _STARTER_LIST,
    },
    DigestType.YEARLY: {
        "subject": "Jaaroverzicht starters {{ period }}",
        "description": "Summary of the previous calendar year",
        "body": "<p>Hallo {{ user_name }},</p>\n<p>{{ total_starters }} starter(s) in {{ period }}:</p>\n"
        + _STARTER_LIST,
    },
}

TASK_ASSIGNED_SUBJECT = "Nieuwe taak: {{ task_title }}"
TASK_ASSIGNED_BODY = """
<p>Hallo {{ assignee_name }},</p>
<p>Je hebt een nieuwe taak gekregen voor starter <strong>{{ starter_name }}</strong> ({{ entity_name }}).</p>
<ul>
  <li>Taak: {{ task_title }}</li>
  <li>Prioriteit: {{ priority }}</li>
  <li>Deadline: {{ due_date }}</li>
  <li>Startdatum: {{ start_date }}</li>
</ul>
<p><a href="{{ app_url }}/taken/{{ task_id }}">Bekijk de taak</a></p>
"""

STARTER_CANCELLED_SUBJECT = "Starter geannuleerd: {{ starter_name }}"
STARTER_CANCELLED_BODY = """
<h2>Starter is geannuleerd</h2>
<p><strong>Naam:</strong> {{ starter_name }}</p>
<p><strong>Functie:</strong> {{ role_title or 'N/A' }}</p>
<p><strong>Entiteit:</strong> {{ entity_name or 'N/A' }}</p>
<p><strong>Startdatum:</strong> {{ start_date }}</p>
{% if reason %}<p><strong>Reden:</strong> {{ reason }}</p>{% endif %}
<p><strong>Geannuleerd door:</strong> {{ cancelled_by }}</p>
<p><a href="{{ app_url }}/starters">Open de Starterskalender</a></p>
"""


def render(source: str, context: Dict[str, Any]) -> str:
    return _JINJA_ENV.from_string(source).render(**context)


def render_pair(subject: str, body: str, context: Dict[str, Any]) -> Tuple[str, str]:
    """Render subject and body with the same context"""
    return render(subject, context).strip(), render(body, context)


def get_effective_template(db: Session, digest_type: DigestType) -> Tuple[str, str]:
    """(subject, body) from the active DB override, else the built-in default"""
    row = db.query(EmailTemplate).filter(EmailTemplate.type == DigestType(digest_type).value).first()
    if row and row.is_active:
        return row.subject, row.body
    default = DEFAULT_TEMPLATES[DigestType(digest_type)]
    return default["subject"], default["body"]


def list_templates(db: Session) -> List[Dict[str, Any]]:
    """One entry per digest type; types without an override show the default"""
    rows = {row.type: row for row in db.query(EmailTemplate).all()}
    result = []
    for digest_type in DigestType:
        row = rows.get(digest_type.value)
        if row:
            result.append({
                "id": row.id,
                "type": digest_type,
                "subject": row.subject,
                "body": row.body,
                "description": row.description,
                "is_active": row.is_active,
                "is_default": False,
            })
        else:
            default = DEFAULT_TEMPLATES[digest_type]
            result.append({
                "id": None,
                "type": digest_type,
                "subject": default["subject"],
                "body": default["body"],
                "description": default["description"],
                "is_active": True,
                "is_default": True,
            })
    return result


def upsert_template(
    db: Session,
    digest_type: DigestType,
    data: EmailTemplateUpsert,
    actor_id: int
) -> EmailTemplate:
    """
    Set the template for a digest type (conflict target: type)

    Raises:
        HTTPException: 400 if subject or body is not valid Jinja2
    """
    for source in (data.subject, data.body):
        try:
            _JINJA_ENV.parse(source)
        except TemplateError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid template syntax: {e}"
            )

    digest_type = DigestType(digest_type)
    row = db.query(EmailTemplate).filter(EmailTemplate.type == digest_type.value).first()
    action = "UPDATE" if row else "CREATE"
    if row is None:
        row = EmailTemplate(type=digest_type.value)
        db.add(row)
    row.subject = data.subject
    row.body = data.body
    row.description = data.description
    row.is_active = data.is_active
    row.updated_by = actor_id
    db.commit()
    db.refresh(row)

    log_audit(
        db=db,
        actor_id=actor_id,
        action=action,
        target_type="email_template",
        target_id=row.id,
        meta={"type": digest_type.value, "is_active": row.is_active}
    )
    return row
