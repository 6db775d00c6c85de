"""
Notification Tasks.

Mail and calendar notifications sent through the Microsoft Graph
application client. Tasks take JSON-safe payload dicts so they can run in
a taskiq worker or be awaited in-process.

Usage:
    # From an endpoint, after the response is sent
    background_tasks.add_task(
        notifications.dispatch_notification,
        "site_survey_assigned",
        notifications.site_survey_payload(survey),
    )

    # Worker
    taskiq worker modules.backend.tasks.worker:broker
"""

from datetime import datetime, timezone
from html import escape
from typing import Any

from modules.backend.core.config import get_app_config
from modules.backend.core.logging import get_logger
from modules.backend.integrations.microsoft_graph import GraphAppClient, MicrosoftGraphError
from modules.backend.models.lead import Lead
from modules.backend.models.site_survey import SiteSurvey
from modules.backend.models.user import User

logger = get_logger(__name__)

FOOTER = (
    '<hr style="border: none; border-top: 1px solid #ddd; margin: 20px 0;">'
    '<p style="color: #666; font-size: 12px;">This is an automated notification '
    "from your CRM system. Please do not reply to this email.</p>"
)


def _person(user: User | None) -> dict[str, str | None] | None:
    if user is None:
        return None
    return {"name": user.name, "email": user.email}


def site_survey_payload(survey: SiteSurvey) -> dict[str, Any]:
    """Snapshot of a site survey for the assignment notification."""
    return {
        "id": survey.id,
        "title": survey.title,
        "type": survey.type,
        "status": survey.status,
        "description": survey.description,
        "customer": survey.customer.name if survey.customer else None,
        "contact": survey.contact.name if survey.contact else None,
        "arranged_date": survey.arranged_date.isoformat() if survey.arranged_date else None,
        "address": survey.address,
        "city": survey.city,
        "phone": survey.phone,
        "email": survey.email,
        "assign_from": _person(survey.assign_from),
        "assign_to": _person(survey.assign_to),
    }


def lead_payload(lead: Lead, creator: User) -> dict[str, Any]:
    """Snapshot of a new lead for the creation notification."""
    return {
        "id": lead.id,
        "lead_number": lead.lead_number,
        "title": lead.title,
        "description": lead.description,
        "stage": lead.stage,
        "status": lead.status,
        "priority": lead.priority,
        "customer": lead.customer.name if lead.customer else None,
        "contact": lead.contact.name if lead.contact else None,
        "estimated_value": lead.estimated_value,
        "requested_site_survey": lead.requested_site_survey,
        "creator": _person(creator),
        "owner": _person(lead.owner),
        "assignee": _person(lead.assignee),
    }


def _details(rows: list[tuple[str, Any]]) -> str:
    return "".join(
        f"<p><strong>{label}:</strong> {escape(str(value))}</p>"
        for label, value in rows
        if value not in (None, "")
    )


def _site_survey_email(survey: dict[str, Any]) -> str:
    assign_from = survey.get("assign_from") or {}
    assign_to = survey.get("assign_to") or {}
    description = ""
    if survey.get("description"):
        description = (
            '<h3 style="color: #333;">Description</h3>'
            f'<p style="white-space: pre-wrap;">{escape(survey["description"])}</p>'
        )
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        '<h2 style="color: #333;">New Site Survey Assignment</h2>'
        '<div style="background-color: #f5f5f5; padding: 20px; border-radius: 8px;">'
        + _details([
            ("Survey ID", f"SS-{survey['id']}"),
            ("Title", survey["title"]),
            ("Type", survey.get("type")),
            ("Status", survey.get("status")),
            ("Customer", survey.get("customer")),
            ("Contact", survey.get("contact")),
            ("Arranged Date & Time", survey.get("arranged_date")),
            ("Address", survey.get("address")),
            ("City", survey.get("city")),
            ("Phone", survey.get("phone")),
            ("Email", survey.get("email")),
        ])
        + "</div>"
        + description
        + _details([
            ("Assigned From", assign_from.get("name") or "N/A"),
            ("Assigned To", assign_to.get("name") or "N/A"),
        ])
        + FOOTER
        + "</div>"
    )


def _site_survey_event(survey: dict[str, Any]) -> str:
    assign_from = survey.get("assign_from") or {}
    return (
        '<div style="font-family: Arial, sans-serif;"><h3>Site Survey Details</h3>'
        + _details([
            ("Survey ID", f"SS-{survey['id']}"),
            ("Type", survey.get("type")),
            ("Customer", survey.get("customer")),
            ("Contact", survey.get("contact")),
            ("Phone", survey.get("phone")),
            ("Email", survey.get("email")),
            ("Description", survey.get("description")),
            ("Assigned From", assign_from.get("name") or "N/A"),
        ])
        + "</div>"
    )


async def send_site_survey_assignment(survey: dict[str, Any]) -> dict[str, Any]:
    """
    Notify the assignee of a site survey.

    The mail is sent from the assigner's mailbox to the assignee with the
    assigner on cc. When the survey has an arranged date a calendar event is
    also created on the assignee's calendar; a failure there is logged and
    does not affect the mail.

    Args:
        survey: Payload built by `site_survey_payload`

    Returns:
        Dict with delivery status
    """
    sender = (survey.get("assign_from") or {}).get("email")
    recipient = (survey.get("assign_to") or {}).get("email")
    if not sender or not recipient:
        logger.info(
            "Site survey notification skipped, missing assigner or assignee email",
            extra={"site_survey_id": survey["id"]},
        )
        return {"status": "skipped", "site_survey_id": survey["id"]}

    calendar_event = False
    async with GraphAppClient() as graph:
        await graph.send_email_as_user(
            sender,
            f"{survey['title']} [SS-{survey['id']}]",
            _site_survey_email(survey),
            [recipient],
            cc=[sender],
        )

        features = get_app_config().features
        if survey.get("arranged_date") and features.notifications_calendar_events_enabled:
            start = datetime.fromisoformat(survey["arranged_date"]).replace(tzinfo=timezone.utc)
            location = ", ".join(p for p in (survey.get("address"), survey.get("city")) if p)
            try:
                await graph.create_calendar_event(
                    recipient,
                    f"[Site Survey] {survey['title']}",
                    _site_survey_event(survey),
                    start=start,
                    location=location or "TBD",
                    attendees=[sender],
                )
                calendar_event = True
            except MicrosoftGraphError as e:
                logger.warning(
                    "Calendar event creation failed",
                    extra={"site_survey_id": survey["id"], "code": e.code, "error": e.message},
                )

    logger.info(
        "Site survey notification sent",
        extra={"site_survey_id": survey["id"], "calendar_event": calendar_event},
    )
    return {
        "status": "delivered",
        "site_survey_id": survey["id"],
        "calendar_event": calendar_event,
    }


async def send_lead_created(lead: dict[str, Any]) -> dict[str, Any]:
    """
    Notify the owner and assignee of a new lead.

    The mail is sent from the creator's mailbox. The creator is never a
    recipient and each address appears once.
    """
    sender = (lead.get("creator") or {}).get("email")
    recipients: list[str] = []
    for key in ("owner", "assignee"):
        email = (lead.get(key) or {}).get("email")
        if email and email != sender and email not in recipients:
            recipients.append(email)

    if not sender or not recipients:
        logger.info(
            "Lead notification skipped, no sender or recipients",
            extra={"lead_id": lead["id"]},
        )
        return {"status": "skipped", "lead_id": lead["id"]}

    body = (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f'<h2 style="color: #333;">New Lead Created: {escape(lead["lead_number"])}</h2>'
        '<div style="background-color: #f5f5f5; padding: 20px; border-radius: 8px;">'
        + _details([
            ("Lead ID", lead["lead_number"]),
            ("Title", lead["title"]),
            ("Description", lead.get("description")),
            ("Customer", lead.get("customer")),
            ("Contact", lead.get("contact")),
            ("Stage", lead.get("stage")),
            ("Status", lead.get("status")),
            ("Priority", lead.get("priority")),
            ("Owner", (lead.get("owner") or {}).get("name")),
            ("Assigned To", (lead.get("assignee") or {}).get("name")),
            ("Estimated Value", lead.get("estimated_value")),
            ("Site Survey", "Requested" if lead.get("requested_site_survey") else None),
        ])
        + "</div>"
        + FOOTER
        + "</div>"
    )

    async with GraphAppClient() as graph:
        await graph.send_email_as_user(
            sender,
            f"New Lead Created: {lead['lead_number']} - {lead['title']}",
            body,
            recipients,
        )

    logger.info(
        "Lead notification sent",
        extra={"lead_id": lead["id"], "recipient_count": len(recipients)},
    )
    return {"status": "delivered", "lead_id": lead["id"], "recipients": recipients}


TASKS = {
    "site_survey_assigned": send_site_survey_assignment,
    "lead_created": send_lead_created,
}

# Task configuration metadata
TASK_CONFIG = {
    "site_survey_assigned": {
        "retry_on_error": True,
        "max_retries": 3,
        "description": "Mail the assignee of a site survey and add a calendar event",
    },
    "lead_created": {
        "retry_on_error": True,
        "max_retries": 3,
        "description": "Mail the owner and assignee of a new lead",
    },
}

_registered: dict[str, Any] | None = None


def register_tasks() -> dict[str, Any]:
    """
    Register notification tasks with the Taskiq broker.

    Returns:
        Dict mapping task names to registered task objects
    """
    global _registered
    if _registered is not None:
        return _registered

    from modules.backend.tasks.broker import get_broker

    broker = get_broker()
    _registered = {
        name: broker.task(
            task_name=f"notifications.{name}",
            retry_on_error=TASK_CONFIG[name]["retry_on_error"],
            max_retries=TASK_CONFIG[name]["max_retries"],
        )(func)
        for name, func in TASKS.items()
    }

    logger.info(
        "Tasks registered with broker",
        extra={"task_count": len(_registered), "tasks": list(_registered.keys())},
    )
    return _registered


async def dispatch_notification(task_name: str, payload: dict[str, Any]) -> None:
    """
    Send a notification without failing the caller.

    Queues the task when background tasks are enabled, otherwise runs it
    in-process. Errors are logged, never raised.
    """
    features = get_app_config().features
    if not features.notifications_enabled or not features.integration_microsoft_graph_enabled:
        logger.debug("Notifications disabled", extra={"task": task_name})
        return

    try:
        if features.background_tasks_enabled:
            await register_tasks()[task_name].kiq(payload)
            logger.debug("Notification queued", extra={"task": task_name})
        else:
            await TASKS[task_name](payload)
    except Exception as e:
        logger.error(
            "Notification failed",
            extra={"task": task_name, "error": str(e), "error_type": type(e).__name__},
        )
