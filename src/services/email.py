"""
Email delivery of generated reports.
"""

import traceback
from pathlib import Path

from msgraph.generated.models.body_type import BodyType
from msgraph.generated.models.email_address import EmailAddress
from msgraph.generated.models.file_attachment import FileAttachment
from msgraph.generated.models.item_body import ItemBody
from msgraph.generated.models.message import Message
from msgraph.generated.models.recipient import Recipient
from msgraph.generated.users.item.send_mail.send_mail_post_request_body import (
    SendMailPostRequestBody,
)

from core.config import ERROR_EMAIL, FROM_EMAIL, TO_EMAIL
from core.graph_client import get_graph_client
from models.events import FetchFailure

CONTENT_TYPES = {
    ".csv": "text/csv",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def format_report_summary(title: str, verdicts: list, failures: list[FetchFailure]) -> str:
    """Plain-text body listing who passed, who did not and which calendars failed."""
    lines = [title, ""]

    failed = [v for v in verdicts if not v.passed]
    passed = [v for v in verdicts if v.passed]

    if failed:
        lines.append("Needs attention:")
        lines.append("")
        for verdict in sorted(failed, key=lambda v: v.owner_id):
            lines.append(f"{verdict.owner_id}:")
            for reason in verdict.failed_reasons:
                lines.append(f"  - {reason}")
        lines.append("")

    if passed:
        lines.append(f"All criteria met: {', '.join(sorted(v.owner_id for v in passed))}")
        lines.append("")

    if failures:
        lines.append("Calendars that could not be read:")
        for failure in failures:
            lines.append(f"  - {failure.owner_id}: {failure.display_message}")
        lines.append("")

    if not verdicts and not failures:
        lines.append("No calendars were analysed.")

    return "\n".join(lines).rstrip() + "\n"


async def send_report_email(
    subject: str,
    file_path: Path,
    body_text: str,
    to_email: str | None = None,
):
    """Send report email with attachment."""
    graph = get_graph_client()
    recipient = to_email or TO_EMAIL

    with open(file_path, "rb") as f:
        attachment_bytes = f.read()

    attachment = FileAttachment(
        odata_type="#microsoft.graph.fileAttachment",
        name=file_path.name,
        content_type=CONTENT_TYPES.get(file_path.suffix, "application/octet-stream"),
        content_bytes=attachment_bytes,
    )

    message = Message(
        subject=subject,
        body=ItemBody(content_type=BodyType.Text, content=body_text),
        to_recipients=[Recipient(email_address=EmailAddress(address=recipient))],
        attachments=[attachment],
    )

    request_body = SendMailPostRequestBody(message=message, save_to_sent_items=True)

    await graph.users.by_user_id(FROM_EMAIL).send_mail.post(request_body)
    print(f"Sent report email to {recipient}")


async def send_error_email(error: Exception):
    """Send error notification email."""
    graph = get_graph_client()
    subject = "Calendar Report - Script Error"
    body_text = f"An error occurred while generating the calendar report:\n\n{traceback.format_exc()}"

    message = Message(
        subject=subject,
        body=ItemBody(content_type=BodyType.Text, content=body_text),
        to_recipients=[Recipient(email_address=EmailAddress(address=ERROR_EMAIL))],
    )

    request_body = SendMailPostRequestBody(message=message, save_to_sent_items=True)

    try:
        await graph.users.by_user_id(FROM_EMAIL).send_mail.post(request_body)
        print(f"Sent error email to {ERROR_EMAIL}")
    except Exception as e:
        print(f"Failed to send error email: {e}")
