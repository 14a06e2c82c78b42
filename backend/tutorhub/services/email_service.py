"""
Service d'envoi d'emails SMTP.
Notifie les élèves et l'équipe (admins, tuteurs) aux étapes clés du cycle de vie d'une demande.

Chaque fonction publique retourne True si l'email est parti, False sinon.
Elles ne lèvent jamais : un échec SMTP est journalisé et signalé par la valeur de retour.
Les textes saisis par les utilisateurs (noms, description) sont échappés avant insertion dans le HTML.
"""

import html
import logging
import smtplib
import uuid
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List

from tutorhub.config import settings
from tutorhub.exceptions import NotificationError
from tutorhub.services.state_machine import status_message

logger = logging.getLogger(__name__)


def _request_link(request_id: uuid.UUID) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/requests/{request_id}"


def _wrap_html(title: str, body: str) -> str:
    return f"""
    <html>
      <body style="font-family: Arial, sans-serif; color: #333; max-width: 600px; margin: auto;">
        <h2 style="color: #1a73e8;">{title}</h2>
        {body}
        <hr style="border: none; border-top: 1px solid #eee;" />
        <p style="font-size: 12px; color: #888;">
          Best regards,<br/>The TutorHub team
        </p>
      </body>
    </html>
    """


def _send(recipients: List[str], subject: str, html_content: str) -> None:
    """Envoie un email HTML. Lève NotificationError en cas d'échec SMTP."""
    msg = MIMEMultipart("alternative")
    msg["From"] = settings.SMTP_FROM
    msg["To"] = ", ".join(recipients)
    msg["Subject"] = subject
    msg.attach(MIMEText(html_content, "html", "utf-8"))

    if not settings.EMAIL_ENABLED:
        logger.info("Envoi désactivé (EMAIL_ENABLED=false) : '%s' non envoyé à %s", subject, recipients)
        return

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
            if settings.SMTP_USE_TLS:
                server.starttls()
            if settings.SMTP_USERNAME:
                server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        raise NotificationError(f"SMTP error while sending '{subject}': {exc}") from exc


def send_request_created_email(
    student_email: str,
    student_name: str,
    subject: str,
    grade_level: str,
    request_id: uuid.UUID,
) -> bool:
    """Confirme à l'élève que sa demande a bien été créée."""
    body = f"""
        <p>Hello {html.escape(student_name)},</p>
        <p>Your tutoring request for <strong>{subject}</strong> ({grade_level}) has been created.</p>
        <p>What's next? Our team will review it and assign a tutor as soon as possible.</p>
        <p><a href="{_request_link(request_id)}">View your request</a></p>
    """
    try:
        _send([student_email], f"Request Created Successfully - {subject}",
              _wrap_html("Request created", body))
    except NotificationError as exc:
        logger.error("Email de confirmation non envoyé à %s : %s", student_email, exc)
        return False
    logger.info("Email de confirmation envoyé à %s (demande %s)", student_email, request_id)
    return True


def send_admin_new_request_email(
    recipients: List[str],
    subject: str,
    grade_level: str,
    student_name: str,
    description: str,
    request_id: uuid.UUID,
) -> bool:
    """Prévient les admins et tuteurs qu'une nouvelle demande est disponible."""
    if not recipients:
        logger.info("Aucun admin ni tuteur à prévenir pour la demande %s", request_id)
        return True

    body = f"""
        <p>A new tutoring request has been posted by <strong>{html.escape(student_name)}</strong>.</p>
        <ul>
          <li>Subject: {subject}</li>
          <li>Grade level: {grade_level}</li>
        </ul>
        <p>{html.escape(description)}</p>
        <p>If you're interested in this request, please log in to the admin panel to assign it.</p>
        <p><a href="{_request_link(request_id)}">Open the request</a></p>
    """
    try:
        _send(recipients, f"New Tutoring Request - {subject}", _wrap_html("New tutoring request", body))
    except NotificationError as exc:
        logger.error("Email équipe non envoyé (%d destinataires) : %s", len(recipients), exc)
        return False
    logger.info("Email équipe envoyé à %d destinataires (demande %s)", len(recipients), request_id)
    return True


def send_tutor_assigned_email(
    student_email: str,
    student_name: str,
    tutor_name: str,
    subject: str,
    request_id: uuid.UUID,
) -> bool:
    """Annonce à l'élève le tuteur qui lui a été assigné."""
    body = f"""
        <p>Hello {html.escape(student_name)},</p>
        <p>Great news! <strong>{html.escape(tutor_name)}</strong> has been assigned to your
        <strong>{subject}</strong> request.</p>
        <p><a href="{_request_link(request_id)}">View your request</a></p>
    """
    try:
        _send([student_email], f"Great News! A Tutor Has Been Assigned - {subject}",
              _wrap_html("A tutor has been assigned", body))
    except NotificationError as exc:
        logger.error("Email d'assignation non envoyé à %s : %s", student_email, exc)
        return False
    logger.info("Email d'assignation envoyé à %s (demande %s)", student_email, request_id)
    return True


def send_status_changed_email(
    student_email: str,
    student_name: str,
    new_status: str,
    subject: str,
    request_id: uuid.UUID,
) -> bool:
    """Informe l'élève du nouveau statut de sa demande."""
    body = f"""
        <p>Hello {html.escape(student_name)},</p>
        <p>The status of your <strong>{subject}</strong> request is now
        <strong>{new_status.upper()}</strong>.</p>
        <p>{status_message(new_status)}</p>
        <p>If you have any questions, feel free to reach out to our support team.</p>
        <p><a href="{_request_link(request_id)}">View your request</a></p>
    """
    try:
        _send([student_email], f"Request Status Update - {subject}", _wrap_html("Request status update", body))
    except NotificationError as exc:
        logger.error("Email de statut non envoyé à %s : %s", student_email, exc)
        return False
    logger.info("Email de statut envoyé à %s (demande %s → %s)", student_email, request_id, new_status)
    return True
