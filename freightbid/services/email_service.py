"""
Email service for lane notifications using SendGrid.
"""
import logging
from pathlib import Path
from typing import List

from jinja2 import Environment, FileSystemLoader, select_autoescape
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Email, To, Content

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"
DISPLAY_FORMAT = "%d %b %Y %H:%M UTC"


class EmailService:
    def __init__(self, api_key=None, from_email=None, from_name=None, frontend_url=None, enabled=True):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self.frontend_url = frontend_url
        self.enabled = enabled and bool(api_key)
        self.client = SendGridAPIClient(api_key) if self.enabled else None

        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(['html', 'xml'])
        )

    @classmethod
    def from_config(cls, config):
        return cls(
            api_key=config.get('SENDGRID_API_KEY'),
            from_email=config.get('EMAIL_FROM'),
            from_name=config.get('EMAIL_FROM_NAME'),
            frontend_url=config.get('FRONTEND_URL'),
            enabled=config.get('MAIL_ENABLED', True),
        )

    def render_lane_notification(self, lane) -> str:
        template = self.env.get_template("email_new_lane.html")
        return template.render(
            lane=lane.to_dict(),
            valid_from=lane.valid_from.strftime(DISPLAY_FORMAT),
            valid_until=lane.valid_until.strftime(DISPLAY_FORMAT),
            dashboard_url=self.frontend_url,
        )

    def send_lane_notification(self, emails: List[str], lane) -> bool:
        """
        Announce a newly published lane to forwarders.

        Each recipient gets an individual copy so addresses are not disclosed
        to one another.

        Args:
            emails: Forwarder email addresses
            lane: The created Lane

        Returns:
            True if SendGrid accepted the message
        """
        if not emails:
            return False

        if not self.enabled:
            logger.info(f"Mail disabled, skipping notification for lane {lane.id} to {len(emails)} forwarders")
            return False

        message = Mail(
            from_email=Email(self.from_email, self.from_name),
            to_emails=[To(email) for email in emails],
            subject=f"New Lane Published: {lane.bid_name}",
            html_content=Content("text/html", self.render_lane_notification(lane)),
            is_multiple=True,
        )

        response = self.client.send(message)
        logger.info(f"Lane {lane.id} notification sent to {len(emails)} forwarders (status {response.status_code})")
        return response.status_code == 202


def init_email_service(app):
    app.extensions['email_service'] = EmailService.from_config(app.config)


def get_email_service(app):
    return app.extensions['email_service']
