"""
Email Service
Tracking confirmations, contact form relay and password reset links
"""

from flask import current_app
from flask_mail import Message
from markupsafe import escape
from smtplib import SMTPException

from extensions import mail


FOOTER = """
                <hr style="border: none; border-top: 1px solid #eee; margin: 20px 0;">
                <p style="color: #999; font-size: 12px;">
                    This is an automated message from the SAYIT platform. Please do not reply to this email.
                </p>
"""


class EmailService:
    """Service for sending emails"""

    @staticmethod
    def send_email(to, subject, html_body, text_body=None, reply_to=None):
        """Send an email; failures are logged and reported as False"""
        try:
            msg = Message(
                subject=subject,
                recipients=[to] if isinstance(to, str) else to,
                html=html_body,
                body=text_body or html_body,
                reply_to=reply_to
            )
            mail.send(msg)
            return True
        except (SMTPException, OSError) as e:
            current_app.logger.error(f'Failed to send email: {str(e)}')
            return False

    @staticmethod
    def send_tracking_confirmation(complaint, email):
        """Give an external submitter the tracking ID for their complaint"""
        subject = f"Complaint received - Tracking ID {complaint.tracking_id}"
        track_url = f"{current_app.config.get('FRONTEND_URL')}/track/{complaint.tracking_id}"
        agency = complaint.agency.name if complaint.agency else 'the responsible agency'

        html_body = f"""
        <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
                <h2 style="color: #2c3e50;">Your complaint has been received</h2>
                <p>Thank you for reporting <strong>{escape(complaint.title)}</strong>.</p>
                <div style="background-color: #f8f8f8; padding: 20px; border-radius: 5px; margin: 20px 0;">
                    <p><strong>Tracking ID:</strong> {complaint.tracking_id}</p>
                    <p><strong>Routed to:</strong> {agency}</p>
                    <p><strong>Status:</strong> {complaint.status}</p>
                </div>
                <p>Keep the tracking ID to follow progress without an account.</p>
                <div style="margin: 30px 0;">
                    <a href="{track_url}"
                       style="background-color: #2c3e50; color: white; padding: 12px 30px;
                              text-decoration: none; border-radius: 5px; display: inline-block;">
                        Track Your Complaint
                    </a>
                </div>
                {FOOTER}
            </div>
        </body>
        </html>
        """
        text_body = (f"Your complaint \"{complaint.title}\" has been received.\n"
                     f"Tracking ID: {complaint.tracking_id}\nTrack it at {track_url}")
        return EmailService.send_email(email, subject, html_body, text_body)

    @staticmethod
    def send_contact_message(name, email, category, subject, message):
        """Relay a contact form submission to the support inbox"""
        inbox = current_app.config.get('CONTACT_INBOX')
        safe = {key: escape(value) for key, value in
                {'name': name, 'email': email, 'category': category,
                 'subject': subject, 'message': message}.items()}
        html_body = f"""
        <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
                <h2 style="color: #2c3e50;">New contact message</h2>
                <p><strong>From:</strong> {safe['name']} &lt;{safe['email']}&gt;</p>
                <p><strong>Category:</strong> {safe['category']}</p>
                <p><strong>Subject:</strong> {safe['subject']}</p>
                <div style="background-color: #f8f8f8; padding: 20px; border-radius: 5px; margin: 20px 0;">
                    <p style="white-space: pre-wrap;">{safe['message']}</p>
                </div>
                {FOOTER}
            </div>
        </body>
        </html>
        """
        return EmailService.send_email(
            inbox,
            f"[Contact/{category}] {subject}",
            html_body,
            text_body=f"From: {name} <{email}>\nCategory: {category}\n\n{message}",
            reply_to=email
        )

    @staticmethod
    def send_password_reset_email(account, reset_token, user_type):
        """Send password reset email"""
        subject = "Reset Your SAYIT Password"
        minutes = current_app.config.get('PASSWORD_RESET_EXPIRY_MINUTES', 60)
        reset_url = (f"{current_app.config.get('FRONTEND_URL')}/reset-password"
                     f"?token={reset_token}&user_type={user_type}")

        html_body = f"""
        <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
                <h2 style="color: #2c3e50;">Password Reset Request</h2>
                <p>Hi {escape(account.name)},</p>
                <p>We received a request to reset your password. Click the button below to create a new password:</p>

                <div style="margin: 30px 0;">
                    <a href="{reset_url}"
                       style="background-color: #2c3e50; color: white; padding: 12px 30px;
                              text-decoration: none; border-radius: 5px; display: inline-block;">
                        Reset Password
                    </a>
                </div>

                <p>Or copy and paste this link into your browser:</p>
                <p style="background-color: #f8f8f8; padding: 10px; border-radius: 5px; word-break: break-all;">
                    {reset_url}
                </p>

                <p style="color: #666; font-size: 14px; margin-top: 30px;">
                    This link will expire in {minutes} minutes and can be used once.
                </p>
                <p style="color: #666; font-size: 14px;">
                    If you didn't request a password reset, you can ignore this email.
                </p>
                {FOOTER}
            </div>
        </body>
        </html>
        """
        text_body = (f"Reset your SAYIT password within {minutes} minutes:\n{reset_url}\n\n"
                     "If you didn't request this, ignore this email.")
        return EmailService.send_email(account.email, subject, html_body, text_body)
