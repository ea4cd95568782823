import smtplib, logging
from email.message import EmailMessage
from urllib.parse import urlencode

import config

logger = logging.getLogger("mailer")


class Mailer:
    """
    SMTP notifier for verification codes and reset links.

    Sending is best effort: every public ``send_*`` method returns a bool and
    never raises, so a mail outage cannot undo an account mutation.
    """

    def __init__(
        self,
        host: str | None = config.SMTP_HOST,
        port: int = config.SMTP_PORT,
        user: str | None = config.SMTP_USER,
        password: str | None = config.SMTP_PASSWORD,
        sender: str | None = config.SMTP_FROM,
        disabled: bool = config.SMTP_DISABLE,
        app_name: str = config.APP_NAME,
        frontend_url: str = config.FRONTEND_URL,
        timeout: float = 15,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender or user
        self.disabled = disabled
        self.app_name = app_name
        self.frontend_url = frontend_url.rstrip("/")
        self.timeout = timeout

    def config_complete(self) -> bool:
        return all([self.host, self.port, self.user, self.password, self.sender])

    def reset_url(self, email: str, token: str) -> str:
        return f"{self.frontend_url}/reset-password?{urlencode({'token': token, 'email': email})}"

    def send_verification_email(self, to_email: str, code: str, minutes_valid: int = config.VERIFICATION_CODE_EXP_MIN) -> bool:
        subject = f"Verify Your Email - {self.app_name}"
        text_body = (
            f"Thank you for registering with {self.app_name}.\n\n"
            f"Your verification code is: {code}\n"
            f"This code will expire in {minutes_valid} minutes.\n\n"
            f"If you did not register for a {self.app_name} account, please ignore this email."
        )
        html_body = (
            "<h1>Email Verification</h1>"
            f"<p>Thank you for registering with {self.app_name}. Please use the verification code below "
            "to verify your email address:</p>"
            f'<h2 style="letter-spacing: 5px; font-size: 24px; background-color: #f0f0f0; padding: 10px; '
            f'display: inline-block;">{code}</h2>'
            f"<p>This code will expire in {minutes_valid} minutes.</p>"
            f"<p>If you did not register for a {self.app_name} account, please ignore this email.</p>"
        )
        return self.send_email(to_email, subject, text_body, html_body)

    def send_password_reset_email(self, to_email: str, token: str, minutes_valid: int = config.RESET_TOKEN_EXP_MIN) -> bool:
        url = self.reset_url(to_email, token)
        subject = f"Reset Your Password - {self.app_name}"
        text_body = (
            "You requested to reset your password. Open the link below to choose a new one:\n\n"
            f"{url}\n\n"
            f"This link will expire in {minutes_valid} minutes.\n"
            "If you did not request a password reset, please ignore this email."
        )
        html_body = (
            "<h1>Password Reset Request</h1>"
            "<p>You requested to reset your password. Please click the link below to reset your password:</p>"
            f'<p><a href="{url}" style="padding: 10px 15px; background-color: #3498db; color: white; '
            'text-decoration: none; border-radius: 5px;">Reset Password</a></p>'
            f"<p>This link will expire in {minutes_valid} minutes.</p>"
            "<p>If you did not request a password reset, please ignore this email.</p>"
            f"<p>Alternatively, you can copy and paste the following URL into your browser: {url}</p>"
        )
        return self.send_email(to_email, subject, text_body, html_body)

    def send_email(self, to_email: str, subject: str, text_body: str, html_body: str | None = None) -> bool:
        """
        Send an email via SMTP. Returns True if sent, False otherwise.
        """
        if self.disabled:
            logger.warning("[SMTP_DISABLED] Email for %s -> %s", to_email, subject)
            return True

        if not self.config_complete():
            logger.warning("[SMTP_FALLBACK] Incomplete SMTP config; email=%s subject=%s", to_email, subject)
            return False

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to_email
        msg.set_content(text_body)
        if html_body:
            msg.add_alternative(html_body, subtype="html")

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.starttls()
                smtp.login(self.user, self.password)
                smtp.send_message(msg)
            logger.info("Sent email to %s", to_email)
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed sending email to %s: %s", to_email, e)
            return False
