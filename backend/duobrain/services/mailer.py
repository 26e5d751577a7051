# duobrain/services/mailer.py
import logging
import smtplib
from email.message import EmailMessage
from string import Template

from duobrain.core.config import SimpleSettings
from duobrain.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)

OTP_SUBJECT = "duobrain - OTP Verification"

OTP_TEMPLATE = Template("""\
<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"><title>duobrain OTP</title></head>
<body style="font-family: Arial, sans-serif; background-color: #f9f9f9; margin: 0; padding: 0;">
  <div style="max-width: 600px; margin: 20px auto; background: #ffffff; border: 1px solid #dddddd; border-radius: 8px;">
    <div style="background-color: #5046E4; color: #ffffff; text-align: center; padding: 20px;">
      <h1 style="margin: 0; font-size: 24px;">Welcome to duobrain</h1>
    </div>
    <div style="padding: 20px; text-align: center; color: #333333;">
      <p>Hi there, $user_name</p>
      <p>Your One-Time Password (OTP) is:</p>
      <div style="font-size: 32px; font-weight: bold; color: #5046E4; margin: 20px 0;">$otp</div>
      <p>This code is valid for the next 10 minutes.</p>
      <p>If you did not request it, you can ignore this email.</p>
    </div>
  </div>
</body>
</html>
""")


def render_otp_email(user_name: str, otp: str) -> str:
    return OTP_TEMPLATE.substitute(user_name=user_name or "User", otp=otp)


def send_otp_email(settings: SimpleSettings, to: str, user_name: str, otp: str) -> None:
    """
    Send the OTP mail over SMTP (SSL). Without EMAIL_USER/EMAIL_PASS the code
    is only logged, which is what local development relies on.
    """
    if not settings.EMAIL_USER or not settings.EMAIL_PASS:
        logger.warning("[DEV-ONLY] mail not configured; OTP for %s: %s", to, otp)
        return

    msg = EmailMessage()
    msg["Subject"] = OTP_SUBJECT
    msg["From"] = settings.EMAIL_USER
    msg["To"] = to
    msg.set_content(f"Your duobrain OTP is {otp}. It is valid for 10 minutes.")
    msg.add_alternative(render_otp_email(user_name, otp), subtype="html")

    try:
        with smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as smtp:
            smtp.login(settings.EMAIL_USER, settings.EMAIL_PASS)
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        logger.exception("Sending OTP mail to %s failed", to)
        raise ExternalServiceError("Failed to send OTP email.") from exc
    logger.info("OTP mail sent to %s", to)
