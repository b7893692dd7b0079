from fastapi_mail import ConnectionConfig

from config.settings import Settings


def build_mail_config(settings: Settings) -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=settings.sender_email,
        MAIL_PASSWORD=settings.sender_password,
        MAIL_FROM=settings.sender_email,
        MAIL_PORT=settings.mail_port,
        MAIL_SERVER=settings.mail_server,
        MAIL_STARTTLS=True,
        MAIL_SSL_TLS=False,
        USE_CREDENTIALS=True,
        VALIDATE_CERTS=True,
    )
