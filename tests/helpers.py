import smtplib

from src.sitecms.core.config import Settings
from src.sitecms.core.email import EmailService

PASSWORD = "TestPassword123!"


def make_settings(**overrides) -> Settings:
    values = {
        "MODE": "test",
        "SECRET_KEY": "test-secret-key",
        "JWT_REFRESH_TOKEN_KEY": "test-refresh-secret-key",
        "DATABASE_PASSWORD": "test",
        "ALLOW_REGISTRATION": True,
        "CONTACT_RECIPIENT": "owner@example.com",
        "FRONTEND_URL": "http://front.test",
        "LOG_LEVEL": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class RecordingEmailService(EmailService):
    """Keeps outgoing mail in memory instead of talking to an SMTP server."""

    def __init__(self, settings: Settings):
        super().__init__(settings)
        self.sent = []
        self.fail = False

    def send_email(self, to_emails, subject, html_content, text_content=None, reply_to=None):
        if self.fail:
            raise smtplib.SMTPException("SMTP server unavailable")
        self.sent.append({
            "to": list(to_emails),
            "subject": subject,
            "html": html_content,
            "text": text_content,
            "reply_to": reply_to,
        })


class FakeRedis:
    """The commands the token blacklist and health check use."""

    def __init__(self):
        self.store = {}

    async def setex(self, key, seconds, value):
        self.store[key] = (value, seconds)

    async def exists(self, key):
        return 1 if key in self.store else 0

    async def ping(self):
        return True


async def login(client, email, password=PASSWORD):
    res = await client.post("/auth/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.text
    return res.json()


async def auth_headers(client, email, password=PASSWORD):
    tokens = await login(client, email, password)
    return {"Authorization": f"Bearer {tokens['accessToken']}"}
