"""Email channel registry.

Uses the fake adapter unless a real one is installed with ``set_mailer``.
"""

from storefront.notifications.channel.email_port import EmailPort
from storefront.notifications.channel.fake_email import FakeEmailAdapter

_mailer: EmailPort | None = None


def get_mailer() -> EmailPort:
    """Return the active email adapter (singleton)."""
    global _mailer
    if _mailer is None:
        _mailer = FakeEmailAdapter()
    return _mailer


def set_mailer(mailer: EmailPort) -> None:
    global _mailer
    _mailer = mailer


def reset_mailer() -> None:
    """Reset to the default adapter (useful for testing)."""
    global _mailer
    _mailer = None
