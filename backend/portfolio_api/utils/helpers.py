"""General-purpose utility helpers."""
import json
import re
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as returned by SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def slugify(text: str) -> str:
    """Convert text to URL-friendly slug.

    Lower-cases, collapses every run of characters outside [a-z0-9] into a
    single '-', then strips leading/trailing dashes.
    """
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def parse_string_list(value: str | list | None) -> list[str]:
    """Parse a list sent as a JSON array string or a comma-separated string."""
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    value = value.strip()
    if not value:
        return []
    if value.startswith("["):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            raise ValueError("technologies must be a JSON array or comma-separated list")
        if not isinstance(parsed, list):
            raise ValueError("technologies must be a JSON array or comma-separated list")
        return [str(v).strip() for v in parsed if str(v).strip()]
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_bool(value: str | bool | None, default: bool = False) -> bool:
    """Parse a form boolean ("true"/"false"/"1"/"0")."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return value.strip().lower() in ("1", "true", "yes", "on")


def client_ip(headers, peer: str | None) -> str:
    """Resolve the caller's IP from proxy headers, falling back to the peer address."""
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return peer or "Unknown"


async def raw_form_field(request, name: str) -> str | None:
    """Form value exactly as sent.

    FastAPI maps an empty form string to the parameter default; reading the
    parsed form directly keeps ``field=""`` distinguishable from an absent field.
    """
    form = await request.form()
    value = form.get(name)
    return value if isinstance(value, str) else None
