import logging

logger = logging.getLogger("eshop.users")


def log_auth_event(action: str, request, user=None, status: str = "success", **fields):
    """Emit a structured ``auth.<action>`` event with caller ip and outcome."""

    extra = {
        "event": f"auth.{action}",
        "ip": request.META.get("REMOTE_ADDR"),
        "status": status,
        **fields,
    }
    if user is not None and getattr(user, "is_authenticated", False):
        extra["user_id"] = user.id
        extra["role"] = user.role
    level = logging.INFO if status == "success" else logging.WARNING
    logger.log(level, "auth.%s", action, extra=extra)
