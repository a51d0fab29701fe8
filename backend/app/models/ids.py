from uuid import uuid4

# Literal id of the per-user virtual calendar; never a persisted row id
DEFAULT_CALENDAR_ID = "default"


def new_id() -> str:
    return str(uuid4())
