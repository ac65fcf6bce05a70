"""Response Formatter - turns a response body into the caller-facing value."""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any

from wc_api_client.models import OutputMode


def format_output(mode: OutputMode, body: str) -> Any:
    """Format a body according to the output mode.

    MAP and OBJECT decode JSON; a body that isn't valid JSON (including an
    empty one) yields None rather than raising. STRING returns the body as is.
    """
    mode = OutputMode(mode)
    if mode is OutputMode.STRING:
        return body

    object_hook = (lambda d: SimpleNamespace(**d)) if mode is OutputMode.OBJECT else None
    try:
        return json.loads(body, object_hook=object_hook)
    except (json.JSONDecodeError, TypeError):
        return None
