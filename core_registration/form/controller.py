"""Client-side state for the member registration form.

`MemberFormController` holds what the page holds: the seven field values,
whether a submission is in flight and the toast currently on screen. It posts
to the members endpoint with an `httpx.AsyncClient`, so the same controller
drives the terminal script in `scripts/register_member.py` and the tests.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from core_registration.models.models import (
    GENERIC_ERROR, REQUEST_ERROR, SUCCESS_MESSAGE, TOAST_DURATION, empty_member,
)

logger = logging.getLogger(__name__)

MEMBERS_ENDPOINT = "/api/members"

SUCCESS = "success"
ERROR = "error"


class SubmissionError(Exception):
    """The endpoint answered, but not with a success status."""


class Toast:
    def __init__(self, visible: bool = False, message: str = "", kind: str = ""):
        self.visible = visible
        self.message = message
        self.kind = kind

    def __repr__(self):
        return f"Toast(visible={self.visible!r}, message={self.message!r}, kind={self.kind!r})"


class ToastNotifier:
    """Shows one toast at a time and hides it `duration` seconds later.

    `scheduler` is anything with ``call_later(delay, callback)`` returning a
    handle with ``cancel()``; by default the running asyncio loop.
    Only one dismissal timer is ever pending: showing a toast cancels the
    previous timer before arming a new one.
    """

    def __init__(self, scheduler=None, duration: float = TOAST_DURATION):
        self.toast = Toast()
        self._scheduler = scheduler
        self._duration = duration
        self._timer = None

    def show(self, message: str, kind: str) -> None:
        self._cancel_timer()
        self.toast = Toast(True, message, kind)
        scheduler = self._scheduler or asyncio.get_running_loop()
        self._timer = scheduler.call_later(self._duration, self._dismiss)

    def close(self) -> None:
        self._cancel_timer()

    def _dismiss(self) -> None:
        self._timer = None
        self.toast = Toast(False, self.toast.message, self.toast.kind)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class MemberFormController:
    def __init__(self, client: httpx.AsyncClient, endpoint: str = MEMBERS_ENDPOINT,
                 notifier: Optional[ToastNotifier] = None):
        self._client = client
        self._endpoint = endpoint
        self.notifier = notifier or ToastNotifier()
        self.form_data: Dict[str, str] = empty_member()
        self.is_submitting = False

    @property
    def toast(self) -> Toast:
        return self.notifier.toast

    def on_field_change(self, field_name: str, value: str) -> None:
        if field_name not in self.form_data:
            raise KeyError(field_name)
        self.form_data[field_name] = value

    async def on_submit(self) -> bool:
        """Post the form once. Returns True when the member was saved.

        A submit issued while another is outstanding is ignored, like
        clicking the disabled button.
        """
        if self.is_submitting:
            return False

        self.is_submitting = True
        try:
            await self._post(dict(self.form_data))
        except SubmissionError as exc:
            logger.warning("Member submission rejected: %s", exc)
            self.notifier.show(str(exc) or GENERIC_ERROR, ERROR)
            return False
        except httpx.HTTPError:
            logger.warning("Member submission failed", exc_info=True)
            self.notifier.show(GENERIC_ERROR, ERROR)
            return False
        except Exception as exc:
            # anything else (a malformed endpoint URL, a broken transport) still ends in a toast
            logger.exception("Member submission failed unexpectedly")
            self.notifier.show(str(exc) or GENERIC_ERROR, ERROR)
            return False
        finally:
            self.is_submitting = False

        self.notifier.show(SUCCESS_MESSAGE, SUCCESS)
        self.form_data = empty_member()
        return True

    async def _post(self, payload: Dict[str, str]) -> None:
        response = await self._client.post(self._endpoint, json=payload)
        if response.is_success:
            return
        try:
            data: Any = response.json()
        except ValueError:
            data = None
        message = data.get("error") if isinstance(data, dict) else None
        # only a string error is shown verbatim
        if not isinstance(message, str):
            message = None
        raise SubmissionError(message or REQUEST_ERROR)

    def close(self) -> None:
        """Tear down: cancel any pending toast dismissal."""
        self.notifier.close()
