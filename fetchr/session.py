"""
Tab session management for the request editor.

``TabSessionManager`` owns the ordered list of open tabs. Each tab wraps a
``RequestDraft``, its last response, the id of the saved request it is bound
to (None for an unsaved draft), and its loading/dirty flags.

Invariants:

- the tab list is never empty and exactly one tab is active
- at most one tab is bound to any saved request id
- every draft edit marks the tab dirty; only a successful save clears it

The manager is purely in-memory; persistence is driven by ``CollectionStore``.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Optional

from .schemas.draft import AuthData, FormField, KeyValue, RequestDraft, encode_form_body
from .schemas.execute import HttpResponse
from .schemas.request import HTTP_METHODS, AuthType, BodyType, RequestRecord

logger = logging.getLogger(__name__)

DEFAULT_TAB_NAME = "New Request"


@dataclass
class Tab:
    """One open editing session."""
    name: str = DEFAULT_TAB_NAME
    draft: RequestDraft = field(default_factory=RequestDraft)
    response: Optional[HttpResponse] = None
    request_id: Optional[str] = None
    is_loading: bool = False
    is_dirty: bool = False
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def reset(self) -> None:
        """
        Return to an unbound, empty draft.

        The tab gets a new id, so hooks from a send started before the reset
        no longer find it.
        """
        self.id = uuid.uuid4().hex
        self.name = DEFAULT_TAB_NAME
        self.draft = RequestDraft()
        self.response = None
        self.request_id = None
        self.is_loading = False
        self.is_dirty = False

    def hydrate(self, request: RequestRecord) -> None:
        """Load a saved request into this tab and bind to it."""
        self.name = request.name
        self.draft = RequestDraft.from_request(request)
        self.request_id = request.id
        self.is_dirty = False


class TabSessionManager:
    """Ordered list of open tabs with a single active tab."""

    def __init__(self):
        self.tabs: list[Tab] = [Tab()]
        self.active_index = 0

    # Accessors

    @property
    def active_tab(self) -> Tab:
        return self.tabs[self.active_index]

    @property
    def current_draft(self) -> RequestDraft:
        return self.active_tab.draft

    @property
    def selected_request_id(self) -> Optional[str]:
        return self.active_tab.request_id

    def find_tab(self, request_id: str) -> int:
        """Index of the tab bound to ``request_id``, or -1."""
        for index, tab in enumerate(self.tabs):
            if tab.request_id == request_id:
                return index
        return -1

    def tab_by_id(self, tab_id: str) -> Optional[Tab]:
        for tab in self.tabs:
            if tab.id == tab_id:
                return tab
        return None

    # Lifecycle

    def create_tab(self, name: Optional[str] = None, from_request: Optional[RequestRecord] = None) -> Tab:
        """Append a tab, hydrated from ``from_request`` when given, and activate it."""
        tab = Tab(name=name or DEFAULT_TAB_NAME)
        if from_request is not None:
            tab.hydrate(from_request)
        self.tabs.append(tab)
        self.active_index = len(self.tabs) - 1
        return tab

    def open_request(self, request: RequestRecord, force_new_tab: bool = False) -> Tab:
        """
        Show a saved request, reusing tabs where possible.

        A tab already bound to the request is activated. Otherwise a new tab
        is opened when asked to, or when the active tab is bound to another
        request or has unsaved edits; if not, the active tab is loaded in
        place.
        """
        existing = self.find_tab(request.id)
        if existing != -1:
            self.active_index = existing
            return self.active_tab

        active = self.active_tab
        if force_new_tab or active.request_id or active.is_dirty:
            return self.create_tab(from_request=request)

        active.hydrate(request)
        return active

    def close_tab(self, index: int) -> None:
        """
        Close a tab; the last remaining tab is reset instead of removed.

        Out-of-range indexes are ignored.
        """
        if not 0 <= index < len(self.tabs):
            return

        if len(self.tabs) == 1:
            self.tabs[0].reset()
            return

        del self.tabs[index]

        if self.active_index >= len(self.tabs):
            self.active_index = len(self.tabs) - 1
        elif self.active_index > index:
            self.active_index -= 1

    def switch_tab(self, index: int) -> None:
        if 0 <= index < len(self.tabs):
            self.active_index = index

    def update_tab_name(self, index: int, name: str) -> None:
        if 0 <= index < len(self.tabs):
            self.tabs[index].name = name

    def reset_active(self) -> None:
        self.active_tab.reset()

    # Draft editing; every edit marks the active tab dirty

    def _touch(self) -> RequestDraft:
        self.active_tab.is_dirty = True
        return self.active_tab.draft

    def update_draft(self, **changes) -> RequestDraft:
        """Replace fields of the active draft, validating the result."""
        tab = self.active_tab
        merged = tab.draft.model_dump()
        merged.update(changes)
        draft = RequestDraft.model_validate(merged)
        if "form_data" in changes and "body" not in changes and draft.body_type == "form":
            draft.body = encode_form_body(draft.form_data)
        tab.draft = draft
        tab.is_dirty = True
        return tab.draft

    def set_method(self, method: str) -> bool:
        """Set the method; anything outside HTTP_METHODS is refused."""
        method = method.upper()
        if method not in HTTP_METHODS:
            logger.debug("Ignoring unsupported method %r", method)
            return False
        self._touch().method = method
        return True

    def set_url(self, url: str) -> None:
        self._touch().url = url

    def set_headers(self, headers: list[KeyValue]) -> None:
        self._touch().headers = [h.model_copy() for h in headers]

    def add_header(self, key: str = "", value: str = "", enabled: bool = True) -> None:
        self._touch().headers.append(KeyValue(key=key, value=value, enabled=enabled))

    def update_header(self, index: int, **changes) -> None:
        headers = self.current_draft.headers
        if not 0 <= index < len(headers):
            return
        headers[index] = headers[index].model_copy(update=changes)
        self._touch()

    def remove_header(self, index: int) -> None:
        headers = self.current_draft.headers
        if 0 <= index < len(headers):
            del headers[index]
            self._touch()

    def set_body(self, body: str) -> None:
        self._touch().body = body

    def set_body_type(self, body_type: BodyType) -> None:
        self.update_draft(body_type=body_type)

    def set_auth(self, auth_type: AuthType, auth_data: Optional[AuthData] = None) -> None:
        self.update_draft(auth_type=auth_type, auth_data=auth_data or AuthData())

    def set_form_data(self, fields: list[FormField]) -> None:
        """Replace the form fields; a form draft's body text is re-encoded from them."""
        draft = self._touch()
        draft.form_data = [f.model_copy() for f in fields]
        if draft.body_type == "form":
            draft.body = encode_form_body(draft.form_data)

    def set_query_params(self, params: list[KeyValue]) -> bool:
        """
        Rewrite the URL query from ``params``.

        Returns False, leaving the draft untouched, when the URL is invalid.
        """
        url = self.current_draft.with_query_params(params)
        if url is None:
            logger.debug("Ignoring query params for unparseable URL %r", self.current_draft.url)
            return False
        self._touch().url = url
        return True

    # Hooks driven by the store

    def mark_saved(self, request_id: str, name: str, tab_id: Optional[str] = None) -> None:
        """Bind a tab (the active one by default) to its saved request."""
        tab = self.tab_by_id(tab_id) if tab_id else self.active_tab
        if tab is None:
            return
        tab.request_id = request_id
        tab.name = name
        tab.is_dirty = False

    def unbind_request(self, request_id: str) -> None:
        """Detach every tab bound to a request that no longer exists."""
        for tab in self.tabs:
            if tab.request_id == request_id:
                tab.request_id = None
                tab.is_dirty = True

    def set_response(self, tab_id: str, response: Optional[HttpResponse]) -> None:
        tab = self.tab_by_id(tab_id)
        if tab is not None:
            tab.response = response

    def set_loading(self, tab_id: str, loading: bool) -> None:
        tab = self.tab_by_id(tab_id)
        if tab is not None:
            tab.is_loading = loading
