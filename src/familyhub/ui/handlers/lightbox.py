"""
Lightbox navigation for photo galleries.

The lightbox is either closed or open on one photo of the gallery that is
currently displayed. Indices always refer to that displayed (filtered)
list, and for a non-empty list they always stay within ``[0, len)``.
"""

import json
import re
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass

import streamlit as st

from ...error_handling import ValidationError
from ...logging_config import get_logger
from ...models.family import FamilyPhoto

logger = get_logger(__name__)

ESCAPE = "Escape"
ARROW_LEFT = "ArrowLeft"
ARROW_RIGHT = "ArrowRight"

KeyHandler = Callable[[str], None]


class PhotoNotInViewError(ValidationError):
    """The selected photo is not part of the displayed gallery."""

    default_code = "photo_not_in_view"


@dataclass(frozen=True)
class LightboxState:
    """Immutable lightbox state; transitions return a new state."""

    photo_id: str | None = None
    index: int = 0

    @classmethod
    def closed(cls) -> "LightboxState":
        return cls()

    @property
    def is_open(self) -> bool:
        return self.photo_id is not None

    def select(self, photos: Sequence[FamilyPhoto], photo_id: str) -> "LightboxState":
        """
        Open the lightbox on a photo of the displayed list.

        Raises:
            PhotoNotInViewError: If the photo is not in ``photos``
        """
        for index, photo in enumerate(photos):
            if photo.id == photo_id:
                return LightboxState(photo_id=photo_id, index=index)
        raise PhotoNotInViewError(
            f"Photo {photo_id} is not in the displayed gallery",
            details={"photo_id": photo_id, "displayed": len(photos)},
        )

    def _anchor(self, photos: Sequence[FamilyPhoto]) -> int:
        # Follow the photo if the list changed underneath it; otherwise clamp the old index.
        for index, photo in enumerate(photos):
            if photo.id == self.photo_id:
                return index
        return min(max(self.index, 0), len(photos) - 1)

    def _step(self, photos: Sequence[FamilyPhoto], offset: int) -> "LightboxState":
        if not photos:
            raise ValueError("Cannot navigate an empty gallery")
        if not self.is_open:
            return self
        index = (self._anchor(photos) + offset) % len(photos)
        return LightboxState(photo_id=photos[index].id, index=index)

    def next(self, photos: Sequence[FamilyPhoto]) -> "LightboxState":
        """Advance one photo, wrapping to the first after the last."""
        return self._step(photos, 1)

    def prev(self, photos: Sequence[FamilyPhoto]) -> "LightboxState":
        """Go back one photo, wrapping to the last before the first."""
        return self._step(photos, -1)

    def close(self) -> "LightboxState":
        return LightboxState.closed()

    def handle_key(self, key: str, photos: Sequence[FamilyPhoto]) -> "LightboxState":
        """Map a key name to a transition; unknown keys leave the state unchanged."""
        if not self.is_open:
            return self
        if key == ESCAPE:
            return self.close()
        if key == ARROW_LEFT:
            return self.prev(photos)
        if key == ARROW_RIGHT:
            return self.next(photos)
        return self

    def current_photo(self, photos: Sequence[FamilyPhoto]) -> FamilyPhoto | None:
        if not self.is_open or not photos:
            return None
        return photos[self._anchor(photos)]

    def position_label(self, photos: Sequence[FamilyPhoto]) -> str:
        """Human readable position, e.g. ``3 of 9``."""
        if not self.is_open or not photos:
            return ""
        return f"{self._anchor(photos) + 1} of {len(photos)}"


class KeyBindingRegistry:
    """
    Holds the key handlers of the views currently on screen.

    Handlers are only ever added through :meth:`bound`, which removes them
    again when the owning view is done rendering, so repeated open/close
    cycles never accumulate handlers.
    """

    def __init__(self) -> None:
        self._handlers: list[KeyHandler] = []

    @contextmanager
    def bound(self, handler: KeyHandler) -> Iterator["KeyBindingRegistry"]:
        self._handlers.append(handler)
        try:
            yield self
        finally:
            self._handlers.remove(handler)

    def dispatch(self, key: str) -> bool:
        """
        Send a key to every bound handler.

        Returns:
            bool: True if at least one handler received the key
        """
        handlers = list(self._handlers)
        for handler in handlers:
            handler(key)
        return bool(handlers)

    def __len__(self) -> int:
        return len(self._handlers)


def dispatch_pressed(registry: KeyBindingRegistry, pressed: Mapping[str, bool]) -> str | None:
    """
    Dispatch the first pressed key through the registry.

    Returns:
        The dispatched key, or None if nothing was pressed
    """
    for key, is_pressed in pressed.items():
        if is_pressed:
            registry.dispatch(key)
            return key
    return None


# Browser side: key presses are forwarded as clicks on the lightbox buttons.

_CLASS_UNSAFE = re.compile(r"[^a-zA-Z0-9_-]")

_KEY_FORWARDER = """
<script>
(() => {
  const host = window.parent;
  const doc = host.document;
  const selectors = __SELECTORS__;
  if (host.__familyhubLightboxKeys) {
    doc.removeEventListener("keydown", host.__familyhubLightboxKeys, true);
  }
  const release = () => {
    doc.removeEventListener("keydown", onKey, true);
    if (host.__familyhubLightboxKeys === onKey) {
      delete host.__familyhubLightboxKeys;
    }
  };
  const onKey = (event) => {
    const tag = event.target && event.target.tagName;
    if (tag === "INPUT" || tag === "TEXTAREA") return;
    const selector = selectors[event.key];
    if (!selector) return;
    const button = doc.querySelector(selector);
    if (!button) {
      release();
      return;
    }
    event.preventDefault();
    event.stopPropagation();
    button.click();
  };
  doc.addEventListener("keydown", onKey, true);
  host.__familyhubLightboxKeys = onKey;
  window.addEventListener("pagehide", release);
})();
</script>
"""


def lightbox_button_keys(scope: str) -> dict[str, str]:
    """Widget keys of a gallery's lightbox buttons, by the key each one stands for."""
    return {
        ARROW_LEFT: f"{scope}_lightbox_prev",
        ARROW_RIGHT: f"{scope}_lightbox_next",
        ESCAPE: f"{scope}_lightbox_close",
    }


def widget_css_class(widget_key: str) -> str:
    """CSS class Streamlit puts on the element of a keyed widget."""
    return "st-key-" + _CLASS_UNSAFE.sub("-", widget_key.strip())


def build_key_forwarder(bindings: Mapping[str, str]) -> str:
    """
    Script that turns key presses into clicks on Streamlit buttons.

    Args:
        bindings: Key name (e.g. ``ArrowRight``) to button widget key

    The page holds at most one forwarder: installing one removes the previous
    listener, and a listener removes itself when its frame is torn down or its
    buttons are no longer on the page. Key presses in text fields are ignored.
    """
    selectors = {key: f".{widget_css_class(widget_key)} button" for key, widget_key in bindings.items()}
    return _KEY_FORWARDER.replace("__SELECTORS__", json.dumps(selectors))


# Streamlit session glue; one lightbox per gallery scope (e.g. "photos", "member:<id>").


def _state_key(scope: str) -> str:
    return f"lightbox_{scope}"


def get_lightbox_state(scope: str) -> LightboxState:
    state = st.session_state.get(_state_key(scope))
    return state if isinstance(state, LightboxState) else LightboxState.closed()


def set_lightbox_state(scope: str, state: LightboxState) -> None:
    st.session_state[_state_key(scope)] = state


def get_key_registry() -> KeyBindingRegistry:
    """Key binding registry of the current browser session."""
    if "key_binding_registry" not in st.session_state:
        st.session_state.key_binding_registry = KeyBindingRegistry()
    registry: KeyBindingRegistry = st.session_state.key_binding_registry
    return registry


def open_lightbox(scope: str, photos: Sequence[FamilyPhoto], photo_id: str) -> bool:
    """
    Open the lightbox of a gallery on a photo.

    Returns:
        bool: False if the photo is no longer displayed; the lightbox then stays closed
    """
    try:
        state = get_lightbox_state(scope).select(photos, photo_id)
    except PhotoNotInViewError:
        logger.warning("lightbox_photo_not_in_view", scope=scope, photo_id=photo_id, displayed=len(photos))
        set_lightbox_state(scope, LightboxState.closed())
        return False
    set_lightbox_state(scope, state)
    logger.debug("lightbox_opened", scope=scope, photo_id=photo_id, index=state.index)
    return True


def apply_lightbox_key(scope: str, photos: Sequence[FamilyPhoto], key: str) -> LightboxState:
    """Apply a key press to a gallery's lightbox and store the result."""
    state = get_lightbox_state(scope)
    if photos:
        state = state.handle_key(key, photos)
    else:
        state = state.close()
    set_lightbox_state(scope, state)
    return state

