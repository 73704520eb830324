"""
Unit tests for lightbox navigation and key bindings.
"""

import pytest

from familyhub.ui.handlers.lightbox import (
    ARROW_LEFT,
    ARROW_RIGHT,
    ESCAPE,
    KeyBindingRegistry,
    LightboxState,
    PhotoNotInViewError,
    apply_lightbox_key,
    build_key_forwarder,
    dispatch_pressed,
    get_key_registry,
    get_lightbox_state,
    lightbox_button_keys,
    open_lightbox,
    widget_css_class,
)
from tests.conftest import TestDataFactory


@pytest.fixture
def photos():
    factory = TestDataFactory()
    return [factory.create_photo(f"Photo {i}", id=f"p{i}") for i in range(5)]


@pytest.mark.unit
class TestLightboxState:
    def test_starts_closed(self):
        state = LightboxState.closed()

        assert not state.is_open
        assert state.current_photo([]) is None

    def test_select_opens_on_photo(self, photos):
        state = LightboxState.closed().select(photos, "p2")

        assert state.is_open
        assert state.index == 2
        assert state.current_photo(photos) is photos[2]
        assert state.position_label(photos) == "3 of 5"

    def test_select_photo_not_in_view(self, photos):
        with pytest.raises(PhotoNotInViewError):
            LightboxState.closed().select(photos, "missing")

    def test_next_wraps_to_first(self, photos):
        state = LightboxState.closed().select(photos, "p4")

        assert state.next(photos).index == 0

    def test_prev_wraps_to_last(self, photos):
        state = LightboxState.closed().select(photos, "p0")

        assert state.prev(photos).index == 4

    @pytest.mark.parametrize("start", range(5))
    def test_n_steps_return_to_start(self, photos, start):
        opened = LightboxState.closed().select(photos, f"p{start}")
        forward = opened
        backward = opened

        for _ in range(len(photos)):
            forward = forward.next(photos)
            backward = backward.prev(photos)
            assert 0 <= forward.index < len(photos)
            assert 0 <= backward.index < len(photos)

        assert forward == opened
        assert backward == opened

    def test_next_then_prev_is_identity(self, photos):
        state = LightboxState.closed().select(photos, "p1")

        assert state.next(photos).prev(photos) == state

    def test_single_photo_stays_put(self, photos):
        single = photos[:1]
        state = LightboxState.closed().select(single, "p0")

        assert state.next(single) == state
        assert state.prev(single) == state

    def test_empty_list_is_rejected(self, photos):
        state = LightboxState.closed().select(photos, "p0")

        with pytest.raises(ValueError):
            state.next([])
        with pytest.raises(ValueError):
            state.prev([])

    def test_closed_state_does_not_move(self, photos):
        state = LightboxState.closed()

        assert state.next(photos) == state

    def test_follows_photo_when_list_changes(self, photos):
        state = LightboxState.closed().select(photos, "p3")
        narrowed = [photos[1], photos[3]]

        assert state.current_photo(narrowed) is photos[3]
        assert state.next(narrowed).photo_id == "p1"

    def test_clamps_index_when_photo_disappears(self, photos):
        state = LightboxState.closed().select(photos, "p4")
        narrowed = photos[:2]

        assert state.current_photo(narrowed) is photos[1]

    def test_handle_key(self, photos):
        state = LightboxState.closed().select(photos, "p2")

        assert state.handle_key(ARROW_RIGHT, photos).index == 3
        assert state.handle_key(ARROW_LEFT, photos).index == 1
        assert not state.handle_key(ESCAPE, photos).is_open
        assert state.handle_key("Enter", photos) == state

    def test_keys_ignored_while_closed(self, photos):
        state = LightboxState.closed()

        assert state.handle_key(ARROW_RIGHT, photos) == state


@pytest.mark.unit
class TestKeyBindingRegistry:
    def test_dispatch_reaches_bound_handler(self):
        registry = KeyBindingRegistry()
        received = []

        with registry.bound(received.append):
            assert registry.dispatch(ESCAPE)

        assert received == [ESCAPE]

    def test_handler_removed_after_scope(self):
        registry = KeyBindingRegistry()
        received = []

        with registry.bound(received.append):
            assert len(registry) == 1

        assert len(registry) == 0
        assert not registry.dispatch(ESCAPE)
        assert received == []

    def test_handler_removed_when_render_fails(self):
        registry = KeyBindingRegistry()

        with pytest.raises(RuntimeError):
            with registry.bound(lambda key: None):
                raise RuntimeError("render failed")

        assert len(registry) == 0

    def test_repeated_open_close_does_not_accumulate(self):
        registry = KeyBindingRegistry()
        received = []

        for _ in range(5):
            with registry.bound(received.append):
                registry.dispatch(ARROW_RIGHT)

        assert len(registry) == 0
        assert received == [ARROW_RIGHT] * 5


@pytest.mark.unit
class TestLightboxSession:
    def test_open_and_navigate(self, session_state, photos):
        assert open_lightbox("photos", photos, "p4")

        state = apply_lightbox_key("photos", photos, ARROW_RIGHT)

        assert state.index == 0
        assert get_lightbox_state("photos") == state

    def test_open_photo_not_in_view_keeps_closed(self, session_state, photos):
        assert not open_lightbox("photos", photos, "missing")

        assert not get_lightbox_state("photos").is_open

    def test_scopes_are_independent(self, session_state, photos):
        open_lightbox("photos", photos, "p1")

        assert not get_lightbox_state("member:m1").is_open

    def test_escape_closes(self, session_state, photos):
        open_lightbox("photos", photos, "p1")

        apply_lightbox_key("photos", photos, ESCAPE)

        assert not get_lightbox_state("photos").is_open

    def test_key_on_empty_gallery_closes(self, session_state, photos):
        open_lightbox("photos", photos, "p1")

        state = apply_lightbox_key("photos", [], ARROW_RIGHT)

        assert not state.is_open

    def test_registry_is_per_session(self, session_state):
        registry = get_key_registry()

        assert get_key_registry() is registry
        assert session_state["key_binding_registry"] is registry


@pytest.mark.unit
class TestKeyForwarding:
    def test_button_keys_cover_every_lightbox_key(self):
        assert lightbox_button_keys("photos") == {
            ARROW_LEFT: "photos_lightbox_prev",
            ARROW_RIGHT: "photos_lightbox_next",
            ESCAPE: "photos_lightbox_close",
        }

    def test_widget_css_class(self):
        assert widget_css_class("photos_lightbox_next") == "st-key-photos_lightbox_next"
        assert widget_css_class("member:m1_lightbox_next") == "st-key-member-m1_lightbox_next"

    def test_forwarder_targets_lightbox_buttons(self):
        script = build_key_forwarder(lightbox_button_keys("member:m1"))

        assert '"ArrowRight": ".st-key-member-m1_lightbox_next button"' in script
        assert '"ArrowLeft": ".st-key-member-m1_lightbox_prev button"' in script
        assert '"Escape": ".st-key-member-m1_lightbox_close button"' in script

    def test_forwarder_ignores_text_fields_and_releases_listener(self):
        script = build_key_forwarder(lightbox_button_keys("photos"))

        assert "INPUT" in script and "TEXTAREA" in script
        assert script.count('addEventListener("keydown"') == 1
        assert 'removeEventListener("keydown", onKey, true)' in script
        assert "pagehide" in script

    def test_pressed_key_reaches_lightbox(self, session_state, photos):
        open_lightbox("photos", photos, "p1")
        registry = get_key_registry()

        with registry.bound(lambda key: apply_lightbox_key("photos", photos, key)):
            pressed = dispatch_pressed(registry, {ARROW_LEFT: False, ARROW_RIGHT: True, ESCAPE: False})

        assert pressed == ARROW_RIGHT
        assert get_lightbox_state("photos").photo_id == "p2"
        assert len(registry) == 0

    def test_escape_press_closes_lightbox(self, session_state, photos):
        open_lightbox("photos", photos, "p1")
        registry = get_key_registry()

        with registry.bound(lambda key: apply_lightbox_key("photos", photos, key)):
            dispatch_pressed(registry, {ARROW_LEFT: False, ARROW_RIGHT: False, ESCAPE: True})

        assert not get_lightbox_state("photos").is_open

    def test_nothing_pressed(self, session_state, photos):
        open_lightbox("photos", photos, "p1")
        registry = get_key_registry()
        received = []

        with registry.bound(received.append):
            assert dispatch_pressed(registry, {ARROW_LEFT: False, ARROW_RIGHT: False}) is None

        assert received == []
        assert get_lightbox_state("photos").photo_id == "p1"
