"""Tests for deterministic object key construction."""

import pytest

from casevault.core.paths import (
    Personal,
    ResourceType,
    Shared,
    content_key,
    image_key,
    object_key,
    scope_prefix,
)


class TestScopePrefix:
    def test_personal_prefix_uses_owner(self):
        assert scope_prefix(Personal("c1", "u1")) == "cases/c1/u1"

    def test_shared_prefix_uses_literal_segment(self):
        assert scope_prefix(Shared("c1")) == "cases/c1/shared"

    def test_shared_has_no_owner(self):
        assert Shared("c1").owner_id is None
        assert Shared("c1").kind == "shared"
        assert Personal("c1", "u1").kind == "personal"


class TestContentKey:
    def test_personal_note(self):
        key = content_key(Personal("c1", "u1"), ResourceType.CONTEMPORANEOUS_NOTES, "n1")
        assert key == "cases/c1/u1/contemporaneous-notes/n1/note.txt"

    def test_shared_tab(self):
        key = content_key(Shared("c1"), ResourceType.TABS, "t1")
        assert key == "cases/c1/shared/tabs/t1/content.txt"

    def test_accepts_resource_type_value(self):
        assert content_key(Shared("c1"), "tabs", "t1") == "cases/c1/shared/tabs/t1/content.txt"

    def test_deterministic(self):
        scope = Personal("c1", "u1")
        assert content_key(scope, ResourceType.TABS, "t1") == content_key(scope, ResourceType.TABS, "t1")

    def test_personal_and_shared_never_collide(self):
        personal = content_key(Personal("c1", "shared-ish"), ResourceType.TABS, "t1")
        shared = content_key(Shared("c1"), ResourceType.TABS, "t1")
        assert personal != shared

    def test_unknown_resource_type_rejected(self):
        with pytest.raises(ValueError):
            content_key(Shared("c1"), "invoices", "t1")


class TestImageKey:
    def test_image_under_resource_type(self):
        key = image_key(Personal("c1", "u1"), ResourceType.TABS, "scan.png")
        assert key == "cases/c1/u1/tabs/images/scan.png"

    def test_shared_note_image(self):
        key = image_key(Shared("c1"), ResourceType.CONTEMPORANEOUS_NOTES, "scan.png")
        assert key == "cases/c1/shared/contemporaneous-notes/images/scan.png"

    def test_object_key_with_custom_artifact(self):
        key = object_key(Shared("c1"), ResourceType.CONTEMPORANEOUS_NOTES, "n1", "draft.txt")
        assert key == "cases/c1/shared/contemporaneous-notes/n1/draft.txt"


@pytest.mark.parametrize("bad", ["", ".", "..", "a/b", "a\\b"])
def test_invalid_segments_rejected(bad):
    with pytest.raises(ValueError):
        image_key(Shared("c1"), ResourceType.TABS, bad)
    with pytest.raises(ValueError):
        content_key(Shared(bad), ResourceType.TABS, "t1")
    with pytest.raises(ValueError):
        content_key(Personal("c1", bad), ResourceType.TABS, "t1")
