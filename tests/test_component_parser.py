"""Tests for stylegate.parsers.component — single-file component facts."""

from __future__ import annotations

import pytest

from stylegate.errors import ParseError
from stylegate.parsers.component import find_blocks, parse_component

SETUP_COMPONENT = """\
<script setup lang="ts">
const props = defineProps<{
  title: string
  count?: number
}>()
const emit = defineEmits(['save', 'cancel'])
function onSave() {
  emit('save')
  emit('close')
}
</script>

<template>
  <button @click="$emit('cancel')">{{ title }}</button>
</template>

<style scoped>
.btn { color: red; }
</style>
"""

OPTIONS_COMPONENT = """\
<template><div /></template>
<script>
export default {
  name: 'UserCard',
  props: ['user', 'compact'],
  emits: ['select'],
}
</script>
"""


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


class TestBlocks:
    def test_block_order(self) -> None:
        facts = parse_component("src/components/SaveButton.vue", SETUP_COMPONENT)
        assert facts.block_order == ("script", "template", "style")
        assert facts.has_script and facts.has_template and facts.has_style

    def test_script_attributes(self) -> None:
        facts = parse_component("src/components/SaveButton.vue", SETUP_COMPONENT)
        assert facts.script_setup is True
        assert facts.script_lang == "ts"
        assert facts.scoped_style is True

    def test_nested_templates_stay_inside_the_block(self) -> None:
        content = (
            "<template>\n"
            "  <template v-if=\"ok\"><span /></template>\n"
            "</template>\n"
            "<script setup>\n</script>\n"
        )
        blocks = find_blocks(content)
        assert [b.name for b in blocks] == ["template", "script"]

    def test_commented_block_is_ignored(self) -> None:
        content = "<!-- <style>.a{}</style> -->\n<template><div /></template>\n"
        facts = parse_component("src/components/AppCard.vue", content)
        assert facts.block_order == ("template",)

    def test_unterminated_block_raises(self) -> None:
        with pytest.raises(ParseError, match="unterminated <template>") as exc_info:
            parse_component("src/components/Broken.vue", "<template>\n  <div>\n")
        assert exc_info.value.line == 1

    def test_unbalanced_script_raises(self) -> None:
        content = "<script setup>\nconst a = {\n</script>\n<template><div /></template>\n"
        with pytest.raises(ParseError):
            parse_component("src/components/Broken.vue", content)


# ---------------------------------------------------------------------------
# Props and emits
# ---------------------------------------------------------------------------


class TestProps:
    def test_type_literal_props(self) -> None:
        facts = parse_component("src/components/SaveButton.vue", SETUP_COMPONENT)
        assert [(p.name, p.type) for p in facts.props] == [
            ("title", "string"),
            ("count", "number"),
        ]
        assert facts.props[0].line == 3

    def test_interface_props(self) -> None:
        content = (
            "<script setup lang=\"ts\">\n"
            "interface Props {\n"
            "  label: string;\n"
            "  size?: 'sm' | 'lg';\n"
            "}\n"
            "defineProps<Props>()\n"
            "</script>\n"
        )
        facts = parse_component("src/components/BaseLabel.vue", content)
        assert [(p.name, p.type) for p in facts.props] == [
            ("label", "string"),
            ("size", "'sm' | 'lg'"),
        ]

    def test_runtime_object_props(self) -> None:
        content = (
            "<script setup>\n"
            "defineProps({\n"
            "  id: Number,\n"
            "  tags: { type: Array, default: () => [] },\n"
            "})\n"
            "</script>\n"
        )
        facts = parse_component("src/components/TagList.vue", content)
        assert [(p.name, p.type) for p in facts.props] == [("id", "Number"), ("tags", "Array")]

    def test_options_api_array_props_are_untyped(self) -> None:
        facts = parse_component("src/components/UserCard.vue", OPTIONS_COMPONENT)
        assert [(p.name, p.type) for p in facts.props] == [("user", None), ("compact", None)]


class TestEmits:
    def test_declared_emits(self) -> None:
        facts = parse_component("src/components/SaveButton.vue", SETUP_COMPONENT)
        assert facts.emits_declared is True
        assert facts.declared_emits == ("save", "cancel")

    def test_used_emits_in_script_and_template(self) -> None:
        facts = parse_component("src/components/SaveButton.vue", SETUP_COMPONENT)
        uses = {(u.name, u.line, u.column) for u in facts.used_emits}
        assert ("save", 8, 3) in uses
        assert ("close", 9, 3) in uses
        assert any(name == "cancel" and line == 14 for name, line, _ in uses)

    def test_typed_emits(self) -> None:
        content = (
            "<script setup lang=\"ts\">\n"
            "const emit = defineEmits<{\n"
            "  (e: 'change', id: number): void\n"
            "  (e: 'update', value: string): void\n"
            "}>()\n"
            "</script>\n"
        )
        facts = parse_component("src/components/ItemPicker.vue", content)
        assert facts.declared_emits == ("change", "update")

    def test_options_api_emits(self) -> None:
        facts = parse_component("src/components/UserCard.vue", OPTIONS_COMPONENT)
        assert facts.declared_emits == ("select",)


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------


class TestNames:
    def test_name_derived_from_file(self) -> None:
        facts = parse_component("src/components/SaveButton.vue", SETUP_COMPONENT)
        assert facts.name == "SaveButton"
        assert facts.name_declared is False

    def test_options_api_name(self) -> None:
        facts = parse_component("src/components/Card.vue", OPTIONS_COMPONENT)
        assert facts.name == "UserCard"
        assert facts.name_declared is True

    def test_define_options_name(self) -> None:
        content = "<script setup>\ndefineOptions({ name: 'FancyInput' })\n</script>\n"
        facts = parse_component("src/components/Input.vue", content)
        assert facts.name == "FancyInput"

    def test_empty_file(self) -> None:
        facts = parse_component("src/components/user_profile.vue", "")
        assert facts.name == "user_profile"
        assert facts.block_order == ()
        assert facts.props == ()
