"""Tests for stylegate.parsers.store — defineStore shape recognition."""

from __future__ import annotations

import pytest

from stylegate.errors import ParseError
from stylegate.parsers.store import parse_store

OPTIONS_STORE = """\
import { defineStore } from 'pinia'

export const useUserStore = defineStore('user', {
  actions: {
    login() {},
  },
  state: () => ({ name: '', loggedIn: false }),
  getters: {
    isAdmin: (state) => state.name === 'admin',
  },
})
"""

SETUP_STORE = """\
export const useCartStore = defineStore('cart', () => {
  const items = ref([])
  const total = computed(() => items.value.length)
  function add(item) { items.value.push(item) }
  return { items, total, add }
})
"""


class TestOptionsStore:
    """The three-part shape is recognized in any declaration order."""

    def test_identity(self) -> None:
        facts = parse_store("src/stores/user.ts", OPTIONS_STORE)
        assert facts.store_id == "user"
        assert facts.export_name == "useUserStore"
        assert facts.style == "options"
        assert facts.line == 3

    def test_parts_out_of_order(self) -> None:
        facts = parse_store("src/stores/user.ts", OPTIONS_STORE)
        assert facts.has_state and facts.has_getters and facts.has_actions
        assert facts.state_keys == ("name", "loggedIn")
        assert facts.getter_keys == ("isAdmin",)
        assert facts.action_keys == ("login",)
        assert facts.state_is_function is True

    def test_state_method_shorthand(self) -> None:
        content = (
            "export const useA = defineStore('a', {\n"
            "  state() {\n"
            "    return { count: 0 }\n"
            "  },\n"
            "})\n"
        )
        facts = parse_store("src/stores/a.ts", content)
        assert facts.state_keys == ("count",)
        assert facts.state_is_function is True
        assert not facts.has_getters

    def test_plain_object_state(self) -> None:
        content = "defineStore({ id: 'legacy', state: { count: 0 } })\n"
        facts = parse_store("src/stores/legacy.js", content)
        assert facts.store_id == "legacy"
        assert facts.state_keys == ("count",)
        assert facts.state_is_function is False


class TestSetupStore:
    def test_setup_function_shape(self) -> None:
        facts = parse_store("src/stores/cart.ts", SETUP_STORE)
        assert facts.style == "setup"
        assert facts.store_id == "cart"
        assert facts.state_keys == ("items",)
        assert facts.getter_keys == ("total",)
        assert facts.action_keys == ("add",)


class TestStoreEdgeCases:
    def test_empty_file(self) -> None:
        facts = parse_store("src/stores/empty.ts", "")
        assert facts.store_id is None
        assert facts.style is None

    def test_truncated_store_raises(self) -> None:
        with pytest.raises(ParseError):
            parse_store("src/stores/user.ts", OPTIONS_STORE[:120])

    def test_call_without_arguments_raises(self) -> None:
        with pytest.raises(ParseError, match="without arguments"):
            parse_store("src/stores/x.ts", "export const useX = defineStore()\n")
