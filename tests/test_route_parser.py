"""Tests for stylegate.parsers.routes — route tables, nesting and guards."""

from __future__ import annotations

import pytest

from stylegate.errors import ParseError
from stylegate.parsers.routes import parse_routes
from stylegate.rules.router_shape import full_paths

ROUTER = """\
import { createRouter, createWebHistory } from 'vue-router'
import HomeView from '../views/HomeView.vue'

const routes = [
  { path: '/', name: 'home', component: HomeView },
  {
    path: '/settings',
    component: () => import('../views/SettingsLayout.vue'),
    children: [
      {
        path: 'profile',
        name: 'settings-profile',
        component: () => import('../views/ProfileView.vue'),
        beforeEnter: requireAuth,
      },
    ],
  },
]

const router = createRouter({ history: createWebHistory(), routes })
export default router
"""


class TestRouteTable:
    def test_routes_in_order(self) -> None:
        facts = parse_routes("src/router/index.ts", ROUTER)
        assert [r.path for r in facts.routes] == ["/", "/settings", "profile"]
        assert [r.depth for r in facts.routes] == [1, 1, 2]
        assert facts.max_depth == 2

    def test_route_lines(self) -> None:
        facts = parse_routes("src/router/index.ts", ROUTER)
        assert [r.line for r in facts.routes] == [5, 6, 10]

    def test_names(self) -> None:
        facts = parse_routes("src/router/index.ts", ROUTER)
        assert [r.name for r in facts.routes] == ["home", None, "settings-profile"]

    def test_components_and_laziness(self) -> None:
        facts = parse_routes("src/router/index.ts", ROUTER)
        home, settings, profile = facts.routes
        assert home.component == "../views/HomeView.vue"
        assert home.lazy is False
        assert settings.component == "../views/SettingsLayout.vue"
        assert settings.lazy is True
        assert profile.lazy is True

    def test_imports_recorded(self) -> None:
        facts = parse_routes("src/router/index.ts", ROUTER)
        assert ("HomeView", "../views/HomeView.vue") in facts.imports

    def test_full_paths(self) -> None:
        facts = parse_routes("src/router/index.ts", ROUTER)
        assert [full for full, _ in full_paths(facts)] == ["/", "/settings", "/settings/profile"]


class TestGuards:
    def test_per_route_guard(self) -> None:
        facts = parse_routes("src/router/index.ts", ROUTER)
        assert [r.has_guard for r in facts.routes] == [False, False, True]
        assert facts.has_guards is True
        assert facts.global_guards == ()

    def test_global_guard(self) -> None:
        content = (
            "const routes = [{ path: '/', component: Home }]\n"
            "const router = createRouter({ routes })\n"
            "router.beforeEach((to) => true)\n"
        )
        facts = parse_routes("src/router/index.ts", content)
        assert facts.global_guards == ("beforeEach",)
        assert facts.has_guards is True

    def test_no_guard(self) -> None:
        content = "export default createRouter({ routes: [{ path: '/a' }] })\n"
        facts = parse_routes("src/router/index.ts", content)
        assert len(facts.routes) == 1
        assert facts.has_guards is False


class TestRouteEdgeCases:
    def test_empty_file(self) -> None:
        facts = parse_routes("src/router/index.ts", "")
        assert facts.routes == ()
        assert facts.max_depth == 0

    def test_router_without_table(self) -> None:
        facts = parse_routes("src/router/index.ts", "export default createRouter(options)\n")
        assert facts.routes == ()

    def test_truncated_table_raises(self) -> None:
        with pytest.raises(ParseError):
            parse_routes("src/router/index.ts", "const routes = [\n  { path: '/' },\n")
