"""Tests for file-based route discovery."""

import pytest

from protobooth.discovery.router_discovery import (
    NextjsRouterDiscovery,
    TanStackRouterDiscovery,
    extract_parameters,
    get_router_discovery,
    is_dynamic_path,
    scan_route_files,
)
from protobooth.errors import InvalidRouterTypeError, ProtoboothError


class TestParameterMarkers:
    def test_sigil_and_bracket_markers(self):
        assert is_dynamic_path("/product/$slug")
        assert is_dynamic_path("/user/[id]")
        assert is_dynamic_path("/docs/[...slug]")
        assert not is_dynamic_path("/about")

    def test_extract_in_order_without_catch_all_prefix(self):
        assert extract_parameters("/org/[orgId]/docs/[...path]") == ["orgId", "path"]
        assert extract_parameters("/shop/$category/$item") == ["category", "item"]
        assert extract_parameters("/about") == []

    def test_optional_catch_all_name_has_no_brackets(self):
        assert extract_parameters("/docs/[[...slug]]") == ["slug"]
        assert extract_parameters("/post/[post-id]") == ["post-id"]


class TestTanStackRouterDiscovery:
    """Tests for TanStack Router conventions."""

    def setup_method(self):
        self.discovery = TanStackRouterDiscovery()

    def test_dynamic_route(self):
        route = self.discovery.parse_route_path("src/routes/product/$slug.tsx")
        assert route.path == "/product/$slug"
        assert route.is_dynamic is True
        assert route.parameters == ["slug"]

    def test_index_maps_to_directory(self):
        assert self.discovery.to_route_path("src/routes/index.tsx") == "/"
        assert self.discovery.to_route_path("src/routes/blog/index.tsx") == "/blog"

    def test_static_route_has_no_parameters(self):
        route = self.discovery.parse_route_path("src/routes/about.jsx")
        assert route.path == "/about"
        assert route.is_dynamic is False
        assert route.parameters == []

    @pytest.mark.parametrize("path", [
        "src/routes/__root.tsx",
        "src/routes/about.ts",
        "src/routes/styles.css",
        "src/routes/protobooth-review.tsx",
        "src/routes/api/users.tsx",
        "src/components/Header.tsx",
    ])
    def test_rejected_files(self, path):
        assert self.discovery.is_valid_route(path) is False

    def test_discover_preserves_input_order(self):
        routes = self.discovery.discover_routes([
            "src/routes/user/$userId.tsx",
            "src/routes/__root.tsx",
            "src/routes/index.tsx",
            "src/routes/about.tsx",
        ])
        assert [r.path for r in routes] == ["/user/$userId", "/", "/about"]

    def test_custom_routes_dir(self):
        discovery = TanStackRouterDiscovery(routes_dir="app/routes")
        assert discovery.to_route_path("app/routes/settings.tsx") == "/settings"
        assert discovery.is_valid_route("src/routes/settings.tsx") is False

    def test_accepts_absolute_paths(self):
        assert self.discovery.to_route_path("/home/dev/shop/src/routes/cart.tsx") == "/cart"


class TestNextjsRouterDiscovery:
    """Tests for the Next.js app and pages routers."""

    def setup_method(self):
        self.discovery = NextjsRouterDiscovery()

    def test_app_router_catch_all(self):
        route = self.discovery.parse_route_path("src/app/docs/[...slug]/page.tsx")
        assert route.path == "/docs/[...slug]"
        assert route.is_dynamic is True
        assert route.parameters == ["slug"]

    def test_app_router_optional_catch_all(self):
        route = self.discovery.parse_route_path("src/app/docs/[[...slug]]/page.tsx")
        assert route.path == "/docs/[[...slug]]"
        assert route.is_dynamic is True
        assert route.parameters == ["slug"]

    def test_app_router_root_page(self):
        assert self.discovery.to_route_path("src/app/page.tsx") == "/"

    def test_app_router_only_page_files(self):
        assert self.discovery.is_valid_route("src/app/about/page.tsx") is True
        assert self.discovery.is_valid_route("src/app/about/layout.tsx") is False
        assert self.discovery.is_valid_route("src/app/about/Sidebar.tsx") is False

    def test_pages_router(self):
        assert self.discovery.to_route_path("src/pages/index.tsx") == "/"
        assert self.discovery.to_route_path("src/pages/about.tsx") == "/about"
        route = self.discovery.parse_route_path("src/pages/blog/[slug].tsx")
        assert route.path == "/blog/[slug]"
        assert route.parameters == ["slug"]

    @pytest.mark.parametrize("path", [
        "src/pages/_app.tsx",
        "src/pages/_document.tsx",
        "src/pages/api/hello.tsx",
        "src/app/api/protobooth/[...path]/page.tsx",
        "src/app/protobooth/annotate/page.tsx",
        "src/app/page.ts",
    ])
    def test_rejected_files(self, path):
        assert self.discovery.is_valid_route(path) is False

    def test_custom_base_dir(self):
        discovery = NextjsRouterDiscovery(base_dir=".")
        assert discovery.to_route_path("app/settings/page.tsx") == "/settings"
        assert discovery.to_route_path("pages/contact.tsx") == "/contact"


class TestGetRouterDiscovery:
    def test_selects_by_tag(self):
        assert isinstance(get_router_discovery("vite"), TanStackRouterDiscovery)
        assert isinstance(get_router_discovery("nextjs"), NextjsRouterDiscovery)

    def test_passes_routes_dir(self):
        discovery = get_router_discovery("vite", "web/routes")
        assert discovery.routes_dir == "web/routes"

    def test_unknown_tag(self):
        with pytest.raises(InvalidRouterTypeError, match="remix"):
            get_router_discovery("remix")

    def test_error_taxonomy(self):
        assert issubclass(InvalidRouterTypeError, ProtoboothError)
        assert issubclass(InvalidRouterTypeError, ValueError)


class TestScanRouteFiles:
    """Tests for the best-effort filesystem walk."""

    def test_tanstack_project(self, tanstack_project):
        assert scan_route_files(tanstack_project, "src/routes") == [
            "src/routes/__root.tsx",
            "src/routes/about.tsx",
            "src/routes/index.tsx",
            "src/routes/product/$slug.tsx",
            "src/routes/user/$userId.tsx",
        ]

    def test_skips_tool_and_hidden_directories(self, nextjs_project):
        files = scan_route_files(nextjs_project, "src/app")
        assert files == [
            "src/app/about/page.tsx",
            "src/app/layout.tsx",
            "src/app/page.tsx",
            "src/app/user/[id]/page.tsx",
        ]

    def test_missing_directory_is_empty(self, tmp_path):
        assert scan_route_files(tmp_path, "src/routes") == []

    def test_skips_node_modules(self, tmp_path):
        nested = tmp_path / "src" / "routes" / "node_modules" / "pkg"
        nested.mkdir(parents=True)
        (nested / "index.tsx").write_text("")
        (tmp_path / "src" / "routes" / "home.tsx").write_text("")
        assert scan_route_files(tmp_path, "src/routes") == ["src/routes/home.tsx"]

    def test_discovery_over_scanned_files(self, nextjs_project):
        discovery = NextjsRouterDiscovery()
        pages = discovery.discover_routes(scan_route_files(nextjs_project, "src/pages"))
        assert [r.path for r in pages] == ["/blog/[slug]", "/"]
