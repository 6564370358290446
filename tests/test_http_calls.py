"""Tests for the HTTP call extractor."""

import pytest

from endpoint_scan.models import CONCATENATION, LITERAL, TEMPLATE, FileEntry
from endpoint_scan.scanners.http_calls import (
    HttpCallsScanner,
    cut_argument,
    looks_like_url,
    parse_string_operand,
    split_operands,
)


def extract(text):
    return HttpCallsScanner().extract(FileEntry(path="src/api.ts", text=text))


class TestCutArgument:
    """Test first-argument extraction."""

    def test_stops_at_comma(self):
        text = "fetch('/api/a', { method: 'POST' })"
        assert cut_argument(text, 6) == "'/api/a'"

    def test_keeps_nested_calls(self):
        text = "fetch(buildUrl('/a', b) + '/c')"
        assert cut_argument(text, 6) == "buildUrl('/a', b) + '/c'"

    def test_template_with_nested_braces(self):
        text = "fetch(`/api/${fn({ a: 1 })}/x`)"
        assert cut_argument(text, 6) == "`/api/${fn({ a: 1 })}/x`"

    def test_unterminated_string(self):
        assert cut_argument("fetch('/api/a", 6) is None

    def test_mismatched_bracket(self):
        assert cut_argument("fetch(a])", 6) is None

    def test_empty_argument(self):
        assert cut_argument("fetch()", 6) is None


class TestSplitOperands:
    """Test top-level + splitting."""

    def test_concatenation(self):
        assert split_operands("'/api/' + id + '/items'") == ["'/api/'", "id", "'/items'"]

    def test_plus_inside_string_ignored(self):
        assert split_operands("'/a+b'") == ["'/a+b'"]

    def test_plus_inside_call_ignored(self):
        assert split_operands("f(a + b)") == ["f(a + b)"]


class TestParseStringOperand:
    """Test string literal recognition."""

    @pytest.mark.parametrize(
        ("operand", "body", "interpolated"),
        [
            ("'/api/a'", "/api/a", False),
            ('"/api/a"', "/api/a", False),
            ("`/api/a`", "/api/a", False),
            ("`/api/${id}`", "/api/${id}", True),
            ('f"{BASE}/users"', "{BASE}/users", True),
            ("'/api/${id}'", "/api/${id}", False),
        ],
    )
    def test_string_operands(self, operand, body, interpolated):
        parsed = parse_string_operand(operand)
        assert parsed is not None
        assert parsed.body == body
        assert parsed.interpolated is interpolated

    @pytest.mark.parametrize("operand", ["id", "'/a' + b", "fn('/a')", "'/a'.trim()"])
    def test_not_a_single_string(self, operand):
        assert parse_string_operand(operand) is None


class TestLooksLikeUrl:
    """Test the URL heuristic."""

    @pytest.mark.parametrize(
        ("body", "expected"),
        [
            ("/api/users", True),
            ("http://example.com", True),
            ("${base}/orders", True),
            ("page", False),
            ("Content-Type", False),
            ("text/html; charset=utf-8", False),
        ],
    )
    def test_looks_like_url(self, body, expected):
        assert looks_like_url(body) is expected


class TestExtract:
    """Test call-site extraction from file text."""

    def test_literal_fetch(self):
        sites = extract("fetch('/api/users')")
        assert len(sites) == 1
        site = sites[0]
        assert site.path == "src/api.ts"
        assert site.line == 1
        assert site.column == 1
        assert site.callee == "fetch"
        assert site.kind == LITERAL
        assert site.text == "'/api/users'"
        assert site.url == "/api/users"
        assert site.static_prefix == "/api/users"

    def test_template_fetch(self):
        sites = extract("const r = await fetch(`/api/orders/${id}`);")
        assert len(sites) == 1
        site = sites[0]
        assert site.kind == TEMPLATE
        assert site.column == 17
        assert site.url == "/api/orders/${id}"
        assert site.static_prefix == "/api/orders/"
        assert site.all_literal is False

    def test_dynamic_concatenation(self):
        site = extract("fetch('/api/api/orders/' + id)")[0]
        assert site.kind == CONCATENATION
        assert site.url == "/api/api/orders/${id}"
        assert site.static_prefix == "/api/api/orders/"
        assert site.all_literal is False

    def test_literal_only_concatenation(self):
        site = extract("fetch('/api' + '/orders')")[0]
        assert site.kind == CONCATENATION
        assert site.url == "/api/orders"
        assert site.all_literal is True

    def test_leading_dynamic_operand_has_no_static_prefix(self):
        site = extract("fetch(API_URL + '/orders')")[0]
        assert site.kind == CONCATENATION
        assert site.static_prefix == ""

    def test_member_call_line_and_column(self):
        sites = extract("\n\n  axios.get('/api/a')\n")
        assert len(sites) == 1
        assert sites[0].line == 3
        assert sites[0].column == 3
        assert sites[0].callee == "axios.get"

    def test_generic_and_optional_chaining(self):
        sites = extract("api?.get<User[]>('/api/users')")
        assert len(sites) == 1
        assert sites[0].callee == "api.get"

    @pytest.mark.parametrize("method", ["get", "post", "put", "delete", "patch", "request"])
    def test_client_methods(self, method):
        sites = extract(f"client.{method}('/api/items')")
        assert [s.callee for s in sites] == [f"client.{method}"]

    def test_axios_config_object(self):
        sites = extract("axios({ method: 'post', url: '/orders', data })")
        assert len(sites) == 1
        assert sites[0].callee == "axios"
        assert sites[0].url == "/orders"

    def test_ternary_falls_back_to_fragments(self):
        site = extract("fetch(isAdmin ? '/api/admin' : '/api/user')")[0]
        assert site.kind == LITERAL
        assert site.url == "/api/admin"
        assert site.static_prefix == ""

    def test_python_fstring(self):
        site = extract('requests.get(f"{BASE}/users")')[0]
        assert site.kind == TEMPLATE
        assert site.static_prefix == ""

    def test_order_of_appearance(self):
        text = (
            "fetch('/api/a')\n"
            "axios({ url: '/api/b' })\n"
            "api.post('/api/c', body)\n"
        )
        assert [s.url for s in extract(text)] == ["/api/a", "/api/b", "/api/c"]
        assert [s.line for s in extract(text)] == [1, 2, 3]

    @pytest.mark.parametrize(
        "text",
        [
            "params.get('page')",
            "fetch(url)",
            "getUser('/api/x')",
            "app.get('/orders', handler)",
            "router.post('/api/orders', create)",
            "headers.get('Content-Type')",
        ],
    )
    def test_ignored(self, text):
        assert extract(text) == []

    @pytest.mark.parametrize(
        "text",
        [
            "fetch('/api/users",
            "fetch(`/api/${",
            "fetch(" + "(" * 200 + "'/api/x'",
            "fetch('/api/a' + )",
            "fetch(\n'/api/a\n')",
        ],
    )
    def test_malformed_text_never_raises(self, text):
        for site in extract(text):
            assert site.line >= 1
