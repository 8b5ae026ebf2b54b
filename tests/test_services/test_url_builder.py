"""Tests for endpoint URL construction."""

from tableedit.schemas.server import ServerSpec
from tableedit.services.url_builder import build_base_url, build_query_url, encode_namespace


class TestBuildBaseUrl:
    """Test API root URLs."""

    def test_default_server(self):
        spec = ServerSpec(host="localhost", port=52773)

        assert build_base_url(spec) == "http://localhost:52773/api/atelier/"

    def test_https_scheme_kept(self):
        spec = ServerSpec(host="db.example.com", port=8443, scheme="https")

        assert build_base_url(spec) == "https://db.example.com:8443/api/atelier/"

    def test_port_443_forces_https(self):
        spec = ServerSpec(host="db.example.com", port=443, scheme="http")

        assert build_base_url(spec).startswith("https://db.example.com:443/")

    def test_path_prefix_goes_before_api_path(self):
        for prefix in ("iris", "/iris", "/iris/"):
            spec = ServerSpec(host="localhost", port=80, path_prefix=prefix)

            assert build_base_url(spec) == "http://localhost:80/iris/api/atelier/"


class TestQueryUrl:
    """Test namespace-scoped query URLs."""

    def test_plain_namespace(self):
        url = build_query_url("http://localhost:52773/api/atelier/", "USER")

        assert url == "http://localhost:52773/api/atelier/v1/USER/action/query"

    def test_percent_namespace_is_encoded(self):
        assert encode_namespace("%SYS") == "%25SYS"
        url = build_query_url("http://localhost:52773/api/atelier/", "%SYS")

        assert url.endswith("/v1/%25SYS/action/query")

    def test_slash_in_namespace_is_encoded(self):
        assert encode_namespace("A/B") == "A%2FB"
