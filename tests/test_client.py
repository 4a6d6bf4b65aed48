"""
Unit tests for the PhyloPic client.

The HTTP layer is replaced by a mocked requests session so no network access
is needed.
"""

from unittest.mock import MagicMock

import numpy as np
import pytest
import requests

from phylopic_layers.core.client import (
    PhyloPicAPIError,
    PhyloPicClient,
    PhyloPicResponseError,
    get_default_client,
)
from phylopic_layers.core.config import PhyloPicSettings
from phylopic_layers.core.images import RasterImage, VectorImage
from tests.fixtures.sample_images import (
    L_SHAPE_SVG,
    create_asymmetric_pixels,
    create_png_bytes,
)

UUID = "23cd6aa4-9587-4a2e-8e26-de42885004c9"


def _json_response(payload):
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


def _file_response(content):
    response = MagicMock()
    response.content = content
    response.raise_for_status.return_value = None
    return response


@pytest.fixture
def session():
    mock_session = MagicMock()
    mock_session.headers = {}
    return mock_session


@pytest.fixture
def client(session):
    return PhyloPicClient(base_url="https://api.example.org/", timeout=5, session=session)


def _image_record():
    return {
        "_links": {
            "vectorFile": {"href": "https://images.example.org/vector.svg"},
            "rasterFiles": [
                {"href": "https://images.example.org/1536.png", "sizes": "1536x1024"},
                {"href": "https://images.example.org/512.png", "sizes": "768x512"},
                {"href": "https://images.example.org/64.png", "sizes": "96x64"},
            ],
        }
    }


class TestClientSetup:
    """Test client construction."""

    def test_accept_header(self, client, session):
        """Test that the PhyloPic media type is requested."""
        assert session.headers["Accept"] == "application/vnd.phylopic.v2+json"

    def test_base_url_trailing_slash(self, client):
        """Test that the base URL is normalised."""
        assert client.base_url == "https://api.example.org"

    def test_from_settings(self):
        """Test creating a client from settings."""
        settings = PhyloPicSettings(base_url="https://mirror.example.org", timeout=3, build=512)

        client = PhyloPicClient.from_settings(settings)

        assert client.base_url == "https://mirror.example.org"
        assert client.timeout == 3
        assert client.build == 512
        assert client.session.headers["User-Agent"] == settings.user_agent

    def test_default_client(self):
        """Test that the default client uses the global settings."""
        assert isinstance(get_default_client(), PhyloPicClient)


class TestNameLookup:
    """Test resolving taxonomic names to uuids."""

    def test_get_uuid(self, client, session):
        """Test a name lookup with matches."""
        session.get.return_value = _json_response({
            "_embedded": {"items": [{"uuid": UUID}, {"uuid": "other"}]}
        })

        assert client.get_uuid("Felis catus") == [UUID]
        assert client.get_uuid("Felis catus", n=5) == [UUID, "other"]

    def test_request_parameters(self, client, session):
        """Test that the name is normalised and passed as a filter."""
        session.get.return_value = _json_response({"_embedded": {"items": []}})

        client.get_uuid("Homo_Sapiens")

        url = session.get.call_args[0][0]
        params = session.get.call_args[1]["params"]
        assert url == "https://api.example.org/images"
        assert params["filter_name"] == "homo sapiens"
        assert params["embed_items"] == "true"
        assert params["page"] == 0
        assert "build" not in params
        assert session.get.call_args[1]["timeout"] == 5

    def test_build_parameter(self, session):
        """Test that a configured build is forwarded."""
        client = PhyloPicClient(build=123, session=session)
        session.get.return_value = _json_response({"_embedded": {"items": []}})

        client.get_uuid("Iris")

        assert session.get.call_args[1]["params"]["build"] == 123

    def test_resolve_name_without_results(self, client, session):
        """Test that an unknown name resolves to None."""
        session.get.return_value = _json_response({"_embedded": {"items": []}})

        assert client.resolve_name("Nonexistent taxon") is None

    def test_resolve_name_missing_embedded(self, client, session):
        """Test that a payload without items resolves to None."""
        session.get.return_value = _json_response({})

        assert client.resolve_name("Iris") is None

    def test_resolve_name(self, client, session):
        """Test resolving a name to its first uuid."""
        session.get.return_value = _json_response({"_embedded": {"items": [{"uuid": UUID}]}})

        assert client.resolve_name("Iris") == UUID

    def test_invalid_name(self, client):
        """Test validation of lookup arguments."""
        with pytest.raises(ValueError, match="non-empty string"):
            client.get_uuid("   ")

        with pytest.raises(ValueError, match="at least 1"):
            client.get_uuid("Iris", n=0)


class TestImageFetch:
    """Test fetching images by uuid."""

    def test_vector(self, client, session):
        """Test fetching the vector file of an image."""
        session.get.side_effect = [
            _json_response(_image_record()),
            _file_response(L_SHAPE_SVG.encode()),
        ]

        img = client.get_phylopic(UUID)

        assert isinstance(img, VectorImage)
        assert img.metadata["uuid"] == UUID
        assert session.get.call_args_list[0][0][0] == f"https://api.example.org/images/{UUID}"
        assert session.get.call_args_list[1][0][0] == "https://images.example.org/vector.svg"

    def test_raster_picks_closest_height(self, client, session):
        """Test that the raster file closest to the requested height is used."""
        pixels = create_asymmetric_pixels()
        session.get.side_effect = [
            _json_response(_image_record()),
            _file_response(create_png_bytes(pixels)),
        ]

        img = client.get_phylopic(UUID, format="raster", height=600)

        assert isinstance(img, RasterImage)
        assert session.get.call_args_list[1][0][0] == "https://images.example.org/512.png"
        np.testing.assert_allclose(img.pixels, pixels, atol=1 / 255)

    def test_unknown_format(self, client):
        """Test that unknown formats are rejected before any request."""
        with pytest.raises(ValueError, match="Unsupported format"):
            client.get_phylopic(UUID, format="gif")

    def test_missing_vector_file(self, client, session):
        """Test a record without a vector file."""
        session.get.return_value = _json_response({"_links": {}})

        with pytest.raises(PhyloPicResponseError, match="no vector file"):
            client.get_phylopic(UUID)

    def test_missing_raster_files(self, client, session):
        """Test a record without usable raster files."""
        session.get.return_value = _json_response({"_links": {"rasterFiles": [{"href": "x"}]}})

        with pytest.raises(PhyloPicResponseError, match="No usable raster files"):
            client.get_phylopic(UUID, format="raster")

    def test_missing_links(self, client, session):
        """Test a record without links."""
        session.get.return_value = _json_response({"uuid": UUID})

        with pytest.raises(PhyloPicResponseError, match="has no links"):
            client.get_image_links(UUID)


class TestErrorHandling:
    """Test error handling for network and payload failures."""

    def test_http_error(self, client, session):
        """Test that HTTP errors surface as PhyloPicAPIError."""
        response = MagicMock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("404 Not Found")
        session.get.return_value = response

        with pytest.raises(PhyloPicAPIError, match="404 Not Found") as exc_info:
            client.get_phylopic(UUID)

        assert isinstance(exc_info.value.__cause__, requests.exceptions.HTTPError)

    def test_connection_error(self, client, session):
        """Test that connection failures surface as PhyloPicAPIError."""
        session.get.side_effect = requests.exceptions.ConnectionError("unreachable")

        with pytest.raises(PhyloPicAPIError, match="unreachable"):
            client.resolve_name("Iris")

    def test_no_retry(self, client, session):
        """Test that failed requests are not retried."""
        session.get.side_effect = requests.exceptions.Timeout("timed out")

        with pytest.raises(PhyloPicAPIError):
            client.resolve_name("Iris")

        assert session.get.call_count == 1

    def test_invalid_json(self, client, session):
        """Test that undecodable payloads surface as PhyloPicResponseError."""
        response = _json_response(None)
        response.json.side_effect = ValueError("Expecting value")
        session.get.return_value = response

        with pytest.raises(PhyloPicResponseError, match="invalid JSON"):
            client.resolve_name("Iris")

    def test_non_object_json(self, client, session):
        """Test that JSON arrays are rejected."""
        session.get.return_value = _json_response([1, 2, 3])

        with pytest.raises(PhyloPicResponseError, match="expected an object"):
            client.resolve_name("Iris")
