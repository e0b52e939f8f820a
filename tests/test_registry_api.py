"""Tests for the mod portal client."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from conftest import make_response
from errors import RegistryError
from registry_api import Mod, ModResult, RegistryClient, Release

API_BASE = "https://mods.example.test/api/mods"
DOWNLOAD_BASE = "https://mods.example.test"

PORTAL_RESPONSE = {
    "pagination": None,
    "results": [
        {
            "name": "alien-biomes",
            "title": "Alien Biomes",
            "releases": [
                {
                    "download_url": "/download/alien-biomes/a1",
                    "file_name": "alien-biomes_1.0.0.zip",
                    "released_at": "2023-01-01T00:00:00Z",
                    "version": "1.0.0",
                    "sha1": "aaa",
                },
                {
                    "download_url": "/download/alien-biomes/a2",
                    "file_name": "alien-biomes_1.0.1.zip",
                    "released_at": "2023-02-01T00:00:00Z",
                    "version": "1.0.1",
                    "sha1": "bbb",
                },
            ],
        },
        {"name": "squeak-through", "title": "Squeak Through", "releases": []},
    ],
}


def _client(session: MagicMock, timeout: int = 30) -> RegistryClient:
    return RegistryClient(API_BASE, DOWNLOAD_BASE, timeout, session=session)


class TestModResult:
    def test_decodes_portal_payload(self) -> None:
        result = ModResult.from_json(PORTAL_RESPONSE)

        mods = result.by_name()
        assert set(mods) == {"alien-biomes", "squeak-through"}
        biomes = mods["alien-biomes"]
        assert biomes.title == "Alien Biomes"
        assert [release.version for release in biomes.releases] == ["1.0.0", "1.0.1"]
        assert biomes.releases[-1] == Release(
            download_url="/download/alien-biomes/a2",
            file_name="alien-biomes_1.0.1.zip",
            version="1.0.1",
            sha1="bbb",
        )
        assert mods["squeak-through"].releases == ()

    def test_rejects_non_object(self) -> None:
        with pytest.raises(RegistryError):
            ModResult.from_json(["not", "an", "object"])

    def test_missing_results(self) -> None:
        assert ModResult.from_json({}).results == []


class TestFetchMetadata:
    def test_repeats_namelist_parameter(self) -> None:
        session = MagicMock()
        session.get.return_value = make_response(json_data=PORTAL_RESPONSE)

        result = _client(session).fetch_metadata({"squeak-through", "alien-biomes"})

        session.get.assert_called_once_with(
            API_BASE,
            params=[
                ("page_size", "max"),
                ("namelist", "alien-biomes"),
                ("namelist", "squeak-through"),
            ],
            timeout=30,
        )
        assert isinstance(result.by_name()["alien-biomes"], Mod)

    def test_no_names_skips_request(self) -> None:
        session = MagicMock()

        assert _client(session).fetch_metadata([]).results == []
        session.get.assert_not_called()

    def test_zero_timeout_means_no_timeout(self) -> None:
        session = MagicMock()
        session.get.return_value = make_response(json_data={"results": []})

        _client(session, timeout=0).fetch_metadata(["alien-biomes"])

        assert session.get.call_args.kwargs["timeout"] is None

    def test_network_error(self) -> None:
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("boom")

        with pytest.raises(RegistryError, match="boom"):
            _client(session).fetch_metadata(["alien-biomes"])

    def test_http_error(self) -> None:
        session = MagicMock()
        session.get.return_value = make_response(503, text="maintenance")

        with pytest.raises(RegistryError, match="503"):
            _client(session).fetch_metadata(["alien-biomes"])

    def test_redirect_status_is_rejected(self) -> None:
        session = MagicMock()
        session.get.return_value = make_response(302, text="moved")

        with pytest.raises(RegistryError, match="302"):
            _client(session).fetch_metadata(["alien-biomes"])

    def test_decode_error(self) -> None:
        session = MagicMock()
        response = make_response()
        response.json.side_effect = ValueError("Expecting value")
        session.get.return_value = response

        with pytest.raises(RegistryError, match="decode"):
            _client(session).fetch_metadata(["alien-biomes"])


class TestDownload:
    def test_download_payload_passes_credentials(self) -> None:
        session = MagicMock()
        response = make_response()
        response.iter_content.return_value = iter([b"abc", b"", b"def"])
        session.get.return_value = response

        payload = _client(session).download_payload("/download/alien-biomes/a2", "user", "tok")

        assert payload == b"abcdef"
        session.get.assert_called_once_with(
            "https://mods.example.test/download/alien-biomes/a2",
            params={"username": "user", "token": "tok"},
            stream=True,
            timeout=30,
        )
        response.close.assert_called_once()

    def test_download_http_error(self) -> None:
        session = MagicMock()
        session.get.return_value = make_response(403)

        with pytest.raises(RegistryError, match="HTTP 403"):
            _client(session).download_payload("/download/x", "user", "tok")

    def test_download_network_error(self) -> None:
        session = MagicMock()
        session.get.side_effect = requests.Timeout("timed out")

        with pytest.raises(RegistryError, match="timed out"):
            _client(session).download_payload("/download/x", "user", "tok")
