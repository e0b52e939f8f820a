from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List

import requests

from errors import RegistryError

_USER_AGENT = "factorio-mod-updater/1.0"
_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class Release:
    download_url: str
    file_name: str
    version: str
    sha1: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Release":
        return cls(
            download_url=str(data.get("download_url") or ""),
            file_name=str(data.get("file_name") or ""),
            version=str(data.get("version") or ""),
            sha1=str(data.get("sha1") or ""),
        )


@dataclass(frozen=True)
class Mod:
    title: str
    name: str
    releases: tuple[Release, ...] = ()

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Mod":
        releases = data.get("releases") or []
        return cls(
            title=str(data.get("title") or ""),
            name=str(data.get("name") or ""),
            releases=tuple(
                Release.from_json(item) for item in releases if isinstance(item, dict)
            ),
        )


@dataclass
class ModResult:
    results: List[Mod] = field(default_factory=list)

    @classmethod
    def from_json(cls, payload: Any) -> "ModResult":
        if not isinstance(payload, dict):
            raise RegistryError("Unexpected registry response: not a JSON object")
        results = payload.get("results") or []
        if not isinstance(results, list):
            raise RegistryError("Unexpected registry response: results is not a list")
        return cls([Mod.from_json(item) for item in results if isinstance(item, dict)])

    def by_name(self) -> Dict[str, Mod]:
        return {mod.name: mod for mod in self.results}


class RegistryClient:
    def __init__(
        self,
        api_base: str,
        download_base: str,
        timeout: int,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self.api_base = api_base
        self.download_base = download_base.rstrip("/")
        self.timeout = timeout if timeout > 0 else None
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": _USER_AGENT})

    def fetch_metadata(self, names: Iterable[str]) -> ModResult:
        namelist = sorted(set(names))
        if not namelist:
            return ModResult()
        # one page holding every requested mod
        params = [("page_size", "max")] + [("namelist", name) for name in namelist]
        logging.info("Getting info for %s mods from %s", len(namelist), self.api_base)
        try:
            response = self.session.get(self.api_base, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise RegistryError(f"Registry request failed: {exc}") from exc
        try:
            if response.status_code >= 300:
                raise RegistryError(
                    f"Registry request failed: {response.status_code} "
                    f"{(response.text or '')[:200]}"
                )
            try:
                payload = response.json()
            except ValueError as exc:
                raise RegistryError(f"Failed to decode registry response: {exc}") from exc
        finally:
            response.close()
        result = ModResult.from_json(payload)
        logging.debug("Registry returned %s mods", len(result.results))
        return result

    def download_url(self, download_path: str) -> str:
        return f"{self.download_base}{download_path}"

    def stream_payload(
        self, download_path: str, username: str, token: str
    ) -> Iterator[bytes]:
        url = self.download_url(download_path)
        params = {"username": username, "token": token}
        try:
            response = self.session.get(
                url, params=params, stream=True, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise RegistryError(f"Download of {download_path} failed: {exc}") from exc
        try:
            logging.debug("Downloading %s", url)
            if response.status_code != 200:
                raise RegistryError(
                    f"Download of {download_path} failed: HTTP {response.status_code}"
                )
            try:
                for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                    if chunk:
                        yield chunk
            except requests.RequestException as exc:
                raise RegistryError(f"Download of {download_path} failed: {exc}") from exc
        finally:
            response.close()

    def download_payload(self, download_path: str, username: str, token: str) -> bytes:
        return b"".join(self.stream_payload(download_path, username, token))
