"""
Credentialed scraping API providers used by the rotating fetcher.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import requests

from app.scraping.envelopes import DecodedPayload, decode_payload


@dataclass(frozen=True)
class UpstreamRequest:
    url: str
    params: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)


class UpstreamProvider(ABC):
    """
    One scraping API that fetches a target URL on our behalf using an API key.
    """

    name: str

    @abstractmethod
    def build_request(self, *, credential: str, target_url: str) -> UpstreamRequest:
        """
        Build the upstream GET request for one credential.
        """

    def decode(self, response: requests.Response) -> DecodedPayload:
        return decode_payload(response.text, response.headers.get("content-type"))


class ScraperAPIProvider(UpstreamProvider):
    """
    ScraperAPI (https://www.scraperapi.com) with JavaScript rendering.
    """

    name = "scraperapi"

    def __init__(self, *, base_url: str = "https://api.scraperapi.com", render: bool = True) -> None:
        self.base_url = base_url
        self.render = render

    def build_request(self, *, credential: str, target_url: str) -> UpstreamRequest:
        params: dict[str, Any] = {"api_key": credential, "url": target_url}
        if self.render:
            params["render"] = "true"
        return UpstreamRequest(
            url=self.base_url,
            params=params,
            headers={"Accept": "text/html"},
        )


class ScrapeDoProvider(UpstreamProvider):
    """
    Scrape.do (https://scrape.do) geo-targeted to Spain, without rendering.
    """

    name = "scrapedo"

    def __init__(self, *, base_url: str = "https://api.scrape.do", geo: str = "es") -> None:
        self.base_url = base_url
        self.geo = geo

    def build_request(self, *, credential: str, target_url: str) -> UpstreamRequest:
        return UpstreamRequest(
            url=self.base_url,
            params={
                "token": credential,
                "url": target_url,
                "geoCode": self.geo,
                "render": "false",
            },
            headers={"Accept": "text/html"},
        )
