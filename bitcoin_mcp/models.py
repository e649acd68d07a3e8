"""Data shapes shared by the client, the handlers and the transports."""
from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class MarketQuoteParams:
    """Query for CoinGecko's ``coins/markets``. Only ``ids`` and ``sparkline`` vary."""

    vs_currency: str = "usd"
    order: str = "market_cap_desc"
    per_page: int = 100
    page: int = 1
    sparkline: Optional[bool] = False
    ids: Optional[str] = None

    def to_query(self) -> Dict[str, Any]:
        query: Dict[str, Any] = {
            "vs_currency": self.vs_currency,
            "order": self.order,
            "per_page": self.per_page,
            "page": self.page,
        }
        if self.sparkline is not None:
            query["sparkline"] = str(self.sparkline).lower()
        if self.ids is not None:
            query["ids"] = self.ids
        return query


class CoinQuote(dict):
    """One coin record as returned by CoinGecko.

    Every provider field is kept as-is; the properties cover only the fields
    the handlers read.
    """

    @property
    def id(self) -> Optional[str]:
        return self.get("id")

    @property
    def name(self) -> str:
        return str(self.get("name") or "")

    @property
    def symbol(self) -> str:
        return str(self.get("symbol") or "")

    @property
    def price_change_percentage_24h(self) -> Optional[float]:
        """24h change, or None when missing, null, non-numeric or NaN."""
        value = self.get("price_change_percentage_24h")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if math.isnan(value):
            return None
        return float(value)


def to_json_text(payload: Any) -> str:
    return json.dumps(payload, indent=2)


@dataclass(frozen=True)
class Content:
    payload: Any
    kind: str = "Content"

    @property
    def text(self) -> str:
        return to_json_text(self.payload)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "type": "text", "text": self.text}


@dataclass(frozen=True)
class ResourceContent:
    uri: str
    mime_type: str
    payload: Any
    kind: str = "ResourceContent"

    @property
    def text(self) -> str:
        return to_json_text(self.payload)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "uri": self.uri, "mimeType": self.mime_type, "text": self.text}


@dataclass(frozen=True)
class PromptMessage:
    role: str
    payload: Any
    kind: str = "PromptMessage"

    @property
    def text(self) -> str:
        return to_json_text(self.payload)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "role": self.role, "content": {"type": "text", "text": self.text}}


CapabilityResult = Union[Content, ResourceContent, PromptMessage]
