"""
Catalog Data Models

Shapes persisted both in the remote document and in the local cache.
Attribute names are snake_case; JSON uses the camelCase wire names.
"""

import json
import time
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    """Product categories"""
    HARDWARE = "Hardware"
    SOFTWARE = "Software"
    SERVICE = "Service"


class _WireModel(BaseModel):
    # Hand-edited documents may carry numeric prices or ids
    model_config = ConfigDict(
        populate_by_name=True,
        protected_namespaces=(),
        coerce_numbers_to_str=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize with camelCase keys, dropping unset optionals"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Product(_WireModel):
    """Catalog product"""
    id: str
    model: str = ""
    name: str = ""
    category: Category = Category.SOFTWARE
    sub_category: str = Field(default="", alias="subCategory")
    price: str = ""  # display string, e.g. "¥30,000 - ¥50,000"
    description: str = ""
    features: list[str] = Field(default_factory=list)
    specs: list[str] = Field(default_factory=list)
    image_url: str = Field(default="", alias="imageUrl")  # URL or base64 data URI
    brochure_url: Optional[str] = Field(default=None, alias="brochureUrl")


class CaseStudy(_WireModel):
    """Customer case study"""
    id: str
    title: str = ""
    description: str = ""
    image_url: str = Field(default="", alias="imageUrl")
    link_url: Optional[str] = Field(default=None, alias="linkUrl")


class AppData(_WireModel):
    """The whole catalog document, replaced in full on every publish"""
    products: list[Product] = Field(default_factory=list)
    cases: list[CaseStudy] = Field(default_factory=list)
    last_updated: int = Field(default=0, alias="lastUpdated")  # epoch ms


def now_ms() -> int:
    """Current time as epoch milliseconds"""
    return int(time.time() * 1000)


def serialize_document(data: AppData) -> str:
    """JSON body sent to the document store"""
    return json.dumps(data.to_wire(), ensure_ascii=False, separators=(",", ":"))


def payload_size_kb(body: str) -> float:
    """Size of a serialized body in kilobytes (UTF-8 bytes / 1024)"""
    return len(body.encode("utf-8")) / 1024
