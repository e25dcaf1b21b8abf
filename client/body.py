"""
client/body.py -- Request body variants for AuthorizedRequestClient.

The caller states what kind of body it is sending; the client never inspects
a value's runtime type to guess. Each variant knows how to hand itself to
requests and whether the client should compute a Content-Type.

  JsonBody(value)         -- serialised with json.dumps, Content-Type: application/json
  FormBody(fields, files) -- multipart/form-data; requests writes the boundary header
  RawBody(payload, type)  -- bytes sent as-is; Content-Type only if type is given
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional, Union

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class JsonBody:
    value: Any

    content_type = JSON_CONTENT_TYPE

    def request_kwargs(self) -> dict[str, Any]:
        return {"data": json.dumps(self.value)}


@dataclass(frozen=True)
class FormBody:
    """Multipart payload. files maps field name to a requests file tuple or file object."""

    fields: dict[str, str] = field(default_factory=dict)
    files: dict[str, Any] = field(default_factory=dict)

    content_type = None

    def request_kwargs(self) -> dict[str, Any]:
        return {"data": self.fields, "files": self.files}


@dataclass(frozen=True)
class RawBody:
    """Opaque bytes. With no content_type the header is left out entirely."""

    payload: bytes
    content_type: Optional[str] = None

    def request_kwargs(self) -> dict[str, Any]:
        return {"data": self.payload}


Body = Union[JsonBody, FormBody, RawBody]
