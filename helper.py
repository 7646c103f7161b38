import json
from typing import Any

from bson import ObjectId
from fastapi import Request
from fastapi.responses import JSONResponse

from errors import InvalidSlotId
from models import Slot


class PrettyJSONResponse(JSONResponse):
    """JSON response indented by three spaces, like the old Express backend."""

    def render(self, content: Any) -> bytes:
        return json.dumps(
            content,
            ensure_ascii=False,
            allow_nan=False,
            indent=3,
        ).encode("utf-8")


def _is_json(content_type: str) -> bool:
    media_type = content_type.split(";")[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


async def read_slot_body(request: Request) -> dict:
    """
    Reads the request body as slot fields.

    Bodies that are not declared as JSON, and empty bodies, count as an
    empty object. Malformed JSON, non-object bodies and non-finite numbers
    raise and end up in the global 500 handler.

    Returns:
        dict: The posted fields.
    """
    if not _is_json(request.headers.get("content-type", "")):
        return {}
    raw = await request.body()
    if not raw.strip():
        return {}
    return Slot.model_validate(json.loads(raw)).model_dump()


def parse_slot_id(id: str) -> ObjectId:
    """
    Converts a path id into an ObjectId.

    Args:
        id (str): The id taken from the URL.

    Returns:
        ObjectId: The parsed identifier.

    Raises:
        InvalidSlotId: If id is not a 24 character hex string.
    """
    if not ObjectId.is_valid(id):
        raise InvalidSlotId()
    return ObjectId(id)


def serialize_slot(document: dict) -> dict:
    slot = dict(document)
    if "_id" in slot:
        slot["_id"] = str(slot["_id"])
    return slot
