import logging

from fastapi import APIRouter, Depends
from pymongo import ASCENDING
from pymongo.collection import Collection

from database import get_slots_collection
from errors import SlotNotFound, SlotStoreError
from helper import parse_slot_id, read_slot_body, serialize_slot

logger = logging.getLogger(__name__)

slot_router = APIRouter(
    prefix="/api",
    tags=["Slot"]
)

@slot_router.get("/slots", tags=["Slot"])
def get_all_slots(slots: Collection = Depends(get_slots_collection)):
    """
    Retrieves all slots sorted by date and start time.

    Returns:
        list: The stored slot documents with "_id" as a string.
    """
    try:
        cursor = slots.find({}).sort([("date", ASCENDING), ("startTime", ASCENDING)])
        return [serialize_slot(slot) for slot in cursor]
    except Exception:
        logger.exception("Failed to fetch slots")
        raise SlotStoreError("Failed to fetch slots", with_success_flag=False)

@slot_router.post("/slots", tags=["Slot"])
def create_slot(fields: dict = Depends(read_slot_body), slots: Collection = Depends(get_slots_collection)):
    """
    Stores the posted object as a new slot.

    Args:
        fields (dict): Arbitrary slot fields. A missing body creates an empty slot.

    Returns:
        dict: A success flag and the generated id.
    """
    try:
        result = slots.insert_one(fields)
    except Exception:
        logger.exception("Failed to create slot")
        raise SlotStoreError("Failed to create slot", with_success_flag=False)

    return {"success": True, "id": str(result.inserted_id)}

@slot_router.put("/slots/{id}", tags=["Slot"])
def update_slot(id: str, fields: dict = Depends(read_slot_body), slots: Collection = Depends(get_slots_collection)):
    """
    Merges the posted fields into an existing slot.

    Fields missing from the body are left untouched.

    Args:
        id (str): The ObjectId of the slot.
        fields (dict): The fields to set.

    Returns:
        dict: A success flag.
    """
    slot_id = parse_slot_id(id)

    try:
        result = slots.update_one({"_id": slot_id}, {"$set": fields})
    except Exception:
        logger.exception("Failed to update slot %s", id)
        raise SlotStoreError("Failed to update slot")

    if result.matched_count == 0:
        raise SlotNotFound()
    return {"success": True}

@slot_router.delete("/slots/{id}", tags=["Slot"])
def delete_slot(id: str, slots: Collection = Depends(get_slots_collection)):
    """
    Deletes a slot by its ID.

    Args:
        id (str): The ObjectId of the slot.

    Returns:
        dict: A success flag if deletion was successful.
    """
    slot_id = parse_slot_id(id)

    try:
        result = slots.delete_one({"_id": slot_id})
    except Exception:
        logger.exception("Failed to delete slot %s", id)
        raise SlotStoreError("Failed to delete slot")

    if result.deleted_count == 0:
        raise SlotNotFound()
    return {"success": True}
