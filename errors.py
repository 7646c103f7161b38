class SlotError(Exception):
    """
    Base class for failures of a slot operation.

    Route handlers raise these instead of building HTTP responses; the
    handler registered in app.py turns them into the JSON error payload.

    Args:
        message (str): Client-facing error message.
        with_success_flag (bool): Whether the payload carries "success": false.
    """
    status_code = 500

    def __init__(self, message: str, with_success_flag: bool = True):
        super().__init__(message)
        self.message = message
        self.with_success_flag = with_success_flag

    def to_payload(self) -> dict:
        if self.with_success_flag:
            return {"success": False, "error": self.message}
        return {"error": self.message}


class InvalidSlotId(SlotError):
    status_code = 400

    def __init__(self):
        super().__init__("Invalid slot ID")


class SlotNotFound(SlotError):
    status_code = 404

    def __init__(self):
        super().__init__("Slot not found")


class SlotStoreError(SlotError):
    # Verbindungs- und Query-Fehler landen beide hier
    status_code = 500
