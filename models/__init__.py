from .Slot import Slot
