from typing import Any


class MissingType:
    """
    Type for the MISSING sentinel, representing an omitted optional parameter.

    Partial updates use it to tell "leave this field alone" (MISSING) apart
    from "clear this field" (None).
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(MissingType, cls).__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo: Any):
        return self


MISSING = MissingType()
