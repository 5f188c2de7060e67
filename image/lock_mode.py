from enum import Enum, auto

class LockMode(Enum):
    """
    Access requested when locking the rows of a platform bitmap.
    """

    READ_ONLY = auto()
    """
    Rows are filled from the image. Nothing is written back on unlock.
    """

    WRITE_ONLY = auto()
    """
    Rows start zeroed and are written back into the image on unlock.
    """

    READ_WRITE = auto()
    """
    Rows are filled from the image and written back on unlock.
    """

    @property
    def reads(self) -> bool:
        return self is not LockMode.WRITE_ONLY

    @property
    def writes(self) -> bool:
        return self is not LockMode.READ_ONLY
