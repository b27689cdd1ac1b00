from .driver import Driver
from .lift import drive
from .policy import DriverPolicy

__all__ = ("Driver", "DriverPolicy", "drive")
