"""Serial communication layer."""

from megasquirt_logger.serial.connection import SerialConnection
from megasquirt_logger.serial.session import ConnectionState, SerialSession

__all__ = ["ConnectionState", "SerialConnection", "SerialSession"]
