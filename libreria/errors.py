from __future__ import annotations
from typing import Optional


class LibraryError(Exception):
    """Base class for reservation-core failures. Messages are user-facing."""

    default_message = "Error en la operación"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class UserNotFound(LibraryError):
    default_message = "El usuario no existe"


class BookNotFound(LibraryError):
    default_message = "El libro no existe"


class OutOfStock(LibraryError):
    default_message = "El libro está agotado"


class InvalidDuration(LibraryError):
    default_message = "Los días de alquiler deben ser un número entero positivo"


class InvalidState(LibraryError):
    default_message = "La reserva no está activa"


class ReservationNotFound(LibraryError):
    default_message = "Reserva no encontrada"
