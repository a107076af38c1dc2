# ============================================================
# errors.py — Erreurs métier du service Booking
# ------------------------------------------------------------
# Seules les trois premières empêchent l'enregistrement d'une
# réservation. NotificationError est toujours journalisée puis
# ignorée.
# ============================================================


class BookingError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    """Entrée manquante, mal formée ou contradictoire."""
    status_code = 400


class NotFoundError(BookingError):
    status_code = 404


class ConflictError(BookingError):
    """Le créneau a été pris entre l'affichage et l'envoi du formulaire."""
    status_code = 409


class NotificationError(Exception):
    def __init__(self, channel: str, message: str):
        super().__init__(f"{channel}: {message}")
        self.channel = channel
        self.message = message
