"""
Errors
Exceptions raised by the service layer and translated by the API routers
"""


class NotAuthenticatedError(PermissionError):
    """No current user identity is available"""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class InvalidScheduledTimeError(ValueError):
    """Scheduled time is not a valid HH:MM time of day"""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid time format: {value!r} (expected HH:MM)")


class MedicationNotFoundError(LookupError):
    """Medication does not exist or belongs to another user"""

    def __init__(self, medication_id: int):
        self.medication_id = medication_id
        super().__init__(f"Medication {medication_id} not found")


class IdentityProviderError(RuntimeError):
    """The identity provider could not answer a lookup"""


class InvalidMedicationNameError(ValueError):
    """Medication name is empty once surrounding whitespace is removed"""

    def __init__(self, value):
        self.value = value
        super().__init__("Medication name must not be blank")
