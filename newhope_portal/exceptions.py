class PortalError(Exception):
    """Validation failure handed back to the caller for re-display."""

    default_message = "Request could not be processed."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingField(PortalError):
    default_message = "Required fields are missing."


class DuplicateEmail(PortalError):
    default_message = "An account with this email already exists."


class InvalidCredentials(PortalError):
    default_message = "Invalid credentials."
