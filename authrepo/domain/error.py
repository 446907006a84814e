"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Domain validation error."""

    pass


class DuplicateUserError(DomainError):
    """Raised when a user name or email is already taken by another record."""

    def __init__(self, message: str, value: str):
        self.value = value
        super().__init__(message)


class DuplicateUserNameError(DuplicateUserError):
    """Raised when the user name belongs to another user."""

    def __init__(self, user_name: str):
        self.user_name = user_name
        super().__init__(f"User '{user_name}' already exists", user_name)


class DuplicateEmailError(DuplicateUserError):
    """Raised when the email belongs to another user."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email '{email}' already exists", email)


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class DuplicateKeyError(DomainError):
    """Raised by a document store when a write violates a unique index."""

    def __init__(self, collection: str, fields: tuple[str, ...]):
        self.collection = collection
        self.fields = fields
        super().__init__(
            f"Duplicate value for unique index {', '.join(fields) or '?'} "
            f"in collection {collection}"
        )
