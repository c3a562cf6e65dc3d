# Overview: Domain errors raised by models and mapped to HTTP statuses by controllers.


class DomainError(Exception):
    """Base class for business-rule failures the client is allowed to see."""


class DuplicateEmailError(DomainError):
    def __init__(self):
        super().__init__("User with this email already exists.")


class InvalidCredentialsError(DomainError):
    def __init__(self):
        super().__init__("Invalid credentials.")


class DuplicateCategoryError(DomainError):
    def __init__(self, name: str):
        super().__init__(f"Category '{name}' already exists.")
        self.name = name


class NotFoundError(DomainError):
    """Referenced row does not exist (e.g. product id in a cart request)."""

    def __init__(self, entity: str):
        super().__init__(f"{entity} not found")
        self.entity = entity
