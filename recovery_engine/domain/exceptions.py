"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidInputError(DomainException):
    """Case or partner data is malformed (negative amounts, empty partner list, bad status)"""

    pass


class NoPartnersAvailableError(DomainException):
    """Allocation requested but the partner directory is empty"""

    pass


class UnknownPartnerError(DomainException):
    """Partner identifier is not present in the partner directory"""

    def __init__(self, partner_id: str):
        super().__init__(f"Unknown partner: {partner_id}")
        self.partner_id = partner_id


class CaseNotFoundError(DomainException):
    """Requested case does not exist"""

    def __init__(self, case_id: str):
        super().__init__(f"Case not found: {case_id}")
        self.case_id = case_id


class CaseAlreadyExistsError(DomainException):
    """Ingestion attempted with a case id that is already stored"""

    def __init__(self, case_id: str):
        super().__init__(f"Case already exists: {case_id}")
        self.case_id = case_id


class ConcurrentUpdateError(DomainException):
    """Case changed underneath a write; the caller should re-read and retry"""

    def __init__(self, case_id: str):
        super().__init__(f"Case {case_id} was modified concurrently")
        self.case_id = case_id
