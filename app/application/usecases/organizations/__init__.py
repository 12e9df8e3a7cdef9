from .company import CreateCompanyUseCase, GetCompanyUseCase, UpdateCompanyUseCase
from .contacts import (
    CreateContactUseCase,
    GetContactUseCase,
    ListContactsUseCase,
    SetContactActiveUseCase,
    UpdateContactUseCase,
)
from .partners import (
    CreatePartnerUseCase,
    DeletePartnerUseCase,
    GetPartnerUseCase,
    ListPartnersUseCase,
    SetPartnerActiveUseCase,
    UpdatePartnerUseCase,
)

__all__ = [
    "ListPartnersUseCase",
    "GetPartnerUseCase",
    "CreatePartnerUseCase",
    "UpdatePartnerUseCase",
    "SetPartnerActiveUseCase",
    "DeletePartnerUseCase",
    "GetCompanyUseCase",
    "CreateCompanyUseCase",
    "UpdateCompanyUseCase",
    "ListContactsUseCase",
    "GetContactUseCase",
    "CreateContactUseCase",
    "UpdateContactUseCase",
    "SetContactActiveUseCase",
]
