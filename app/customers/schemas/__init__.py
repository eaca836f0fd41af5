from app.customers.schemas.customer import (
    Customer,
    CustomerCreateResponse,
    CustomerDraft,
    CustomerUpdate,
    DeleteResponse,
    ImportResponse,
    Notice,
    SearchResponse,
)

__all__ = [
    "Customer",
    "CustomerCreateResponse",
    "CustomerDraft",
    "CustomerUpdate",
    "DeleteResponse",
    "ImportResponse",
    "Notice",
    "SearchResponse",
]
