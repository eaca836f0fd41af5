from app.customers.models.customer import CustomerModel

__all__ = ["CustomerModel"]
