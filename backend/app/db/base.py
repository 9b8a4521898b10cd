from backend.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from backend.app.models.user import User  # noqa: F401
from backend.app.models.company_info import CompanyInfo  # noqa: F401
from backend.app.models.invoice import Invoice  # noqa: F401
from backend.app.models.service_item import ServiceItem  # noqa: F401
