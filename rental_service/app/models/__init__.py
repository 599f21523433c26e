# Import all models to ensure they are registered with SQLAlchemy
from .parties.owners import Owner
from .parties.tenants import Tenant
from .properties.properties import Property
from .properties.units import Unit
from .payments.collection_payments import CollectionPayment
from .payments.supply_payments import SupplyPayment
from .contracts.unit_contracts import UnitContract
from .contracts.property_contracts import PropertyContract
from .financials.expenses import Expense
from .system.settings import Setting
