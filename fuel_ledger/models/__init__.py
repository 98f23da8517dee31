# Automatically load all models so metadata knows them
from fuel_ledger.models.customer_model import Customer
from fuel_ledger.models.transaction_model import Transaction
from fuel_ledger.models.nozzle_model import Nozzle
from fuel_ledger.models.sales_reading_model import SalesReading
from fuel_ledger.models.expense_model import Expense
