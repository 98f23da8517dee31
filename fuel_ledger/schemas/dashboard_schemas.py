# fuel_ledger/schemas/dashboard_schemas.py

from typing import Dict, List

from pydantic import BaseModel


class DailySalesPoint(BaseModel):
    date: str
    petrol: float = 0.0
    diesel: float = 0.0
    others: float = 0.0
    total: float = 0.0


class DailyExpensePoint(BaseModel):
    date: str
    amount: float


class DashboardSales(BaseModel):
    total_sales: float
    totals_by_fuel: Dict[str, float]
    daily_series: List[DailySalesPoint]
    daily_average_by_fuel: Dict[str, float]


class DashboardExpenses(BaseModel):
    total: float
    daily_series: List[DailyExpensePoint]


class DashboardCredits(BaseModel):
    month_credit: float
    month_payment: float
    month_net: float
    total_due: float


class DashboardOut(BaseModel):
    month: str
    sales: DashboardSales
    expenses: DashboardExpenses
    credits: DashboardCredits
