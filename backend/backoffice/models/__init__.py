from .sequences import Counter
from .directory import Vendor, Customer
from .gate import GateInRecord, GateInItem, GateInPayment, GateOutRecord
from .invoices import Invoice, InvoiceLineItem, InvoicePayment
from .hrm import Department, Employee, SalaryRecord, Advance, AdvanceRepayment, AttendanceRecord
from .expenses import MonthlyExpense, MonthlyExpenseEntry, YearlyExpense, YearlyExpenseEntry
from .catalog import RawProduct, Product

__all__ = [
    'Counter',
    'Vendor', 'Customer',
    'GateInRecord', 'GateInItem', 'GateInPayment', 'GateOutRecord',
    'Invoice', 'InvoiceLineItem', 'InvoicePayment',
    'Department', 'Employee', 'SalaryRecord', 'Advance', 'AdvanceRepayment', 'AttendanceRecord',
    'MonthlyExpense', 'MonthlyExpenseEntry', 'YearlyExpense', 'YearlyExpenseEntry',
    'RawProduct', 'Product',
]
