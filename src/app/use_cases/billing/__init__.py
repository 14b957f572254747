"""Billing domain use cases"""
from .apply_credit_delta import ApplyCreditDelta
from .get_balance import GetCreditBalance
from .list_transactions import ListCreditTransactions
from .check_quota import CheckQuota, evaluate_quota
from .record_usage import RecordUsage
from .generate_invoice import GenerateInvoice
from .reconcile_ledger import ReconcileLedger
from .get_invoice_pdf import GetInvoicePdf
from .dtos import (
    ApplyCreditDeltaCommandDTO,
    LedgerEntryDTO,
    BalanceResponseDTO,
    TransactionDTO,
    ListTransactionsResponseDTO,
    QuotaCheckCommandDTO,
    QuotaDecisionDTO,
    RecordUsageCommandDTO,
    RecordUsageResponseDTO,
    GenerateInvoiceCommandDTO,
    ReceiptDTO,
    LedgerDiscrepancyDTO,
    ReconciliationResultDTO,
)

__all__ = [
    "ApplyCreditDelta",
    "GetCreditBalance",
    "ListCreditTransactions",
    "CheckQuota",
    "evaluate_quota",
    "RecordUsage",
    "GenerateInvoice",
    "ReconcileLedger",
    "GetInvoicePdf",
    "ApplyCreditDeltaCommandDTO",
    "LedgerEntryDTO",
    "BalanceResponseDTO",
    "TransactionDTO",
    "ListTransactionsResponseDTO",
    "QuotaCheckCommandDTO",
    "QuotaDecisionDTO",
    "RecordUsageCommandDTO",
    "RecordUsageResponseDTO",
    "GenerateInvoiceCommandDTO",
    "ReceiptDTO",
    "LedgerDiscrepancyDTO",
    "ReconciliationResultDTO",
]
