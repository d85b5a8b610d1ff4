"""Finance API views (back office only)."""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet

from modules.core.dtos import parse_dto
from modules.core.exceptions import domain_error_response
from modules.core.permissions import IsStaff
from modules.core.validators import UUID_PATTERN
from modules.finance.dtos import (
    AccountDTO,
    BalanceSheetDTO,
    ExpenseDTO,
    PayExpenseDTO,
    ReconcileDTO,
    RejectExpenseDTO,
    ReportPeriodDTO,
    TransferDTO,
)
from modules.finance.exceptions import (
    ExpenseNotFound,
    FinanceAccountNotFound,
    InactiveAccount,
    InsufficientFunds,
    InvalidExpenseState,
    TransactionNotFound,
)
from modules.finance.factories import build_finance_service
from modules.finance.filters import AccountFilter, ExpenseFilter, TransactionFilter
from modules.finance.reports import FinanceReportService, ReportPeriod
from modules.finance.serializers import (
    FinanceAccountSerializer,
    FinanceExpenseSerializer,
    FinanceTransactionSerializer,
)

EXPENSE_ERRORS = (ExpenseNotFound, InvalidExpenseState)
PAY_ERRORS = (*EXPENSE_ERRORS, FinanceAccountNotFound, InactiveAccount)


class FinanceAccountViewSet(GenericViewSet):
    serializer_class = FinanceAccountSerializer
    permission_classes = [IsStaff]
    lookup_value_regex = UUID_PATTERN

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_finance_service()

    def get_queryset(self):
        return self._service.list_accounts()

    def list(self, request: Request) -> Response:
        queryset = AccountFilter(request.query_params, queryset=self.get_queryset()).qs
        return Response(FinanceAccountSerializer(queryset, many=True).data)

    def create(self, request: Request) -> Response:
        dto = parse_dto(AccountDTO, request.data)
        account = self._service.create_account(dto, user=request.user)
        return Response(FinanceAccountSerializer(account).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            account = self._service.get_account(pk)
        except FinanceAccountNotFound as exc:
            return domain_error_response(exc)
        return Response(FinanceAccountSerializer(account).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        serializer = FinanceAccountSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            account = self._service.update_account(pk, serializer.validated_data)
        except FinanceAccountNotFound as exc:
            return domain_error_response(exc)
        return Response(FinanceAccountSerializer(account).data)

    @action(detail=False, methods=["post"])
    def transfer(self, request: Request) -> Response:
        dto = parse_dto(TransferDTO, request.data)
        try:
            source, target = self._service.transfer(dto, user=request.user)
        except (FinanceAccountNotFound, InactiveAccount, InsufficientFunds) as exc:
            return domain_error_response(exc)
        return Response(
            {
                "message": f"Transferred AED {dto.amount:.2f} from {source.name} to {target.name}",
                "from": FinanceAccountSerializer(source).data,
                "to": FinanceAccountSerializer(target).data,
            }
        )

    @action(detail=True, methods=["post"])
    def reconcile(self, request: Request, pk: str | None = None) -> Response:
        dto = parse_dto(ReconcileDTO, request.data)
        try:
            account, difference = self._service.reconcile(pk, dto, user=request.user)
        except FinanceAccountNotFound as exc:
            return domain_error_response(exc)
        return Response(
            {"account": FinanceAccountSerializer(account).data, "adjustment": difference}
        )


class FinanceTransactionViewSet(GenericViewSet):
    serializer_class = FinanceTransactionSerializer
    permission_classes = [IsStaff]
    lookup_value_regex = UUID_PATTERN

    def get_queryset(self):
        return build_finance_service().list_transactions()

    def list(self, request: Request) -> Response:
        queryset = TransactionFilter(request.query_params, queryset=self.get_queryset()).qs
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(FinanceTransactionSerializer(page, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            entry = build_finance_service().get_transaction(pk)
        except TransactionNotFound as exc:
            return domain_error_response(exc)
        return Response(FinanceTransactionSerializer(entry).data)


class ExpenseViewSet(GenericViewSet):
    serializer_class = FinanceExpenseSerializer
    permission_classes = [IsStaff]
    lookup_value_regex = UUID_PATTERN

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_finance_service()

    def get_queryset(self):
        return self._service.list_expenses()

    def list(self, request: Request) -> Response:
        queryset = ExpenseFilter(request.query_params, queryset=self.get_queryset()).qs
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(FinanceExpenseSerializer(page, many=True).data)

    def create(self, request: Request) -> Response:
        dto = parse_dto(ExpenseDTO, request.data)
        try:
            expense = self._service.create_expense(dto, user=request.user)
        except FinanceAccountNotFound as exc:
            return domain_error_response(exc)
        return Response(FinanceExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            expense = self._service.get_expense(pk)
        except ExpenseNotFound as exc:
            return domain_error_response(exc)
        return Response(FinanceExpenseSerializer(expense).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        serializer = FinanceExpenseSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            expense = self._service.update_expense(pk, serializer.validated_data)
        except EXPENSE_ERRORS as exc:
            return domain_error_response(exc)
        return Response(FinanceExpenseSerializer(expense).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        try:
            self._service.delete_expense(pk)
        except EXPENSE_ERRORS as exc:
            return domain_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"])
    def categories(self, request: Request) -> Response:
        return Response(self._service.categories())

    @action(detail=True, methods=["post"])
    def approve(self, request: Request, pk: str | None = None) -> Response:
        try:
            expense = self._service.approve_expense(pk, user=request.user)
        except EXPENSE_ERRORS as exc:
            return domain_error_response(exc)
        return Response(FinanceExpenseSerializer(expense).data)

    @action(detail=True, methods=["post"])
    def reject(self, request: Request, pk: str | None = None) -> Response:
        dto = parse_dto(RejectExpenseDTO, request.data)
        try:
            expense = self._service.reject_expense(pk, dto.reason, user=request.user)
        except EXPENSE_ERRORS as exc:
            return domain_error_response(exc)
        return Response(FinanceExpenseSerializer(expense).data)

    @action(detail=True, methods=["post"])
    def pay(self, request: Request, pk: str | None = None) -> Response:
        dto = parse_dto(PayExpenseDTO, request.data)
        try:
            expense = self._service.pay_expense(pk, str(dto.account_id), user=request.user)
        except PAY_ERRORS as exc:
            return domain_error_response(exc)
        return Response(FinanceExpenseSerializer(expense).data)

    @action(detail=False, methods=["get"], url_path="pending-approvals")
    def pending_approvals(self, request: Request) -> Response:
        queryset = self._service.pending_approvals()
        return Response(FinanceExpenseSerializer(queryset, many=True).data)

    @action(detail=False, methods=["get"])
    def aging(self, request: Request) -> Response:
        return Response(FinanceReportService().expense_aging())

    @action(detail=False, methods=["post"], url_path="mark-overdue")
    def mark_overdue(self, request: Request) -> Response:
        return Response({"updated": self._service.mark_overdue()})


class ReportView(APIView):
    """Base for the period-based reports; subclasses name the report method."""

    permission_classes = [IsStaff]
    report: str = ""

    def get(self, request: Request) -> Response:
        dto = parse_dto(ReportPeriodDTO, request.query_params.dict())
        period = ReportPeriod.resolve(dto.period, dto.start_date, dto.end_date)
        return Response(getattr(FinanceReportService(), self.report)(period))


class SummaryView(ReportView):
    report = "summary"


class ProfitLossView(ReportView):
    report = "profit_loss"


class CashFlowView(ReportView):
    report = "cash_flow"


class VATReportView(ReportView):
    report = "vat"


class BalanceSheetView(APIView):
    permission_classes = [IsStaff]

    def get(self, request: Request) -> Response:
        dto = parse_dto(BalanceSheetDTO, request.query_params.dict())
        return Response(FinanceReportService().balance_sheet(dto.as_of_date))
