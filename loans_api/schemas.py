"""Pydantic schemas for the loans API responses with a fixed layout"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class ApiSchema(BaseModel):
    """Base schema: unknown fields sent by the API are kept, not rejected"""

    model_config = ConfigDict(extra="allow")


class ScheduleItem(ApiSchema):
    """Single payment in a quoted schedule"""

    amount: float
    date: str


class Term(ApiSchema):
    """Quoted repayment option of a loan request"""

    term_id: int
    term: int
    monthly_payment: float
    total_of_payments: float
    total_overpayment: Optional[float] = None
    sum_with_discount: Optional[float] = None
    sms_info: Optional[float] = None
    product_code: Optional[int] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    schedule: List[ScheduleItem] = []


class LoanRequestQuote(ApiSchema):
    """Payload of LoansApiClient.create_loan_request"""

    token: str
    insurance_available: Optional[bool] = None
    terms: List[Term]


class ScoredClient(ApiSchema):
    """Client returned after loan request confirmation"""

    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    credit_limit: Optional[str] = None
    decision: str
    decision_code: Optional[int] = None
    decision_message: Optional[str] = None


class LoanRequestCompletion(ApiSchema):
    """Response for POST loan_requests/:token/confirmation"""

    client: ScoredClient


class Barcode(ApiSchema):
    image: str
    text: str


class LoanApplication(ApiSchema):
    barcodes: List[Barcode] = []


class LoanFinalization(ApiSchema):
    """Response for POST loan_requests/:token/loan/finalization"""

    offer_id: str
    loan_application: LoanApplication
