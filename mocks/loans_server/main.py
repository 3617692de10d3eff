"""In-memory stand-in for the remote loans API, used by the integration tests"""

import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, FastAPI, Header, HTTPException
from fastapi.responses import JSONResponse, Response

AGENT_LOGIN = "some-agent"
AGENT_PASSWORD = "p@$$w0rd"
AUTH_TOKEN = "mock-session-token"
CONFIRMATION_CODE = "1111"

TERMS = [
    {
        "term_id": 117,
        "term": 6,
        "product_code": 6,
        "monthly_payment": 500.0,
        "total_of_payments": 3000.0,
        "total_overpayment": 0.0,
        "sum_with_discount": 3000.0,
        "sms_info": 79.0,
        "min_amount": 0.0,
        "max_amount": 0.0,
        "schedule": [{"amount": 500.0, "date": "16-04-2020"}],
    }
]

ORDERS = [
    {"id": 1, "store_id": 123, "status": "completed", "amount": 3000.0},
    {"id": 2, "store_id": 123, "status": "returned", "amount": 1500.0},
    {"id": 3, "store_id": 456, "status": "completed", "amount": 700.0},
]

LOAN_REQUESTS: Dict[str, Dict[str, Any]] = {}

router = APIRouter(prefix="/api/loans/v1")


def unprocessable(errors: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=422, content={"errors": errors})


def authorize(authorization: Optional[str]) -> None:
    if authorization != AUTH_TOKEN:
        raise HTTPException(status_code=401, detail="unauthorized")


def find_loan_request(token: str) -> Dict[str, Any]:
    if token not in LOAN_REQUESTS:
        raise HTTPException(status_code=404, detail="loan request not found")
    return LOAN_REQUESTS[token]


@router.post("/sessions")
def create_session(payload: Dict[str, Any] = Body(...)):
    user = payload.get("user") or {}
    if user.get("login") != AGENT_LOGIN or user.get("password") != AGENT_PASSWORD:
        return unprocessable({"manager": ["invalid login and/or password"]})
    return {"user": {"authentication_token": AUTH_TOKEN}}


@router.post("/loan_requests")
def create_loan_request(payload: Dict[str, Any] = Body(...), authorization: Optional[str] = Header(None)):
    authorize(authorization)
    options = payload.get("loan_request") or {}
    if not options.get("store_id"):
        return unprocessable({"store_id": ["can't be blank"]})

    token = uuid.uuid4().hex
    LOAN_REQUESTS[token] = {"options": options, "client": None, "loan": None}
    return {"loan_request": {"token": token, "insurance_available": True}}


@router.get("/loan_requests/{token}")
def get_loan_request(token: str, amount: Optional[float] = None, authorization: Optional[str] = Header(None)):
    authorize(authorization)
    loan_request = find_loan_request(token)
    if amount is not None:
        return {"loan_request": {"amount": amount, "terms": TERMS}}
    return {"loan_request": TERMS, "loan_request_attributes": loan_request["options"]}


@router.put("/loan_requests/{token}")
def update_loan_request(token: str, payload: Dict[str, Any] = Body(...), authorization: Optional[str] = Header(None)):
    authorize(authorization)
    find_loan_request(token)["options"].update(payload.get("loan_request") or {})
    return Response(status_code=204)


@router.post("/loan_requests/{token}/client")
def create_client(token: str, payload: Dict[str, Any] = Body(...), authorization: Optional[str] = Header(None)):
    authorize(authorization)
    find_loan_request(token)["client"] = payload.get("client")
    return Response(status_code=201)


@router.post("/loan_requests/{token}/confirmation")
def complete_loan_request(token: str, payload: Dict[str, Any] = Body(...), authorization: Optional[str] = Header(None)):
    authorize(authorization)
    client = find_loan_request(token)["client"]
    if client is None:
        return unprocessable({"client": ["has not been created yet"]})
    if payload.get("code") != CONFIRMATION_CODE:
        return unprocessable({"code": ["is invalid"]})
    return {"client": {**client, "credit_limit": "6000.0", "decision": "approved", "decision_code": 100}}


@router.get("/loan_requests/{token}/documents/{document_type}.{fmt}")
def document(token: str, document_type: str, fmt: str, authorization: Optional[str] = Header(None)):
    authorize(authorization)
    if find_loan_request(token)["client"] is None:
        return unprocessable({"client": ["has not been created yet"]})
    if fmt == "pdf":
        return Response(content=f"%PDF-1.6 {document_type}".encode(), media_type="application/pdf")
    return Response(content=f"<h1>{document_type}</h1>", media_type="text/html")


@router.post("/loan_requests/{token}/loan")
def create_loan(
    token: str,
    payload: Dict[str, Any] = Body(...),
    authorization: Optional[str] = Header(None),
    application_source: Optional[str] = Header(None),
):
    authorize(authorization)
    if payload.get("term_id") not in {term["term_id"] for term in TERMS}:
        return unprocessable({"term_id": ["is not available"]})
    find_loan_request(token)["loan"] = {"term_id": payload["term_id"], "source": application_source}
    return Response(status_code=201)


@router.post("/loan_requests/{token}/loan/finalization")
def finalize_loan(token: str, payload: Dict[str, Any] = Body(...), authorization: Optional[str] = Header(None)):
    authorize(authorization)
    loan = payload.get("loan") or {}
    if not loan.get("skip_confirmation") and loan.get("confirmation_code") != CONFIRMATION_CODE:
        return unprocessable({"confirmation_code": ["is invalid"]})
    if find_loan_request(token)["loan"] is None:
        return unprocessable({"base": ["loan has not been created"]})
    return {
        "offer_id": "871169296",
        "loan_application": {"barcodes": [{"image": "data:image/svg+xml;base64,abc", "text": "871169296"}]},
    }


@router.post("/returns")
def create_return(payload: Dict[str, Any] = Body(...), authorization: Optional[str] = Header(None)):
    authorize(authorization)
    return_params = payload.get("return") or {}
    if return_params.get("confirmation_code") != CONFIRMATION_CODE:
        return unprocessable({"confirmation_code": ["is invalid"]})
    return {"return": {"id": 42, "order_id": return_params.get("order_id"), "amount": return_params.get("amount")}}


@router.get("/orders")
def orders(payload: Dict[str, Any] = Body(...), authorization: Optional[str] = Header(None)):
    authorize(authorization)
    status = (payload.get("filters") or {}).get("status")
    found = [order for order in ORDERS if order["store_id"] == payload.get("store_id")]
    if status:
        found = [order for order in found if order["status"] == status]
    return {"orders": found}


app = FastAPI(title="Mock Loans API", version="1.0.0")
app.include_router(router)


@app.get("/health")
def health():
    return {"status": "ok"}
