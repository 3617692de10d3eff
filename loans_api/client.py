"""Loans API client: lending workflow operations on top of the request dispatcher"""

from typing import Any, Dict, List, Optional, Union

import httpx

from loans_api.config import Settings, settings as default_settings
from loans_api.domain.models import CANT_FETCH_LOAN_REQUEST_TERMS, UNEXPECTED_RESPONSE, Result, SessionState
from loans_api.infrastructure.clients.dispatcher import RequestDispatcher

# Marks constructor arguments the caller did not pass, so an explicit None is kept
_UNSET: Any = object()


class LoansApiClient:
    """
    Client for the remote loans API.

    Keeps the current session and loan request in an immutable SessionState
    that is swapped after authentication and after each loan request
    creation/update. Business failures come back as unsuccessful Results;
    a rejected session token raises InvalidAccessTokenError and transport
    failures raise UnexpectedResponseError.
    """

    def __init__(
        self,
        base_url: str | None = _UNSET,
        login: str | None = _UNSET,
        password: str | None = _UNSET,
        session_token: str | None = None,
        application_source: str | None = _UNSET,
        state: SessionState | None = None,
        timeout: float | None = None,
        http_client: httpx.Client | None = None,
    ):
        self.base_url = default_settings.base_url if base_url is _UNSET or base_url is None else base_url
        self.login = default_settings.login if login is _UNSET else login
        self.password = default_settings.password if password is _UNSET else password
        self.application_source = (
            default_settings.application_source if application_source is _UNSET else application_source
        )
        self.state = state or SessionState(session_token=session_token)
        self._dispatcher = RequestDispatcher(self.base_url, timeout=timeout, http_client=http_client)

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **overrides: Any) -> "LoansApiClient":
        """Build a client from environment configuration, explicit keyword arguments win"""
        settings = settings or default_settings
        options: Dict[str, Any] = {
            "base_url": settings.base_url,
            "login": settings.login,
            "password": settings.password,
            "session_token": settings.session_token,
            "application_source": settings.application_source,
            "timeout": settings.http_timeout_seconds,
        }
        options.update(overrides)
        return cls(**options)

    @property
    def session_token(self) -> Optional[str]:
        return self.state.session_token

    @property
    def loan_request_token(self) -> Optional[str]:
        return self.state.loan_request_token

    def close(self) -> None:
        self._dispatcher.close()

    def __enter__(self) -> "LoansApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # Sessions

    def create_session(self) -> Result:
        """Log in with the configured credentials and keep the issued session token"""
        result = self._request(
            "post", "sessions", params={"user": {"login": self.login, "password": self.password}}
        )
        if result.success:
            self.state = self.state.with_session_token(_dig(result.payload, "user", "authentication_token"))
        return result

    # Loan requests

    def create_loan_request(self, **options: Any) -> Result:
        """
        Create a loan request and quote its terms.

        On success the payload is {"token", "insurance_available", "terms"}.
        The terms come from a second call; if either call fails its failure
        is returned as is.
        """
        result = self._request("post", "loan_requests", params={"loan_request": options})
        if not result.success:
            return result

        token = _dig(result.payload, "loan_request", "token")
        if not token:
            return Result.failure(UNEXPECTED_RESPONSE)

        self.state = self.state.with_loan_request_token(token)
        terms = self.get_loan_request_terms(token)
        if not terms.success:
            return terms

        return Result(
            success=True,
            payload={
                "token": token,
                "insurance_available": _dig(result.payload, "loan_request", "insurance_available"),
                "terms": _dig(terms.payload, "loan_request"),
            },
        )

    def update_loan_request(self, token: str, options: Dict[str, Any]) -> Result:
        """Update a loan request and re-quote its terms, payload is {"terms"}"""
        result = self._request("put", f"loan_requests/{token}", params={"loan_request": options})
        if not result.success:
            return result

        self.state = self.state.with_loan_request_token(token)
        terms = self.get_loan_request_terms(token)
        if not terms.success:
            return terms

        return Result(success=True, payload={"terms": _dig(terms.payload, "loan_request")})

    def get_loan_request_terms(self, token: str | None = None) -> Result:
        """Fetch quoted terms, defaulting to the current loan request"""
        token = token or self.loan_request_token
        if not token:
            return Result.failure(CANT_FETCH_LOAN_REQUEST_TERMS)

        result = self._request("get", f"loan_requests/{token}")
        if result.success:
            return result
        return Result.failure(CANT_FETCH_LOAN_REQUEST_TERMS)

    def get_loan_request_info(self, token: str, amount: Union[int, float, str]) -> Union[Dict[str, Any], List[Any]]:
        result = self._request("get", f"loan_requests/{token}?amount={amount}")
        return _dig(result.payload, "loan_request") if result.success else []

    def get_loan_request_attributes(self, token: str) -> Union[Dict[str, Any], List[Any]]:
        result = self._request("get", f"loan_requests/{token}")
        return _dig(result.payload, "loan_request_attributes") if result.success else []

    def document(self, token: str, document_type: str, format: str = "html") -> Result:
        """Raw loan request document (offer, agreement...), the client must already exist"""
        return self._request("get", f"loan_requests/{token}/documents/{document_type}.{format}")

    def send_loan_confirmation_message(self, token: str) -> Result:
        return self._request("post", f"loan_requests/{token}/client/confirmation")

    def complete_loan_request(self, token: str, code: str) -> Result:
        return self._request("post", f"loan_requests/{token}/confirmation", params={"code": code})

    # Loans

    def create_loan(self, token: str, term_id: int) -> Result:
        return self._request(
            "post",
            f"loan_requests/{token}/loan",
            params={"term_id": term_id},
            headers=self._source_headers(),
        )

    def finalize_loan(
        self,
        token: str,
        code: str | None,
        sms_info: str = "0",
        skip_confirmation: bool = False,
    ) -> Result:
        loan_params: Dict[str, Any] = {
            "agree_processing": "1",
            "confirmation_code": code,
            "agree_sms_info": sms_info,
        }
        if skip_confirmation:
            loan_params["skip_confirmation"] = True
            del loan_params["confirmation_code"]

        return self._request("post", f"loan_requests/{token}/loan/finalization", params={"loan": loan_params})

    def confirm_loan(self, token: str, bill: Any) -> Result:
        return self._request("put", f"loan_requests/{token}/loan/bill", params={"loan": {"bill": bill}})

    def create_virtual_card(self, token: str, term_id: int) -> Result:
        return self._request(
            "post",
            f"loan_requests/{token}/virtual_card",
            params={"term_id": term_id},
            headers=self._source_headers(),
        )

    def create_card_loan(self, token: str, term_id: int) -> Result:
        return self._request(
            "post",
            f"loan_requests/{token}/card_loan",
            params={"term_id": term_id},
            headers=self._source_headers(),
        )

    # Orders and returns

    def orders(self, store_id: int, filters: Dict[str, Any] | None = None) -> Result:
        return self._request("get", "orders", params={"store_id": store_id, "filters": filters or {}})

    def send_return_confirmation_code(self, order_id: int) -> Result:
        return self._request("post", f"orders/{order_id}/send_return_confirmation_code")

    def create_return(self, order_id: int, code: str, amount: Union[int, float], store_id: int) -> Result:
        params = {
            "return": {
                "order_id": order_id,
                "confirmation_code": code,
                "amount": amount,
                "store_id": store_id,
            }
        }
        return self._request("post", "returns", params=params)

    def confirm_return(self, return_id: int) -> Result:
        return self._request("post", f"returns/{return_id}/confirm")

    def cancel_return(self, return_id: int) -> Result:
        return self._request("post", f"returns/{return_id}/cancel")

    # Client registration

    def start_self_registration(self, token: str, mobile_phone: str, skip_message: bool = False) -> Result:
        return self._request(
            "post",
            f"loan_requests/{token}/client/self_registration",
            params={"mobile_phone": mobile_phone, "skip_message": skip_message},
        )

    def check_client_code(self, token: str, code: str) -> Result:
        return self._request("post", f"loan_requests/{token}/client/check_code", params={"code": code})

    def create_client(
        self,
        token: str,
        client_params: Dict[str, Any],
        provider_data: Dict[str, Any] | None = None,
    ) -> Result:
        return self._request(
            "post",
            f"loan_requests/{token}/client",
            params={"client": client_params, "provider_data": provider_data or {}},
        )

    def update_client(self, client_id: int, client_params: Dict[str, Any]) -> Result:
        return self._request("patch", f"clients/{client_id}", params={"client": client_params})

    def get_client(self, guid: str) -> Result:
        return self._request("get", f"clients/{guid}")

    # Client services

    def send_billing_shift_confirmation_code(self, client_id: int) -> Result:
        return self._request("post", f"clients/{client_id}/billing_shift")

    def billing_shift_info(self, client_id: int) -> Result:
        return self._request("get", f"clients/{client_id}/billing_shift/info")

    def confirm_billing_shift(self, client_id: int, code: str, billing_chain: Any) -> Result:
        return self._request(
            "post",
            f"clients/{client_id}/billing_shift/confirmation",
            params={"code": code, "billing_chain": billing_chain},
        )

    def increase_client_limit(self, client_id: int, amount: Union[int, float]) -> Result:
        return self._request("patch", f"clients/{client_id}/limit", params={"amount": amount})

    def client_loan_documents(self, client_id: int, loan_application_id: int) -> Result:
        return self._request("get", f"clients/{client_id}/loans/{loan_application_id}")

    def get_client_additional_services(self, client_id: int) -> Result:
        return self._request("get", f"clients/{client_id}/additional_services")

    def update_client_additional_services(self, client_id: int, additional_services: Dict[str, Any]) -> Result:
        return self._request("patch", f"clients/{client_id}/additional_services", params=additional_services)

    def _source_headers(self) -> Dict[str, Optional[str]]:
        return {"Application-Source": self.application_source}

    def _request(
        self,
        method: str,
        endpoint: str,
        params: Dict[str, Any] | None = None,
        headers: Dict[str, Optional[str]] | None = None,
    ) -> Result:
        return self._dispatcher.request(
            method,
            endpoint,
            session_token=self.session_token,
            params=params,
            headers=headers,
        )


def _dig(payload: Any, *keys: str) -> Any:
    """Nested lookup that yields None instead of failing on missing keys"""
    for key in keys:
        if not isinstance(payload, dict):
            return None
        payload = payload.get(key)
    return payload
