# admin_client/services/admin_api.py
"""
Endpoint helpers for the dashboard screens.

Each method forwards to ``client.request`` and hands back whatever it
returns, so the same helpers serve ``ApiClient`` (plain result) and
``AsyncApiClient`` (awaitable result).
"""
from datetime import date
from typing import Any, Dict, Union

from admin_client.schemas import AdminTopUp, ModuleIn, SmsApi, SmsApiIn, UserUpdate
from admin_client.services.api_client import ApiClient, AsyncApiClient, HttpMethod

GET, POST, PUT, DELETE = HttpMethod.GET, HttpMethod.POST, HttpMethod.PUT, HttpMethod.DELETE

REPORTS = (
    "dashboard-stats",
    "weekly-comparison",
    "transaction-trends",
    "provider-performance",
    "user-activity",
)


def date_range(start: date, end: date) -> Dict[str, str]:
    if end < start:
        raise ValueError("end date is before start date")
    return {"startDate": start.isoformat(), "endDate": end.isoformat()}


class AdminApi:
    def __init__(self, client: Union[ApiClient, AsyncApiClient]):
        self.client = client

    # ---- users
    def list_users(self):
        return self.client.request("getAllUsers", GET)

    def get_user(self, user_id: Union[int, str]):
        return self.client.request(f"users/{user_id}", GET)

    def update_user(self, user_id: Union[int, str], update: UserUpdate):
        return self.client.request(f"users/{user_id}", PUT, update.model_dump())

    def set_user_status(self, user_id: Union[int, str], status: str):
        return self.client.request("updateUser", POST, {"id": user_id, "status": status})

    # ---- transfers / transactions
    def list_transfers(self):
        return self.client.request("getAllTransfers", GET)

    def recent_transfers(self):
        return self.client.request("transfers/recent", GET)

    def transfers_between(self, start: date, end: date):
        return self.client.request("transfers/date-range", GET, params=date_range(start, end))

    def transactions_between(self, start: date, end: date):
        return self.client.request("transactions/date-range", GET, params=date_range(start, end))

    def transfer_money(self, payload: Dict[str, Any]):
        return self.client.request("transactions/transfer", POST, payload)

    def statements_between(self, mobile_number: str, start: date, end: date):
        params = {"mobile_number": mobile_number, **date_range(start, end)}
        return self.client.request("statements/user/date-range", GET, params=params)

    def request_admin_topup(self, topup: AdminTopUp):
        """First step of an admin top-up; the backend answers with an OTP token."""
        return self.client.request("transfers/request-admin", POST, topup.model_dump(by_alias=True))

    def confirm_admin_topup(self, otp: Union[int, str], token: str):
        return self.client.request("transfers/admin-balance", POST, {"userOTP": int(otp), "token": token})

    # ---- SMS APIs
    def list_sms_apis(self):
        return self.client.request("sms-api", GET)

    def create_sms_api(self, api: SmsApiIn):
        return self.client.request("sms-api", POST, api.model_dump(by_alias=True, mode="json"))

    def update_sms_api(self, api: SmsApi):
        return self.client.request(f"sms-api/{api.id}", PUT, api.model_dump(by_alias=True, mode="json"))

    def toggle_sms_api(self, api: SmsApi):
        return self.update_sms_api(api.model_copy(update={"is_active": not api.is_active}))

    # ---- modules
    def list_modules(self):
        return self.client.request("modules", GET)

    def create_module(self, module: ModuleIn):
        return self.client.request("modules", POST, module.model_dump())

    def update_module(self, module_id: Union[int, str], module: ModuleIn):
        return self.client.request(f"modules/{module_id}", PUT, module.model_dump())

    def delete_module(self, module_id: Union[int, str]):
        return self.client.request(f"modules/{module_id}", DELETE)

    # ---- providers
    def list_providers(self):
        return self.client.request("allProviders", GET)

    def delete_provider(self, provider_id: Union[int, str]):
        return self.client.request(f"providers/{provider_id}", DELETE, {"id": provider_id})

    # ---- reports
    def report(self, name: str, start: date, end: date):
        if name not in REPORTS:
            raise ValueError(f"Unknown report: {name!r}")
        return self.client.request(f"reports/{name}", GET, params=date_range(start, end))
