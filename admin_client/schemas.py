from typing import Any, List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

# --------------------------
# Response envelope
# --------------------------
class ApiEnvelope(BaseModel):
    """Conventional ``{success, data, message}`` wrapper; extra keys are kept."""
    model_config = ConfigDict(extra="allow")

    success: Optional[bool] = None
    data: Any = None
    message: Optional[str] = None

# --------------------------
# Modules & parsings
# --------------------------
class Parsing(BaseModel):
    id: int
    status: str
    provider_code: str
    parsing: str
    allowed_amounts: str

class Module(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    description: str = ""
    status: str
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    parsings: List[Parsing] = []

class ModuleIn(BaseModel):
    module_name: str
    response_group: str = ""
    username: str = ""
    password: str = ""
    api_key: str = ""
    method: Literal["GET", "POST"] = "GET"
    balance: float = 0
    recharge_url: str = ""
    balance_url: Optional[str] = None

# --------------------------
# SMS / messaging providers
# --------------------------
SmsApiType = Literal["sms", "whatsapp", "email"]

class SmsApiIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    provider_name: str = Field(alias="providerName")
    type: SmsApiType = "sms"
    method: str = "GET"
    base_url: str = Field(alias="baseUrl")
    params: str = ""
    is_active: bool = Field(default=True, alias="isActive")

class SmsApi(SmsApiIn):
    id: int
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

# --------------------------
# Users & balances
# --------------------------
class UserUpdate(BaseModel):
    owner_name: str = ""
    email_address: str = ""
    mobile_number: str = ""
    shop_name: str = ""
    address: str = ""
    group_code: str = ""
    callback_url: str = ""
    rch_min_bal: float = 0
    utility_min_bal: float = 0
    dmt_min_bal: float = 0

class AdminTopUp(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount: float = Field(gt=0)
    target_wallet: str = Field(alias="targetWallet")


def modules_from_envelope(payload: Any) -> List[Module]:
    """Validate the ``data`` list of a ``list_modules`` response into Module records."""
    envelope = ApiEnvelope.model_validate(payload)
    return [Module.model_validate(item) for item in envelope.data or []]
