import pytest

from emvqr.schemas import Payload, PrimitiveAccount, new_payload

# Scenario payload from the EMV QRCPS merchant-presented guidance ("ABC Hammers").
ABC_HAMMERS_RAW = "000201021640001234567890125204525153038405802US5911ABC Hammers6008New York63047222"

# Real-world dynamic Bharat QR (APRIL MOON RETAIL, Ahmedabad).
BHARAT_QR_RAW = (
    "000201010212021645851910410448940415545080003175565061661000100317556350822SBIN000415243930804448"
    "111531090003127398626590010A0000005240141SBIPMOPAD.02PL00000644432-21503961@SBIPAY"
    "27770010A0000005240123526020914454520875696090232https://www.hitachi-payments.com"
    "28180010A00000052401005204544153033565406250.005802IN5923APRIL MOON RETAIL PRIVA"
    "6009AHMEDABAD61063800036258031502PL00000644432052352602091445452087569609070821503961630451DD"
)


def make_base_payload() -> Payload:
    p = new_payload()
    p.merchant_accounts = [PrimitiveAccount(id="02", value="4000123456789012")]
    p.merchant_category_code = "5251"
    p.transaction_currency = "840"
    p.country_code = "US"
    p.merchant_name = "ABC Hammers"
    p.merchant_city = "New York"
    return p


def make_india_payload() -> Payload:
    p = new_payload()
    p.merchant_accounts = [PrimitiveAccount(id="02", value="4403847800202706")]
    p.merchant_category_code = "5499"
    p.transaction_currency = "356"
    p.country_code = "IN"
    p.merchant_name = "Sharma Chai Stall"
    p.merchant_city = "Mumbai"
    return p


@pytest.fixture
def base_payload() -> Payload:
    return make_base_payload()


@pytest.fixture
def india_payload() -> Payload:
    return make_india_payload()
