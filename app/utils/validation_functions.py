# app/utils/validation_functions.py
import re
from app.models.enums import AppRole

USER_NAME_MIN_LENGTH = 20
USER_NAME_MAX_LENGTH = 60
STORE_NAME_MAX_LENGTH = 100
ADDRESS_MAX_LENGTH = 400
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 16
RATING_MIN = 1
RATING_MAX = 5

SPECIAL_CHARACTERS = r"""[!@#$%^&*()_+\-=\[\]{};':"\\|,.<>/?]"""


def validate_email(email: str) -> bool:
    pattern = r'^[\w\.\+-]+@[\w-]+(\.[\w-]+)*\.[A-Za-z]{2,}$'
    return re.match(pattern, email) is not None


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_password_strength(password: str) -> bool:
    """
    Password rules:
    - Between 8 and 16 characters
    - At least one uppercase letter
    - At least one special character
    """
    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        return False
    if not re.search(r'[A-Z]', password):
        return False
    if not re.search(SPECIAL_CHARACTERS, password):
        return False
    return True


def validate_user_name(name: str) -> bool:
    return USER_NAME_MIN_LENGTH <= len(name) <= USER_NAME_MAX_LENGTH


def validate_store_name(name: str) -> bool:
    return 1 <= len(name) <= STORE_NAME_MAX_LENGTH


def validate_address(address: str, required: bool = False) -> bool:
    if required and not address:
        return False
    return len(address) <= ADDRESS_MAX_LENGTH


def validate_role(role: str) -> bool:
    """
    Checks if the provided role exists in AppRole enum.
    Returns True if valid, False otherwise.
    """
    return role in AppRole._value2member_map_
