# app/models/enums.py
import enum


class AppRole(enum.Enum):
    admin = "admin"
    user = "user"
    store_owner = "store_owner"
