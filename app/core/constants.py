"""Domain enumerations shared by the storage layer, schemas and computation core."""
from __future__ import annotations

ROLE_ADMIN = "ADMIN"
ROLE_MANAGER = "CHATTER_MANAGER"
ROLE_CHATTER = "CHATTER"
ROLE_ENUM = (ROLE_ADMIN, ROLE_MANAGER, ROLE_CHATTER)
PRIVILEGED_ROLES = frozenset({ROLE_ADMIN, ROLE_MANAGER})

SALE_STATUS_ONLINE = "ONLINE"
SALE_STATUS_OFFLINE = "OFFLINE"
SALE_STATUS_ENUM = (SALE_STATUS_ONLINE, SALE_STATUS_OFFLINE)

SALE_TYPE_BASE = "BASE"
SALE_TYPE_ENUM = ("CAM", "TIP", "PPV", "INITIAL", "CUSTOM", SALE_TYPE_BASE, "MASS_MESSAGE")

COMPENSATION_PERCENTAGE = "PERCENTAGE"
COMPENSATION_SALARY = "SALARY"
COMPENSATION_TYPE_ENUM = (COMPENSATION_PERCENTAGE, COMPENSATION_SALARY)

PAYMENT_METHOD_ENUM = ("CRYPTO", "WIRE_TRANSFER", "PAYPAL", "OTHER")

GOAL_SALES = "SALES"
GOAL_COMMISSION = "COMMISSION"
GOAL_REVENUE = "REVENUE"
GOAL_TYPE_ENUM = (GOAL_SALES, GOAL_COMMISSION, GOAL_REVENUE)

# start time -> end time; the night slot ends the following morning
SHIFT_SLOTS = {
    "09:00": "14:30",
    "14:30": "20:00",
    "20:00": "01:00",
    "01:00": "09:00",
}

DEFAULT_ONLYFANS_COMMISSION_PERCENT = 20
