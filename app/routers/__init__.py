"""Router package exports."""
from . import analytics, auth, creators, dashboard, goals, monthly_financials, payments, sales, shifts, users

__all__ = [
	"analytics",
	"auth",
	"creators",
	"dashboard",
	"goals",
	"monthly_financials",
	"payments",
	"sales",
	"shifts",
	"users",
]
